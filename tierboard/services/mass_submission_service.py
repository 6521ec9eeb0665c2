"""
Mass submission execution.

Commands run in order; one failing command is recorded and does not stop
the rest.
"""
import logging
from dataclasses import dataclass, field
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from tierboard.exceptions import TierboardError
from tierboard.services import player_service
from tierboard.services.submission_parser import RegisterCommand, UpdateCommand, parse_commands

logger = logging.getLogger(__name__)


@dataclass
class MassSubmissionReport:
    successful: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)

    def to_dict(self):
        return {"successful": self.successful, "failed": self.failed, "errors": self.errors}


async def _run_register(db: AsyncSession, command: RegisterCommand) -> None:
    await player_service.submit_player_results(
        db,
        ign=command.ign,
        region=command.region,
        device=command.device,
        java_username=command.java_username,
    )


async def _run_update(db: AsyncSession, command: UpdateCommand) -> None:
    player = await player_service.find_player_by_ign(db, command.ign)
    if player is None:
        raise TierboardError(f"player '{command.ign}' is not registered", code="PLAYER_NOT_FOUND")
    for update in command.updates:
        await player_service.update_player_tier(db, player.id, update.gamemode, update.tier)


async def process_mass_submission(db: AsyncSession, text: str) -> MassSubmissionReport:
    parsed = parse_commands(text)
    report = MassSubmissionReport(failed=len(parsed.errors), errors=list(parsed.errors))

    logger.info(
        f"Processing {len(parsed.commands)} command(s) for bulk submission "
        f"({len(parsed.errors)} rejected while parsing)"
    )

    for index, command in enumerate(parsed.commands, start=1):
        logger.debug(f"Processing command {index}/{len(parsed.commands)}: {command.ign}")
        try:
            if isinstance(command, RegisterCommand):
                await _run_register(db, command)
            else:
                await _run_update(db, command)
                for line in command.invalid_lines:
                    report.errors.append(f"{command.ign}: ignored invalid line '{line}'")
            report.successful += 1
        except TierboardError as e:
            report.failed += 1
            report.errors.append(f"{command.ign}: {e.message}")
        except Exception as e:
            logger.exception(f"Bulk submission command for {command.ign} failed")
            report.failed += 1
            report.errors.append(f"{command.ign}: {type(e).__name__}")

    logger.info(f"Bulk submission completed: {report.successful} successful, {report.failed} failed")
    return report
