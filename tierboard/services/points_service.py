"""
Points Service

Maps tier labels to point values and keeps Player.global_points in sync
with a player's tier assignments.

Guarantees:
- global_points == sum(tier_points(t)) over the player's assignments
- Recomputation is idempotent: same assignments, same total
- Unknown tier labels are worth 0 and never raise
- If assignments cannot be fetched, stored points are left untouched
"""
import logging
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tierboard.constants import COMBAT_RANKS, TIER_POINTS
from tierboard.exceptions import PlayerNotFoundError, PointsRecomputeError
from tierboard.orm.base import utcnow
from tierboard.orm.player import GamemodeScore, Player

logger = logging.getLogger(__name__)


def is_known_tier(label: Optional[str]) -> bool:
    return label is not None and label in TIER_POINTS


def tier_points(label: Optional[str]) -> int:
    """Point value of a tier label; 0 for None or labels outside the table."""
    if label is None:
        return 0
    return TIER_POINTS.get(getattr(label, "value", label), 0)


def calculate_total_points(labels: Iterable[Optional[str]]) -> int:
    return sum(tier_points(label) for label in labels)


def combat_rank(points: int) -> str:
    """Title shown on the profile badge for a point total."""
    for threshold, title in COMBAT_RANKS:
        if (points or 0) >= threshold:
            return title
    return COMBAT_RANKS[-1][1]


async def recompute_global_points(db: AsyncSession, player_id: int, commit: bool = True) -> int:
    """
    Recompute and persist a player's global points from their tier assignments.

    Raises:
        PlayerNotFoundError: no such player
        PointsRecomputeError: assignments could not be fetched; nothing was written
    """
    try:
        player = await db.get(Player, player_id)
        if player is None:
            raise PlayerNotFoundError(player_id)

        result = await db.execute(
            select(GamemodeScore.gamemode, GamemodeScore.internal_tier, GamemodeScore.score)
            .where(GamemodeScore.player_id == player_id)
        )
        assignments = result.all()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching tier assignments for player {player_id}: {str(e)}")
        raise PointsRecomputeError(player_id, str(e)) from e

    total = 0
    valid = 0
    for gamemode, tier, score in assignments:
        if is_known_tier(tier):
            points = tier_points(tier)
            total += points
            valid += 1
            logger.debug(f"Player {player_id} {gamemode} {tier} = {points} points (score: {score})")
        else:
            logger.warning(f"Invalid tier '{tier}' for player {player_id} in {gamemode}; counted as 0")

    player.global_points = total
    player.updated_at = utcnow()

    if commit:
        await db.commit()
    else:
        await db.flush()

    logger.info(
        f"Player {player_id} global points = {total} from {valid} valid assignment(s)"
    )
    return total


async def recompute_all_points(db: AsyncSession) -> int:
    """Recompute every player's points. Returns the number of players updated."""
    result = await db.execute(select(Player.id).order_by(Player.id))
    player_ids = [row[0] for row in result.all()]

    for player_id in player_ids:
        await recompute_global_points(db, player_id, commit=False)

    await db.commit()
    logger.info(f"Recomputed global points for {len(player_ids)} player(s)")
    return len(player_ids)
