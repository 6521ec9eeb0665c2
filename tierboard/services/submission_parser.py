"""
Mass submission command parser.

Staff paste a block of commands separated by '!':

    !register
    PlayerOne
    JavaUser1
    EU
    KBM!

    !update
    PlayerTwo
    crystal_LT5
    sword_HT2!

register: ign, java username (blank line means "same as ign"), region,
optional device code (KBM, CON, MOB; default KBM).
update: ign followed by one or more gamemode_TIER lines.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from tierboard.constants import DEVICE_CODES, Device, GameMode, Region, TierLevel, parse_gamemode

UPDATE_TIERS = {t.value: t for t in TierLevel if t != TierLevel.NOT_RANKED}
REGION_CODES = {r.value: r for r in Region}
DEFAULT_DEVICE_CODE = "KBM"


@dataclass
class RegisterCommand:
    ign: str
    region: Region
    device: Device
    java_username: Optional[str] = None


@dataclass
class TierUpdate:
    gamemode: GameMode
    tier: TierLevel


@dataclass
class UpdateCommand:
    ign: str
    updates: List[TierUpdate] = field(default_factory=list)
    invalid_lines: List[str] = field(default_factory=list)


Command = Union[RegisterCommand, UpdateCommand]


@dataclass
class ParseResult:
    commands: List[Command] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


def parse_gamemode_and_tier(line: str) -> Optional[TierUpdate]:
    """Parse 'crystal_LT5' style lines. Returns None when either half is invalid."""
    parts = line.strip().split("_")
    if len(parts) != 2:
        return None
    gamemode = parse_gamemode(parts[0])
    tier = UPDATE_TIERS.get(parts[1].strip().upper()) or UPDATE_TIERS.get(parts[1].strip().capitalize())
    if gamemode is None or tier is None:
        return None
    return TierUpdate(gamemode=gamemode, tier=tier)


def _split_command(block: str) -> List[str]:
    # Blank lines inside a block are kept: an empty java username line is meaningful
    lines = [line.strip() for line in block.strip().splitlines()]
    return lines


def _parse_register(lines: List[str]) -> Tuple[Optional[RegisterCommand], Optional[str]]:
    if len(lines) < 4 or not lines[1]:
        return None, "register needs ign, java username, region"

    ign = lines[1]
    java_username = lines[2] or ign
    region_code = lines[3].upper()
    device_code = lines[4].upper() if len(lines) > 4 and lines[4] else DEFAULT_DEVICE_CODE

    region = REGION_CODES.get(region_code)
    if region is None:
        return None, f"{ign}: invalid region '{lines[3]}'"
    device = DEVICE_CODES.get(device_code)
    if device is None:
        return None, f"{ign}: invalid device '{lines[4]}'"

    return RegisterCommand(
        ign=ign,
        region=region,
        device=device,
        java_username=None if java_username == ign else java_username,
    ), None


def _parse_update(lines: List[str]) -> Tuple[Optional[UpdateCommand], Optional[str]]:
    body = [line for line in lines if line]
    if len(body) < 3:
        return None, "update needs an ign and at least one gamemode_TIER line"

    command = UpdateCommand(ign=body[1])
    for line in body[2:]:
        update = parse_gamemode_and_tier(line)
        if update:
            command.updates.append(update)
        else:
            command.invalid_lines.append(line)

    if not command.updates:
        return None, f"{command.ign}: no valid gamemode_TIER lines"
    return command, None


def parse_commands(text: str) -> ParseResult:
    """Parse a mass submission block into commands plus per-command errors."""
    parsed = ParseResult()

    for block in (text or "").split("!"):
        if not block.strip():
            continue
        lines = _split_command(block)
        # Leading blank lines before the command word carry no meaning
        while lines and not lines[0]:
            lines.pop(0)
        kind = lines[0].lower()

        if kind == "register":
            command, error = _parse_register(lines)
        elif kind == "update":
            command, error = _parse_update(lines)
        else:
            command, error = None, f"unknown command '{lines[0]}'"

        if command:
            parsed.commands.append(command)
        if error:
            parsed.errors.append(error)

    return parsed
