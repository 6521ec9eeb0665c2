"""
tierboard/schemas/player.py
Request models for player writes from the admin panel.

Gamemode and tier fields accept any casing and the mass-submission aliases;
they are normalized to the canonical enum values.
"""
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from tierboard.constants import Device, GameMode, Region, TierLevel, parse_gamemode, parse_tier


def _gamemode(value) -> GameMode:
    mode = parse_gamemode(getattr(value, "value", value))
    if mode is None:
        raise ValueError(f"Unknown gamemode '{value}'")
    return mode


def _tier(value) -> TierLevel:
    tier = parse_tier(getattr(value, "value", value))
    if tier is None:
        raise ValueError(f"Unknown tier '{value}'")
    return tier


class GamemodeResult(BaseModel):
    """One gamemode placement."""
    gamemode: GameMode
    tier: TierLevel
    score: Optional[int] = Field(None, ge=0)

    @field_validator("gamemode", mode="before")
    @classmethod
    def validate_gamemode(cls, v):
        return _gamemode(v)

    @field_validator("tier", mode="before")
    @classmethod
    def validate_tier(cls, v):
        return _tier(v)


class PlayerSubmitRequest(BaseModel):
    """Add a player (or update an existing one by IGN) with their results."""
    ign: str = Field(..., min_length=1, max_length=32)
    java_username: Optional[str] = Field(None, max_length=32)
    region: Region
    device: Device = Device.PC
    results: List[GamemodeResult] = Field(default_factory=list)

    @field_validator("ign")
    @classmethod
    def validate_ign(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("IGN cannot be blank")
        return v.strip()

    @field_validator("java_username")
    @classmethod
    def blank_java_username(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None


class TierUpdateRequest(BaseModel):
    tier: TierLevel
    score: Optional[int] = Field(None, ge=0)

    @field_validator("tier", mode="before")
    @classmethod
    def validate_tier(cls, v):
        return _tier(v)


class BanRequest(BaseModel):
    banned: bool = True


class MassSubmissionRequest(BaseModel):
    commands: str = Field(..., min_length=1, max_length=100_000)
