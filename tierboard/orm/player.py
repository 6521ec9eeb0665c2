"""
tierboard/orm/player.py
Players and their per-gamemode tier placements
"""
from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from tierboard.constants import Device, Region
from tierboard.orm.base import TimestampedModel


def ign_key_for(ign: str) -> str:
    """Case-insensitive identity of an IGN."""
    return ign.strip().casefold()


class Player(TimestampedModel):
    """
    A ranked player.

    global_points is derived data: it always equals the sum of the point
    values of the player's tier assignments and is rewritten by
    points_service.recompute_global_points after every tier change.
    """
    __tablename__ = "players"

    ign = Column(String(64), nullable=False, unique=True, index=True)
    # casefolded ign; lookups and search go through this column
    ign_key = Column(String(64), nullable=False, unique=True, index=True)
    java_username = Column(String(64), nullable=True)
    region = Column(String(8), nullable=False, default=Region.NA.value)
    device = Column(String(16), nullable=False, default=Device.PC.value)
    avatar_url = Column(String(512), nullable=True)

    global_points = Column(Integer, nullable=False, default=0, index=True)
    banned = Column(Boolean, nullable=False, default=False, index=True)

    tier_assignments = relationship(
        "GamemodeScore",
        back_populates="player",
        cascade="all, delete-orphan",
        order_by="GamemodeScore.gamemode",
    )

    def to_dict(self):
        return {
            "id": self.id,
            "ign": self.ign,
            "java_username": self.java_username or self.ign,
            "region": self.region or Region.NA.value,
            "device": self.device or Device.PC.value,
            "avatar_url": self.avatar_url,
            "global_points": self.global_points or 0,
            "banned": bool(self.banned),
        }


class GamemodeScore(TimestampedModel):
    """
    One tier assignment: a player's placement in one gamemode.

    internal_tier is free text so that rows written by older tools with
    labels outside the closed set still load; they are worth 0 points.
    score is advisory display data only.
    """
    __tablename__ = "gamemode_scores"

    player_id = Column(Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False, index=True)
    gamemode = Column(String(32), nullable=False, index=True)
    internal_tier = Column(String(32), nullable=True)
    display_tier = Column(String(32), nullable=True)
    score = Column(Integer, nullable=False, default=0)

    player = relationship("Player", back_populates="tier_assignments")

    __table_args__ = (
        UniqueConstraint("player_id", "gamemode", name="uq_gamemode_scores_player_gamemode"),
        Index("ix_gamemode_scores_gamemode_score", "gamemode", "score"),
    )

    def to_dict(self):
        return {
            "gamemode": self.gamemode,
            "tier": self.internal_tier,
            "score": self.score or 0,
        }
