"""
Player Service

Profile reads and the admin write paths for players and tier placements.
Every write that touches a tier assignment recomputes the player's global
points inside the same transaction.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import delete, desc, asc, select
from sqlalchemy.ext.asyncio import AsyncSession

from tierboard.constants import GAME_MODES, Device, GameMode, Region, TierLevel, parse_gamemode, parse_tier
from tierboard.exceptions import InvalidGamemodeError, InvalidTierError, PlayerNotFoundError
from tierboard.orm.base import utcnow
from tierboard.orm.player import GamemodeScore, Player, ign_key_for
from tierboard.services import leaderboard_service
from tierboard.services.points_service import combat_rank, recompute_global_points

logger = logging.getLogger(__name__)


@dataclass
class PlayerResult:
    """One gamemode placement submitted from the admin panel."""
    gamemode: GameMode
    tier: TierLevel
    points: Optional[int] = None


def coerce_gamemode(value) -> GameMode:
    """Accept a GameMode or any spelling parse_gamemode understands."""
    if isinstance(value, GameMode):
        return value
    mode = parse_gamemode(value)
    if mode is None:
        raise InvalidGamemodeError(value)
    return mode


def coerce_tier(value) -> TierLevel:
    if isinstance(value, TierLevel):
        return value
    tier = parse_tier(value)
    if tier is None:
        raise InvalidTierError(value)
    return tier


async def get_player(db: AsyncSession, player_id: int) -> Player:
    player = await db.get(Player, player_id)
    if player is None:
        raise PlayerNotFoundError(player_id)
    return player


async def find_player_by_ign(db: AsyncSession, ign: str) -> Optional[Player]:
    result = await db.execute(
        select(Player).where(Player.ign_key == ign_key_for(ign))
    )
    return result.scalar_one_or_none()


async def get_player_profile(db: AsyncSession, player_id: int) -> Dict[str, Any]:
    """
    Data for the player profile popup.

    Every gamemode is listed; gamemodes without a placement show Not Ranked.
    """
    player = await get_player(db, player_id)
    assignments = (await leaderboard_service.get_tier_assignments_by_player(db, [player.id]))[player.id]
    by_mode = {a["gamemode"]: a for a in assignments}

    tiers = []
    for mode in GAME_MODES:
        assignment = by_mode.get(mode.value)
        tiers.append({
            "gamemode": mode.value,
            "tier": assignment["tier"] if assignment else TierLevel.NOT_RANKED.value,
            "score": assignment["score"] if assignment else 0,
        })

    points = player.global_points or 0
    profile = player.to_dict()
    profile.update({
        "overall_rank": None if player.banned else await leaderboard_service.get_overall_position(db, player),
        "combat_rank": {
            "title": combat_rank(points),
            "points": points,
        },
        "tiers": tiers,
        "tier_assignments": assignments,
    })
    return profile


async def _upsert_assignment(
    db: AsyncSession,
    player_id: int,
    gamemode: GameMode,
    tier: TierLevel,
    score: Optional[int] = None,
) -> GamemodeScore:
    result = await db.execute(
        select(GamemodeScore)
        .where(GamemodeScore.player_id == player_id)
        .where(GamemodeScore.gamemode == gamemode.value)
    )
    assignment = result.scalar_one_or_none()

    if assignment:
        assignment.internal_tier = tier.value
        assignment.display_tier = tier.value
        if score is not None:
            assignment.score = score
        assignment.updated_at = utcnow()
    else:
        assignment = GamemodeScore(
            player_id=player_id,
            gamemode=gamemode.value,
            internal_tier=tier.value,
            display_tier=tier.value,
            score=score or 0,
        )
        db.add(assignment)

    await db.flush()
    return assignment


async def submit_player_results(
    db: AsyncSession,
    ign: str,
    region: Region,
    device: Device,
    java_username: Optional[str] = None,
    results: Optional[List[PlayerResult]] = None,
) -> Tuple[Player, bool]:
    """
    Create or update a player by IGN and apply their gamemode results.

    Returns (player, created).
    """
    ign = ign.strip()
    results = results or []
    logger.info(f"Submitting results for {ign}: {len(results)} placement(s)")

    try:
        player = await find_player_by_ign(db, ign)
        created = player is None

        if created:
            player = Player(
                ign=ign,
                ign_key=ign_key_for(ign),
                region=region.value,
                device=device.value,
                java_username=java_username or ign,
                global_points=0,
                banned=False,
            )
            db.add(player)
        else:
            player.region = region.value
            player.device = device.value
            player.java_username = java_username or player.ign
            player.updated_at = utcnow()
        await db.flush()

        for result in results:
            logger.debug(f"Tier assignment {ign}: {result.gamemode.value} -> {result.tier.value}")
            await _upsert_assignment(db, player.id, result.gamemode, result.tier, result.points)

        await recompute_global_points(db, player.id, commit=False)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(f"Player {ign} {'added' if created else 'updated'} (id={player.id})")
    return player, created


async def update_player_tier(
    db: AsyncSession,
    player_id: int,
    gamemode: GameMode,
    tier: TierLevel,
    score: Optional[int] = None,
) -> Player:
    """Set one gamemode placement and recompute points."""
    gamemode = coerce_gamemode(gamemode)
    tier = coerce_tier(tier)
    player = await get_player(db, player_id)
    try:
        await _upsert_assignment(db, player.id, gamemode, tier, score)
        await recompute_global_points(db, player.id, commit=False)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(f"Player {player_id} tier for {gamemode.value} updated to {tier.value}")
    return player


async def remove_player_tier(db: AsyncSession, player_id: int, gamemode: GameMode) -> bool:
    """Drop one gamemode placement. Returns False if there was none."""
    gamemode = coerce_gamemode(gamemode)
    player = await get_player(db, player_id)
    try:
        result = await db.execute(
            delete(GamemodeScore)
            .where(GamemodeScore.player_id == player.id)
            .where(GamemodeScore.gamemode == gamemode.value)
        )
        await recompute_global_points(db, player.id, commit=False)
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    return (result.rowcount or 0) > 0


async def delete_player(db: AsyncSession, player_id: int) -> None:
    """Delete a player and all of their tier assignments."""
    player = await get_player(db, player_id)
    try:
        await db.execute(delete(GamemodeScore).where(GamemodeScore.player_id == player.id))
        await db.delete(player)
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    logger.info(f"Deleted player {player_id} and associated tier data")


async def set_player_banned(db: AsyncSession, player_id: int, banned: bool) -> Player:
    player = await get_player(db, player_id)
    player.banned = banned
    player.updated_at = utcnow()
    await db.commit()
    logger.info(f"Player {player_id} {'banned' if banned else 'unbanned'}")
    return player


async def list_admin_players(db: AsyncSession) -> List[Dict[str, Any]]:
    """Every player, banned included, ordered by points, for the admin panel."""
    result = await db.execute(
        select(Player).order_by(desc(Player.global_points), asc(Player.ign))
    )
    players = list(result.scalars().all())
    assignments = await leaderboard_service.get_tier_assignments_by_player(db, [p.id for p in players])

    rows = []
    for index, player in enumerate(players):
        row = player.to_dict()
        row["overall_rank"] = index + 1
        row["tier_assignments"] = assignments[player.id]
        rows.append(row)
    return rows
