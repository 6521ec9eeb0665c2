"""
Analytics Service

Aggregates for the admin panel analytics and system tabs.
"""
from typing import Any, Dict

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tierboard.config import settings
from tierboard.constants import GAME_MODES, TIER_LEVELS, ApplicationStatus
from tierboard.database import check_db, count_rows
from tierboard.orm.admin import AdminApplication, AdminUser
from tierboard.orm.chat import KnowledgeBaseEntry
from tierboard.orm.player import GamemodeScore, Player


async def _grouped_counts(db: AsyncSession, column) -> Dict[str, int]:
    result = await db.execute(select(column, func.count()).group_by(column))
    return {str(key): int(count) for key, count in result.all()}


async def get_analytics(db: AsyncSession) -> Dict[str, Any]:
    total_players = await count_rows(db, Player)
    banned_result = await db.execute(
        select(func.count()).select_from(Player).where(Player.banned.is_(True))
    )

    tier_result = await db.execute(
        select(GamemodeScore.gamemode, GamemodeScore.internal_tier, func.count())
        .group_by(GamemodeScore.gamemode, GamemodeScore.internal_tier)
    )
    distribution = {
        mode.value: {tier.value: 0 for tier in TIER_LEVELS}
        for mode in GAME_MODES
    }
    unknown_tiers = 0
    for gamemode, tier, count in tier_result.all():
        if gamemode in distribution and tier in distribution[gamemode]:
            distribution[gamemode][tier] = int(count)
        else:
            unknown_tiers += int(count)

    top_result = await db.execute(
        select(Player)
        .where(Player.banned.is_(False))
        .order_by(desc(Player.global_points), Player.ign)
        .limit(1)
    )
    top = top_result.scalar_one_or_none()

    return {
        "total_players": total_players,
        "banned_players": int(banned_result.scalar() or 0),
        "players_by_region": await _grouped_counts(db, Player.region),
        "players_by_device": await _grouped_counts(db, Player.device),
        "tier_distribution": distribution,
        "unrecognized_tier_assignments": unknown_tiers,
        "top_player": top.to_dict() if top else None,
    }


async def get_system_status(db: AsyncSession) -> Dict[str, Any]:
    database_ok = await check_db(db)
    status: Dict[str, Any] = {
        "database": "ok" if database_ok else "unavailable",
        "config": settings.summary(),
    }
    if database_ok:
        status["counts"] = {
            "players": await count_rows(db, Player),
            "tier_assignments": await count_rows(db, GamemodeScore),
            "pending_applications": int((await db.execute(
                select(func.count()).select_from(AdminApplication)
                .where(AdminApplication.status == ApplicationStatus.pending.value)
            )).scalar() or 0),
            "staff": await count_rows(db, AdminUser),
            "knowledge_base_entries": await count_rows(db, KnowledgeBaseEntry),
        }
    return status
