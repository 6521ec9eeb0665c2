"""
tierboard/routes/leaderboard.py
Public leaderboard endpoints: overall ranking, gamemode views and the tier grid
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tierboard.config import settings
from tierboard.constants import GAME_MODES, TIER_LEVELS
from tierboard.database import get_db
from tierboard.services import leaderboard_service
from tierboard.services.leaderboard_service import RETIRED_COLUMN, TierGridVisibility
from tierboard.services.player_service import coerce_gamemode
from tierboard.services.points_service import tier_points

router = APIRouter(tags=["Leaderboard"])


@router.get("/leaderboard")
async def get_leaderboard(
    limit: Optional[int] = Query(None, ge=1, le=settings.LEADERBOARD_MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    """
    Overall leaderboard by global points.

    Query params:
    - limit: page size (defaults to LEADERBOARD_PAGE_SIZE)
    - offset: rows to skip; use `next_offset` from the previous page
    """
    page = await leaderboard_service.get_overall_leaderboard(db, limit=limit, offset=offset)
    return {"success": True, **page}


@router.get("/gamemodes")
async def list_gamemodes() -> Dict[str, Any]:
    return {"success": True, "gamemodes": [mode.value for mode in GAME_MODES]}


@router.get("/gamemodes/{gamemode}/leaderboard")
async def get_gamemode_leaderboard(
    gamemode: str,
    limit: Optional[int] = Query(None, ge=1, le=settings.LEADERBOARD_MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    mode = coerce_gamemode(gamemode)
    players = await leaderboard_service.get_gamemode_leaderboard(db, mode, limit=limit)
    return {"success": True, "gamemode": mode.value, "players": players}


@router.get("/gamemodes/{gamemode}/tiers")
async def get_tier_grid(
    gamemode: str,
    tier_1: Optional[int] = Query(None, ge=1),
    tier_2: Optional[int] = Query(None, ge=1),
    tier_3: Optional[int] = Query(None, ge=1),
    tier_4: Optional[int] = Query(None, ge=1),
    tier_5: Optional[int] = Query(None, ge=1),
    retired: Optional[int] = Query(None, ge=1),
    show_retired: bool = Query(True),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    """
    Tier grid for one gamemode.

    tier_N / retired are how many players the client currently shows in that
    column; each "load more" click adds TIER_GRID_PAGE_SIZE.
    """
    mode = coerce_gamemode(gamemode)

    requested = {1: tier_1, 2: tier_2, 3: tier_3, 4: tier_4, 5: tier_5, RETIRED_COLUMN: retired}
    visibility = TierGridVisibility(
        counts={column: count for column, count in requested.items() if count is not None},
        page_size=settings.TIER_GRID_PAGE_SIZE,
    )

    tier_data = await leaderboard_service.get_players_by_tier(db, mode)
    grid = leaderboard_service.build_tier_grid(tier_data, visibility, include_retired=show_retired)
    return {"success": True, "gamemode": mode.value, **grid}


@router.get("/tiers/points")
async def get_tier_points() -> Dict[str, Any]:
    """Point value of every tier label"""
    return {
        "success": True,
        "points": {tier.value: tier_points(tier) for tier in TIER_LEVELS},
    }
