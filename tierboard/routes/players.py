"""
tierboard/routes/players.py
Player search and profile popup
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tierboard.config import settings
from tierboard.database import get_db
from tierboard.services import leaderboard_service, player_service

router = APIRouter(prefix="/players", tags=["Players"])


@router.get("/search")
async def search_players(
    q: str = Query("", max_length=64),
    limit: Optional[int] = Query(None, ge=1, le=settings.LEADERBOARD_MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    players = await leaderboard_service.search_players(db, q, limit=limit)
    return {"success": True, "query": q, "players": players}


@router.get("/{player_id}")
async def get_player_profile(
    player_id: int,
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    """
    Player profile popup.

    Returns the player, a placement for every gamemode (Not Ranked where
    missing), combat rank and overall position.
    """
    profile = await player_service.get_player_profile(db, player_id)
    return {"success": True, "profile": profile}
