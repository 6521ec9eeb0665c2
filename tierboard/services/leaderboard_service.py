"""
Leaderboard Service

Read-side views over players and tier assignments:
- overall leaderboard ordered by global points
- per-gamemode leaderboard ordered by gamemode score
- tier buckets per gamemode and the tier grid built from them
- player search

Tier assignments for a page of players are fetched in one batched query.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import asc, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tierboard.config import settings
from tierboard.constants import GRID_TIER_LEVELS, GameMode, TierLevel
from tierboard.orm.player import GamemodeScore, Player, ign_key_for

logger = logging.getLogger(__name__)

GRID_COLUMNS = [1, 2, 3, 4, 5]
RETIRED_COLUMN = "retired"


async def get_tier_assignments_by_player(
    db: AsyncSession,
    player_ids: Iterable[int],
) -> Dict[int, List[Dict[str, Any]]]:
    """Group tier assignments for many players in a single query."""
    ids = list(player_ids)
    grouped: Dict[int, List[Dict[str, Any]]] = {pid: [] for pid in ids}
    if not ids:
        return grouped

    result = await db.execute(
        select(GamemodeScore)
        .where(GamemodeScore.player_id.in_(ids))
        .order_by(GamemodeScore.player_id, GamemodeScore.gamemode)
    )
    for assignment in result.scalars().all():
        grouped[assignment.player_id].append(assignment.to_dict())
    return grouped


def _player_row(player: Player, rank: Optional[int], assignments: List[Dict[str, Any]]) -> Dict[str, Any]:
    row = player.to_dict()
    row["overall_rank"] = rank
    row["tier_assignments"] = assignments
    return row


async def get_overall_leaderboard(
    db: AsyncSession,
    limit: Optional[int] = None,
    offset: int = 0,
) -> Dict[str, Any]:
    """
    Non-banned players by global points.

    Ordering: global_points DESC, ign ASC. Rank is the 1-indexed position.
    One extra row is fetched to answer has_more without a count query.
    """
    limit = limit or settings.LEADERBOARD_PAGE_SIZE

    result = await db.execute(
        select(Player)
        .where(Player.banned.is_(False))
        .order_by(desc(Player.global_points), asc(Player.ign))
        .offset(offset)
        .limit(limit + 1)
    )
    players = list(result.scalars().all())
    has_more = len(players) > limit
    players = players[:limit]

    assignments = await get_tier_assignments_by_player(db, [p.id for p in players])
    rows = [
        _player_row(player, offset + index + 1, assignments[player.id])
        for index, player in enumerate(players)
    ]

    logger.info(f"Leaderboard page offset={offset} limit={limit}: {len(rows)} players")
    return {
        "players": rows,
        "offset": offset,
        "limit": limit,
        "has_more": has_more,
        "next_offset": offset + len(rows) if has_more else None,
    }


async def _gamemode_rows(db: AsyncSession, gamemode: GameMode, limit: Optional[int] = None):
    query = (
        select(GamemodeScore, Player)
        .join(Player, GamemodeScore.player_id == Player.id)
        .where(GamemodeScore.gamemode == gamemode.value)
        .where(Player.banned.is_(False))
        .order_by(desc(GamemodeScore.score), asc(Player.ign))
    )
    if limit is not None:
        query = query.limit(limit)
    result = await db.execute(query)
    return result.all()


async def get_gamemode_leaderboard(
    db: AsyncSession,
    gamemode: GameMode,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """Players placed in one gamemode, ordered by gamemode score."""
    limit = limit or settings.LEADERBOARD_PAGE_SIZE
    rows = await _gamemode_rows(db, gamemode, limit)
    assignments = await get_tier_assignments_by_player(db, [player.id for _, player in rows])

    leaderboard = []
    for index, (score_row, player) in enumerate(rows):
        row = _player_row(player, index + 1, assignments[player.id])
        row["tier"] = score_row.internal_tier
        row["gamemode_points"] = {gamemode.value: score_row.score or 0}
        leaderboard.append(row)
    return leaderboard


async def get_players_by_tier(db: AsyncSession, gamemode: GameMode) -> Dict[str, List[Dict[str, Any]]]:
    """
    Bucket a gamemode's players by tier label (HT1..LT5, Retired).

    Not Ranked and labels outside the closed set are left out of every bucket.
    """
    buckets: Dict[str, List[Dict[str, Any]]] = {tier.value: [] for tier in GRID_TIER_LEVELS}

    rows = await _gamemode_rows(db, gamemode)
    assignments = await get_tier_assignments_by_player(db, [player.id for _, player in rows])

    for score_row, player in rows:
        tier = score_row.internal_tier
        if tier not in buckets:
            continue
        row = _player_row(player, None, assignments[player.id])
        row["tier"] = tier
        row["points"] = score_row.score or 0
        row["gamemode_points"] = {gamemode.value: score_row.score or 0}
        buckets[tier].append(row)

    return buckets


@dataclass
class TierGridVisibility:
    """How many players each tier-grid column currently shows."""
    counts: Dict[Any, int] = field(default_factory=dict)
    page_size: int = 10

    def count(self, column) -> int:
        return self.counts.get(column, self.page_size)

    def load_more(self, column) -> "TierGridVisibility":
        counts = dict(self.counts)
        counts[column] = self.count(column) + self.page_size
        return TierGridVisibility(counts=counts, page_size=self.page_size)


def build_tier_grid(
    tier_data: Dict[str, List[Dict[str, Any]]],
    visibility: Optional[TierGridVisibility] = None,
    include_retired: bool = True,
) -> Dict[str, Any]:
    """
    Arrange tier buckets into five columns plus a retired column.

    Column n merges HTn and LTn players tagged with subtier High/Low and
    sorted by points descending; the sort is stable so High players win ties.
    """
    visibility = visibility or TierGridVisibility(page_size=settings.TIER_GRID_PAGE_SIZE)
    columns = []

    for tier in GRID_COLUMNS:
        high = [dict(p, subtier="High") for p in tier_data.get(f"HT{tier}", [])]
        low = [dict(p, subtier="Low") for p in tier_data.get(f"LT{tier}", [])]
        ordered = sorted(high + low, key=lambda p: p.get("points", 0) or 0, reverse=True)
        visible = visibility.count(tier)
        columns.append({
            "tier": tier,
            "players": ordered[:visible],
            "total": len(ordered),
            "visible": min(visible, len(ordered)),
            "has_more": len(ordered) > visible,
        })

    grid: Dict[str, Any] = {"columns": columns}

    if include_retired:
        retired = tier_data.get(TierLevel.RETIRED.value, [])
        visible = visibility.count(RETIRED_COLUMN)
        grid["retired"] = {
            "players": retired[:visible],
            "total": len(retired),
            "visible": min(visible, len(retired)),
            "has_more": len(retired) > visible,
        }

    return grid


async def search_players(db: AsyncSession, query: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """Case-insensitive substring search on IGN among non-banned players."""
    term = (query or "").strip()
    if not term:
        return []
    limit = limit or settings.SEARCH_LIMIT

    # Escape LIKE wildcards so user input matches literally
    escaped = ign_key_for(term).replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    result = await db.execute(
        select(Player)
        .where(Player.banned.is_(False))
        .where(Player.ign_key.like(f"%{escaped}%", escape="\\"))
        .order_by(desc(Player.global_points), asc(Player.ign))
        .limit(limit)
    )
    players = list(result.scalars().all())
    assignments = await get_tier_assignments_by_player(db, [p.id for p in players])
    return [_player_row(player, None, assignments[player.id]) for player in players]


async def get_overall_position(db: AsyncSession, player: Player) -> int:
    """1 + number of non-banned players with strictly more points."""
    result = await db.execute(
        select(func.count())
        .select_from(Player)
        .where(Player.banned.is_(False))
        .where(Player.global_points > (player.global_points or 0))
    )
    return int(result.scalar() or 0) + 1
