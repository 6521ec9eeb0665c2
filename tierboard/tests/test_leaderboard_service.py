"""
Leaderboard Service Tests

Coverage:
- Overall ordering, ranks and paging
- Gamemode leaderboard and tier buckets
- Tier grid columns and "load more"
- Player search filtering
"""
import pytest

from tierboard.constants import GameMode
from tierboard.orm.player import GamemodeScore
from tierboard.services import leaderboard_service
from tierboard.services.leaderboard_service import (
    RETIRED_COLUMN,
    TierGridVisibility,
    build_tier_grid,
)


# =============================================================================
# Overall leaderboard
# =============================================================================

@pytest.mark.asyncio
async def test_overall_order_points_then_ign(db_session, make_player):
    await make_player("zed", {"Crystal": "HT1"})
    await make_player("Amy", {"Sword": "HT1"})
    await make_player("Bob", {"Crystal": "LT5"})

    page = await leaderboard_service.get_overall_leaderboard(db_session)
    players = page["players"]

    assert [p["ign"] for p in players] == ["Amy", "zed", "Bob"]
    assert [p["overall_rank"] for p in players] == [1, 2, 3]
    assert page["has_more"] is False
    assert page["next_offset"] is None


@pytest.mark.asyncio
async def test_overall_excludes_banned(db_session, make_player):
    await make_player("Cheater", {"Crystal": "HT1"}, banned=True)
    await make_player("Honest", {"Crystal": "LT5"})

    page = await leaderboard_service.get_overall_leaderboard(db_session)
    assert [p["ign"] for p in page["players"]] == ["Honest"]
    assert page["players"][0]["overall_rank"] == 1


@pytest.mark.asyncio
async def test_overall_paging(db_session, make_player):
    for index in range(5):
        await make_player(f"P{index}", {"Crystal": "LT5"})

    first = await leaderboard_service.get_overall_leaderboard(db_session, limit=2)
    assert first["has_more"] is True
    assert first["next_offset"] == 2

    last = await leaderboard_service.get_overall_leaderboard(db_session, limit=2, offset=4)
    assert [p["overall_rank"] for p in last["players"]] == [5]
    assert last["has_more"] is False


@pytest.mark.asyncio
async def test_overall_rows_carry_tier_assignments(db_session, make_player):
    await make_player("Steve", {"Crystal": "HT2", "Mace": "LT4"})

    row = (await leaderboard_service.get_overall_leaderboard(db_session))["players"][0]
    assignments = {a["gamemode"]: a["tier"] for a in row["tier_assignments"]}
    assert assignments == {"Crystal": "HT2", "Mace": "LT4"}
    assert row["global_points"] == 55


# =============================================================================
# Gamemode views
# =============================================================================

@pytest.mark.asyncio
async def test_gamemode_leaderboard_ordered_by_score(db_session, make_player):
    await make_player("Low", {"Sword": ("HT1", 10)})
    await make_player("High", {"Sword": ("LT5", 90)})
    await make_player("Elsewhere", {"Axe": ("HT1", 500)})

    rows = await leaderboard_service.get_gamemode_leaderboard(db_session, GameMode.sword)
    assert [r["ign"] for r in rows] == ["High", "Low"]
    assert rows[0]["tier"] == "LT5"
    assert rows[0]["gamemode_points"] == {"Sword": 90}


@pytest.mark.asyncio
async def test_players_by_tier_buckets(db_session, make_player):
    await make_player("A", {"Crystal": "HT1"})
    await make_player("B", {"Crystal": "Retired"})
    await make_player("C", {"Crystal": "Not Ranked"})
    player = await make_player("D")
    db_session.add(GamemodeScore(player_id=player.id, gamemode="Crystal", internal_tier="Legend"))
    await db_session.commit()

    buckets = await leaderboard_service.get_players_by_tier(db_session, GameMode.crystal)

    assert [p["ign"] for p in buckets["HT1"]] == ["A"]
    assert [p["ign"] for p in buckets["Retired"]] == ["B"]
    assert "Not Ranked" not in buckets
    assert sum(len(v) for v in buckets.values()) == 2


# =============================================================================
# Tier grid
# =============================================================================

def _players(prefix, count, points=0):
    return [{"ign": f"{prefix}{i}", "points": points} for i in range(count)]


def test_tier_grid_merges_high_and_low():
    grid = build_tier_grid({
        "HT1": [{"ign": "h", "points": 5}],
        "LT1": [{"ign": "l", "points": 9}],
    })
    column = grid["columns"][0]
    assert column["tier"] == 1
    assert [(p["ign"], p["subtier"]) for p in column["players"]] == [("l", "Low"), ("h", "High")]


def test_tier_grid_high_wins_ties():
    grid = build_tier_grid({
        "LT2": [{"ign": "low", "points": 7}],
        "HT2": [{"ign": "high", "points": 7}],
    })
    assert [p["ign"] for p in grid["columns"][1]["players"]] == ["high", "low"]


def test_tier_grid_load_more():
    tier_data = {"HT3": _players("h", 8), "LT3": _players("l", 7)}
    visibility = TierGridVisibility(page_size=10)

    grid = build_tier_grid(tier_data, visibility)
    column = grid["columns"][2]
    assert (column["visible"], column["total"], column["has_more"]) == (10, 15, True)

    grid = build_tier_grid(tier_data, visibility.load_more(3))
    column = grid["columns"][2]
    assert (column["visible"], column["has_more"]) == (15, False)
    assert len(column["players"]) == 15


def test_load_more_only_touches_one_column():
    visibility = TierGridVisibility(page_size=10).load_more(1).load_more(1)
    assert visibility.count(1) == 30
    assert visibility.count(2) == 10
    assert visibility.count(RETIRED_COLUMN) == 10


def test_tier_grid_retired_column():
    tier_data = {"Retired": _players("r", 12)}

    grid = build_tier_grid(tier_data, TierGridVisibility(page_size=10))
    assert grid["retired"]["total"] == 12
    assert len(grid["retired"]["players"]) == 10
    assert grid["retired"]["has_more"] is True

    assert "retired" not in build_tier_grid(tier_data, include_retired=False)


def test_tier_grid_empty_columns():
    grid = build_tier_grid({})
    assert len(grid["columns"]) == 5
    assert all(c["players"] == [] and c["has_more"] is False for c in grid["columns"])


# =============================================================================
# Search
# =============================================================================

@pytest.mark.asyncio
async def test_search_case_insensitive_substring(db_session, make_player):
    await make_player("DragonSlayer")
    await make_player("dragonfly")
    await make_player("Steve")

    results = await leaderboard_service.search_players(db_session, "DRAGON")
    assert sorted(r["ign"] for r in results) == ["DragonSlayer", "dragonfly"]
    assert all(r["overall_rank"] is None for r in results)


@pytest.mark.asyncio
@pytest.mark.parametrize("query", ["", "   ", None])
async def test_search_blank_query(db_session, make_player, query):
    await make_player("Steve")
    assert await leaderboard_service.search_players(db_session, query) == []


@pytest.mark.asyncio
async def test_search_excludes_banned(db_session, make_player):
    await make_player("BannedGuy", banned=True)
    assert await leaderboard_service.search_players(db_session, "banned") == []


@pytest.mark.asyncio
async def test_search_treats_wildcards_literally(db_session, make_player):
    await make_player("under_score")
    await make_player("underXscore")

    results = await leaderboard_service.search_players(db_session, "r_s")
    assert [r["ign"] for r in results] == ["under_score"]


@pytest.mark.asyncio
async def test_search_folds_non_ascii_case(db_session, make_player):
    await make_player("ÉCLAIR")
    await make_player("Steve")

    results = await leaderboard_service.search_players(db_session, "écl")
    assert [r["ign"] for r in results] == ["ÉCLAIR"]


@pytest.mark.asyncio
async def test_overall_position_counts_strictly_higher(db_session, make_player):
    await make_player("Top", {"Crystal": "HT1"})
    tied_a = await make_player("TiedA", {"Crystal": "LT1"})
    await make_player("TiedB", {"Sword": "LT1"})
    await make_player("Banned", {"Crystal": "HT1", "Sword": "HT1"}, banned=True)

    assert await leaderboard_service.get_overall_position(db_session, tied_a) == 2
