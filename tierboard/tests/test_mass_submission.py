"""
Mass submission execution tests
"""
import pytest

from tierboard.services import player_service
from tierboard.services.mass_submission_service import process_mass_submission


@pytest.mark.asyncio
async def test_register_then_update(db_session):
    report = await process_mass_submission(
        db_session,
        "!register\nPlayerOne\n\nEU\nKBM!\n!update\nPlayerOne\ncrystal_HT1\nsword_LT2!",
    )

    assert report.to_dict() == {"successful": 2, "failed": 0, "errors": []}
    player = await player_service.find_player_by_ign(db_session, "playerone")
    assert player.region == "EU"
    assert player.java_username == "PlayerOne"
    assert player.global_points == 85


@pytest.mark.asyncio
async def test_update_unknown_player_does_not_stop_others(db_session, make_player):
    await make_player("Known")

    report = await process_mass_submission(
        db_session,
        "!update\nGhost\ncrystal_HT1!\n!update\nKnown\naxe_LT3!",
    )

    assert report.successful == 1
    assert report.failed == 1
    assert "Ghost" in report.errors[0]
    known = await player_service.find_player_by_ign(db_session, "Known")
    assert known.global_points == 25


@pytest.mark.asyncio
async def test_parse_errors_are_counted(db_session):
    report = await process_mass_submission(
        db_session,
        "!register\nBad\nBad\nMARS!\n!register\nGood\nGood\nNA!",
    )
    assert report.successful == 1
    assert report.failed == 1
    assert "invalid region" in report.errors[0]


@pytest.mark.asyncio
async def test_invalid_update_lines_are_reported(db_session, make_player):
    await make_player("Steve")

    report = await process_mass_submission(db_session, "!update\nSteve\nmace_HT5\nmace_XX!")

    assert report.successful == 1
    assert report.failed == 0
    assert report.errors == ["Steve: ignored invalid line 'mace_XX'"]


@pytest.mark.asyncio
async def test_update_matches_non_ascii_ign_in_any_case(db_session, make_player):
    await make_player("ÉCLAIR")

    report = await process_mass_submission(db_session, "!update\néclair\nsword_HT2!")

    assert report.to_dict() == {"successful": 1, "failed": 0, "errors": []}
    player = await player_service.find_player_by_ign(db_session, "Éclair")
    assert player.global_points == 40
