"""
API contract tests over the ASGI app

Every error response uses the envelope:
    {"success": false, "error": ..., "message": ..., "code": ...}
"""
import pytest

from tierboard.config import settings
from tierboard.constants import AdminRole, Region
from tierboard.rbac import create_onboarding_token
from tierboard.services import admin_service, chat_service

TEST_IP = "127.0.0.1"


def assert_error(response, status_code, code):
    assert response.status_code == status_code
    body = response.json()
    assert body["success"] is False
    assert body["code"] == code
    assert body["message"]


async def _staff_headers(client, db_session, role: AdminRole, secret: str):
    application = await admin_service.submit_application(db_session, f"{role.value}#0001", secret, role, TEST_IP)
    await admin_service.review_application(db_session, application.id, approve=True, reviewer_role="owner")
    response = await client.post("/api/admin/login", json={"password": secret})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


# =============================================================================
# Public
# =============================================================================

@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_leaderboard(client, make_player):
    await make_player("Steve", {"Crystal": "HT1"})
    await make_player("Alex", {"Crystal": "LT1"})

    response = await client.get("/api/leaderboard", params={"limit": 1})
    data = response.json()

    assert response.status_code == 200
    assert data["success"] is True
    assert [p["ign"] for p in data["players"]] == ["Steve"]
    assert data["has_more"] is True
    assert data["next_offset"] == 1


@pytest.mark.asyncio
async def test_leaderboard_rejects_bad_limit(client):
    response = await client.get("/api/leaderboard", params={"limit": 0})
    assert_error(response, 422, "VALIDATION_ERROR")


@pytest.mark.asyncio
async def test_gamemodes_and_tier_points(client):
    gamemodes = (await client.get("/api/gamemodes")).json()["gamemodes"]
    assert gamemodes[0] == "Crystal"
    assert "Mace" in gamemodes

    points = (await client.get("/api/tiers/points")).json()["points"]
    assert points["HT1"] == 50
    assert points["Not Ranked"] == 0


@pytest.mark.asyncio
async def test_gamemode_leaderboard_accepts_alias(client, make_player):
    await make_player("Steve", {"Crystal": ("HT1", 30)})

    response = await client.get("/api/gamemodes/cpvp/leaderboard")
    assert response.status_code == 200
    assert response.json()["gamemode"] == "Crystal"
    assert response.json()["players"][0]["ign"] == "Steve"


@pytest.mark.asyncio
async def test_unknown_gamemode(client):
    response = await client.get("/api/gamemodes/tennis/tiers")
    assert_error(response, 400, "INVALID_GAMEMODE")


@pytest.mark.asyncio
async def test_tier_grid_with_load_more(client, make_player):
    for index in range(12):
        await make_player(f"P{index:02d}", {"Sword": "HT2"})

    data = (await client.get("/api/gamemodes/sword/tiers")).json()
    column = data["columns"][1]
    assert (column["tier"], column["visible"], column["has_more"]) == (2, 10, True)

    data = (await client.get("/api/gamemodes/sword/tiers", params={"tier_2": 20, "show_retired": "false"})).json()
    column = data["columns"][1]
    assert (column["visible"], column["has_more"]) == (12, False)
    assert "retired" not in data


@pytest.mark.asyncio
async def test_search_and_profile(client, make_player):
    player = await make_player("DragonSlayer", {"Mace": "LT3"})

    found = (await client.get("/api/players/search", params={"q": "dragon"})).json()["players"]
    assert [p["ign"] for p in found] == ["DragonSlayer"]

    profile = (await client.get(f"/api/players/{player.id}")).json()["profile"]
    assert profile["global_points"] == 25
    assert profile["combat_rank"]["title"] == "Combat Cadet"


@pytest.mark.asyncio
async def test_profile_not_found(client):
    assert_error(await client.get("/api/players/999"), 404, "PLAYER_NOT_FOUND")


# =============================================================================
# Admin auth
# =============================================================================

@pytest.mark.asyncio
async def test_admin_requires_token(client):
    response = await client.get("/api/admin/players")
    assert_error(response, 401, "AUTH_REQUIRED")
    assert response.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_admin_rejects_garbage_token(client):
    response = await client.get("/api/admin/me", headers={"Authorization": "Bearer nope"})
    assert_error(response, 401, "AUTH_INVALID")


@pytest.mark.asyncio
async def test_owner_login_and_me(client, owner_headers):
    data = (await client.get("/api/admin/me", headers=owner_headers)).json()
    assert data["role"] == "owner"
    assert "applications" in data["tabs"]


@pytest.mark.asyncio
async def test_wrong_password(client, panel_passwords):
    response = await client.post("/api/admin/login", json={"password": "guess"})
    assert_error(response, 401, "AUTH_INVALID")


@pytest.mark.asyncio
async def test_onboarding_flow(client, panel_passwords, owner_headers):
    login = (await client.post("/api/admin/login", json={"password": panel_passwords["general"]})).json()
    assert login["needs_onboarding"] is True
    onboarding = {"Authorization": f"Bearer {login['onboarding_token']}"}

    # an onboarding token is not an admin session
    assert_error(await client.get("/api/admin/me", headers=onboarding), 401, "AUTH_INVALID")

    response = await client.post(
        "/api/admin/applications",
        json={"discord": "helper#1234", "secret_key": "helper-secret-1", "requested_role": "moderator"},
        headers=onboarding,
    )
    assert response.status_code == 201
    application_id = response.json()["application"]["id"]

    pending = (await client.get("/api/admin/applications", headers=owner_headers)).json()["applications"]
    assert [a["id"] for a in pending] == [application_id]

    review = await client.post(
        f"/api/admin/applications/{application_id}/review",
        json={"action": "approve"},
        headers=owner_headers,
    )
    assert review.json()["application"]["status"] == "approved"

    staff_login = (await client.post("/api/admin/login", json={"password": "helper-secret-1"})).json()
    assert staff_login["role"] == "moderator"
    assert staff_login["tabs"] == ["submit", "analytics", "system"]


@pytest.mark.asyncio
async def test_application_requires_onboarding_token(client, owner_headers):
    response = await client.post(
        "/api/admin/applications",
        json={"discord": "helper#1234", "secret_key": "helper-secret-1", "requested_role": "tester"},
        headers=owner_headers,
    )
    assert_error(response, 401, "AUTH_INVALID")


@pytest.mark.asyncio
async def test_onboarding_token_bound_to_login_address(client, monkeypatch):
    application = {"discord": "helper#1234", "secret_key": "helper-secret-1", "requested_role": "tester"}
    elsewhere = {"Authorization": f"Bearer {create_onboarding_token('10.9.9.9')}"}

    monkeypatch.setattr(settings, "ADMIN_ENFORCE_IP", True)
    response = await client.post("/api/admin/applications", json=application, headers=elsewhere)
    assert_error(response, 401, "AUTH_INVALID")

    monkeypatch.setattr(settings, "ADMIN_ENFORCE_IP", False)
    response = await client.post("/api/admin/applications", json=application, headers=elsewhere)
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_tab_gating(client, db_session, panel_passwords):
    headers = await _staff_headers(client, db_session, AdminRole.tester, "tester-secret-1")

    assert_error(await client.get("/api/admin/analytics", headers=headers), 403, "TAB_FORBIDDEN")
    assert_error(await client.get("/api/admin/applications", headers=headers), 403, "TAB_FORBIDDEN")

    response = await client.post(
        "/api/admin/mass-submission",
        json={"commands": "!register\nNewbie\n\nNA!"},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["successful"] == 1


@pytest.mark.asyncio
async def test_role_change_applies_to_live_session(client, db_session, panel_passwords):
    headers = await _staff_headers(client, db_session, AdminRole.tester, "tester-secret-1")
    staff = (await admin_service.list_staff(db_session))[0]
    await admin_service.update_staff_role(db_session, staff.id, AdminRole.admin)

    assert (await client.get("/api/admin/analytics", headers=headers)).status_code == 200

    await admin_service.deactivate_staff(db_session, staff.id)
    assert_error(await client.get("/api/admin/me", headers=headers), 401, "AUTH_INVALID")


@pytest.mark.asyncio
async def test_clear_sessions_invalidates_tokens(client, owner_headers):
    response = await client.post("/api/admin/sessions/clear", headers=owner_headers)
    assert response.json()["epoch"] == 1

    assert_error(await client.get("/api/admin/me", headers=owner_headers), 401, "AUTH_EXPIRED")


# =============================================================================
# Admin players
# =============================================================================

@pytest.mark.asyncio
async def test_submit_player_and_edit_tiers(client, owner_headers):
    response = await client.post(
        "/api/admin/players/submit",
        json={
            "ign": "Steve",
            "region": "EU",
            "device": "PC",
            "results": [{"gamemode": "crystal", "tier": "ht1"}, {"gamemode": "Sword", "tier": "LT2", "score": 40}],
        },
        headers=owner_headers,
    )
    data = response.json()
    assert response.status_code == 200
    assert data["created"] is True
    assert data["player"]["global_points"] == 85
    player_id = data["player"]["id"]

    response = await client.put(
        f"/api/admin/players/{player_id}/tiers/sword", json={"tier": "Retired"}, headers=owner_headers
    )
    assert response.json()["player"]["global_points"] == 50

    response = await client.delete(f"/api/admin/players/{player_id}/tiers/crystal", headers=owner_headers)
    assert response.json()["removed"] is True
    assert response.json()["player"]["global_points"] == 0


@pytest.mark.asyncio
async def test_submit_player_validation(client, owner_headers):
    response = await client.post(
        "/api/admin/players/submit",
        json={"ign": "Steve", "region": "EU", "results": [{"gamemode": "Crystal", "tier": "HT7"}]},
        headers=owner_headers,
    )
    assert_error(response, 422, "VALIDATION_ERROR")


@pytest.mark.asyncio
async def test_resubmit_non_ascii_ign(client, owner_headers):
    body = {"ign": "ÉCLAIR", "region": "EU", "results": [{"gamemode": "Sword", "tier": "HT2", "score": 120}]}
    first = await client.post("/api/admin/players/submit", json=body, headers=owner_headers)
    assert first.json()["created"] is True

    body["results"] = [{"gamemode": "Sword", "tier": "HT1"}]
    second = await client.post("/api/admin/players/submit", json=body, headers=owner_headers)
    data = second.json()
    assert second.status_code == 200
    assert data["created"] is False
    assert data["player"]["id"] == first.json()["player"]["id"]
    assert data["player"]["global_points"] == 50

    profile = (await client.get(f"/api/players/{data['player']['id']}")).json()["profile"]
    sword = next(t for t in profile["tiers"] if t["gamemode"] == "Sword")
    assert sword["score"] == 120

    found = (await client.get("/api/players/search", params={"q": "écl"})).json()["players"]
    assert [p["ign"] for p in found] == ["ÉCLAIR"]


@pytest.mark.asyncio
async def test_ban_and_delete(client, owner_headers, make_player):
    player = await make_player("Cheater", {"Crystal": "HT1"})

    response = await client.post(f"/api/admin/players/{player.id}/ban", json={"banned": True}, headers=owner_headers)
    assert response.json()["player"]["banned"] is True
    assert (await client.get("/api/leaderboard")).json()["players"] == []

    listed = (await client.get("/api/admin/players", headers=owner_headers)).json()
    assert listed["total"] == 1

    response = await client.delete(f"/api/admin/players/{player.id}", headers=owner_headers)
    assert response.status_code == 200
    assert_error(await client.get(f"/api/players/{player.id}"), 404, "PLAYER_NOT_FOUND")


@pytest.mark.asyncio
async def test_recompute_analytics_and_system(client, owner_headers, make_player):
    await make_player("Steve", {"Crystal": "HT1"}, region=Region.NA)

    recompute = (await client.post("/api/admin/points/recompute", headers=owner_headers)).json()
    assert recompute["players_updated"] == 1

    analytics = (await client.get("/api/admin/analytics", headers=owner_headers)).json()["analytics"]
    assert analytics["total_players"] == 1
    assert analytics["tier_distribution"]["Crystal"]["HT1"] == 1
    assert analytics["top_player"]["ign"] == "Steve"

    system = (await client.get("/api/admin/system", headers=owner_headers)).json()["system"]
    assert system["database"] == "ok"
    assert "jwt_secret_key" not in system["config"]


# =============================================================================
# Chat
# =============================================================================

@pytest.mark.asyncio
async def test_chat_flow(client, db_session):
    await chat_service.add_entry(db_session, "Points?", "Points answer", ["points"])

    status = (await client.get("/api/chat/status")).json()
    assert status["has_knowledge_base"] is True

    reply = (await client.post("/api/chat/abc-123/messages", json={"message": "points?"})).json()["reply"]
    assert reply["role"] == "assistant"
    assert reply["content"] == "Points answer"

    history = (await client.get("/api/chat/abc-123/messages")).json()["messages"]
    assert len(history) == 2

    cleared = (await client.delete("/api/chat/abc-123")).json()
    assert cleared["deleted"] == 2


@pytest.mark.asyncio
async def test_chat_rejects_blank_message(client):
    response = await client.post("/api/chat/abc-123/messages", json={"message": "   "})
    assert_error(response, 422, "VALIDATION_ERROR")


@pytest.mark.asyncio
async def test_knowledge_base_admin(client, owner_headers):
    response = await client.post(
        "/api/admin/knowledge-base",
        json={"question": "Where is the discord?", "answer": "discord.gg/example", "keywords": ["Discord", "invite"]},
        headers=owner_headers,
    )
    assert response.status_code == 201
    entry_id = response.json()["entry"]["id"]
    assert response.json()["entry"]["keywords"] == ["discord", "invite"]

    entries = (await client.get("/api/admin/knowledge-base", headers=owner_headers)).json()["entries"]
    assert [e["id"] for e in entries] == [entry_id]

    response = await client.delete(f"/api/admin/knowledge-base/{entry_id}", headers=owner_headers)
    assert response.json()["entry"]["is_active"] is False
    assert_error(await client.delete("/api/admin/knowledge-base/999", headers=owner_headers), 404, "KB_ENTRY_NOT_FOUND")
