"""
Shared fixtures: in-memory database, seeded players and an API client.
"""
from typing import AsyncGenerator, Dict, Optional

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tierboard.constants import Device, Region, parse_gamemode, parse_tier
from tierboard.database import build_engine, build_sessionmaker, get_db, init_db
from tierboard.main import app
from tierboard.rate_limit import limiter
from tierboard.services import admin_service, player_service
from tierboard.services.player_service import PlayerResult

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

OWNER_PASSWORD = "owner-password-123"
GENERAL_PASSWORD = "general-password-123"

limiter.enabled = False


@pytest_asyncio.fixture
async def engine():
    engine = build_engine(TEST_DATABASE_URL)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = build_sessionmaker(engine)
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(engine) -> AsyncGenerator[AsyncClient, None]:
    """Async test client bound to the in-memory database."""
    session_factory = build_sessionmaker(engine)

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def make_player(db_session):
    """
    Create a player with placements.

    tiers maps gamemode name to a tier label or a (tier, score) tuple:
        await make_player("Steve", {"Crystal": "HT1", "Sword": ("LT3", 120)})
    """
    async def _create(
        ign: str,
        tiers: Optional[Dict[str, object]] = None,
        region: Region = Region.EU,
        device: Device = Device.PC,
        banned: bool = False,
    ):
        results = []
        for gamemode, value in (tiers or {}).items():
            tier, score = value if isinstance(value, tuple) else (value, 0)
            results.append(PlayerResult(gamemode=parse_gamemode(gamemode), tier=parse_tier(tier), points=score))
        player, _ = await player_service.submit_player_results(
            db_session, ign=ign, region=region, device=device, results=results
        )
        if banned:
            player = await player_service.set_player_banned(db_session, player.id, True)
        return player

    return _create


@pytest_asyncio.fixture
async def panel_passwords(db_session):
    await admin_service.set_auth_password(db_session, admin_service.OWNER_PASSWORD_KEY, OWNER_PASSWORD)
    await admin_service.set_auth_password(db_session, admin_service.GENERAL_PASSWORD_KEY, GENERAL_PASSWORD)
    return {"owner": OWNER_PASSWORD, "general": GENERAL_PASSWORD}


@pytest_asyncio.fixture
async def owner_headers(client, panel_passwords) -> Dict[str, str]:
    response = await client.post("/api/admin/login", json={"password": OWNER_PASSWORD})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
