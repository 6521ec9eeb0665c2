"""
tierboard/routes/admin.py
Admin panel API.

Every endpoint except login and the application form is gated by the tab it
belongs to; see ROLE_TABS for which roles see which tabs.
"""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tierboard.config import settings
from tierboard.constants import AdminTab
from tierboard.database import get_db
from tierboard.errors import raise_bad_request
from tierboard.rate_limit import limiter
from tierboard.rbac import (
    AdminSession,
    client_ip,
    create_admin_token,
    create_onboarding_token,
    get_current_admin,
    require_onboarding,
    require_tab,
)
from tierboard.schemas.admin import (
    ApplicationRequest,
    KnowledgeEntryRequest,
    LoginRequest,
    ReviewRequest,
    StaffRoleUpdate,
)
from tierboard.schemas.player import (
    BanRequest,
    MassSubmissionRequest,
    PlayerSubmitRequest,
    TierUpdateRequest,
)
from tierboard.services import (
    admin_service,
    analytics_service,
    chat_service,
    mass_submission_service,
    player_service,
    points_service,
)
from tierboard.services.player_service import PlayerResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


# ================= AUTH =================

@router.post("/login")
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def admin_login(
    request: Request,
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    """
    Log in with the owner password, the general password or a staff secret key.

    The general password returns an onboarding token instead of a session.
    """
    ip_address = client_ip(request)
    outcome = await admin_service.login(db, payload.password, ip_address)

    if outcome.needs_onboarding:
        return {
            "success": True,
            "needs_onboarding": True,
            "onboarding_token": create_onboarding_token(ip_address),
            "token_type": "bearer",
        }

    epoch = await admin_service.get_session_epoch(db)
    return {
        "success": True,
        "needs_onboarding": False,
        "access_token": create_admin_token(outcome.role, outcome.subject, epoch),
        "token_type": "bearer",
        "role": outcome.role.value,
        "tabs": [tab.value for tab in admin_service.get_visible_tabs(outcome.role.value)],
    }


@router.post("/logout")
async def admin_logout(admin: AdminSession = Depends(get_current_admin)) -> Dict[str, Any]:
    # Tokens are stateless; the client drops its copy
    logger.info(f"{admin.subject} logged out")
    return {"success": True, "message": "Logged out"}


@router.get("/me")
async def get_me(admin: AdminSession = Depends(get_current_admin)) -> Dict[str, Any]:
    return {
        "success": True,
        "role": admin.role.value,
        "subject": admin.subject,
        "tabs": [tab.value for tab in admin.tabs],
    }


@router.post("/sessions/clear")
async def clear_sessions(
    admin: AdminSession = Depends(require_tab(AdminTab.users)),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    """Log out every admin, including the caller"""
    epoch = await admin_service.clear_all_sessions(db)
    logger.warning(f"Sessions cleared by {admin.subject}")
    return {"success": True, "epoch": epoch}


# ================= APPLICATIONS =================

@router.post("/applications", status_code=201)
@limiter.limit(settings.APPLICATION_RATE_LIMIT)
async def submit_application(
    request: Request,
    payload: ApplicationRequest,
    onboarding: dict = Depends(require_onboarding),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    application = await admin_service.submit_application(
        db,
        discord=payload.discord,
        secret_key=payload.secret_key,
        requested_role=payload.requested_role,
        ip_address=client_ip(request),
    )
    return {
        "success": True,
        "application": application.to_dict(),
        "message": "Application submitted. The owner will review it soon.",
    }


@router.get("/applications")
async def list_applications(
    admin: AdminSession = Depends(require_tab(AdminTab.applications)),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    applications = await admin_service.list_pending_applications(db)
    return {"success": True, "applications": [a.to_dict() for a in applications]}


@router.post("/applications/{application_id}/review")
async def review_application(
    application_id: int,
    payload: ReviewRequest,
    admin: AdminSession = Depends(require_tab(AdminTab.applications)),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    application = await admin_service.review_application(
        db,
        application_id,
        approve=payload.action == "approve",
        reviewer_role=admin.role.value,
        assigned_role=payload.role,
    )
    return {"success": True, "application": application.to_dict()}


# ================= STAFF =================

@router.get("/staff")
async def list_staff(
    admin: AdminSession = Depends(require_tab(AdminTab.users)),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    staff = await admin_service.list_staff(db)
    return {"success": True, "staff": [s.to_dict() for s in staff]}


@router.patch("/staff/{staff_id}")
async def update_staff_role(
    staff_id: int,
    payload: StaffRoleUpdate,
    admin: AdminSession = Depends(require_tab(AdminTab.users)),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    staff = await admin_service.update_staff_role(db, staff_id, payload.role)
    return {"success": True, "staff": staff.to_dict()}


@router.delete("/staff/{staff_id}")
async def remove_staff(
    staff_id: int,
    admin: AdminSession = Depends(require_tab(AdminTab.users)),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    if admin.staff_id == staff_id:
        raise_bad_request("You cannot remove yourself")
    staff = await admin_service.deactivate_staff(db, staff_id)
    return {"success": True, "staff": staff.to_dict()}


# ================= PLAYERS =================

@router.get("/players")
async def list_players(
    admin: AdminSession = Depends(require_tab(AdminTab.database)),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    players = await player_service.list_admin_players(db)
    return {"success": True, "players": players, "total": len(players)}


@router.post("/players/submit")
async def submit_player(
    payload: PlayerSubmitRequest,
    admin: AdminSession = Depends(require_tab(AdminTab.submit)),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    results = [PlayerResult(gamemode=r.gamemode, tier=r.tier, points=r.score) for r in payload.results]
    player, created = await player_service.submit_player_results(
        db,
        ign=payload.ign,
        region=payload.region,
        device=payload.device,
        java_username=payload.java_username,
        results=results,
    )
    return {
        "success": True,
        "created": created,
        "player": player.to_dict(),
        "message": f"Player {player.ign} {'added' if created else 'updated'}",
    }


@router.put("/players/{player_id}/tiers/{gamemode}")
async def set_player_tier(
    player_id: int,
    gamemode: str,
    payload: TierUpdateRequest,
    admin: AdminSession = Depends(require_tab(AdminTab.submit)),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    player = await player_service.update_player_tier(db, player_id, gamemode, payload.tier, payload.score)
    return {"success": True, "player": player.to_dict()}


@router.delete("/players/{player_id}/tiers/{gamemode}")
async def remove_player_tier(
    player_id: int,
    gamemode: str,
    admin: AdminSession = Depends(require_tab(AdminTab.submit)),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    removed = await player_service.remove_player_tier(db, player_id, gamemode)
    player = await player_service.get_player(db, player_id)
    return {"success": True, "removed": removed, "player": player.to_dict()}


@router.delete("/players/{player_id}")
async def delete_player(
    player_id: int,
    admin: AdminSession = Depends(require_tab(AdminTab.database)),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    await player_service.delete_player(db, player_id)
    return {"success": True, "message": f"Player {player_id} deleted"}


@router.post("/players/{player_id}/ban")
async def ban_player(
    player_id: int,
    payload: BanRequest,
    admin: AdminSession = Depends(require_tab(AdminTab.database)),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    player = await player_service.set_player_banned(db, player_id, payload.banned)
    return {"success": True, "player": player.to_dict()}


@router.post("/mass-submission")
async def mass_submission(
    payload: MassSubmissionRequest,
    admin: AdminSession = Depends(require_tab(AdminTab.submit)),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    report = await mass_submission_service.process_mass_submission(db, payload.commands)
    return {"success": True, **report.to_dict()}


@router.post("/points/recompute")
async def recompute_points(
    admin: AdminSession = Depends(require_tab(AdminTab.database)),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    updated = await points_service.recompute_all_points(db)
    return {"success": True, "players_updated": updated}


# ================= SYSTEM / ANALYTICS =================

@router.get("/analytics")
async def get_analytics(
    admin: AdminSession = Depends(require_tab(AdminTab.analytics)),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    return {"success": True, "analytics": await analytics_service.get_analytics(db)}


@router.get("/system")
async def get_system_status(
    admin: AdminSession = Depends(require_tab(AdminTab.system)),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    return {"success": True, "system": await analytics_service.get_system_status(db)}


@router.get("/knowledge-base")
async def list_knowledge_base(
    admin: AdminSession = Depends(require_tab(AdminTab.system)),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    entries = await chat_service.list_entries(db)
    return {"success": True, "entries": [e.to_dict() for e in entries]}


@router.post("/knowledge-base", status_code=201)
async def add_knowledge_entry(
    payload: KnowledgeEntryRequest,
    admin: AdminSession = Depends(require_tab(AdminTab.system)),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    entry = await chat_service.add_entry(db, payload.question, payload.answer, payload.keywords)
    return {"success": True, "entry": entry.to_dict()}


@router.delete("/knowledge-base/{entry_id}")
async def remove_knowledge_entry(
    entry_id: int,
    admin: AdminSession = Depends(require_tab(AdminTab.system)),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    entry = await chat_service.deactivate_entry(db, entry_id)
    return {"success": True, "entry": entry.to_dict()}
