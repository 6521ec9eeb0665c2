"""
tierboard/rbac.py
Admin panel sessions and role-based tab access.

Two kinds of signed token are issued on login:
- admin:      an authenticated staff session (owner or approved staff)
- onboarding: granted by the general password, only allows filing an application

Admin tokens carry the session epoch current at login. Bumping the epoch
(`clear_all_sessions`) invalidates every token issued before it.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from tierboard.config import settings
from tierboard.constants import AdminRole, AdminTab
from tierboard.database import get_db
from tierboard.errors import ErrorCode, raise_forbidden, raise_unauthorized
from tierboard.orm.admin import AdminUser
from tierboard.services.admin_service import can_access_tab, get_session_epoch, get_visible_tabs

logger = logging.getLogger(__name__)

ADMIN_TOKEN_TYPE = "admin"
ONBOARDING_TOKEN_TYPE = "onboarding"
STAFF_SUBJECT_PREFIX = "staff:"

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/admin/login", auto_error=False)


# ================= TOKEN UTILS =================

def _encode(claims: dict, expires_minutes: int) -> str:
    to_encode = claims.copy()
    to_encode["exp"] = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_admin_token(role: AdminRole, subject: str, epoch: int) -> str:
    """Create an admin session token"""
    return _encode(
        {
            "sub": subject,
            "role": role.value,
            "epoch": epoch,
            "type": ADMIN_TOKEN_TYPE,
        },
        settings.ADMIN_TOKEN_EXPIRE_MINUTES,
    )


def create_onboarding_token(ip_address: str) -> str:
    return _encode(
        {"sub": "onboarding", "ip": ip_address, "type": ONBOARDING_TOKEN_TYPE},
        settings.ONBOARDING_TOKEN_EXPIRE_MINUTES,
    )


def decode_token(token: str) -> Optional[dict]:
    """Decode and validate a token; None when invalid or expired"""
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded and settings.TRUST_FORWARDED_FOR:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


# ================= AUTH DEPENDENCIES =================

@dataclass
class AdminSession:
    role: AdminRole
    subject: str
    staff_id: Optional[int] = None

    @property
    def tabs(self) -> List[AdminTab]:
        return get_visible_tabs(self.role.value)


async def get_current_admin(
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> AdminSession:
    """
    Resolve the bearer token to an admin session.

    Staff sessions re-read the staff record so a role change or removal
    takes effect immediately.
    """
    if not token:
        raise_unauthorized()

    payload = decode_token(token)
    if not payload or payload.get("type") != ADMIN_TOKEN_TYPE:
        raise_unauthorized("Invalid or expired session", ErrorCode.AUTH_INVALID)

    if payload.get("epoch") != await get_session_epoch(db):
        raise_unauthorized("Session has been cleared, please log in again", ErrorCode.AUTH_EXPIRED)

    subject = payload.get("sub") or ""
    try:
        role = AdminRole(payload.get("role"))
    except ValueError:
        raise_unauthorized("Invalid or expired session", ErrorCode.AUTH_INVALID)

    if not subject.startswith(STAFF_SUBJECT_PREFIX):
        return AdminSession(role=role, subject=subject)

    try:
        staff_id = int(subject[len(STAFF_SUBJECT_PREFIX):])
    except ValueError:
        raise_unauthorized("Invalid or expired session", ErrorCode.AUTH_INVALID)

    staff = await db.get(AdminUser, staff_id)
    if staff is None or not staff.is_active:
        logger.info(f"Rejected session for removed staff {staff_id}")
        raise_unauthorized("Staff access has been revoked", ErrorCode.AUTH_INVALID)

    return AdminSession(role=AdminRole(staff.role), subject=subject, staff_id=staff.id)


def require_tab(tab: AdminTab):
    """
    Dependency factory: the current admin must be able to see `tab`.

    Usage:
        @router.get("/analytics")
        async def analytics(admin: AdminSession = Depends(require_tab(AdminTab.analytics))):
            ...
    """
    async def tab_checker(admin: AdminSession = Depends(get_current_admin)) -> AdminSession:
        if not can_access_tab(admin.role.value, tab):
            logger.warning(f"{admin.subject} ({admin.role.value}) denied access to {tab.value} tab")
            raise_forbidden(
                f"Your role cannot access the {tab.value} tab",
                ErrorCode.TAB_FORBIDDEN,
                {"tab": tab.value, "role": admin.role.value},
            )
        return admin

    return tab_checker


async def require_onboarding(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
) -> dict:
    """
    The bearer token must be an onboarding grant from the general password.

    With ADMIN_ENFORCE_IP the grant is bound to the address that logged in.
    """
    if not token:
        raise_unauthorized()
    payload = decode_token(token)
    if not payload or payload.get("type") != ONBOARDING_TOKEN_TYPE:
        raise_unauthorized("Onboarding session required", ErrorCode.AUTH_INVALID)
    if settings.ADMIN_ENFORCE_IP and payload.get("ip") != client_ip(request):
        logger.warning(f"Onboarding token for {payload.get('ip')} used from {client_ip(request)}")
        raise_unauthorized("Onboarding session was issued to another address", ErrorCode.AUTH_INVALID)
    return payload
