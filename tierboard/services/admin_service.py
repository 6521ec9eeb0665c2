"""
Admin Service

Staff authentication, onboarding applications, staff management and
role-based tab visibility for the admin panel.

Login precedence:
1. owner password  -> owner session
2. general password -> onboarding (may file an application)
3. secret key of an approved application with an active staff record
"""
import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional

from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tierboard.config import settings
from tierboard.constants import ASSIGNABLE_ROLES, ROLE_TABS, AdminRole, AdminTab, ApplicationStatus
from tierboard.exceptions import (
    ApplicationAlreadyReviewedError,
    ApplicationNotFoundError,
    InvalidCredentialsError,
    InvalidRoleError,
    StaffNotFoundError,
    TierboardError,
)
from tierboard.orm.admin import AdminApplication, AdminUser, AuthConfig
from tierboard.orm.base import utcnow

logger = logging.getLogger(__name__)

OWNER_PASSWORD_KEY = "owner_password"
GENERAL_PASSWORD_KEY = "general_password"
SESSION_EPOCH_KEY = "session_epoch"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# ================= HASHING =================

def normalize_secret(secret: str) -> str:
    """
    bcrypt only supports 72 bytes.
    Truncate AFTER UTF-8 encoding to stay compatible with existing hashes.
    """
    encoded = secret.encode("utf-8")
    if len(encoded) > 72:
        encoded = encoded[:72]
    return encoded.decode("utf-8", errors="ignore")


def hash_secret(secret: str) -> str:
    return pwd_context.hash(normalize_secret(secret))


def verify_secret(plain: str, hashed: Optional[str]) -> bool:
    if not plain or not hashed:
        return False
    try:
        return pwd_context.verify(normalize_secret(plain), hashed)
    except ValueError:
        logger.warning("Stored secret hash is malformed")
        return False


# bcrypt blocks; run it off the event loop
_executor = None


def get_executor() -> ThreadPoolExecutor:
    global _executor
    if _executor is None:
        _executor = ThreadPoolExecutor(max_workers=4)
    return _executor


async def hash_secret_async(secret: str) -> str:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(get_executor(), hash_secret, secret)


async def verify_secret_async(plain: str, hashed: Optional[str]) -> bool:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(get_executor(), verify_secret, plain, hashed)


# ================= TABS =================

def get_visible_tabs(role: Optional[str]) -> List[AdminTab]:
    """Admin panel tabs a role may open; unknown roles see nothing."""
    try:
        return list(ROLE_TABS[AdminRole(role)])
    except (ValueError, KeyError):
        return []


def can_access_tab(role: Optional[str], tab: AdminTab) -> bool:
    return tab in get_visible_tabs(role)


# ================= AUTH CONFIG =================

async def _config_value(db: AsyncSession, key: str) -> Optional[str]:
    row = await db.get(AuthConfig, key)
    return row.config_value if row else None


async def get_session_epoch(db: AsyncSession) -> int:
    value = await _config_value(db, SESSION_EPOCH_KEY)
    try:
        return int(value) if value is not None else 0
    except ValueError:
        return 0


async def clear_all_sessions(db: AsyncSession) -> int:
    """Invalidate every issued admin session. Returns the new epoch."""
    row = await db.get(AuthConfig, SESSION_EPOCH_KEY)
    epoch = await get_session_epoch(db) + 1
    if row is None:
        db.add(AuthConfig(config_key=SESSION_EPOCH_KEY, config_value=str(epoch)))
    else:
        row.config_value = str(epoch)
    await db.commit()
    logger.warning(f"All admin sessions cleared (epoch={epoch})")
    return epoch


async def set_auth_password(db: AsyncSession, key: str, plain: str) -> None:
    """Rotate the owner or general password."""
    if key not in (OWNER_PASSWORD_KEY, GENERAL_PASSWORD_KEY):
        raise TierboardError(f"Unknown auth config key '{key}'", code="INVALID_CONFIG_KEY")
    hashed = await hash_secret_async(plain)
    row = await db.get(AuthConfig, key)
    if row is None:
        db.add(AuthConfig(config_key=key, config_value=hashed))
    else:
        row.config_value = hashed
    await db.commit()
    logger.info(f"Auth config '{key}' rotated")


# ================= LOGIN =================

@dataclass
class LoginOutcome:
    role: Optional[AdminRole] = None
    needs_onboarding: bool = False
    staff_id: Optional[int] = None

    @property
    def subject(self) -> str:
        if self.staff_id is not None:
            return f"staff:{self.staff_id}"
        return self.role.value if self.role else "onboarding"


async def login(db: AsyncSession, password: str, ip_address: str) -> LoginOutcome:
    """
    Resolve a password to an owner session, an onboarding grant or a staff session.

    Raises InvalidCredentialsError when nothing matches.
    """
    if await verify_secret_async(password, await _config_value(db, OWNER_PASSWORD_KEY)):
        logger.info("Owner login successful")
        return LoginOutcome(role=AdminRole.owner)

    if await verify_secret_async(password, await _config_value(db, GENERAL_PASSWORD_KEY)):
        logger.info("General password matched - needs onboarding")
        return LoginOutcome(needs_onboarding=True)

    result = await db.execute(
        select(AdminApplication, AdminUser)
        .join(AdminUser, AdminUser.application_id == AdminApplication.id)
        .where(AdminApplication.status == ApplicationStatus.approved.value)
        .where(AdminUser.is_active.is_(True))
        .order_by(AdminApplication.id)
    )
    for application, staff in result.all():
        if not await verify_secret_async(password, application.secret_key_hash):
            continue
        if settings.ADMIN_ENFORCE_IP and application.ip_address != ip_address:
            logger.warning(
                f"Staff {staff.id} secret key matched from {ip_address}, "
                f"expected {application.ip_address}"
            )
            raise InvalidCredentialsError("Invalid secret key or IP address")
        logger.info(f"Staff {staff.id} login successful as {staff.role}")
        return LoginOutcome(role=AdminRole(staff.role), staff_id=staff.id)

    logger.info("Invalid password provided")
    raise InvalidCredentialsError()


# ================= APPLICATIONS =================

def _assignable_role(role) -> AdminRole:
    try:
        resolved = AdminRole(getattr(role, "value", role))
    except ValueError:
        raise InvalidRoleError(role)
    if resolved not in ASSIGNABLE_ROLES:
        raise InvalidRoleError(role)
    return resolved


async def submit_application(
    db: AsyncSession,
    discord: str,
    secret_key: str,
    requested_role,
    ip_address: str,
) -> AdminApplication:
    role = _assignable_role(requested_role)

    for key in (OWNER_PASSWORD_KEY, GENERAL_PASSWORD_KEY):
        if await verify_secret_async(secret_key, await _config_value(db, key)):
            raise TierboardError("Secret key cannot reuse a panel password", code="SECRET_KEY_RESERVED")

    application = AdminApplication(
        discord=discord.strip(),
        ip_address=ip_address or "unknown",
        secret_key_hash=await hash_secret_async(secret_key),
        requested_role=role.value,
        status=ApplicationStatus.pending.value,
    )
    db.add(application)
    await db.commit()
    await db.refresh(application)
    logger.info(f"Application {application.id} submitted by {application.discord} for {role.value}")
    return application


async def list_pending_applications(db: AsyncSession) -> List[AdminApplication]:
    result = await db.execute(
        select(AdminApplication)
        .where(AdminApplication.status == ApplicationStatus.pending.value)
        .order_by(AdminApplication.submitted_at, AdminApplication.id)
    )
    return list(result.scalars().all())


async def review_application(
    db: AsyncSession,
    application_id: int,
    approve: bool,
    reviewer_role: str,
    assigned_role=None,
) -> AdminApplication:
    """
    Approve or deny a pending application.

    Approval creates the staff record with the assigned role, falling back to
    the role the applicant requested.
    """
    application = await db.get(AdminApplication, application_id)
    if application is None:
        raise ApplicationNotFoundError(application_id)
    if application.status != ApplicationStatus.pending.value:
        raise ApplicationAlreadyReviewedError(application_id, application.status)

    logger.info(
        f"Reviewing application {application_id}: {'approve' if approve else 'deny'}, "
        f"role={assigned_role or application.requested_role}"
    )

    try:
        now = utcnow()
        if approve:
            role = _assignable_role(assigned_role or application.requested_role)
            db.add(AdminUser(
                application_id=application.id,
                discord=application.discord,
                role=role.value,
                approved_by=reviewer_role,
                approved_at=now,
                ip_address=application.ip_address,
                is_active=True,
            ))

        application.status = (ApplicationStatus.approved if approve else ApplicationStatus.denied).value
        application.reviewed_at = now
        application.reviewed_by = reviewer_role
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    return application


# ================= STAFF =================

async def list_staff(db: AsyncSession, include_inactive: bool = False) -> List[AdminUser]:
    query = select(AdminUser).order_by(AdminUser.approved_at, AdminUser.id)
    if not include_inactive:
        query = query.where(AdminUser.is_active.is_(True))
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_staff(db: AsyncSession, staff_id: int) -> AdminUser:
    staff = await db.get(AdminUser, staff_id)
    if staff is None:
        raise StaffNotFoundError(staff_id)
    return staff


async def update_staff_role(db: AsyncSession, staff_id: int, role) -> AdminUser:
    staff = await get_staff(db, staff_id)
    staff.role = _assignable_role(role).value
    await db.commit()
    logger.info(f"Staff {staff_id} role changed to {staff.role}")
    return staff


async def deactivate_staff(db: AsyncSession, staff_id: int) -> AdminUser:
    staff = await get_staff(db, staff_id)
    staff.is_active = False
    await db.commit()
    logger.info(f"Staff {staff_id} removed")
    return staff
