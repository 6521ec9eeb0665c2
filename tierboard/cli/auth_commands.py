"""
Auth CLI commands: set-password, clear-sessions
"""
import asyncio
import getpass

from tierboard.database import AsyncSessionLocal, close_db
from tierboard.services import admin_service

PASSWORD_KEYS = {
    "owner": admin_service.OWNER_PASSWORD_KEY,
    "general": admin_service.GENERAL_PASSWORD_KEY,
}


class AuthCommand:
    """Admin credential CLI command handler."""

    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run

    def execute(self, args) -> int:
        if args.auth_action == "set-password":
            return self._set_password(args)
        elif args.auth_action == "clear-sessions":
            return self._clear_sessions(args)
        print("Error: Unknown auth action")
        return 1

    def _set_password(self, args) -> int:
        password = args.password or getpass.getpass(f"New {args.which} password: ")
        if len(password) < 8:
            print("Error: password must be at least 8 characters")
            return 1
        if self.dry_run:
            print(f"[DRY RUN] Would rotate the {args.which} password")
            return 0
        asyncio.run(self._async_set_password(PASSWORD_KEYS[args.which], password))
        print(f"{args.which.capitalize()} password updated")
        return 0

    async def _async_set_password(self, key: str, password: str) -> None:
        try:
            async with AsyncSessionLocal() as session:
                await admin_service.set_auth_password(session, key, password)
        finally:
            await close_db()

    def _clear_sessions(self, args) -> int:
        if self.dry_run:
            print("[DRY RUN] Would invalidate every admin session")
            return 0
        epoch = asyncio.run(self._async_clear_sessions())
        print(f"All admin sessions cleared (epoch {epoch})")
        return 0

    async def _async_clear_sessions(self) -> int:
        try:
            async with AsyncSessionLocal() as session:
                return await admin_service.clear_all_sessions(session)
        finally:
            await close_db()
