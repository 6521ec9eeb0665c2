"""
Database CLI commands: init, reset, status
"""
import asyncio

from tierboard.config import settings
from tierboard.database import (
    AsyncSessionLocal,
    check_db,
    close_db,
    count_rows,
    drop_db,
    init_db,
    seed_auth_config,
)
from tierboard.orm import AdminApplication, AdminUser, GamemodeScore, KnowledgeBaseEntry, Player


class DbCommand:
    """Database CLI command handler."""

    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run

    def execute(self, args) -> int:
        """Execute database command."""
        if args.db_action == "init":
            return self._init(args)
        elif args.db_action == "reset":
            return self._reset(args)
        elif args.db_action == "status":
            return self._status(args)
        else:
            print("Error: Unknown database action")
            return 1

    def _init(self, args) -> int:
        print("=== Database Init ===")
        if self.dry_run:
            print(f"[DRY RUN] Would create tables on {settings.DATABASE_URL}")
            return 0
        asyncio.run(self._async_init())
        print("Tables ready")
        return 0

    async def _async_init(self) -> None:
        try:
            await init_db()
            async with AsyncSessionLocal() as session:
                await seed_auth_config(session)
        finally:
            await close_db()

    def _reset(self, args) -> int:
        print("=== Database Reset ===")
        if self.dry_run:
            print("[DRY RUN] Would drop and recreate every table")
            return 0
        if not args.force:
            answer = input("This deletes ALL players, staff and chat history. Type 'reset' to continue: ")
            if answer.strip() != "reset":
                print("Aborted")
                return 1
        asyncio.run(self._async_reset())
        print("Database reset complete")
        return 0

    async def _async_reset(self) -> None:
        try:
            await drop_db()
            await init_db()
            async with AsyncSessionLocal() as session:
                await seed_auth_config(session)
        finally:
            await close_db()

    def _status(self, args) -> int:
        print("=== Database Status ===")
        return asyncio.run(self._async_status())

    async def _async_status(self) -> int:
        try:
            async with AsyncSessionLocal() as session:
                if not await check_db(session):
                    print("  ✗ database unreachable")
                    return 1
                print("  ✓ database reachable")
                for label, model in (
                    ("players", Player),
                    ("tier assignments", GamemodeScore),
                    ("applications", AdminApplication),
                    ("staff", AdminUser),
                    ("knowledge base entries", KnowledgeBaseEntry),
                ):
                    print(f"  {label}: {await count_rows(session, model)}")
            return 0
        finally:
            await close_db()
