"""
Knowledge base CLI commands: seed, list
"""
import asyncio

from tierboard.database import AsyncSessionLocal, close_db
from tierboard.knowledge_base.faq import DEFAULT_FAQ
from tierboard.services import chat_service


class KbCommand:
    """Knowledge base CLI command handler."""

    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run

    def execute(self, args) -> int:
        if args.kb_action == "seed":
            return self._seed(args)
        elif args.kb_action == "list":
            return asyncio.run(self._async_list(args.all))
        print("Error: Unknown knowledge base action")
        return 1

    def _seed(self, args) -> int:
        print("=== Seed Knowledge Base ===")
        if self.dry_run:
            print(f"[DRY RUN] Would add up to {len(DEFAULT_FAQ)} entries:")
            for item in DEFAULT_FAQ:
                print(f"  - {item['question']}")
            return 0
        added = asyncio.run(self._async_seed())
        print(f"Added {added} entr{'y' if added == 1 else 'ies'}")
        return 0

    async def _async_seed(self) -> int:
        try:
            async with AsyncSessionLocal() as session:
                return await chat_service.seed_entries(session, DEFAULT_FAQ)
        finally:
            await close_db()

    async def _async_list(self, include_inactive: bool) -> int:
        try:
            async with AsyncSessionLocal() as session:
                entries = await chat_service.list_entries(session, include_inactive=include_inactive)
                for entry in entries:
                    status = "✓" if entry.is_active else "✗"
                    print(f"  {status} [{entry.id}] {entry.question} ({entry.keywords})")
                print(f"{len(entries)} entr{'y' if len(entries) == 1 else 'ies'}")
            return 0
        finally:
            await close_db()
