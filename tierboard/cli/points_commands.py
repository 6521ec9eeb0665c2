"""
Points CLI commands: recompute
"""
import asyncio

from tierboard.database import AsyncSessionLocal, close_db
from tierboard.exceptions import TierboardError
from tierboard.services.points_service import recompute_all_points, recompute_global_points


class PointsCommand:
    """Global points CLI command handler."""

    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run

    def execute(self, args) -> int:
        if args.points_action == "recompute":
            return self._recompute(args)
        print("Error: Unknown points action")
        return 1

    def _recompute(self, args) -> int:
        print("=== Recompute Global Points ===")
        target = f"player {args.player_id}" if args.player_id else "every player"
        if self.dry_run:
            print(f"[DRY RUN] Would recompute points for {target}")
            return 0
        try:
            asyncio.run(self._async_recompute(args.player_id))
            return 0
        except TierboardError as e:
            print(f"Error: {e.message}")
            return 1

    async def _async_recompute(self, player_id=None) -> None:
        try:
            async with AsyncSessionLocal() as session:
                if player_id is not None:
                    total = await recompute_global_points(session, player_id)
                    print(f"Player {player_id}: {total} points")
                else:
                    count = await recompute_all_points(session)
                    print(f"Recomputed {count} player(s)")
        finally:
            await close_db()
