"""
tierboard/exceptions.py
Typed service-layer exceptions.

Services raise these; routes translate them into the standard error
envelope via tierboard.errors.
"""
from typing import Any, Dict, Optional


class TierboardError(Exception):
    """Base service error."""
    status_code: int = 400
    code: str = "TIERBOARD_ERROR"

    def __init__(self, message: str, code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message
        if code:
            self.code = code
        self.details = details
        super().__init__(message)


class PlayerNotFoundError(TierboardError):
    status_code = 404
    code = "PLAYER_NOT_FOUND"

    def __init__(self, player: Any):
        super().__init__(f"Player '{player}' not found")
        self.player = player


class PointsRecomputeError(TierboardError):
    """Tier assignments could not be fetched; stored points were left untouched."""
    status_code = 503
    code = "POINTS_RECOMPUTE_FAILED"

    def __init__(self, player_id: int, reason: str):
        super().__init__(f"Could not recompute points for player {player_id}: {reason}")
        self.player_id = player_id


class InvalidTierError(TierboardError):
    code = "INVALID_TIER"

    def __init__(self, tier: Any):
        super().__init__(f"Invalid tier '{tier}'")


class InvalidGamemodeError(TierboardError):
    code = "INVALID_GAMEMODE"

    def __init__(self, gamemode: Any):
        super().__init__(f"Invalid gamemode '{gamemode}'")


class InvalidCredentialsError(TierboardError):
    status_code = 401
    code = "AUTH_INVALID"

    def __init__(self, message: str = "Invalid password or secret key"):
        super().__init__(message)


class ApplicationNotFoundError(TierboardError):
    status_code = 404
    code = "APPLICATION_NOT_FOUND"

    def __init__(self, application_id: int):
        super().__init__(f"Application {application_id} not found")


class ApplicationAlreadyReviewedError(TierboardError):
    status_code = 409
    code = "ALREADY_REVIEWED"

    def __init__(self, application_id: int, status: str):
        super().__init__(f"Application {application_id} is already {status}")


class InvalidRoleError(TierboardError):
    code = "INVALID_ROLE"

    def __init__(self, role: Any):
        super().__init__(f"Role '{role}' cannot be assigned")


class StaffNotFoundError(TierboardError):
    status_code = 404
    code = "STAFF_NOT_FOUND"

    def __init__(self, staff_id: int):
        super().__init__(f"Staff member {staff_id} not found")


class KnowledgeEntryNotFoundError(TierboardError):
    status_code = 404
    code = "KB_ENTRY_NOT_FOUND"

    def __init__(self, entry_id: int):
        super().__init__(f"Knowledge base entry {entry_id} not found")
