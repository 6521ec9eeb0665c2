"""
tierboard/constants.py
Closed vocabularies shared by the ORM, services and routes.

Tier labels, gamemodes, regions, devices and admin roles are fixed sets.
The point table is the single source of truth for global points.
"""
from enum import Enum
from typing import Dict, List, Optional


class GameMode(str, Enum):
    """Competitive gamemodes a player can be tiered in"""
    crystal = "Crystal"
    sword = "Sword"
    smp = "SMP"
    uhc = "UHC"
    axe = "Axe"
    nethpot = "NethPot"
    bedwars = "Bedwars"
    mace = "Mace"


class TierLevel(str, Enum):
    """Tier labels, highest first"""
    HT1 = "HT1"
    LT1 = "LT1"
    HT2 = "HT2"
    LT2 = "LT2"
    HT3 = "HT3"
    LT3 = "LT3"
    HT4 = "HT4"
    LT4 = "LT4"
    HT5 = "HT5"
    LT5 = "LT5"
    RETIRED = "Retired"
    NOT_RANKED = "Not Ranked"


class Region(str, Enum):
    NA = "NA"
    EU = "EU"
    AS = "AS"
    OCE = "OCE"
    SA = "SA"
    AF = "AF"


class Device(str, Enum):
    PC = "PC"
    MOBILE = "Mobile"
    CONSOLE = "Console"


class AdminRole(str, Enum):
    """Staff roles, most privileged first"""
    owner = "owner"
    admin = "admin"
    moderator = "moderator"
    tester = "tester"


class AdminTab(str, Enum):
    """Admin panel sections, each gated by role"""
    submit = "submit"
    system = "system"
    analytics = "analytics"
    database = "database"
    users = "users"
    applications = "applications"


class ApplicationStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    denied = "denied"


GAME_MODES: List[GameMode] = list(GameMode)

TIER_LEVELS: List[TierLevel] = list(TierLevel)

# Labels that appear as columns/buckets in the tier grid
GRID_TIER_LEVELS: List[TierLevel] = [t for t in TierLevel if t != TierLevel.NOT_RANKED]

TIER_POINTS: Dict[str, int] = {
    TierLevel.HT1.value: 50,
    TierLevel.LT1.value: 45,
    TierLevel.HT2.value: 40,
    TierLevel.LT2.value: 35,
    TierLevel.HT3.value: 30,
    TierLevel.LT3.value: 25,
    TierLevel.HT4.value: 20,
    TierLevel.LT4.value: 15,
    TierLevel.HT5.value: 10,
    TierLevel.LT5.value: 5,
    TierLevel.RETIRED.value: 0,
    TierLevel.NOT_RANKED.value: 0,
}

# (minimum points, title), checked top-down
COMBAT_RANKS = [
    (400, "Combat Grandmaster"),
    (250, "Combat Master"),
    (100, "Combat Ace"),
    (50, "Combat Specialist"),
    (20, "Combat Cadet"),
    (10, "Combat Novice"),
    (0, "Rookie"),
]

# Mass submission short codes
GAMEMODE_ALIASES: Dict[str, GameMode] = {
    "crystal": GameMode.crystal,
    "cpvp": GameMode.crystal,
    "sword": GameMode.sword,
    "uhc": GameMode.uhc,
    "smp": GameMode.smp,
    "axe": GameMode.axe,
    "nethpot": GameMode.nethpot,
    "bedwars": GameMode.bedwars,
    "mace": GameMode.mace,
}

DEVICE_CODES: Dict[str, Device] = {
    "KBM": Device.PC,
    "CON": Device.CONSOLE,
    "MOB": Device.MOBILE,
}

ROLE_TABS: Dict[AdminRole, List[AdminTab]] = {
    AdminRole.owner: [
        AdminTab.submit, AdminTab.system, AdminTab.analytics,
        AdminTab.database, AdminTab.users, AdminTab.applications,
    ],
    AdminRole.admin: [
        AdminTab.submit, AdminTab.system, AdminTab.analytics,
        AdminTab.database, AdminTab.users,
    ],
    AdminRole.moderator: [AdminTab.submit, AdminTab.analytics, AdminTab.system],
    AdminRole.tester: [AdminTab.submit],
}

# Roles that can be granted through an application (owner is config-only)
ASSIGNABLE_ROLES: List[AdminRole] = [AdminRole.admin, AdminRole.moderator, AdminRole.tester]


def parse_gamemode(value: str) -> Optional[GameMode]:
    """Resolve a gamemode from its display name or alias, case-insensitively."""
    if not value:
        return None
    key = value.strip().lower()
    for mode in GameMode:
        if mode.value.lower() == key:
            return mode
    return GAMEMODE_ALIASES.get(key)


def parse_tier(value: str) -> Optional[TierLevel]:
    """Resolve a tier label (HT1, lt3, retired, not ranked)."""
    if not value:
        return None
    key = value.strip().lower()
    for tier in TierLevel:
        if tier.value.lower() == key:
            return tier
    return None
