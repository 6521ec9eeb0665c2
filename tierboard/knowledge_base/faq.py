"""
tierboard/knowledge_base/faq.py
Default support answers loaded into the knowledge base by `kb seed`.
"""
from typing import Dict, List


DEFAULT_FAQ: List[Dict] = [
    {
        "question": "How are global points calculated?",
        "answer": (
            "Every tier you hold is worth points: HT1 50, LT1 45, HT2 40, LT2 35, "
            "HT3 30, LT3 25, HT4 20, LT4 15, HT5 10, LT5 5. Retired and Not Ranked "
            "are worth 0. Your global points are the sum across all gamemodes."
        ),
        "keywords": ["points", "global points", "calculate", "score", "total"],
    },
    {
        "question": "What do HT and LT mean?",
        "answer": (
            "HT is High Tier and LT is Low Tier. Tier 1 is the best, tier 5 the "
            "lowest; within a tier, HT ranks above LT."
        ),
        "keywords": ["ht", "lt", "high tier", "low tier", "tier", "tiers", "meaning"],
    },
    {
        "question": "How do I get tested?",
        "answer": (
            "Tests are run by our testers on Discord. Open a ticket in the testing "
            "channel with your IGN, region and device and a tester will pick it up."
        ),
        "keywords": ["test", "tested", "testing", "tester", "ticket", "get ranked"],
    },
    {
        "question": "Which gamemodes are ranked?",
        "answer": "Crystal, Sword, SMP, UHC, Axe, NethPot, Bedwars and Mace.",
        "keywords": ["gamemode", "gamemodes", "modes", "crystal", "sword", "mace", "uhc", "smp", "axe", "nethpot", "bedwars"],
    },
    {
        "question": "What is a combat rank?",
        "answer": (
            "Your combat rank is a title based on global points: Rookie, Combat "
            "Novice (10), Combat Cadet (20), Combat Specialist (50), Combat Ace "
            "(100), Combat Master (250) and Combat Grandmaster (400)."
        ),
        "keywords": ["combat", "rank", "title", "grandmaster", "master", "ace", "badge"],
    },
    {
        "question": "How do I become staff?",
        "answer": (
            "Ask an admin for the onboarding password, log in to the admin panel "
            "with it and submit an application. The owner reviews every application."
        ),
        "keywords": ["staff", "admin", "moderator", "apply", "application", "join"],
    },
]
