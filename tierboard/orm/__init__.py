from .base import Base

from .player import Player, GamemodeScore
from .admin import AdminApplication, AdminUser, AuthConfig
from .chat import KnowledgeBaseEntry, ChatMessage

__all__ = [
    "Base",
    "Player",
    "GamemodeScore",
    "AdminApplication",
    "AdminUser",
    "AuthConfig",
    "KnowledgeBaseEntry",
    "ChatMessage",
]
