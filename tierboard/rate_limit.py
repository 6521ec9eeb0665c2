"""
tierboard/rate_limit.py
Shared slowapi limiter; attached to the app in tierboard.main
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from tierboard.config import settings

limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)
