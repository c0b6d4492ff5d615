"""Shared slowapi rate limiter. Attached to ``app.state`` in main."""
import os

from slowapi import Limiter
from slowapi.util import get_remote_address

RATE_LIMIT_DEFAULT = os.environ.get("RATE_LIMIT_DEFAULT", "200/minute")
RATE_LIMIT_SEARCH = os.environ.get("RATE_LIMIT_SEARCH", "60/minute")

limiter = Limiter(key_func=get_remote_address, default_limits=[RATE_LIMIT_DEFAULT])
