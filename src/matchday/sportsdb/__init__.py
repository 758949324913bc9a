"""TheSportsDB API client package.

Provides a cancellable HTTP client for TheSportsDB v1 JSON API, the pydantic
models its responses are parsed into, and an in-memory cache for id lookups.
"""

from __future__ import annotations

from .cache import LookupCache
from .client import SportsDBClient, SportsDBError, SportsDBNotFoundError
from .models import Event, League, SportsDBPayload, Team

__all__ = [
    "Event",
    "League",
    "LookupCache",
    "SportsDBClient",
    "SportsDBError",
    "SportsDBNotFoundError",
    "SportsDBPayload",
    "Team",
]
