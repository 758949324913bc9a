from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .leagues import LeagueEntry, LeagueMapping, load_builtin_leagues, merge_league_entries, parse_league_entries
from .sportsdb.client import API_BASE_URL, DEFAULT_API_KEY, MAX_RETRIES
from .utils import env_str, load_yaml_file, validate_url

LOGGER = logging.getLogger(__name__)

API_KEY_ENV = "SPORTSDB_API_KEY"
LOOKUP_DB_ENV = "MATCHDAY_LOOKUP_DB"


@dataclass
class SportsDBSettings:
    """Connection settings for TheSportsDB."""

    api_key: str = DEFAULT_API_KEY
    base_url: str = API_BASE_URL
    timeout: float = 30.0
    max_retries: int = MAX_RETRIES
    cache_ttl_seconds: float = 3600.0


@dataclass
class LookupStoreSettings:
    path: Path | None = None


@dataclass
class AppConfig:
    sportsdb: SportsDBSettings = field(default_factory=SportsDBSettings)
    lookup_store: LookupStoreSettings = field(default_factory=LookupStoreSettings)
    league_mappings: list[LeagueMapping] = field(default_factory=list)
    builtin_leagues: tuple[LeagueEntry, ...] = field(default_factory=tuple)


def _build_sportsdb_settings(data: Any) -> SportsDBSettings:
    if not data:
        return SportsDBSettings()
    if not isinstance(data, dict):
        raise ValueError("'sportsdb' must be provided as a mapping when specified")

    api_key = str(data.get("api_key") or DEFAULT_API_KEY).strip() or DEFAULT_API_KEY

    base_url = str(data.get("base_url") or API_BASE_URL).strip().rstrip("/")
    if not validate_url(base_url):
        raise ValueError(f"'sportsdb.base_url' must be a valid http/https URL, got: {base_url}")

    try:
        timeout = float(data.get("timeout", 30.0))
    except (TypeError, ValueError) as exc:
        raise ValueError("'sportsdb.timeout' must be a number") from exc
    if timeout <= 0:
        raise ValueError("'sportsdb.timeout' must be greater than 0")

    try:
        max_retries = int(data.get("max_retries", MAX_RETRIES))
    except (TypeError, ValueError) as exc:
        raise ValueError("'sportsdb.max_retries' must be an integer") from exc
    if max_retries < 1:
        raise ValueError("'sportsdb.max_retries' must be greater than or equal to 1")

    try:
        cache_ttl_seconds = float(data.get("cache_ttl_seconds", 3600.0))
    except (TypeError, ValueError) as exc:
        raise ValueError("'sportsdb.cache_ttl_seconds' must be a number") from exc
    if cache_ttl_seconds < 0:
        raise ValueError("'sportsdb.cache_ttl_seconds' must be greater than or equal to 0")

    return SportsDBSettings(
        api_key=api_key,
        base_url=base_url,
        timeout=timeout,
        max_retries=max_retries,
        cache_ttl_seconds=cache_ttl_seconds,
    )


def _build_lookup_store_settings(data: Any) -> LookupStoreSettings:
    if not data:
        return LookupStoreSettings()
    if not isinstance(data, dict):
        raise ValueError("'lookup_store' must be provided as a mapping when specified")
    raw_path = data.get("path")
    if raw_path is None or not str(raw_path).strip():
        return LookupStoreSettings()
    return LookupStoreSettings(path=Path(str(raw_path).strip()).expanduser())


def _build_league_mappings(data: Any) -> list[LeagueMapping]:
    """Build the ordered user league mappings.

    Entries with a non-numeric id or a name already seen (case-insensitively)
    are dropped with a warning rather than failing the whole configuration.
    """
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValueError("'leagues' must be provided as a list of {name, id} mappings")

    mappings: list[LeagueMapping] = []
    seen: set[str] = set()
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise ValueError(f"'leagues[{index}]' must be a mapping")
        name = str(item.get("name") or "").strip()
        league_id = str(item.get("id") if item.get("id") is not None else "").strip()
        if not name:
            raise ValueError(f"'leagues[{index}].name' must be a non-empty string")
        if not league_id.isdigit():
            LOGGER.warning("Ignoring league mapping %r: id %r is not numeric", name, league_id)
            continue
        key = name.casefold()
        if key in seen:
            LOGGER.warning("Ignoring duplicate league mapping for %r", name)
            continue
        seen.add(key)
        mappings.append(LeagueMapping(name=name, league_id=league_id))
    return mappings


def _apply_env_overrides(config: AppConfig) -> AppConfig:
    api_key = env_str(API_KEY_ENV)
    if api_key:
        config.sportsdb.api_key = api_key
    lookup_db = env_str(LOOKUP_DB_ENV)
    if lookup_db:
        config.lookup_store.path = Path(lookup_db).expanduser()
    return config


def build_config(data: dict[str, Any]) -> AppConfig:
    if not isinstance(data, dict):
        raise ValueError("Configuration root must be a mapping")
    overrides = parse_league_entries(data.get("builtin_leagues"), field_name="builtin_leagues")
    config = AppConfig(
        sportsdb=_build_sportsdb_settings(data.get("sportsdb")),
        lookup_store=_build_lookup_store_settings(data.get("lookup_store")),
        league_mappings=_build_league_mappings(data.get("leagues")),
        builtin_leagues=merge_league_entries(load_builtin_leagues(), overrides),
    )
    return _apply_env_overrides(config)


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from ``path``; defaults plus environment overrides when None."""
    data = load_yaml_file(path) if path is not None else {}
    return build_config(data)


__all__ = [
    "API_KEY_ENV",
    "AppConfig",
    "LOOKUP_DB_ENV",
    "LookupStoreSettings",
    "SportsDBSettings",
    "build_config",
    "load_config",
]
