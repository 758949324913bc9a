"""Read-only local lookup store for league and team identifiers.

The store is a SQLite database with three tables:

- ``leagues(id, name, sport)``
- ``teams(id, name, short_name, league_id)``
- ``aliases(alias, league_id)``

It is opened read-only. A missing or unreadable database is not an error:
lookups log the problem once and report "not found", so league resolution
continues with the remaining sources.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Protocol

LOGGER = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS leagues (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    sport TEXT
);
CREATE TABLE IF NOT EXISTS teams (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    short_name TEXT,
    league_id TEXT
);
CREATE TABLE IF NOT EXISTS aliases (
    alias TEXT NOT NULL,
    league_id TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_leagues_name ON leagues(name COLLATE NOCASE);
CREATE INDEX IF NOT EXISTS idx_teams_name ON teams(name COLLATE NOCASE);
CREATE INDEX IF NOT EXISTS idx_teams_short ON teams(short_name COLLATE NOCASE);
CREATE INDEX IF NOT EXISTS idx_aliases_alias ON aliases(alias COLLATE NOCASE);
"""


class LookupStore(Protocol):
    """Synchronous, read-only league/team lookup."""

    def find_league_id(self, name: str) -> str | None: ...

    def find_team_full_name(self, short_code: str, league_id: str | None = None) -> str | None: ...


class SQLiteLookupStore:
    """SQLite implementation of :class:`LookupStore`.

    Example:
        store = SQLiteLookupStore(Path("/config/lookup.db"))
        store.find_league_id("nhl")             # league name or alias
        store.find_league_id("Boston Bruins")   # team -> its league
        store.find_team_full_name("BOS", "4380")
    """

    # League name, then team name / short name, then alias.
    _LEAGUE_QUERIES = (
        "SELECT id FROM leagues WHERE name = ? COLLATE NOCASE ORDER BY id LIMIT 1",
        "SELECT league_id FROM teams WHERE (name = ?1 COLLATE NOCASE OR short_name = ?1 COLLATE NOCASE) "
        "AND league_id IS NOT NULL AND league_id != '' ORDER BY league_id LIMIT 1",
        "SELECT league_id FROM aliases WHERE alias = ? COLLATE NOCASE ORDER BY league_id LIMIT 1",
    )

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self._local = threading.local()
        self._unavailable_logged = False
        self._log_lock = threading.Lock()

    def _get_connection(self) -> sqlite3.Connection | None:
        """Get a thread-local read-only connection, or None if unavailable."""
        connection = getattr(self._local, "connection", None)
        if connection is not None:
            return connection
        if not self.db_path.is_file():
            self._report_unavailable(f"file not found: {self.db_path}")
            return None
        try:
            connection = sqlite3.connect(
                f"{self.db_path.resolve().as_uri()}?mode=ro",
                uri=True,
                check_same_thread=False,
            )
        except sqlite3.Error as exc:
            self._report_unavailable(str(exc))
            return None
        self._local.connection = connection
        return connection

    def _report_unavailable(self, reason: str) -> None:
        with self._log_lock:
            if self._unavailable_logged:
                return
            self._unavailable_logged = True
        LOGGER.warning("Lookup store unavailable (%s); continuing without it", reason)

    def _query_one(self, sql: str, params: tuple[Any, ...]) -> str | None:
        connection = self._get_connection()
        if connection is None:
            return None
        try:
            row = connection.execute(sql, params).fetchone()
        except sqlite3.Error as exc:
            self._report_unavailable(str(exc))
            return None
        if row is None or row[0] in (None, ""):
            return None
        return str(row[0])

    def find_league_id(self, name: str) -> str | None:
        key = name.strip()
        if not key:
            return None
        for sql in self._LEAGUE_QUERIES:
            league_id = self._query_one(sql, (key,))
            if league_id:
                LOGGER.debug("Lookup store resolved league %r -> %s", key, league_id)
                return league_id
        return None

    def find_team_full_name(self, short_code: str, league_id: str | None = None) -> str | None:
        code = short_code.strip()
        if not code:
            return None
        if league_id:
            return self._query_one(
                "SELECT name FROM teams WHERE short_name = ? COLLATE NOCASE AND league_id = ? ORDER BY name LIMIT 1",
                (code, league_id),
            )
        return self._query_one(
            "SELECT name FROM teams WHERE short_name = ? COLLATE NOCASE ORDER BY name LIMIT 1",
            (code,),
        )

    def close(self) -> None:
        connection = getattr(self._local, "connection", None)
        if connection is not None:
            connection.close()
            self._local.connection = None


def create_lookup_database(
    db_path: Path,
    *,
    leagues: Iterable[Mapping[str, Any]] = (),
    teams: Iterable[Mapping[str, Any]] = (),
    aliases: Iterable[Mapping[str, Any]] = (),
) -> Path:
    """Write a lookup database at ``db_path`` (used to seed or rebuild the store)."""
    db_path.parent.mkdir(parents=True, exist_ok=True)
    connection = sqlite3.connect(str(db_path))
    try:
        with connection:
            connection.executescript(SCHEMA)
            connection.executemany(
                "INSERT OR REPLACE INTO leagues (id, name, sport) VALUES (?, ?, ?)",
                [(str(item["id"]), item["name"], item.get("sport")) for item in leagues],
            )
            connection.executemany(
                "INSERT OR REPLACE INTO teams (id, name, short_name, league_id) VALUES (?, ?, ?, ?)",
                [
                    (
                        str(item["id"]),
                        item["name"],
                        item.get("short_name"),
                        str(item["league_id"]) if item.get("league_id") is not None else None,
                    )
                    for item in teams
                ],
            )
            connection.executemany(
                "INSERT INTO aliases (alias, league_id) VALUES (?, ?)",
                [(item["alias"], str(item["league_id"])) for item in aliases],
            )
    finally:
        connection.close()
    return db_path


__all__ = ["LookupStore", "SQLiteLookupStore", "create_lookup_database"]
