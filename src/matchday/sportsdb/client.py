"""HTTP client for TheSportsDB v1 JSON API."""

from __future__ import annotations

import datetime as dt
import json
import logging
import time
from typing import Any

import httpx
from pydantic import ValidationError

from ..cancellation import CancellationToken, check_cancelled
from .cache import LookupCache
from .models import Event, League, SportsDBPayload, Team

LOGGER = logging.getLogger(__name__)

API_BASE_URL = "https://www.thesportsdb.com/api/v1/json"

# Public test key published by TheSportsDB.
DEFAULT_API_KEY = "3"

MAX_RETRIES = 3
RETRY_BACKOFF = 1.0
MAX_BACKOFF = 30.0
CHUNK_SIZE = 16384


class SportsDBError(Exception):
    """Base exception for TheSportsDB API errors."""


class SportsDBNotFoundError(SportsDBError):
    """Resource not found (404)."""


class SportsDBClient:
    """HTTP client for TheSportsDB v1 API.

    Every public method accepts an optional :class:`CancellationToken`.
    Responses are streamed so a cancelled request stops reading the body at
    the next chunk. Transport failures, non-success statuses and malformed
    payloads surface as :class:`SportsDBError`; cancellation surfaces as
    :class:`~matchday.cancellation.OperationCancelled`.

    Rate limiting (429) and server errors are retried with exponential
    back-off. Id lookups for teams and leagues are cached in memory.
    """

    def __init__(
        self,
        api_key: str = DEFAULT_API_KEY,
        *,
        base_url: str = API_BASE_URL,
        timeout: float = 30.0,
        max_retries: int = MAX_RETRIES,
        retry_backoff: float = RETRY_BACKOFF,
        cache: LookupCache | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: TheSportsDB API key (``"3"`` is the public test key)
            base_url: API root, without the key segment
            timeout: HTTP request timeout in seconds
            max_retries: Attempts per request for retryable failures
            retry_backoff: Initial back-off in seconds between attempts
            cache: Cache for id lookups; a private one is created if omitted
            http_client: Pre-configured httpx client (not closed by ``close``)
        """
        self.api_key = api_key or DEFAULT_API_KEY
        self.base_url = base_url.rstrip("/")
        self.max_retries = max(1, max_retries)
        self.retry_backoff = retry_backoff
        self.cache = cache if cache is not None else LookupCache()
        if http_client is None:
            self._client = httpx.Client(timeout=timeout, follow_redirects=True)
            self._owns_client = True
        else:
            self._client = http_client
            self._owns_client = False

    def _url(self, endpoint: str) -> str:
        return f"{self.base_url}/{self.api_key}/{endpoint}"

    def _pause(self, seconds: float, cancel: CancellationToken | None) -> None:
        if cancel is not None:
            cancel.wait(seconds)
        else:
            time.sleep(seconds)

    def _read_body(self, response: httpx.Response, cancel: CancellationToken | None) -> bytes:
        body = bytearray()
        for chunk in response.iter_bytes(CHUNK_SIZE):
            check_cancelled(cancel)
            body.extend(chunk)
        return bytes(body)

    def _request(
        self,
        endpoint: str,
        params: dict[str, Any],
        cancel: CancellationToken | None = None,
    ) -> SportsDBPayload:
        """Perform a GET request and parse the response envelope.

        Raises:
            SportsDBNotFoundError: If the endpoint answers 404
            SportsDBError: On transport errors, other failures or bad payloads
            OperationCancelled: If ``cancel`` is set before or during the call
        """
        url = self._url(endpoint)
        query = {key: value for key, value in params.items() if value not in (None, "")}
        last_exception: Exception | None = None
        backoff = self.retry_backoff

        for attempt in range(self.max_retries):
            check_cancelled(cancel)
            try:
                with self._client.stream("GET", url, params=query) as response:
                    if response.status_code == 404:
                        raise SportsDBNotFoundError(f"Resource not found: {endpoint}")
                    if response.status_code == 429:
                        retry_after = _retry_after(response, backoff)
                        LOGGER.warning("Rate limited on %s, waiting %.1f seconds", endpoint, retry_after)
                        last_exception = SportsDBError(f"Rate limited: {endpoint}")
                        if attempt < self.max_retries - 1:
                            self._pause(retry_after, cancel)
                            backoff = min(backoff * 2, MAX_BACKOFF)
                        continue
                    response.raise_for_status()
                    body = self._read_body(response, cancel)
            except httpx.HTTPStatusError as exc:
                if exc.response.status_code < 500:
                    raise SportsDBError(f"Request to {endpoint} failed with HTTP {exc.response.status_code}") from exc
                last_exception = exc
                if attempt < self.max_retries - 1:
                    LOGGER.debug("Request failed (attempt %d/%d): %s", attempt + 1, self.max_retries, exc)
                    self._pause(backoff, cancel)
                    backoff = min(backoff * 2, MAX_BACKOFF)
                continue
            except httpx.RequestError as exc:
                last_exception = exc
                if attempt < self.max_retries - 1:
                    LOGGER.debug("Request error (attempt %d/%d): %s", attempt + 1, self.max_retries, exc)
                    self._pause(backoff, cancel)
                    backoff = min(backoff * 2, MAX_BACKOFF)
                continue
            return _parse_payload(endpoint, body)

        raise SportsDBError(f"Failed to fetch {endpoint} after {self.max_retries} attempts") from last_exception

    def search_events(self, text: str, cancel: CancellationToken | None = None) -> list[Event]:
        """Free-text event search (``searchevents.php?e=``)."""
        LOGGER.debug("Searching events: %s", text)
        return self._request("searchevents.php", {"e": text}, cancel).event_list()

    def events_on_day(
        self,
        day: dt.date,
        league_id: str | None = None,
        cancel: CancellationToken | None = None,
    ) -> list[Event]:
        """List events on ``day``, optionally restricted to one league."""
        LOGGER.debug("Listing events on %s (league=%s)", day.isoformat(), league_id or "any")
        return self._request("eventsday.php", {"d": day.isoformat(), "l": league_id}, cancel).event_list()

    def get_event(self, event_id: str, cancel: CancellationToken | None = None) -> Event | None:
        events = self._request("lookupevent.php", {"id": event_id}, cancel).event_list()
        return events[0] if events else None

    def get_team(self, team_id: str, cancel: CancellationToken | None = None) -> Team | None:
        """Fetch a team record by id (cached)."""
        hit, cached = self.cache.get("team", team_id)
        if hit:
            return cached
        teams = self._request("lookupteam.php", {"id": team_id}, cancel).team_list()
        team = teams[0] if teams else None
        self.cache.set("team", team_id, team)
        return team

    def search_teams(self, text: str, cancel: CancellationToken | None = None) -> list[Team]:
        return self._request("searchteams.php", {"t": text}, cancel).team_list()

    def search_leagues(self, text: str, cancel: CancellationToken | None = None) -> list[League]:
        """Free-text league search, merged across all result containers."""
        LOGGER.debug("Searching leagues: %s", text)
        return self._request("search_all_leagues.php", {"s": text}, cancel).league_list()

    def get_league(self, league_id: str, cancel: CancellationToken | None = None) -> League | None:
        """Fetch a league record by id (cached)."""
        hit, cached = self.cache.get("league", league_id)
        if hit:
            return cached
        leagues = self._request("lookupleague.php", {"id": league_id}, cancel).league_list()
        league = leagues[0] if leagues else None
        self.cache.set("league", league_id, league)
        return league

    def close(self) -> None:
        """Close the HTTP client."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> SportsDBClient:
        return self

    def __exit__(self, *args) -> None:
        self.close()


def _retry_after(response: httpx.Response, default: float) -> float:
    try:
        return float(response.headers.get("Retry-After", default))
    except (TypeError, ValueError):
        return default


def _parse_payload(endpoint: str, body: bytes) -> SportsDBPayload:
    if not body.strip():
        # Some endpoints answer an empty body instead of {"events": null}.
        return SportsDBPayload()
    try:
        data = json.loads(body)
    except ValueError as exc:
        raise SportsDBError(f"Malformed JSON from {endpoint}") from exc
    if not isinstance(data, dict):
        raise SportsDBError(f"Unexpected payload from {endpoint}: {type(data).__name__}")
    try:
        return SportsDBPayload.model_validate(data)
    except ValidationError as exc:
        raise SportsDBError(f"Malformed payload from {endpoint}: {exc.error_count()} error(s)") from exc
