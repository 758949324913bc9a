"""Display metadata built from TheSportsDB records."""

from __future__ import annotations

import re
from typing import Iterable, List, Optional

from .models import PROVIDER_NAME, EpisodeMetadata, RemoteImage, RemoteSearchResult, SeriesMetadata
from .normalizer import is_preliminary_tag
from .sportsdb.models import Event, League

MAX_OVERVIEW_LENGTH = 500
ELLIPSIS = "..."

# A period ends a sentence only when whitespace or the end of the text follows.
_SENTENCE_END = re.compile(r"\.(?=\s|$)")


def truncate_description(text: Optional[str], limit: int = MAX_OVERVIEW_LENGTH) -> str:
    """Shorten ``text`` to at most ``limit`` characters at a sentence boundary.

    The sentence-ending period is replaced by ``...``; the result, ellipsis
    included, never exceeds ``limit``. A dot inside a number such as ``3.5``
    is not a sentence end. Text without a usable period is cut hard.
    """
    if not text:
        return ""
    text = text.strip()
    if len(text) <= limit:
        return text
    # The period itself becomes the first dot of the ellipsis.
    cutoff = limit - len(ELLIPSIS) + 1
    period = -1
    for match in _SENTENCE_END.finditer(text):
        if match.start() >= cutoff:
            break
        period = match.start()
    if period > 0:
        return text[:period].rstrip(" .") + ELLIPSIS
    return text[: limit - len(ELLIPSIS)].rstrip() + ELLIPSIS


def _parse_year(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    try:
        year = int(value)
    except ValueError:
        return None
    return year if year > 0 else None


def normalize_homepage(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    url = url.strip()
    if not url:
        return None
    if url.lower().startswith("http"):
        return url
    return f"http://{url}"


def event_images(event: Event) -> List[RemoteImage]:
    images: List[RemoteImage] = []
    if event.thumb_url:
        images.append(RemoteImage(url=event.thumb_url, kind="primary"))
    if event.fanart_url:
        images.append(RemoteImage(url=event.fanart_url, kind="backdrop"))
    return images


def league_images(league: League) -> List[RemoteImage]:
    images: List[RemoteImage] = []
    primary = league.badge_url or league.logo_url
    if primary:
        images.append(RemoteImage(url=primary, kind="primary"))
    if league.fanart_url:
        images.append(RemoteImage(url=league.fanart_url, kind="backdrop"))
    return images


def build_episode_metadata(event: Event, tag: Optional[str] = None) -> EpisodeMetadata:
    """Map a matched event to episode metadata.

    Preliminary-card files never show the headline event's description, so
    their overview is empty. Everything else gets the truncated description.
    """
    overview = "" if is_preliminary_tag(tag) else truncate_description(event.description)
    return EpisodeMetadata(
        title=event.title,
        overview=overview,
        premiere_date=event.date,
        production_year=event.date.year if event.date else None,
        provider_ids={PROVIDER_NAME: event.id},
        images=event_images(event),
    )


def build_series_metadata(league: League) -> SeriesMetadata:
    return SeriesMetadata(
        name=league.name,
        overview=league.description,
        production_year=_parse_year(league.formed_year),
        homepage_url=normalize_homepage(league.website),
        provider_ids={PROVIDER_NAME: league.id},
        images=league_images(league),
    )


def league_search_results(leagues: Iterable[League]) -> List[RemoteSearchResult]:
    results: List[RemoteSearchResult] = []
    seen: set[str] = set()
    for league in leagues:
        if league.id in seen:
            continue
        seen.add(league.id)
        results.append(
            RemoteSearchResult(
                name=league.name,
                provider_ids={PROVIDER_NAME: league.id},
                production_year=_parse_year(league.formed_year),
                image_url=league.badge_url or league.logo_url,
            )
        )
    return results


def event_search_results(events: Iterable[Event]) -> List[RemoteSearchResult]:
    return [
        RemoteSearchResult(
            name=event.title,
            provider_ids={PROVIDER_NAME: event.id},
            production_year=event.date.year if event.date else None,
            premiere_date=event.date,
            image_url=event.thumb_url,
        )
        for event in events
    ]


__all__ = [
    "MAX_OVERVIEW_LENGTH",
    "build_episode_metadata",
    "build_series_metadata",
    "event_images",
    "event_search_results",
    "league_images",
    "league_search_results",
    "normalize_homepage",
    "truncate_description",
]
