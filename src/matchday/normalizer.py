"""Filename cleaning for event search.

Turns a release-style filename such as
``"NHL.2026.01.22.Edmonton.Oilers.vs.Pittsburgh.Penguins.720p.WEB.h264.mkv"``
into a search title (``"Edmonton Oilers vs Pittsburgh Penguins"``), at most one
date, and an optional card/segment tag (``"prelims"``, ``"main card"``).

Every stripping step uses a fixed pattern list; words no pattern recognises
are left in the title.
"""

from __future__ import annotations

import datetime as dt
import re
from collections.abc import Iterable
from typing import List, Optional, Pattern, Tuple

from .models import CleanedName
from .utils import collapse_whitespace

VIDEO_EXTENSIONS = frozenset(
    {".mkv", ".mp4", ".avi", ".ts", ".m2ts", ".m4v", ".mov", ".wmv", ".webm", ".mpg", ".mpeg", ".flv"}
)

# Days ahead of today a filename date may lie before it is considered implausible.
FUTURE_TOLERANCE_DAYS = 7

_SHORTHAND: Tuple[Tuple[Pattern[str], str], ...] = (
    (re.compile(r"\butd\b", re.IGNORECASE), "United"),
)

# Card/segment tags, most specific first.
_TAG_PATTERNS: Tuple[Tuple[Pattern[str], str], ...] = (
    (re.compile(r"\bearly[\s._-]*prelim(?:inary|inaries|s)?\b(?:[\s._-]*card)?", re.IGNORECASE), "early prelims"),
    (re.compile(r"\bprelim(?:inary|inaries|s)?\b(?:[\s._-]*card)?", re.IGNORECASE), "prelims"),
    (re.compile(r"\bmain[\s._-]*card\b", re.IGNORECASE), "main card"),
    (re.compile(r"\bweigh[\s._-]*ins?\b", re.IGNORECASE), "weigh-ins"),
    (re.compile(r"\bpress[\s._-]*conference\b", re.IGNORECASE), "press conference"),
)

PRELIMINARY_TAGS = frozenset({"prelims", "early prelims"})

_ROUND_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"\b(?:round|rd|week|wk|matchday|md|gameweek|gw|game|leg|stage)\s*\d{1,3}\b", re.IGNORECASE),
    re.compile(r"\b(?:quarter|semi)[\s-]*finals?\b", re.IGNORECASE),
    # SF is also a team code; QF/SF only count as markers with a leg number.
    re.compile(r"\b(?:qf|sf)[\s-]*\d\b", re.IGNORECASE),
    re.compile(r"\b(?:r16|r32)\b", re.IGNORECASE),
)

_SCENE_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"\[[^\]]*\]"),
    # resolution
    re.compile(r"\b(?:2160|1440|1080|720|576|540|480|360)[pi]\b", re.IGNORECASE),
    re.compile(r"\b(?:4k|uhd|fhd|hd)\b", re.IGNORECASE),
    # codec
    re.compile(r"\b[xh][\s-]?26[45]\b", re.IGNORECASE),
    re.compile(r"\b(?:hevc|avc|av1|xvid|divx|vp9)\b", re.IGNORECASE),
    # source
    re.compile(r"\b(?:web[\s-]?dl|web[\s-]?rip|web|hdtv|pdtv|sdtv|hdrip|blu[\s-]?ray|bdrip|brrip|dvdrip|iptv)\b", re.IGNORECASE),
    # audio
    re.compile(r"\b(?:e?ac3|aac(?:lc)?|ddp?|dts(?:[\s-]?hd)?|truehd|atmos|flac|opus|mp3)(?:\s?[257]\s[01])?\b", re.IGNORECASE),
    re.compile(r"\b[26]ch\b", re.IGNORECASE),
    # dynamic range / bit depth
    re.compile(r"\b(?:hdr10\+?|hdr|sdr|dv|dolby\s?vision|10bit|8bit)\b", re.IGNORECASE),
    # frame rate
    re.compile(r"\b\d{2,3}\s?fps\b", re.IGNORECASE),
    # release markers
    re.compile(r"\b(?:repack\d?|proper|internal|rerip|readnfo)\b", re.IGNORECASE),
    # broadcasters
    re.compile(
        r"\b(?:sky\s?sports|sky|fubo|espn\+?|espnplus|tsn\d?|sportsnet|nbcsn|fox|dazn|bt\s?sport|tnt\s?sports|peacock|verum)(?=\W|$)",
        re.IGNORECASE,
    ),
)

KNOWN_LEAGUE_NAMES: Tuple[str, ...] = (
    "English Premier League",
    "UEFA Champions League",
    "Champions League",
    "Premier League",
    "La Liga",
    "LaLiga",
    "Bundesliga",
    "Serie A",
    "Ligue 1",
    "Formula 1",
    "Bellator",
    "WNBA",
    "NHL",
    "NFL",
    "NBA",
    "MLB",
    "MLS",
    "EPL",
    "UFC",
    "UCL",
    "PFL",
    "F1",
)

_YMD_PATTERN = re.compile(r"(?<!\d)(?P<y>\d{4})[\s/-](?P<m>\d{1,2})[\s/-](?P<d>\d{1,2})(?!\d)")
_DMY_PATTERN = re.compile(r"(?<!\d)(?P<a>\d{1,2})[\s/-](?P<b>\d{1,2})[\s/-](?P<y>\d{4})(?!\d)")
_YEAR_PATTERN = re.compile(r"(?<!\d)(?:19|20)\d{2}(?!\d)")
_PAIR_PATTERN = re.compile(r"(?<!\d)(?P<a>\d{1,2})[\s/-](?P<b>\d{1,2})(?!\d)")

_REPEATED_SEPARATORS = re.compile(r"\s*-\s*(?:-\s*)+")
_EMPTY_PARENS = re.compile(r"\(\s*\)")
_EDGE_PUNCTUATION = " -_.,;:|/"


def _coerce_date(year: int, month: int, day: int) -> Optional[dt.date]:
    try:
        return dt.date(year, month, day)
    except ValueError:
        return None


def resolve_ambiguous_date(first: int, second: int, year: int, today: Optional[dt.date] = None) -> Optional[dt.date]:
    """Pick between the day-first and month-first readings of ``first``/``second``.

    Readings that are not calendar dates are dropped. The reading closest to
    ``today`` wins. On equal distance a reading no more than
    ``FUTURE_TOLERANCE_DAYS`` ahead of ``today`` beats one further ahead,
    then day-first beats month-first.
    """
    today = today or dt.date.today()
    candidates: List[dt.date] = []
    for candidate in (_coerce_date(year, second, first), _coerce_date(year, first, second)):
        if candidate is not None and candidate not in candidates:
            candidates.append(candidate)
    if len(candidates) <= 1:
        return candidates[0] if candidates else None

    horizon = today + dt.timedelta(days=FUTURE_TOLERANCE_DAYS)
    ranked = sorted(
        enumerate(candidates),
        key=lambda item: (abs((item[1] - today).days), item[1] > horizon, item[0]),
    )
    return ranked[0][1]


def extract_date(text: str, today: Optional[dt.date] = None) -> Tuple[Optional[dt.date], str]:
    """Find at most one date in ``text`` and return it with the remaining text.

    Forms are tried in priority order: ``YYYY-MM-DD``, ``DD-MM-YYYY``, then a
    bare ``YYYY`` combined with a ``DD MM`` pair elsewhere in the text. Bare
    years are stripped whether or not a date was found.
    """
    for match in _YMD_PATTERN.finditer(text):
        parsed = _coerce_date(int(match.group("y")), int(match.group("m")), int(match.group("d")))
        if parsed is not None:
            remaining = text[: match.start()] + " " + text[match.end() :]
            return parsed, _YEAR_PATTERN.sub(" ", remaining)

    for match in _DMY_PATTERN.finditer(text):
        parsed = resolve_ambiguous_date(int(match.group("a")), int(match.group("b")), int(match.group("y")), today)
        if parsed is not None:
            remaining = text[: match.start()] + " " + text[match.end() :]
            return parsed, _YEAR_PATTERN.sub(" ", remaining)

    year_match = _YEAR_PATTERN.search(text)
    if year_match is None:
        return None, text
    year = int(year_match.group(0))
    remaining = _YEAR_PATTERN.sub(" ", text)
    for match in _PAIR_PATTERN.finditer(remaining):
        parsed = resolve_ambiguous_date(int(match.group("a")), int(match.group("b")), year, today)
        if parsed is not None:
            return parsed, remaining[: match.start()] + " " + remaining[match.end() :]
    return None, remaining


def detect_tag(raw: str) -> Optional[str]:
    """Return the card/segment tag named in ``raw``, if any."""
    for pattern, tag in _TAG_PATTERNS:
        if pattern.search(raw):
            return tag
    return None


def is_preliminary_tag(tag: Optional[str]) -> bool:
    return bool(tag) and tag in PRELIMINARY_TAGS


def _name_pattern(name: str) -> Optional[Pattern[str]]:
    words = [re.escape(word) for word in re.split(r"[\s._-]+", name.strip()) if word]
    if not words:
        return None
    return re.compile(r"(?<![A-Za-z0-9])" + r"[\s._-]+".join(words) + r"(?![A-Za-z0-9])", re.IGNORECASE)


_KNOWN_LEAGUE_PATTERNS: Tuple[Pattern[str], ...] = tuple(
    pattern for pattern in (_name_pattern(name) for name in KNOWN_LEAGUE_NAMES) if pattern is not None
)


def _strip_patterns(text: str, patterns: Iterable[Pattern[str]]) -> str:
    for pattern in patterns:
        text = pattern.sub(" ", text)
    return text


def strip_extension(raw: str) -> str:
    """Drop any directory portion and a known video extension."""
    name = re.split(r"[\\/]", raw)[-1]
    stem, dot, extension = name.rpartition(".")
    if dot and stem and f".{extension.lower()}" in VIDEO_EXTENSIONS:
        return stem
    return name


def tidy_title(text: str) -> str:
    text = _EMPTY_PARENS.sub(" ", text)
    text = _REPEATED_SEPARATORS.sub(" - ", text)
    text = collapse_whitespace(text)
    return text.strip(_EDGE_PUNCTUATION)


def clean_filename(
    raw: str,
    series_name: Optional[str] = None,
    *,
    today: Optional[dt.date] = None,
) -> CleanedName:
    """Clean ``raw`` into a search title, an optional date and an optional tag.

    Args:
        raw: Filename, with or without directory and extension
        series_name: Series/league folder name to strip from the title
        today: Reference date for ambiguous day/month readings

    Returns:
        CleanedName with the title, extracted date and detected tag
    """
    name = strip_extension(raw)
    tag = detect_tag(name)

    text = re.sub(r"[._]+", " ", name)
    for pattern, replacement in _SHORTHAND:
        text = pattern.sub(replacement, text)

    text = _strip_patterns(text, (pattern for pattern, _ in _TAG_PATTERNS))
    text = _strip_patterns(text, _ROUND_PATTERNS)
    text = _strip_patterns(text, _SCENE_PATTERNS)

    if series_name:
        series_pattern = _name_pattern(series_name)
        if series_pattern is not None:
            text = series_pattern.sub(" ", text)
    text = _strip_patterns(text, _KNOWN_LEAGUE_PATTERNS)

    date, text = extract_date(text, today)
    return CleanedName(title=tidy_title(text), date=date, tag=tag)


__all__ = [
    "FUTURE_TOLERANCE_DAYS",
    "KNOWN_LEAGUE_NAMES",
    "PRELIMINARY_TAGS",
    "clean_filename",
    "detect_tag",
    "extract_date",
    "is_preliminary_tag",
    "resolve_ambiguous_date",
    "strip_extension",
    "tidy_title",
]
