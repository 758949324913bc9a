"""Team abbreviation expansion for ``A vs B`` style titles."""

from __future__ import annotations

import logging
import re
from typing import Optional, Pattern, Tuple

from .lookup_store import LookupStore
from .team_codes import has_team_code_map, lookup_team_code

LOGGER = logging.getLogger(__name__)

# Tried in order; a separator only counts when it splits the title in exactly two.
_MATCHUP_SEPARATORS: Tuple[Pattern[str], ...] = (
    re.compile(r"\s+(?:vs|v|versus|at)\.?\s+|\s*@\s*", re.IGNORECASE),
    re.compile(r"\s*-\s*"),
)

_TEAM_CODE = re.compile(r"[A-Za-z]{2,4}")
_SEPARATOR_WORDS = frozenset({"vs", "v", "versus", "at"})


def split_matchup(title: str) -> Optional[Tuple[str, str]]:
    """Split ``title`` into its two sides, or return None when it is not a matchup.

    Explicit separators (``vs``, ``@``, a hyphen) are tried first. A title
    with none of them splits on whitespace when it is exactly two words, so
    dotted release names such as ``EDM.PIT`` still pair up.
    """
    if not title:
        return None
    title = title.strip()
    separated = False
    for pattern in _MATCHUP_SEPARATORS:
        parts = [part.strip() for part in pattern.split(title)]
        if len(parts) == 2 and all(parts):
            return parts[0], parts[1]
        separated = separated or len(parts) > 1
    if separated:
        return None
    words = title.split()
    if len(words) == 2 and not any(word.casefold() in _SEPARATOR_WORDS for word in words):
        return words[0], words[1]
    return None


def expand_team_token(
    token: str,
    league_id: Optional[str] = None,
    lookup_store: Optional[LookupStore] = None,
) -> str:
    """Expand a single team code, returning ``token`` unchanged when nothing knows it."""
    if not _TEAM_CODE.fullmatch(token):
        return token

    # A league without its own table never borrows another sport's codes.
    if league_id is None or has_team_code_map(league_id):
        expanded = lookup_team_code(token, league_id)
        if expanded:
            return expanded

    if lookup_store is not None:
        full_name = lookup_store.find_team_full_name(token, league_id)
        if full_name:
            return full_name
    return token


def expand_abbreviations(
    title: str,
    league_id: Optional[str] = None,
    lookup_store: Optional[LookupStore] = None,
) -> str:
    """Expand team codes on both sides of a matchup title.

    ``"EDM-PIT"`` with the NHL league id becomes
    ``"Edmonton Oilers vs Pittsburgh Penguins"``. A side that cannot be
    expanded is kept as written; when neither side changes, the original
    title is returned untouched.
    """
    parts = split_matchup(title)
    if parts is None:
        return title

    home, away = parts
    expanded_home = expand_team_token(home, league_id, lookup_store)
    expanded_away = expand_team_token(away, league_id, lookup_store)
    if expanded_home == home and expanded_away == away:
        return title

    expanded = f"{expanded_home} vs {expanded_away}"
    LOGGER.debug("Expanded %r to %r (league=%s)", title, expanded, league_id or "any")
    return expanded


__all__ = ["expand_abbreviations", "expand_team_token", "split_matchup"]
