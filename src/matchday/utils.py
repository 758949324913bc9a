from __future__ import annotations

import functools
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import yaml

WHITESPACE_PATTERN = re.compile(r"\s+")


@functools.lru_cache(maxsize=4096)
def normalize_token(value: str) -> str:
    """Return the canonical form of ``value``: alphanumerics only, case folded.

    ``"Dallas Stars vs. Boston Bruins!"`` and ``"dallas stars vs boston bruins"``
    share the same canonical form.
    """
    return "".join(ch for ch in value.casefold() if ch.isalnum())


def collapse_whitespace(value: str) -> str:
    return WHITESPACE_PATTERN.sub(" ", value).strip()


def expand_env(value: Any) -> Any:
    if isinstance(value, str):
        return os.path.expandvars(value)
    if isinstance(value, list):
        return [expand_env(item) for item in value]
    if isinstance(value, dict):
        return {key: expand_env(val) for key, val in value.items()}
    return value


def load_yaml_file(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    return expand_env(data)


def env_str(name: str) -> Optional[str]:
    """Get a non-empty, stripped string from an environment variable.

    Returns None if the variable is unset or blank.
    """
    raw = os.getenv(name)
    if raw is None:
        return None
    stripped = raw.strip()
    return stripped or None


def validate_url(url: Optional[str]) -> bool:
    """Validate that URL is a valid http/https URL."""
    if not url:
        return False
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)
