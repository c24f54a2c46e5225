"""Read ``~/.config/dream-sequence-mcp/.env`` into the process environment.

The file is where the Gemini API key lives between runs; credential
reselection re-reads it with ``override=True`` after the user edits it.
"""

from __future__ import annotations

import os
from pathlib import Path

DEFAULT_ENV_PATH = Path.home() / ".config" / "dream-sequence-mcp" / ".env"

_QUOTES = ('"', "'")


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in _QUOTES:
        return value[1:-1]
    return value


def _needs_value(key: str, current: str | None) -> bool:
    """True when *current* is missing, blank, or an unexpanded ``$KEY``/``${KEY}``."""
    if current is None:
        return True
    current = _unquote(current.strip()).strip()
    return current in {"", f"${key}", f"${{{key}}}"} or (
        current.startswith(f"${{{key}:-") and current.endswith("}")
    )


def parse_dotenv(path: Path) -> dict[str, str]:
    """Return the ``KEY=VALUE`` pairs in *path* (empty when the file is missing)."""
    if not path.is_file():
        return {}

    pairs: dict[str, str] = {}
    for raw in path.read_text().splitlines():
        line = raw.strip().removeprefix("export ").strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        key = key.strip()
        if key:
            pairs[key] = _unquote(value.strip())
    return pairs


def load_dotenv(path: Path | None = None, *, override: bool = False) -> dict[str, str]:
    """Copy vars from *path* into ``os.environ`` and return the ones written.

    Without *override*, values already set in the environment win.
    """
    injected = {
        key: value
        for key, value in parse_dotenv(path or DEFAULT_ENV_PATH).items()
        if override or _needs_value(key, os.environ.get(key))
    }
    os.environ.update(injected)
    return injected
