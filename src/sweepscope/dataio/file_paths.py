"""Helpers for constructing session file paths."""

import re
from datetime import datetime
from pathlib import Path

from ..config.app_config import AppPaths

SESSION_SUFFIX = ".txt"

# Allow only alphanumerics, underscore, dot, and dash.
_SESSION_NAME_RE = re.compile(r"[^A-Za-z0-9_.-]+")


def _sanitize_session_name(name: str) -> str:
    """
    Sanitize a session name for use in a file name.

    - Replace disallowed characters with '_'.
    - Strip leading/trailing underscores.
    - Fall back to 'session' if nothing remains.
    """
    cleaned = _SESSION_NAME_RE.sub("_", name).strip("_")
    return cleaned or "session"


def session_file(name: str = "sweep", base: Path | None = None) -> Path:
    """
    Build a timestamped path for a recorded session.

    Example: "sweep_20251204_153045.txt"
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    root = base or AppPaths().recordings
    safe_name = _sanitize_session_name(name)
    return root / f"{safe_name}_{timestamp}{SESSION_SUFFIX}"
