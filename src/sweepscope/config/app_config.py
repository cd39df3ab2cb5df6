"""Default application paths."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class AppPaths:
    """
    Commonly used paths for the application.

    ``SWEEPSCOPE_DATA_ROOT`` and ``SWEEPSCOPE_CONFIG`` override the default
    ``data`` folder and ``sweepscope.yaml`` location relative to the
    repository root so that packaged installs can keep files elsewhere.
    """

    # repo_root points at the project root (one level above src/)
    repo_root: Path = Path(__file__).resolve().parents[3]
    data_root: Path = field(init=False)
    recordings: Path = field(init=False)
    config_file: Path = field(init=False)

    def __post_init__(self) -> None:
        env_data_root = os.environ.get("SWEEPSCOPE_DATA_ROOT")
        if env_data_root:
            self.data_root = Path(env_data_root).expanduser()
        else:
            self.data_root = self.repo_root / "data"

        env_config = os.environ.get("SWEEPSCOPE_CONFIG")
        if env_config:
            self.config_file = Path(env_config).expanduser()
        else:
            self.config_file = self.repo_root / "sweepscope.yaml"

        self.recordings = self.data_root / "recordings"

    def ensure(self) -> None:
        """Create directories if they do not yet exist."""
        for path in (self.data_root, self.recordings):
            path.mkdir(parents=True, exist_ok=True)
