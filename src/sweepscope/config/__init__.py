"""Configuration objects and helpers for SweepScope.

:mod:`runtime` loads/saves the YAML file holding filter, history and replay
settings as a typed :class:`SweepConfig`; :mod:`app_config` resolves where
recordings and the config file live on disk.
"""

from .app_config import AppPaths
from .runtime import SweepConfig, config_from_mapping, load_config, save_config

__all__ = ["AppPaths", "SweepConfig", "config_from_mapping", "load_config", "save_config"]
