"""Signal analysis utilities for sweep samples.

Modules here stay free of Qt and I/O dependencies: :mod:`adaptive_filter`
cleans individual distance readings per angle and :mod:`rate` estimates the
effective sample rate. Both can be reused from scripts, tests, or the GUI.
"""

from .adaptive_filter import AdaptiveFilter
from .rate import RateController

__all__ = ["AdaptiveFilter", "RateController"]
