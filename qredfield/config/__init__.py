"""Configuration package.

Exposes:
  - Module level defaults and their validation (``default_params``)
  - Structured dataclass configs (``MasterConfig`` and sections)
  - ``load_config`` (defaults + optional YAML/JSON file)
  - Logger helpers
"""

from __future__ import annotations

from .default_params import validate as validate_defaults
from .logging_setup import configure_logging, get_logger
from .models import BathConfig, MasterConfig, RedfieldConfig, SolverConfig
from .loader import load_config

__all__ = [
    # validation
    "validate_defaults",
    # logging
    "get_logger",
    "configure_logging",
    # models
    "RedfieldConfig",
    "SolverConfig",
    "BathConfig",
    "MasterConfig",
    # loader
    "load_config",
]
