"""Configuration loader (defaults + optional explicit file).

Returns a ``MasterConfig`` constructed from:
    1. Built-in defaults (dataclass defaults from ``default_params``)
    2. Optional config file passed via ``path=`` (YAML/JSON), deep-merged

Usage examples::

    from qredfield.config.loader import load_config

    # Defaults only
    cfg = load_config()

    # Merge explicit file over defaults
    cfg = load_config(path="redfield.yaml")

Call ``cfg.validate()`` explicitly for strict validation.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, MutableMapping

import yaml

from .models import MasterConfig


def _deep_merge(base: MutableMapping[str, Any], upd: Mapping[str, Any]) -> None:
    """Deep in-place merge of ``upd`` into ``base`` (section-wise)."""
    for k, v in upd.items():
        if isinstance(v, Mapping) and isinstance(base.get(k), Mapping):
            _deep_merge(base[k], v)  # type: ignore[index]
        else:
            base[k] = v  # type: ignore[index]


def _as_dict(cfg: MasterConfig) -> dict:
    """Convert MasterConfig dataclass tree to nested dict."""
    return {
        "redfield": dict(
            use_secular=cfg.redfield.use_secular,
            secular_cutoff=cfg.redfield.secular_cutoff,
            tidyup_atol=cfg.redfield.tidyup_atol,
        ),
        "solver": dict(
            solver_options=dict(cfg.solver.solver_options),
            trace_tolerance=cfg.solver.trace_tolerance,
        ),
        "bath": dict(
            bath_type=cfg.bath.bath_type,
            temperature=cfg.bath.temperature,
            cutoff=cfg.bath.cutoff,
            coupling=cfg.bath.coupling,
            exponent=cfg.bath.exponent,
        ),
    }


def _dict_to_config(cfg_dict: Mapping[str, Any]) -> MasterConfig:
    """Instantiate MasterConfig from nested dict (expects same shape as _as_dict)."""
    base = MasterConfig.from_defaults()
    # redfield
    r = cfg_dict.get("redfield", {})
    base.redfield.use_secular = bool(r.get("use_secular", base.redfield.use_secular))
    base.redfield.secular_cutoff = float(
        r.get("secular_cutoff", base.redfield.secular_cutoff)
    )
    base.redfield.tidyup_atol = r.get("tidyup_atol", base.redfield.tidyup_atol)
    # solver
    so = cfg_dict.get("solver", {})
    base.solver.solver_options = dict(so.get("solver_options", base.solver.solver_options))
    base.solver.trace_tolerance = so.get("trace_tolerance", base.solver.trace_tolerance)
    # bath
    b = cfg_dict.get("bath", {})
    base.bath.bath_type = b.get("bath_type", base.bath.bath_type)
    base.bath.temperature = b.get("temperature", base.bath.temperature)
    base.bath.cutoff = b.get("cutoff", base.bath.cutoff)
    base.bath.coupling = b.get("coupling", base.bath.coupling)
    base.bath.exponent = b.get("exponent", base.bath.exponent)
    return base


def _load_file(path: Path) -> dict:
    if not path.exists():
        raise FileNotFoundError(path)
    suffix = path.suffix.lower()
    if suffix in {".yml", ".yaml"}:
        with path.open("r", encoding="utf-8") as fh:
            return yaml.safe_load(fh) or {}
    if suffix == ".json":
        with path.open("r", encoding="utf-8") as fh:
            return json.load(fh)
    raise ValueError(f"Unsupported config file extension: {suffix}")


def load_config(path: str | Path | None = None) -> MasterConfig:
    """Load configuration from defaults and optionally merge an explicit file.

    Parameters
    ----------
    path:
        Optional config file (YAML / JSON). Values from the file are
        deep-merged over defaults. If None, pure defaults are returned.
    """
    cfg_dict = _as_dict(MasterConfig.from_defaults())

    if path is not None:
        _deep_merge(cfg_dict, _load_file(Path(path)))

    return _dict_to_config(cfg_dict)


__all__ = ["load_config"]
