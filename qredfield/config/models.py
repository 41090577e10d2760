"""Structured configuration models.

Typed, namespaced dataclass configuration objects wrapping the module-level
constants in ``default_params`` (which stay the single source of truth).

Usage:
    from qredfield.config import load_config
    cfg = load_config()
    cfg.validate()
    result = bloch_redfield_tensor(H, a_ops, **cfg.redfield.tensor_kwargs())
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence

import numpy as np

from .default_params import (
    USE_SECULAR,
    SECULAR_CUTOFF,
    TIDYUP_ATOL,
    SOLVER_OPTIONS,
    TRACE_TOLERANCE,
    SUPPORTED_BATHS,
    BATH_TYPE,
    BATH_TEMP,
    BATH_CUTOFF,
    BATH_COUPLING,
    BATH_EXPONENT,
)


@dataclass(slots=True)
class RedfieldConfig:
    """Redfield tensor assembly settings."""

    use_secular: bool = USE_SECULAR
    secular_cutoff: float = SECULAR_CUTOFF
    tidyup_atol: Optional[float] = TIDYUP_ATOL

    def validate(self) -> None:
        if self.use_secular and (
            not np.isfinite(self.secular_cutoff) or self.secular_cutoff <= 0
        ):
            raise ValueError("RedfieldConfig: secular_cutoff must be positive and finite")
        if self.tidyup_atol is not None and self.tidyup_atol < 0:
            raise ValueError("RedfieldConfig: tidyup_atol must be non-negative")

    def tensor_kwargs(self) -> dict:
        return {
            "use_secular": self.use_secular,
            "secular_cutoff": self.secular_cutoff,
            "tidyup_atol": self.tidyup_atol,
        }


@dataclass(slots=True)
class SolverConfig:
    """Integrator options & numerical tolerances."""

    solver_options: Mapping[str, Any] = field(
        default_factory=lambda: dict(SOLVER_OPTIONS)
    )
    trace_tolerance: float = TRACE_TOLERANCE

    def validate(self) -> None:
        for key in ("atol", "rtol"):
            if key in self.solver_options and self.solver_options[key] <= 0:
                raise ValueError(f"SolverConfig: {key} must be positive")
        if self.trace_tolerance <= 0:
            raise ValueError("SolverConfig: trace_tolerance must be positive")


@dataclass(slots=True)
class BathConfig:
    """Bath / environment parameters."""

    bath_type: str = BATH_TYPE
    temperature: float = BATH_TEMP
    cutoff: float = BATH_CUTOFF
    coupling: float = BATH_COUPLING
    exponent: float = BATH_EXPONENT
    supported_baths: Sequence[str] = field(
        default_factory=lambda: list(SUPPORTED_BATHS)
    )

    def validate(self) -> None:
        if self.bath_type not in self.supported_baths:
            raise ValueError(
                f"BathConfig: bath_type '{self.bath_type}' not in {self.supported_baths}"
            )
        if self.temperature < 0:
            raise ValueError("BathConfig: temperature must be non-negative")
        if self.cutoff <= 0:
            raise ValueError("BathConfig: cutoff must be positive")
        if self.coupling < 0:
            raise ValueError("BathConfig: coupling must be non-negative")
        if self.exponent < 1:
            raise ValueError("BathConfig: exponent must be >= 1")

    def args(self) -> dict:
        """Argument dict in the format of the bath functions."""
        return {
            "alpha": self.coupling,
            "cutoff": self.cutoff,
            "temp": self.temperature,
            "s": self.exponent,
            "value": self.coupling,
        }

    def spectrum(self):
        """One-argument power spectrum S(w) for ``InteractionSpec``."""
        # lazy import: config must stay importable without the core package
        from qredfield.core.bath_system.bath_fcts import make_spectrum

        return make_spectrum(self.bath_type, self.args())


@dataclass(slots=True)
class MasterConfig:
    """Aggregate structured configuration."""

    redfield: RedfieldConfig = field(default_factory=RedfieldConfig)
    solver: SolverConfig = field(default_factory=SolverConfig)
    bath: BathConfig = field(default_factory=BathConfig)

    @classmethod
    def from_defaults(cls) -> "MasterConfig":
        return cls()

    def validate(self) -> None:
        self.redfield.validate()
        self.solver.validate()
        self.bath.validate()

    def summary(self) -> str:
        return (
            "MasterConfig Summary:\n"
            "-------------------------------\n"
            f"Secular approx.    : {self.redfield.use_secular}\n"
            f"Secular cutoff     : {self.redfield.secular_cutoff}\n"
            f"Tidyup atol        : {self.redfield.tidyup_atol}\n"
            "-------------------------------\n"
            f"Solver options     : {dict(self.solver.solver_options)}\n"
            "-------------------------------\n"
            f"Bath type          : {self.bath.bath_type}\n"
            f"Temperature        : {self.bath.temperature}\n"
            f"Cutoff             : {self.bath.cutoff}\n"
            f"Coupling           : {self.bath.coupling}\n"
            "-------------------------------\n"
        )

    def __str__(self) -> str:  # pragma: no cover simple repr
        return self.summary()


__all__ = ["RedfieldConfig", "SolverConfig", "BathConfig", "MasterConfig"]
