"""Exception and warning types shared by the Bloch-Redfield components."""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Fatal input/configuration problem; no partial generator is produced.

    Raised for Hilbert-space dimension mismatches, non-square operators,
    eigensolver failures, a secular cutoff on a fully degenerate spectrum
    and malformed time grids.
    """


class PhysicalModelWarning(UserWarning):
    """Non-fatal: the model is questionable but the computation proceeds."""


__all__ = ["ConfigurationError", "PhysicalModelWarning"]
