"""Core physical constants.

Lightweight module: safe to import from any layer without triggering
expensive or circular imports. Keep ONLY primitive constants here.
"""

from __future__ import annotations

# Natural units throughout the package: energies and angular frequencies
# share one scale, so H eigenvalues are transition frequencies directly.
HBAR: float = 1.0  # Reduced Planck constant
BOLTZMANN: float = 1.0  # Boltzmann constant


__all__ = ["HBAR", "BOLTZMANN"]
