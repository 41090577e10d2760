"""
Core module for qredfield package.

This module provides the building blocks of Bloch-Redfield dynamics:
- Hamiltonian eigen-decomposition and basis transforms
- Baseline Liouvillian (unitary part + Lindblad dissipators)
- Redfield tensor assembly with optional secular approximation
- Time evolution in the Hamiltonian eigenbasis
- Bath spectral densities and power spectra
"""

# ERRORS
from .errors import ConfigurationError, PhysicalModelWarning

# EIGENBASIS
from .eigenbasis import EigenbasisMap, eigen_decompose, transition_frequencies

# GENERATORS
from .liouvillian import baseline_generator
from .redfield import (
    InteractionSpec,
    RedfieldResult,
    bloch_redfield_tensor,
    bloch_redfield_tensor_from_config,
)

# TIME EVOLUTION
from .evolution import (
    EvolutionResult,
    master_bloch_redfield,
    master_bloch_redfield_from_config,
)

# BATH SYSTEMS
from .bath_system import (
    power_spectrum_func_ohmic,
    power_spectrum_func_drude_lorentz,
    power_spectrum_func_flat,
    make_spectrum,
)


# PUBLIC API

__all__ = [
    # Errors
    "ConfigurationError",
    "PhysicalModelWarning",
    # Eigenbasis
    "EigenbasisMap",
    "eigen_decompose",
    "transition_frequencies",
    # Generators
    "baseline_generator",
    "InteractionSpec",
    "RedfieldResult",
    "bloch_redfield_tensor",
    "bloch_redfield_tensor_from_config",
    # Time evolution
    "EvolutionResult",
    "master_bloch_redfield",
    "master_bloch_redfield_from_config",
    # Bath spectra
    "power_spectrum_func_ohmic",
    "power_spectrum_func_drude_lorentz",
    "power_spectrum_func_flat",
    "make_spectrum",
]
