"""
QRedfield - Bloch-Redfield master equations in the Hamiltonian eigenbasis

A Python package for open-quantum-system dynamics under the Bloch-Redfield
approximation. This package provides tools for:

- Assembling the Redfield relaxation tensor (optionally secular) together
  with unitary and Lindblad terms into one Liouville-space generator
- Propagating density matrices with that generator, transforming to and
  from the eigenbasis of the system Hamiltonian
- Bosonic bath spectra (ohmic, Drude-Lorentz, flat)
- Configuration management and logging

Main subpackages:
- core: eigenbasis, generators, time evolution, bath spectra
- config: defaults, structured configuration, loader, logging
"""

__version__ = "0.1.0"  # Keep in sync with setup.py
__author__ = "Leopold"
__email__ = ""


# LAZY CORE IMPORTS (QuTiP import deferred until first use)


def __getattr__(name):  # PEP 562 lazy attribute loading
    if name in {
        "ConfigurationError",
        "PhysicalModelWarning",
        "EigenbasisMap",
        "eigen_decompose",
        "InteractionSpec",
        "RedfieldResult",
        "bloch_redfield_tensor",
        "bloch_redfield_tensor_from_config",
        "EvolutionResult",
        "master_bloch_redfield",
        "master_bloch_redfield_from_config",
        "make_spectrum",
    }:
        from . import core as _core

        return getattr(_core, name)

    if name in {"load_config", "MasterConfig", "configure_logging"}:
        from . import config as _config

        return getattr(_config, name)

    raise AttributeError(f"module 'qredfield' has no attribute '{name}'")
