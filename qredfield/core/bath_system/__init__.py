"""
Bath system module for qredfield package.

This module provides spectral densities and power spectra of bosonic baths,
and a factory binding their parameters into one-argument spectra for the
Bloch-Redfield tensor.

"""

# BATH FUNCTIONS

from .bath_fcts import (
    spectral_density_func_ohmic,
    spectral_density_func_drude_lorentz,
    power_spectrum_func_ohmic,
    power_spectrum_func_drude_lorentz,
    power_spectrum_func_flat,
    make_spectrum,
    POWER_SPECTRA,
)


# PUBLIC API

__all__ = [
    # spectral densities
    "spectral_density_func_ohmic",
    "spectral_density_func_drude_lorentz",
    # power spectra
    "power_spectrum_func_ohmic",
    "power_spectrum_func_drude_lorentz",
    "power_spectrum_func_flat",
    # factory
    "make_spectrum",
    "POWER_SPECTRA",
]
