import numpy as np
from functools import partial
from qutip.utilities import n_thermal

from qredfield.constants import BOLTZMANN, HBAR

"""

This module contains spectral densities J(w) and bath power spectra S(w) for
bosonic baths (ohmic and Drude-Lorentz) plus a flat spectrum. The power
spectra are what the Bloch-Redfield tensor samples at the transition
frequencies; ``make_spectrum`` turns them into one-argument callables.

    S(w) = 2 J(w) (n_th(w) + 1)    for w > 0
    S(w) = 2 J(|w|) n_th(|w|)      for w < 0   (detailed balance)

"""


def spectral_density_func_ohmic(w, args):
    """
    Spectral density function for an ohmic bath.
    Compatible with scalar and array inputs.
    Zero for w <= 0.
    """
    wc = args["cutoff"]
    alpha = args["alpha"]
    s = args["s"] if "s" in args else 1.0  # Default to ohmic (s=1)

    w_input = w  # Store original input
    w = np.asarray(w, dtype=float)
    w_pos = np.where(w > 0, w, 0.0)
    result = alpha * w_pos**s / wc ** (s - 1) * np.exp(-w_pos / wc) * (w > 0)

    # Return scalar if input was scalar
    if np.isscalar(w_input):
        return float(result)
    return result


def spectral_density_func_drude_lorentz(w, args):
    """
    Spectral density function for a Drude-Lorentz bath.
    Compatible with scalar and array inputs.
    """
    alpha = args["alpha"]
    cutoff = args["cutoff"]
    lambda_ = alpha * cutoff / 2  # Reorganization energy (coupling strength)
    gamma = cutoff  # Drude decay rate (cutoff frequency)

    w_input = w
    w = np.asarray(w, dtype=float)
    result = (2 * lambda_ * gamma * w) / (w**2 + gamma**2)

    if np.isscalar(w_input):
        return float(result)
    return result


def _thermal_power_spectrum(w, args, spectral_density, zero_limit):
    """S(w) from J(w) with the Bose-Einstein occupation; S(0) = ``zero_limit``."""
    temp = args["temp"]
    Boltzmann = args["Boltzmann"] if "Boltzmann" in args else BOLTZMANN
    hbar = args["hbar"] if "hbar" in args else HBAR
    w_th = Boltzmann * temp / hbar  # Thermal energy in frequency units

    w_input = w
    w = np.atleast_1d(np.asarray(w, dtype=float))
    result = np.zeros_like(w)

    # Positive frequency: emission into the bath
    pos_mask = w > 0
    result[pos_mask] = (
        2
        * spectral_density(w[pos_mask], args)
        * (1 + n_thermal(w[pos_mask], w_th))
    )

    # Negative frequency: absorption, vanishes at zero temperature
    neg_mask = w < 0
    if w_th > 0:
        result[neg_mask] = (
            2 * spectral_density(-w[neg_mask], args) * n_thermal(-w[neg_mask], w_th)
        )

    result[w == 0] = zero_limit(w_th)

    if np.isscalar(w_input):
        return float(result[0])
    return result.reshape(np.shape(w_input))


def power_spectrum_func_ohmic(w, args):
    """
    power spectrum function in the frequency domain for an ohmic bath.
    Handles both positive and negative frequencies, compatible with arrays.
    """
    s = args["s"] if "s" in args else 1.0
    if s < 1:
        raise ValueError(f"Ohmic power spectrum diverges at w=0 for s={s} < 1")

    def zero_limit(w_th):
        # J(w) n_th(w) -> alpha * w_th for s = 1, -> 0 for s > 1
        return 2 * args["alpha"] * w_th if s == 1 else 0.0

    return _thermal_power_spectrum(w, args, spectral_density_func_ohmic, zero_limit)


def power_spectrum_func_drude_lorentz(w, args):
    """
    power spectrum function in the frequency domain for a Drude-Lorentz bath.
    Handles both positive and negative frequencies, compatible with arrays.
    """

    def zero_limit(w_th):
        # J(w) n_th(w) -> 2 lambda w_th / gamma, with lambda = alpha*cutoff/2, gamma = cutoff
        return 2 * args["alpha"] * w_th

    return _thermal_power_spectrum(
        w, args, spectral_density_func_drude_lorentz, zero_limit
    )


def power_spectrum_func_flat(w, args):
    """
    Frequency independent (white noise) spectrum, S(w) = value.
    """
    value = args["value"] if "value" in args else 1.0
    if np.isscalar(w):
        return float(value)
    return np.full(np.shape(w), float(value))


# =============================
# SPECTRUM FACTORY
# =============================
POWER_SPECTRA = {
    "ohmic": power_spectrum_func_ohmic,
    "dl": power_spectrum_func_drude_lorentz,
    "flat": power_spectrum_func_flat,
}


def make_spectrum(bath_type, args):
    """
    Bind ``args`` to a power spectrum, giving a callable of the angular
    frequency only (as expected by ``InteractionSpec``).

    Parameters:
        bath_type (str): "ohmic", "dl" or "flat".
        args (dict): Arguments for the bath function.

    Returns:
        functools.partial: S(w), picklable.

    Raises:
        ValueError: If the bath type is unknown.
    """
    if bath_type not in POWER_SPECTRA:
        raise ValueError(
            f"Unknown bath type: {bath_type}. Valid types are {sorted(POWER_SPECTRA)}."
        )
    return partial(POWER_SPECTRA[bath_type], args=dict(args))
