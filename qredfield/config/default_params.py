"""
Default parameters for qredfield.

This module contains default values for the Redfield tensor, the time
integration and the bath model. Centralizing these constants makes them
easier to maintain; the dataclasses in ``models`` take their defaults from
here.
"""

import numpy as np


# =============================
# redfield tensor defaults
# =============================
USE_SECULAR = True
SECULAR_CUTOFF = 0.1  # fraction of the smallest non-zero transition frequency
TIDYUP_ATOL = None  # None -> QuTiP's auto_tidyup_atol


# =============================
# solver defaults  # passed to qutip.MESolver
# =============================
SOLVER_OPTIONS = {"method": "adams", "nsteps": 200000, "atol": 1e-8, "rtol": 1e-6}

# Validation thresholds for physics checks
TRACE_TOLERANCE = 1e-6


# === BATH SYSTEM DEFAULTS ===
SUPPORTED_BATHS = ["ohmic", "dl", "flat"]
BATH_TYPE = "ohmic"
BATH_TEMP = 1.0  # in units of the transition frequency
BATH_CUTOFF = 10.0
BATH_COUPLING = 0.05
BATH_EXPONENT = 1.0  # s = 1 -> ohmic


def validate():
    """Sanity-check the module level defaults.

    Raises:
        ValueError: If any default is out of range.
    """
    if SECULAR_CUTOFF <= 0 or not np.isfinite(SECULAR_CUTOFF):
        raise ValueError("SECULAR_CUTOFF must be a positive finite number")
    if TIDYUP_ATOL is not None and TIDYUP_ATOL < 0:
        raise ValueError("TIDYUP_ATOL must be non-negative")
    for key in ("atol", "rtol"):
        if SOLVER_OPTIONS.get(key, 1.0) <= 0:
            raise ValueError(f"SOLVER_OPTIONS['{key}'] must be positive")
    if TRACE_TOLERANCE <= 0:
        raise ValueError("TRACE_TOLERANCE must be positive")
    if BATH_TYPE not in SUPPORTED_BATHS:
        raise ValueError(f"BATH_TYPE '{BATH_TYPE}' not in {SUPPORTED_BATHS}")
    if BATH_TEMP < 0:
        raise ValueError("BATH_TEMP must be non-negative")
    if BATH_CUTOFF <= 0:
        raise ValueError("BATH_CUTOFF must be positive")
    if BATH_EXPONENT < 1:
        raise ValueError("BATH_EXPONENT must be >= 1")
    return True
