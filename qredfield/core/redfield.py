"""Bloch-Redfield tensor assembly.

Builds the super-operator of the Bloch-Redfield master equation
d/dt vec(ρ) = L vec(ρ) in the eigenbasis of the system Hamiltonian.
For uncorrelated baths with coupling operators A_k and power spectra S_k:

    R_abcd = ½ Σ_k { A_ac A_db [S_k(ω_ca) + S_k(ω_db)]
                     - δ_bd Σ_n A_an A_nc S_k(ω_cn)
                     - δ_ac Σ_n A_dn A_nb S_k(ω_dn) }

with ω_ab = E_a - E_b. Under the secular approximation only elements with
|ω_ab - ω_cd| <= secular_cutoff * min_{ω≠0} |ω| are kept.

The four-index tensor is mapped to Liouville space with column stacking,
(a, b) -> a + N*b, i.e. ``qutip.stacked_index`` / ``operator_to_vector``.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional, Sequence, Union

import numpy as np
from qutip import Qobj

from qredfield.config.logging_setup import get_logger
from .eigenbasis import EigenbasisMap, OperatorLike, as_operator, eigen_decompose
from .errors import ConfigurationError, PhysicalModelWarning
from .liouvillian import baseline_generator, check_dimensions

logger = get_logger(__name__)

Spectrum = Callable[[float], complex]

# relative size below which a transition frequency is treated as zero
DEGENERACY_ATOL = 1e-12

NONHERMITIAN_WARNING = (
    "Interaction operator {index} is not Hermitian; Bloch-Redfield theory "
    "assumes Hermitian system-bath coupling operators. The operator is used as given."
)


@dataclass(frozen=True)
class InteractionSpec:
    """System-bath coupling operator paired with its bath spectrum S(ω)."""

    operator: OperatorLike
    spectrum: Spectrum


@dataclass
class RedfieldResult:
    """Generator in the Hamiltonian eigenbasis plus everything needed to use it.

    Unpacks as ``L, ekets = bloch_redfield_tensor(...)``.
    """

    liouvillian: Qobj
    ekets: List[Qobj]
    eigenbasis: EigenbasisMap
    warnings: List[str] = field(default_factory=list)

    def __iter__(self) -> Iterator:
        return iter((self.liouvillian, self.ekets))


def _as_interaction(item: Union[InteractionSpec, Sequence]) -> InteractionSpec:
    message = "Interaction operators must be given as (operator, spectrum) pairs"
    if isinstance(item, InteractionSpec):
        spec = item
    elif isinstance(item, (Qobj, np.ndarray)):
        raise ConfigurationError(message)
    else:
        try:
            op, spectrum = item
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(message) from exc
        spec = InteractionSpec(op, spectrum)
    if not callable(spec.spectrum):
        raise ConfigurationError("Bath spectrum must be a callable of one frequency")
    return spec


# =============================
# BUILDING BLOCKS
# =============================
def sample_spectra(spectra: Sequence[Spectrum], W: np.ndarray) -> np.ndarray:
    """Evaluate every spectrum at every transition frequency.

    Returns
    -------
    np.ndarray
        Jw with shape (N, N, K), ``Jw[a, b, k] = spectra[k](W[a, b])``.
    """
    N = W.shape[0]
    Jw = np.empty((N, N, len(spectra)), dtype=complex)
    for k, spectrum in enumerate(spectra):
        # element-wise so that scalar-only callables work as well
        Jw[:, :, k] = np.vectorize(spectrum, otypes=[complex])(W)
    return Jw


def secular_frequency_cutoff(
    W: np.ndarray,
    secular_cutoff: float,
    energy_scale: Optional[float] = None,
    atol: float = DEGENERACY_ATOL,
) -> float:
    """Absolute cutoff ``dw_min * secular_cutoff``.

    ``dw_min`` is the smallest non-zero |W[a, b]|. Gaps below
    ``atol * max(1, energy_scale)`` are eigensolver round-off and count as
    zero; ``energy_scale`` defaults to max |W|.

    Raises
    ------
    ConfigurationError
        If ``secular_cutoff`` is not a positive finite number, or the
        spectrum is fully degenerate (no non-zero transition frequency).
    """
    if not np.isfinite(secular_cutoff) or secular_cutoff <= 0:
        raise ConfigurationError(
            f"secular_cutoff must be a positive finite number, got {secular_cutoff}"
        )
    absW = np.abs(W)
    if energy_scale is None:
        energy_scale = float(absW.max()) if absW.size else 0.0
    gaps = absW[absW > atol * max(1.0, energy_scale)]
    if gaps.size == 0:
        raise ConfigurationError(
            "Secular approximation requested for a fully degenerate spectrum: "
            "no non-zero transition frequency to scale the cutoff with"
        )
    return float(gaps.min()) * secular_cutoff


def redfield_tensor_data(
    A: np.ndarray,
    W: np.ndarray,
    Jw: np.ndarray,
    w_cutoff: Optional[float] = None,
) -> np.ndarray:
    """Four-index Redfield tensor R[a, b, c, d].

    Parameters
    ----------
    A : np.ndarray
        Coupling operators in the eigenbasis, shape (N, N, K).
    W : np.ndarray
        Transition frequencies, shape (N, N).
    Jw : np.ndarray
        Spectra sampled at W, shape (N, N, K).
    w_cutoff : float, optional
        Absolute secular cutoff. ``None`` keeps every element.

    Notes
    -----
    O(N^4 K) time and O(N^4) memory. The δ-terms only depend on two
    indices and are precomputed as (N, N) reductions:
        T2[a, c] = Σ_nk A_an A_nc S(ω_cn),  T3[d, b] = Σ_nk A_dn A_nb S(ω_dn)
    """
    N = W.shape[0]

    # A_ac A_db [S(ω_ca) + S(ω_db)]
    R = np.einsum("ack,dbk,cak->abcd", A, A, Jw)
    R += np.einsum("ack,dbk->abcd", A, A * Jw)

    T2 = np.einsum("ank,nck,cnk->ac", A, A, Jw)
    T3 = np.einsum("dnk,nbk,dnk->db", A, A, Jw)
    for b in range(N):  # δ_bd
        R[:, b, :, b] -= T2
    for a in range(N):  # δ_ac
        R[a, :, a, :] -= T3.T

    if w_cutoff is not None:
        dW = np.abs(W[:, :, np.newaxis, np.newaxis] - W[np.newaxis, np.newaxis, :, :])
        R[dW > w_cutoff] = 0.0

    R *= 0.5
    return R


def redfield_superoperator(
    R: np.ndarray, dims: list, tidyup_atol: Optional[float] = None
) -> Qobj:
    """Reshape R[a, b, c, d] to an N^2 x N^2 sparse super-operator.

    Row index a + N*b, column index c + N*d (column stacking).
    """
    N = R.shape[0]
    data = R.reshape((N * N, N * N), order="F")
    return Qobj(data, dims=[dims, dims]).to("CSR").tidyup(tidyup_atol)


# =============================
# ASSEMBLER
# =============================
def bloch_redfield_tensor(
    H: OperatorLike,
    a_ops: Sequence[Union[InteractionSpec, Sequence]],
    J: Sequence[OperatorLike] = (),
    use_secular: bool = True,
    secular_cutoff: float = 0.1,
    tidyup_atol: Optional[float] = None,
) -> RedfieldResult:
    """Bloch-Redfield super-operator such that d/dt ρ = L ρ (eigenbasis of H).

    Parameters
    ----------
    H : Qobj or np.ndarray
        System Hamiltonian.
    a_ops : sequence
        ``InteractionSpec`` objects or ``(operator, spectrum)`` pairs. Each
        spectrum takes the angular frequency as its only argument.
    J : sequence, optional
        Lindblad jump operators.
    use_secular : bool
        Apply the secular approximation.
    secular_cutoff : float
        Relative cutoff: elements with |ω_ab - ω_cd| > dw_min * secular_cutoff
        are discarded (dw_min is the smallest non-zero |E_a - E_b|). Only
        used when ``use_secular`` is True.
    tidyup_atol : float, optional
        Entries of R below this magnitude are dropped (QuTiP default if None).

    Returns
    -------
    RedfieldResult
        Liouvillian (unitary part, Lindblad terms and Redfield tensor) and
        the eigenstates of H.

    Raises
    ------
    ConfigurationError
        Dimension mismatch, eigensolver failure or a secular cutoff that
        cannot be applied.
    """
    return _assemble(H, a_ops, J, use_secular, secular_cutoff, tidyup_atol)


def _assemble(
    H: OperatorLike,
    a_ops: Sequence[Union[InteractionSpec, Sequence]],
    J: Sequence[OperatorLike],
    use_secular: bool,
    secular_cutoff: float,
    tidyup_atol: Optional[float],
    stacklevel: int = 3,
) -> RedfieldResult:
    # stacklevel 3: warnings point at the caller of the public entry point
    H = as_operator(H)
    eigenbasis = eigen_decompose(H)
    specs = [_as_interaction(item) for item in a_ops]
    jump_ops = check_dimensions(H, list(J), "jump operator")
    interaction_ops = check_dimensions(
        H, [spec.operator for spec in specs], "interaction operator"
    )

    # Unitary part + Lindblad dissipators
    L = baseline_generator(
        eigenbasis.to_eigenbasis(H),
        [eigenbasis.to_eigenbasis(op) for op in jump_ops],
    )
    if not specs:
        return RedfieldResult(L, eigenbasis.ekets, eigenbasis)

    N, K = eigenbasis.dimension, len(specs)
    notes: List[str] = []
    A = np.empty((N, N, K), dtype=complex)
    for k, op in enumerate(interaction_ops):
        if not op.isherm:
            message = NONHERMITIAN_WARNING.format(index=k)
            warnings.warn(message, category=PhysicalModelWarning, stacklevel=stacklevel)
            logger.warning(message)
            notes.append(message)
        A[:, :, k] = eigenbasis.to_eigenbasis(op).full()

    W = eigenbasis.transition_frequencies()
    Jw = sample_spectra([spec.spectrum for spec in specs], W)
    w_cutoff = None
    if use_secular:
        energy_scale = float(np.abs(eigenbasis.evals).max())
        w_cutoff = secular_frequency_cutoff(W, secular_cutoff, energy_scale)

    R = redfield_tensor_data(A, W, Jw, w_cutoff)
    logger.debug(
        "Redfield tensor assembled: N=%d, K=%d, w_cutoff=%s, nonzero=%d/%d",
        N,
        K,
        w_cutoff,
        np.count_nonzero(R),
        R.size,
    )

    L = L + redfield_superoperator(R, H.dims, tidyup_atol)
    return RedfieldResult(L, eigenbasis.ekets, eigenbasis, notes)


def bloch_redfield_tensor_from_config(
    H: OperatorLike,
    a_ops: Sequence[Union[InteractionSpec, Sequence]],
    J: Sequence[OperatorLike] = (),
    config=None,
) -> RedfieldResult:
    """``bloch_redfield_tensor`` with secular/tidyup settings from a RedfieldConfig."""
    from qredfield.config.models import RedfieldConfig

    config = config if config is not None else RedfieldConfig()
    config.validate()
    return _assemble(H, a_ops, J, **config.tensor_kwargs())


__all__ = [
    "InteractionSpec",
    "RedfieldResult",
    "sample_spectra",
    "secular_frequency_cutoff",
    "redfield_tensor_data",
    "redfield_superoperator",
    "bloch_redfield_tensor",
    "bloch_redfield_tensor_from_config",
]
