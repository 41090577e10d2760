"""Time evolution under a Bloch-Redfield generator.

The generator from ``bloch_redfield_tensor`` acts on density matrices in the
eigenbasis of H. ``master_bloch_redfield`` transforms the initial state into
that basis, integrates d/dt vec(ρ) = L vec(ρ) with QuTiP's ``MESolver`` and
transforms every requested output back to the original basis.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

import numpy as np
from qutip import MESolver, Qobj, expect, ket2dm, operator_to_vector

from qredfield.config.default_params import SOLVER_OPTIONS, TRACE_TOLERANCE
from qredfield.config.logging_setup import get_logger
from .eigenbasis import EigenbasisMap, OperatorLike, as_operator, eigen_decompose
from .errors import ConfigurationError

logger = get_logger(__name__)

# fout(t, rho) -> anything; rho is a read-only view, valid during the call only
OutputFunction = Callable[[float, np.ndarray], Any]


@dataclass
class EvolutionResult:
    """Output of ``master_bloch_redfield``.

    ``states`` is filled when no output function was given, ``outputs``
    (the return values of the output function) otherwise.
    """

    times: np.ndarray
    states: List[Qobj] = field(default_factory=list)
    outputs: List[Any] = field(default_factory=list)

    def expect(self, op: OperatorLike) -> np.ndarray:
        """Expectation values Tr(op ρ(t)) along the stored trajectory."""
        if not self.states:
            raise ValueError("No states stored: the evolution was run with an output function")
        return np.asarray(expect(as_operator(op, dims=self.states[0].dims), self.states))


def _check_times(tspan) -> np.ndarray:
    times = np.asarray(tspan, dtype=float)
    if times.ndim != 1 or times.size == 0:
        raise ConfigurationError("tspan must be a non-empty 1-D sequence of times")
    if np.any(np.diff(times) <= 0):
        raise ConfigurationError("tspan must be strictly increasing")
    return times


def _initial_density(rho0, H: Qobj) -> Qobj:
    if not isinstance(rho0, Qobj):
        data = np.asarray(rho0, dtype=complex)
        if data.ndim == 1:
            rho0 = Qobj(data.reshape(-1, 1), dims=[H.dims[0], [1]])
        else:
            rho0 = as_operator(data, dims=H.dims)
    if rho0.isket:
        rho0 = ket2dm(rho0)
    if rho0.shape != H.shape:
        raise ConfigurationError(
            f"Initial state of shape {rho0.shape} does not match Hamiltonian shape {H.shape}"
        )
    return rho0


def _check_trace(rho0: Qobj, trace_tolerance: float) -> None:
    trace = complex(rho0.tr())
    if abs(trace - 1.0) > trace_tolerance:
        # integrated as given; the generator is linear
        logger.warning("Initial state has trace %.6g, expected 1", trace.real)


def master_bloch_redfield(
    tspan,
    rho0: OperatorLike,
    L: OperatorLike,
    H: OperatorLike,
    fout: Optional[OutputFunction] = None,
    eigenbasis: Optional[EigenbasisMap] = None,
    trace_tolerance: float = TRACE_TOLERANCE,
    **options,
) -> EvolutionResult:
    """Integrate d/dt ρ = L ρ, with L given in the eigenbasis of H.

    Parameters
    ----------
    tspan : array_like
        Strictly increasing output times; the first entry is the initial time.
    rho0 : Qobj or np.ndarray
        Initial density operator, or a ket (promoted to |ψ><ψ|).
    L : Qobj or np.ndarray
        Bloch-Redfield generator (N^2 x N^2, column stacking, eigenbasis of H).
    H : Qobj or np.ndarray
        Hamiltonian defining the eigenbasis.
    fout : callable, optional
        ``fout(t, rho)`` called at every output time with ρ(t) in the
        original basis. ATTENTION: ``rho`` is a read-only view of a buffer
        that is overwritten at the next output time; copy it to keep it.
    eigenbasis : EigenbasisMap, optional
        Reuse an existing decomposition of H (e.g. ``RedfieldResult.eigenbasis``).
    trace_tolerance : float
        An initial state whose trace deviates from 1 by more than this is
        logged as a warning (and integrated unchanged).
    **options
        Passed on to ``qutip.MESolver`` (method, atol, rtol, nsteps, ...).

    Returns
    -------
    EvolutionResult
    """
    times = _check_times(tspan)
    H = as_operator(H)
    rho0 = _initial_density(rho0, H)
    _check_trace(rho0, trace_tolerance)
    N = H.shape[0]

    if not isinstance(L, Qobj):
        L = as_operator(L, dims=[H.dims, H.dims])
    if L.shape != (N * N, N * N):
        raise ConfigurationError(
            f"Generator of shape {L.shape} does not act on {N}x{N} density matrices"
        )
    if not L.issuper:
        # plain N^2 x N^2 operator: reinterpret as a superoperator on H's space
        L = Qobj(L.data, dims=[H.dims, H.dims])

    if eigenbasis is None:
        eigenbasis = eigen_decompose(H)
    elif eigenbasis.dimension != N:
        raise ConfigurationError(
            f"Eigenbasis of dimension {eigenbasis.dimension} does not match N={N}"
        )

    rho0_vec = operator_to_vector(eigenbasis.to_eigenbasis(rho0))

    solver_options = dict(SOLVER_OPTIONS)
    solver_options.update(options)
    solver_options["normalize_output"] = False  # the vectorized state is not a ket
    solver = MESolver(L, options=solver_options)

    # Scratch buffers for the back-transformation, reused at every output time
    U, U_inv = eigenbasis.transform, eigenbasis.inverse
    tmp = np.empty((N, N), dtype=complex)
    tmp2 = np.empty_like(tmp)
    rho_out = np.empty_like(tmp)
    rho_view = rho_out.view()
    rho_view.flags.writeable = False

    result = EvolutionResult(times=times)

    def emit(t: float, vec: np.ndarray) -> None:
        tmp[:] = np.reshape(vec, (N, N), order="F")
        np.matmul(U, tmp, out=tmp2)
        np.matmul(tmp2, U_inv, out=rho_out)
        if fout is None:
            result.states.append(Qobj(rho_out, dims=H.dims, copy=True))
        else:
            result.outputs.append(fout(t, rho_view))

    logger.debug("Bloch-Redfield evolution: N=%d, %d output times", N, times.size)

    solver.start(rho0_vec, times[0])
    emit(times[0], rho0_vec.full().ravel())
    for t in times[1:]:
        state = solver.step(t)
        emit(t, state.full().ravel())

    return result


def master_bloch_redfield_from_config(
    tspan,
    rho0: OperatorLike,
    L: OperatorLike,
    H: OperatorLike,
    fout: Optional[OutputFunction] = None,
    eigenbasis: Optional[EigenbasisMap] = None,
    config=None,
) -> EvolutionResult:
    """``master_bloch_redfield`` with integrator settings from a SolverConfig."""
    from qredfield.config.models import SolverConfig

    config = config if config is not None else SolverConfig()
    config.validate()
    return master_bloch_redfield(
        tspan,
        rho0,
        L,
        H,
        fout=fout,
        eigenbasis=eigenbasis,
        trace_tolerance=config.trace_tolerance,
        **dict(config.solver_options),
    )


__all__ = [
    "EvolutionResult",
    "master_bloch_redfield",
    "master_bloch_redfield_from_config",
]
