"""Hamiltonian eigenbasis: decomposition and operator basis transforms.

The Redfield tensor and the time-evolution driver both work in the
eigenbasis of the system Hamiltonian. ``eigen_decompose`` wraps the numpy
eigensolvers and returns an immutable ``EigenbasisMap`` that moves
operators into and out of that basis.

Eigenpairs are always ordered by ascending eigenvalue.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Union

import numpy as np
from qutip import Qobj

from qredfield.config.logging_setup import get_logger
from .errors import ConfigurationError

logger = get_logger(__name__)

OperatorLike = Union[Qobj, np.ndarray]


def as_operator(op: OperatorLike, dims: Sequence | None = None) -> Qobj:
    """Wrap ``op`` as a Qobj; arrays get ``dims`` (if given)."""
    if isinstance(op, Qobj):
        return op
    data = np.asarray(op, dtype=complex)
    if data.ndim != 2:
        raise ConfigurationError(f"Operator must be a 2-D matrix, got ndim={data.ndim}")
    if dims is not None and data.shape == _shape_of(dims):
        return Qobj(data, dims=dims)
    return Qobj(data)


def _shape_of(dims: Sequence) -> tuple:
    return (int(np.prod(dims[0])), int(np.prod(dims[1])))


def _readonly(arr: np.ndarray) -> np.ndarray:
    arr = np.array(arr, copy=True)
    arr.flags.writeable = False
    return arr


@dataclass(frozen=True)
class EigenbasisMap:
    """Eigen-decomposition of a Hamiltonian, H = U diag(evals) U^-1.

    Attributes
    ----------
    evals : np.ndarray
        Real eigenvalues, ascending, shape (N,).
    transform : np.ndarray
        U, eigenvectors as columns, shape (N, N).
    inverse : np.ndarray
        U^-1, shape (N, N).
    dims : list
        QuTiP dims of the Hamiltonian (reused for every transformed operator).
    """

    evals: np.ndarray
    transform: np.ndarray
    inverse: np.ndarray
    dims: list

    @property
    def dimension(self) -> int:
        return len(self.evals)

    @property
    def ekets(self) -> List[Qobj]:
        """Eigenstates as kets, in eigenvalue order."""
        ket_dims = [self.dims[0], [1]]
        return [
            Qobj(self.transform[:, i].reshape(-1, 1), dims=ket_dims)
            for i in range(self.dimension)
        ]

    def to_eigenbasis(self, op: OperatorLike) -> Qobj:
        """Return U^-1 · op · U."""
        data = self._data_of(op)
        return Qobj(self.inverse @ data @ self.transform, dims=self.dims)

    def from_eigenbasis(self, op: OperatorLike) -> Qobj:
        """Return U · op · U^-1 (inverse of ``to_eigenbasis``)."""
        data = self._data_of(op)
        return Qobj(self.transform @ data @ self.inverse, dims=self.dims)

    def transition_frequencies(self) -> np.ndarray:
        """W[a, b] = evals[a] - evals[b]."""
        return transition_frequencies(self.evals)

    def _data_of(self, op: OperatorLike) -> np.ndarray:
        data = op.full() if isinstance(op, Qobj) else np.asarray(op, dtype=complex)
        n = self.dimension
        if data.shape != (n, n):
            raise ConfigurationError(
                f"Operator of shape {data.shape} does not match Hilbert space dimension {n}"
            )
        return data


def transition_frequencies(evals: np.ndarray) -> np.ndarray:
    """Antisymmetric matrix of eigenvalue differences, zero on the diagonal."""
    evals = np.asarray(evals, dtype=float)
    return evals[:, np.newaxis] - evals[np.newaxis, :]


def eigen_decompose(H: OperatorLike) -> EigenbasisMap:
    """Diagonalize ``H`` and return the corresponding ``EigenbasisMap``.

    Hermitian input uses ``numpy.linalg.eigh`` (U unitary, U^-1 = U^dag).
    Anything else goes through ``numpy.linalg.eig``; eigenpairs are then
    sorted by the real part and U is inverted explicitly.

    Raises
    ------
    ConfigurationError
        If H is not square or the eigensolver fails.
    """
    H = as_operator(H)
    if H.shape[0] != H.shape[1]:
        raise ConfigurationError(f"Hamiltonian must be square, got shape {H.shape}")

    data = H.full()
    n = data.shape[0]
    try:
        if H.isherm:
            evals, U = np.linalg.eigh(data)
            U_inv = U.conj().T
        else:
            logger.debug("Hamiltonian is not Hermitian; using general eigensolver")
            evals, U = np.linalg.eig(data)
            order = np.argsort(evals.real, kind="stable")
            evals, U = evals[order].real, U[:, order]
            U_inv = np.linalg.inv(U)
    except np.linalg.LinAlgError as exc:
        raise ConfigurationError(f"Eigen-decomposition of the Hamiltonian failed: {exc}") from exc

    if len(evals) != n or U.shape != (n, n):
        raise ConfigurationError(
            f"Eigensolver returned {len(evals)} eigenpairs for dimension {n}"
        )

    logger.debug("Eigen-decomposition done: N=%d, spectrum=[%g, %g]", n, evals[0], evals[-1])
    return EigenbasisMap(
        evals=_readonly(np.asarray(evals, dtype=float)),
        transform=_readonly(U),
        inverse=_readonly(U_inv),
        dims=H.dims,
    )


__all__ = [
    "EigenbasisMap",
    "eigen_decompose",
    "transition_frequencies",
    "as_operator",
]
