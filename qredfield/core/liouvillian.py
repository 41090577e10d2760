"""Baseline Liouvillian: unitary precession plus Lindblad dissipators.

    L ρ = -i[H, ρ] + Σ_k ( J_k ρ J_k^† - ½ {J_k^† J_k, ρ} )

The formula itself is delegated to ``qutip.liouvillian``; this module only
checks dimensions and fixes the storage format (CSR) so that the Redfield
tensor can be added to it directly.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence

from qutip import Qobj, liouvillian

from .eigenbasis import OperatorLike, as_operator
from .errors import ConfigurationError


def check_dimensions(H: Qobj, ops: Sequence[OperatorLike], label: str) -> List[Qobj]:
    """Return ``ops`` as Qobjs, raising if any does not match ``H``'s shape."""
    checked = []
    for i, op in enumerate(ops):
        op = as_operator(op, dims=H.dims)
        if op.shape != H.shape:
            raise ConfigurationError(
                f"{label} {i} has shape {op.shape}, Hamiltonian has shape {H.shape}"
            )
        checked.append(op)
    return checked


def baseline_generator(H_eb: Qobj, jump_ops_eb: Iterable[Qobj] = ()) -> Qobj:
    """Liouvillian of ``H_eb`` and (optional) jump operators, CSR storage."""
    return liouvillian(H_eb, list(jump_ops_eb)).to("CSR")


__all__ = ["baseline_generator", "check_dimensions"]
