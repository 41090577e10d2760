"""Tests for evolution.py.

Covers:
- relaxation of the driven-free two-level system under a flat spectrum
- unitary evolution in a non-trivial eigenbasis
- Hermiticity and trace along a trajectory
- output function contract (read-only view, collected return values)
- input validation
"""

import numpy as np
import pytest
from qutip import Qobj, basis, ket2dm, sigmax, sigmaz

from qredfield.core.bath_system import make_spectrum
from qredfield.core.errors import ConfigurationError
from qredfield.config.models import SolverConfig
from qredfield.core.evolution import (
    EvolutionResult,
    master_bloch_redfield,
    master_bloch_redfield_from_config,
)
from qredfield.core.redfield import bloch_redfield_tensor


# =============================
# Helpers
# =============================


def _flat(w):
    return 1.0


def _random_hermitian(n: int, seed: int) -> Qobj:
    rng = np.random.default_rng(seed)
    X = rng.normal(size=(n, n)) + 1j * rng.normal(size=(n, n))
    return Qobj((X + X.conj().T) / 2)


def _random_density(n: int, seed: int) -> Qobj:
    rng = np.random.default_rng(seed)
    X = rng.normal(size=(n, n)) + 1j * rng.normal(size=(n, n))
    rho = X @ X.conj().T
    return Qobj(rho / np.trace(rho))


@pytest.fixture
def two_level():
    H = Qobj(np.diag([0.0, 1.0]))
    result = bloch_redfield_tensor(H, [(sigmax(), _flat)], use_secular=True, secular_cutoff=0.1)
    return H, result


# =============================
# Dynamics
# =============================


class TestRelaxation:
    """Excited state relaxes towards equal populations for S(w) = 1."""

    def test_excited_state_relaxes(self, two_level):
        H, result = two_level
        times = np.linspace(0.0, 5.0, 51)

        evo = master_bloch_redfield(times, basis(2, 1), result.liouvillian, H)

        assert isinstance(evo, EvolutionResult)
        assert len(evo.states) == len(times)
        p_exc = np.array([rho.full()[1, 1].real for rho in evo.states])

        # dp/dt = 1 - 2p  ->  p(t) = 1/2 + 1/2 exp(-2t)
        assert np.allclose(p_exc, 0.5 + 0.5 * np.exp(-2 * times), atol=1e-5)
        assert np.all(np.diff(p_exc) < 0)
        assert p_exc[-1] == pytest.approx(0.5, abs=1e-4)

        print("✓ Excited state relaxes monotonically to equal populations")
        print(f"  - p_exc(t_end) = {p_exc[-1]:.6f}")

    def test_first_state_is_initial_state(self, two_level):
        H, result = two_level
        rho0 = ket2dm(basis(2, 1))

        evo = master_bloch_redfield([0.0, 1.0], rho0, result.liouvillian, H)

        assert np.allclose(evo.states[0].full(), rho0.full())
        assert evo.states[0].dims == H.dims

    def test_expect_along_trajectory(self, two_level):
        H, result = two_level
        times = np.linspace(0.0, 2.0, 11)

        evo = master_bloch_redfield(times, basis(2, 1), result.liouvillian, H)
        sz = evo.expect(sigmaz())

        # <sigma_z> = p_0 - p_1 = -exp(-2t)
        assert np.allclose(sz, -np.exp(-2 * times), atol=1e-5)


class TestUnitaryEvolution:
    """Pure -i[H, .] dynamics in a non-diagonal eigenbasis."""

    def test_matches_exact_propagator(self):
        H = 0.7 * sigmax() + 0.2 * sigmaz()
        result = bloch_redfield_tensor(H, [])
        rho0 = ket2dm(basis(2, 0))
        times = np.linspace(0.0, 3.0, 16)

        evo = master_bloch_redfield(times, rho0, result.liouvillian, H)

        for t, rho in zip(times, evo.states):
            U = (-1j * H * t).expm()
            expected = U * rho0 * U.dag()
            assert np.allclose(rho.full(), expected.full(), atol=1e-5)

    def test_reusing_eigenbasis(self):
        H = 0.7 * sigmax() + 0.2 * sigmaz()
        result = bloch_redfield_tensor(H, [])
        times = [0.0, 0.5, 1.0]

        evo_a = master_bloch_redfield(times, basis(2, 0), result.liouvillian, H)
        evo_b = master_bloch_redfield(
            times, basis(2, 0), result.liouvillian, H, eigenbasis=result.eigenbasis
        )

        for rho_a, rho_b in zip(evo_a.states, evo_b.states):
            assert np.allclose(rho_a.full(), rho_b.full(), atol=1e-10)


class TestPhysicalProperties:
    """Hermiticity and unit trace along a dissipative trajectory."""

    @pytest.mark.parametrize("use_secular", [False, True])
    def test_hermitian_unit_trace(self, use_secular):
        N = 3
        H = _random_hermitian(N, seed=1)
        ohmic = make_spectrum("ohmic", {"alpha": 0.05, "cutoff": 10.0, "temp": 1.0})
        result = bloch_redfield_tensor(
            H, [(_random_hermitian(N, seed=2), ohmic)], use_secular=use_secular
        )
        rho0 = _random_density(N, seed=3)

        evo = master_bloch_redfield(np.linspace(0, 4, 21), rho0, result.liouvillian, H)

        for rho in evo.states:
            data = rho.full()
            assert np.allclose(data, data.conj().T, atol=1e-6)
            assert np.trace(data).real == pytest.approx(1.0, abs=1e-6)
            assert abs(np.trace(data).imag) < 1e-8

        print("✓ Hermiticity and trace preserved along trajectory")


# =============================
# Output function
# =============================


class TestOutputFunction:
    """fout receives a read-only view of a reused buffer."""

    def test_outputs_collected(self, two_level):
        H, result = two_level
        times = np.linspace(0.0, 1.0, 6)

        evo = master_bloch_redfield(
            times, basis(2, 1), result.liouvillian, H, fout=lambda t, rho: rho[1, 1].real
        )
        reference = master_bloch_redfield(times, basis(2, 1), result.liouvillian, H)

        assert evo.states == []
        assert len(evo.outputs) == len(times)
        assert np.allclose(evo.outputs, [rho.full()[1, 1].real for rho in reference.states])

    def test_view_is_read_only_and_reused(self, two_level):
        H, result = two_level
        seen = []
        copies = []

        def fout(t, rho):
            seen.append(rho)
            copies.append(np.array(rho, copy=True))
            with pytest.raises(ValueError):
                rho[0, 0] = 0.0

        master_bloch_redfield([0.0, 0.5, 1.0], basis(2, 1), result.liouvillian, H, fout=fout)

        assert len(seen) == 3
        assert seen[0] is seen[1] is seen[2]
        # the retained view shows the last state only; copies differ
        assert np.allclose(seen[0], copies[-1])
        assert not np.allclose(copies[0], copies[-1])

    def test_expect_requires_states(self, two_level):
        H, result = two_level
        evo = master_bloch_redfield(
            [0.0, 1.0], basis(2, 1), result.liouvillian, H, fout=lambda t, rho: None
        )

        with pytest.raises(ValueError, match="No states stored"):
            evo.expect(sigmaz())


# =============================
# Validation
# =============================


class TestValidation:
    """Invalid input raises ConfigurationError."""

    @pytest.mark.parametrize("tspan", [[], [0.0, 0.0], [1.0, 0.5], [[0.0, 1.0]]])
    def test_bad_time_grid(self, two_level, tspan):
        H, result = two_level
        with pytest.raises(ConfigurationError, match="tspan"):
            master_bloch_redfield(tspan, basis(2, 1), result.liouvillian, H)

    def test_initial_state_dimension_mismatch(self, two_level):
        H, result = two_level
        with pytest.raises(ConfigurationError, match="Initial state"):
            master_bloch_redfield([0.0, 1.0], basis(3, 0), result.liouvillian, H)

    def test_generator_shape_mismatch(self, two_level):
        H, _ = two_level
        with pytest.raises(ConfigurationError, match="Generator"):
            master_bloch_redfield([0.0, 1.0], basis(2, 1), np.zeros((9, 9)), H)

    def test_unnormalized_state_logged(self, two_level, caplog):
        H, result = two_level
        rho0 = 2 * ket2dm(basis(2, 1))

        with caplog.at_level("WARNING", logger="qredfield"):
            evo = master_bloch_redfield([0.0, 1.0], rho0, result.liouvillian, H)

        assert "trace" in caplog.text
        # linear generator: the trace is carried along
        assert np.trace(evo.states[-1].full()).real == pytest.approx(2.0, abs=1e-5)

    def test_generator_as_plain_operator(self, two_level):
        H, result = two_level
        times = [0.0, 0.5, 1.0]
        L_oper = Qobj(result.liouvillian.full())

        assert not L_oper.issuper
        evo = master_bloch_redfield(times, basis(2, 1), L_oper, H)
        reference = master_bloch_redfield(times, basis(2, 1), result.liouvillian, H)

        for rho, rho_ref in zip(evo.states, reference.states):
            assert np.allclose(rho.full(), rho_ref.full(), atol=1e-8)

    def test_numpy_inputs(self, two_level):
        H, result = two_level
        evo = master_bloch_redfield(
            [0.0, 0.5],
            np.array([0.0, 1.0]),
            result.liouvillian.full(),
            H.full(),
        )

        assert len(evo.states) == 2
        assert evo.states[1].full()[1, 1].real == pytest.approx(0.5 + 0.5 * np.exp(-1.0), abs=1e-5)


class TestFromConfig:
    """Integrator settings taken from a SolverConfig."""

    def test_matches_direct_call(self, two_level):
        H, result = two_level
        config = SolverConfig(solver_options={"method": "bdf", "atol": 1e-10, "rtol": 1e-8})
        times = np.linspace(0.0, 1.0, 5)

        evo = master_bloch_redfield_from_config(
            times, basis(2, 1), result.liouvillian, H, config=config
        )

        p_exc = np.array([rho.full()[1, 1].real for rho in evo.states])
        assert np.allclose(p_exc, 0.5 + 0.5 * np.exp(-2 * times), atol=1e-6)

    def test_invalid_config_rejected(self, two_level):
        H, result = two_level
        config = SolverConfig(solver_options={"atol": -1.0})

        with pytest.raises(ValueError, match="SolverConfig"):
            master_bloch_redfield_from_config(
                [0.0, 1.0], basis(2, 1), result.liouvillian, H, config=config
            )
