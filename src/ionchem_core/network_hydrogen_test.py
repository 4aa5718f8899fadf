"""Tests for the hot/cold hydrogen network."""

from pathlib import Path

import jax
import jax.numpy as jnp
import pytest

from ionchem_core import network_hydrogen, network_utils
from ionchem_core.network_hydrogen import HC0, HCP, HH0, HHP, IE

jax.config.update("jax_enable_x64", True)

data_dir = Path(__file__).parent.parent.parent / "data"


@pytest.fixture
def network():
    return network_hydrogen.build_hydrogen_network()


@pytest.fixture
def state():
    y = jnp.array([3.0, 2.0, 4.0, 1.0, 3.0])
    y0 = jnp.array([10.0])
    return y, y0


def test_sizes(network):
    assert network.n_spec == 5
    assert network.n_reac == 5
    assert network.n_elem == 1
    assert network.n_nequ == 3
    assert network.species_index("Hc0") == HC0
    assert network.species_index("e-") == IE


def test_reaction_rates():
    coefficients = network_hydrogen.HydrogenRateCoefficients()
    rate = network_hydrogen.reaction_rates(
        jnp.asarray(1e4), jnp.asarray(1e-6), jnp.asarray(2e-6), coefficients
    )

    assert rate.shape == (5,)
    # fits are normalized at 1e4 K
    assert jnp.isclose(rate[1], coefficients.recomb_alpha)
    assert jnp.isclose(rate[4], coefficients.charge_exchange_beta)
    assert jnp.isclose(rate[2], 1e-6)
    assert jnp.isclose(rate[3], 2e-6)
    # collisional ionization is negligible at 1e4 K and grows with T
    hot = network_hydrogen.reaction_rates(
        jnp.asarray(1e5), jnp.asarray(0.0), jnp.asarray(0.0), coefficients
    )
    assert hot[0] > rate[0]
    assert hot[1] < rate[1]


def test_rates_finite_at_zero_temperature():
    coefficients = network_hydrogen.HydrogenRateCoefficients()
    rate = network_hydrogen.reaction_rates(
        jnp.asarray(0.0), jnp.asarray(0.0), jnp.asarray(0.0), coefficients
    )
    assert jnp.all(jnp.isfinite(rate))


def test_reactions_conserve_hot_and_cold_hydrogen(state):
    """Ionization and recombination move atoms between H0 and H+ only."""
    y, y0 = state
    rate = jnp.array([1e-9, 2e-13, 1e-6, 3e-6, 8e-9])

    dydt = network_hydrogen.derivatives(y, rate, y0)

    # d(Hh0 + Hhp)/dt vanishes
    assert jnp.isclose(dydt[HH0] + dydt[HHP], 0.0, atol=1e-20)


def test_constraint_rows(state):
    y, y0 = state
    rate = jnp.ones(5)

    dydt = network_hydrogen.derivatives(y, rate, y0)

    assert jnp.isclose(dydt[3], 0.0)  # 3 + 2 + 4 + 1 = 10
    assert jnp.isclose(dydt[4], 0.0)  # 2 + 1 = 3

    broken = y.at[IE].set(5.0)
    dydt = network_hydrogen.derivatives(broken, rate, y0)
    assert jnp.isclose(dydt[4], -2.0)


def test_analytic_jacobian_matches_autodiff(state):
    y, y0 = state
    rate = jnp.array([1e-2, 3e-2, 0.5, 0.7, 0.2])

    jac = network_hydrogen.jacobian(y, rate)
    jac_ad = jax.jacfwd(network_hydrogen.derivatives)(y, rate, y0)

    assert jac.shape == (5, 5)
    assert jnp.allclose(jac, jac_ad, rtol=1e-12, atol=1e-14)


def test_autodiff_jacobian_helper(state):
    y, _ = state
    rate = jnp.array([1e-2, 3e-2, 0.5, 0.7, 0.2])
    jacobian = network_utils.jacobian_from_derivatives(network_hydrogen.derivatives, 1)

    assert jnp.allclose(jacobian(y, rate), network_hydrogen.jacobian(y, rate))


class TestConservationCheck:
    def test_consistent_state(self, network, state):
        y, y0 = state
        assert not bool(network.needs_reset(y, y0))

    def test_wrong_total(self, network, state):
        y, y0 = state
        assert bool(network.needs_reset(y, y0 * 1.1))

    def test_wrong_charge(self, network, state):
        y, y0 = state
        assert bool(network.needs_reset(y.at[IE].set(3.5), y0))

    def test_negative_density(self, network):
        y = jnp.array([6.0, -1.0, 4.0, 1.0, 0.0])
        assert bool(network.needs_reset(y, jnp.array([10.0])))

    def test_within_tolerance(self, network, state):
        y, y0 = state
        assert not bool(network.needs_reset(y, y0 * (1.0 + 1e-4)))


class TestInitialGuess:
    def test_guess_is_consistent(self, network, state):
        y, _ = state
        y0 = jnp.array([20.0])

        guess = network.initial_guess(y, y0)

        assert not bool(network.needs_reset(guess, y0))

    def test_keeps_hot_and_ion_fractions(self, network, state):
        y, _ = state
        y0 = jnp.array([20.0])

        guess = network.initial_guess(y, y0)

        assert jnp.isclose((guess[HH0] + guess[HHP]) / 20.0, 0.5)
        assert jnp.isclose((guess[HHP] + guess[HCP]) / 20.0, 0.3)

    def test_empty_state(self, network):
        y = jnp.zeros(5)
        y0 = jnp.array([4.0])

        guess = network.initial_guess(y, y0)

        assert not bool(network.needs_reset(guess, y0))
        assert jnp.allclose(guess, jnp.array([2.0, 2.0, 1e-40, 1e-40, 2.0]))

    def test_negative_entries_are_ignored(self, network):
        y = jnp.array([6.0, -1.0, 4.0, 1.0, 0.0])
        y0 = jnp.array([10.0])

        guess = network.initial_guess(y, y0)

        assert jnp.all(guess > 0.0)
        assert not bool(network.needs_reset(guess, y0))


def test_load_network_from_json():
    network = network_utils.load_network(data_dir / "hydrogen_hot_cold.json")

    assert network.name == "hydrogen_hot_cold"
    assert network.species_names == network_hydrogen.SPECIES_NAMES


def test_load_network_unknown(tmp_path):
    path = tmp_path / "network.json"
    path.write_text('{"network": "helium"}')

    with pytest.raises(ValueError, match="Unknown network"):
        network_utils.load_network(path)


def test_invalid_coefficients():
    with pytest.raises(ValueError, match="recomb_alpha"):
        network_hydrogen.HydrogenRateCoefficients(recomb_alpha=-1.0)
