import jax.numpy as jnp
import pytest

from ionchem_core import network_utils


def _rates(T, phiH, phiC):
    return jnp.ones(1)


def _derivatives(y, rate, y0):
    return -rate[0] * y


def _build(**kwargs):
    options = dict(
        name="decay",
        species_names=("A", "B"),
        n_reac=1,
        n_elem=1,
        n_nequ=2,
        reaction_rates=_rates,
        derivatives=_derivatives,
    )
    options.update(kwargs)
    return network_utils.build_network(**options)


def test_defaults():
    network = _build()
    y = jnp.array([1.0, 2.0])

    assert network.n_spec == 2
    assert not bool(network.needs_reset(y, jnp.ones(1)))
    assert jnp.array_equal(network.initial_guess(y, jnp.ones(1)), y)
    assert jnp.allclose(network.jacobian(y, jnp.ones(1)), -jnp.eye(2))


def test_species_index():
    network = _build()
    assert network.species_index("B") == 1

    with pytest.raises(ValueError, match="Unknown species 'C'"):
        network.species_index("C")


@pytest.mark.parametrize(
    "kwargs, match",
    [
        (dict(species_names=()), "at least one species"),
        (dict(species_names=("A", "A")), "unique"),
        (dict(n_nequ=0), "n_nequ"),
        (dict(n_nequ=3), "n_nequ"),
        (dict(n_elem=0), "n_elem"),
        (dict(n_reac=0), "n_reac"),
    ],
)
def test_invalid_network(kwargs, match):
    with pytest.raises(ValueError, match=match):
        _build(**kwargs)


def test_network_is_hashable():
    """Networks are passed to jax.jit as static arguments."""
    network = _build()
    assert hash(network) == hash(network)
