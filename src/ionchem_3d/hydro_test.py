import jax
import jax.numpy as jnp
import pytest

from ionchem_core import constants
from ionchem_3d import hydro
from ionchem_3d.hydro_types import HydroConfig

jax.config.update("jax_enable_x64", True)


def test_conserved_to_primitives():
    config = HydroConfig(gamma=5.0 / 3.0)
    # rho, momentum, energy, one passive scalar
    u = jnp.array([2.0, 2.0, -4.0, 0.0, 10.0, 7.0])

    primit, _ = hydro.conserved_to_primitives(u, config)

    # E_kin = 0.5 * 2 * (1 + 4) = 5, p = 2/3 * 5
    expected = jnp.array([2.0, 1.0, -2.0, 0.0, 10.0 / 3.0, 7.0])
    assert jnp.allclose(primit, expected)


def test_round_trip():
    config = HydroConfig(gamma=1.4)
    primit = jnp.array([1.3, 0.1, 0.2, -0.3, 2.5, 1e-3, 4.0])

    u = hydro.primitives_to_conserved(primit, config)
    primit_back, _ = hydro.conserved_to_primitives(u, config)

    assert jnp.allclose(primit_back, primit)


def test_temperature_from_mean_particle_mass():
    config = HydroConfig(rho_scale=constants.amu, velocity_scale=1e5, mu=0.5)
    # n = rho * rho_scale / (mu amu) = 2 / 0.5 = 4 particles per cm^3
    n, T_expected = 4.0, 1e4
    p = n * constants.k_B * T_expected / config.pressure_scale
    primit = jnp.array([2.0, 0.0, 0.0, 0.0, p])

    T = hydro.temperature(primit, config)

    assert jnp.isclose(T, T_expected)


def test_temperature_from_species():
    config = HydroConfig(velocity_scale=1e5, particle_slots=(5, 6))
    n, T_expected = 3.0, 8000.0
    p = n * constants.k_B * T_expected / config.pressure_scale
    primit = jnp.array([1.0, 0.0, 0.0, 0.0, p, 1.0, 2.0])

    assert jnp.isclose(hydro.temperature(primit, config), T_expected)


def test_pressure_floor():
    config = HydroConfig(p_min=1e-10)
    u = jnp.array([1.0, 2.0, 0.0, 0.0, 1.0])  # E < E_kin

    primit, T = hydro.conserved_to_primitives(u, config)

    assert primit[4] == 1e-10
    assert T > 0.0


def test_batched_conversion():
    config = HydroConfig()
    u = jnp.tile(jnp.array([1.0, 0.5, 0.0, 0.0, 3.0, 2.0]), (8, 1))

    primit, T = hydro.conserved_to_primitives_cells(u, config)
    u_back = hydro.primitives_to_conserved_cells(primit, config)

    assert primit.shape == (8, 6)
    assert T.shape == (8,)
    assert jnp.allclose(u_back, u)


def test_time_scale():
    config = HydroConfig(length_scale=1e11, velocity_scale=1e5)
    assert config.time_scale == pytest.approx(1e6)


@pytest.mark.parametrize(
    "kwargs, match",
    [
        (dict(gamma=1.0), "gamma"),
        (dict(neqdyn=4), "neqdyn"),
        (dict(rho_scale=0.0), "rho_scale"),
        (dict(particle_slots=(2,)), "particle_slots"),
    ],
)
def test_invalid_hydro_config(kwargs, match):
    with pytest.raises(ValueError, match=match):
        HydroConfig(**kwargs)
