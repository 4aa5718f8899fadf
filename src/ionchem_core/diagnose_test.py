import logging

import jax
import jax.numpy as jnp
import pytest

from ionchem_core import diagnose, network_hydrogen

jax.config.update("jax_enable_x64", True)


def test_check_positivity_success():
    diagnose.check_positivity(jnp.full((10, 5), 1e-40))


def test_check_positivity_below_floor():
    y = jnp.ones((3, 5)).at[1, 2].set(0.0)
    with pytest.raises(ValueError, match="below floor"):
        diagnose.check_positivity(y)


def test_check_nan_inf():
    with pytest.raises(ValueError, match="NaN"):
        diagnose.check_nan_inf(jnp.array([jnp.nan, 1.0]))

    with pytest.raises(ValueError, match="Inf"):
        diagnose.check_nan_inf(jnp.array([jnp.inf, 1.0]))


def test_check_element_conservation():
    element_matrix = jnp.array(network_hydrogen.ELEMENT_MATRIX)
    y = jnp.array([[3.0, 2.0, 4.0, 1.0, 3.0], [1.0, 1.0, 1.0, 1.0, 2.0]])
    y0 = jnp.array([[10.0], [4.0]])

    diagnose.check_element_conservation(y, y0, element_matrix)

    with pytest.raises(ValueError, match="not conserved"):
        diagnose.check_element_conservation(y, y0 * 1.01, element_matrix)


def test_check_all():
    element_matrix = jnp.array(network_hydrogen.ELEMENT_MATRIX)
    y = jnp.array([3.0, 2.0, 4.0, 1.0, 3.0])

    diagnose.check_all(y, jnp.array([10.0]), element_matrix)


def test_setup_logging_quiets_other_ranks():
    diagnose.setup_logging(rank=1, level=logging.DEBUG)

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert all(h.level >= logging.WARNING for h in root.handlers)

    diagnose.setup_logging(rank=0, level=logging.INFO)
    assert all(h.level == logging.INFO for h in root.handlers)
