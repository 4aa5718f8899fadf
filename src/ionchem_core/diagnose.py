import logging

import jax.numpy as jnp
import jaxtyping as jt
from beartype import beartype

from ionchem_core import constants


def runtime_check_array_sizes(f):
    """Decorator to enforce jaxtyping shape annotations at runtime."""
    return jt.jaxtyped(typechecker=beartype)(f)


def setup_logging(rank: int = 0, level: int = logging.INFO) -> None:
    """Configure root logging once; ranks other than 0 only show warnings."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )
    root.setLevel(level)

    handler_level = level if rank == 0 else max(level, logging.WARNING)
    for handler in root.handlers:
        handler.setLevel(handler_level)


def check_nan_inf(y) -> None:
    if jnp.any(jnp.isnan(y)):
        raise ValueError("NaN values present in species densities.")

    if jnp.any(jnp.isinf(y)):
        raise ValueError("Inf values present in species densities.")


def check_positivity(y, floor: float = constants.DENSITY_FLOOR) -> None:
    if jnp.any(y < floor):
        raise ValueError(f"Species density below floor {floor:.1e}.")


def check_element_conservation(y, y0, element_matrix, rtol: float = 1e-6) -> None:
    """Check that element_matrix @ y reproduces the element totals y0.

    Args:
        y: Species densities [..., n_spec].
        y0: Element totals [..., n_elem].
        element_matrix: Number of atoms of each element per species [n_elem, n_spec].
        rtol: Tolerance relative to y0.
    """
    totals = jnp.einsum("es,...s->...e", element_matrix, y)
    if not jnp.allclose(totals, y0, rtol=rtol, atol=0.0):
        raise ValueError("Element totals are not conserved.")


def check_all(y, y0, element_matrix, floor: float = constants.DENSITY_FLOOR) -> None:
    check_nan_inf(y)
    check_positivity(y, floor)
    check_element_conservation(y, y0, element_matrix)
