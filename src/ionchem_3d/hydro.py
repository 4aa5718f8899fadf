import functools

import jax
import jax.numpy as jnp
from jaxtyping import Array, Float

from ionchem_core import constants
from ionchem_core.diagnose import runtime_check_array_sizes
from ionchem_3d.hydro_types import HydroConfig


def temperature(
    primit: Float[Array, " neq"], hydro: HydroConfig
) -> Float[Array, ""]:
    """Temperature [K] from p = n k_B T.

    n is the sum of the particle slots if configured, otherwise rho / (mu amu).
    """
    p_cgs = primit[4] * hydro.pressure_scale
    if hydro.particle_slots:
        n = jnp.sum(primit[jnp.array(hydro.particle_slots)])
    else:
        n = primit[0] * hydro.rho_scale / (hydro.mu * constants.amu)
    n = jnp.maximum(n, constants.DENSITY_FLOOR)

    return p_cgs / (n * constants.k_B)


def conserved_to_primitives(
    u: Float[Array, " neq"], hydro: HydroConfig
) -> tuple[Float[Array, " neq"], Float[Array, ""]]:
    """Convert the conserved vector of one cell to primitives and temperature.

    Passive scalars are copied unchanged.
    """
    rho = jnp.maximum(u[0], hydro.rho_min)
    v = u[1:4] / rho
    e_kin = 0.5 * rho * jnp.sum(v**2)
    p = jnp.maximum((hydro.gamma - 1.0) * (u[4] - e_kin), hydro.p_min)

    primit = jnp.concatenate([rho[None], v, p[None], u[hydro.neqdyn :]])

    return primit, temperature(primit, hydro)


def primitives_to_conserved(
    primit: Float[Array, " neq"], hydro: HydroConfig
) -> Float[Array, " neq"]:
    """Convert the primitive vector of one cell to conserved variables."""
    rho = primit[0]
    v = primit[1:4]
    E = primit[4] / (hydro.gamma - 1.0) + 0.5 * rho * jnp.sum(v**2)

    return jnp.concatenate([rho[None], rho * v, E[None], primit[hydro.neqdyn :]])


@runtime_check_array_sizes
def conserved_to_primitives_cells(
    u: Float[Array, "n_cells neq"], hydro: HydroConfig
) -> tuple[Float[Array, "n_cells neq"], Float[Array, " n_cells"]]:
    """`conserved_to_primitives` for a batch of cells."""
    return jax.vmap(functools.partial(conserved_to_primitives, hydro=hydro))(u)


@runtime_check_array_sizes
def primitives_to_conserved_cells(
    primit: Float[Array, "n_cells neq"], hydro: HydroConfig
) -> Float[Array, "n_cells neq"]:
    """`primitives_to_conserved` for a batch of cells."""
    return jax.vmap(functools.partial(primitives_to_conserved, hydro=hydro))(primit)
