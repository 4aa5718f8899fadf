"""Chemistry pass over the interior of a 3D grid.

Operator split chemistry update, called once per hydrodynamic time step: every
interior cell is converted to primitives, its species vector is advanced with
the implicit chemistry step if the cell lies inside the chemistry region, and
the result is written back to both the primitive and the conserved variables.
"""

import functools
import logging

import jax
import jax.numpy as jnp
import pydantic
from jaxtyping import Array, Bool, Float, Int

from ionchem_core import chemstep as chemstep_module
from ionchem_core.network_types import ReactionNetwork
from ionchem_3d import grid as grid_module
from ionchem_3d import hydro as hydro_module
from ionchem_3d.chemistry_types import ChemistryConfig, ChemistryUpdate, RadiationFields
from ionchem_3d.grid_types import GridConfig
from ionchem_3d.hydro_types import HydroConfig

logger = logging.getLogger(__name__)


def check_layout(
    u: Float[Array, "neq nxg nyg nzg"],
    primit: Float[Array, "neq nxg nyg nzg"],
    radiation: RadiationFields,
    network: ReactionNetwork,
    grid: GridConfig,
    hydro: HydroConfig,
    chem: ChemistryConfig,
) -> None:
    """Raise ValueError if the arrays do not match the configuration."""
    expected = grid.shape_with_ghosts
    if u.ndim != 4 or u.shape[1:] != expected:
        raise ValueError(f"u must have shape (neq, {expected}), got {u.shape}")
    if primit.shape != u.shape:
        raise ValueError(
            f"primit shape {primit.shape} does not match u shape {u.shape}"
        )

    neq = u.shape[0]
    chem_end = chem.n1_chem + network.n_spec
    if chem.n1_chem < hydro.neqdyn or chem_end > neq:
        raise ValueError(
            f"chemistry slots [{chem.n1_chem}, {chem_end}) must lie within the "
            f"passive scalars [{hydro.neqdyn}, {neq})"
        )
    if not hydro.neqdyn <= chem.passive_scalar_slot < neq:
        raise ValueError(
            f"passive_scalar_slot {chem.passive_scalar_slot} must lie within "
            f"[{hydro.neqdyn}, {neq})"
        )
    if chem.n1_chem <= chem.passive_scalar_slot < chem_end:
        raise ValueError(
            f"passive_scalar_slot {chem.passive_scalar_slot} overlaps the "
            f"chemistry slots [{chem.n1_chem}, {chem_end})"
        )
    if len(chem.element_slots) != network.n_elem:
        raise ValueError(
            f"network '{network.name}' expects {network.n_elem} element totals, "
            f"got element_slots {chem.element_slots}"
        )
    if any(not 0 <= s < neq for s in chem.element_slots):
        raise ValueError(f"element_slots {chem.element_slots} out of range [0, {neq})")

    for name, phi in zip(radiation._fields, radiation):
        if phi.shape != grid.shape:
            raise ValueError(
                f"radiation field {name} must have shape {grid.shape}, got {phi.shape}"
            )


def chemistry_region(grid: GridConfig, chem: ChemistryConfig) -> Bool[Array, "nx ny nz"]:
    """Cells in which the chemistry is advanced."""
    return grid_module.cell_radii(grid) < chem.radius


@functools.partial(jax.jit, static_argnames=("network", "hydro", "chem"))
def advance_cells(
    u_cells: Float[Array, "n_cells neq"],
    phi_hot: Float[Array, " n_cells"],
    phi_cold: Float[Array, " n_cells"],
    inside: Bool[Array, " n_cells"],
    deltt: Float[Array, ""],
    network: ReactionNetwork,
    hydro: HydroConfig,
    chem: ChemistryConfig,
) -> tuple[
    Float[Array, "n_cells neq"],
    Float[Array, "n_cells neq"],
    Int[Array, ""],
]:
    """Chemistry update of a batch of independent cells.

    Args:
        u_cells: Conserved variables, one row per cell.
        phi_hot, phi_cold: Photoionization rates per cell [1/s].
        inside: Cells in which the chemistry is advanced; elsewhere the
            species are left unchanged.
        deltt: Time step [s].
        network: Reaction network.
        hydro: Equation of state.
        chem: Chemistry coupling.

    Returns:
        u_cells: Updated conserved variables.
        primit_cells: Updated primitive variables.
        n_failed: Number of cells inside the chemistry region that did not
            converge.
    """
    primit_cells, T = hydro_module.conserved_to_primitives_cells(u_cells, hydro)

    chem_slots = slice(chem.n1_chem, chem.n1_chem + network.n_spec)
    y = primit_cells[:, chem_slots]
    y0 = primit_cells[:, jnp.array(chem.element_slots)] * chem.element_scale

    def step(y, y0, T, deltt, phiH, phiC, active):
        return chemstep_module.chemstep(
            y, y0, T, deltt, phiH, phiC, network, chem.chemstep, active
        )

    # cells outside the region start the iteration converged
    result = jax.vmap(step, in_axes=(0, 0, 0, None, 0, 0, 0))(
        y, y0, T, deltt, phi_hot, phi_cold, inside
    )

    y = jnp.where(inside[:, None], result.y.astype(y.dtype), y)
    n_failed = jnp.sum(inside & ~result.converged)

    i_a = network.species_index(chem.passive_scalar_species[0])
    i_b = network.species_index(chem.passive_scalar_species[1])
    passive = y[:, i_a] + y[:, i_b]

    primit_cells = primit_cells.at[:, chem_slots].set(y)
    primit_cells = primit_cells.at[:, chem.passive_scalar_slot].set(passive)
    u_cells = u_cells.at[:, chem_slots].set(y)
    u_cells = u_cells.at[:, chem.passive_scalar_slot].set(passive)

    return u_cells, primit_cells, n_failed


def update_chem(
    u: Float[Array, "neq nxg nyg nzg"],
    primit: Float[Array, "neq nxg nyg nzg"],
    dt_cfl: pydantic.PositiveFloat,
    radiation: RadiationFields,
    network: ReactionNetwork,
    grid: GridConfig,
    hydro: HydroConfig,
    chem: ChemistryConfig,
) -> ChemistryUpdate:
    """Advance the chemistry network on all interior cells of the local grid.

    Primitives of every interior cell are recomputed from u, also in cells
    outside the chemistry region. Ghost cells are returned unchanged.

    Args:
        u: Conserved variables with ghost cells [neq, nx+2g, ny+2g, nz+2g].
        primit: Primitive variables, same layout as u.
        dt_cfl: Hydrodynamic time step [code units].
        radiation: Photoionization rates on the interior cells [1/s].
        network: Reaction network.
        grid: Local grid block.
        hydro: Equation of state and unit scalings.
        chem: Chemistry coupling.

    Returns:
        ChemistryUpdate with the new u and primit and the number of cells in
        which the Newton-Raphson iteration did not converge.
    """
    check_layout(u, primit, radiation, network, grid, hydro, chem)

    dt_seconds = dt_cfl * hydro.time_scale
    if dt_seconds <= 0.0:
        raise ValueError(f"time step must be positive, got {dt_seconds} s")

    u_cells = grid_module.to_cells(grid_module.interior(u, grid))
    inside = chemistry_region(grid, chem).reshape(-1)

    u_cells, primit_cells, n_failed = advance_cells(
        u_cells,
        radiation.phi_hot.reshape(-1),
        radiation.phi_cold.reshape(-1),
        inside,
        jnp.asarray(dt_seconds),
        network=network,
        hydro=hydro,
        chem=chem,
    )

    u = grid_module.set_interior(u, grid_module.from_cells(u_cells, grid), grid)
    primit = grid_module.set_interior(
        primit, grid_module.from_cells(primit_cells, grid), grid
    )

    n_failed = int(n_failed)
    logger.debug(
        "chemistry advanced in %d of %d cells, dt=%.3e s",
        int(jnp.sum(inside)),
        grid.n_cells,
        dt_seconds,
    )
    if n_failed > 0:
        logger.warning(
            "in rank: %d chemistry convergence failed in %d cells", grid.rank, n_failed
        )

    return ChemistryUpdate(u=u, primit=primit, n_failed=n_failed)
