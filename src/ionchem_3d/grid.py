import jax.numpy as jnp
from jaxtyping import Array, Float

from ionchem_3d.grid_types import GridConfig


def interior(
    field: Float[Array, "n_var nxg nyg nzg"], grid: GridConfig
) -> Float[Array, "n_var nx ny nz"]:
    """Interior cells of a field with ghost cells."""
    g = grid.n_ghost
    return field[:, g : g + grid.nx, g : g + grid.ny, g : g + grid.nz]


def set_interior(
    field: Float[Array, "n_var nxg nyg nzg"],
    values: Float[Array, "n_var nx ny nz"],
    grid: GridConfig,
) -> Float[Array, "n_var nxg nyg nzg"]:
    """Replace the interior cells of a field, leaving the ghost cells untouched."""
    g = grid.n_ghost
    return field.at[:, g : g + grid.nx, g : g + grid.ny, g : g + grid.nz].set(values)


def to_cells(field: Float[Array, "n_var nx ny nz"]) -> Float[Array, "n_cells n_var"]:
    """Flatten an interior field to one row per cell (C order over i, j, k)."""
    return field.reshape(field.shape[0], -1).T


def from_cells(
    cells: Float[Array, "n_cells n_var"], grid: GridConfig
) -> Float[Array, "n_var nx ny nz"]:
    return cells.T.reshape((cells.shape[1],) + grid.shape)


def _axis_positions(n: int, offset: int, ntot: int, delta: float, center):
    index = jnp.arange(n) + offset
    if center is None:
        # grid centre, with the integer midpoint used for odd sizes
        return (index - ntot // 2 + 0.5) * delta
    return (index + 0.5) * delta - center


def cell_positions(
    grid: GridConfig,
) -> tuple[
    Float[Array, "nx ny nz"], Float[Array, "nx ny nz"], Float[Array, "nx ny nz"]
]:
    """Cell centre positions relative to the reference point [code units].

    The global index of a local cell is its local index plus the offset
    coords * n of the block.
    """
    center = grid.center if grid.center is not None else (None, None, None)

    x = _axis_positions(grid.nx, grid.coords[0] * grid.nx, grid.nxtot, grid.dx, center[0])
    y = _axis_positions(grid.ny, grid.coords[1] * grid.ny, grid.nytot, grid.dy, center[1])
    z = _axis_positions(grid.nz, grid.coords[2] * grid.nz, grid.nztot, grid.dz, center[2])

    return jnp.meshgrid(x, y, z, indexing="ij")


def cell_radii(grid: GridConfig) -> Float[Array, "nx ny nz"]:
    """Distance of each cell centre from the reference point [code units]."""
    x, y, z = cell_positions(grid)
    return jnp.sqrt(x**2 + y**2 + z**2)
