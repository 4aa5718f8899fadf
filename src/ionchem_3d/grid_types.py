from dataclasses import dataclass


@dataclass(frozen=True)
class GridConfig:
    """Local block of a uniform 3D grid owned by one rank.

    Attributes:
        nx, ny, nz: Number of interior cells of the local block.
        n_ghost: Number of ghost cells on each side.
        dx, dy, dz: Cell sizes [code units].
        coords: Position of the block in the rank decomposition.
        dims: Number of blocks per direction.
        rank: Rank owning the block (used in diagnostics only).
        center: Reference point of the chemistry region [code units]. None
            selects the centre of the global grid.
    """

    nx: int
    ny: int
    nz: int
    dx: float
    dy: float
    dz: float
    n_ghost: int = 2
    coords: tuple[int, int, int] = (0, 0, 0)
    dims: tuple[int, int, int] = (1, 1, 1)
    rank: int = 0
    center: tuple[float, float, float] | None = None

    def __post_init__(self):
        for name in ("nx", "ny", "nz"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1, got {getattr(self, name)}")
        for name in ("dx", "dy", "dz"):
            if getattr(self, name) <= 0.0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if self.n_ghost < 0:
            raise ValueError(f"n_ghost must be >= 0, got {self.n_ghost}")
        if len(self.coords) != 3 or len(self.dims) != 3:
            raise ValueError("coords and dims must have three entries")
        for c, d in zip(self.coords, self.dims):
            if d < 1 or not 0 <= c < d:
                raise ValueError(
                    f"coords {self.coords} must lie inside dims {self.dims}"
                )
        if self.center is not None and len(self.center) != 3:
            raise ValueError(f"center must have three entries, got {self.center}")

    @property
    def shape(self) -> tuple[int, int, int]:
        """Interior shape of the local block."""
        return (self.nx, self.ny, self.nz)

    @property
    def shape_with_ghosts(self) -> tuple[int, int, int]:
        g2 = 2 * self.n_ghost
        return (self.nx + g2, self.ny + g2, self.nz + g2)

    @property
    def n_cells(self) -> int:
        return self.nx * self.ny * self.nz

    @property
    def nxtot(self) -> int:
        return self.nx * self.dims[0]

    @property
    def nytot(self) -> int:
        return self.ny * self.dims[1]

    @property
    def nztot(self) -> int:
        return self.nz * self.dims[2]
