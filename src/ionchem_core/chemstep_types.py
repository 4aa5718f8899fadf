from dataclasses import dataclass
from typing import Literal, NamedTuple

from jaxtyping import Array, Bool, Float, Int

from ionchem_core import constants


@dataclass(frozen=True)
class ChemstepConfig:
    """Settings of the implicit Newton-Raphson chemistry step.

    Attributes:
        max_iterations: Newton-Raphson iteration budget per cell.
        atol: Convergence when every |dy_i| <= atol. Absolute, independent of |y|.
        density_floor: Lower bound applied to y after each update.
        linear_solver: Dense solver used for the Newton correction.
    """

    max_iterations: int = 100
    atol: float = 1e-4
    density_floor: float = constants.DENSITY_FLOOR
    linear_solver: Literal["lu", "solve"] = "lu"

    def __post_init__(self):
        if self.max_iterations < 1:
            raise ValueError(
                f"max_iterations must be >= 1, got {self.max_iterations}"
            )
        if self.atol <= 0.0:
            raise ValueError(f"atol must be positive, got {self.atol}")
        if self.density_floor < 0.0:
            raise ValueError(
                f"density_floor must be >= 0, got {self.density_floor}"
            )
        valid_solvers = ["lu", "solve"]
        if self.linear_solver not in valid_solvers:
            raise ValueError(
                f"linear_solver must be one of {valid_solvers}, "
                f"got {self.linear_solver}"
            )


class StepResult(NamedTuple):
    y: Float[Array, " n_spec"]
    """Converged (or last) species number densities."""
    converged: Bool[Array, ""]
    """False if the iteration budget was exhausted."""
    n_iterations: Int[Array, ""]
    """Number of Newton-Raphson updates performed."""
