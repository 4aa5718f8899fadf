from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from jaxtyping import Array, Bool, Float


RatesFn = Callable[
    [Float[Array, ""], Float[Array, ""], Float[Array, ""]],
    Float[Array, " n_reac"],
]
DerivativesFn = Callable[
    [Float[Array, " n_spec"], Float[Array, " n_reac"], Float[Array, " n_elem"]],
    Float[Array, " n_spec"],
]
JacobianFn = Callable[
    [Float[Array, " n_spec"], Float[Array, " n_reac"]],
    Float[Array, "n_spec n_spec"],
]
ConservationCheckFn = Callable[
    [Float[Array, " n_spec"], Float[Array, " n_elem"]],
    Bool[Array, ""],
]
InitialGuessFn = Callable[
    [Float[Array, " n_spec"], Float[Array, " n_elem"]],
    Float[Array, " n_spec"],
]


@dataclass(frozen=True)
class ReactionNetwork:
    """Chemical/ionic reaction network acting on a single cell.

    The network is a bundle of pure JAX functions together with its sizes. It is
    hashable so it can be passed as a static argument to `jax.jit`.

    Layout of the derivative vector: the first `n_nequ` rows are rate equations
    dy_i/dt that are integrated implicitly. The remaining rows are algebraic
    constraints (element conservation, charge neutrality) written as residuals
    that vanish for a consistent species vector.

    Attributes:
        name: Network identifier.
        species_names: Species in the order of the species vector.
        n_reac: Number of reaction rates returned by `reaction_rates`.
        n_elem: Number of element totals (length of y0).
        n_nequ: Number of rate equations solved implicitly.
        reaction_rates: (T, phiH, phiC) -> rate
        derivatives: (y, rate, y0) -> dydt
        jacobian: (y, rate) -> d(dydt)/dy
        needs_reset: (y, y0) -> True when y violates the conservation laws
        initial_guess: (y, y0) -> species vector consistent with y0
    """

    name: str
    species_names: tuple[str, ...]
    n_reac: int
    n_elem: int
    n_nequ: int
    reaction_rates: RatesFn
    derivatives: DerivativesFn
    jacobian: JacobianFn
    needs_reset: ConservationCheckFn
    initial_guess: InitialGuessFn

    def __post_init__(self):
        n_spec = len(self.species_names)
        if n_spec < 1:
            raise ValueError("species_names must contain at least one species")
        if len(set(self.species_names)) != n_spec:
            raise ValueError(f"species_names must be unique, got {self.species_names}")
        if self.n_reac < 1:
            raise ValueError(f"n_reac must be >= 1, got {self.n_reac}")
        if self.n_elem < 1:
            raise ValueError(f"n_elem must be >= 1, got {self.n_elem}")
        if not 0 < self.n_nequ <= n_spec:
            raise ValueError(
                f"n_nequ must be in [1, {n_spec}], got {self.n_nequ}"
            )

    @property
    def n_spec(self) -> int:
        """Number of species in the network."""
        return len(self.species_names)

    def species_index(self, name: str) -> int:
        """Position of a species in the species vector."""
        try:
            return self.species_names.index(name)
        except ValueError:
            raise ValueError(
                f"Unknown species '{name}' for network '{self.name}', "
                f"known species: {self.species_names}"
            ) from None
