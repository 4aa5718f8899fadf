from dataclasses import dataclass, field
from typing import NamedTuple

from jaxtyping import Array, Float

from ionchem_core.chemstep_types import ChemstepConfig


@dataclass(frozen=True)
class ChemistryConfig:
    """Coupling of the reaction network to the hydrodynamic state vectors.

    Attributes:
        radius: Chemistry is advanced only in cells closer than this to the
            reference point of the grid [code units].
        n1_chem: First slot of the chemistry species in u and primit.
        element_slots: Primitive slots holding the element totals.
        element_scale: Factor converting element_slots into number densities
            [1/cm^3], e.g. rho_scale / m_H for hydrogen from the mass density.
        passive_scalar_slot: Slot of the derived passive scalar.
        passive_scalar_species: The two species whose sum is the passive scalar.
        chemstep: Settings of the Newton-Raphson step.
    """

    radius: float
    n1_chem: int
    passive_scalar_slot: int
    passive_scalar_species: tuple[str, str]
    element_slots: tuple[int, ...] = (0,)
    element_scale: float = 1.0
    chemstep: ChemstepConfig = field(default_factory=ChemstepConfig)

    def __post_init__(self):
        if self.radius <= 0.0:
            raise ValueError(f"radius must be positive, got {self.radius}")
        if self.n1_chem < 0:
            raise ValueError(f"n1_chem must be >= 0, got {self.n1_chem}")
        if self.passive_scalar_slot < 0:
            raise ValueError(
                f"passive_scalar_slot must be >= 0, got {self.passive_scalar_slot}"
            )
        if len(self.passive_scalar_species) != 2:
            raise ValueError(
                "passive_scalar_species must name two species, "
                f"got {self.passive_scalar_species}"
            )
        if len(self.element_slots) < 1:
            raise ValueError("element_slots must contain at least one slot")
        if self.element_scale <= 0.0:
            raise ValueError(
                f"element_scale must be positive, got {self.element_scale}"
            )


class RadiationFields(NamedTuple):
    phi_hot: Float[Array, "nx ny nz"]
    """Photoionization rate of the hot component [1/s]."""
    phi_cold: Float[Array, "nx ny nz"]
    """Photoionization rate of the cold component [1/s]."""


class ChemistryUpdate(NamedTuple):
    u: Float[Array, "neq nxg nyg nzg"]
    """Conserved variables after the chemistry pass."""
    primit: Float[Array, "neq nxg nyg nzg"]
    """Primitive variables after the chemistry pass."""
    n_failed: int
    """Number of cells whose Newton-Raphson iteration did not converge."""
