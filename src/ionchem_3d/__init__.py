"""Implicit ionization chemistry on a 3D hydrodynamic grid."""

from .chemistry import update_chem, advance_cells
from .chemistry_types import ChemistryConfig, ChemistryUpdate, RadiationFields
from .chemistry_utils import load_chemistry_config, load_grid_config, load_hydro_config
from .grid_types import GridConfig
from .hydro_types import HydroConfig

__all__ = [
    "update_chem",
    "advance_cells",
    "ChemistryConfig",
    "ChemistryUpdate",
    "RadiationFields",
    "load_chemistry_config",
    "load_grid_config",
    "load_hydro_config",
    "GridConfig",
    "HydroConfig",
]
