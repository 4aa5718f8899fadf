import json
from pathlib import Path

from ionchem_core.chemstep_types import ChemstepConfig
from ionchem_3d.chemistry_types import ChemistryConfig
from ionchem_3d.grid_types import GridConfig
from ionchem_3d.hydro_types import HydroConfig


def _load_json(json_path: str | Path) -> dict:
    with open(json_path, "r") as f:
        return json.load(f)


def _tuple_or_none(value):
    return tuple(value) if value is not None else None


def chemstep_config_from_dict(data: dict) -> ChemstepConfig:
    return ChemstepConfig(
        max_iterations=int(data.get("max_iterations", 100)),
        atol=float(data.get("atol", 1e-4)),
        density_floor=float(data.get("density_floor", ChemstepConfig.density_floor)),
        linear_solver=data.get("linear_solver", "lu"),
    )


def chemistry_config_from_dict(data: dict) -> ChemistryConfig:
    return ChemistryConfig(
        radius=float(data["radius"]),
        n1_chem=int(data["n1_chem"]),
        passive_scalar_slot=int(data["passive_scalar_slot"]),
        passive_scalar_species=tuple(data["passive_scalar_species"]),
        element_slots=tuple(int(s) for s in data.get("element_slots", (0,))),
        element_scale=float(data.get("element_scale", 1.0)),
        chemstep=chemstep_config_from_dict(data.get("chemstep", {})),
    )


def grid_config_from_dict(data: dict) -> GridConfig:
    return GridConfig(
        nx=int(data["nx"]),
        ny=int(data["ny"]),
        nz=int(data["nz"]),
        dx=float(data["dx"]),
        dy=float(data["dy"]),
        dz=float(data["dz"]),
        n_ghost=int(data.get("n_ghost", 2)),
        coords=tuple(data.get("coords", (0, 0, 0))),
        dims=tuple(data.get("dims", (1, 1, 1))),
        rank=int(data.get("rank", 0)),
        center=_tuple_or_none(data.get("center")),
    )


def hydro_config_from_dict(data: dict) -> HydroConfig:
    defaults = HydroConfig()
    return HydroConfig(
        gamma=float(data.get("gamma", defaults.gamma)),
        neqdyn=int(data.get("neqdyn", defaults.neqdyn)),
        rho_scale=float(data.get("rho_scale", defaults.rho_scale)),
        velocity_scale=float(data.get("velocity_scale", defaults.velocity_scale)),
        length_scale=float(data.get("length_scale", defaults.length_scale)),
        mu=float(data.get("mu", defaults.mu)),
        particle_slots=tuple(int(s) for s in data.get("particle_slots", ())),
        rho_min=float(data.get("rho_min", defaults.rho_min)),
        p_min=float(data.get("p_min", defaults.p_min)),
    )


def load_chemistry_config(json_path: str | Path) -> ChemistryConfig:
    """Load the "chemistry" section of a JSON run configuration."""
    return chemistry_config_from_dict(_load_json(json_path)["chemistry"])


def load_grid_config(json_path: str | Path) -> GridConfig:
    """Load the "grid" section of a JSON run configuration."""
    return grid_config_from_dict(_load_json(json_path)["grid"])


def load_hydro_config(json_path: str | Path) -> HydroConfig:
    """Load the "hydro" section of a JSON run configuration."""
    return hydro_config_from_dict(_load_json(json_path)["hydro"])
