from dataclasses import dataclass


@dataclass(frozen=True)
class HydroConfig:
    """Equation of state and unit scalings of the host hydrodynamics.

    Conserved:  u = [rho, rho*vx, rho*vy, rho*vz, E, passive...]
    Primitive:  q = [rho, vx, vy, vz, p, passive...]

    Hydrodynamic variables are in code units, scaled by rho_scale,
    velocity_scale and length_scale (cgs). Passive scalars, including the
    chemistry species, are stored as number densities [1/cm^3] in both vectors.

    Attributes:
        gamma: Heat capacity ratio.
        neqdyn: Number of hydrodynamic equations.
        rho_scale: Density scale [g/cm^3].
        velocity_scale: Velocity scale [cm/s].
        length_scale: Length scale [cm].
        mu: Mean particle mass [amu], used when particle_slots is empty.
        particle_slots: Primitive slots whose sum is the particle number density
            [1/cm^3] entering the temperature, e.g. all chemistry species.
        rho_min: Density floor [code units].
        p_min: Pressure floor [code units].
    """

    gamma: float = 5.0 / 3.0
    neqdyn: int = 5
    rho_scale: float = 1.0
    velocity_scale: float = 1.0
    length_scale: float = 1.0
    mu: float = 1.0
    particle_slots: tuple[int, ...] = ()
    rho_min: float = 1e-30
    p_min: float = 1e-30

    def __post_init__(self):
        if self.gamma <= 1.0:
            raise ValueError(f"gamma must be > 1, got {self.gamma}")
        if self.neqdyn != 5:
            raise ValueError(f"only neqdyn=5 (3D Euler) is supported, got {self.neqdyn}")
        for name in ("rho_scale", "velocity_scale", "length_scale", "mu"):
            if getattr(self, name) <= 0.0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if any(slot < self.neqdyn for slot in self.particle_slots):
            raise ValueError(
                f"particle_slots must point at passive scalars (>= {self.neqdyn}), "
                f"got {self.particle_slots}"
            )

    @property
    def time_scale(self) -> float:
        """Time scale [s]."""
        return self.length_scale / self.velocity_scale

    @property
    def pressure_scale(self) -> float:
        """Pressure scale [erg/cm^3]."""
        return self.rho_scale * self.velocity_scale**2
