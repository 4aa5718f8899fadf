"""Hot/cold atomic hydrogen ionization network.

Tracks the hydrogen of two interacting flows separately: a hot component (stellar
wind) and a cold component (planetary outflow). Both are ionized by collisions
and by the local photoionizing flux, recombine radiatively and exchange charge
with each other.

Species vector:
    y = [Hh0, Hhp, Hc0, Hcp, e-]  [1/cm^3]

Element totals:
    y0 = [n_H]  total hydrogen number density [1/cm^3]

Reactions (rate vector):
    0: H0 + e- -> H+ + 2e-      collisional ionization  [cm^3/s]
    1: H+ + e- -> H0 + hv       case-B recombination    [cm^3/s]
    2: Hh0 + hv -> Hhp + e-     photoionization (hot)   [1/s]
    3: Hc0 + hv -> Hcp + e-     photoionization (cold)  [1/s]
    4: Hh0 + Hcp <-> Hhp + Hc0  resonant charge exchange [cm^3/s]

Only the first three species are integrated as rate equations. The last two rows
of the derivative vector are the hydrogen conservation and charge neutrality
residuals.
"""

import functools
from dataclasses import dataclass

import jax.numpy as jnp
from jaxtyping import Array, Bool, Float

from ionchem_core import constants
from ionchem_core.network_types import ReactionNetwork

HH0, HHP, HC0, HCP, IE = range(5)

SPECIES_NAMES = ("Hh0", "Hhp", "Hc0", "Hcp", "e-")
N_REAC = 5
N_ELEM = 1
N_NEQU = 3

# hydrogen atoms per species
ELEMENT_MATRIX = ((1.0, 1.0, 1.0, 1.0, 0.0),)

T_MIN = 10.0
T_MAX = 1e9


@dataclass(frozen=True)
class HydrogenRateCoefficients:
    """Fit coefficients for the temperature dependent rates.

    Attributes:
        coll_ion_A: collisional ionization prefactor [cm^3 s^-1 K^-1/2]
        coll_ion_T: ionization temperature I_H/k_B [K]
        recomb_alpha: case-B recombination coefficient at recomb_T_ref [cm^3/s]
        recomb_exponent: power law index of the recombination fit
        recomb_T_ref: reference temperature of the recombination fit [K]
        charge_exchange_beta: charge exchange coefficient at cx_T_ref [cm^3/s]
        charge_exchange_exponent: power law index of the charge exchange fit
        cx_T_ref: reference temperature of the charge exchange fit [K]
        conservation_rtol: relative mismatch of n_H or charge that triggers a reset
    """

    coll_ion_A: float = 5.83e-11
    coll_ion_T: float = 157828.0
    recomb_alpha: float = 2.55e-13
    recomb_exponent: float = 0.79
    recomb_T_ref: float = 1e4
    charge_exchange_beta: float = 8.0e-9
    charge_exchange_exponent: float = 0.5
    cx_T_ref: float = 1e4
    conservation_rtol: float = 1e-3

    def __post_init__(self):
        for name in (
            "coll_ion_A",
            "coll_ion_T",
            "recomb_alpha",
            "recomb_T_ref",
            "cx_T_ref",
            "conservation_rtol",
        ):
            if getattr(self, name) <= 0.0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if self.charge_exchange_beta < 0.0:
            raise ValueError(
                f"charge_exchange_beta must be >= 0, got {self.charge_exchange_beta}"
            )


def reaction_rates(
    T: Float[Array, ""],
    phiH: Float[Array, ""],
    phiC: Float[Array, ""],
    coefficients: HydrogenRateCoefficients,
) -> Float[Array, " 5"]:
    """Rate coefficients at temperature T and photoionization rates phiH, phiC."""
    T = jnp.clip(T, T_MIN, T_MAX)

    alpha_coll = (
        coefficients.coll_ion_A * jnp.sqrt(T) * jnp.exp(-coefficients.coll_ion_T / T)
    )
    alpha_rec = coefficients.recomb_alpha * (
        coefficients.recomb_T_ref / T
    ) ** coefficients.recomb_exponent
    beta_cx = coefficients.charge_exchange_beta * (
        T / coefficients.cx_T_ref
    ) ** coefficients.charge_exchange_exponent

    return jnp.stack(
        [
            alpha_coll,
            alpha_rec,
            jnp.asarray(phiH, dtype=alpha_coll.dtype),
            jnp.asarray(phiC, dtype=alpha_coll.dtype),
            beta_cx,
        ]
    )


def derivatives(
    y: Float[Array, " 5"],
    rate: Float[Array, " 5"],
    y0: Float[Array, " 1"],
) -> Float[Array, " 5"]:
    """Rate equations for Hh0, Hhp, Hc0 followed by the two constraint residuals."""
    ne = y[IE]
    cx = rate[4] * (y[HH0] * y[HCP] - y[HHP] * y[HC0])

    dHh0 = -rate[0] * y[HH0] * ne + rate[1] * y[HHP] * ne - rate[2] * y[HH0] - cx
    dHhp = rate[0] * y[HH0] * ne - rate[1] * y[HHP] * ne + rate[2] * y[HH0] + cx
    dHc0 = -rate[0] * y[HC0] * ne + rate[1] * y[HCP] * ne - rate[3] * y[HC0] + cx

    # n_H - (Hh0 + Hhp + Hc0 + Hcp) = 0
    hydrogen = y0[0] - (y[HH0] + y[HHP] + y[HC0] + y[HCP])
    # Hhp + Hcp - e- = 0
    charge = y[HHP] + y[HCP] - y[IE]

    return jnp.stack([dHh0, dHhp, dHc0, hydrogen, charge])


def jacobian(
    y: Float[Array, " 5"],
    rate: Float[Array, " 5"],
) -> Float[Array, "5 5"]:
    """Analytic Jacobian of `derivatives` with respect to y."""
    ne = y[IE]
    zero = jnp.zeros_like(ne)
    one = jnp.ones_like(ne)

    # d(cx)/dy
    dcx = jnp.stack(
        [
            rate[4] * y[HCP],
            -rate[4] * y[HC0],
            -rate[4] * y[HHP],
            rate[4] * y[HH0],
            zero,
        ]
    )

    row_hh0 = (
        jnp.stack(
            [
                -rate[0] * ne - rate[2],
                rate[1] * ne,
                zero,
                zero,
                -rate[0] * y[HH0] + rate[1] * y[HHP],
            ]
        )
        - dcx
    )
    row_hhp = (
        jnp.stack(
            [
                rate[0] * ne + rate[2],
                -rate[1] * ne,
                zero,
                zero,
                rate[0] * y[HH0] - rate[1] * y[HHP],
            ]
        )
        + dcx
    )
    row_hc0 = (
        jnp.stack(
            [
                zero,
                zero,
                -rate[0] * ne - rate[3],
                rate[1] * ne,
                -rate[0] * y[HC0] + rate[1] * y[HCP],
            ]
        )
        + dcx
    )
    row_hydrogen = jnp.stack([-one, -one, -one, -one, zero])
    row_charge = jnp.stack([zero, one, zero, one, -one])

    return jnp.stack([row_hh0, row_hhp, row_hc0, row_hydrogen, row_charge])


def needs_reset(
    y: Float[Array, " 5"],
    y0: Float[Array, " 1"],
    rtol: float = 1e-3,
) -> Bool[Array, ""]:
    """True if y is negative or does not add up to n_H or to charge neutrality."""
    n_H = jnp.maximum(y0[0], constants.DENSITY_FLOOR)
    total = y[HH0] + y[HHP] + y[HC0] + y[HCP]

    bad_total = jnp.abs(total - y0[0]) > rtol * n_H
    bad_charge = jnp.abs(y[HHP] + y[HCP] - y[IE]) > rtol * n_H

    return jnp.any(y < 0.0) | bad_total | bad_charge


def initial_guess(
    y: Float[Array, " 5"],
    y0: Float[Array, " 1"],
) -> Float[Array, " 5"]:
    """Rescale y onto n_H keeping its hot/cold split and ionization fraction.

    Without usable hydrogen in y the gas is taken as hot and half ionized.
    """
    y_pos = jnp.maximum(y, 0.0)
    total = y_pos[HH0] + y_pos[HHP] + y_pos[HC0] + y_pos[HCP]
    has_total = total > 0.0
    safe_total = jnp.where(has_total, total, 1.0)

    hot = jnp.where(has_total, (y_pos[HH0] + y_pos[HHP]) / safe_total, 1.0)
    ion = jnp.where(has_total, (y_pos[HHP] + y_pos[HCP]) / safe_total, 0.5)
    hot = jnp.clip(hot, 0.0, 1.0)
    ion = jnp.clip(ion, 0.0, 1.0)

    n_H = y0[0]
    y_new = jnp.stack(
        [
            hot * (1.0 - ion) * n_H,
            hot * ion * n_H,
            (1.0 - hot) * (1.0 - ion) * n_H,
            (1.0 - hot) * ion * n_H,
            ion * n_H,
        ]
    )

    return jnp.maximum(y_new, constants.DENSITY_FLOOR).astype(y.dtype)


def build_hydrogen_network(
    coefficients: HydrogenRateCoefficients | None = None,
) -> ReactionNetwork:
    """Bundle the hot/cold hydrogen network with the given rate coefficients."""
    if coefficients is None:
        coefficients = HydrogenRateCoefficients()

    return ReactionNetwork(
        name="hydrogen_hot_cold",
        species_names=SPECIES_NAMES,
        n_reac=N_REAC,
        n_elem=N_ELEM,
        n_nequ=N_NEQU,
        reaction_rates=functools.partial(reaction_rates, coefficients=coefficients),
        derivatives=derivatives,
        jacobian=jacobian,
        needs_reset=functools.partial(
            needs_reset, rtol=coefficients.conservation_rtol
        ),
        initial_guess=initial_guess,
    )
