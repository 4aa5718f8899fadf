import json
from pathlib import Path
from typing import Sequence

import jax
import jax.numpy as jnp
from jaxtyping import Array, Float

from ionchem_core import network_hydrogen
from ionchem_core.network_types import (
    ConservationCheckFn,
    DerivativesFn,
    InitialGuessFn,
    JacobianFn,
    RatesFn,
    ReactionNetwork,
)


def jacobian_from_derivatives(derivatives: DerivativesFn, n_elem: int) -> JacobianFn:
    """Build a Jacobian function by forward-mode differentiation of `derivatives`.

    The Jacobian signature has no element totals, so y0 enters the derivative
    function as zeros. This is exact as long as y0 only appears additively in the
    constraint rows, which holds for element conservation residuals.
    """

    def jacobian(
        y: Float[Array, " n_spec"], rate: Float[Array, " n_reac"]
    ) -> Float[Array, "n_spec n_spec"]:
        y0 = jnp.zeros((n_elem,), dtype=y.dtype)
        return jax.jacfwd(derivatives, argnums=0)(y, rate, y0)

    return jacobian


def _never_reset(y, y0):
    return jnp.asarray(False)


def _keep_guess(y, y0):
    return y


def build_network(
    name: str,
    species_names: Sequence[str],
    n_reac: int,
    n_elem: int,
    n_nequ: int,
    reaction_rates: RatesFn,
    derivatives: DerivativesFn,
    jacobian: JacobianFn | None = None,
    needs_reset: ConservationCheckFn | None = None,
    initial_guess: InitialGuessFn | None = None,
) -> ReactionNetwork:
    """Assemble a ReactionNetwork, filling in defaults for optional callables.

    - jacobian: derived with `jax.jacfwd` from `derivatives`
    - needs_reset: never requests a reset
    - initial_guess: returns y unchanged
    """
    if jacobian is None:
        jacobian = jacobian_from_derivatives(derivatives, n_elem)

    return ReactionNetwork(
        name=name,
        species_names=tuple(species_names),
        n_reac=n_reac,
        n_elem=n_elem,
        n_nequ=n_nequ,
        reaction_rates=reaction_rates,
        derivatives=derivatives,
        jacobian=jacobian,
        needs_reset=needs_reset if needs_reset is not None else _never_reset,
        initial_guess=initial_guess if initial_guess is not None else _keep_guess,
    )


def _load_hydrogen_coefficients(
    data: dict,
) -> network_hydrogen.HydrogenRateCoefficients:
    coll = data.get("collisional_ionization", {})
    recomb = data.get("radiative_recombination", {})
    cx = data.get("charge_exchange", {})
    defaults = network_hydrogen.HydrogenRateCoefficients()

    return network_hydrogen.HydrogenRateCoefficients(
        coll_ion_A=float(coll.get("A", defaults.coll_ion_A)),
        coll_ion_T=float(coll.get("T_ion", defaults.coll_ion_T)),
        recomb_alpha=float(recomb.get("alpha", defaults.recomb_alpha)),
        recomb_exponent=float(recomb.get("exponent", defaults.recomb_exponent)),
        recomb_T_ref=float(recomb.get("T_ref", defaults.recomb_T_ref)),
        charge_exchange_beta=float(cx.get("beta", defaults.charge_exchange_beta)),
        charge_exchange_exponent=float(
            cx.get("exponent", defaults.charge_exchange_exponent)
        ),
        cx_T_ref=float(cx.get("T_ref", defaults.cx_T_ref)),
        conservation_rtol=float(
            data.get("conservation_rtol", defaults.conservation_rtol)
        ),
    )


_NETWORK_BUILDERS = {
    "hydrogen_hot_cold": lambda data: network_hydrogen.build_hydrogen_network(
        _load_hydrogen_coefficients(data)
    ),
}


def load_network(json_path: str | Path) -> ReactionNetwork:
    """Load a reaction network from a JSON coefficient file.

    The file must name the network under the key "network"; the remaining keys
    are network specific coefficients.
    """
    with open(json_path, "r") as f:
        data = json.load(f)

    name = data.get("network")
    if name not in _NETWORK_BUILDERS:
        raise ValueError(
            f"Unknown network '{name}' in {json_path}, "
            f"available: {sorted(_NETWORK_BUILDERS)}"
        )

    return _NETWORK_BUILDERS[name](data)
