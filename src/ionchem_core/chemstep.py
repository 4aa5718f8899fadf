"""Implicit chemistry step for a single cell.

Advances the species number densities of one cell over a hydrodynamic time step
by solving the backward Euler equations

    dydt(y) - (y - y_in) / dt = 0        for the first n_nequ species
    constraint(y, y0) = 0                for the remaining rows

with a Newton-Raphson iteration. The reaction rates are evaluated once from
(T, phiH, phiC) and held fixed during the iteration.
"""

import jax
import jax.numpy as jnp
import pydantic
from jaxtyping import Array, Bool, Float

from ionchem_core import linear_system
from ionchem_core.chemstep_types import ChemstepConfig, StepResult
from ionchem_core.network_types import ReactionNetwork


def newton_update(
    y: Float[Array, " n_spec"],
    y_in: Float[Array, " n_spec"],
    y0: Float[Array, " n_elem"],
    rate: Float[Array, " n_reac"],
    dtm: Float[Array, ""],
    network: ReactionNetwork,
    config: ChemstepConfig,
) -> tuple[Float[Array, " n_spec"], Float[Array, " n_spec"], Bool[Array, ""]]:
    """Single Newton-Raphson update of the implicit chemistry equations.

    Args:
        y: Current iterate.
        y_in: Species vector at the start of the time step.
        y0: Element totals.
        rate: Reaction rates (fixed during the iteration).
        dtm: Inverse time step 1/dt [1/s].
        network: Reaction network.
        config: Step settings.

    Returns:
        y_new: Updated iterate, clipped to the density floor.
        dy: Newton correction.
        converged: True if all |dy_i| <= atol.
    """
    dydt = network.derivatives(y, rate, y0)
    jac = network.jacobian(y, rate)

    # backward Euler terms on the rate equations only
    implicit = jnp.arange(network.n_spec) < network.n_nequ
    jac = jac - jnp.diag(jnp.where(implicit, dtm, 0.0))
    dydt = dydt - jnp.where(implicit, (y - y_in) * dtm, 0.0)

    dy = linear_system.linsys(jac, -dydt, method=config.linear_solver)

    y_new = jnp.maximum(y + dy, config.density_floor).astype(y.dtype)
    converged = jnp.all(jnp.abs(dy) <= config.atol)

    return y_new, dy, converged


def chemstep(
    y: Float[Array, " n_spec"],
    y0: Float[Array, " n_elem"],
    T: Float[Array, ""],
    deltt: pydantic.PositiveFloat,
    phiH: Float[Array, ""],
    phiC: Float[Array, ""],
    network: ReactionNetwork,
    config: ChemstepConfig = ChemstepConfig(),
    active: Bool[Array, ""] = True,
) -> StepResult:
    """Advance the chemistry of one cell by deltt seconds.

    A y that violates the conservation laws of the network is replaced by the
    network's initial guess before the first Newton-Raphson update. If the
    iteration budget is exhausted the last iterate is returned with
    `converged=False`; no exception is raised.

    An inactive cell is returned unchanged with `converged=True` and zero
    iterations; no derivative or Jacobian is evaluated for it.

    deltt must be positive. A concrete Python number is checked here, traced
    values are the caller's responsibility.

    Args:
        y: Species number densities [1/cm^3].
        y0: Element totals [1/cm^3].
        T: Temperature [K].
        deltt: Time step [s].
        phiH: Photoionization rate of the hot component [1/s].
        phiC: Photoionization rate of the cold component [1/s].
        network: Reaction network.
        config: Step settings.
        active: Whether the cell is advanced at all.

    Returns:
        StepResult with the new species vector, convergence flag and number of
        iterations.
    """
    if isinstance(deltt, (int, float)) and not deltt > 0.0:
        raise ValueError(f"deltt must be positive, got {deltt}")

    dtype = jnp.result_type(y, y0, float)
    y = jnp.asarray(y, dtype=dtype)
    y0 = jnp.asarray(y0, dtype=dtype)
    dtm = 1.0 / jnp.asarray(deltt, dtype=dtype)

    y_in = y
    rate = network.reaction_rates(T, phiH, phiC)

    active = jnp.asarray(active, dtype=bool)

    y = jax.lax.cond(
        active & network.needs_reset(y, y0),
        lambda v: network.initial_guess(v, y0).astype(dtype),
        lambda v: v,
        y,
    )

    def cond_fun(carry):
        _, n, converged = carry
        return (n < config.max_iterations) & ~converged

    def body_fun(carry):
        y, n, _ = carry
        y, _, converged = newton_update(y, y_in, y0, rate, dtm, network, config)
        return y, n + 1, converged

    y, n, converged = jax.lax.while_loop(
        cond_fun, body_fun, (y, jnp.asarray(0), ~active)
    )

    return StepResult(y=y, converged=converged, n_iterations=n)
