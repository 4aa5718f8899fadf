from typing import Literal

import jax.numpy as jnp
import jax.scipy.linalg
from jaxtyping import Array, Float


def linsys(
    a: Float[Array, "n n"],
    b: Float[Array, " n"],
    method: Literal["lu", "solve"] = "lu",
) -> Float[Array, " n"]:
    """Solve the dense linear system a @ x = b.

    A singular `a` does not raise; the result then contains inf/NaN entries.

    Args:
        a: System matrix.
        b: Right hand side.
        method: "lu" uses an LU factorization with partial pivoting,
            "solve" uses `jnp.linalg.solve`.

    Returns:
        x: Solution vector.
    """
    if method == "lu":
        lu_and_piv = jax.scipy.linalg.lu_factor(a)
        return jax.scipy.linalg.lu_solve(lu_and_piv, b)
    elif method == "solve":
        return jnp.linalg.solve(a, b)
    else:
        raise ValueError(f"Unknown linear solver method: {method}")
