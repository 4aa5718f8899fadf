"""Photoionization of a planetary outflow embedded in a stellar wind.

A 16^3 block around the planet is filled with neutral hydrogen, mostly cold
(planetary) inside r = 0.2 and mostly hot (wind) outside. The stellar flux
ionizes both components while charge exchange moves ionization between them.
The chemistry is advanced for a number of hydrodynamic steps and the radial
neutral fraction profile is plotted.
"""

from pathlib import Path

import jax
import jax.numpy as jnp
import matplotlib.pyplot as plt
import numpy as np

from ionchem_core import constants, diagnose, network_hydrogen, network_utils
from ionchem_3d import (
    RadiationFields,
    load_chemistry_config,
    load_grid_config,
    load_hydro_config,
    update_chem,
)
from ionchem_3d import grid as grid_module
from ionchem_3d import hydro as hydro_module

jax.config.update("jax_enable_x64", True)

diagnose.setup_logging()

data_dir = Path(__file__).parent.parent / "data"
run_file = data_dir / "wind_run.json"

print("=" * 80)
print("Wind / outflow photoionization")
print("=" * 80)

network = network_utils.load_network(data_dir / "hydrogen_hot_cold.json")
grid = load_grid_config(run_file)
hydro = load_hydro_config(run_file)
chem = load_chemistry_config(run_file)

neq = chem.n1_chem + network.n_spec
r = grid_module.cell_radii(grid)

# Initial conditions
n_H = jnp.where(r < 0.2, 1e4, 1e2)  # [1/cm^3]
hot_fraction = jnp.where(r < 0.2, 0.01, 0.99)
ion_fraction = 1e-3
T_gas = jnp.where(r < 0.2, 5e3, 1e6)  # [K]

y = jnp.stack(
    [
        hot_fraction * (1 - ion_fraction) * n_H,
        hot_fraction * ion_fraction * n_H,
        (1 - hot_fraction) * (1 - ion_fraction) * n_H,
        (1 - hot_fraction) * ion_fraction * n_H,
        ion_fraction * n_H,
    ]
)
n_particles = jnp.sum(y, axis=0)
# rho_scale is the hydrogen mass, so rho in code units is n_H
rho = n_H
p = n_particles * constants.k_B * T_gas / hydro.pressure_scale

primit_int = jnp.concatenate(
    [
        jnp.stack([rho, jnp.zeros_like(rho), jnp.zeros_like(rho), jnp.zeros_like(rho), p]),
        (y[network_hydrogen.HH0] + y[network_hydrogen.HC0])[None],
        y,
    ]
)
u_int = grid_module.from_cells(
    hydro_module.primitives_to_conserved_cells(grid_module.to_cells(primit_int), hydro),
    grid,
)

shape = (neq,) + grid.shape_with_ghosts
u = grid_module.set_interior(jnp.zeros(shape), u_int, grid)
primit = grid_module.set_interior(jnp.zeros(shape), primit_int, grid)

# Flux from a star along -x, weakly attenuated inside the outflow
x, _, _ = grid_module.cell_positions(grid)
phi_0 = 1e-5  # [1/s]
phi = phi_0 * jnp.where(r < 0.2, jnp.exp(-(x + 0.2) / 0.1), 1.0)
phi = jnp.minimum(phi, phi_0)
radiation = RadiationFields(phi_hot=phi, phi_cold=phi)

print("\nGrid:")
print(f"  cells: {grid.shape}, dx = {grid.dx} (code units)")
print(f"  chemistry radius: {chem.radius}")
print(f"  time scale: {hydro.time_scale:.2e} s")

# Time integration
dt_cfl = 1e-2
n_steps = 20

time_history = [0.0]
neutral_history = [float(jnp.mean(y[network_hydrogen.HH0] + y[network_hydrogen.HC0]))]

for i in range(n_steps):
    result = update_chem(u, primit, dt_cfl, radiation, network, grid, hydro, chem)
    u, primit = result.u, result.primit

    y_new = grid_module.interior(primit, grid)[chem.n1_chem :]
    time_history.append((i + 1) * dt_cfl * hydro.time_scale)
    neutral_history.append(
        float(jnp.mean(y_new[network_hydrogen.HH0] + y_new[network_hydrogen.HC0]))
    )

    if result.n_failed > 0:
        print(f"  Step {i}: {result.n_failed} cells did not converge")

y_final = grid_module.interior(primit, grid)[chem.n1_chem :]
rho_final = grid_module.interior(primit, grid)[0]
y_cells = grid_module.to_cells(y_final)
diagnose.check_all(
    y_cells,
    grid_module.to_cells(rho_final[None]) * chem.element_scale,
    jnp.array(network_hydrogen.ELEMENT_MATRIX),
)

print("\nIntegration complete!")

# Radial profiles
neutral_fraction = (
    y_final[network_hydrogen.HH0] + y_final[network_hydrogen.HC0]
) / n_H
hot_ion_fraction = y_final[network_hydrogen.HHP] / n_H
cold_ion_fraction = y_final[network_hydrogen.HCP] / n_H

r_flat = np.asarray(r).ravel()
order = np.argsort(r_flat)

fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(10, 8))

ax1.plot(r_flat[order], np.asarray(neutral_fraction).ravel()[order], ".", label="H0 / n_H")
ax1.plot(r_flat[order], np.asarray(hot_ion_fraction).ravel()[order], ".", label="Hh+ / n_H")
ax1.plot(r_flat[order], np.asarray(cold_ion_fraction).ravel()[order], ".", label="Hc+ / n_H")
ax1.axvline(chem.radius, color="k", linestyle="--", linewidth=1)
ax1.set_xlabel("r [code units]")
ax1.set_ylabel("Fraction")
ax1.set_yscale("log")
ax1.set_title("Ionization state after the chemistry passes")
ax1.legend()
ax1.grid(True, alpha=0.3)

ax2.plot(np.asarray(time_history), np.asarray(neutral_history), linewidth=2)
ax2.set_xlabel("Time [s]")
ax2.set_ylabel("Mean neutral density [1/cm^3]")
ax2.set_title("Neutral hydrogen")
ax2.grid(True, alpha=0.3)

plt.tight_layout()
plt.savefig(Path(__file__).parent / "wind_ionization_3d.png", dpi=150)
print("\nPlot saved to: experiments/wind_ionization_3d.png")

plt.show()
