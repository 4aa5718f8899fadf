from scipy import constants

# cgs units: number densities in [1/cm^3], rate coefficients in [cm^3/s]

k_B = constants.Boltzmann * 1e7  # [erg/K]

amu = constants.atomic_mass * 1e3  # [g]

m_H = constants.m_p * 1e3  # [g] hydrogen atom mass (proton mass)

DENSITY_FLOOR = 1e-40  # [1/cm^3] lower bound for species number densities
