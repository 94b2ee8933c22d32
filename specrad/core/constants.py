"""
Physical constants for specrad calculations.

All constants are in SI base units unless otherwise specified. Spectral
coordinates are carried in wavenumber (cm^-1) throughout the engine.
"""

import numpy as np

# ============================================================================
# Fundamental Constants
# ============================================================================

# Boltzmann constant
KB = 1.380649e-23  # J/K

# Planck constant
H_PLANCK = 6.62607015e-34  # J·s

# Speed of light
C_LIGHT = 2.99792458e8  # m/s

# Avogadro constant
N_AVOGADRO = 6.02214076e23  # mol^-1

# Universal gas constant
R_GAS = KB * N_AVOGADRO  # J/(mol·K)

# Stefan-Boltzmann constant
SIGMA_SB = 5.670374419e-8  # W m^-2 K^-4

# ============================================================================
# Radiation Constants
# ============================================================================

# First and second radiation constants in wavenumber form (per cm^-1)
# B(nu, T) = C1 * nu^3 / (exp(C2 * nu / T) - 1)   [W m^-2 sr^-1 (cm^-1)^-1]
C1_WAVENUMBER = 2.0 * H_PLANCK * C_LIGHT**2 * 1.0e8  # W m^-2 sr^-1 (cm^-1)^-4
C2_WAVENUMBER = H_PLANCK * C_LIGHT / KB * 100.0  # K cm

# Diffusivity factor for the two-stream thermal approximation (Elsasser)
DIFFUSIVITY = 1.66

# ============================================================================
# Atmospheric Constants
# ============================================================================

# Standard gravity
G_EARTH = 9.80665  # m/s^2

# Dry air
MU_DRY_AIR = 0.0289647  # kg/mol
CP_DRY_AIR = 1004.64  # J/(kg·K)

# Standard temperature and pressure
STP_TEMP = 273.15  # K
STP_PRESSURE = 101325.0  # Pa (1 atm)

# Loschmidt number (particles per m^3 at STP)
LOSCHMIDT = 2.686780111e25  # m^-3

# Rayleigh scattering cross section of air at 550 nm (18181.8 cm^-1)
RAYLEIGH_SIGMA_REF = 4.51e-31  # m^2
RAYLEIGH_WAVENUMBER_REF = 1.0e7 / 550.0  # cm^-1

# ============================================================================
# Numerical Constants
# ============================================================================

# Small number for numerical stability
EPSILON = np.finfo(np.float64).eps

# Tolerance on the phase-function normalization integral (= 2)
PHASE_NORM_RTOL = 1.0e-6

# Tolerance on mole-fraction and branching-ratio sums
FRACTION_SUM_TOL = 1.0e-6
