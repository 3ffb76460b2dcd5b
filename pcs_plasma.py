#!/usr/bin/env python3
"""
Plasma Physics Module - Characteristic plasma parameters

Closed-form plasma quantities for a uniform electron plasma:
  - Plasma (angular) frequency
  - Debye screening length
  - Magnetic pressure and plasma beta
  - Conductivity with an electrolyte (salt) enhancement

All inputs and outputs are SI. Callers are expected to pass validated
input; nothing here clamps or raises.
"""

import math

from pcs_constants import (
    MU0, EPSILON0, E_CHARGE, M_ELECTRON, K_BOLTZMANN,
    SALT_CONDUCTIVITY, CONDUCTIVITY_NORMALIZATION,
)


# =============================================================================
# CHARACTERISTIC SCALES
# =============================================================================

def calc_plasma_frequency(density):
    """ω_p = √(n e² / (ε₀ mₑ))"""
    return math.sqrt(density * E_CHARGE**2 / (EPSILON0 * M_ELECTRON))


def calc_debye_length(density, temperature):
    """λ_D = √(ε₀ k_B T / (n e²))"""
    return math.sqrt(EPSILON0 * K_BOLTZMANN * temperature / (density * E_CHARGE**2))


# =============================================================================
# PRESSURE BALANCE
# =============================================================================

def calc_magnetic_pressure(b_field):
    """P_B = B² / (2 μ₀)"""
    return b_field**2 / (2 * MU0)


def calc_plasma_beta(density, temperature, magnetic_pressure):
    """β = n k_B T / P_B

    Returns 0 for an unmagnetized plasma. This guard is a modelling
    convention with no physical basis (β diverges as B -> 0).
    """
    if magnetic_pressure == 0:
        return 0.0
    return density * K_BOLTZMANN * temperature / magnetic_pressure


# =============================================================================
# TRANSPORT
# =============================================================================

def calc_plasma_conductivity(density, salt_concentration):
    """σ = (n e² / (mₑ ν)) × (1 + c_salt σ_salt), with ν fixed at 1e6 s⁻¹"""
    sigma = density * E_CHARGE**2 / (M_ELECTRON * CONDUCTIVITY_NORMALIZATION)
    return sigma * (1 + salt_concentration * SALT_CONDUCTIVITY)


def plasma_physics(density, temperature, magnetic_field, salt_concentration):
    """Evaluate the plasma sub-model.

    Args:
        density: Electron density (m⁻³), > 0
        temperature: Electron temperature (K), > 0
        magnetic_field: Field strength (T), >= 0
        salt_concentration: Electrolyte concentration (mol/L), >= 0

    Returns:
        dict with plasma_frequency (rad/s), debye_length (m), plasma_beta,
             plasma_conductivity (S/m), magnetic_pressure (Pa)
    """
    p_mag = calc_magnetic_pressure(magnetic_field)
    return {
        "plasma_frequency": calc_plasma_frequency(density),
        "debye_length": calc_debye_length(density, temperature),
        "plasma_beta": calc_plasma_beta(density, temperature, p_mag),
        "plasma_conductivity": calc_plasma_conductivity(density, salt_concentration),
        "magnetic_pressure": p_mag,
    }
