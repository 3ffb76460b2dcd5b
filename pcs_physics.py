#!/usr/bin/env python3
"""
Plasma Coupling Physics Module - Electromagnetic and astronomical coupling

This module maps a SimulationParameters record to a SimulationResults record:
  - Solar and lunar coupling factors
  - Effective plasma density
  - Voltage amplification
  - Current, field compression, Z-pinch and Lorentz forces
  - Magnetic pressure, stored field energy and emergent gravity
  - Plasma sub-model (beta, Debye length, plasma frequency)

Internal computation is SI. Only the returned record is scaled to display
units (µm, GHz, multiples of G, ×10¹⁵ m⁻³).

evaluate() rejects input outside the physical domain (non-finite,
negative, or zero density/temperature/radius/lunar distance) with
pcs_config.ParameterError rather than returning NaN or Infinity. It does
not clamp to the documented ranges; that is the driver's job.
"""

import math
from dataclasses import dataclass, asdict

from pcs_constants import (
    MU0, C_LIGHT, E_CHARGE, G_NEWTON,
    LUNAR_DISTANCE_MEAN_KM, LUNAR_MAGNETIC_FIELD,
    SOLAR_DENSITY_GAIN, LUNAR_DENSITY_GAIN, LUNAR_COMPRESSION_GAIN,
    LUNAR_PINCH_GAIN, LUNAR_GRAVITY_GAIN,
    SALT_VOLTAGE_GAIN, ROTATION_VOLTAGE_GAIN, BIOELECTRIC_VOLTAGE_GAIN,
    LUNAR_VOLTAGE_GAIN, SOLAR_VOLTAGE_GAIN,
    DEBYE_DISPLAY_SCALE, FREQUENCY_DISPLAY_SCALE, DENSITY_DISPLAY_SCALE, GRAVITY_DISPLAY_SCALE,
)
from pcs_config import validate_parameters
from pcs_plasma import plasma_physics


@dataclass(frozen=True)
class SimulationResults:
    """One complete evaluation. Replaced wholesale on every recompute."""
    output_voltage: float               # V
    magnetic_field_compression: float   # dimensionless
    current_magnitude: float            # A
    plasma_beta: float                  # dimensionless
    debye_length: float                 # µm
    plasma_frequency: float             # GHz (angular, rad/s × 1e-9)
    zpinch_force: float                 # N
    emergent_gravity: float             # multiples of G
    lorentz_force: float                # N
    magnetic_pressure: float            # Pa
    field_energy: float                 # J
    solar_plasma_coupling: float        # dimensionless
    lunar_plasma_alignment: float       # 0-1
    effective_plasma_density: float     # ×10¹⁵ m⁻³

    def as_dict(self):
        return asdict(self)


# Display units, for tables and plots
RESULT_UNITS = {
    "output_voltage": "V",
    "magnetic_field_compression": "",
    "current_magnitude": "A",
    "plasma_beta": "",
    "debye_length": "µm",
    "plasma_frequency": "GHz",
    "zpinch_force": "N",
    "emergent_gravity": "G",
    "lorentz_force": "N",
    "magnetic_pressure": "Pa",
    "field_energy": "J",
    "solar_plasma_coupling": "",
    "lunar_plasma_alignment": "",
    "effective_plasma_density": "1e15 m⁻³",
}


# =============================================================================
# ASTRONOMICAL COUPLING
# =============================================================================

def calc_solar_coupling(solar_activity, earth_tilt_deg):
    """Solar activity weighted by the seasonal factor cos(tilt)."""
    return solar_activity * math.cos(math.radians(earth_tilt_deg))


def calc_lunar_distance_effect(lunar_distance_km):
    """Inverse-square distance factor, 1 at the mean distance."""
    return (LUNAR_DISTANCE_MEAN_KM / lunar_distance_km) ** 2


def calc_lunar_alignment(lunar_phase):
    """0.5 + 0.5 cos(2π φ): 1 at phase 0 (and 1), 0 at phase 0.5."""
    return 0.5 + 0.5 * math.cos(lunar_phase * 2 * math.pi)


def calc_lunar_coupling(lunar_distance_km, alignment):
    """Effective lunar stream field (T)."""
    return LUNAR_MAGNETIC_FIELD * calc_lunar_distance_effect(lunar_distance_km) * alignment


def calc_effective_density(density, solar_coupling, lunar_coupling):
    return density * (1 + solar_coupling * SOLAR_DENSITY_GAIN
                      + lunar_coupling * LUNAR_DENSITY_GAIN)


# =============================================================================
# ELECTRICAL
# =============================================================================

def calc_output_voltage(params, alignment, solar_coupling):
    """V_out = V_in × salt × rotation × bioelectric × lunar × solar factors."""
    salt_factor = 1 + params.salt_concentration * SALT_VOLTAGE_GAIN
    rotation_factor = 1 + params.rotation_rate * ROTATION_VOLTAGE_GAIN
    bio_factor = 1 + params.bioelectric_field * BIOELECTRIC_VOLTAGE_GAIN
    lunar_factor = 1 + alignment * LUNAR_VOLTAGE_GAIN
    solar_factor = 1 + solar_coupling * SOLAR_VOLTAGE_GAIN
    return (params.input_voltage * salt_factor * rotation_factor
            * bio_factor * lunar_factor * solar_factor)


def calc_current(n_eff, rotation_rate, radius):
    """I = n e ω R"""
    return n_eff * E_CHARGE * rotation_rate * radius


# =============================================================================
# FORCES AND FIELD
# =============================================================================

def calc_field_compression(current, radius, lunar_coupling):
    return 1 + current * MU0 * radius + lunar_coupling * LUNAR_COMPRESSION_GAIN


def calc_zpinch_force(current, radius, alignment):
    """F_pinch = μ₀ I² R / (2π), boosted by lunar alignment."""
    return (MU0 * current**2 * radius / (2 * math.pi)) * (1 + alignment * LUNAR_PINCH_GAIN)


def calc_lorentz_force(n_eff, b_field, rotation_rate, radius):
    """F = n e B ω R"""
    return n_eff * E_CHARGE * b_field * rotation_rate * radius


def calc_emergent_gravity(field_energy, radius, modulation):
    """g = (E / c²) G / R² × (1 + modulation), SI (m/s²)."""
    return (field_energy / C_LIGHT**2) * G_NEWTON / radius**2 * (1 + modulation)


# =============================================================================
# EVALUATOR
# =============================================================================

def evaluate(params):
    """Evaluate all derived quantities for one parameter set.

    Args:
        params: SimulationParameters (not mutated)

    Returns:
        SimulationResults in display units

    Raises:
        ParameterError: if params is outside the physical domain
    """
    validate_parameters(params)
    R = params.system_radius

    # Astronomical coupling
    solar = calc_solar_coupling(params.solar_activity, params.earth_tilt)
    alignment = calc_lunar_alignment(params.lunar_phase)
    lunar = calc_lunar_coupling(params.lunar_distance, alignment)
    n_eff = calc_effective_density(params.plasma_density, solar, lunar)

    # Electrical
    v_out = calc_output_voltage(params, alignment, solar)
    current = calc_current(n_eff, params.rotation_rate, R)

    # Field and forces
    compression = calc_field_compression(current, R, lunar)
    b_comp = params.magnetic_field_strength * compression
    f_pinch = calc_zpinch_force(current, R, alignment)
    f_lorentz = calc_lorentz_force(n_eff, b_comp, params.rotation_rate, R)
    p_mag = b_comp**2 / (2 * MU0)
    energy = p_mag * math.pi * R**2

    modulation = solar + alignment * LUNAR_GRAVITY_GAIN
    g_emergent = calc_emergent_gravity(energy, R, modulation)

    plasma = plasma_physics(n_eff, params.temperature, b_comp, params.salt_concentration)

    return SimulationResults(
        output_voltage=v_out,
        magnetic_field_compression=compression,
        current_magnitude=current,
        plasma_beta=plasma["plasma_beta"],
        debye_length=plasma["debye_length"] * DEBYE_DISPLAY_SCALE,
        plasma_frequency=plasma["plasma_frequency"] * FREQUENCY_DISPLAY_SCALE,
        zpinch_force=f_pinch,
        emergent_gravity=g_emergent * GRAVITY_DISPLAY_SCALE,
        lorentz_force=f_lorentz,
        magnetic_pressure=p_mag,
        field_energy=energy,
        solar_plasma_coupling=solar,
        lunar_plasma_alignment=alignment,
        effective_plasma_density=n_eff * DENSITY_DISPLAY_SCALE,
    )
