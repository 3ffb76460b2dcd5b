#!/usr/bin/env python3
"""
Plasma Coupling Configuration Module - Parameters, ranges and scheduling

This module contains all configurable parameters for the plasma coupling
simulation:
  - Default physical input parameters (the reference scenario)
  - Documented ranges used by drivers to clamp input
  - Scheduler cadence (frame interval, recompute throttle, lunar sweep)
  - Output settings (graph and CSV directory)

The evaluator never clamps. Range enforcement belongs to the driver that
feeds it (clamp_parameters). validate_parameters() guards the physical
domain and is called by the evaluator itself.
"""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass, fields, replace, asdict
from typing import Dict, Optional, Tuple

import yaml

import pcs_constants as const

# =============================================================================
# SECTION 1: USER-CONFIGURABLE PARAMETERS
# =============================================================================

# -----------------------------------------------------------------------------
# 1.1 Plasma column
# -----------------------------------------------------------------------------
PLASMA_DENSITY = 1e15           # Electron density (m⁻³)
MAGNETIC_FIELD_STRENGTH = 0.01  # Applied axial field (T)
ROTATION_RATE = 0.1             # Column rotation rate (rad/s)
SALT_CONCENTRATION = 0.1        # Electrolyte concentration (mol/L)
TEMPERATURE = 5000.0            # Electron temperature (K), fixed
SYSTEM_RADIUS = 0.1             # Column radius (m), fixed
INPUT_VOLTAGE = 48.0            # Drive voltage (V), fixed
BIOELECTRIC_FIELD = 0.0         # Ambient bioelectric field (V/m), optional

# -----------------------------------------------------------------------------
# 1.2 Astronomical coupling
# -----------------------------------------------------------------------------
EARTH_TILT = 23.5               # Axial tilt (degrees)
LUNAR_DISTANCE = const.LUNAR_DISTANCE_MEAN_KM  # Earth-Moon distance (km)
LUNAR_PHASE = 0.0               # 0 = new, 0.5 = half cycle, wraps at 1
SOLAR_ACTIVITY = 0.5            # Normalized solar activity (0-1)

# -----------------------------------------------------------------------------
# 1.3 Scheduler
# -----------------------------------------------------------------------------
FRAME_INTERVAL = 1.0 / 60.0     # Main loop frame period (s)
RECOMPUTE_INTERVAL = 5          # Recompute physics every N steps
LUNAR_SWEEP_TICKS = 300         # Ticks in one scripted lunar cycle
LUNAR_SWEEP_INTERVAL = 0.100    # Wall-clock time between sweep ticks (s)

# -----------------------------------------------------------------------------
# 1.4 Output control
# -----------------------------------------------------------------------------
GRAPH_DIR = "graphs"            # Output directory for plots and CSV
GRAPH_DPI = 200
PROGRESS_EVERY = 60             # Print a progress line every N frames

# -----------------------------------------------------------------------------
# 1.5 Validity thresholds
# -----------------------------------------------------------------------------
VOLTAGE_AMPLIFICATION_MIN = 1.2     # output_voltage / input_voltage
FIELD_COMPRESSION_MIN = 1.1
PLASMA_BETA_MAX = 1.0


# =============================================================================
# SECTION 2: PARAMETER RECORD
# =============================================================================

class ParameterError(ValueError):
    """Raised when parameters fall outside the physical domain."""


@dataclass(frozen=True)
class SimulationParameters:
    """Physical inputs to the evaluator (SI unless noted)."""
    plasma_density: float = PLASMA_DENSITY
    magnetic_field_strength: float = MAGNETIC_FIELD_STRENGTH
    rotation_rate: float = ROTATION_RATE
    salt_concentration: float = SALT_CONCENTRATION
    temperature: float = TEMPERATURE
    system_radius: float = SYSTEM_RADIUS
    input_voltage: float = INPUT_VOLTAGE
    bioelectric_field: float = BIOELECTRIC_FIELD
    earth_tilt: float = EARTH_TILT              # degrees
    lunar_distance: float = LUNAR_DISTANCE      # km
    lunar_phase: float = LUNAR_PHASE
    solar_activity: float = SOLAR_ACTIVITY

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


# Documented ranges enforced by the parameter-control surface.
# Fields absent from this table are fixed at initialization.
PARAMETER_RANGES: Dict[str, Tuple[float, float]] = {
    "plasma_density": (1e14, 1e16),
    "magnetic_field_strength": (0.001, 0.1),
    "rotation_rate": (0.0, 1.0),
    "salt_concentration": (0.0, 1.0),
    "earth_tilt": (0.0, 45.0),
    "lunar_distance": (const.LUNAR_PERIGEE_KM, const.LUNAR_APOGEE_KM),
    "lunar_phase": (0.0, 1.0),
    "solar_activity": (0.0, 1.0),
}

PARAMETER_UNITS: Dict[str, str] = {
    "plasma_density": "m⁻³",
    "magnetic_field_strength": "T",
    "rotation_rate": "rad/s",
    "salt_concentration": "mol/L",
    "temperature": "K",
    "system_radius": "m",
    "input_voltage": "V",
    "bioelectric_field": "V/m",
    "earth_tilt": "deg",
    "lunar_distance": "km",
    "lunar_phase": "",
    "solar_activity": "",
}

# Must be strictly positive for the formulas to stay finite
_POSITIVE_FIELDS = ("plasma_density", "temperature", "system_radius", "lunar_distance")


def parameter_names():
    return [f.name for f in fields(SimulationParameters)]


def wrap_phase(phase: float) -> float:
    """Wrap a cyclic phase into [0, 1)."""
    return phase % 1.0


def clamp_parameters(params: SimulationParameters) -> SimulationParameters:
    """Clamp ranged fields to their documented ranges; wrap lunar_phase."""
    changes = {}
    for name, (lo, hi) in PARAMETER_RANGES.items():
        value = getattr(params, name)
        if name == "lunar_phase":
            clamped = wrap_phase(value)
        else:
            clamped = min(max(value, lo), hi)
        if clamped != value:
            changes[name] = clamped
    return replace(params, **changes) if changes else params


def validate_parameters(params: SimulationParameters) -> SimulationParameters:
    """Reject non-finite, negative or degenerate (zero) input."""
    for name, value in params.as_dict().items():
        if not math.isfinite(value):
            raise ParameterError(f"{name} must be finite, got {value!r}")
        if value < 0:
            raise ParameterError(f"{name} must be non-negative, got {value!r}")
    for name in _POSITIVE_FIELDS:
        if getattr(params, name) <= 0:
            raise ParameterError(f"{name} must be > 0, got {getattr(params, name)!r}")
    return params


def _coerce_float(name: str, value) -> float:
    if isinstance(value, bool):
        raise ParameterError(f"Expected float-like value for '{name}', got: {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ParameterError(f"Expected float-like value for '{name}', got: {value!r}")


def apply_overrides(base: SimulationParameters, overrides: Dict[str, object]) -> SimulationParameters:
    """Return base with known keys replaced; unknown keys are warned about."""
    known = set(parameter_names())
    changes = {}
    for k, v in overrides.items():
        if k in known:
            changes[k] = _coerce_float(k, v)
        else:
            print(f"Warning: unknown config key '{k}' ignored.", file=sys.stderr)
    return replace(base, **changes)


def load_params_from_yaml(path: str, base: Optional[SimulationParameters] = None) -> SimulationParameters:
    """Load parameter overrides from a YAML mapping."""
    if base is None:
        base = SimulationParameters()
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ParameterError(f"{path}: expected a mapping of parameter names to values")
    return apply_overrides(base, data)


def print_parameters(params: SimulationParameters) -> None:
    """Print the configuration banner."""
    sep = "=" * 72
    print(f"\n{sep}")
    print("PLASMA COUPLING CONFIGURATION")
    print(sep)
    for name, value in params.as_dict().items():
        unit = PARAMETER_UNITS.get(name, "")
        rng = PARAMETER_RANGES.get(name)
        rng_str = f"[{rng[0]:g}, {rng[1]:g}]" if rng else "fixed"
        print(f"  {name:<26}{value:>14.6g} {unit:<6} {rng_str}")
    print(f"\n  Frame interval {FRAME_INTERVAL*1000:.1f} ms, recompute every {RECOMPUTE_INTERVAL} steps")
    print(f"  Lunar sweep    {LUNAR_SWEEP_TICKS} ticks @ {LUNAR_SWEEP_INTERVAL*1000:.0f} ms "
          f"({LUNAR_SWEEP_TICKS*LUNAR_SWEEP_INTERVAL:.0f} s per cycle)")
    print(sep)


if __name__ == "__main__":
    print_parameters(SimulationParameters())
