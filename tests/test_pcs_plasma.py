"""Plasma sub-model: characteristic scales, beta guard, conductivity."""

from __future__ import annotations

import math

import pytest

from pcs_constants import MU0, K_BOLTZMANN, SALT_CONDUCTIVITY
from pcs_plasma import (
    calc_plasma_frequency,
    calc_debye_length,
    calc_magnetic_pressure,
    calc_plasma_beta,
    calc_plasma_conductivity,
    plasma_physics,
)


def test_returns_all_keys() -> None:
    out = plasma_physics(1e15, 5000.0, 0.01, 0.1)
    assert set(out) == {"plasma_frequency", "debye_length", "plasma_beta",
                        "plasma_conductivity", "magnetic_pressure"}


@pytest.mark.parametrize("density", [1e14, 1e15, 1e16, 3.7e18])
@pytest.mark.parametrize("temperature", [1.0, 300.0, 5000.0, 1e6])
def test_scales_positive_and_finite(density: float, temperature: float) -> None:
    out = plasma_physics(density, temperature, 0.05, 0.0)
    for key in ("plasma_frequency", "debye_length"):
        assert out[key] > 0
        assert math.isfinite(out[key])


def test_plasma_frequency_increases_with_density() -> None:
    densities = [1e13, 1e14, 1e15, 1e16, 1e17]
    freqs = [calc_plasma_frequency(n) for n in densities]
    assert all(a < b for a, b in zip(freqs, freqs[1:]))


def test_plasma_frequency_known_value() -> None:
    # ω_p ≈ 56.4 √n rad/s
    assert calc_plasma_frequency(1e18) == pytest.approx(5.64e10, rel=1e-3)


def test_debye_length_known_value() -> None:
    # λ_D ≈ 69 √(T/n) m
    assert calc_debye_length(1e16, 1e4) == pytest.approx(69.0 * math.sqrt(1e4 / 1e16), rel=1e-2)


def test_magnetic_pressure() -> None:
    assert calc_magnetic_pressure(1.0) == pytest.approx(1.0 / (2 * MU0))
    assert calc_magnetic_pressure(0.0) == 0.0


def test_beta_zero_field_guard() -> None:
    out = plasma_physics(1e15, 5000.0, 0.0, 0.2)
    assert out["plasma_beta"] == 0.0
    assert out["magnetic_pressure"] == 0.0


def test_beta_positive_with_field() -> None:
    out = plasma_physics(1e15, 5000.0, 1e-6, 0.0)
    assert out["plasma_beta"] > 0


def test_beta_definition() -> None:
    p_mag = calc_magnetic_pressure(0.02)
    expected = 2e15 * K_BOLTZMANN * 1e4 / p_mag
    assert calc_plasma_beta(2e15, 1e4, p_mag) == pytest.approx(expected)


def test_salt_enhances_conductivity() -> None:
    base = calc_plasma_conductivity(1e15, 0.0)
    salty = calc_plasma_conductivity(1e15, 0.5)
    assert salty == pytest.approx(base * (1 + 0.5 * SALT_CONDUCTIVITY))


def test_pure_and_repeatable() -> None:
    assert plasma_physics(4e15, 800.0, 0.03, 0.4) == plasma_physics(4e15, 800.0, 0.03, 0.4)
