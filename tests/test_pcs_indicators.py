"""Validity indicator thresholds."""

from __future__ import annotations

from dataclasses import replace

from pcs_config import SimulationParameters
from pcs_indicators import FLAG_DESCRIPTIONS, all_valid, summarize_flags, validation_flags
from pcs_physics import evaluate


def test_reference_scenario_flags() -> None:
    p = SimulationParameters()
    flags = validation_flags(evaluate(p), p)
    assert set(flags) == set(FLAG_DESCRIPTIONS)
    assert flags["voltage_amplification"]
    assert flags["field_compression"]
    assert flags["magnetic_confinement"]
    assert flags["zpinch_active"]
    assert flags["emergent_gravity"]
    assert all_valid(flags)


def test_no_amplification_fails_voltage_flag() -> None:
    p = replace(SimulationParameters(), salt_concentration=0.0, rotation_rate=0.0,
                lunar_phase=0.5, solar_activity=0.0)
    flags = validation_flags(evaluate(p), p)
    assert not flags["voltage_amplification"]
    assert not flags["zpinch_active"]
    assert not all_valid(flags)


def test_voltage_threshold_is_strict() -> None:
    p = SimulationParameters()
    r = replace(evaluate(p), output_voltage=p.input_voltage * 1.2)
    assert not validation_flags(r, p)["voltage_amplification"]


def test_beta_threshold() -> None:
    p = SimulationParameters()
    r = evaluate(p)
    assert not validation_flags(replace(r, plasma_beta=1.0), p)["magnetic_confinement"]
    assert validation_flags(replace(r, plasma_beta=0.999), p)["magnetic_confinement"]


def test_compression_threshold() -> None:
    p = SimulationParameters()
    r = evaluate(p)
    assert not validation_flags(replace(r, magnetic_field_compression=1.1), p)["field_compression"]


def test_summarize_flags_rows() -> None:
    rows = summarize_flags({"zpinch_active": True, "emergent_gravity": False})
    assert rows == [
        ["zpinch_active", FLAG_DESCRIPTIONS["zpinch_active"], "PASS"],
        ["emergent_gravity", FLAG_DESCRIPTIONS["emergent_gravity"], "FAIL"],
    ]
