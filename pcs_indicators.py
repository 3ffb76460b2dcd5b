"""
Validity indicators - threshold checks over one evaluation.

Stateless: the same (results, params) pair always yields the same flags.
Thresholds are in display units (see pcs_physics.SimulationResults).
"""

import pcs_config as cfg

FLAG_DESCRIPTIONS = {
    "voltage_amplification": f"V_out > {cfg.VOLTAGE_AMPLIFICATION_MIN:g} × V_in",
    "field_compression": f"compression > {cfg.FIELD_COMPRESSION_MIN:g}",
    "magnetic_confinement": f"β < {cfg.PLASMA_BETA_MAX:g}",
    "zpinch_active": "F_pinch > 0",
    "emergent_gravity": "g_emergent > 0",
}


def validation_flags(results, params):
    """Map one evaluation to named pass/fail flags."""
    return {
        "voltage_amplification":
            results.output_voltage > params.input_voltage * cfg.VOLTAGE_AMPLIFICATION_MIN,
        "field_compression": results.magnetic_field_compression > cfg.FIELD_COMPRESSION_MIN,
        "magnetic_confinement": results.plasma_beta < cfg.PLASMA_BETA_MAX,
        "zpinch_active": results.zpinch_force > 0,
        "emergent_gravity": results.emergent_gravity > 0,
    }


def all_valid(flags):
    return all(flags.values())


def summarize_flags(flags):
    """Rows of [flag, condition, PASS/FAIL] for tabulate."""
    return [[name, FLAG_DESCRIPTIONS[name], "PASS" if ok else "FAIL"]
            for name, ok in flags.items()]
