#!/usr/bin/env python3
"""
Plasma Coupling Simulation - Main loop driver, reporting and plotting

Runs the step scheduler either headless on a simulated clock (default) or
in wall-clock time on an asyncio event loop (--realtime), optionally with
a scripted lunar cycle, then prints a results table and validity flags.

Usage:
    python pcs_simulation.py [options]

Options:
    --config=FILE       YAML file with parameter overrides
    --set NAME=VALUE    Override one parameter (repeatable)
    --ticks=N           Frames to run headless (default: one lunar cycle)
    --lunar-cycle       Start a lunar-cycle sweep at t=0
    --realtime=SECONDS  Run the asyncio driver for SECONDS of wall-clock time
    --scan=NAME         Evaluate across NAME's documented range and tabulate
    --scan-points=N     Points in the scan (default 11)
    --plot=KEYS         Comma-separated graphs to save, or 'all'
    --save-csv          Save the time series to CSV
    --outdir=DIR        Directory for graphs and CSV
    --explain           Print the governing equations

Graph keywords:
    voltage  compression  current  beta  debye  frequency  zpinch
    lorentz  pressure  energy  gravity  density  coupling  phase  combined
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from typing import List, Optional

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import numpy as np
from tabulate import tabulate

import pcs_config as cfg
import pcs_scheduler as sched
from pcs_config import ParameterError, SimulationParameters
from pcs_indicators import validation_flags, all_valid, summarize_flags
from pcs_physics import RESULT_UNITS, evaluate

HEADLESS_TICKS = round(cfg.LUNAR_SWEEP_TICKS * cfg.LUNAR_SWEEP_INTERVAL / cfg.FRAME_INTERVAL)
_TIME_EPS = 1e-9


# =============================================================================
# DATA COLLECTION
# =============================================================================

class SimData:
    """Collects per-frame time-series data during the simulation."""

    RESULT_FIELDS = list(RESULT_UNITS)

    def __init__(self):
        self.time = []
        self.tick = []
        self.step = []
        self.recomputed = []
        self.lunar_phase = []
        for name in self.RESULT_FIELDS:
            setattr(self, name, [])

    def record(self, **kwargs):
        for key, val in kwargs.items():
            getattr(self, key).append(val)

    def record_state(self, t, state, recomputed):
        self.record(time=t, tick=state.clock.ticks, step=state.clock.step,
                    recomputed=recomputed, lunar_phase=state.params.lunar_phase,
                    **state.results.as_dict())

    def __len__(self):
        return len(self.time)


# =============================================================================
# HEADLESS RUN
# =============================================================================

def run_headless(params=None, ticks=HEADLESS_TICKS, lunar_cycle=False,
                 frame_interval=cfg.FRAME_INTERVAL,
                 sweep_interval=cfg.LUNAR_SWEEP_INTERVAL, verbose=True):
    """Run the main loop for a fixed number of frames on a simulated clock.

    Frame n fires at n × frame_interval, sweep tick k at k × sweep_interval.
    A sweep tick due at or before a frame is applied first.

    Returns:
        (final SimulationState, SimData)
    """
    state = sched.start(sched.initial_state(params))
    sweep = sched.start_lunar_sweep(state) if lunar_cycle else None
    data = SimData()

    if verbose:
        print(f"\nStarting simulation ({ticks} frames, "
              f"{frame_interval*1000:.1f} ms/frame, lunar cycle {'on' if sweep else 'off'})...")
        print("-" * 72)

    for n in range(1, ticks + 1):
        t = n * frame_interval

        while sweep is not None and (sweep.ticks_done + 1) * sweep_interval <= t + _TIME_EPS:
            sweep, state = sched.sweep_tick(sweep, state)
            if sweep.finished:
                if verbose:
                    print(f"  LUNAR CYCLE complete at t={t:.2f}s, phase={state.params.lunar_phase:.4f}")
                sweep = None

        before = state.recomputes
        state = sched.tick(state)
        data.record_state(t, state, state.recomputes > before)

        if verbose and n % cfg.PROGRESS_EVERY == 0:
            r = state.results
            print(f"  t={t:>7.2f}s  tick={state.clock.ticks:>6}  phase={state.params.lunar_phase:.3f}  "
                  f"V={r.output_voltage:>8.3f} V  align={r.lunar_plasma_alignment:.3f}  "
                  f"β={r.plasma_beta:.3e}")

    return state, data


# =============================================================================
# REALTIME RUN
# =============================================================================

async def run_realtime(params=None, seconds=5.0, lunar_cycle=False,
                       frame_interval=cfg.FRAME_INTERVAL,
                       sweep_interval=cfg.LUNAR_SWEEP_INTERVAL, verbose=True):
    """Drive the SimulationRunner in wall-clock time for `seconds`."""
    runner = sched.SimulationRunner(params, frame_interval=frame_interval,
                                    sweep_interval=sweep_interval)
    data = SimData()
    t0 = asyncio.get_running_loop().time()
    last = {"recomputes": 0}

    def on_publish(state):
        recomputed = state.recomputes > last["recomputes"]
        last["recomputes"] = state.recomputes
        if recomputed:
            t = asyncio.get_running_loop().time() - t0
            data.record_state(t, state, True)
            if verbose and state.recomputes % cfg.PROGRESS_EVERY == 0:
                print(f"  t={t:>7.2f}s  tick={state.clock.ticks:>6}  "
                      f"phase={state.params.lunar_phase:.3f}  "
                      f"V={state.results.output_voltage:>8.3f} V")

    runner.subscribe(on_publish)
    runner.start()
    if lunar_cycle:
        runner.run_lunar_cycle()
    try:
        await asyncio.sleep(seconds)
    finally:
        runner.shutdown()
    return runner.state, data


# =============================================================================
# PARAMETER SCAN
# =============================================================================

SCAN_COLUMNS = ["output_voltage", "magnetic_field_compression", "plasma_beta",
                "debye_length", "plasma_frequency", "zpinch_force", "emergent_gravity"]


def scan_parameter(params, name, points=11):
    """Evaluate across a parameter's documented range.

    Returns:
        list of (value, SimulationResults)
    """
    if name not in cfg.PARAMETER_RANGES:
        raise ParameterError(f"'{name}' has no documented range; choose one of "
                             f"{', '.join(cfg.PARAMETER_RANGES)}")
    lo, hi = cfg.PARAMETER_RANGES[name]
    rows = []
    for value in np.linspace(lo, hi, points):
        p = cfg.clamp_parameters(cfg.apply_overrides(params, {name: float(value)}))
        rows.append((float(value), evaluate(p)))
    return rows


def print_scan(name, rows):
    headers = [name] + [f"{c} ({RESULT_UNITS[c]})" if RESULT_UNITS[c] else c for c in SCAN_COLUMNS]
    table = [[value] + [getattr(r, c) for c in SCAN_COLUMNS] for value, r in rows]
    print(tabulate(table, headers=headers, floatfmt=".4g"))


# =============================================================================
# REPORTING
# =============================================================================

def results_table(results):
    return [[name, value, RESULT_UNITS[name]] for name, value in results.as_dict().items()]


def print_summary(state, data):
    r = state.results
    flags = validation_flags(r, state.params)

    print(f"\n{'=' * 72}")
    print("SIMULATION COMPLETE")
    print(f"{'=' * 72}")
    print(f"  Frames                 {state.clock.ticks:>10}")
    print(f"  Recomputes             {state.recomputes:>10}")
    print(f"  Final lunar phase      {state.params.lunar_phase:>10.4f}")
    if len(data):
        print(f"  Peak output voltage    {max(data.output_voltage):>10.3f} V")
        print(f"  Min lunar alignment    {min(data.lunar_plasma_alignment):>10.4f}")
    print()
    print(tabulate(results_table(r), headers=["Result", "Value", "Unit"], floatfmt=".6g"))
    print()
    print(tabulate(summarize_flags(flags), headers=["Indicator", "Condition", "Status"]))
    print(f"\n  Overall: {'VALID' if all_valid(flags) else 'OUT OF RANGE'}")
    print("=" * 72)


def print_explain():
    print("""
Governing equations (SI internally, display units on output)
------------------------------------------------------------
  solar   = S cos(tilt)
  align   = 0.5 + 0.5 cos(2π φ)
  lunar   = 50 nT × (384400 / d)² × align
  n_eff   = n (1 + 0.3 solar + 1e6 lunar)
  V_out   = V_in (1+2c)(1+0.5ω)(1+0.001E_bio)(1+0.1 align)(1+0.2 solar)
  I       = n_eff e ω R
  C       = 1 + I μ₀ R + 1e8 lunar          B_c = B C
  F_pinch = μ₀ I² R / 2π × (1 + 0.05 align)
  F_L     = n_eff e B_c ω R
  P_B     = B_c² / 2μ₀                      E = P_B π R²
  g       = (E / c²) G / R² × (1 + solar + 0.1 align)
  ω_p     = √(n e² / ε₀ mₑ)    λ_D = √(ε₀ k T / n e²)    β = n k T / P_B
Physics is recomputed every 5th frame; the lunar sweep moves φ through one
full cycle in 300 ticks of 100 ms and never forces a recompute.
""")


# =============================================================================
# PLOTTING
# =============================================================================

def plot_single(data, y_data, ylabel, title, filename, outdir, color=None, yscale='linear'):
    """Generic single-panel plot against simulated time."""
    fig, ax = plt.subplots(figsize=(12, 6))
    ax.plot(np.asarray(data.time), np.asarray(y_data), color=color or '#1976D2', linewidth=1.2)
    ax.set_xlabel("Time (s)", fontsize=11)
    ax.set_ylabel(ylabel, fontsize=11)
    ax.set_title(title, fontsize=13)
    ax.set_yscale(yscale)
    ax.grid(True, alpha=0.3)
    fig.tight_layout()

    os.makedirs(outdir, exist_ok=True)
    path = os.path.join(outdir, filename)
    fig.savefig(path, dpi=cfg.GRAPH_DPI)
    plt.close(fig)
    print(f"  Saved {path}")
    return path


def plot_combined(data, outdir):
    """3×3 overview of the main outputs."""
    t = np.asarray(data.time)
    fig, axes = plt.subplots(3, 3, figsize=(18, 14))
    fig.suptitle("Plasma Coupling — Overview", fontsize=15, y=0.98)

    panels = [
        (axes[0, 0], data.output_voltage, "Output Voltage (V)", '#1976D2'),
        (axes[0, 1], data.magnetic_field_compression, "Field Compression", '#E65100'),
        (axes[0, 2], data.plasma_beta, "Plasma β", '#2E7D32'),
        (axes[1, 0], data.zpinch_force, "Z-pinch Force (N)", '#7B1FA2'),
        (axes[1, 1], data.lorentz_force, "Lorentz Force (N)", '#C62828'),
        (axes[1, 2], data.field_energy, "Field Energy (J)", '#FF6F00'),
        (axes[2, 0], data.lunar_phase, "Lunar Phase", '#00838F'),
        (axes[2, 1], data.lunar_plasma_alignment, "Lunar Alignment", '#4527A0'),
        (axes[2, 2], data.emergent_gravity, "Emergent Gravity (G)", '#33691E'),
    ]
    for ax, ydata, ylabel, color in panels:
        ax.plot(t, np.asarray(ydata), color=color, linewidth=1.0)
        ax.set_ylabel(ylabel, fontsize=9)
        ax.grid(True, alpha=0.3)
        ax.tick_params(labelsize=8)
    for ax in axes[2]:
        ax.set_xlabel("Time (s)", fontsize=9)

    fig.tight_layout(rect=[0, 0, 1, 0.96])
    os.makedirs(outdir, exist_ok=True)
    path = os.path.join(outdir, "pcs_combined.png")
    fig.savefig(path, dpi=cfg.GRAPH_DPI)
    plt.close(fig)
    print(f"  Saved {path}")
    return path


GRAPH_REGISTRY = {
    "voltage": lambda d, o: plot_single(
        d, d.output_voltage, "Voltage (V)", "Output Voltage", "pcs_voltage.png", o),
    "compression": lambda d, o: plot_single(
        d, d.magnetic_field_compression, "Compression", "Magnetic Field Compression",
        "pcs_compression.png", o, color='#E65100'),
    "current": lambda d, o: plot_single(
        d, d.current_magnitude, "Current (A)", "Current Magnitude",
        "pcs_current.png", o, color='#1565C0'),
    "beta": lambda d, o: plot_single(
        d, d.plasma_beta, "β", "Plasma Beta", "pcs_beta.png", o,
        color='#2E7D32', yscale='log'),
    "debye": lambda d, o: plot_single(
        d, d.debye_length, "Debye Length (µm)", "Debye Length", "pcs_debye.png", o,
        color='#4E342E'),
    "frequency": lambda d, o: plot_single(
        d, d.plasma_frequency, "Plasma Frequency (GHz)", "Plasma Frequency",
        "pcs_frequency.png", o, color='#00695C'),
    "zpinch": lambda d, o: plot_single(
        d, d.zpinch_force, "Force (N)", "Z-pinch Force", "pcs_zpinch.png", o,
        color='#7B1FA2'),
    "lorentz": lambda d, o: plot_single(
        d, d.lorentz_force, "Force (N)", "Lorentz Force", "pcs_lorentz.png", o,
        color='#C62828'),
    "pressure": lambda d, o: plot_single(
        d, d.magnetic_pressure, "Pressure (Pa)", "Magnetic Pressure",
        "pcs_pressure.png", o, color='#37474F'),
    "energy": lambda d, o: plot_single(
        d, d.field_energy, "Energy (J)", "Stored Field Energy", "pcs_energy.png", o,
        color='#FF6F00'),
    "gravity": lambda d, o: plot_single(
        d, d.emergent_gravity, "Emergent Gravity (× G)", "Emergent Gravity",
        "pcs_gravity.png", o, color='#33691E'),
    "density": lambda d, o: plot_single(
        d, d.effective_plasma_density, "Density (×10¹⁵ m⁻³)", "Effective Plasma Density",
        "pcs_density.png", o, color='#0D47A1'),
    "coupling": lambda d, o: plot_single(
        d, d.solar_plasma_coupling, "Solar Coupling", "Solar Plasma Coupling",
        "pcs_coupling.png", o, color='#F9A825'),
    "phase": lambda d, o: plot_single(
        d, d.lunar_phase, "Lunar Phase", "Lunar Phase", "pcs_phase.png", o,
        color='#00838F'),
    "combined": lambda d, o: plot_combined(d, o),
}


def generate_graphs(data, graph_keys, outdir=cfg.GRAPH_DIR):
    """Generate requested graphs; returns the saved paths."""
    if not len(data):
        print("\nNo data recorded — skipping graphs.")
        return []

    print("\nGenerating graphs...")
    if "all" in graph_keys:
        graph_keys = list(GRAPH_REGISTRY.keys())

    paths = []
    for key in graph_keys:
        if key in GRAPH_REGISTRY:
            paths.append(GRAPH_REGISTRY[key](data, outdir))
        else:
            print(f"  [unknown] {key}")
    return paths


# =============================================================================
# CSV EXPORT
# =============================================================================

def save_csv(data, outdir=cfg.GRAPH_DIR, filename="pcs_timeseries.csv"):
    """Save time-series data to CSV."""
    path = os.path.join(outdir, filename)
    os.makedirs(outdir, exist_ok=True)

    headers = ["time_s", "tick", "step", "recomputed", "lunar_phase"] + SimData.RESULT_FIELDS
    columns = [data.time, data.tick, data.step, data.recomputed, data.lunar_phase] + \
              [getattr(data, name) for name in SimData.RESULT_FIELDS]

    with open(path, 'w') as f:
        f.write(",".join(headers) + "\n")
        for i in range(len(data)):
            f.write(",".join(str(col[i]) for col in columns) + "\n")

    print(f"  Saved {path}")
    return path


# =============================================================================
# COMMAND-LINE INTERFACE
# =============================================================================

def _parse_set(items):
    overrides = {}
    for item in items or []:
        if "=" not in item:
            raise ParameterError(f"--set expects NAME=VALUE, got {item!r}")
        k, v = item.split("=", 1)
        overrides[k.strip()] = v.strip()
    return overrides


def build_params(config_path=None, overrides=None):
    """Defaults <- YAML <- --set, then clamped and validated."""
    params = SimulationParameters()
    if config_path:
        params = cfg.load_params_from_yaml(config_path, params)
    if overrides:
        params = cfg.apply_overrides(params, overrides)

    clamped = cfg.clamp_parameters(params)
    for name, value in clamped.as_dict().items():
        if value != getattr(params, name):
            print(f"Warning: {name}={getattr(params, name)!r} clamped to {value!r}", file=sys.stderr)
    return cfg.validate_parameters(clamped)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Plasma coupling simulator (throttled recompute, lunar-cycle sweep)",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    p.add_argument("--config", type=str, default=None, help="YAML file with parameter overrides")
    p.add_argument("--set", action="append", dest="overrides", metavar="NAME=VALUE",
                   help="Override one parameter (repeatable)")
    p.add_argument("--ticks", type=int, default=HEADLESS_TICKS, help="Frames to run headless")
    p.add_argument("--lunar-cycle", action="store_true", help="Start a lunar-cycle sweep at t=0")
    p.add_argument("--realtime", type=float, default=None, metavar="SECONDS",
                   help="Run the asyncio driver in wall-clock time")
    p.add_argument("--scan", type=str, default=None, metavar="NAME",
                   help="Scan a parameter across its documented range")
    p.add_argument("--scan-points", type=int, default=11, help="Points in the scan")
    p.add_argument("--plot", type=str, default=None,
                   help="Comma-separated graphs to save, or 'all'")
    p.add_argument("--save-csv", action="store_true", help="Save the time series to CSV")
    p.add_argument("--outdir", type=str, default=cfg.GRAPH_DIR, help="Directory for graphs and CSV")
    p.add_argument("--quiet", action="store_true", help="Suppress progress lines")
    p.add_argument("--explain", action="store_true", help="Print governing equations")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    try:
        params = build_params(args.config, _parse_set(args.overrides))
    except ParameterError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    cfg.print_parameters(params)
    if args.explain:
        print_explain()

    if args.scan:
        try:
            rows = scan_parameter(params, args.scan, args.scan_points)
        except ParameterError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 2
        print_scan(args.scan, rows)
        return 0

    verbose = not args.quiet
    if args.realtime is not None:
        state, data = asyncio.run(run_realtime(params, args.realtime,
                                               lunar_cycle=args.lunar_cycle, verbose=verbose))
    else:
        state, data = run_headless(params, args.ticks, lunar_cycle=args.lunar_cycle,
                                   verbose=verbose)

    print_summary(state, data)

    if args.plot:
        generate_graphs(data, [s.strip() for s in args.plot.split(",") if s.strip()], args.outdir)
    if args.save_csv:
        save_csv(data, args.outdir)
    return 0


if __name__ == "__main__":
    sys.exit(main())
