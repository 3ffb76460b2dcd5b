#!/usr/bin/env python3
"""
Step Scheduler - Simulated clock, throttled recompute and lunar-cycle sweep

Two independent activities share one SimulationState:

  Main loop    Stopped/Running. Each frame advances the clock by one tick.
               Physics is recomputed only when step % RECOMPUTE_INTERVAL == 0
               (steps 0, 5, 10, ...); other frames keep the last Results.

  Lunar sweep  Started on demand, independent of the main loop. Runs
               LUNAR_SWEEP_TICKS ticks, moving lunar_phase linearly from its
               start value through one full cycle (wrapped into [0, 1)),
               then stops by itself. It never recomputes Results.

State is immutable. Every transition takes a state and returns a new one,
so a publish is a single assignment and observers never see a mix of old
and new fields.

Ordering: each callback reads the latest published state. A phase change
made by the sweep is picked up at the main loop's next recompute boundary,
not before. With the main loop stopped, Results stay stale until it runs
again.

SimulationRunner drives both activities on an asyncio event loop
(call_later timers, one thread). run_headless() in pcs_simulation replays
the same interleaving on a simulated clock.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional, Tuple

import pcs_config as cfg
from pcs_config import ParameterError, SimulationParameters, validate_parameters, wrap_phase
from pcs_physics import SimulationResults, evaluate


# =============================================================================
# STATE
# =============================================================================

@dataclass(frozen=True)
class SimulationClock:
    ticks: int = 0      # simulated tick count
    step: int = 0       # calculation step, drives the recompute cadence

    def advance(self) -> SimulationClock:
        return SimulationClock(self.ticks + 1, self.step + 1)


@dataclass(frozen=True)
class SimulationState:
    params: SimulationParameters
    results: SimulationResults
    clock: SimulationClock = field(default_factory=SimulationClock)
    running: bool = False
    recomputes: int = 0     # tick-driven recomputes since the last reset


def initial_state(params: Optional[SimulationParameters] = None) -> SimulationState:
    """Fresh stopped state with Results evaluated once from params."""
    if params is None:
        params = SimulationParameters()
    return SimulationState(params=params, results=evaluate(params))


# =============================================================================
# MAIN LOOP TRANSITIONS
# =============================================================================

def start(state: SimulationState) -> SimulationState:
    return state if state.running else replace(state, running=True)


def pause(state: SimulationState) -> SimulationState:
    return replace(state, running=False) if state.running else state


def toggle(state: SimulationState) -> SimulationState:
    return pause(state) if state.running else start(state)


def reset(state: SimulationState) -> SimulationState:
    """Stop and zero the clock. Parameters and Results are kept."""
    return replace(state, running=False, clock=SimulationClock(), recomputes=0)


def update_parameters(state: SimulationState, **changes) -> SimulationState:
    """Replace parameter fields. Raises ParameterError, leaving state as is,
    if the result is outside the physical domain."""
    params = validate_parameters(replace(state.params, **changes))
    return replace(state, params=params)


def is_recompute_step(step: int) -> bool:
    return step % cfg.RECOMPUTE_INTERVAL == 0


def tick(state: SimulationState) -> SimulationState:
    """Advance one frame. A stopped state is returned unchanged."""
    if not state.running:
        return state
    if is_recompute_step(state.clock.step):
        state = replace(state, results=evaluate(state.params),
                        recomputes=state.recomputes + 1)
    return replace(state, clock=state.clock.advance())


# =============================================================================
# LUNAR-CYCLE SWEEP
# =============================================================================

@dataclass(frozen=True)
class LunarSweep:
    start_phase: float
    total_ticks: int = cfg.LUNAR_SWEEP_TICKS
    ticks_done: int = 0

    @property
    def finished(self) -> bool:
        return self.ticks_done >= self.total_ticks

    def phase_at(self, n: int) -> float:
        """Phase after n ticks: start + n/total, wrapped."""
        return wrap_phase(self.start_phase + n / self.total_ticks)


def start_lunar_sweep(state: SimulationState, total_ticks: int = cfg.LUNAR_SWEEP_TICKS) -> LunarSweep:
    return LunarSweep(start_phase=state.params.lunar_phase, total_ticks=total_ticks)


def sweep_tick(sweep: LunarSweep, state: SimulationState) -> Tuple[LunarSweep, SimulationState]:
    """Advance the sweep one tick and write the new phase into Parameters."""
    if sweep.finished:
        return sweep, state
    n = sweep.ticks_done + 1
    sweep = replace(sweep, ticks_done=n)
    return sweep, update_parameters(state, lunar_phase=sweep.phase_at(n))


# =============================================================================
# COOPERATIVE DRIVER
# =============================================================================

Observer = Callable[[SimulationState], None]


class SimulationRunner:
    """Runs the main loop and the lunar sweep as asyncio timer callbacks.

    Commands must be issued from code running on the event loop.
    """

    def __init__(self, params=None, frame_interval=cfg.FRAME_INTERVAL,
                 sweep_interval=cfg.LUNAR_SWEEP_INTERVAL,
                 sweep_ticks=cfg.LUNAR_SWEEP_TICKS, loop=None):
        self.state = initial_state(params)
        self.sweep: Optional[LunarSweep] = None
        self.frame_interval = frame_interval
        self.sweep_interval = sweep_interval
        self.sweep_ticks = sweep_ticks
        self._loop = loop
        self._frame_handle: Optional[asyncio.TimerHandle] = None
        self._sweep_handle: Optional[asyncio.TimerHandle] = None
        self._sweep_done: Optional[asyncio.Event] = None  # created on the loop by run_lunar_cycle
        self._observers: List[Observer] = []

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    @property
    def running(self) -> bool:
        return self.state.running

    @property
    def sweep_active(self) -> bool:
        return self.sweep is not None

    def subscribe(self, observer: Observer) -> None:
        self._observers.append(observer)

    def _publish(self, state: SimulationState) -> None:
        self.state = state
        for observer in self._observers:
            observer(state)

    # ── Main loop ────────────────────────────────────────────────────
    def start(self) -> None:
        if self.state.running:
            return
        self._publish(start(self.state))
        self._schedule_frame()

    def pause(self) -> None:
        self._cancel_frame()
        self._publish(pause(self.state))

    def toggle(self) -> None:
        if self.state.running:
            self.pause()
        else:
            self.start()

    def reset(self) -> None:
        self._cancel_frame()
        self._publish(reset(self.state))

    def update_parameters(self, **changes) -> None:
        self._publish(update_parameters(self.state, **changes))

    def _schedule_frame(self) -> None:
        self._frame_handle = self.loop.call_later(self.frame_interval, self._on_frame)

    def _cancel_frame(self) -> None:
        if self._frame_handle is not None:
            self._frame_handle.cancel()
            self._frame_handle = None

    def _on_frame(self) -> None:
        self._frame_handle = None
        try:
            state = tick(self.state)
        except ParameterError:
            self._publish(pause(self.state))
            raise
        self._publish(state)
        if self.state.running:
            self._schedule_frame()

    # ── Lunar sweep ──────────────────────────────────────────────────
    def run_lunar_cycle(self) -> None:
        """Start a sweep, cancelling any sweep already in flight."""
        self._cancel_sweep()
        self.sweep = start_lunar_sweep(self.state, self.sweep_ticks)
        if self._sweep_done is None:
            self._sweep_done = asyncio.Event()
        self._sweep_done.clear()
        self._sweep_handle = self.loop.call_later(self.sweep_interval, self._on_sweep_tick)

    def _cancel_sweep(self) -> None:
        if self._sweep_handle is not None:
            self._sweep_handle.cancel()
            self._sweep_handle = None
        self.sweep = None

    def _on_sweep_tick(self) -> None:
        self._sweep_handle = None
        self.sweep, state = sweep_tick(self.sweep, self.state)
        self._publish(state)
        if self.sweep.finished:
            self.sweep = None
            self._sweep_done.set()
        else:
            self._sweep_handle = self.loop.call_later(self.sweep_interval, self._on_sweep_tick)

    async def wait_for_sweep(self) -> None:
        if self._sweep_done is not None:
            await self._sweep_done.wait()

    def shutdown(self) -> None:
        """Cancel every pending callback and stop the main loop."""
        self._cancel_sweep()
        if self._sweep_done is not None:
            self._sweep_done.set()
        if self.state.running:
            self.pause()
