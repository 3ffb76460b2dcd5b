"""Step scheduler: clock, recompute throttle, lunar sweep and asyncio driver."""

from __future__ import annotations

import asyncio
from dataclasses import replace

import pytest

import pcs_scheduler as sched
from pcs_config import ParameterError, SimulationParameters
from pcs_physics import calc_lunar_alignment, evaluate


def _run(state, n):
    for _ in range(n):
        state = sched.tick(state)
    return state


# ── Pure transitions ─────────────────────────────────────────────────────

def test_initial_state_is_stopped_and_evaluated() -> None:
    s = sched.initial_state()
    assert not s.running
    assert s.clock.ticks == 0 and s.clock.step == 0
    assert s.recomputes == 0
    assert s.results == evaluate(SimulationParameters())


def test_start_pause_toggle() -> None:
    s = sched.initial_state()
    assert sched.start(s).running
    assert not sched.pause(sched.start(s)).running
    assert sched.toggle(s).running
    assert not sched.toggle(sched.toggle(s)).running
    running = sched.start(s)
    assert sched.start(running) is running


def test_stopped_tick_is_noop() -> None:
    s = sched.initial_state()
    assert sched.tick(s) is s


def test_five_ticks_one_recompute() -> None:
    s = _run(sched.start(sched.initial_state()), 5)
    assert s.clock.ticks == 5
    assert s.clock.step == 5
    assert s.recomputes == 1


def test_sixth_tick_recomputes_again() -> None:
    s = _run(sched.start(sched.initial_state()), 6)
    assert s.recomputes == 2


@pytest.mark.parametrize("n", [1, 4, 5, 10, 11, 59, 60])
def test_recompute_count_tracks_step(n: int) -> None:
    s = _run(sched.start(sched.initial_state()), n)
    assert s.recomputes == (s.clock.step + 4) // 5


def test_is_recompute_step() -> None:
    assert [k for k in range(16) if sched.is_recompute_step(k)] == [0, 5, 10, 15]


def test_parameter_change_visible_only_at_boundary() -> None:
    s = _run(sched.start(sched.initial_state()), 1)     # step 1
    s = sched.update_parameters(s, lunar_phase=0.5)
    stale = s.results
    s = _run(s, 3)                                      # steps 1, 2, 3
    assert s.results is stale
    s = _run(s, 1)                                      # step 4
    assert s.results is stale
    s = _run(s, 1)                                      # step 5
    assert s.results.lunar_plasma_alignment == pytest.approx(0.0, abs=1e-12)


def test_reset_zeroes_clock_and_keeps_data() -> None:
    s = sched.update_parameters(_run(sched.start(sched.initial_state()), 12), rotation_rate=0.3)
    r = sched.reset(s)
    assert not r.running
    assert r.clock.ticks == 0 and r.clock.step == 0
    assert r.recomputes == 0
    assert r.params == s.params
    assert r.results is s.results


def test_start_then_reset_before_any_tick() -> None:
    s0 = sched.initial_state()
    s = sched.reset(sched.start(s0))
    assert not s.running
    assert s.clock.step == 0 and s.clock.ticks == 0
    assert s.recomputes == 0
    assert s.results is s0.results


@pytest.mark.parametrize("field, value", [("plasma_density", 0.0), ("temperature", -5.0)])
def test_update_parameters_rejects_degenerate(field: str, value: float) -> None:
    s = sched.start(sched.initial_state())
    with pytest.raises(ParameterError, match=field):
        sched.update_parameters(s, **{field: value})
    assert sched.tick(s).recomputes == 1


def test_restart_after_reset_recomputes_immediately() -> None:
    s = sched.update_parameters(sched.initial_state(), rotation_rate=0.0)
    s = sched.tick(sched.start(sched.reset(s)))
    assert s.recomputes == 1
    assert s.results.current_magnitude == 0.0


# ── Lunar sweep ──────────────────────────────────────────────────────────

def test_sweep_returns_to_start_phase() -> None:
    s = sched.update_parameters(sched.initial_state(), lunar_phase=0.3)
    sweep = sched.start_lunar_sweep(s)
    for _ in range(300):
        sweep, s = sched.sweep_tick(sweep, s)
    assert sweep.finished
    assert s.params.lunar_phase == pytest.approx(0.3)


def test_sweep_phase_is_linear_and_wrapped() -> None:
    s = sched.update_parameters(sched.initial_state(), lunar_phase=0.9)
    sweep = sched.start_lunar_sweep(s)
    phases = []
    for _ in range(300):
        sweep, s = sched.sweep_tick(sweep, s)
        phases.append(s.params.lunar_phase)
    assert phases[0] == pytest.approx(0.9 + 1 / 300)
    assert phases[149] == pytest.approx(0.4)
    assert all(0.0 <= ph < 1.0 for ph in phases)


def test_sweep_never_recomputes() -> None:
    s = sched.initial_state()
    sweep = sched.start_lunar_sweep(s)
    for _ in range(150):
        sweep, s = sched.sweep_tick(sweep, s)
    assert s.params.lunar_phase == pytest.approx(0.5)
    assert s.results == evaluate(SimulationParameters())
    assert s.recomputes == 0


def test_finished_sweep_is_inert() -> None:
    s = sched.initial_state()
    sweep = sched.LunarSweep(start_phase=0.0, total_ticks=2, ticks_done=2)
    assert sched.sweep_tick(sweep, s) == (sweep, s)


def test_sweep_does_not_touch_clock() -> None:
    s = sched.start(sched.initial_state())
    sweep, s2 = sched.sweep_tick(sched.start_lunar_sweep(s), s)
    assert s2.clock == s.clock
    assert s2.running


def test_sweep_visible_at_next_boundary() -> None:
    s = _run(sched.start(sched.initial_state()), 3)     # next recompute at step 5
    sweep = sched.start_lunar_sweep(s)
    for _ in range(75):
        sweep, s = sched.sweep_tick(sweep, s)           # phase 0.25
    s = _run(s, 2)                                      # steps 3, 4
    assert s.results.lunar_plasma_alignment == pytest.approx(1.0)
    s = _run(s, 1)                                      # step 5
    expected = calc_lunar_alignment(0.25)
    assert s.results.lunar_plasma_alignment == pytest.approx(expected)


# ── Asyncio driver ───────────────────────────────────────────────────────

def test_runner_sweep_restart_cancels_previous() -> None:
    async def scenario():
        runner = sched.SimulationRunner(sweep_interval=0.001, sweep_ticks=10)
        phases = []
        runner.subscribe(lambda st: phases.append(st.params.lunar_phase))
        runner.run_lunar_cycle()
        runner.run_lunar_cycle()
        await asyncio.wait_for(runner.wait_for_sweep(), timeout=5)
        return runner, phases

    runner, phases = asyncio.run(scenario())
    assert len(phases) == 10
    assert phases[-1] == pytest.approx(0.0)
    assert not runner.sweep_active
    # main loop never ran, so results are the initial ones
    assert runner.state.recomputes == 0
    assert runner.state.results == evaluate(SimulationParameters())


def test_runner_pause_stops_frames() -> None:
    async def scenario():
        runner = sched.SimulationRunner(frame_interval=0.001)
        runner.start()
        await asyncio.sleep(0.05)
        runner.pause()
        frozen = runner.state.clock
        await asyncio.sleep(0.02)
        return runner, frozen

    runner, frozen = asyncio.run(scenario())
    assert not runner.running
    assert runner.state.clock == frozen
    assert frozen.step > 0
    assert runner.state.recomputes == (frozen.step + 4) // 5


def test_runner_toggle_and_reset() -> None:
    async def scenario():
        runner = sched.SimulationRunner(frame_interval=0.001)
        runner.toggle()
        await asyncio.sleep(0.02)
        running = runner.running
        runner.reset()
        await asyncio.sleep(0.01)
        return runner, running

    runner, was_running = asyncio.run(scenario())
    assert was_running
    assert not runner.running
    assert runner.state.clock.step == 0
    assert runner.state.recomputes == 0


def test_runner_shutdown_cancels_everything() -> None:
    async def scenario():
        runner = sched.SimulationRunner(frame_interval=0.001, sweep_interval=0.001, sweep_ticks=1000)
        runner.start()
        runner.run_lunar_cycle()
        await asyncio.sleep(0.01)
        runner.shutdown()
        snapshot = runner.state
        await asyncio.sleep(0.01)
        await asyncio.wait_for(runner.wait_for_sweep(), timeout=1)
        return runner, snapshot

    runner, snapshot = asyncio.run(scenario())
    assert runner.state is snapshot
    assert not runner.running
    assert not runner.sweep_active


def test_runner_start_then_reset_fires_no_frame() -> None:
    async def scenario():
        runner = sched.SimulationRunner(frame_interval=0.001)
        published = []
        runner.subscribe(published.append)
        runner.start()
        runner.reset()
        await asyncio.sleep(0.02)
        return runner, published

    runner, published = asyncio.run(scenario())
    assert not runner.running
    assert runner.state.clock.step == 0
    assert runner.state.recomputes == 0
    assert all(st.clock.ticks == 0 for st in published)


def test_runner_rejects_degenerate_update_and_keeps_running() -> None:
    async def scenario():
        runner = sched.SimulationRunner(frame_interval=0.001)
        runner.start()
        await asyncio.sleep(0.01)
        with pytest.raises(ParameterError):
            runner.update_parameters(plasma_density=0.0)
        before = runner.state.clock.step
        await asyncio.sleep(0.02)
        runner.shutdown()
        return runner, before

    runner, before = asyncio.run(scenario())
    assert runner.state.params.plasma_density == 1e15
    assert runner.state.clock.step > before


def test_runner_failed_frame_stops_main_loop() -> None:
    async def scenario():
        errors = []
        asyncio.get_running_loop().set_exception_handler(
            lambda loop, context: errors.append(context.get("exception")))
        runner = sched.SimulationRunner(frame_interval=0.001)
        # bypass validation to force a failing evaluation on the first frame
        bad = replace(runner.state.params, system_radius=0.0)
        runner.state = replace(runner.state, params=bad)
        runner.start()
        await asyncio.sleep(0.02)
        stopped = not runner.running
        runner.state = replace(runner.state, params=SimulationParameters())
        runner.start()
        await asyncio.sleep(0.02)
        runner.shutdown()
        return runner, stopped, errors

    runner, stopped, errors = asyncio.run(scenario())
    assert stopped
    assert len(errors) == 1 and isinstance(errors[0], ParameterError)
    assert runner.state.clock.step > 0
    assert runner.state.recomputes >= 1


def test_runner_built_outside_event_loop() -> None:
    runner = sched.SimulationRunner(sweep_interval=0.001, sweep_ticks=3)

    async def scenario():
        await asyncio.wait_for(runner.wait_for_sweep(), timeout=1)
        runner.run_lunar_cycle()
        await asyncio.wait_for(runner.wait_for_sweep(), timeout=5)

    asyncio.run(scenario())
    assert not runner.sweep_active
    assert runner.state.params.lunar_phase == pytest.approx(0.0)
