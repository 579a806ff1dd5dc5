"""
Tests for the replay clock state machine.
"""

import pytest

from replay.clock import ClockPhase, ReplayClock


def test_advance_scales_by_speed():
    clock = ReplayClock(120, speed=10)
    clock.advance(0.5)
    assert clock.time == pytest.approx(5.0)
    assert clock.phase == ClockPhase.PLAYING


def test_large_step_clamps_at_duration_and_holds():
    clock = ReplayClock(120, speed=10)
    clock.advance(3600)
    assert clock.time == 120
    assert clock.phase == ClockPhase.END_HOLD


def test_negative_step_is_ignored():
    clock = ReplayClock(120, speed=1)
    clock.advance(10)
    clock.advance(-4)
    assert clock.time == pytest.approx(10)


def test_pause_freezes_time():
    clock = ReplayClock(120, speed=1)
    clock.advance(10)
    clock.pause()
    clock.advance(50)
    assert clock.time == pytest.approx(10)
    assert clock.phase == ClockPhase.PAUSED
    clock.resume()
    clock.advance(1)
    assert clock.time == pytest.approx(11)


def test_hold_uses_wall_time_not_speed():
    clock = ReplayClock(120, speed=100, hold_s=0.8)
    clock.advance(2)
    assert clock.phase == ClockPhase.END_HOLD
    assert clock.advance(0.5) is False
    assert clock.time == 120
    assert clock.advance(0.5) is True
    assert clock.time == 0
    assert clock.phase == ClockPhase.PLAYING


def test_hold_expiry_with_small_steps_restarts_clock():
    clock = ReplayClock(120, speed=10, hold_s=0.8)
    clock.advance(12)
    clock.fired_events.add(("kill", 30, "A", "B"))
    restarted = False
    for _ in range(20):
        if clock.advance(1 / 60):
            restarted = True
            break
        assert clock.time == 120
    assert not restarted
    for _ in range(100):
        if clock.advance(1 / 60):
            restarted = True
            break
    assert restarted
    assert clock.time == 0
    assert clock.fired_events == set()
    assert clock.epoch == 1


def test_pause_during_hold_resumes_hold():
    clock = ReplayClock(60, speed=1, hold_s=0.8)
    clock.advance(60)
    clock.advance(0.5)
    clock.pause()
    clock.advance(10)
    assert clock.time == 60
    clock.resume()
    assert clock.phase == ClockPhase.END_HOLD
    assert clock.advance(0.4) is True


def test_restart_twice_is_same_as_once():
    clock = ReplayClock(120)
    clock.advance(3)
    clock.fired_events.add("x")
    clock.restart()
    once = (clock.time, set(clock.fired_events), clock.phase)
    clock.restart()
    assert (clock.time, set(clock.fired_events), clock.phase) == once


def test_set_speed_applies_next_advance():
    clock = ReplayClock(120, speed=1)
    clock.advance(1)
    clock.set_speed(4)
    clock.advance(1)
    assert clock.time == pytest.approx(5)


def test_invalid_speed_rejected():
    clock = ReplayClock(120)
    with pytest.raises(ValueError):
        clock.set_speed(0)
    with pytest.raises(ValueError):
        ReplayClock(120, speed=-1)


def test_jump_to_never_goes_back():
    clock = ReplayClock(120)
    clock.jump_to(50)
    assert clock.time == 50
    with pytest.raises(ValueError):
        clock.jump_to(10)
    clock.jump_to(500)
    assert clock.time == 120
    assert clock.phase == ClockPhase.END_HOLD


def test_non_finite_speed_and_interval():
    clock = ReplayClock(120)
    with pytest.raises(ValueError):
        clock.set_speed(float("nan"))
    with pytest.raises(ValueError):
        clock.set_speed(float("inf"))
    clock.advance(float("nan"))
    assert clock.time == 0
    assert clock.phase == ClockPhase.PLAYING
    with pytest.raises(ValueError):
        clock.jump_to(float("nan"))
