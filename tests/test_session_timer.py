from datetime import timedelta

from interview_conduct.services.session_timer import SessionTimer, format_elapsed


def test_elapsed_accumulates_only_while_running(clock):
    timer = SessionTimer().start(clock())
    clock.advance(65)
    timer = timer.pause(clock())
    assert timer.elapsed(clock()) == 65

    clock.advance(30)
    assert timer.elapsed(clock()) == 65

    timer = timer.resume(clock())
    clock.advance(20)
    assert timer.elapsed_seconds(clock()) == 85


def test_pause_and_resume_are_idempotent(clock):
    timer = SessionTimer().start(clock())
    clock.advance(10)
    paused = timer.pause(clock())
    assert paused.pause(clock() + timedelta(seconds=99)) is paused

    resumed = paused.resume(clock())
    assert resumed.resume(clock()) is resumed


def test_elapsed_uses_wall_clock_not_ticks(clock):
    timer = SessionTimer().start(clock())
    # no ticks delivered for an hour
    clock.advance(3600)
    assert timer.elapsed_seconds(clock()) == 3600


def test_format_elapsed():
    assert format_elapsed(0) == "0:00"
    assert format_elapsed(85) == "1:25"
    assert format_elapsed(3725) == "1:02:05"
