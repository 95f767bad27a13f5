from datetime import datetime
from typing import Optional


class SessionTimer:
    """
    Elapsed-time accumulator with pause/resume.

    Elapsed time is always computed from wall-clock timestamps, so a display
    tick that is skipped (backgrounded tab, slow client) never skews it.
    Instances are immutable; every transition returns a new timer.
    """

    def __init__(self, accumulated: float = 0.0, run_started_at: Optional[datetime] = None):
        self.accumulated = accumulated
        self.run_started_at = run_started_at

    def __repr__(self) -> str:
        return f"SessionTimer(accumulated={self.accumulated!r}, run_started_at={self.run_started_at!r})"

    @property
    def running(self) -> bool:
        return self.run_started_at is not None

    def elapsed(self, now: datetime) -> float:
        if self.run_started_at is None:
            return self.accumulated
        return self.accumulated + max(0.0, (now - self.run_started_at).total_seconds())

    def elapsed_seconds(self, now: datetime) -> int:
        return int(self.elapsed(now))

    def start(self, now: datetime) -> "SessionTimer":
        return SessionTimer(self.accumulated, now)

    def pause(self, now: datetime) -> "SessionTimer":
        if not self.running:
            return self
        return SessionTimer(self.elapsed(now), None)

    def resume(self, now: datetime) -> "SessionTimer":
        if self.running:
            return self
        return SessionTimer(self.accumulated, now)


def format_elapsed(seconds: int) -> str:
    """Render seconds as M:SS, or H:MM:SS once past an hour."""
    hours, remainder = divmod(max(0, int(seconds)), 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
