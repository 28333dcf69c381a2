"""Study clock."""
import time
from typing import Callable, Optional


def format_elapsed(total_seconds: int) -> str:
    hours, rest = divmod(int(total_seconds), 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


class StudyTimer:
    """Pausable stopwatch counting whole seconds of study time.

    ``clock`` must be monotonic; it is injectable so tests can drive it.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic,
                 on_update: Optional[Callable[[int], None]] = None):
        self._clock = clock
        self._on_update = on_update
        self._accumulated = 0.0
        self._started_at: Optional[float] = None

    @property
    def running(self) -> bool:
        return self._started_at is not None

    @property
    def elapsed_seconds(self) -> int:
        total = self._accumulated
        if self._started_at is not None:
            total += self._clock() - self._started_at
        return max(0, int(total))

    def start(self) -> None:
        if self._started_at is None:
            self._started_at = self._clock()

    def pause(self) -> None:
        if self._started_at is not None:
            self._accumulated += self._clock() - self._started_at
            self._started_at = None

    def toggle(self) -> None:
        if self.running:
            self.pause()
        else:
            self.start()

    def reset(self) -> None:
        self._accumulated = 0.0
        self._started_at = None
        self._notify()

    def tick(self) -> int:
        """Report the current reading to the listener and return it."""
        seconds = self.elapsed_seconds
        self._notify(seconds)
        return seconds

    def _notify(self, seconds: int = 0) -> None:
        if self._on_update is not None:
            self._on_update(seconds)

    def __str__(self) -> str:
        return format_elapsed(self.elapsed_seconds)
