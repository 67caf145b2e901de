"""Stopwatch / countdown timer state machine.

Time is recomputed from the clock on every tick (base value plus or minus
the time elapsed since the last start) instead of being accumulated per
tick, so scheduling jitter never drifts the displayed value. All times are
milliseconds.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)

TICK_INTERVAL_MS = 16
TICK_CALLBACK_INTERVAL_MS = 100


class TimerMode(str, Enum):
    STOPWATCH = "stopwatch"
    COUNTDOWN = "countdown"


class TimerStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"
    COMPLETED = "completed"


@dataclass
class TimerState:
    time: float
    is_running: bool
    is_paused: bool
    mode: TimerMode
    laps: list[float] = field(default_factory=list)


def monotonic_ms() -> float:
    return time.monotonic() * 1000


def format_time(milliseconds: float, show_milliseconds: bool = False) -> str:
    """``MM:SS``, ``H:MM:SS`` past an hour, or ``MM:SS.d`` with tenths."""
    milliseconds = max(0, int(milliseconds))
    total_seconds = milliseconds // 1000
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    tenths = (milliseconds % 1000) // 100

    if show_milliseconds and hours == 0:
        return f"{minutes:02d}:{seconds:02d}.{tenths}"
    if hours > 0:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes:02d}:{seconds:02d}"


class Timer:
    def __init__(
        self,
        mode: TimerMode | str = TimerMode.STOPWATCH,
        initial_time: float = 0,
        auto_start: bool = False,
        show_milliseconds: bool = False,
        on_complete: Callable[[], None] | None = None,
        on_tick: Callable[[float], None] | None = None,
        on_start: Callable[[], None] | None = None,
        on_pause: Callable[[], None] | None = None,
        on_stop: Callable[[], None] | None = None,
        on_rest_complete: Callable[[], None] | None = None,
        clock: Callable[[], float] = monotonic_ms,
    ):
        self.mode = TimerMode(mode)
        self.show_milliseconds = show_milliseconds
        self.on_complete = on_complete
        self.on_tick = on_tick
        self.on_start = on_start
        self.on_pause = on_pause
        self.on_stop = on_stop
        self.on_rest_complete = on_rest_complete
        self._clock = clock

        self.initial_time = max(0, initial_time)
        self.time = self.initial_time
        self.is_running = False
        self.is_paused = False
        self.status = TimerStatus.IDLE
        self.laps: list[float] = []

        self._base = self.initial_time
        self._started_at: float | None = None
        self._last_tick_callback: float | None = None
        self._resting = False
        self._task: asyncio.Task | None = None

        if auto_start:
            self.start()

    # controls

    def start(self) -> None:
        if self.is_running:
            return
        self.is_running = True
        self.is_paused = False
        self.status = TimerStatus.RUNNING
        self._started_at = self._clock()
        if self.on_start:
            self.on_start()

    def pause(self) -> None:
        if not self.is_running:
            return
        self.tick()
        if not self.is_running:
            # completed on this very tick
            return
        self._base = self.time
        self.is_running = False
        self.is_paused = True
        self.status = TimerStatus.PAUSED
        if self.on_pause:
            self.on_pause()

    def resume(self) -> None:
        if self.is_running or not self.is_paused:
            return
        self.start()

    def _halt(self, status: TimerStatus) -> None:
        self.is_running = False
        self.is_paused = False
        self._resting = False
        self.time = self.initial_time if self.mode is TimerMode.COUNTDOWN else 0
        self._base = self.time
        self.laps = []
        self.status = status

    def reset(self) -> None:
        self._halt(TimerStatus.IDLE)

    def stop(self) -> None:
        self._halt(TimerStatus.STOPPED)
        if self.on_stop:
            self.on_stop()

    def set_countdown(self, milliseconds: float) -> None:
        self.mode = TimerMode.COUNTDOWN
        self.initial_time = max(0, milliseconds)
        self.time = self._base = self.initial_time
        self.is_running = False
        self.is_paused = False
        self._resting = False
        self.status = TimerStatus.IDLE

    def lap(self) -> None:
        if not self.is_running or self.mode is not TimerMode.STOPWATCH:
            return
        self.tick()
        self.laps.append(self.time)

    def start_rest_timer(self, duration: float) -> None:
        """Count down ``duration`` ms, then call ``on_rest_complete``."""
        self.set_countdown(duration)
        self._resting = True
        self.is_running = True
        self.status = TimerStatus.RUNNING
        self._started_at = self._clock()

    def cancel_rest_timer(self) -> None:
        self.mode = TimerMode.STOPWATCH
        self.is_running = False
        self.is_paused = False
        self._resting = False
        self.time = self._base = 0
        self.status = TimerStatus.IDLE

    # ticking

    def tick(self) -> float:
        """Recompute ``time`` from the clock; fires completion and throttled on_tick."""
        if not self.is_running or self._started_at is None:
            return self.time
        now = self._clock()
        elapsed = now - self._started_at

        if self.mode is TimerMode.STOPWATCH:
            self.time = self._base + elapsed
        else:
            self.time = max(0, self._base - elapsed)
            if self.time <= 0:
                self._complete()
                return self.time

        if self.on_tick and (
            self._last_tick_callback is None
            or now - self._last_tick_callback >= TICK_CALLBACK_INTERVAL_MS
        ):
            self._last_tick_callback = now
            self.on_tick(self.time)
        return self.time

    def _complete(self) -> None:
        resting = self._resting
        self.time = 0
        self._base = 0
        self.is_running = False
        self.is_paused = False
        self._resting = False
        self.status = TimerStatus.COMPLETED
        callback = self.on_rest_complete if resting else self.on_complete
        if callback:
            callback()

    async def run(self) -> None:
        """Tick every 16 ms while running; returns once the timer stops."""
        try:
            while self.is_running:
                self.tick()
                await asyncio.sleep(TICK_INTERVAL_MS / 1000)
        except asyncio.CancelledError:
            logger.debug("Timer driver cancelled")
            raise

    def spawn(self) -> asyncio.Task:
        """Run the driver in the background on the current loop."""
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self.run())
        return self._task

    def close(self) -> None:
        """Stop ticking and cancel the background driver, if any."""
        self.is_running = False
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    # configuration / state

    def configure(
        self,
        mode: TimerMode | str | None = None,
        initial_time: float | None = None,
        show_milliseconds: bool | None = None,
        **callbacks: Callable | None,
    ) -> None:
        if mode is not None:
            self.mode = TimerMode(mode)
        if initial_time is not None:
            self.initial_time = max(0, initial_time)
            if not self.is_running:
                self.time = self._base = self.initial_time
        if show_milliseconds is not None:
            self.show_milliseconds = show_milliseconds
        for name, callback in callbacks.items():
            if not name.startswith("on_") or not hasattr(self, name):
                raise TypeError(f"Unknown timer callback: {name}")
            setattr(self, name, callback)

    def get_state(self) -> TimerState:
        return TimerState(
            time=self.time,
            is_running=self.is_running,
            is_paused=self.is_paused,
            mode=self.mode,
            laps=list(self.laps),
        )

    def set_state(self, state: TimerState) -> None:
        self.time = self._base = state.time
        self.is_paused = state.is_paused
        self.mode = TimerMode(state.mode)
        self.laps = list(state.laps)
        self.is_running = False
        if state.is_running:
            self.start()
        else:
            self.status = TimerStatus.PAUSED if state.is_paused else TimerStatus.IDLE

    def set_time(self, milliseconds: float) -> None:
        self.time = self._base = max(0, milliseconds)
        if self.is_running:
            self._started_at = self._clock()

    def format_time(self, milliseconds: float) -> str:
        return format_time(milliseconds, self.show_milliseconds)

    @property
    def formatted_time(self) -> str:
        return self.format_time(self.time)
