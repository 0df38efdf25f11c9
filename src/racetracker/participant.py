"""
Race participant: a cancellable, resumable progress loop.

A participant sleeps for ``progress_delay`` seconds, adds
``progress_increment`` to its progress, and repeats until it reaches
``max_progress``. Cancelling the task that runs it pauses it; calling
``run()`` again resumes from the last recorded progress.
"""

import asyncio
import inspect
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from pydantic import BaseModel

from .config import RunnerConfig


class RunnerStatus(str, Enum):
    """Lifecycle states of a participant."""
    IDLE = "idle"              # fresh or paused
    RUNNING = "running"
    FINISHED = "finished"      # reached max_progress, run() is a no-op


class ParticipantState(BaseModel):
    """Point-in-time view of a participant for display layers."""
    name: str
    current_progress: int
    max_progress: int
    progress_factor: float
    status: RunnerStatus


class RaceParticipant:
    """
    Advances progress on a fixed schedule until the finish line.

    Usage:
        racer = RaceParticipant("Player 1", max_progress=100, progress_delay=0.5)
        task = asyncio.create_task(racer.run())
        ...
        await cancel_and_join(task)   # pause, progress is kept
        task = asyncio.create_task(racer.run())  # resume

    ``sleep`` is the suspension point between ticks. It defaults to
    ``asyncio.sleep`` and can be replaced with a virtual clock.
    """

    def __init__(
        self,
        name: str,
        max_progress: int = 100,
        progress_delay: float = 0.5,
        progress_increment: int = 1,
        initial_progress: int = 0,
        *,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = RunnerConfig.build(
            name=name,
            max_progress=max_progress,
            progress_delay=progress_delay,
            progress_increment=progress_increment,
            initial_progress=initial_progress,
        )
        self._current_progress = self.config.initial_progress
        self._sleep = sleep
        self._logger = logger or logging.getLogger(__name__)
        self._callbacks: list[Callable[["RaceParticipant"], Any]] = []
        self._running = False

    @classmethod
    def from_config(cls, config: RunnerConfig, **kwargs: Any) -> "RaceParticipant":
        """Create a participant from a validated RunnerConfig."""
        return cls(
            name=config.name,
            max_progress=config.max_progress,
            progress_delay=config.progress_delay,
            progress_increment=config.progress_increment,
            initial_progress=config.initial_progress,
            **kwargs,
        )

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def max_progress(self) -> int:
        return self.config.max_progress

    @property
    def progress_delay(self) -> float:
        return self.config.progress_delay

    @property
    def progress_increment(self) -> int:
        return self.config.progress_increment

    @property
    def initial_progress(self) -> int:
        return self.config.initial_progress

    @property
    def current_progress(self) -> int:
        return self._current_progress

    @property
    def progress_factor(self) -> float:
        """Fraction of the course completed, between 0.0 and 1.0."""
        return self._current_progress / self.max_progress

    @property
    def status(self) -> RunnerStatus:
        if self._running:
            return RunnerStatus.RUNNING
        if self._current_progress >= self.max_progress:
            return RunnerStatus.FINISHED
        return RunnerStatus.IDLE

    def on_update(self, callback: Callable[["RaceParticipant"], Any]):
        """Register a synchronous callback invoked after every progress change."""
        if inspect.iscoroutinefunction(callback):
            raise TypeError("Progress callbacks must be synchronous")
        self._callbacks.append(callback)

    def _notify(self):
        for callback in self._callbacks:
            try:
                result = callback(self)
                if asyncio.iscoroutine(result):
                    result.close()
                    self._logger.warning(
                        "Dropped coroutine returned by progress callback for %s", self.name
                    )
            except Exception:
                # Observers must not break the race
                self._logger.exception("Progress callback failed for %s", self.name)

    async def run(self) -> None:
        """
        Advance progress until max_progress is reached.

        Raises RuntimeError if this participant is already running. On
        cancellation the progress reached so far is kept and
        asyncio.CancelledError propagates to the owning task.
        """
        if self._running:
            raise RuntimeError(f"{self.name} is already running")
        if self.status is RunnerStatus.FINISHED:
            return

        self._running = True
        try:
            while self._current_progress < self.max_progress:
                await self._sleep(self.progress_delay)
                # Clamp so a non-multiple increment never overshoots
                self._current_progress = min(
                    self._current_progress + self.progress_increment,
                    self.max_progress,
                )
                self._notify()
        except asyncio.CancelledError:
            self._logger.info(
                "%s paused at %d/%d", self.name, self._current_progress, self.max_progress
            )
            raise
        finally:
            self._running = False

        self._logger.info("%s finished", self.name)

    def reset(self) -> None:
        """Return progress to its initial value."""
        if self._running:
            raise RuntimeError(f"Cannot reset {self.name} while it is running")
        self._current_progress = self.initial_progress
        self._notify()

    def snapshot(self) -> ParticipantState:
        """Capture the current state for rendering."""
        return ParticipantState(
            name=self.name,
            current_progress=self._current_progress,
            max_progress=self.max_progress,
            progress_factor=self.progress_factor,
            status=self.status,
        )

    def __repr__(self) -> str:
        return (
            f"RaceParticipant(name={self.name!r}, "
            f"progress={self._current_progress}/{self.max_progress})"
        )


async def cancel_and_join(task: asyncio.Task) -> None:
    """
    Cancel a task running ``RaceParticipant.run()`` and wait for it to stop.

    Cancellation is the normal way to pause a participant, so the resulting
    CancelledError is absorbed. Any other exception from the task propagates,
    as does a cancellation of the coroutine calling this helper.
    """
    task.cancel()
    # wait() does not raise the task's cancellation, only the caller's
    await asyncio.wait([task])
    if not task.cancelled():
        task.result()
