from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional

from .algorithms.types import AlgoResult, AlgoStep, format_path

logger = logging.getLogger(__name__)


class PlayerState(str, Enum):
    IDLE = "idle"
    PLAYING = "playing"
    COMPLETED = "completed"


@dataclass(frozen=True)
class PlaybackSummary:
    path_string: str
    total_cost: float
    found: bool


StepCallback = Callable[[int, AlgoStep], None]
CompleteCallback = Callable[[PlaybackSummary], None]


class StepPlayer:
    """Reveals a precomputed step sequence one step per ``interval`` seconds.

    Ticks are scheduled on the asyncio loop with ``call_later``. Every
    playback gets a generation number; a tick whose generation is no longer
    current does nothing, so a cancelled playback can never touch state even
    if its callback was already queued.
    """

    def __init__(
        self,
        *,
        interval: float = 0.2,
        on_step: Optional[StepCallback] = None,
        on_complete: Optional[CompleteCallback] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        self.interval = interval
        self.on_step = on_step
        self.on_complete = on_complete
        self._loop = loop
        self._generation = 0
        self._handle: Optional[asyncio.TimerHandle] = None
        self._result: Optional[AlgoResult] = None
        self._index = -1
        self._current: Optional[AlgoStep] = None
        self._state = PlayerState.IDLE
        self._summary: Optional[PlaybackSummary] = None
        self._finished: Optional[asyncio.Future] = None

    @property
    def state(self) -> PlayerState:
        return self._state

    @property
    def current_step(self) -> Optional[AlgoStep]:
        return self._current

    @property
    def index(self) -> int:
        return self._index

    @property
    def total_steps(self) -> int:
        return len(self._result.steps) if self._result is not None else 0

    @property
    def summary(self) -> Optional[PlaybackSummary]:
        return self._summary

    @property
    def generation(self) -> int:
        return self._generation

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def _clear_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def play(self, result: AlgoResult) -> None:
        loop = self._get_loop()
        self.cancel()
        self._generation += 1
        self._result = result
        self._finished = loop.create_future()
        self._state = PlayerState.PLAYING
        logger.debug("Playback %d started (%d steps)", self._generation, len(result.steps))
        self._tick(self._generation)

    def _tick(self, generation: int) -> None:
        if generation != self._generation or self._state is not PlayerState.PLAYING:
            return
        self._handle = None
        assert self._result is not None
        steps = self._result.steps
        nxt = self._index + 1
        if nxt >= len(steps) - 1:
            self._finish()
            return
        self._index = nxt
        self._current = steps[nxt]
        if self.on_step is not None:
            self.on_step(nxt, steps[nxt])
        self._handle = self._get_loop().call_later(self.interval, self._tick, generation)

    def _finish(self) -> None:
        assert self._result is not None
        result = self._result
        if result.steps:
            # The last step always shows the complete final path.
            self._index = len(result.steps) - 1
            self._current = replace(result.steps[-1], path=tuple(result.path))
            if self.on_step is not None:
                self.on_step(self._index, self._current)
        self._state = PlayerState.COMPLETED
        self._summary = PlaybackSummary(
            path_string=format_path(result.path),
            total_cost=result.total_cost,
            found=result.found,
        )
        logger.debug("Playback %d completed", self._generation)
        if self._finished is not None and not self._finished.done():
            self._finished.set_result(self._summary)
        if self.on_complete is not None:
            self.on_complete(self._summary)

    def skip_to_end(self) -> None:
        if self._state is not PlayerState.PLAYING:
            return
        self._clear_timer()
        self._finish()

    def cancel(self) -> None:
        """Stop playback and forget the current sequence."""
        self._clear_timer()
        self._generation += 1
        if self._finished is not None and not self._finished.done():
            self._finished.cancel()
        self._finished = None
        self._result = None
        self._index = -1
        self._current = None
        self._summary = None
        self._state = PlayerState.IDLE

    async def wait(self) -> Optional[PlaybackSummary]:
        """Wait for the running playback; ``None`` if it gets cancelled."""
        if self._state is PlayerState.COMPLETED:
            return self._summary
        finished = self._finished
        if finished is None:
            return None
        try:
            return await asyncio.shield(finished)
        except asyncio.CancelledError:
            if finished.cancelled():
                return None
            raise
