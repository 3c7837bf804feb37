"""Liveness monitor — periodic probe ticks while the channel is open."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from chatlink.events import ProbeTick

log = logging.getLogger(__name__)


class LivenessMonitor:
    """Posts a ProbeTick every ``interval`` seconds while active.

    Ticks carry the generation of the timer that produced them. Each start and
    stop bumps the generation, so ticks queued before a stop are recognisably
    stale and never turn into probes.
    """

    def __init__(self, interval: float, on_tick: Callable[[ProbeTick], None]) -> None:
        self._interval = interval
        self._on_tick = on_tick
        self._task: asyncio.Task | None = None
        self._generation = 0

    @property
    def active(self) -> bool:
        return self._task is not None

    @property
    def generation(self) -> int:
        return self._generation

    def is_current(self, tick: ProbeTick) -> bool:
        return self._task is not None and tick.generation == self._generation

    def start(self) -> None:
        if self._task is not None:
            self.stop()
        self._generation += 1
        self._task = asyncio.get_running_loop().create_task(self._run(self._generation))
        log.debug("Liveness monitor started (generation %d, every %.1fs)", self._generation, self._interval)

    def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        self._task = None
        self._generation += 1
        log.debug("Liveness monitor stopped")

    async def _run(self, generation: int) -> None:
        while True:
            await asyncio.sleep(self._interval)
            self._on_tick(ProbeTick(generation))
