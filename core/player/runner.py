# =============================================================================
# core/player/runner.py - Player Clock
# =============================================================================
# Drives ExercisePlayer.tick() from an asyncio task. The task ends by itself
# when the player leaves the playing state and is cancelled on stop() or
# when the owning WebSocket goes away, so no timer outlives its player.
# =============================================================================

import asyncio
import logging

from core.player.engine import ExercisePlayer, PlayerState

logger = logging.getLogger(__name__)


class PlayerRunner:
    """Ticks a player once per interval while it is playing."""

    def __init__(self, player: ExercisePlayer, interval: float = 1.0):
        self.player = player
        self.interval = interval
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start ticking. No-op if the clock is already running."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run())

    async def _run(self) -> None:
        while self.player.state == PlayerState.PLAYING:
            await asyncio.sleep(self.interval)
            self.player.tick()

    async def stop(self) -> None:
        """Cancel the clock and wait for it to finish."""
        if self._task is None:
            return
        task, self._task = self._task, None
        if not task.done():
            task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def wait(self) -> None:
        """Wait until the clock stops on its own (pause, complete or stop)."""
        if self._task is not None:
            await self._task
