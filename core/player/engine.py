# =============================================================================
# core/player/engine.py - Exercise Player State Machine
# =============================================================================
# Steps through a Timeline one second at a time.
#
# States:
#   idle -> playing <-> paused -> complete
#              \________________-> stopped
#
# Each tick() adds one second of elapsed time. When a phase's remaining
# time runs out, the next phase starts and is announced; after the last
# phase the player completes and reports the elapsed seconds.
#
# The engine has no clock of its own. PlayerRunner (runner.py) calls tick()
# on an interval; tests call it directly.
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from core.player.narration import Narrator
from core.player.timeline import Phase, Timeline
from lib.utils import format_clock

logger = logging.getLogger(__name__)


class PlayerState(str, Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    COMPLETE = "complete"
    STOPPED = "stopped"


@dataclass
class PlayerEvent:
    """
    Something the client should render.

    type is one of: playing, paused, phase, tick, complete, stopped
    """
    type: str
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, **self.data}


PlayerListener = Callable[[PlayerEvent], None]


class ExercisePlayer:
    """
    Timer-driven player for one exercise.

    Example:
        player = ExercisePlayer(build_timeline(exercise), on_complete=save)
        player.play()
        for _ in range(player.timeline.total_seconds):
            player.tick()
        assert player.state == PlayerState.COMPLETE
    """

    def __init__(
        self,
        timeline: Timeline,
        narrator: Narrator | None = None,
        on_complete: Callable[[int], None] | None = None,
    ):
        self.timeline = timeline
        self.narrator = narrator
        self.on_complete = on_complete

        self.state = PlayerState.IDLE
        self.phase_index = 0
        self.remaining = 0
        self.elapsed = 0
        self._listeners: list[PlayerListener] = []

    # -------------------------------------------------------------------------
    # Observers
    # -------------------------------------------------------------------------

    def subscribe(self, listener: PlayerListener) -> None:
        self._listeners.append(listener)

    def _emit(self, event_type: str, **data: Any) -> None:
        event = PlayerEvent(type=event_type, data=data)
        for listener in self._listeners:
            try:
                listener(event)
            except Exception as e:
                logger.warning(f"Player listener failed on {event_type}: {e}")

    # -------------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------------

    @property
    def current_phase(self) -> Phase:
        return self.timeline.phases[self.phase_index]

    @property
    def progress(self) -> float:
        """Percent of the total duration played, 0-100."""
        total = self.timeline.total_seconds
        if total <= 0:
            return 0.0
        return min(100.0, self.elapsed / total * 100)

    @property
    def is_finished(self) -> bool:
        return self.state in (PlayerState.COMPLETE, PlayerState.STOPPED)

    def snapshot(self) -> dict[str, Any]:
        """Everything the client needs to draw the player."""
        phase = self.current_phase
        return {
            "state": self.state.value,
            "exercise_id": self.timeline.exercise_id,
            "phase": phase.to_dict(),
            "phase_index": self.phase_index,
            "phase_count": len(self.timeline.phases),
            "cycle": phase.cycle + 1,
            "total_cycles": self.timeline.cycles,
            "remaining": self.remaining,
            "remaining_display": format_clock(self.remaining),
            "elapsed": self.elapsed,
            "elapsed_display": format_clock(self.elapsed),
            "total_seconds": self.timeline.total_seconds,
            "progress": round(self.progress, 1),
        }

    # -------------------------------------------------------------------------
    # Controls
    # -------------------------------------------------------------------------

    def play(self) -> bool:
        """
        Start, or resume after a pause.

        The first play announces the first phase. Resuming mid-phase
        resumes the paused narration instead of restarting it.

        Returns:
            True if the state changed
        """
        if self.state in (PlayerState.PLAYING, PlayerState.COMPLETE, PlayerState.STOPPED):
            return False

        self.state = PlayerState.PLAYING
        if self.remaining == 0:
            self._enter_phase(self.phase_index)
        elif self.narrator:
            self.narrator.resume()

        self._emit("playing", **self.snapshot())
        return True

    def pause(self) -> bool:
        """Pause the countdown and the narration."""
        if self.state != PlayerState.PLAYING:
            return False

        self.state = PlayerState.PAUSED
        if self.narrator:
            self.narrator.pause()

        self._emit("paused", **self.snapshot())
        return True

    def toggle(self) -> bool:
        """Play/pause button."""
        if self.state == PlayerState.PLAYING:
            return self.pause()
        return self.play()

    def stop(self) -> bool:
        """Abandon the exercise. A stopped player cannot be restarted."""
        if self.is_finished:
            return False

        self.state = PlayerState.STOPPED
        if self.narrator:
            self.narrator.stop()

        logger.debug(f"Player stopped for {self.timeline.exercise_id} after {self.elapsed}s")
        self._emit("stopped", elapsed=self.elapsed)
        return True

    def tick(self) -> bool:
        """
        Advance the clock by one second.

        Returns:
            True if the tick was applied (player was playing)
        """
        if self.state != PlayerState.PLAYING:
            return False

        self.elapsed += 1
        if self.remaining <= 1:
            if self.phase_index < len(self.timeline.phases) - 1:
                self._enter_phase(self.phase_index + 1)
            else:
                self.remaining = 0
                self._complete()
                return True
        else:
            self.remaining -= 1

        self._emit("tick", remaining=self.remaining, elapsed=self.elapsed, progress=round(self.progress, 1))
        return True

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _enter_phase(self, index: int) -> None:
        self.phase_index = index
        phase = self.current_phase
        self.remaining = phase.duration

        if self.narrator and phase.narration:
            self.narrator.speak(phase.narration)

        self._emit("phase", **self.snapshot())

    def _complete(self) -> None:
        self.state = PlayerState.COMPLETE
        logger.info(f"Exercise {self.timeline.exercise_id} complete after {self.elapsed}s")
        self._emit("complete", elapsed=self.elapsed, progress=100.0)

        if self.on_complete:
            self.on_complete(self.elapsed)
