# =============================================================================
# core/player/ - Exercise Player
# =============================================================================
# Server-side player shared by PMR, breathing and meditation exercises:
# - timeline.py: Flattens an exercise into timed phases
# - engine.py: Play / pause / tick / complete state machine
# - narration.py: Speech commands for the client's text-to-speech
# - runner.py: asyncio clock that ticks the engine once per second
#
# Usage:
#   from core.player import ExercisePlayer, PlayerRunner, build_timeline
#
#   player = ExercisePlayer(build_timeline(exercise), on_complete=save)
#   runner = PlayerRunner(player)
#   player.play()
#   runner.start()
# =============================================================================

from core.player.timeline import Phase, Timeline, build_timeline, breathing_cycle
from core.player.narration import Narrator, SpeechSettings, Voice, choose_voice
from core.player.engine import ExercisePlayer, PlayerEvent, PlayerState
from core.player.runner import PlayerRunner

__all__ = [
    "Phase",
    "Timeline",
    "build_timeline",
    "breathing_cycle",
    "Narrator",
    "SpeechSettings",
    "Voice",
    "choose_voice",
    "ExercisePlayer",
    "PlayerEvent",
    "PlayerState",
    "PlayerRunner",
]
