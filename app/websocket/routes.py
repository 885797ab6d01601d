# =============================================================================
# app/websocket/routes.py - WebSocket Routes
# =============================================================================
# Two sockets, both authenticated with the Supabase JWT in `token`:
#
# ws://host/ws/users/me?token={jwt}
#   Per-user notifications:
#   - {"type": "subscription_updated"}
#   - {"type": "session_recorded", "session_id": "...", ...}
#   - {"type": "profile_updated"}
#
# ws://host/ws/player/{exercise_id}?token={jwt}
#   Runs the exercise player server-side. The client sends commands
#   ({"action": "play" | "pause" | "toggle" | "stop" | "save" | "voices"})
#   and receives player events (ready, playing, paused, phase, tick,
#   complete, stopped, saved) plus {"type": "speech", ...} commands for
#   its text-to-speech.
# =============================================================================

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, HTTPException, WebSocket, WebSocketDisconnect, Query
from pydantic import ValidationError

from app.auth.dependencies import decode_token
from app.config import settings
from app.exceptions import TranquilException
from app.websocket.broadcast import publish_session_recorded
from app.websocket.manager import websocket_manager
from core.models.session import PracticeSessionCreate
from core.player import (
    ExercisePlayer,
    Narrator,
    PlayerEvent,
    PlayerRunner,
    PlayerState,
    Timeline,
    Voice,
    build_timeline,
)
from core.services.exercise_service import ExerciseService
from core.services.session_service import SessionService

logger = logging.getLogger(__name__)

router = APIRouter()

# Close codes (4000-4999 are free for applications)
CLOSE_SERVER_ERROR = 4000
CLOSE_UNAUTHORIZED = 4001
CLOSE_NOT_FOUND = 4004
CLOSE_UNPLAYABLE = 4022


async def _authenticate(websocket: WebSocket, token: str) -> str | None:
    """Verify the token, closing the socket on failure. Returns the user ID."""
    try:
        return str(decode_token(token).id)
    except HTTPException as e:
        logger.warning(f"WebSocket auth failed: {e.detail}")
        await websocket.close(code=CLOSE_UNAUTHORIZED, reason="Invalid token")
        return None


# =============================================================================
# User notifications
# =============================================================================

@router.websocket("/ws/users/me")
async def user_websocket(
    websocket: WebSocket,
    token: str = Query(..., description="JWT token for authentication")
):
    """
    WebSocket endpoint for real-time updates about the signed-in user.

    Events are published from any API process through Redis and
    forwarded here by the listener in app.main.
    """
    user_id = await _authenticate(websocket, token)
    if user_id is None:
        return

    await websocket_manager.connect(user_id, websocket)

    try:
        await websocket.send_json({
            "type": "connected",
            "user_id": user_id,
            "message": "Connected to account updates"
        })

        while True:
            data = await websocket.receive_text()

            # Keepalive
            if data == "ping":
                await websocket.send_text("pong")
            else:
                logger.debug(f"WebSocket received: {data[:100]}")

    except WebSocketDisconnect:
        logger.info(f"WebSocket client disconnected for user {user_id}")
    finally:
        websocket_manager.disconnect(user_id, websocket)


# =============================================================================
# Exercise player
# =============================================================================

class PlayerSession:
    """
    One connected player: engine, clock and an outgoing message queue.

    Engine callbacks are synchronous, so events are queued and a sender
    task writes them to the socket in order.
    """

    def __init__(self, websocket: WebSocket, user_id: str, timeline: Timeline):
        self.websocket = websocket
        self.user_id = user_id
        self.queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue()
        self.narrator = Narrator(send=self.send_speech)
        self.player = ExercisePlayer(timeline, narrator=self.narrator)
        self.runner = PlayerRunner(self.player, interval=settings.PLAYER_TICK_SECONDS)
        self.saved = False

        self.player.subscribe(self._on_event)

    def _on_event(self, event: PlayerEvent) -> None:
        self.queue.put_nowait(event.to_dict())

    def send_speech(self, command: dict[str, Any]) -> None:
        self.queue.put_nowait({"type": "speech", **command})

    async def sender(self) -> None:
        while True:
            message = await self.queue.get()
            await self.websocket.send_json(message)

    async def save(self, message: dict[str, Any]) -> None:
        """Record the finished (or stopped) exercise as a practice session."""
        if self.saved:
            self.queue.put_nowait({"type": "error", "detail": "Session already saved"})
            return
        if self.player.state not in (PlayerState.COMPLETE, PlayerState.STOPPED) or not self.player.elapsed:
            self.queue.put_nowait({"type": "error", "detail": "Nothing to save yet"})
            return

        try:
            data = PracticeSessionCreate(
                exercise_id=self.player.timeline.exercise_id,
                user_program_id=message.get("user_program_id"),
                duration_seconds=self.player.elapsed,
                feedback_rating=message.get("feedback_rating"),
                notes=message.get("notes"),
            )
        except ValidationError as e:
            self.queue.put_nowait({"type": "error", "detail": "Invalid session data", "errors": str(e)})
            return

        try:
            session, enrollment = await asyncio.to_thread(
                SessionService.record_session, self.user_id, data
            )
        except TranquilException as e:
            self.queue.put_nowait({"type": "error", **e.to_dict()})
            return
        except Exception as e:
            logger.error(f"Failed to save session for user {self.user_id}: {e}")
            self.queue.put_nowait({"type": "error", "detail": "Failed to save session", "code": "SAVE_FAILED"})
            return

        self.saved = True
        self.queue.put_nowait({
            "type": "saved",
            "session": session.model_dump(mode="json"),
            "enrollment": enrollment.model_dump(mode="json") if enrollment else None,
        })
        await asyncio.to_thread(
            publish_session_recorded,
            self.user_id,
            session.id,
            session.duration_seconds,
            enrollment.current_day if enrollment else None,
        )

    async def handle(self, message: dict[str, Any]) -> None:
        action = message.get("action")

        if action == "play":
            if self.player.play():
                self.runner.start()
        elif action == "pause":
            self.player.pause()
        elif action == "toggle":
            self.player.toggle()
            if self.player.state == PlayerState.PLAYING:
                self.runner.start()
        elif action == "stop":
            self.player.stop()
            await self.runner.stop()
        elif action == "voices":
            voices = [
                Voice(name=str(v.get("name", "")), lang=str(v.get("lang", "")))
                for v in message.get("voices") or []
                if isinstance(v, dict)
            ]
            voice = self.narrator.set_voices(voices)
            self.queue.put_nowait({"type": "voice", "voice": voice.name if voice else None})
        elif action == "save":
            await self.save(message)
        elif action == "ping":
            self.queue.put_nowait({"type": "pong"})
        else:
            self.queue.put_nowait({"type": "error", "detail": f"Unknown action: {action}"})


@router.websocket("/ws/player/{exercise_id}")
async def player_websocket(
    websocket: WebSocket,
    exercise_id: str,
    token: str = Query(..., description="JWT token for authentication")
):
    """
    WebSocket endpoint that plays an exercise.

    The first message is {"type": "ready", "timeline": {...}, ...state}.
    Nothing plays until the client sends {"action": "play"}.

    Example command:
        {"action": "save", "feedback_rating": 5, "user_program_id": "..."}
    """
    user_id = await _authenticate(websocket, token)
    if user_id is None:
        return

    try:
        exercise = await ExerciseService.get_exercise(exercise_id)
        timeline = build_timeline(exercise)
    except TranquilException as e:
        logger.warning(f"Player for {exercise_id} refused: {e.message}")
        code = CLOSE_NOT_FOUND if e.status_code == 404 else CLOSE_UNPLAYABLE
        await websocket.close(code=code, reason=e.message[:120])
        return
    except Exception as e:
        logger.error(f"Player: error loading exercise {exercise_id}: {e}")
        await websocket.close(code=CLOSE_SERVER_ERROR, reason="Server error")
        return

    await websocket.accept()

    session = PlayerSession(websocket, user_id, timeline)
    player = session.player

    sender = asyncio.create_task(session.sender())
    session.queue.put_nowait({"type": "ready", "timeline": timeline.to_dict(), **player.snapshot()})

    logger.info(f"Player opened for exercise {exercise_id} by user {user_id}")

    try:
        while True:
            message = await websocket.receive_json()
            if isinstance(message, dict):
                await session.handle(message)
            else:
                session.queue.put_nowait({"type": "error", "detail": "Expected a JSON object"})

    except WebSocketDisconnect:
        logger.info(f"Player closed for exercise {exercise_id} after {player.elapsed}s")
    except ValueError as e:
        logger.warning(f"Player received invalid JSON: {e}")
    finally:
        await session.runner.stop()
        sender.cancel()
        try:
            await sender
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.debug(f"Player sender ended with error: {e}")


@router.get("/ws/status")
async def websocket_status():
    """
    Get WebSocket connection statistics.

    Returns:
        dict: Connection counts and connected users
    """
    users = websocket_manager.get_connected_users()
    return {
        "total_connections": websocket_manager.get_connection_count(),
        "connected_users": len(users),
    }
