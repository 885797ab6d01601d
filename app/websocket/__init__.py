# =============================================================================
# app/websocket/__init__.py - WebSocket Module
# =============================================================================
# Provides real-time account updates and the server-side exercise player.
#
# Usage:
#   # Send an event to every socket a user has open in this process
#   from app.websocket import websocket_manager
#
#   await websocket_manager.broadcast(user_id, {"type": "profile_updated"})
#
#   # Publish from any process (goes through Redis)
#   from app.websocket.broadcast import publish_subscription_updated
#
#   publish_subscription_updated(user_id)
# =============================================================================

from app.websocket.manager import websocket_manager
from app.websocket.broadcast import (
    publish_event,
    publish_profile_updated,
    publish_session_recorded,
    publish_subscription_updated,
    WEBSOCKET_CHANNEL,
)

__all__ = [
    "websocket_manager",
    "publish_event",
    "publish_profile_updated",
    "publish_session_recorded",
    "publish_subscription_updated",
    "WEBSOCKET_CHANNEL",
]
