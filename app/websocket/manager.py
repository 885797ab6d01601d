# =============================================================================
# app/websocket/manager.py - WebSocket Connection Manager
# =============================================================================
# Manages WebSocket connections per user and handles broadcasting.
#
# Usage:
#   from app.websocket import websocket_manager
#
#   # Connect a client
#   await websocket_manager.connect(user_id, websocket)
#
#   # Broadcast to every tab the user has open
#   await websocket_manager.broadcast(user_id, {"type": "subscription_updated"})
#
#   # Disconnect a client
#   websocket_manager.disconnect(user_id, websocket)
# =============================================================================

import logging
from typing import Dict, Set
from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """
    Manages WebSocket connections organized by user ID.

    A user can have several connected clients (tabs, phone + laptop).
    Events for a user are sent to all of them.
    """

    def __init__(self):
        # user_id -> set of WebSocket connections
        self.connections: Dict[str, Set[WebSocket]] = {}
        self._total_connections = 0

    async def connect(self, user_id: str, websocket: WebSocket) -> None:
        """
        Accept a new WebSocket connection and track it.

        Args:
            user_id: Owner of the connection
            websocket: The WebSocket connection
        """
        await websocket.accept()

        self.connections.setdefault(user_id, set()).add(websocket)
        self._total_connections += 1

        logger.info(
            f"WebSocket connected for user {user_id}. "
            f"Total connections: {self._total_connections}"
        )

    def disconnect(self, user_id: str, websocket: WebSocket) -> None:
        """Remove a WebSocket connection from tracking."""
        sockets = self.connections.get(user_id)
        if sockets and websocket in sockets:
            sockets.discard(websocket)
            self._total_connections -= 1

            if not sockets:
                del self.connections[user_id]

        logger.info(
            f"WebSocket disconnected for user {user_id}. "
            f"Total connections: {self._total_connections}"
        )

    async def broadcast(self, user_id: str, message: dict) -> int:
        """
        Send a message to all of a user's connections.

        Args:
            user_id: The user to notify
            message: The message dict to send (will be JSON encoded)

        Returns:
            int: Number of clients the message was sent to
        """
        if user_id not in self.connections:
            logger.debug(f"No connections for user {user_id}, skipping broadcast")
            return 0

        dead_connections: Set[WebSocket] = set()
        sent_count = 0

        for websocket in list(self.connections[user_id]):
            try:
                await websocket.send_json(message)
                sent_count += 1
            except Exception as e:
                logger.warning(f"Failed to send to WebSocket: {e}")
                dead_connections.add(websocket)

        for ws in dead_connections:
            self.disconnect(user_id, ws)

        if dead_connections:
            logger.info(f"Cleaned up {len(dead_connections)} dead connections")

        logger.debug(
            f"Broadcast to user {user_id}: "
            f"type={message.get('type')}, sent to {sent_count} clients"
        )

        return sent_count

    def get_connection_count(self, user_id: str | None = None) -> int:
        """
        Get the number of active connections.

        Args:
            user_id: If provided, count for that user. Otherwise total.
        """
        if user_id:
            return len(self.connections.get(user_id, set()))
        return self._total_connections

    def get_connected_users(self) -> list[str]:
        """User IDs with at least one connection."""
        return list(self.connections.keys())


# Global singleton instance
websocket_manager = ConnectionManager()
