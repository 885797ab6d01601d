# =============================================================================
# app/websocket/broadcast.py - Cross-Process Broadcasting
# =============================================================================
# Publishes per-user events that get broadcast to that user's WebSocket
# clients, whichever API process holds the connection.
#
# Uses Redis pub/sub for cross-process communication:
# - Route handlers call publish_event() to send events
# - Every API process subscribes and forwards to its local sockets
#
# Events:
#   - subscription_updated: A Stripe webhook changed the user's plan
#   - session_recorded: The user finished an exercise
#   - profile_updated: Name or quiz results changed
# =============================================================================

import json
import logging
from typing import Any

import redis

from app.config import settings

logger = logging.getLogger(__name__)

# Redis channel for WebSocket events
WEBSOCKET_CHANNEL = "tranquil:websocket:events"


def get_redis_client() -> redis.Redis:
    """Get a Redis client for pub/sub operations."""
    return redis.from_url(settings.REDIS_URL)


def publish_event(user_id: str, event_type: str, data: dict[str, Any]) -> bool:
    """
    Publish an event for all of a user's WebSocket clients.

    Realtime updates are best-effort: a Redis outage is logged and the
    request that triggered the event still succeeds.

    Args:
        user_id: The user to notify
        event_type: Event type (subscription_updated, session_recorded, ...)
        data: Event data to include (must be JSON serializable)

    Returns:
        bool: True if published successfully
    """
    try:
        client = get_redis_client()

        message = json.dumps({
            "user_id": str(user_id),
            "type": event_type,
            **data
        }, default=str)

        client.publish(WEBSOCKET_CHANNEL, message)

        logger.debug(f"Published {event_type} event for user {user_id}")
        return True

    except Exception as e:
        logger.error(f"Failed to publish event: {e}")
        return False


def publish_subscription_updated(user_id: str) -> bool:
    """
    Publish a subscription_updated event.

    Clients refetch their context (GET /auth/me) to pick up the new plan.
    """
    return publish_event(user_id, "subscription_updated", {})


def publish_session_recorded(
    user_id: str,
    session_id: str,
    duration_seconds: int,
    current_day: int | None = None,
) -> bool:
    """Publish a session_recorded event so open dashboards can refresh."""
    return publish_event(
        user_id=user_id,
        event_type="session_recorded",
        data={
            "session_id": session_id,
            "duration_seconds": duration_seconds,
            "current_day": current_day,
        }
    )


def publish_profile_updated(user_id: str) -> bool:
    return publish_event(user_id, "profile_updated", {})
