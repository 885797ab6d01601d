# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Tranquil API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import asyncio
import json
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.websocket import websocket_manager, WEBSOCKET_CHANNEL
from app.exceptions import (
    TranquilException,
    tranquil_exception_handler,
    validation_exception_handler,
)
from app.routers import health, profile, quiz, exercises, programs, sessions, billing, waitlist
from app.auth import routes as auth_routes
from app.websocket import routes as websocket_routes
from lib.supabase_client import SupabaseClientError

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


# Global flag for Redis listener task
_redis_listener_task = None
_shutdown_event = None


async def redis_pubsub_listener():
    """
    Background task that listens to Redis pub/sub and broadcasts to WebSockets.

    Any API process can publish a user event; each process forwards it to
    the sockets it holds for that user.
    """
    import redis.asyncio as aioredis

    logger.info("Starting Redis pub/sub listener for WebSocket broadcasts")

    redis_client = None
    pubsub = None
    try:
        redis_client = aioredis.from_url(settings.REDIS_URL)
        pubsub = redis_client.pubsub()
        await pubsub.subscribe(WEBSOCKET_CHANNEL)

        async for message in pubsub.listen():
            if _shutdown_event and _shutdown_event.is_set():
                break

            if message["type"] == "message":
                try:
                    data = json.loads(message["data"])
                    user_id = data.pop("user_id", None)

                    if user_id:
                        await websocket_manager.broadcast(user_id, data)
                        logger.debug(f"Broadcast {data.get('type')} to user {user_id}")

                except json.JSONDecodeError as e:
                    logger.warning(f"Invalid JSON in Redis message: {e}")
                except Exception as e:
                    logger.error(f"Error processing Redis message: {e}")

    except asyncio.CancelledError:
        logger.info("Redis pub/sub listener cancelled")
    except Exception as e:
        logger.error(f"Redis pub/sub listener error: {e}")
    finally:
        try:
            if pubsub is not None:
                await pubsub.unsubscribe(WEBSOCKET_CHANNEL)
            if redis_client is not None:
                await redis_client.aclose()
        except Exception as e:
            logger.debug(f"Redis cleanup failed: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    - Startup: log configuration, start the Redis listener
    - Shutdown: stop the Redis listener
    """
    global _redis_listener_task, _shutdown_event

    logger.info(f"Starting Tranquil API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    if not settings.stripe_configured:
        logger.warning("STRIPE_SECRET_KEY not set, billing endpoints will fail")

    _shutdown_event = asyncio.Event()
    _redis_listener_task = asyncio.create_task(redis_pubsub_listener())

    yield

    logger.info("Shutting down Tranquil API")

    if _shutdown_event:
        _shutdown_event.set()
    if _redis_listener_task:
        _redis_listener_task.cancel()
        try:
            await _redis_listener_task
        except asyncio.CancelledError:
            pass


# Create FastAPI application
app = FastAPI(
    title="Tranquil API",
    description="""
## Guided Relaxation API

Tranquil serves progressive muscle relaxation (PMR), breathing and
meditation exercises, multi-day programs, practice tracking and premium
subscriptions.

### How It Works

1. **Onboard** - Answer the quiz, get recommended exercises
2. **Practice** - Play an exercise over the player WebSocket
3. **Track** - Each finished exercise is recorded; streaks and minutes add up
4. **Follow a Program** - Enroll and advance one day per session
5. **Upgrade** - Stripe Checkout unlocks premium programs

### Quick Start

```bash
# 1. Browse the library
curl http://localhost:8000/api/v1/exercises?type=breathing \\
  -H "Authorization: Bearer $TOKEN"

# 2. Record a finished quick exercise
curl -X POST http://localhost:8000/api/v1/sessions \\
  -H "Authorization: Bearer $TOKEN" -H "Content-Type: application/json" \\
  -d '{"exercise_id": "quick-breathing", "duration_seconds": 128}'

# 3. Dashboard
curl http://localhost:8000/api/v1/sessions/stats?tz=Europe/Berlin \\
  -H "Authorization: Bearer $TOKEN"
```
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Auth",
            "description": "Token verification and the cached user context",
        },
        {
            "name": "Profile",
            "description": "Profile and onboarding quiz submission",
        },
        {
            "name": "Quiz",
            "description": "Onboarding quiz questions",
        },
        {
            "name": "Exercises",
            "description": "Exercise library, quick exercises and player timelines",
        },
        {
            "name": "Programs",
            "description": "Multi-day programs and enrollment",
        },
        {
            "name": "Sessions",
            "description": "Recorded practice sessions and dashboard stats",
        },
        {
            "name": "Billing",
            "description": "Stripe checkout, customer portal and webhooks",
        },
        {
            "name": "Waitlist",
            "description": "Pre-launch waitlist signups",
        },
        {
            "name": "WebSocket",
            "description": "Account updates and the exercise player",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(TranquilException)
async def handle_tranquil_exception(request: Request, exc: TranquilException):
    """Handle custom Tranquil exceptions."""
    return await tranquil_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    return await validation_exception_handler(request, exc)


@app.exception_handler(SupabaseClientError)
async def handle_supabase_error(request: Request, exc: SupabaseClientError):
    """Database unreachable or query rejected."""
    logger.error(f"Supabase error on {request.url.path}: {exc}")
    content = {"detail": exc.message, "code": exc.code}
    if exc.suggestion:
        content["suggestion"] = exc.suggestion
    return JSONResponse(status_code=503, content=content)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

# Authentication endpoints
app.include_router(
    auth_routes.router,
    prefix="/api/v1/auth",
    tags=["Auth"]
)

# Health check endpoints
app.include_router(
    health.router,
    prefix="/api/v1",
    tags=["Health"]
)

# Profile endpoints
app.include_router(
    profile.router,
    prefix="/api/v1/profile",
    tags=["Profile"]
)

# Onboarding quiz questions
app.include_router(
    quiz.router,
    prefix="/api/v1/quiz",
    tags=["Quiz"]
)

# Exercise library endpoints
app.include_router(
    exercises.router,
    prefix="/api/v1/exercises",
    tags=["Exercises"]
)

# Program endpoints
app.include_router(
    programs.router,
    prefix="/api/v1/programs",
    tags=["Programs"]
)

# Practice session endpoints
app.include_router(
    sessions.router,
    prefix="/api/v1/sessions",
    tags=["Sessions"]
)

# Stripe endpoints
app.include_router(
    billing.router,
    prefix="/api/v1/stripe",
    tags=["Billing"]
)

# Waitlist endpoints
app.include_router(
    waitlist.router,
    prefix="/api/v1",
    tags=["Waitlist"]
)

# WebSocket endpoints (account updates + player)
app.include_router(
    websocket_routes.router,
    tags=["WebSocket"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "Tranquil API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
