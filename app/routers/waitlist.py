# =============================================================================
# app/routers/waitlist.py - Waitlist Endpoints
# =============================================================================
# Public signup endpoints used before launch. Both forward to Loops and
# answer with the JSON shapes the marketing pages expect, including for
# malformed bodies.
# =============================================================================

import asyncio
import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from core.services.waitlist_service import WaitlistResult, WaitlistService

logger = logging.getLogger(__name__)

router = APIRouter()


def _respond(result: WaitlistResult) -> JSONResponse:
    return JSONResponse(status_code=result.status_code, content=result.body)


@router.post("/waitlist")
async def join_waitlist(request: Request):
    """
    Quiz waitlist signup.

    Example request:
        {"email": "sam@example.com", "answers": {"whatBringsYou": "stress",
         "whatTried": ["apps", "yoga"], ...}}

    Responses:
        200 {"success": true, "message": "..."}
        400 / 500 {"success": false, "message": "..."}
    """
    try:
        payload = await request.json()
        if not isinstance(payload, dict):
            raise ValueError("body must be a JSON object")
        return _respond(await asyncio.to_thread(WaitlistService.join_waitlist, payload))
    except Exception as e:
        logger.error(f"Waitlist submission error: {e}")
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "An unexpected error occurred. Please try again."},
        )


@router.post("/loops/waitlist")
async def join_presell_waitlist(request: Request):
    """
    Presell quiz signup.

    Example request:
        {"email": "sam@example.com", "answers": {"q1_brings_you_here": "sleep"},
         "otherText": {}, "feedback": "", "source": "presell_quiz", "website": ""}

    Responses:
        200 {"ok": true} or {"ok": true, "alreadyOnWaitlist": true}
        400 / 500 / 502 {"error": "..."}
    """
    try:
        payload = await request.json()
    except ValueError:
        return JSONResponse(status_code=400, content={"error": "Invalid JSON"})
    if not isinstance(payload, dict):
        return JSONResponse(status_code=400, content={"error": "Invalid JSON"})

    return _respond(await asyncio.to_thread(WaitlistService.join_presell_waitlist, payload))
