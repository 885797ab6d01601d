# =============================================================================
# core/services/waitlist_service.py - Waitlist Signups (Loops)
# =============================================================================
# Forwards waitlist signups to Loops as contacts.
#
# Two entry points share the Loops call:
# - join_waitlist: the quiz waitlist form (flat contact properties)
# - join_presell_waitlist: the presell quiz (ps_* custom properties,
#   honeypot, optional mailing list)
#
# Both return a WaitlistResult whose body is sent to the browser as-is;
# the client code reads these exact shapes.
# =============================================================================

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any

import httpx

from app.config import settings
from app.exceptions import WaitlistUnavailableError
from lib.utils import clamp_text, is_valid_email

logger = logging.getLogger(__name__)

LOOPS_TIMEOUT_SECONDS = 10

# Keeps custom properties under the common 255-char limit
MAX_PROPERTY_LENGTH = 200
MAX_SOURCE_LENGTH = 60

PRESELL_REWARD = "2_months_free"
GENERIC_ERROR = "Something went wrong. Please try again."

# Loops mailing list IDs are short tokens; names pasted by mistake are rejected
MAILING_LIST_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]{1,64}$")

# Presell question ID -> ps_* property
PRESELL_QUESTIONS = {
    "q1_brings_you_here": "ps_q1",
    "q2_time_daily": "ps_q2",
    "q3_severity": "ps_q3",
    "q4_biggest_challenge": "ps_q4",
    "q5_tried": "ps_q5",
    "q6_did_it_help": "ps_q6",
    "q7_why_not_work": "ps_q7",
    "q8_fair_price": "ps_q8",
    "q9_pay_pref": "ps_q9",
}

# Questions with an "Other" free-text field
PRESELL_OTHER_TEXT = ("q1_brings_you_here", "q4_biggest_challenge", "q5_tried", "q7_why_not_work")

# Quiz waitlist answer fields copied onto the contact
WAITLIST_ANSWER_FIELDS = (
    "whatBringsYou",
    "whatBringsYouOther",
    "timeAvailable",
    "lifeImpact",
    "biggestChallenge",
    "biggestChallengeOther",
    "whatTriedOther",
    "didItHelp",
    "whyDidntWork",
    "whyDidntWorkOther",
    "fairPrice",
    "paymentPreference",
)


@dataclass
class WaitlistResult:
    """HTTP status and JSON body for the browser."""
    status_code: int
    body: dict[str, Any] = field(default_factory=dict)


def is_likely_list_id(value: str) -> bool:
    return bool(MAILING_LIST_ID_PATTERN.match(value))


def build_presell_properties(payload: dict[str, Any]) -> dict[str, str]:
    """
    Flatten presell answers into Loops custom properties.

    Multi-select answers are joined with ", ". Every value is trimmed and
    clamped to MAX_PROPERTY_LENGTH (source: MAX_SOURCE_LENGTH).
    """
    answers = payload.get("answers") or {}
    other_text = payload.get("otherText") or {}

    properties: dict[str, str] = {}
    for question_id, prop in PRESELL_QUESTIONS.items():
        properties[prop] = clamp_text(answers.get(question_id), MAX_PROPERTY_LENGTH)
        if question_id in PRESELL_OTHER_TEXT:
            properties[f"{prop}_other"] = clamp_text(other_text.get(question_id), MAX_PROPERTY_LENGTH)

    properties["ps_q10_feedback"] = clamp_text(payload.get("feedback"), MAX_PROPERTY_LENGTH)
    properties["ps_reward"] = PRESELL_REWARD
    properties["ps_source"] = clamp_text(payload.get("source") or "presell_quiz", MAX_SOURCE_LENGTH)
    return properties


def build_waitlist_contact(email: str, answers: dict[str, Any]) -> dict[str, Any]:
    """Contact properties for the quiz waitlist form."""
    contact: dict[str, Any] = {"email": email, "source": "presell_quiz"}
    for name in WAITLIST_ANSWER_FIELDS:
        contact[name] = answers.get(name)
    contact["whatTried"] = ", ".join(answers.get("whatTried") or [])
    return contact


def _parse_loops_body(text: str) -> tuple[bool | None, str]:
    """
    Read Loops' {success, message} body, if it is JSON.

    Loops may answer 200 with success: false, so the body always decides.
    """
    trimmed = text.strip()
    if not trimmed.startswith(("{", "[")):
        return None, ""
    try:
        parsed = json.loads(trimmed)
    except ValueError:
        return None, ""
    if not isinstance(parsed, dict):
        return None, ""
    return parsed.get("success"), parsed.get("message") or ""


def is_duplicate_response(status_code: int, message: str) -> bool:
    lowered = message.lower()
    return (
        status_code == 409
        or ("already" in lowered and "audience" in lowered)
        or "already on the waitlist" in lowered
    )


class WaitlistService:
    """Service for Loops waitlist signups."""

    @staticmethod
    def _api_key() -> str:
        if not settings.LOOPS_API_KEY:
            logger.error("LOOPS_API_KEY not configured")
            raise WaitlistUnavailableError()
        return settings.LOOPS_API_KEY

    @staticmethod
    def create_contact(api_key: str, payload: dict[str, Any]) -> httpx.Response:
        """POST /contacts/create on the Loops API."""
        return httpx.post(
            f"{settings.LOOPS_API_URL.rstrip('/')}/contacts/create",
            json=payload,
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=LOOPS_TIMEOUT_SECONDS,
        )

    @staticmethod
    def join_waitlist(payload: dict[str, Any]) -> WaitlistResult:
        """
        Quiz waitlist form.

        Body shapes: {success, message}. An existing contact (409) counts
        as success.
        """
        email = payload.get("email")
        if not email or not is_valid_email(email):
            return WaitlistResult(400, {"success": False, "message": "Please enter a valid email address"})

        try:
            api_key = WaitlistService._api_key()
        except WaitlistUnavailableError as e:
            return WaitlistResult(500, {"success": False, "message": e.message})

        contact = build_waitlist_contact(email, payload.get("answers") or {})

        try:
            response = WaitlistService.create_contact(api_key, contact)
        except httpx.HTTPError as e:
            logger.error(f"Waitlist submission error: {e}")
            return WaitlistResult(500, {
                "success": False,
                "message": "An unexpected error occurred. Please try again.",
            })

        if response.is_success:
            logger.info("Waitlist signup forwarded to Loops")
            return WaitlistResult(200, {"success": True, "message": "Successfully joined the waitlist!"})

        logger.error(f"Loops API error: {response.text}")
        if response.status_code == 409:
            return WaitlistResult(200, {"success": True, "message": "You are already on the waitlist!"})
        return WaitlistResult(500, {"success": False, "message": "Failed to join waitlist. Please try again."})

    @staticmethod
    def join_presell_waitlist(payload: dict[str, Any]) -> WaitlistResult:
        """
        Presell quiz signup.

        Body shapes: {ok} / {ok, alreadyOnWaitlist} on success, {error}
        otherwise. Bots filling the hidden `website` field get {ok: true}
        and nothing is sent to Loops.
        """
        try:
            api_key = WaitlistService._api_key()
        except WaitlistUnavailableError:
            return WaitlistResult(500, {"error": "Waitlist is temporarily unavailable. Please try again later."})

        website = payload.get("website")
        if isinstance(website, str) and website.strip():
            logger.info("Presell honeypot triggered, ignoring signup")
            return WaitlistResult(200, {"ok": True})

        email = str(payload.get("email") or "").strip()
        if not email or not is_valid_email(email):
            return WaitlistResult(400, {"error": "Invalid email"})

        loops_payload: dict[str, Any] = {
            "email": email,
            "source": "Presell Quiz",
            "customProperties": build_presell_properties(payload),
        }

        list_id = settings.LOOPS_WAITLIST_MAILING_LIST_ID.strip()
        if list_id and is_likely_list_id(list_id):
            loops_payload["mailingLists"] = {list_id: True}

        try:
            response = WaitlistService.create_contact(api_key, loops_payload)
        except httpx.HTTPError as e:
            logger.error(f"Loops request failed: {e}")
            return WaitlistResult(502, {"error": GENERIC_ERROR})

        text = response.text or ""
        success, message = _parse_loops_body(text)

        if is_duplicate_response(response.status_code, message or text):
            return WaitlistResult(200, {"ok": True, "alreadyOnWaitlist": True})

        if success is False:
            logger.warning(f"Loops rejected presell signup: {message}")
            return WaitlistResult(502, {"error": message or GENERIC_ERROR})

        if not response.is_success:
            logger.error(f"Loops API error {response.status_code}: {text}")
            return WaitlistResult(502, {"error": message or text or GENERIC_ERROR})

        logger.info("Presell signup forwarded to Loops")
        return WaitlistResult(200, {"ok": True})
