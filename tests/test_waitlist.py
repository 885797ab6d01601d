# =============================================================================
# tests/test_waitlist.py - Waitlist Signup Tests
# =============================================================================
# Tests for the two Loops-backed signup flows. httpx.post is patched and
# returns real httpx.Response objects so status/body handling is exercised.
# =============================================================================

from unittest.mock import patch

import httpx
import pytest

from core.services import waitlist_service
from core.services.waitlist_service import (
    WaitlistService,
    build_presell_properties,
    build_waitlist_contact,
    is_duplicate_response,
    is_likely_list_id,
)


def _loops(status_code=200, **kwargs):
    return httpx.Response(status_code, **kwargs)


# =============================================================================
# Property Builders
# =============================================================================

class TestPresellProperties:
    """Tests for build_presell_properties."""

    def test_answers_and_other_text(self):
        properties = build_presell_properties({
            "answers": {
                "q1_brings_you_here": "jaw_tension",
                "q5_tried": ["yoga", "massage"],
            },
            "otherText": {"q1_brings_you_here": "  grinding at night  "},
            "feedback": "Looks great",
        })

        assert properties["ps_q1"] == "jaw_tension"
        assert properties["ps_q1_other"] == "grinding at night"
        assert properties["ps_q5"] == "yoga, massage"
        assert properties["ps_q2"] == ""
        assert properties["ps_q10_feedback"] == "Looks great"
        assert properties["ps_reward"] == "2_months_free"
        assert properties["ps_source"] == "presell_quiz"

    def test_only_some_questions_have_other_text(self):
        properties = build_presell_properties({})
        assert "ps_q4_other" in properties
        assert "ps_q2_other" not in properties

    def test_values_are_clamped(self):
        properties = build_presell_properties({
            "feedback": "x" * 500,
            "source": "s" * 100,
        })
        assert len(properties["ps_q10_feedback"]) == 200
        assert len(properties["ps_source"]) == 60

    def test_waitlist_contact(self):
        contact = build_waitlist_contact("sam@example.com", {
            "whatBringsYou": "stress",
            "whatTried": ["apps", "therapy"],
        })
        assert contact["email"] == "sam@example.com"
        assert contact["source"] == "presell_quiz"
        assert contact["whatBringsYou"] == "stress"
        assert contact["whatTried"] == "apps, therapy"
        assert contact["fairPrice"] is None


class TestResponseHelpers:
    """Tests for list ID and duplicate detection."""

    def test_list_ids(self):
        assert is_likely_list_id("cm1abc_XYZ-9") is True
        assert is_likely_list_id("Presell Waitlist") is False

    @pytest.mark.parametrize("status,message,expected", [
        (409, "", True),
        (400, "Email is already in audience", True),
        (200, "You are already on the waitlist", True),
        (400, "Invalid email", False),
    ])
    def test_duplicates(self, status, message, expected):
        assert is_duplicate_response(status, message) is expected


# =============================================================================
# Quiz Waitlist
# =============================================================================

class TestJoinWaitlist:
    """Tests for WaitlistService.join_waitlist."""

    def test_success(self):
        with patch("httpx.post", return_value=_loops(200, json={"success": True, "id": "c1"})) as post:
            result = WaitlistService.join_waitlist({"email": "sam@example.com", "answers": {}})

        assert result.status_code == 200
        assert result.body == {"success": True, "message": "Successfully joined the waitlist!"}
        assert post.call_args.args[0] == "https://app.loops.so/api/v1/contacts/create"
        assert post.call_args.kwargs["headers"] == {"Authorization": "Bearer loops-test-key"}
        assert post.call_args.kwargs["timeout"] == 10

    def test_invalid_email(self):
        with patch("httpx.post") as post:
            result = WaitlistService.join_waitlist({"email": "not-an-email"})

        assert result.status_code == 400
        assert result.body["message"] == "Please enter a valid email address"
        post.assert_not_called()

    def test_existing_contact_is_success(self):
        with patch("httpx.post", return_value=_loops(409, json={"success": False, "message": "exists"})):
            result = WaitlistService.join_waitlist({"email": "sam@example.com"})

        assert result.status_code == 200
        assert result.body == {"success": True, "message": "You are already on the waitlist!"}

    def test_loops_error(self):
        with patch("httpx.post", return_value=_loops(500, text="boom")):
            result = WaitlistService.join_waitlist({"email": "sam@example.com"})

        assert result.status_code == 500
        assert result.body["message"] == "Failed to join waitlist. Please try again."

    def test_network_error(self):
        with patch("httpx.post", side_effect=httpx.ConnectError("unreachable")):
            result = WaitlistService.join_waitlist({"email": "sam@example.com"})

        assert result.status_code == 500
        assert result.body["message"] == "An unexpected error occurred. Please try again."

    def test_missing_api_key(self):
        with patch.object(waitlist_service.settings, "LOOPS_API_KEY", ""):
            result = WaitlistService.join_waitlist({"email": "sam@example.com"})

        assert result.status_code == 500
        assert result.body == {"success": False, "message": "Service temporarily unavailable"}


# =============================================================================
# Presell Waitlist
# =============================================================================

class TestJoinPresellWaitlist:
    """Tests for WaitlistService.join_presell_waitlist."""

    def test_success(self):
        with patch("httpx.post", return_value=_loops(200, json={"success": True})) as post:
            result = WaitlistService.join_presell_waitlist({"email": " sam@example.com "})

        assert result.status_code == 200
        assert result.body == {"ok": True}
        payload = post.call_args.kwargs["json"]
        assert payload["email"] == "sam@example.com"
        assert payload["source"] == "Presell Quiz"
        assert payload["customProperties"]["ps_reward"] == "2_months_free"
        assert "mailingLists" not in payload

    def test_mailing_list(self):
        with patch.object(waitlist_service.settings, "LOOPS_WAITLIST_MAILING_LIST_ID", "list_123"), \
                patch("httpx.post", return_value=_loops(200, json={"success": True})) as post:
            WaitlistService.join_presell_waitlist({"email": "sam@example.com"})

        assert post.call_args.kwargs["json"]["mailingLists"] == {"list_123": True}

    def test_list_name_is_not_sent(self):
        with patch.object(waitlist_service.settings, "LOOPS_WAITLIST_MAILING_LIST_ID", "Presell List"), \
                patch("httpx.post", return_value=_loops(200, json={"success": True})) as post:
            WaitlistService.join_presell_waitlist({"email": "sam@example.com"})

        assert "mailingLists" not in post.call_args.kwargs["json"]

    def test_honeypot(self):
        with patch("httpx.post") as post:
            result = WaitlistService.join_presell_waitlist({"email": "bot@example.com", "website": "spam.example"})

        assert result.body == {"ok": True}
        post.assert_not_called()

    def test_invalid_email(self):
        result = WaitlistService.join_presell_waitlist({"email": "nope"})
        assert result.status_code == 400
        assert result.body == {"error": "Invalid email"}

    def test_already_on_waitlist(self):
        body = {"success": False, "message": "Email is already in audience"}
        with patch("httpx.post", return_value=_loops(400, json=body)):
            result = WaitlistService.join_presell_waitlist({"email": "sam@example.com"})

        assert result.status_code == 200
        assert result.body == {"ok": True, "alreadyOnWaitlist": True}

    def test_success_false_on_200(self):
        """Loops can answer 200 with success: false."""
        body = {"success": False, "message": "Invalid mailing list"}
        with patch("httpx.post", return_value=_loops(200, json=body)):
            result = WaitlistService.join_presell_waitlist({"email": "sam@example.com"})

        assert result.status_code == 502
        assert result.body == {"error": "Invalid mailing list"}

    def test_non_json_error(self):
        with patch("httpx.post", return_value=_loops(503, text="Service Unavailable")):
            result = WaitlistService.join_presell_waitlist({"email": "sam@example.com"})

        assert result.status_code == 502
        assert result.body == {"error": "Service Unavailable"}

    def test_missing_api_key(self):
        with patch.object(waitlist_service.settings, "LOOPS_API_KEY", ""):
            result = WaitlistService.join_presell_waitlist({"email": "sam@example.com"})

        assert result.status_code == 500
        assert result.body == {"error": "Waitlist is temporarily unavailable. Please try again later."}
