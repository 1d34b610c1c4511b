"""
Unit tests for the calling-layer contract.

Covers:
- Status codes and bodies for login, submit_code, logout and health
- Code normalization and session id generation
"""

import re
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from gamecode_agent.errors import SurfaceInitError
from gamecode_agent.models import (
    FeedbackMessage,
    MessageKind,
    SessionInvalid,
    SessionRecord,
    SubmissionOutcome,
)
from gamecode_agent.service import GameCodeService, generate_session_id, normalize_code


@pytest.fixture
def controller():
    mock = MagicMock()
    mock.login = AsyncMock(return_value=True)
    mock.submit_code = AsyncMock()
    return mock


@pytest.fixture
def service(store, site, controller):
    return GameCodeService(store, site=site, controller_factory=lambda: controller)


class TestLogin:
    """login(username, password, session_id, debug_mode)."""

    @pytest.mark.asyncio
    async def test_success(self, service, controller):
        response = await service.login("alice", "secret", "s1", True)

        assert response.status_code == 200
        assert response.body == {"success": True, "message": "Login successful"}
        controller.login.assert_awaited_once_with("alice", "secret", "s1", True)

    @pytest.mark.asyncio
    async def test_rejected_credentials_are_401(self, service, controller):
        controller.login.return_value = False

        response = await service.login("alice", "wrong", "s1")

        assert response.status_code == 401
        assert response.body["success"] is False

    @pytest.mark.asyncio
    async def test_init_failure_is_500(self, service, controller):
        controller.login.side_effect = SurfaceInitError("no browser")

        response = await service.login("alice", "secret", "s1")

        assert response.status_code == 500
        assert response.body == {"success": False, "message": "Server error"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("username, password, session_id", [
        ("", "secret", "s1"),
        ("alice", "", "s1"),
        ("alice", "secret", ""),
    ])
    async def test_missing_fields_are_400(self, service, controller, username, password, session_id):
        response = await service.login(username, password, session_id)

        assert response.status_code == 400
        controller.login.assert_not_awaited()


class TestSubmitCode:
    """submit_code(code, session_id, debug_mode)."""

    @pytest.mark.asyncio
    async def test_success_body(self, service, controller):
        controller.submit_code.return_value = SubmissionOutcome(
            overall_success=True,
            messages=[
                FeedbackMessage(text="Bob already redeemed", kind=MessageKind.ERROR),
                FeedbackMessage(text="Alice earned points", kind=MessageKind.SUCCESS),
            ],
        )

        response = await service.submit_code("ABC123", "s1")

        assert response.status_code == 200
        assert response.body == {
            "success": True,
            "message": "Code submitted successfully",
            "messages": [
                {"text": "Bob already redeemed", "type": "error"},
                {"text": "Alice earned points", "type": "success"},
            ],
        }

    @pytest.mark.asyncio
    async def test_failed_submission_is_still_200(self, service, controller):
        controller.submit_code.return_value = SubmissionOutcome.failed("All 2 candidates failed")

        response = await service.submit_code("ABC123", "s1")

        assert response.status_code == 200
        assert response.body["success"] is False
        assert response.body["message"] == "Code submission failed or already submitted"
        assert response.body["error"] == "All 2 candidates failed"

    @pytest.mark.asyncio
    async def test_invalid_session_is_401(self, service, controller):
        controller.submit_code.return_value = SessionInvalid(session_id="s1")

        response = await service.submit_code("ABC123", "s1")

        assert response.status_code == 401
        assert response.body["message"] == "Session expired or invalid"

    @pytest.mark.asyncio
    async def test_init_failure_is_500(self, service, controller):
        controller.submit_code.side_effect = SurfaceInitError("no browser")

        response = await service.submit_code("ABC123", "s1")

        assert response.status_code == 500

    @pytest.mark.asyncio
    async def test_code_is_normalized(self, service, controller):
        controller.submit_code.return_value = SubmissionOutcome(overall_success=False)

        await service.submit_code(" abc-12 3! ", "s1", True)

        controller.submit_code.assert_awaited_once_with("abc123", "s1", True)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code, session_id", [("", "s1"), ("--", "s1"), ("ABC", "")])
    async def test_missing_fields_are_400(self, service, controller, code, session_id):
        response = await service.submit_code(code, session_id)

        assert response.status_code == 400
        controller.submit_code.assert_not_awaited()


class TestLogoutAndHealth:
    """logout() and health()."""

    def test_logout_deletes_and_succeeds(self, store, site, clock):
        store.put("s1", SessionRecord(created_at=clock.now))
        service = GameCodeService(store, site=site)

        response = service.logout("s1")

        assert response.status_code == 200
        assert response.body["success"] is True
        assert "s1" not in store

    def test_logout_is_idempotent(self, service, controller):
        assert service.logout("missing").ok
        assert service.logout("missing").ok
        assert service.logout(None).ok

    def test_health(self, service):
        response = service.health()

        assert response.status_code == 200
        assert response.body["status"] == "ok"
        datetime.fromisoformat(response.body["timestamp"])


class TestHelpers:
    """Module-level helpers."""

    @pytest.mark.parametrize("raw, expected", [
        ("ABC123", "ABC123"),
        ("  ab c\n", "abc"),
        ("Vi'out-iful", "Vioutiful"),
        ("", ""),
    ])
    def test_normalize_code(self, raw, expected):
        assert normalize_code(raw) == expected

    def test_generate_session_id_format(self):
        session_id = generate_session_id()

        assert re.fullmatch(r"session_\d{13}_[a-z0-9]{9}", session_id)

    def test_generate_session_id_is_unique(self):
        assert len({generate_session_id() for _ in range(50)}) == 50
