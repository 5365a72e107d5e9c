"""Forgot-password flow against the fake backend."""

import json

import pytest

from safal_auth import AuthState, FlowStateError
from safal_auth.password_reset import ResetStage

from conftest import VALID_CODE

RESET = "/api/user/reset-password"
SEND_OTP = "/api/user/send-otp"


class TestRequestCode:
    @pytest.mark.asyncio
    async def test_sends_forgot_password_code(self, client, backend):
        backend.add_user("a@b.com", "oldpass1")
        flow = client.password_reset

        assert await flow.request_email_verification("a@b.com")

        assert flow.stage == ResetStage.ENTER_CODE
        assert flow.verify_id == "v1"
        assert flow.success_message.text == "OTP sent"
        body = json.loads(backend.calls(SEND_OTP, "POST")[0].content)
        assert body == {"type": "Email", "value": "a@b.com", "userCheck": False}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email, message", [
        ("", "Email is required"),
        ("a@b", "Please enter a valid email"),
    ])
    async def test_invalid_email(self, client, backend, email, message):
        flow = client.password_reset
        assert not await flow.request_email_verification(email)
        assert flow.field_errors.email == message
        assert flow.error_message.text == message
        assert flow.stage == ResetStage.ENTER_EMAIL
        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_server_error(self, client, backend):
        backend.fail("POST", SEND_OTP, 500)
        flow = client.password_reset
        assert not await flow.request_email_verification("a@b.com")
        assert flow.error_message.text == "Server error: 500"
        assert flow.stage == ResetStage.ENTER_EMAIL


class TestConfirmReset:
    @pytest.mark.asyncio
    async def test_round_trip(self, client, backend, store):
        backend.add_user("a@b.com", "oldpass1")
        flow = client.password_reset
        await flow.request_email_verification("a@b.com")

        assert await flow.confirm_reset_code(VALID_CODE, "newpass99", "newpass99")

        assert flow.success_message.text == "Password updated"
        assert flow.stage == ResetStage.ENTER_EMAIL
        assert flow.verify_id is None
        assert json.loads(backend.calls(RESET)[0].content) == {
            "email": "a@b.com",
            "verifyId": "v1",
            "otp": VALID_CODE,
            "newPassword": "newpass99",
        }
        assert store.data == {}

        assert await client.login.submit("a@b.com", "oldpass1") == AuthState.UNAUTHENTICATED
        assert await client.login.submit("a@b.com", "newpass99") == AuthState.AUTHENTICATED

    @pytest.mark.asyncio
    async def test_password_mismatch_makes_no_request(self, client, backend):
        flow = client.password_reset
        await flow.request_email_verification("a@b.com")
        before = len(backend.requests)

        assert not await flow.confirm_reset_code(VALID_CODE, "newpass99", "newpass98")

        assert flow.field_errors.confirm_password == "Passwords do not match"
        assert len(backend.requests) == before

    @pytest.mark.asyncio
    async def test_short_password(self, client):
        flow = client.password_reset
        await flow.request_email_verification("a@b.com")
        assert not await flow.confirm_reset_code(VALID_CODE, "short", "short")
        assert flow.field_errors.password == "Password must be at least 8 characters"

    @pytest.mark.asyncio
    async def test_malformed_code(self, client):
        flow = client.password_reset
        await flow.request_email_verification("a@b.com")
        assert not await flow.confirm_reset_code("12", "newpass99", "newpass99")
        assert flow.error_message.text == "Please enter a valid 6-digit verification code"

    @pytest.mark.asyncio
    async def test_wrong_code_skips_reset(self, client, backend):
        backend.add_user("a@b.com", "oldpass1")
        flow = client.password_reset
        await flow.request_email_verification("a@b.com")

        assert not await flow.confirm_reset_code("000000", "newpass99", "newpass99")

        assert flow.error_message.text == "Invalid OTP"
        assert flow.stage == ResetStage.ENTER_CODE
        assert backend.calls(RESET) == []
        assert backend.users["a@b.com"]["password"] == "oldpass1"

    @pytest.mark.asyncio
    async def test_reset_rejected(self, client, backend):
        backend.add_user("a@b.com", "oldpass1")
        backend.fail("PUT", RESET, 200, {"success": False, "message": "Verification expired"})
        flow = client.password_reset
        await flow.request_email_verification("a@b.com")

        assert not await flow.confirm_reset_code(VALID_CODE, "newpass99", "newpass99")

        assert flow.error_message.text == "Verification expired"
        assert flow.stage == ResetStage.ENTER_CODE

    @pytest.mark.asyncio
    async def test_confirm_before_request(self, client):
        with pytest.raises(FlowStateError):
            await client.password_reset.confirm_reset_code(VALID_CODE, "newpass99", "newpass99")
