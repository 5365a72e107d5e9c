"""
Forgot-password flow: email code -> confirm code -> set new password.

Never touches the credential store; this all happens before sign-in.
"""

import logging
from enum import Enum
from typing import Optional

from safal_auth.config import ClientSettings
from safal_auth.errors import FlowStateError, NetworkError, describe_error
from safal_auth.messages import EphemeralMessage
from safal_auth.models.verification import ContactKind, ResetPasswordRequest, ResetPasswordResponse
from safal_auth.transport.classifier import classify
from safal_auth.transport.http import ApiRequest, HttpClient
from safal_auth.validation import FieldErrors, is_valid_email, validate_new_password, validate_otp
from safal_auth.verification import VerificationEngine

logger = logging.getLogger(__name__)

PASSWORD_RESET_MESSAGE = "Password reset successfully"


class ResetStage(str, Enum):
    ENTER_EMAIL = "enter_email"
    ENTER_CODE = "enter_code"


class PasswordResetAPI:
    def __init__(self, http: HttpClient, settings: ClientSettings):
        self._http = http
        self._settings = settings

    async def reset_password(
        self, email: str, verify_id: str, otp: str, new_password: str,
    ) -> ResetPasswordResponse:
        body = ResetPasswordRequest(email=email, verify_id=verify_id, otp=otp, new_password=new_password)
        response = await self._http.send(ApiRequest(
            "PUT",
            self._settings.paths.reset_password,
            json=body.to_wire(),
            base_url=self._settings.resolved_auth_module_url,
        ))
        return classify(response, ResetPasswordResponse)


class PasswordResetFlow:
    def __init__(self, verification: VerificationEngine, api: PasswordResetAPI):
        self._verification = verification
        self._api = api

        self.stage = ResetStage.ENTER_EMAIL
        self.email = ""
        self.verify_id: Optional[str] = None
        self.field_errors = FieldErrors()
        self.error_message = EphemeralMessage()
        self.success_message = EphemeralMessage()
        self.is_loading = False

    def _report(self, error: NetworkError) -> None:
        self.error_message.show(describe_error(error))

    async def request_email_verification(self, email: str) -> bool:
        self.field_errors.clear()
        if not email:
            self.field_errors.email = "Email is required"
        elif not is_valid_email(email):
            self.field_errors.email = "Please enter a valid email"
        if self.field_errors.email:
            self.error_message.show(self.field_errors.email)
            return False

        self.is_loading = True
        try:
            issued = await self._verification.request_code(ContactKind.EMAIL, email, is_forgot_password=True)
        except NetworkError as e:
            self._report(e)
            return False
        finally:
            self.is_loading = False

        if not issued.success or issued.verify_id is None:
            self.error_message.show(issued.message)
            return False

        self.email = email
        self.verify_id = issued.verify_id
        self.stage = ResetStage.ENTER_CODE
        self.success_message.show(issued.message)
        return True

    async def confirm_reset_code(self, otp: str, new_password: str, confirm_password: str) -> bool:
        """Validate the new password, check the code, then reset.

        The reset call re-sends the OTP; the endpoint validates it again.
        """
        if self.stage != ResetStage.ENTER_CODE or self.verify_id is None:
            raise FlowStateError("Request a verification code first")

        self.field_errors.clear()
        self.field_errors.password, self.field_errors.confirm_password = validate_new_password(
            new_password, confirm_password,
        )
        if self.field_errors.has_errors:
            return False
        self.field_errors.otp = validate_otp(otp)
        if self.field_errors.otp:
            self.error_message.show(self.field_errors.otp)
            return False

        self.is_loading = True
        try:
            check = await self._verification.confirm_code(otp, self.verify_id, self.email)
            if not check.success:
                self.error_message.show(check.message)
                return False
            result = await self._api.reset_password(self.email, self.verify_id, otp, new_password)
        except NetworkError as e:
            self._report(e)
            return False
        finally:
            self.is_loading = False

        if result.success is False:
            self.error_message.show(result.message or "Something went wrong")
            return False

        logger.info("Password reset completed")
        self.success_message.show(result.message or PASSWORD_RESET_MESSAGE)
        self._clear_form()
        return True

    def _clear_form(self) -> None:
        self.stage = ResetStage.ENTER_EMAIL
        self.email = ""
        self.verify_id = None
        self.field_errors.clear()
