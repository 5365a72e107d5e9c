"""
OTP verification engine.

One endpoint serves every code round trip: POST issues a code and returns
a verify id, PUT confirms a code against that id. Phone and email
verification, forgot-password and 2FA all go through here.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from safal_auth.config import ClientSettings
from safal_auth.errors import FlowStateError, NetworkError, describe_error
from safal_auth.messages import EphemeralMessage
from safal_auth.models.verification import (
    CodeRequest,
    ConfirmCodeRequest,
    ContactKind,
    SendCodeRequest,
    VerificationResponse,
)
from safal_auth.transport.classifier import classify
from safal_auth.transport.http import ApiRequest, HttpClient
from safal_auth.validation import FieldErrors, validate_email, validate_otp, validate_phone_number

logger = logging.getLogger(__name__)

CODE_SENT_MESSAGE = "Verification code sent successfully"
CODE_SEND_FAILED_MESSAGE = "Failed to send verification code"
CODE_INVALID_MESSAGE = "Invalid verification code"


@dataclass(frozen=True)
class CodeIssued:
    success: bool
    verify_id: Optional[str]
    message: str


@dataclass(frozen=True)
class CodeCheck:
    success: bool
    message: str


class VerificationEngine:
    def __init__(self, http: HttpClient, settings: ClientSettings):
        self._http = http
        self._settings = settings

    async def _send(self, request: CodeRequest) -> VerificationResponse:
        method = "POST" if isinstance(request, SendCodeRequest) else "PUT"
        response = await self._http.send(ApiRequest(
            method,
            self._settings.paths.verification,
            json=request.to_wire(),
            base_url=self._settings.resolved_auth_module_url,
        ))
        return classify(response, VerificationResponse)

    async def request_code(
        self, kind: ContactKind, target: str, is_forgot_password: bool = False,
    ) -> CodeIssued:
        """Issue a code to ``target``. A new code supersedes earlier verify ids."""
        result = await self._send(SendCodeRequest(type=kind, value=target, user_check=not is_forgot_password))
        verify_id = result.resolved_verify_id
        if result.success and verify_id:
            logger.info("Verification code issued (%s), verify_id=%s", kind.value, verify_id)
            return CodeIssued(True, verify_id, result.message or CODE_SENT_MESSAGE)
        return CodeIssued(False, None, result.message or CODE_SEND_FAILED_MESSAGE)

    async def confirm_code(self, code: str, verify_id: str, contact: str) -> CodeCheck:
        """Check ``code`` against ``verify_id``.

        ``contact`` is the phone/email the code went to; the backend routes
        SMS and email confirmations by it, the lookup itself is by verify id.
        """
        result = await self._send(ConfirmCodeRequest(otp=code, verify_id=verify_id, value=contact))
        if result.success:
            return CodeCheck(True, result.message or "Verified successfully")
        return CodeCheck(False, result.message or CODE_INVALID_MESSAGE)


def normalize_contact(kind: ContactKind, value: str) -> str:
    if kind == ContactKind.EMAIL:
        return value.strip().lower()
    value = value.strip()
    digits = re.sub(r"\D", "", value)
    return f"+{digits}" if value.startswith("+") else digits


class VerifiedContacts:
    """Contacts confirmed during this app session, keyed by normalized value."""

    def __init__(self) -> None:
        self._verified: dict[tuple[ContactKind, str], str] = {}

    def add(self, kind: ContactKind, contact: str, verify_id: str) -> None:
        self._verified[(kind, normalize_contact(kind, contact))] = verify_id

    def lookup(self, kind: ContactKind, contact: str) -> Optional[str]:
        return self._verified.get((kind, normalize_contact(kind, contact)))

    def __contains__(self, item: tuple[ContactKind, str]) -> bool:
        kind, contact = item
        return self.lookup(kind, contact) is not None

    def __len__(self) -> int:
        return len(self._verified)


class ContactVerification:
    """Verify a phone number or email entered on a form (e.g. sign-up).

    A contact confirmed earlier in the session is not re-verified; its
    verify id is reused.
    """

    def __init__(self, engine: VerificationEngine, verified: Optional[VerifiedContacts] = None):
        self._engine = engine
        self.verified = verified or VerifiedContacts()
        self.field_errors = FieldErrors()
        self.error = EphemeralMessage()
        self.success = EphemeralMessage()
        self._pending: Optional[tuple[ContactKind, str, str]] = None

    @property
    def awaiting_code(self) -> bool:
        return self._pending is not None

    def verify_id_for(self, kind: ContactKind, contact: str) -> Optional[str]:
        return self.verified.lookup(kind, contact)

    async def send_code(self, kind: ContactKind, contact: str) -> bool:
        """Returns True once ``contact`` is verified or a code is on its way."""
        self.field_errors.clear()
        if kind == ContactKind.EMAIL:
            self.field_errors.email = validate_email(contact)
        else:
            self.field_errors.phone_number = validate_phone_number(contact)
        if self.field_errors.has_errors:
            return False

        if (kind, contact) in self.verified:
            self._pending = None
            return True

        try:
            issued = await self._engine.request_code(kind, contact)
        except NetworkError as e:
            self.error.show(describe_error(e))
            return False
        if not issued.success or issued.verify_id is None:
            self.error.show(issued.message)
            return False
        self._pending = (kind, contact, issued.verify_id)
        self.success.show(issued.message)
        return True

    async def confirm(self, code: str) -> bool:
        if self._pending is None:
            raise FlowStateError("No verification code has been requested")
        self.field_errors.otp = validate_otp(code)
        if self.field_errors.otp:
            self.error.show(self.field_errors.otp)
            return False

        kind, contact, verify_id = self._pending
        try:
            check = await self._engine.confirm_code(code, verify_id, contact)
        except NetworkError as e:
            self.error.show(describe_error(e))
            return False
        if not check.success:
            self.error.show(check.message)
            return False
        self.verified.add(kind, contact, verify_id)
        self._pending = None
        self.success.show(check.message)
        return True
