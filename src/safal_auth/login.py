"""
Login state machine.

    UNAUTHENTICATED -> SUBMITTING -> [AWAITING_METHOD_SELECTION -> AWAITING_OTP] -> AUTHENTICATED

Any failure during submit returns to UNAUTHENTICATED with ``error`` set;
a cancelled submit also lands back in UNAUTHENTICATED.
Failures during the 2FA steps keep the current step so the user can retry,
resend or cancel. Callers must not start a transition while ``is_loading``.
"""

import asyncio
import dataclasses
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from safal_auth.auth import AuthAPI, SignInResult
from safal_auth.errors import FlowStateError, NetworkError, describe_error
from safal_auth.messages import EphemeralMessage
from safal_auth.models.user import UserModel
from safal_auth.models.verification import ContactKind
from safal_auth.push import PushTokenAPI
from safal_auth.store import CredentialStore
from safal_auth.validation import FieldErrors, validate_email, validate_login_password, validate_otp
from safal_auth.verification import VerificationEngine

logger = logging.getLogger(__name__)

ACCOUNT_NOT_SUPPORTED_MESSAGE = "This account is currently not supported"
SESSION_EXPIRED_MESSAGE = "Verification session expired. Please try again."


class AuthState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    SUBMITTING = "submitting"
    AWAITING_METHOD_SELECTION = "awaiting_method_selection"
    AWAITING_OTP = "awaiting_otp"
    AUTHENTICATED = "authenticated"


@dataclass
class AuthSession:
    email: str
    password: str
    is_organization: bool = False
    remember_me: bool = False


@dataclass(frozen=True)
class TwoFactorChallenge:
    """2FA contacts configured on the account plus the code in flight."""
    email_target: Optional[str] = None
    phone_target: Optional[str] = None
    method: Optional[ContactKind] = None
    verify_id: Optional[str] = None

    @classmethod
    def for_user(cls, user: UserModel) -> Optional["TwoFactorChallenge"]:
        email = user.auth2fa_email or None
        phone = user.auth2fa_phone_number or None
        if email is None and phone is None:
            return None
        return cls(email_target=email, phone_target=phone)

    @property
    def available_methods(self) -> list[ContactKind]:
        methods = []
        if self.email_target:
            methods.append(ContactKind.EMAIL)
        if self.phone_target:
            methods.append(ContactKind.PHONE_NUMBER)
        return methods

    def target_for(self, method: ContactKind) -> Optional[str]:
        return self.email_target if method == ContactKind.EMAIL else self.phone_target

    def with_code(self, method: ContactKind, verify_id: str) -> "TwoFactorChallenge":
        return dataclasses.replace(self, method=method, verify_id=verify_id)


class LoginFlow:
    def __init__(
        self,
        auth: AuthAPI,
        verification: VerificationEngine,
        credentials: CredentialStore,
        push: Optional[PushTokenAPI] = None,
    ):
        self._auth = auth
        self._verification = verification
        self._credentials = credentials
        self._push = push

        self.state = AuthState.UNAUTHENTICATED
        self.session: Optional[AuthSession] = None
        self.challenge: Optional[TwoFactorChallenge] = None
        self.error: Optional[NetworkError] = None
        self.field_errors = FieldErrors()
        self.error_message = EphemeralMessage()
        self.success_message = EphemeralMessage()
        self.is_loading = False

        self.remembered_email = credentials.remembered_email()
        self.remember_me = self.remembered_email is not None

    @property
    def is_authenticated(self) -> bool:
        return self.state == AuthState.AUTHENTICATED

    def _require(self, *states: AuthState) -> None:
        if self.state not in states:
            allowed = ", ".join(s.value for s in states)
            raise FlowStateError(f"Cannot do this while {self.state.value} (expected {allowed})")
        if self.is_loading:
            raise FlowStateError("Another request is already in flight")

    def _begin(self) -> None:
        self.is_loading = True
        self.error = None
        self.error_message.clear()
        self.success_message.clear()

    # -- step 1: credentials --

    async def submit(
        self, email: str, password: str, is_organization: bool = False, remember_me: bool = False,
    ) -> AuthState:
        self._require(AuthState.UNAUTHENTICATED)
        self.field_errors.clear()
        self.field_errors.email = validate_email(email)
        self.field_errors.password = validate_login_password(password)
        if self.field_errors.has_errors:
            return self.state

        self.session = AuthSession(email, password, is_organization, remember_me)
        self.remember_me = remember_me
        self.state = AuthState.SUBMITTING
        self._begin()
        try:
            if is_organization:
                result = await self._auth.sign_in_organization(email, password)
            else:
                result = await self._auth.sign_in(email, password)
        except NetworkError as e:
            self._fail(e)
            return self.state
        except asyncio.CancelledError:
            self.session = None
            self.state = AuthState.UNAUTHENTICATED
            raise
        finally:
            self.is_loading = False

        if not result.user.is_supported:
            self._reject_account()
            return self.state

        challenge = TwoFactorChallenge.for_user(result.user)
        if challenge is not None:
            logger.info("2FA required (%s)", ", ".join(m.value for m in challenge.available_methods))
            self.challenge = challenge
            self.state = AuthState.AWAITING_METHOD_SELECTION
            return self.state

        await self._finalize(result)
        return self.state

    # -- step 2: pick a 2FA method, get a code --

    async def select_method(self, method: ContactKind) -> AuthState:
        """Request a code for ``method``; from AWAITING_OTP this resends."""
        self._require(AuthState.AWAITING_METHOD_SELECTION, AuthState.AWAITING_OTP)
        assert self.challenge is not None
        target = self.challenge.target_for(method)
        if not target:
            raise FlowStateError(f"{method.value} 2FA is not configured for this account")

        self._begin()
        try:
            issued = await self._verification.request_code(method, target)
        except NetworkError as e:
            self.error = e
            self.error_message.show(f"Failed to send verification code: {describe_error(e)}")
            return self.state
        finally:
            self.is_loading = False

        if not issued.success or issued.verify_id is None:
            self.error_message.show(issued.message)
            return self.state

        self.challenge = self.challenge.with_code(method, issued.verify_id)
        self.state = AuthState.AWAITING_OTP
        self.success_message.show(issued.message)
        return self.state

    # -- step 3: confirm the code, sign in again with the proof --

    async def submit_otp(self, code: str) -> AuthState:
        self._require(AuthState.AWAITING_OTP)
        assert self.challenge is not None and self.session is not None
        challenge = self.challenge
        if challenge.method is None or challenge.verify_id is None:
            self.error_message.show(SESSION_EXPIRED_MESSAGE)
            return self.state

        self.field_errors.otp = validate_otp(code)
        if self.field_errors.otp:
            self.error_message.show(self.field_errors.otp)
            return self.state

        self._begin()
        try:
            check = await self._verification.confirm_code(
                code, challenge.verify_id, challenge.target_for(challenge.method) or "",
            )
            if not check.success:
                self.error_message.show(check.message)
                return self.state
            result = await self._auth.login_with_2fa(
                self.session.email, self.session.password, challenge.method, challenge.verify_id,
            )
        except NetworkError as e:
            self.error = e
            self.error_message.show(f"Login failed: {describe_error(e)}")
            return self.state
        finally:
            self.is_loading = False

        if not result.user.is_supported:
            self._reject_account()
            return self.state

        await self._finalize(result)
        return self.state

    def cancel(self) -> AuthState:
        """Abandon a pending 2FA challenge; its verify id is simply dropped."""
        self._require(AuthState.AWAITING_METHOD_SELECTION, AuthState.AWAITING_OTP)
        self.challenge = None
        self.session = None
        self.state = AuthState.UNAUTHENTICATED
        return self.state

    # -- session lifecycle --

    async def _finalize(self, result: SignInResult) -> None:
        assert self.session is not None
        if result.session_token is None:
            logger.warning("Sign-in succeeded without a session cookie")
        self._credentials.save_session(result.session_token, result.user)
        if self.session.remember_me:
            self._credentials.remember_email(self.session.email)
            self.remembered_email = self.session.email

        self.challenge = None
        self.session = dataclasses.replace(self.session, password="")
        self.state = AuthState.AUTHENTICATED
        logger.info("Signed in as user %s", result.user.id)

        await self._register_push_token()

    async def _register_push_token(self) -> None:
        token = self._credentials.push_token()
        if not token or self._push is None:
            return
        try:
            await self._push.register(token)
        except NetworkError as e:
            logger.warning("Failed to register push token: %s", describe_error(e))

    def _reject_account(self) -> None:
        self._credentials.clear_all()
        self.challenge = None
        self.session = None
        self.state = AuthState.UNAUTHENTICATED
        self.error_message.show(ACCOUNT_NOT_SUPPORTED_MESSAGE)

    def _fail(self, error: NetworkError) -> None:
        logger.info("Sign-in failed: %s", error.code)
        self.error = error
        self.challenge = None
        self.state = AuthState.UNAUTHENTICATED
        self.error_message.show(describe_error(error))

    async def sign_out(self) -> AuthState:
        push_token = self._credentials.push_token()
        if push_token and self._push is not None and self._credentials.get():
            try:
                await self._push.unregister(push_token)
            except NetworkError as e:
                logger.warning("Failed to remove push token: %s", describe_error(e))
            self._credentials.forget_push_token()

        self._credentials.clear_all()
        if not self.remember_me:
            self._credentials.forget_email()
            self.remembered_email = None
        self.challenge = None
        self.session = None
        self.error = None
        self.state = AuthState.UNAUTHENTICATED
        return self.state
