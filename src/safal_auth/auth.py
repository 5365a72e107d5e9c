"""
Sign-in endpoints.

Personal and organization sign-in are separate endpoints because their
responses decode differently; the 2FA login shares the personal path
with a different body.
"""

from dataclasses import dataclass
from typing import Optional

import httpx

from safal_auth.config import ClientSettings
from safal_auth.models.envelope import ApiEnvelope
from safal_auth.models.user import LoginWith2FARequest, SignInRequest, UserModel
from safal_auth.models.verification import ContactKind
from safal_auth.transport.classifier import classify
from safal_auth.transport.http import HttpClient, session_cookie


@dataclass(frozen=True)
class SignInResult:
    user: UserModel
    session_token: Optional[str]


class AuthAPI:
    def __init__(self, http: HttpClient, settings: ClientSettings):
        self._http = http
        self._settings = settings

    def _envelope_result(self, response: httpx.Response) -> SignInResult:
        envelope = classify(response, ApiEnvelope[UserModel])
        # Success without a payload still counts as signed in
        return SignInResult(envelope.data or UserModel(), session_cookie(response))

    async def sign_in(self, email: str, password: str) -> SignInResult:
        response = await self._http.post(
            self._settings.paths.sign_in,
            SignInRequest(email=email, password=password).to_wire(),
        )
        return self._envelope_result(response)

    async def sign_in_organization(self, email: str, password: str) -> SignInResult:
        response = await self._http.post(
            self._settings.paths.sign_in_organization,
            SignInRequest(email=email, password=password).to_wire(),
        )
        user = classify(response, UserModel, error_field_first=True)
        return SignInResult(user, session_cookie(response))

    async def login_with_2fa(
        self, email: str, password: str, method: ContactKind, verify_id: str,
    ) -> SignInResult:
        """Second sign-in carrying the 2FA proof; the session cookie comes from here."""
        body = LoginWith2FARequest(
            email=email, password=password, type2fa=method.value, type2fa_verified_id=verify_id,
        )
        response = await self._http.post(self._settings.paths.sign_in, body.to_wire())
        return self._envelope_result(response)
