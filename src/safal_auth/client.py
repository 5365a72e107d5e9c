"""
AsyncSafalAuth / SafalAuth: one context object wiring every component.

Create it once at application start and pass it around; nothing in the
package keeps module-level state.
"""

import asyncio
from pathlib import Path
from typing import Any, Optional

import httpx

from safal_auth.auth import AuthAPI
from safal_auth.config import ClientSettings
from safal_auth.login import AuthState, LoginFlow
from safal_auth.models.policy import PolicyDocument
from safal_auth.models.verification import ContactKind
from safal_auth.password_reset import PasswordResetAPI, PasswordResetFlow
from safal_auth.policies import PoliciesAPI
from safal_auth.push import PushTokenAPI
from safal_auth.store import CredentialStore, JsonFileStore, KeyValueStore
from safal_auth.transport.connectivity import ConnectivityMonitor
from safal_auth.transport.http import HttpClient
from safal_auth.verification import ContactVerification, VerificationEngine

CREDENTIALS_FILE = Path.home() / ".safal" / "credentials.json"


class AsyncSafalAuth:
    """Async client (primary)."""

    def __init__(
        self,
        settings: Optional[ClientSettings] = None,
        store: Optional[KeyValueStore] = None,
        connectivity: Optional[ConnectivityMonitor] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or ClientSettings()
        self.credentials = CredentialStore(store if store is not None else JsonFileStore(CREDENTIALS_FILE))
        self.connectivity = connectivity or ConnectivityMonitor()

        self.http = HttpClient(
            base_url=self.settings.base_url,
            connectivity=self.connectivity,
            token_provider=self.credentials.get,
            timeout=self.settings.timeout,
            transport=transport,
        )
        self.auth = AuthAPI(self.http, self.settings)
        self.verification = VerificationEngine(self.http, self.settings)
        self.push = PushTokenAPI(self.http, self.settings)
        self.policies = PoliciesAPI(self.http, self.settings)

        self.login = LoginFlow(self.auth, self.verification, self.credentials, self.push)
        self.password_reset = PasswordResetFlow(self.verification, PasswordResetAPI(self.http, self.settings))

    @property
    def is_authenticated(self) -> bool:
        return self.login.is_authenticated

    def contact_verification(self) -> ContactVerification:
        """Fresh verifier for a sign-up/profile form."""
        return ContactVerification(self.verification)

    async def close(self) -> None:
        await self.connectivity.stop()
        await self.http.close()

    async def __aenter__(self) -> "AsyncSafalAuth":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()


class SafalAuth:
    """Sync wrapper around AsyncSafalAuth. Runs the event loop internally."""

    def __init__(self, **kwargs: Any):
        self._async = AsyncSafalAuth(**kwargs)
        self._loop = asyncio.new_event_loop()

    def _run(self, coro: Any) -> Any:
        return self._loop.run_until_complete(coro)

    @property
    def login(self) -> LoginFlow:
        return self._async.login

    @property
    def password_reset(self) -> PasswordResetFlow:
        return self._async.password_reset

    @property
    def credentials(self) -> CredentialStore:
        return self._async.credentials

    @property
    def is_authenticated(self) -> bool:
        return self._async.is_authenticated

    def submit(self, email: str, password: str, is_organization: bool = False, remember_me: bool = False) -> AuthState:
        return self._run(self._async.login.submit(email, password, is_organization, remember_me))

    def select_method(self, method: ContactKind) -> AuthState:
        return self._run(self._async.login.select_method(method))

    def submit_otp(self, code: str) -> AuthState:
        return self._run(self._async.login.submit_otp(code))

    def sign_out(self) -> AuthState:
        return self._run(self._async.login.sign_out())

    def request_password_reset(self, email: str) -> bool:
        return self._run(self._async.password_reset.request_email_verification(email))

    def confirm_password_reset(self, otp: str, new_password: str, confirm_password: str) -> bool:
        return self._run(self._async.password_reset.confirm_reset_code(otp, new_password, confirm_password))

    def fetch_policy(self, doc_type: str) -> PolicyDocument:
        return self._run(self._async.policies.fetch(doc_type))

    def close(self) -> None:
        self._run(self._async.close())
        self._loop.close()
