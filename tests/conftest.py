"""
Shared fixtures: an in-memory Safal backend served through httpx.MockTransport.
"""

import json
from typing import Any, Optional

import httpx
import pytest
import pytest_asyncio

from safal_auth import AsyncSafalAuth, ClientSettings, MemoryStore

BASE_URL = "https://api.test"
UTILITIES_URL = "https://utilities.test"
AUTH_MODULE_PREFIX = "/api/standardized/auth/co/app"
VALID_CODE = "123456"


class FakeBackend:
    """Just enough of the sign-in, OTP and legal-document endpoints.

    Users are stored by email with their wire-format record. Verify ids are
    issued as v1, v2, ... and a new code for a target supersedes the
    previous id for that target.
    """

    def __init__(self) -> None:
        self.users: dict[str, dict[str, Any]] = {}
        self.requests: list[httpx.Request] = []
        self.failures: dict[tuple[str, str], tuple[int, Optional[dict[str, Any]]]] = {}
        self.issued: dict[str, str] = {}
        self.latest: dict[str, str] = {}
        self.confirmed: set[str] = set()
        self.push_tokens: set[str] = set()
        self._counter = 0

    def add_user(self, email: str, password: str, token: Optional[str] = None, **record: Any) -> None:
        record.setdefault("id", f"u{len(self.users) + 1}")
        record.setdefault("email", email)
        record.setdefault("role", "Patient")
        record.setdefault("status", "Active")
        self.users[email] = {
            "password": password,
            "token": token or f"tok-{record['id']}",
            "record": record,
        }

    def fail(self, method: str, path: str, status: int, body: Optional[dict[str, Any]] = None) -> None:
        self.failures[(method, path)] = (status, body)

    def calls(self, path: str, method: Optional[str] = None) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if self._path(r) == path and (method is None or r.method == method)
        ]

    @staticmethod
    def _path(request: httpx.Request) -> str:
        path = request.url.path
        if path.startswith(AUTH_MODULE_PREFIX):
            return path[len(AUTH_MODULE_PREFIX):]
        return path

    # -- dispatch --

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = self._path(request)
        if (request.method, path) in self.failures:
            status, failure = self.failures[(request.method, path)]
            return httpx.Response(status, json=failure) if failure is not None else httpx.Response(status)

        body = json.loads(request.content) if request.content else {}
        routes = {
            ("POST", "/api/user/login"): self._login,
            ("POST", "/api/auth/signin-organization"): self._org_login,
            ("POST", "/api/user/send-otp"): self._send_otp,
            ("PUT", "/api/user/send-otp"): self._confirm_otp,
            ("PUT", "/api/user/reset-password"): self._reset_password,
            ("POST", "/api/user/fcm"): self._push_token,
            ("PUT", "/api/user/fcm"): self._push_token,
            ("GET", "/api/legal-document/public"): self._policy,
        }
        route = routes.get((request.method, path))
        if route is None:
            return httpx.Response(404, json={"message": f"Cannot {request.method} {path}"})
        return route(request, body)

    def _check_password(self, body: dict[str, Any]) -> Optional[dict[str, Any]]:
        user = self.users.get(body.get("email", ""))
        if user is None or user["password"] != body.get("password"):
            return None
        return user

    @staticmethod
    def _with_cookie(payload: dict[str, Any], token: str) -> httpx.Response:
        return httpx.Response(200, json=payload, headers={"Set-Cookie": f"access_token={token}; Path=/; HttpOnly"})

    def _login(self, request: httpx.Request, body: dict[str, Any]) -> httpx.Response:
        user = self._check_password(body)
        if user is None:
            return httpx.Response(401, json={"success": False, "message": "Invalid email or password"})
        record = user["record"]
        envelope = {"success": True, "message": "Login successful", "data": record}

        if "type2fa" in body:
            verify_id = body.get("type2faVerifiedId")
            if verify_id not in self.confirmed:
                return httpx.Response(400, json={"success": False, "message": "2FA verification required"})
            return self._with_cookie(envelope, user["token"])

        if record.get("auth2faEmail") or record.get("auth2faPhoneNumber"):
            return httpx.Response(200, json=envelope)
        return self._with_cookie(envelope, user["token"])

    def _org_login(self, request: httpx.Request, body: dict[str, Any]) -> httpx.Response:
        user = self._check_password(body)
        if user is None:
            return httpx.Response(401, json={"message": "Unauthorized", "error": "Organization not found"})
        return self._with_cookie(user["record"], user["token"])

    def _send_otp(self, request: httpx.Request, body: dict[str, Any]) -> httpx.Response:
        target = body["value"]
        self._counter += 1
        verify_id = f"v{self._counter}"
        self.issued[verify_id] = target
        self.latest[target] = verify_id
        if body.get("userCheck") is False:
            return httpx.Response(200, json={"success": True, "message": "OTP sent", "data": {"verifyId": verify_id}})
        return httpx.Response(200, json={"success": True, "message": "OTP sent", "verifyId": verify_id})

    def _code_is_valid(self, verify_id: str, otp: str) -> bool:
        target = self.issued.get(verify_id)
        return target is not None and self.latest.get(target) == verify_id and otp == VALID_CODE

    def _confirm_otp(self, request: httpx.Request, body: dict[str, Any]) -> httpx.Response:
        verify_id = body["verifyId"]
        if not self._code_is_valid(verify_id, body["otp"]):
            return httpx.Response(200, json={"success": False, "message": "Invalid OTP"})
        self.confirmed.add(verify_id)
        return httpx.Response(200, json={"success": True, "message": "OTP verified"})

    def _reset_password(self, request: httpx.Request, body: dict[str, Any]) -> httpx.Response:
        verify_id = body["verifyId"]
        if verify_id not in self.confirmed or not self._code_is_valid(verify_id, body["otp"]):
            return httpx.Response(200, json={"success": False, "message": "Invalid OTP"})
        user = self.users.get(body["email"])
        if user is None:
            return httpx.Response(404, json={"message": "User not found"})
        user["password"] = body["newPassword"]
        return httpx.Response(200, json={"success": True, "message": "Password updated"})

    def _push_token(self, request: httpx.Request, body: dict[str, Any]) -> httpx.Response:
        cookie = request.headers.get("Cookie", "")
        tokens = {u["token"] for u in self.users.values()}
        if not cookie.startswith("access_token=") or cookie.split("=", 1)[1] not in tokens:
            return httpx.Response(401, json={"message": "Unauthorized"})
        if request.method == "POST":
            self.push_tokens.add(body["token"])
        else:
            self.push_tokens.discard(body["token"])
        return httpx.Response(200, json={"success": True, "message": "ok"})

    def _policy(self, request: httpx.Request, body: dict[str, Any]) -> httpx.Response:
        doc_type = request.url.params.get("type")
        return httpx.Response(200, json={
            "success": True,
            "data": {
                "id": "doc1",
                "type": doc_type,
                "name": "Terms and Conditions" if doc_type == "TermsAndConditions" else "Privacy Policy",
                "version": "1.2",
                "content": "<p>Be nice.</p>",
                "application": {"id": "a1", "appCode": request.url.params.get("application")},
            },
        })


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def settings() -> ClientSettings:
    return ClientSettings(
        base_url=BASE_URL,
        utilities_url=UTILITIES_URL,
        company_id="co",
        application_id="app",
    )


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest_asyncio.fixture
async def client(backend, settings, store):
    client = AsyncSafalAuth(settings=settings, store=store, transport=httpx.MockTransport(backend.handler))
    yield client
    await client.close()
