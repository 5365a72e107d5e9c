"""
REST HTTP client for the Safal backend.

Returns the raw ``httpx.Response``; decoding and status interpretation
live in ``safal_auth.transport.classifier``.
"""

from dataclasses import dataclass, field
from http.cookiejar import CookieJar, DefaultCookiePolicy
from typing import Any, Callable, Optional

import httpx

from safal_auth.errors import (
    CancelledRequestError,
    InvalidResponseError,
    InvalidURLError,
    NoInternetError,
    UnknownError,
)
from safal_auth.log import log_request, log_response
from safal_auth.transport.connectivity import ConnectivityMonitor

SESSION_COOKIE = "access_token"
USER_AGENT = "safal-auth-sdk/0.1.0"


@dataclass
class ApiRequest:
    method: str
    path: str
    json: Optional[dict[str, Any]] = None
    params: Optional[dict[str, str]] = None
    headers: dict[str, str] = field(default_factory=dict)
    # None means the client's base_url
    base_url: Optional[str] = None
    authenticated: bool = False


def session_cookie(response: httpx.Response) -> Optional[str]:
    """Value of the ``access_token`` cookie set by an auth endpoint, if any."""
    return response.cookies.get(SESSION_COOKIE)


class HttpClient:
    def __init__(
        self,
        base_url: str,
        connectivity: Optional[ConnectivityMonitor] = None,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._connectivity = connectivity or ConnectivityMonitor()
        self._token_provider = token_provider
        self._closed = False
        self._client = httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
            timeout=timeout,
            transport=transport,
            # The session cookie is replayed explicitly, never from a jar
            cookies=CookieJar(policy=DefaultCookiePolicy(allowed_domains=[])),
            event_hooks={"request": [log_request], "response": [log_response]},
        )

    @property
    def connectivity(self) -> ConnectivityMonitor:
        return self._connectivity

    def _headers(self, request: ApiRequest) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        headers.update(request.headers)
        if request.authenticated and self._token_provider:
            token = self._token_provider()
            if token:
                headers["Cookie"] = f"{SESSION_COOKIE}={token}"
        return headers

    async def send(self, request: ApiRequest) -> httpx.Response:
        if not self._connectivity.is_connected:
            raise NoInternetError()
        if self._closed:
            raise CancelledRequestError()

        url = f"{(request.base_url or self._base_url).rstrip('/')}{request.path}"
        try:
            response = await self._client.request(
                request.method,
                url,
                json=request.json,
                params=request.params,
                headers=self._headers(request),
            )
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            raise InvalidURLError() from e
        except (httpx.RemoteProtocolError, httpx.DecodingError) as e:
            raise InvalidResponseError() from e
        except httpx.HTTPError as e:
            raise UnknownError(e) from e
        return response

    async def get(self, path: str, params: Optional[dict[str, str]] = None, **kwargs: Any) -> httpx.Response:
        return await self.send(ApiRequest("GET", path, params=params, **kwargs))

    async def post(self, path: str, body: Optional[dict[str, Any]] = None, **kwargs: Any) -> httpx.Response:
        return await self.send(ApiRequest("POST", path, json=body, **kwargs))

    async def put(self, path: str, body: Optional[dict[str, Any]] = None, **kwargs: Any) -> httpx.Response:
        return await self.send(ApiRequest("PUT", path, json=body, **kwargs))

    async def close(self) -> None:
        self._closed = True
        await self._client.aclose()
