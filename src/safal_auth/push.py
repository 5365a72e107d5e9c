"""
Push-notification token registration for the signed-in device.
"""

from typing import Any

from safal_auth.config import ClientSettings
from safal_auth.models.envelope import ApiEnvelope
from safal_auth.transport.classifier import classify
from safal_auth.transport.http import HttpClient


class PushTokenAPI:
    def __init__(self, http: HttpClient, settings: ClientSettings):
        self._http = http
        self._settings = settings

    async def register(self, token: str) -> ApiEnvelope[Any]:
        response = await self._http.post(self._settings.paths.push_token, {"token": token}, authenticated=True)
        return classify(response, ApiEnvelope[Any])

    async def unregister(self, token: str) -> ApiEnvelope[Any]:
        response = await self._http.put(self._settings.paths.push_token, {"token": token}, authenticated=True)
        return classify(response, ApiEnvelope[Any])
