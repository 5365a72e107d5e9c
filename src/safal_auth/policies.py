"""
Legal documents shown during sign-up (terms and conditions, privacy policy).
"""

from typing import Optional

from safal_auth.config import ClientSettings
from safal_auth.errors import NoDataError
from safal_auth.models.envelope import ApiEnvelope
from safal_auth.models.policy import PolicyDocument
from safal_auth.transport.classifier import classify
from safal_auth.transport.http import HttpClient


class PoliciesAPI:
    def __init__(self, http: HttpClient, settings: ClientSettings):
        self._http = http
        self._settings = settings

    async def fetch(self, doc_type: str, application: Optional[str] = None) -> PolicyDocument:
        response = await self._http.get(
            self._settings.paths.policy_documents,
            params={"type": doc_type, "application": application or self._settings.application_id},
            base_url=self._settings.utilities_url,
        )
        envelope = classify(response, ApiEnvelope[PolicyDocument])
        if envelope.data is None:
            raise NoDataError()
        return envelope.data
