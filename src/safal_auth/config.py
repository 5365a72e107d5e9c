"""
Client configuration using pydantic-settings.

Every value can be overridden with a ``SAFAL_``-prefixed environment
variable; endpoint paths use the nested delimiter, e.g.
``SAFAL_PATHS__SIGN_IN=/api/v2/user/login``.
"""

from typing import Optional

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "https://api.dev.safalreviews.com"
DEFAULT_UTILITIES_URL = "https://api.dev.safalutilities.com"
STANDARDIZED_AUTH_PREFIX = "/api/standardized/auth/"


class ApiPaths(BaseModel):
    sign_in: str = "/api/user/login"
    sign_in_organization: str = "/api/auth/signin-organization"
    verification: str = "/api/user/send-otp"
    reset_password: str = "/api/user/reset-password"
    policy_documents: str = "/api/legal-document/public"
    push_token: str = "/api/user/fcm"


class ClientSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SAFAL_", env_nested_delimiter="__", extra="ignore")

    base_url: str = DEFAULT_BASE_URL
    utilities_url: str = DEFAULT_UTILITIES_URL
    company_id: str = "hemantcompanywzg6lw"
    application_id: str = "safalreviews3y2f13"
    # Overrides the URL derived from utilities_url/company_id/application_id
    auth_module_url: Optional[str] = None
    timeout: float = 30.0
    paths: ApiPaths = ApiPaths()

    @property
    def resolved_auth_module_url(self) -> str:
        if self.auth_module_url:
            return self.auth_module_url.rstrip("/")
        return (
            f"{self.utilities_url.rstrip('/')}{STANDARDIZED_AUTH_PREFIX}"
            f"{self.company_id}/{self.application_id}"
        )
