"""
Account record returned by the sign-in endpoints.
"""

from typing import Any, Optional

from pydantic import AliasChoices, Field

from safal_auth.models.envelope import WireModel

ORGANIZATION_ROLE = "Organization"
CLOSED_STATUS = "Closed"


class UserModel(WireModel):
    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("_id", "id"), serialization_alias="_id")
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None          # "Patient" | "Nurse" | "Doctor" | "Organization" ...
    status: Optional[str] = None        # "Active" | "Closed" ...
    country: Optional[str] = None
    phone_number: Optional[str] = None
    profile_picture: Optional[str] = None
    is_email_verified: Optional[bool] = None
    email_verified_id: Optional[str] = None
    user_slug: Optional[str] = None
    company_slug: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    is_two_factor_enabled: Optional[bool] = None
    auth2fa_email: Optional[str] = Field(default=None, alias="auth2faEmail")
    auth2fa_phone_number: Optional[str] = Field(default=None, alias="auth2faPhoneNumber")

    @property
    def display_name(self) -> Optional[str]:
        if not self.first_name:
            return None
        return " ".join(part for part in (self.first_name, self.last_name) if part)

    @property
    def is_supported(self) -> bool:
        """Organization and closed accounts cannot hold a mobile session."""
        return self.role != ORGANIZATION_ROLE and self.status != CLOSED_STATUS


class SignInRequest(WireModel):
    email: str
    password: str


class LoginWith2FARequest(WireModel):
    email: str
    password: str
    type2fa: str = Field(alias="type2fa")
    type2fa_verified_id: str = Field(alias="type2faVerifiedId")
