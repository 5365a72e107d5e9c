"""
Verification code wire models: one endpoint, two request shapes.

POST sends a code (``SendCodeRequest``), PUT confirms it
(``ConfirmCodeRequest``).
"""

from enum import Enum
from typing import Optional, Union

from safal_auth.models.envelope import WireModel


class ContactKind(str, Enum):
    EMAIL = "Email"
    PHONE_NUMBER = "PhoneNumber"


class SendCodeRequest(WireModel):
    type: ContactKind
    value: str
    user_check: bool


class ConfirmCodeRequest(WireModel):
    otp: str
    verify_id: str
    value: str


CodeRequest = Union[SendCodeRequest, ConfirmCodeRequest]


class VerificationData(WireModel):
    verify_id: Optional[str] = None


class VerificationResponse(WireModel):
    message: Optional[str] = None
    success: Optional[bool] = None
    status_code: Optional[int] = None
    verify_id: Optional[str] = None
    data: Optional[VerificationData] = None

    @property
    def resolved_verify_id(self) -> Optional[str]:
        # Reset-password codes nest the id under data
        if self.verify_id:
            return self.verify_id
        return self.data.verify_id if self.data else None


class ResetPasswordRequest(WireModel):
    email: str
    verify_id: str
    otp: str
    new_password: str


class ResetPasswordResponse(WireModel):
    message: Optional[str] = None
    success: Optional[bool] = None
    status_code: Optional[int] = None
