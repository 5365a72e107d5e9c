"""
safal-auth: sign-in and session SDK for the Safal clinical apps.

Credential and organization sign-in, email/phone two-factor verification,
password reset and session cookie persistence over the Safal REST backend.
"""

from safal_auth.client import SafalAuth, AsyncSafalAuth
from safal_auth.config import ClientSettings
from safal_auth.login import AuthState, LoginFlow, TwoFactorChallenge
from safal_auth.password_reset import PasswordResetFlow
from safal_auth.store import CredentialStore, JsonFileStore, MemoryStore
from safal_auth.models.verification import ContactKind
from safal_auth.errors import (
    SafalError,
    FlowStateError,
    NetworkError,
    ErrorKind,
    ApiError,
    ServerError,
    NoInternetError,
)

__version__ = "0.1.0"
__all__ = [
    "SafalAuth",
    "AsyncSafalAuth",
    "ClientSettings",
    "AuthState",
    "LoginFlow",
    "TwoFactorChallenge",
    "PasswordResetFlow",
    "CredentialStore",
    "JsonFileStore",
    "MemoryStore",
    "ContactKind",
    "SafalError",
    "FlowStateError",
    "NetworkError",
    "ErrorKind",
    "ApiError",
    "ServerError",
    "NoInternetError",
]
