"""Authentication use cases."""

from .authenticate import AuthenticateRequest, AuthenticateResponse, AuthenticateUseCase
from .get_current_user import GetCurrentUserUseCase
from .oauth_login import OAuthLoginRequest, OAuthLoginUseCase
from .phone import (
    RequestPhoneCodeRequest,
    RequestPhoneCodeUseCase,
    VerifyPhoneRequest,
    VerifyPhoneUseCase,
)
from .register import RegisterRequest, RegisterResponse, RegisterUseCase

__all__ = [
    "AuthenticateRequest",
    "AuthenticateResponse",
    "AuthenticateUseCase",
    "GetCurrentUserUseCase",
    "OAuthLoginRequest",
    "OAuthLoginUseCase",
    "RegisterRequest",
    "RegisterResponse",
    "RegisterUseCase",
    "RequestPhoneCodeRequest",
    "RequestPhoneCodeUseCase",
    "VerifyPhoneRequest",
    "VerifyPhoneUseCase",
]
