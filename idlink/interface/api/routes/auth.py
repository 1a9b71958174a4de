"""Authentication routes."""

import logging
import secrets
from typing import Optional

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Cookie, HTTPException, Response, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from idlink.application.usecase.auth import (
    AuthenticateRequest,
    AuthenticateUseCase,
    GetCurrentUserUseCase,
    OAuthLoginRequest,
    OAuthLoginUseCase,
    RegisterRequest,
    RegisterUseCase,
    RequestPhoneCodeRequest,
    RequestPhoneCodeUseCase,
    VerifyPhoneRequest,
    VerifyPhoneUseCase,
)
from idlink.application.usecase.auth.get_current_user import GetCurrentUserRequest
from idlink.application.usecase.auth.phone import RequestPhoneCodeResponse
from idlink.config import Settings
from idlink.domain.error import AccountNotFoundError, AuthError
from idlink.domain.model import LinkCandidate, Principal
from idlink.domain.service import AuthService
from idlink.domain.value import AuthProvider, parse_credential
from idlink.util.jwt import JWTError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"], route_class=DishkaRoute)


class SignInRequest(BaseModel):
    """Sign-in form.

    method selects which of the remaining fields are read:
    "credentials" uses email, password and two_factor_code;
    "phone" uses phone_number and code.
    """

    method: str
    email: Optional[str] = None
    password: Optional[str] = None
    two_factor_code: Optional[str] = None
    phone_number: Optional[str] = None
    code: Optional[str] = None


class SessionResponse(BaseModel):
    """Signed-in session (the token itself travels in the cookie)."""

    principal: Principal
    created: bool = False
    auto_linked: bool = False


class RegisterAPIResponse(BaseModel):
    """Registration result."""

    user_id: str
    principal: Optional[Principal] = None
    phone_verification_required: bool = False
    link_candidates: list[LinkCandidate] = []


class InitiateLoginRequest(BaseModel):
    """Initiate OAuth login request."""

    provider: AuthProvider  # Which OAuth provider to use


class InitiateLoginResponse(BaseModel):
    """Initiate login response."""

    authorization_url: str


class LogoutResponse(BaseModel):
    """Logout response."""

    success: bool
    message: str


class AuthStatusResponse(BaseModel):
    """Response for checking authentication status.

    Used by /auth/me to return the current principal if authenticated,
    or indicate unauthenticated state without raising an error.
    """

    authenticated: bool
    principal: Principal | None = None


def set_auth_cookie(response: Response, token: str, settings: Settings) -> None:
    """Attach the session cookie to a response.

    Production runs the frontend on another subdomain, which needs
    samesite="none" and therefore secure=True. Development is same-origin
    over plain HTTP.
    """
    is_production = settings.environment == "production"
    response.set_cookie(
        key="auth_token",
        value=token,
        httponly=True,
        secure=is_production,
        samesite="none" if is_production else "lax",
        domain=settings.auth.cookie_domain,
        path="/",
        max_age=settings.auth.jwt_expiry_days * 24 * 60 * 60,
    )


def clear_auth_cookie(response: Response, settings: Settings) -> None:
    """Delete the session cookie with the same domain/path it was set with."""
    response.delete_cookie(
        key="auth_token", domain=settings.auth.cookie_domain, path="/"
    )


@router.post("/signin", response_model=SessionResponse)
async def sign_in(
    request: SignInRequest,
    response: Response,
    authenticate_use_case: FromDishka[AuthenticateUseCase],
    settings: FromDishka[Settings],
) -> SessionResponse:
    """Sign in with email/password (plus second factor) or phone + code.

    A 401 with error "two_factor_required" means the password was right and
    the form should be resubmitted with two_factor_code.

    Example:
        POST /auth/signin
        {
            "method": "credentials",
            "email": "alice@example.com",
            "password": "correct horse"
        }
    """
    try:
        credential = parse_credential(
            request.method, request.model_dump(exclude={"method"})
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    session = await authenticate_use_case.execute(
        AuthenticateRequest(credential=credential)
    )
    set_auth_cookie(response, session.token, settings)
    return SessionResponse(
        principal=session.principal,
        created=session.created,
        auto_linked=session.auto_linked,
    )


@router.post("/register", response_model=RegisterAPIResponse)
async def register(
    request: RegisterRequest,
    response: Response,
    register_use_case: FromDishka[RegisterUseCase],
    settings: FromDishka[Settings],
) -> RegisterAPIResponse:
    """Create an email/password or phone account.

    Email accounts are signed in immediately. Phone accounts get a code by
    SMS and finish through /auth/phone/verify.
    """
    result = await register_use_case.execute(request)
    if result.token:
        set_auth_cookie(response, result.token, settings)
    return RegisterAPIResponse(
        user_id=result.user_id,
        principal=result.principal,
        phone_verification_required=result.phone_verification_required,
        link_candidates=result.link_candidates,
    )


@router.post("/phone/code", response_model=RequestPhoneCodeResponse)
async def request_phone_code(
    request: RequestPhoneCodeRequest,
    request_phone_code_use_case: FromDishka[RequestPhoneCodeUseCase],
) -> RequestPhoneCodeResponse:
    """Send a one-time sign-in code by SMS."""
    return await request_phone_code_use_case.execute(request)


@router.post("/phone/verify", response_model=SessionResponse)
async def verify_phone(
    request: VerifyPhoneRequest,
    response: Response,
    verify_phone_use_case: FromDishka[VerifyPhoneUseCase],
    settings: FromDishka[Settings],
) -> SessionResponse:
    """Verify a phone number with its code and sign in."""
    session = await verify_phone_use_case.execute(request)
    set_auth_cookie(response, session.token, settings)
    return SessionResponse(principal=session.principal)


@router.post("/login", response_model=InitiateLoginResponse)
async def initiate_login(
    request: InitiateLoginRequest,
    auth_service: FromDishka[AuthService],
) -> InitiateLoginResponse:
    """Initiate an OAuth login flow.

    Example:
        POST /auth/login
        {
            "provider": "github"
        }

        Response:
        {
            "authorization_url": "https://github.com/login/oauth/authorize?..."
        }
    """
    logger.info(f"Initiating {request.provider.value} login")

    # State for CSRF protection, echoed back by the provider
    state = secrets.token_urlsafe(32)
    try:
        auth_url = await auth_service.initiate_login(request.provider, state)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return InitiateLoginResponse(authorization_url=auth_url)


@router.get("/callback/google")
async def google_callback(
    code: str,
    state: str,
    oauth_login_use_case: FromDishka[OAuthLoginUseCase],
    settings: FromDishka[Settings],
):
    """Handle the Google OAuth callback, set the session cookie and redirect."""
    return await _handle_oauth_callback(
        AuthProvider.GOOGLE, code, state, oauth_login_use_case, settings
    )


@router.get("/callback/github")
async def github_callback(
    code: str,
    state: str,
    oauth_login_use_case: FromDishka[OAuthLoginUseCase],
    settings: FromDishka[Settings],
):
    """Handle the GitHub OAuth callback, set the session cookie and redirect."""
    return await _handle_oauth_callback(
        AuthProvider.GITHUB, code, state, oauth_login_use_case, settings
    )


async def _handle_oauth_callback(
    provider: AuthProvider,
    code: str,
    state: str,
    oauth_login_use_case: OAuthLoginUseCase,
    settings: Settings,
) -> RedirectResponse:
    """Shared OAuth callback handler for all providers.

    Failures redirect to the frontend error page with the error kind; the
    browser is mid-redirect and cannot show a JSON body.
    """
    logger.info(f"OAuth callback received: provider={provider.value}")

    try:
        session = await oauth_login_use_case.execute(
            OAuthLoginRequest(provider=provider, code=code, state=state)
        )
    except AuthError as e:
        logger.warning(f"OAuth login failed: provider={provider.value}, kind={e.kind.value}")
        return RedirectResponse(
            url=f"{settings.api.frontend_url}/auth/error?error={e.kind.value}",
            status_code=status.HTTP_302_FOUND,
        )

    # Cookies must be set on the returned redirect, not an injected Response
    redirect_response = RedirectResponse(
        url=settings.api.frontend_url, status_code=status.HTTP_302_FOUND
    )
    set_auth_cookie(redirect_response, session.token, settings)
    logger.info(f"OAuth login succeeded for user {session.principal.id}")
    return redirect_response


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    response: Response,
    settings: FromDishka[Settings],
) -> LogoutResponse:
    """Logout user by clearing authentication cookie."""
    clear_auth_cookie(response, settings)
    return LogoutResponse(success=True, message="Successfully logged out")


@router.get("/me", response_model=AuthStatusResponse)
async def get_current_user(
    response: Response,
    get_current_user_use_case: FromDishka[GetCurrentUserUseCase],
    settings: FromDishka[Settings],
    auth_token: str | None = Cookie(default=None),
) -> AuthStatusResponse:
    """Get the current principal if authenticated.

    Safe to call without a session: returns authenticated=false instead of
    an error. When the group changed since sign-in (a merge or a
    deactivation) the cookie is replaced with a fresh token.
    """
    if not auth_token:
        return AuthStatusResponse(authenticated=False)

    try:
        result = await get_current_user_use_case.execute(
            GetCurrentUserRequest(token=auth_token)
        )
    except JWTError:
        # Invalid or expired token - this is expected behavior, not an error
        return AuthStatusResponse(authenticated=False)
    except AccountNotFoundError:
        # Token outlived its record
        clear_auth_cookie(response, settings)
        return AuthStatusResponse(authenticated=False)

    if result.refreshed_token:
        set_auth_cookie(response, result.refreshed_token, settings)
    return AuthStatusResponse(authenticated=True, principal=result.principal)
