from typing import Optional

from fastapi import APIRouter, Cookie, Depends, Request, Response, status
from pydantic import BaseModel, EmailStr, Field

from authcore.api.error import raise_for_error
from authcore.api.utils.admin_auth import verify_admin_api_key
from authcore.api.utils.cookies import attach_refresh_cookie, clear_refresh_cookie
from authcore.app.services.auth_services import AuthServices
from authcore.app.services.token_codec import TokenClaims
from authcore.app.services.unit_of_work import UnitOfWork
from authcore.app.services.views import PrincipalView
from authcore.app.use_cases.auth import (
    AuthResponse,
    ChangePasswordResponse,
    ChangePasswordUseCase,
    ConfirmPasswordResetResponse,
    ConfirmPasswordResetUseCase,
    ExternalProfile,
    LoginUseCase,
    LogoutResponse,
    LogoutUseCase,
    OAuthLoginUseCase,
    RefreshTokenUseCase,
    RegisterCommand,
    RegisterUseCase,
    RequestPasswordResetResponse,
    RequestPasswordResetUseCase,
)
from authcore.app.use_cases.sessions import RevokeAllSessionsResponse, RevokeSessionsUseCase
from authcore.app.use_cases.users import LoadContextUseCase
from authcore.depends import get_auth_services, get_current_user, get_unit_of_work
from config import ApplicationConfig

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _client_info(request: Request):
    ip_address = request.client.host if request.client else None
    return ip_address, request.headers.get("user-agent")


class TokenResponse(BaseModel):
    """
    Auth response body. The refresh token travels only in the HttpOnly
    cookie, never in JSON.
    """

    access_token: str
    session_id: str
    user: PrincipalView


def _token_response(
    response: Response, services: AuthServices, auth: AuthResponse
) -> TokenResponse:
    max_age = int(services.settings.refresh_token_ttl.total_seconds())
    attach_refresh_cookie(response, auth.refresh_token, max_age)
    return TokenResponse(
        access_token=auth.access_token, session_id=auth.session_id, user=auth.user
    )


class RegisterRequest(BaseModel):
    """
    Register HTTP request payload

    Validates incoming HTTP request before converting to RegisterCommand.
    """

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=8, description="User password (min 8 chars)")
    display_name: Optional[str] = Field(default=None, max_length=255)
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=TokenResponse)
async def register(
    body: RegisterRequest,
    request: Request,
    response: Response,
    uow: UnitOfWork = Depends(get_unit_of_work),
    services: AuthServices = Depends(get_auth_services),
):
    """
    User Registration

    Creates an active principal with the default role and logs it in.

    Raises:
        - 409 Conflict: Email already registered
        - 422 Unprocessable Entity: Invalid input
        - 500 Internal Server Error: Store failure
    """
    command = RegisterCommand(
        email=body.email,
        password=body.password,
        display_name=body.display_name,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    ip_address, user_agent = _client_info(request)

    use_case = RegisterUseCase(uow, services)
    result = await use_case.execute(command, ip_address=ip_address, user_agent=user_agent)

    if result.is_err():
        raise_for_error(result.error)

    return _token_response(response, services, result.value)


class LoginRequest(BaseModel):
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., description="User password")


@router.post("/login", status_code=status.HTTP_200_OK, response_model=TokenResponse)
async def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    uow: UnitOfWork = Depends(get_unit_of_work),
    services: AuthServices = Depends(get_auth_services),
):
    """
    User Login

    Raises:
        - 401 Unauthorized: Invalid credentials
        - 403 Forbidden: Account inactive
        - 423 Locked: Too many failed attempts
        - 500 Internal Server Error: Store failure
    """
    ip_address, user_agent = _client_info(request)

    use_case = LoginUseCase(uow, services)
    result = await use_case.execute(
        body.email, body.password, ip_address=ip_address, user_agent=user_agent
    )

    if result.is_err():
        raise_for_error(result.error)

    return _token_response(response, services, result.value)


class RefreshRequest(BaseModel):
    refresh_token: Optional[str] = Field(
        default=None, description="Refresh token, when not sent as cookie"
    )


@router.post("/refresh", status_code=status.HTTP_200_OK, response_model=TokenResponse)
async def refresh(
    request: Request,
    response: Response,
    body: Optional[RefreshRequest] = None,
    refresh_cookie: Optional[str] = Cookie(
        default=None, alias=ApplicationConfig.REFRESH_COOKIE_NAME
    ),
    uow: UnitOfWork = Depends(get_unit_of_work),
    services: AuthServices = Depends(get_auth_services),
):
    """
    Rotate Refresh Token

    Exchanges a refresh token (body or cookie) for a new pair. The old token
    is dead afterwards; presenting it again revokes every session of its
    owner.

    Raises:
        - 401 Unauthorized: Invalid, reused or expired token
        - 403 Forbidden: Account inactive
        - 500 Internal Server Error: Store failure
    """
    refresh_token = (body.refresh_token if body else None) or refresh_cookie
    ip_address, user_agent = _client_info(request)

    use_case = RefreshTokenUseCase(uow, services)
    result = await use_case.execute(
        refresh_token, ip_address=ip_address, user_agent=user_agent
    )

    if result.is_err():
        raise_for_error(result.error)

    return _token_response(response, services, result.value)


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=LogoutResponse)
async def logout(
    response: Response,
    body: Optional[RefreshRequest] = None,
    refresh_cookie: Optional[str] = Cookie(
        default=None, alias=ApplicationConfig.REFRESH_COOKIE_NAME
    ),
    uow: UnitOfWork = Depends(get_unit_of_work),
    services: AuthServices = Depends(get_auth_services),
):
    """Revoke the session behind the refresh token and clear the cookie"""
    refresh_token = (body.refresh_token if body else None) or refresh_cookie

    use_case = LogoutUseCase(uow, services)
    result = await use_case.execute(refresh_token)

    if result.is_err():
        raise_for_error(result.error)

    clear_refresh_cookie(response)
    return result.value


@router.post(
    "/logout-all", status_code=status.HTTP_200_OK, response_model=RevokeAllSessionsResponse
)
async def logout_all(
    response: Response,
    current_user: TokenClaims = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    services: AuthServices = Depends(get_auth_services),
):
    """Revoke every session of the current principal"""
    use_case = RevokeSessionsUseCase(uow, services)
    result = await use_case.revoke_all(current_user.subject)

    if result.is_err():
        raise_for_error(result.error)

    clear_refresh_cookie(response)
    return result.value


@router.get("/me", status_code=status.HTTP_200_OK, response_model=PrincipalView)
async def me(
    current_user: TokenClaims = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Current Principal

    Raises:
        - 401 Unauthorized: Missing, invalid or expired access token
        - 403 Forbidden: Account inactive
        - 404 Not Found: Principal no longer exists
    """
    use_case = LoadContextUseCase(uow)
    result = await use_case.execute(current_user.subject)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., description="Current password")
    new_password: str = Field(..., min_length=8, description="New password (min 8 chars)")


@router.post(
    "/change-password", status_code=status.HTTP_200_OK, response_model=ChangePasswordResponse
)
async def change_password(
    body: ChangePasswordRequest,
    response: Response,
    current_user: TokenClaims = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    services: AuthServices = Depends(get_auth_services),
):
    """
    Change Password

    Every session of the principal is revoked, so the client must log in
    again.

    Raises:
        - 401 Unauthorized: Wrong current password
        - 422 Unprocessable Entity: New password too short
    """
    use_case = ChangePasswordUseCase(uow, services)
    result = await use_case.execute(
        current_user.subject, body.current_password, body.new_password
    )

    if result.is_err():
        raise_for_error(result.error)

    clear_refresh_cookie(response)
    return result.value


class RequestPasswordResetRequest(BaseModel):
    email: EmailStr = Field(..., description="User email address")


@router.post(
    "/password-reset/request",
    status_code=status.HTTP_200_OK,
    response_model=RequestPasswordResetResponse,
)
async def request_password_reset(
    body: RequestPasswordResetRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    services: AuthServices = Depends(get_auth_services),
):
    """
    Request Password Reset

    Same response whether or not the email exists.
    """
    use_case = RequestPasswordResetUseCase(uow, services)
    result = await use_case.execute(body.email)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


class ConfirmPasswordResetRequest(BaseModel):
    token: str = Field(..., description="Password reset token")
    new_password: str = Field(..., min_length=8, description="New password (min 8 chars)")


@router.post(
    "/password-reset/confirm",
    status_code=status.HTTP_200_OK,
    response_model=ConfirmPasswordResetResponse,
)
async def confirm_password_reset(
    body: ConfirmPasswordResetRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    services: AuthServices = Depends(get_auth_services),
):
    """
    Confirm Password Reset

    Raises:
        - 401 Unauthorized: Invalid, used or expired token
        - 422 Unprocessable Entity: New password too short
    """
    use_case = ConfirmPasswordResetUseCase(uow, services)
    result = await use_case.execute(body.token, body.new_password)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post(
    "/external-login",
    status_code=status.HTTP_200_OK,
    response_model=TokenResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def external_login(
    profile: ExternalProfile,
    request: Request,
    response: Response,
    uow: UnitOfWork = Depends(get_unit_of_work),
    services: AuthServices = Depends(get_auth_services),
):
    """
    External Identity Login

    Called by the trusted identity-provider adapter after it completed the
    provider handshake; the profile it posts is taken as verified.

    Requires: X-Admin-API-Key header

    Raises:
        - 401 Unauthorized: Missing admin key, or profile without email
        - 403 Forbidden: Account inactive
    """
    ip_address, user_agent = _client_info(request)

    use_case = OAuthLoginUseCase(uow, services)
    result = await use_case.execute(profile, ip_address=ip_address, user_agent=user_agent)

    if result.is_err():
        raise_for_error(result.error)

    return _token_response(response, services, result.value)
