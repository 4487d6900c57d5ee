from uuid import UUID

from fastapi import APIRouter, Depends, status

from authcore.api.error import raise_for_error
from authcore.app.services.auth_services import AuthServices
from authcore.app.services.token_codec import TokenClaims
from authcore.app.services.unit_of_work import UnitOfWork
from authcore.app.use_cases.sessions import (
    ListSessionsUseCase,
    RevokeSessionResponse,
    RevokeSessionsUseCase,
    SessionListResponse,
)
from authcore.depends import get_auth_services, get_current_user, get_unit_of_work

router = APIRouter(prefix="/sessions", tags=["Sessions"])


@router.get("", status_code=status.HTTP_200_OK, response_model=SessionListResponse)
async def list_sessions(
    current_user: TokenClaims = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    services: AuthServices = Depends(get_auth_services),
):
    """Live sessions of the current principal, newest first"""
    use_case = ListSessionsUseCase(uow, services)
    result = await use_case.execute(current_user.subject)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.delete(
    "/{session_id}",
    status_code=status.HTTP_200_OK,
    response_model=RevokeSessionResponse,
)
async def revoke_session(
    session_id: UUID,
    current_user: TokenClaims = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    services: AuthServices = Depends(get_auth_services),
):
    """
    Revoke Specific Session

    Authorization:
    - Only sessions owned by the current principal

    Raises:
        - 404 Not Found: Session absent or owned by someone else
        - 500 Internal Server Error: Store failure
    """
    use_case = RevokeSessionsUseCase(uow, services)
    result = await use_case.revoke_session(current_user.subject, session_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value
