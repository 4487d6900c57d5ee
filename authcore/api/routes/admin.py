"""
Admin API Routes - Maintenance Endpoints

On-demand session cleanup for operators and external schedulers.
Authentication is via Admin API Key, not principal tokens.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from authcore.api.error import raise_for_error
from authcore.api.utils.admin_auth import verify_admin_api_key
from authcore.app.services.auth_services import AuthServices
from authcore.app.services.unit_of_work import UnitOfWork
from authcore.app.use_cases.sessions import CleanupResponse, CleanupSessionsUseCase
from authcore.depends import get_auth_services, get_unit_of_work

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post(
    "/sessions/cleanup-expired",
    status_code=status.HTTP_200_OK,
    response_model=CleanupResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def cleanup_expired_sessions(
    uow: UnitOfWork = Depends(get_unit_of_work),
    services: AuthServices = Depends(get_auth_services),
):
    """
    Delete Expired Sessions

    Requires: X-Admin-API-Key header
    """
    use_case = CleanupSessionsUseCase(uow, services)
    result = await use_case.cleanup_expired()

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post(
    "/sessions/cleanup-revoked",
    status_code=status.HTTP_200_OK,
    response_model=CleanupResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def cleanup_revoked_sessions(
    retention_days: Optional[int] = Query(default=None, ge=0),
    uow: UnitOfWork = Depends(get_unit_of_work),
    services: AuthServices = Depends(get_auth_services),
):
    """
    Delete Old Revoked Sessions

    Revoked sessions younger than retention_days (default from config) are
    kept for incident review.

    Requires: X-Admin-API-Key header
    """
    use_case = CleanupSessionsUseCase(uow, services)
    result = await use_case.cleanup_old_revoked(retention_days)

    if result.is_err():
        raise_for_error(result.error)

    return result.value
