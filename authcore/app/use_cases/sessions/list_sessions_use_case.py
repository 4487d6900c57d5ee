from uuid import UUID

from authcore.app.services.auth_services import AuthServices
from authcore.app.services.unit_of_work import UnitOfWork
from authcore.app.services.views import to_session_view
from authcore.libs.result import Result, Return

from ..errors import translate_store_errors
from .dtos import SessionListResponse


class ListSessionsUseCase:
    """Live (non-revoked, unexpired) sessions of a principal, newest first"""

    def __init__(self, uow: UnitOfWork, services: AuthServices):
        self.uow = uow
        self.services = services

    @translate_store_errors
    async def execute(self, owner_id: UUID) -> Result[SessionListResponse]:
        async with self.uow:
            sessions = await self.uow.sessions.list_active_by_user_id(
                owner_id, self.services.clock()
            )
            return Return.ok(
                SessionListResponse(sessions=[to_session_view(s) for s in sessions])
            )
