"""
Load Context Use Case

Loads the current principal from access-token claims.
"""

from uuid import UUID

from authcore.app.services.unit_of_work import UnitOfWork
from authcore.app.services.views import PrincipalView, to_principal_view
from authcore.libs.result import Result, Return

from ..errors import ACCOUNT_INACTIVE, USER_NOT_FOUND, translate_store_errors


class LoadContextUseCase:
    """
    Use case for loading the current principal.

    Business Rules:
    - Access token subject provides user_id
    - User must exist (NOT_FOUND)
    - User must be active (ACCOUNT_INACTIVE)
    - Returns the sanitized principal view
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    @translate_store_errors
    async def execute(self, user_id: UUID) -> Result[PrincipalView]:
        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(USER_NOT_FOUND)

            if not user.is_active:
                return Return.err(ACCOUNT_INACTIVE)

            return Return.ok(to_principal_view(user))
