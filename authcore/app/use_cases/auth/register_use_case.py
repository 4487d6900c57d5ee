import logging
from typing import Optional

from authcore.app.repositories.errors import DuplicateRecordError
from authcore.app.services.auth_services import AuthServices
from authcore.app.services.unit_of_work import UnitOfWork
from authcore.app.services.views import to_principal_view
from authcore.domain.entities import AuditEvent, User, UserStatus
from authcore.libs.result import Result, Return

from ..errors import EMAIL_CONFLICT, translate_store_errors
from ..validation import validate_credentials_format, validate_new_password
from .dtos import AuthResponse, RegisterCommand

logger = logging.getLogger(__name__)


class RegisterUseCase:
    """
    Register Use Case

    Command/Response Pattern:
    - Input: RegisterCommand (validated business intent)
    - Output: Result[AuthResponse] (principal plus token pair)

    Business Logic:
    1. Validate email shape and password strength
    2. Reject an existing (case-normalized) email with CONFLICT
    3. Hash password with bcrypt at the configured cost factor
    4. Create an active User with the default unprivileged role
    5. Issue a token pair and its Session (registration implies login)
    6. Record a register audit event and commit atomically
    """

    def __init__(self, uow: UnitOfWork, services: AuthServices):
        self.uow = uow
        self.services = services

    @translate_store_errors
    async def execute(
        self,
        command: RegisterCommand,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Result[AuthResponse]:
        format_check = validate_credentials_format(command.email, command.password)
        if format_check.is_err():
            return format_check
        email = format_check.value

        strength_check = validate_new_password(command.password)
        if strength_check.is_err():
            return strength_check

        async with self.uow:
            existing_user = await self.uow.users.get_by_email(email)
            if existing_user:
                return Return.err(EMAIL_CONFLICT)

            now = self.services.clock()
            user = User(
                email=email,
                password_hash=self.services.hasher.hash(command.password),
                status=UserStatus.active,
                roles=[self.services.settings.default_role],
                display_name=command.display_name,
                first_name=command.first_name,
                last_name=command.last_name,
                password_changed_at=now,
                last_login_at=now,
                created_at=now,
                updated_at=now,
            )
            try:
                user = await self.uow.users.create(user)
            except DuplicateRecordError:
                # Lost a race with a concurrent registration of the same email
                return Return.err(EMAIL_CONFLICT)

            issued = await self.services.issuer.issue(
                self.uow, user, ip_address=ip_address, user_agent=user_agent
            )

            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=user.id,
                    action="register",
                    event_metadata={
                        "email": email,
                        "session_id": str(issued.session.id),
                        "ip_address": ip_address,
                    },
                )
            )

            await self.uow.commit()

            logger.info("user_registered user_id=%s", user.id)

            return Return.ok(
                AuthResponse(
                    access_token=issued.access_token,
                    refresh_token=issued.refresh_token,
                    session_id=str(issued.session.id),
                    user=to_principal_view(user),
                )
            )
