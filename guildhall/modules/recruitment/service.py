"""
RecruitmentService - applications to join the guild
====================================================

Handles:
- Recruits submitting an application
- The officer queue of pending applications
- Reviewing an application (approve or reject, exactly once)

Approval promotes the applicant from recruit to member in the same
transaction. Applicants who already hold a higher rank keep it.

Events:
- recruitment.application_created
- recruitment.application_reviewed
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Type

from guildhall.core.database.base import utc_now
from guildhall.core.database.service import DatabaseService
from guildhall.core.validation.input_validator import InputValidator
from guildhall.database.models import GuildRole, RecruitmentApplication, ReviewStatus, User
from guildhall.modules.recruitment.records import ApplicationRecord
from guildhall.modules.shared.base_repository import BaseRepository
from guildhall.modules.shared.base_service import BaseService
from guildhall.modules.shared.constants import (
    APPLICATION_TEXT_MAX_LENGTH,
    APPLICATION_TEXT_MIN_LENGTH,
)
from guildhall.modules.shared.exceptions import ConflictError, NotFoundError
from guildhall.modules.shared.review import validate_decision

if TYPE_CHECKING:
    from logging import Logger

    from guildhall.core.config.config import Config
    from guildhall.core.event.bus import EventBus


class RecruitmentService(BaseService):
    """
    Recruitment application workflow.

    Business Logic:
    - One pending application per user at a time
    - Only pending applications can be reviewed
    - Approval promotes a recruit to member
    """

    def __init__(
        self,
        config: Type[Config],
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        super().__init__(config, event_bus, logger)
        self._application_repo = BaseRepository[RecruitmentApplication](
            RecruitmentApplication, self.log
        )
        self._user_repo = BaseRepository[User](User, self.log)

    async def create_application(self, user_id: int, application_text: str) -> ApplicationRecord:
        """
        Submit an application with status pending.

        Raises:
            ValidationError: Text shorter than 50 or longer than 1000 characters
            NotFoundError: User does not exist
            ConflictError: User already has a pending application
        """
        user_id = InputValidator.validate_id(user_id, "user_id")
        application_text = InputValidator.validate_string(
            application_text,
            "application_text",
            min_length=APPLICATION_TEXT_MIN_LENGTH,
            max_length=APPLICATION_TEXT_MAX_LENGTH,
        )

        async with DatabaseService.get_transaction() as session:
            # Locking the applicant serializes concurrent submissions by one user
            user = await self._user_repo.get_for_update(session, user_id)
            if user is None:
                raise NotFoundError(
                    "User", user_id, message=f"User with id {user_id} does not exist"
                )

            if await self._application_repo.exists(
                session,
                RecruitmentApplication.user_id == user_id,
                RecruitmentApplication.status == ReviewStatus.PENDING.value,
            ):
                raise ConflictError(
                    "create_application",
                    "User already has a pending application",
                    details={"user_id": user_id},
                )

            application = self._application_repo.add(
                session,
                RecruitmentApplication(
                    user_id=user_id,
                    application_text=application_text,
                    status=ReviewStatus.PENDING.value,
                ),
            )
            await self._application_repo.flush(session)
            record = ApplicationRecord.from_model(application)

        self.log_operation("create_application", application_id=record.id, user_id=user_id)
        await self.emit_event(
            "recruitment.application_created",
            {"application_id": record.id, "user_id": user_id},
        )
        return record

    async def get_pending_applications(self) -> List[ApplicationRecord]:
        """Applications awaiting review, oldest first."""
        async with DatabaseService.get_session() as session:
            applications = await self._application_repo.find_many_where(
                session,
                RecruitmentApplication.status == ReviewStatus.PENDING.value,
                order_by=(RecruitmentApplication.created_at, RecruitmentApplication.id),
            )
            return [ApplicationRecord.from_model(a) for a in applications]

    async def review_application(
        self,
        application_id: int,
        status: Any,
        reviewed_by: int,
    ) -> ApplicationRecord:
        """
        Approve or reject a pending application.

        Raises:
            ValidationError: Status is not approved/rejected, or malformed ids
            NotFoundError: Application or reviewer does not exist
            ConflictError: Application was already reviewed
        """
        application_id = InputValidator.validate_id(application_id, "application_id")
        decision = validate_decision(status)
        reviewed_by = InputValidator.validate_id(reviewed_by, "reviewed_by")

        promoted = False
        async with DatabaseService.get_transaction() as session:
            application = await self._application_repo.get_for_update(session, application_id)
            if application is None:
                raise NotFoundError(
                    "RecruitmentApplication",
                    application_id,
                    message="Recruitment application not found",
                )

            if application.status != ReviewStatus.PENDING.value:
                raise ConflictError(
                    "review_application",
                    "Application has already been reviewed",
                    details={"application_id": application_id, "status": application.status},
                )

            if not await self._user_repo.exists(session, User.id == reviewed_by):
                raise NotFoundError("User", reviewed_by, message="Reviewer not found")

            application.status = decision.value
            application.reviewed_by = reviewed_by
            application.reviewed_at = utc_now()

            if decision is ReviewStatus.APPROVED:
                applicant = await self._user_repo.get_for_update(session, application.user_id)
                if applicant is not None and applicant.guild_role == GuildRole.RECRUIT.value:
                    applicant.guild_role = GuildRole.MEMBER.value
                    promoted = True

            await self._application_repo.flush(session)
            record = ApplicationRecord.from_model(application)

        self.log_operation(
            "review_application",
            application_id=application_id,
            status=decision.value,
            reviewed_by=reviewed_by,
            promoted=promoted,
        )
        await self.emit_event(
            "recruitment.application_reviewed",
            {
                "application_id": application_id,
                "user_id": record.user_id,
                "status": decision.value,
                "reviewed_by": reviewed_by,
                "promoted": promoted,
            },
        )
        return record
