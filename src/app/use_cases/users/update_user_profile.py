"""UpdateUserProfile Use Case"""

import logging
from libs.result import Result, Return, Error
from src.app.repositories.user_repository import UserRepository
from src.app.services.entity_writer import EntityWriter
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.errors import error_from
from src.domain.errors import DomainError, ErrorCodes
from .dtos import UpdateUserProfileCommandDTO, UserProfileDTO

logger = logging.getLogger(__name__)


class UpdateUserProfile:
    """
    Use Case: Edit a consumer profile

    Business Rules:
    1. has_consumer_onboarded never goes back to False
    2. Onboarding grants the welcome bonus in the same unit of work
    3. A new profile image is sent to moderation
    """

    def __init__(self, uow: UnitOfWork, user_repo: UserRepository, writer: EntityWriter):
        self.uow = uow
        self.user_repo = user_repo
        self.writer = writer

    async def execute(self, command: UpdateUserProfileCommandDTO) -> Result[UserProfileDTO]:
        try:
            user = await self.user_repo.get_by_id(command.user_id, for_update=True)
            if not user:
                return Return.err(Error(code=ErrorCodes.USER_NOT_FOUND, message=f"User {command.user_id} not found"))

            changes = command.model_dump(exclude_unset=True, exclude={"user_id"})
            if changes.get("has_consumer_onboarded") is False and user.has_consumer_onboarded:
                changes.pop("has_consumer_onboarded")

            follow_ups = await self.writer.patch(user, changes)
            await self.uow.commit()

            return Return.ok(
                UserProfileDTO(
                    user_id=user.id,
                    name=user.name,
                    has_consumer_onboarded=user.has_consumer_onboarded,
                    points=user.points,
                    profile_image_id=user.profile_image_id,
                    profile_image_moderation_status=(
                        user.profile_image_moderation_status.value
                        if user.profile_image_moderation_status else None
                    ),
                    follow_up_kinds=[event.kind.value for event in follow_ups],
                )
            )

        except DomainError as e:
            await self.uow.rollback()
            return Return.err(error_from(e))

        except Exception as e:
            await self.uow.rollback()
            logger.exception(f"Profile update for user {command.user_id} failed")
            return Return.err(
                Error(code="UPDATE_USER_PROFILE_FAILED", message="Failed to update user profile", reason=str(e))
            )
