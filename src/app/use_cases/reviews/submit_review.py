"""SubmitReview Use Case"""

from libs.result import Result, Return, Error
from src.app.repositories.venue_repository import VenueRepository
from src.app.services.entity_writer import EntityWriter
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.errors import error_from
from src.domain.errors import DomainError
from src.domain.moderation import ModerationStatus
from src.domain.outbox_event import FollowUpKind
from src.domain.review import Review
from .dtos import ReviewResponseDTO, SubmitReviewCommandDTO


class SubmitReview:
    """
    Use Case: Post a venue review

    Rating-only reviews are approved and counted immediately; reviews with a
    comment wait for the moderation verdict.
    """

    def __init__(self, uow: UnitOfWork, venue_repo: VenueRepository, writer: EntityWriter):
        self.uow = uow
        self.venue_repo = venue_repo
        self.writer = writer

    async def execute(self, command: SubmitReviewCommandDTO) -> Result[ReviewResponseDTO]:
        try:
            venue = await self.venue_repo.get_by_id(command.venue_id)
            if not venue or venue.deleted:
                return Return.err(Error(code="VENUE_NOT_FOUND", message=f"Venue {command.venue_id} not found"))

            review = Review(
                venue_id=venue.id,
                user_id=command.user_id,
                booking_id=command.booking_id,
                rating=command.rating,
                comment=command.comment,
                moderation_status=ModerationStatus.PENDING,
            )
            follow_ups = await self.writer.insert(review)
            await self.uow.commit()

            return Return.ok(
                ReviewResponseDTO(
                    review_id=review.id,
                    venue_id=venue.id,
                    rating=review.rating,
                    moderation_status=ModerationStatus(review.moderation_status).value,
                    venue_rating=venue.rating,
                    venue_review_count=venue.review_count,
                    follow_up_kinds=[event.kind.value for event in follow_ups],
                    notification_events=[
                        event.notification_type for event in follow_ups
                        if event.kind == FollowUpKind.NOTIFICATION
                    ],
                )
            )

        except DomainError as e:
            await self.uow.rollback()
            return Return.err(error_from(e))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(Error(code="SUBMIT_REVIEW_FAILED", message="Failed to submit review", reason=str(e)))
