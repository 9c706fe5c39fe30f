"""UpdateVenue Use Case"""

from libs.result import Result, Return, Error
from src.app.repositories.venue_repository import VenueRepository
from src.app.services.entity_writer import EntityWriter
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.errors import error_from
from src.domain.errors import DomainError
from .dtos import CatalogUpdateResultDTO, UpdateVenueCommandDTO


class UpdateVenue:
    """
    Use Case: Edit a venue

    The write cascades its snapshot into scheduled class instances and, on an
    address change, enqueues geocoding. A failed cascade rejects the edit.
    """

    def __init__(self, uow: UnitOfWork, venue_repo: VenueRepository, writer: EntityWriter):
        self.uow = uow
        self.venue_repo = venue_repo
        self.writer = writer

    async def execute(self, command: UpdateVenueCommandDTO) -> Result[CatalogUpdateResultDTO]:
        try:
            venue = await self.venue_repo.get_by_id(command.venue_id)
            if not venue:
                return Return.err(Error(code="VENUE_NOT_FOUND", message=f"Venue {command.venue_id} not found"))

            changes = command.model_dump(exclude_unset=True, exclude={"venue_id"})
            if "address" in changes:
                changes["address"] = {**(venue.address or {}), **(changes["address"] or {})}

            follow_ups = await self.writer.patch(venue, changes)
            await self.uow.commit()

            return Return.ok(
                CatalogUpdateResultDTO(
                    entity_id=venue.id,
                    updated_fields=sorted(changes),
                    follow_up_kinds=[event.kind.value for event in follow_ups],
                )
            )

        except DomainError as e:
            await self.uow.rollback()
            return Return.err(error_from(e))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(Error(code="UPDATE_VENUE_FAILED", message="Failed to update venue", reason=str(e)))
