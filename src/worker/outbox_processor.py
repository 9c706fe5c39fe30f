"""Outbox Processing Background Worker

Drains pending follow-up events written by change propagation: delivers
notifications, asks the moderation and geocoding oracles for verdicts and
writes them back through the entity writer, so a review approval re-enters
propagation like any other write.
Can be run as a standalone script or integrated with a scheduler.
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.repositories.outbox_repository import SqlAlchemyOutboxRepository
from src.adapter.services.notification_service import create_notification_dispatcher
from src.adapter.services.oracles import AutoApproveModerationOracle, create_geocoding_oracle
from src.app.services.notification_service import NotificationDispatcher
from src.app.services.oracles import GeocodingOracle, ModerationOracle
from src.depends import Services
from src.domain.moderation import ModerationStatus
from src.domain.notification import NotificationEvent
from src.domain.outbox_event import FollowUpKind, OutboxEvent, OutboxStatus

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3


class OutboxRunResultDTO(BaseModel):
    events_checked: int
    completed: int
    retried: int
    failed: int


class NotificationDeliveryError(Exception):
    """Dispatcher reported that a notification was not delivered"""


class OutboxProcessorWorker:
    """
    Background worker for outbox follow-ups

    Features:
    - Each event is handled in its own session; its writes and its status
      commit together
    - Failed events are retried on later runs until max_attempts, then marked
      FAILED and left alone
    - Stale events (the entity changed again since) complete without effect

    Usage:
        worker = OutboxProcessorWorker()
        result = await worker.run_once()

        await worker.run_forever(interval_seconds=5)
    """

    def __init__(
        self,
        db_uri: Optional[str] = None,
        session_factory=None,
        dispatcher: Optional[NotificationDispatcher] = None,
        moderation_oracle: Optional[ModerationOracle] = None,
        geocoding_oracle: Optional[GeocodingOracle] = None,
        batch_size: Optional[int] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        self.engine = None
        if session_factory is None:
            self.engine = create_async_engine(db_uri or ApplicationConfig.DB_URI, echo=False, future=True)
            session_factory = sessionmaker(
                self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
            )
        self.async_session_factory = session_factory

        self.dispatcher = dispatcher or create_notification_dispatcher(ApplicationConfig.NOTIFICATION_WEBHOOK_URL)
        self.moderation_oracle = moderation_oracle or AutoApproveModerationOracle()
        self.geocoding_oracle = geocoding_oracle or create_geocoding_oracle(ApplicationConfig.GEOCODING_URL)
        self.batch_size = batch_size or ApplicationConfig.OUTBOX_BATCH_SIZE
        self.max_attempts = max_attempts

        logger.info("OutboxProcessorWorker initialized")

    async def run_once(self) -> OutboxRunResultDTO:
        async with self.async_session_factory() as session:
            pending = await SqlAlchemyOutboxRepository(session).list_pending(self.batch_size)
            event_ids = [event.id for event in pending]

        completed = retried = failed = 0
        for event_id in event_ids:
            status = await self.process_event(event_id)
            if status == OutboxStatus.COMPLETED:
                completed += 1
            elif status == OutboxStatus.FAILED:
                failed += 1
            else:
                retried += 1

        return OutboxRunResultDTO(
            events_checked=len(event_ids),
            completed=completed,
            retried=retried,
            failed=failed,
        )

    async def process_event(self, event_id: str) -> Optional[OutboxStatus]:
        async with self.async_session_factory() as session:
            services = Services(session)
            outbox_repo = SqlAlchemyOutboxRepository(session)

            event = await outbox_repo.get_by_id(event_id)
            if event is None or event.status != OutboxStatus.PENDING:
                return None

            try:
                await self._handle(event, services)
                event.status = OutboxStatus.COMPLETED
                event.processed_at = datetime.utcnow()
                event.error = None
            except Exception as e:
                await session.rollback()
                event = await outbox_repo.get_by_id(event_id)
                event.attempts += 1
                event.error = str(e)
                if event.attempts >= self.max_attempts:
                    event.status = OutboxStatus.FAILED
                    event.processed_at = datetime.utcnow()
                    logger.error(f"Outbox event {event.id} ({event.kind.value}) failed permanently: {e}")
                else:
                    logger.warning(
                        f"Outbox event {event.id} ({event.kind.value}) failed, "
                        f"attempt {event.attempts}/{self.max_attempts}: {e}"
                    )

            status = event.status
            await outbox_repo.update(event)
            await services.uow.commit()
            return status

    async def _handle(self, event: OutboxEvent, services: Services) -> None:
        if event.kind == FollowUpKind.NOTIFICATION:
            await self._deliver_notification(event)
        elif event.kind == FollowUpKind.REVIEW_MODERATION:
            await self._moderate_review(event, services)
        elif event.kind == FollowUpKind.PROFILE_IMAGE_MODERATION:
            await self._moderate_profile_image(event, services)
        elif event.kind == FollowUpKind.VENUE_GEOCODING:
            await self._geocode_venue(event, services)
        else:
            raise ValueError(f"Unknown follow-up kind {event.kind}")

    async def _deliver_notification(self, event: OutboxEvent) -> None:
        notification = NotificationEvent.model_validate(event.payload)
        if not await self.dispatcher.dispatch(notification):
            raise NotificationDeliveryError(f"{notification.type.value} to {notification.recipient} not delivered")

    async def _moderate_review(self, event: OutboxEvent, services: Services) -> None:
        review = await services.review_repo.get_by_id(event.payload["review_id"])
        if not review or review.deleted or review.moderation_status != ModerationStatus.PENDING:
            logger.info(f"Skipping stale review moderation {event.id}")
            return

        verdict = await self.moderation_oracle.moderate_text(review.comment or "")
        if verdict != ModerationStatus.PENDING:
            await services.writer.patch(review, {"moderation_status": verdict})
            logger.info(f"Review {review.id} moderated: {verdict.value}")

    async def _moderate_profile_image(self, event: OutboxEvent, services: Services) -> None:
        user = await services.user_repo.get_by_id(event.payload["user_id"])
        if not user or user.profile_image_id != event.payload.get("image_id"):
            logger.info(f"Skipping stale profile image moderation {event.id}")
            return

        verdict = await self.moderation_oracle.moderate_image(user.profile_image_id)
        if verdict != user.profile_image_moderation_status:
            await services.writer.patch(user, {"profile_image_moderation_status": verdict})

    async def _geocode_venue(self, event: OutboxEvent, services: Services) -> None:
        venue = await services.venue_repo.get_by_id(event.payload["venue_id"])
        if not venue or venue.deleted or venue.full_address() != event.payload.get("address"):
            logger.info(f"Skipping stale venue geocoding {event.id}")
            return

        coordinates = await self.geocoding_oracle.geocode(venue.full_address())
        if coordinates is None:
            logger.warning(f"No coordinates found for venue {venue.id}")
            return

        latitude, longitude = coordinates
        await services.writer.patch(venue, {"latitude": latitude, "longitude": longitude})

    async def run_forever(self, interval_seconds: int = 5):
        logger.info(f"Starting outbox processing with {interval_seconds}s interval")

        while True:
            try:
                result = await self.run_once()
                if result.events_checked:
                    logger.info(
                        f"Outbox cycle complete. Checked {result.events_checked} events: "
                        f"{result.completed} completed, {result.retried} to retry, {result.failed} failed"
                    )
            except Exception as e:
                logger.error(f"Outbox cycle failed: {e}")

            await asyncio.sleep(interval_seconds)

    async def shutdown(self):
        if self.engine is not None:
            await self.engine.dispose()
        logger.info("OutboxProcessorWorker shutdown complete")


async def main():
    """
    Entry point for running the worker as a standalone script

    Usage:
        python -m src.worker.outbox_processor --once
        python -m src.worker.outbox_processor --interval 10
    """
    import argparse

    logging.basicConfig(
        level=ApplicationConfig.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Outbox Processing Worker")
    parser.add_argument("--once", action="store_true", help="Run once and exit")
    parser.add_argument(
        "--interval", type=int, default=ApplicationConfig.OUTBOX_POLL_INTERVAL_SECONDS,
        help="Interval between runs in seconds"
    )
    args = parser.parse_args()

    worker = OutboxProcessorWorker()

    try:
        if args.once:
            result = await worker.run_once()
            print("Outbox run complete:")
            print(f"  Events checked: {result.events_checked}")
            print(f"  Completed: {result.completed}")
            print(f"  To retry: {result.retried}")
            print(f"  Failed: {result.failed}")
        else:
            await worker.run_forever(interval_seconds=args.interval)
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        await worker.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
