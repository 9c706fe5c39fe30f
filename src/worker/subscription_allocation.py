"""Subscription Credit Allocation Background Worker

Allocates each active subscription's monthly credits for a billing period.
Safe to re-run: the allocation key subscription:{id}:{YYYY-MM} makes a
second run for the same period a replay.
"""

import asyncio
import logging
from datetime import date
from typing import Optional
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.app.use_cases.credits import AllocateSubscriptionCreditsCommandDTO
from src.depends import Services

logger = logging.getLogger(__name__)


class AllocationRunResultDTO(BaseModel):
    period: str
    total_subscriptions: int
    successful_allocations: int
    failed_allocations: int


class SubscriptionAllocationWorker:
    """
    Background worker for monthly subscription credits

    Each subscription is allocated in its own session so one failure does not
    roll back the others.
    """

    def __init__(self, db_uri: Optional[str] = None, session_factory=None):
        self.engine = None
        if session_factory is None:
            self.engine = create_async_engine(db_uri or ApplicationConfig.DB_URI, echo=False, future=True)
            session_factory = sessionmaker(
                self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
            )
        self.async_session_factory = session_factory

    @staticmethod
    def _get_billing_period(year: Optional[int] = None, month: Optional[int] = None) -> str:
        """YYYY-MM; defaults to the current month"""
        if year is None or month is None:
            today = date.today()
            year, month = today.year, today.month
        return f"{year:04d}-{month:02d}"

    async def run_once(self, year: Optional[int] = None, month: Optional[int] = None) -> AllocationRunResultDTO:
        period = self._get_billing_period(year, month)

        async with self.async_session_factory() as session:
            subscriptions = await Services(session).subscription_repo.get_active_subscriptions()
            subscription_ids = [subscription.id for subscription in subscriptions]

        logger.info(f"Allocating {period} credits for {len(subscription_ids)} active subscriptions")

        successful = failed = 0
        for subscription_id in subscription_ids:
            async with self.async_session_factory() as session:
                result = await Services(session).allocate_subscription_credits.execute(
                    AllocateSubscriptionCreditsCommandDTO(subscription_id=subscription_id, period=period)
                )
            if result.is_err():
                failed += 1
                logger.error(f"Failed to allocate credits for subscription {subscription_id}: {result.error.message}")
            else:
                successful += 1

        return AllocationRunResultDTO(
            period=period,
            total_subscriptions=len(subscription_ids),
            successful_allocations=successful,
            failed_allocations=failed,
        )

    async def run_forever(self, interval_seconds: int = 86400):
        """Checks daily; completed periods replay without effect"""
        while True:
            try:
                result = await self.run_once()
                logger.info(
                    f"Allocation cycle for {result.period}: {result.successful_allocations} ok, "
                    f"{result.failed_allocations} failed"
                )
            except Exception as e:
                logger.error(f"Allocation cycle failed: {e}")

            await asyncio.sleep(interval_seconds)

    async def shutdown(self):
        if self.engine is not None:
            await self.engine.dispose()


async def main():
    import argparse

    logging.basicConfig(
        level=ApplicationConfig.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Subscription Credit Allocation Worker")
    parser.add_argument("--once", action="store_true", help="Run once and exit")
    parser.add_argument("--year", type=int, help="Billing year (default: current)")
    parser.add_argument("--month", type=int, help="Billing month (default: current)")
    parser.add_argument("--interval", type=int, default=86400, help="Interval between runs in seconds")
    args = parser.parse_args()

    worker = SubscriptionAllocationWorker()

    try:
        if args.once:
            result = await worker.run_once(year=args.year, month=args.month)
            print(f"Allocation for {result.period} complete:")
            print(f"  Subscriptions: {result.total_subscriptions}")
            print(f"  Successful: {result.successful_allocations}")
            print(f"  Failed: {result.failed_allocations}")
        else:
            await worker.run_forever(interval_seconds=args.interval)
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        await worker.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
