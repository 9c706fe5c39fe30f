"""Balance Reconciliation Background Worker

Periodically compares every credit account balance and every user's points
with the sum of their ledger and point history. Read-only: discrepancies are
logged for investigation, never corrected.
Can be run as a standalone script or integrated with a scheduler.
"""

import asyncio
import logging
from typing import Optional
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.app.use_cases.credits import ReconciliationReportDTO
from src.depends import Services

logger = logging.getLogger(__name__)


class BalanceReconcilerWorker:
    """
    Background worker for balance reconciliation

    Usage:
        # Run once
        worker = BalanceReconcilerWorker()
        report = await worker.run_once()

        # Run continuously
        await worker.run_forever(interval_seconds=86400)  # Daily
    """

    def __init__(self, db_uri: Optional[str] = None, session_factory=None):
        """
        Initialize the worker

        Args:
            db_uri: Database URI (defaults to ApplicationConfig.DB_URI)
            session_factory: Existing session factory; takes precedence over db_uri
        """
        self.engine = None
        if session_factory is None:
            self.engine = create_async_engine(db_uri or ApplicationConfig.DB_URI, echo=False, future=True)
            session_factory = sessionmaker(
                self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
            )
        self.async_session_factory = session_factory

        logger.info("BalanceReconcilerWorker initialized")

    async def run_once(self) -> ReconciliationReportDTO:
        if not ApplicationConfig.RECONCILIATION_ENABLED:
            logger.info("Balance reconciliation is disabled, skipping")
            return ReconciliationReportDTO(accounts_checked=0, users_checked=0)

        async with self.async_session_factory() as session:
            result = await Services(session).reconcile_balances.execute()

        if result.is_err():
            logger.error(f"Reconciliation failed: {result.error.message}")
            raise RuntimeError(f"Reconciliation failed: {result.error.message}")

        report = result.value
        if not report.is_consistent:
            logger.error(
                f"ALERT: {len(report.account_discrepancies)} account and "
                f"{len(report.points_discrepancies)} points discrepancies found!"
            )
            for d in report.account_discrepancies:
                logger.error(
                    f"  - Account {d.account}: ledger={d.ledger_total}, "
                    f"balance={d.materialized}, diff={d.difference}"
                )
            for d in report.points_discrepancies:
                logger.error(
                    f"  - User {d.user_id}: transactions={d.transaction_total}, points={d.cached_points}"
                )

        return report

    async def run_forever(self, interval_seconds: int = 86400):
        logger.info(f"Starting continuous balance reconciliation with {interval_seconds}s interval")

        while True:
            try:
                report = await self.run_once()
                logger.info(
                    f"Reconciliation cycle complete. Checked {report.accounts_checked} accounts "
                    f"and {report.users_checked} users"
                )
            except Exception as e:
                logger.error(f"Reconciliation cycle failed: {e}")

            await asyncio.sleep(interval_seconds)

    async def shutdown(self):
        if self.engine is not None:
            await self.engine.dispose()
        logger.info("BalanceReconcilerWorker shutdown complete")


async def main():
    """
    Usage:
        python -m src.worker.balance_reconciler --once
        python -m src.worker.balance_reconciler --interval 3600
    """
    import argparse

    logging.basicConfig(
        level=ApplicationConfig.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Balance Reconciliation Worker")
    parser.add_argument("--once", action="store_true", help="Run once and exit")
    parser.add_argument(
        "--interval", type=int, default=ApplicationConfig.RECONCILIATION_INTERVAL_SECONDS,
        help="Interval between runs in seconds (default: 86400 = 24 hours)"
    )
    args = parser.parse_args()

    worker = BalanceReconcilerWorker()

    try:
        if args.once:
            report = await worker.run_once()
            print("Reconciliation complete:")
            print(f"  Accounts checked: {report.accounts_checked}")
            print(f"  Users checked: {report.users_checked}")
            print(f"  Consistent: {report.is_consistent}")
        else:
            await worker.run_forever(interval_seconds=args.interval)
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        await worker.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
