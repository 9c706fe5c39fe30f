"""Unit tests for BalanceReconcilerWorker

Tests cover:
- Worker initialization with configuration
- run_once execution with reconciliation
- Reconciliation disabled scenario
- Discrepancy reporting
- Error handling
"""

import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

from src.app.use_cases.credits.dtos import (
    AccountDiscrepancyDTO,
    PointsDiscrepancyDTO,
    ReconciliationReportDTO,
)
from src.worker.balance_reconciler import BalanceReconcilerWorker


@pytest.fixture
def mock_session_factory():
    session = MagicMock()
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock()
    return MagicMock(return_value=session)


@pytest.fixture
def consistent_report():
    return ReconciliationReportDTO(accounts_checked=12, users_checked=4)


@pytest.fixture
def drifted_report():
    return ReconciliationReportDTO(
        accounts_checked=12,
        users_checked=4,
        account_discrepancies=[
            AccountDiscrepancyDTO(
                account="user:usr_1",
                materialized=Decimal("75"),
                ledger_total=Decimal("50"),
            ),
        ],
        points_discrepancies=[
            PointsDiscrepancyDTO(user_id="usr_2", cached_points=40, transaction_total=37),
        ],
    )


def services_returning(result):
    services = MagicMock()
    services.reconcile_balances.execute = AsyncMock(return_value=result)
    return MagicMock(return_value=services)


def ok(value):
    result = MagicMock()
    result.is_err.return_value = False
    result.value = value
    return result


class TestBalanceReconcilerWorkerInit:

    @patch("src.worker.balance_reconciler.ApplicationConfig")
    @patch("src.worker.balance_reconciler.create_async_engine")
    def test_initializes_with_default_config(self, mock_create_engine, mock_app_config):
        """
        Given: No custom configuration provided
        When: Worker is initialized
        Then: An engine is created from ApplicationConfig.DB_URI
        """
        mock_app_config.DB_URI = "sqlite+aiosqlite:///./default.db"

        worker = BalanceReconcilerWorker()

        mock_create_engine.assert_called_once()
        assert mock_create_engine.call_args.args[0] == "sqlite+aiosqlite:///./default.db"
        assert worker.engine is mock_create_engine.return_value

    @patch("src.worker.balance_reconciler.create_async_engine")
    def test_session_factory_skips_engine(self, mock_create_engine, mock_session_factory):
        worker = BalanceReconcilerWorker(session_factory=mock_session_factory)

        mock_create_engine.assert_not_called()
        assert worker.engine is None
        assert worker.async_session_factory is mock_session_factory


@pytest.mark.asyncio
class TestBalanceReconcilerWorkerRunOnce:

    @patch("src.worker.balance_reconciler.ApplicationConfig")
    async def test_run_once_returns_report(self, mock_app_config, mock_session_factory, consistent_report):
        # Arrange
        mock_app_config.RECONCILIATION_ENABLED = True
        worker = BalanceReconcilerWorker(session_factory=mock_session_factory)

        # Act
        with patch("src.worker.balance_reconciler.Services", services_returning(ok(consistent_report))):
            report = await worker.run_once()

        # Assert
        assert report.accounts_checked == 12
        assert report.is_consistent

    @patch("src.worker.balance_reconciler.ApplicationConfig")
    async def test_run_once_skips_when_disabled(self, mock_app_config, mock_session_factory):
        mock_app_config.RECONCILIATION_ENABLED = False
        worker = BalanceReconcilerWorker(session_factory=mock_session_factory)

        report = await worker.run_once()

        assert report.accounts_checked == 0
        mock_session_factory.assert_not_called()

    @patch("src.worker.balance_reconciler.ApplicationConfig")
    async def test_discrepancies_are_logged(self, mock_app_config, mock_session_factory, drifted_report, caplog):
        mock_app_config.RECONCILIATION_ENABLED = True
        worker = BalanceReconcilerWorker(session_factory=mock_session_factory)

        with patch("src.worker.balance_reconciler.Services", services_returning(ok(drifted_report))):
            report = await worker.run_once()

        assert not report.is_consistent
        assert "user:usr_1" in caplog.text
        assert "usr_2" in caplog.text

    @patch("src.worker.balance_reconciler.ApplicationConfig")
    async def test_use_case_error_raises(self, mock_app_config, mock_session_factory):
        mock_app_config.RECONCILIATION_ENABLED = True
        worker = BalanceReconcilerWorker(session_factory=mock_session_factory)
        failed = MagicMock()
        failed.is_err.return_value = True
        failed.error.message = "Failed to reconcile balances"

        with patch("src.worker.balance_reconciler.Services", services_returning(failed)):
            with pytest.raises(RuntimeError, match="Failed to reconcile balances"):
                await worker.run_once()


@pytest.mark.asyncio
class TestBalanceReconcilerWorkerShutdown:

    @patch("src.worker.balance_reconciler.create_async_engine")
    async def test_shutdown_disposes_engine(self, mock_create_engine):
        engine = MagicMock()
        engine.dispose = AsyncMock()
        mock_create_engine.return_value = engine

        worker = BalanceReconcilerWorker()
        await worker.shutdown()

        engine.dispose.assert_called_once()
