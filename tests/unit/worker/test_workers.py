"""Unit tests for the background workers

Tests cover:
- Workers built on a shared session factory create no engine
- run_once executes the use case and returns its result
- Use case errors surface as RuntimeError
- run_forever survives a failed cycle
"""

import pytest
from datetime import date
from unittest.mock import AsyncMock, MagicMock, patch

from libs.result import Return, Error
from src.app.use_cases.billing.dtos import OverdueSweepResultDTO
from src.app.use_cases.scheduling.dtos import GenerationResultDTO
from src.worker.overdue_sweeper import OverdueSweeperWorker
from src.worker.recurring_generator import RecurringGeneratorWorker


class StopLoop(Exception):
    pass


@pytest.fixture
def mock_session():
    """Mock async session"""
    session = MagicMock()
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=None)
    return session


@pytest.fixture
def session_factory(mock_session):
    return MagicMock(return_value=mock_session)


@pytest.fixture
def generation_result():
    return GenerationResultDTO(
        templates_processed=2,
        horizon_end=date(2024, 6, 17),
        execution_time_ms=12,
    )


@pytest.mark.asyncio
class TestRecurringGeneratorWorker:

    async def test_shared_factory_creates_no_engine(self, session_factory):
        worker = RecurringGeneratorWorker(session_factory=session_factory, horizon_days=7)

        assert worker.engine is None
        assert worker.horizon_days == 7

    @patch("src.worker.recurring_generator.GenerateOccurrences")
    async def test_run_once_executes_generation(
        self, mock_use_case_cls, session_factory, generation_result
    ):
        """
        Given: A worker with a 7 day horizon
        When: run_once is called for 2024-06-03
        Then: GenerateOccurrences runs with that horizon and its result is returned
        """
        # Arrange
        mock_use_case = MagicMock()
        mock_use_case.execute = AsyncMock(return_value=Return.ok(generation_result))
        mock_use_case_cls.return_value = mock_use_case
        worker = RecurringGeneratorWorker(session_factory=session_factory, horizon_days=7)

        # Act
        result = await worker.run_once(today=date(2024, 6, 3))

        # Assert
        assert result == generation_result
        command = mock_use_case.execute.call_args[0][0]
        assert command.horizon_days == 7
        assert command.today == date(2024, 6, 3)
        session_factory.assert_called_once()
        assert "Processed 2 templates" in worker.describe(result)

    @patch("src.worker.recurring_generator.GenerateOccurrences")
    async def test_run_once_raises_on_error(self, mock_use_case_cls, session_factory):
        mock_use_case = MagicMock()
        mock_use_case.execute = AsyncMock(
            return_value=Return.err(
                Error(code="GENERATE_OCCURRENCES_FAILED", message="Failed to load templates")
            )
        )
        mock_use_case_cls.return_value = mock_use_case
        worker = RecurringGeneratorWorker(session_factory=session_factory)

        with pytest.raises(RuntimeError, match="Failed to load templates"):
            await worker.run_once()

    async def test_run_forever_survives_failed_cycle(self, session_factory, generation_result):
        """
        Given: A worker whose first cycle fails
        When: run_forever loops
        Then: The failure is logged and the next cycle still runs
        """
        worker = RecurringGeneratorWorker(session_factory=session_factory)
        worker.run_once = AsyncMock(side_effect=[RuntimeError("db down"), generation_result])

        with patch("src.worker.base.asyncio.sleep", new=AsyncMock(side_effect=[None, StopLoop])):
            with pytest.raises(StopLoop):
                await worker.run_forever(interval_seconds=1)

        assert worker.run_once.await_count == 2

    async def test_shutdown_without_engine(self, session_factory):
        worker = RecurringGeneratorWorker(session_factory=session_factory)

        await worker.shutdown()


@pytest.mark.asyncio
class TestOverdueSweeperWorker:

    @patch("src.worker.overdue_sweeper.SweepOverdue")
    async def test_run_once_sweeps(self, mock_use_case_cls, session_factory):
        sweep_result = OverdueSweepResultDTO(
            invoices_checked=3,
            transitioned=2,
            transitioned_invoice_ids=["inv_1", "inv_2"],
            notices_sent=1,
            notice_failures=["inv_2"],
        )
        mock_use_case = MagicMock()
        mock_use_case.execute = AsyncMock(return_value=Return.ok(sweep_result))
        mock_use_case_cls.return_value = mock_use_case
        email_sender = MagicMock()
        worker = OverdueSweeperWorker(session_factory=session_factory, email_sender=email_sender)

        result = await worker.run_once(today=date(2024, 6, 3))

        assert result.transitioned == 2
        assert mock_use_case_cls.call_args.kwargs["email_sender"] is email_sender
        assert mock_use_case.execute.call_args[0][0].today == date(2024, 6, 3)
        assert "2 marked overdue" in worker.describe(result)
