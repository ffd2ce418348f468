"""Unit tests for the maintenance use cases"""

import pytest
from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.services.email_sender import EmailResult
from src.app.use_cases.maintenance.check_low_inventory import CheckLowInventory
from src.app.use_cases.maintenance.clean_expired_sessions import CleanExpiredSessions
from src.domain.inventory_item import InventoryItem
from src.domain.user import User, UserRole


@pytest.mark.asyncio
class TestCleanExpiredSessions:

    async def test_deletes_sessions_before_cutoff(self, mock_uow):
        # Arrange
        session_repo = MagicMock()
        session_repo.delete_expired = AsyncMock(return_value=3)
        use_case = CleanExpiredSessions(uow=mock_uow, session_repo=session_repo)
        now = datetime(2024, 6, 3, 12, 0)

        # Act
        result = await use_case.execute(now)

        # Assert
        assert result.value.deleted == 3
        assert result.value.cutoff == now
        session_repo.delete_expired.assert_awaited_once_with(now)
        mock_uow.commit.assert_awaited_once()

    async def test_failure_rolls_back(self, mock_uow):
        session_repo = MagicMock()
        session_repo.delete_expired = AsyncMock(side_effect=RuntimeError("locked"))
        use_case = CleanExpiredSessions(uow=mock_uow, session_repo=session_repo)

        result = await use_case.execute()

        assert result.error.code == "SESSION_CLEANUP_FAILED"
        mock_uow.rollback.assert_awaited_once()


@pytest.fixture
def inventory_repo():
    repo = MagicMock()
    repo.get_low_stock = AsyncMock(
        return_value=[
            InventoryItem(
                id="item_1",
                name="Microfiber cloths",
                unit="pack",
                current_stock=Decimal("2"),
                min_stock=Decimal("5"),
            )
        ]
    )
    return repo


@pytest.fixture
def user_repo():
    repo = MagicMock()
    repo.get_active_admins = AsyncMock(
        return_value=[
            User(email="owner@bubblebee.com", first_name="Sam", role=UserRole.ADMIN),
            User(email="ops@bubblebee.com", first_name="Alex", role=UserRole.ADMIN),
        ]
    )
    return repo


@pytest.mark.asyncio
class TestCheckLowInventory:

    async def test_alerts_every_admin(self, inventory_repo, user_repo):
        """
        Given: One item below its minimum and two active admins
        When: The inventory check runs
        Then: Both admins receive the low stock alert
        """
        # Arrange
        email_sender = MagicMock()
        email_sender.send = AsyncMock(return_value=EmailResult(sent=True))
        use_case = CheckLowInventory(inventory_repo, user_repo, email_sender)

        # Act
        result = await use_case.execute()

        # Assert
        assert result.value.admins_notified == 2
        assert result.value.low_stock_items[0].name == "Microfiber cloths"
        assert result.value.low_stock_items[0].current_stock == "2"
        subject = email_sender.send.call_args[0][1]
        assert subject == "Low Inventory Alert"

    async def test_one_failed_admin_does_not_stop_others(self, inventory_repo, user_repo):
        email_sender = MagicMock()
        email_sender.send = AsyncMock(
            side_effect=[EmailResult(sent=False, error="mailbox full"), EmailResult(sent=True)]
        )
        use_case = CheckLowInventory(inventory_repo, user_repo, email_sender)

        result = await use_case.execute()

        assert result.value.admins_notified == 1
        assert result.value.failed_recipients == ["owner@bubblebee.com"]

    async def test_nothing_low(self, inventory_repo, user_repo):
        inventory_repo.get_low_stock = AsyncMock(return_value=[])
        email_sender = MagicMock()
        email_sender.send = AsyncMock()
        use_case = CheckLowInventory(inventory_repo, user_repo, email_sender)

        result = await use_case.execute()

        assert result.value.low_stock_items == []
        email_sender.send.assert_not_awaited()
        user_repo.get_active_admins.assert_not_awaited()
