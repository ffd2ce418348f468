"""CheckLowInventory Use Case"""

import logging
from libs.result import Result, Return, Error
from src.app.services.email_sender import EmailSender
from src.app.services import email_templates
from src.app.repositories.inventory_repository import InventoryRepository
from src.app.repositories.user_repository import UserRepository
from .dtos import LowInventoryResultDTO, LowInventoryItemDTO

logger = logging.getLogger(__name__)


class CheckLowInventory:
    """
    Use Case: Weekly low-stock alert

    Emails every active admin the active items with
    current_stock <= min_stock. A failed send to one admin does not stop
    the others.
    """

    def __init__(
        self,
        inventory_repo: InventoryRepository,
        user_repo: UserRepository,
        email_sender: EmailSender,
    ):
        self.inventory_repo = inventory_repo
        self.user_repo = user_repo
        self.email_sender = email_sender

    async def execute(self) -> Result[LowInventoryResultDTO]:
        try:
            items = await self.inventory_repo.get_low_stock()
            if not items:
                return Return.ok(LowInventoryResultDTO())

            logger.info(f"Found {len(items)} items with low stock")
            admins = await self.user_repo.get_active_admins()
        except Exception as e:
            return Return.err(
                Error(
                    code="INVENTORY_CHECK_FAILED",
                    message="Failed to check inventory",
                    reason=str(e),
                )
            )

        message = email_templates.low_inventory_alert(items)
        notified = 0
        failed = []
        for admin in admins:
            result = await self.email_sender.send(
                admin.email, message.subject, message.text_body, message.html_body
            )
            if result.sent:
                notified += 1
            else:
                logger.error(f"Low inventory alert to {admin.email} not sent: {result.error}")
                failed.append(admin.email)

        return Return.ok(
            LowInventoryResultDTO(
                low_stock_items=[
                    LowInventoryItemDTO(
                        item_id=item.id,
                        name=item.name,
                        unit=item.unit,
                        current_stock=str(item.current_stock),
                        min_stock=str(item.min_stock),
                    )
                    for item in items
                ],
                admins_notified=notified,
                failed_recipients=failed,
            )
        )
