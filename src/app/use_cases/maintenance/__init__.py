"""Maintenance use cases"""
from .clean_expired_sessions import CleanExpiredSessions
from .check_low_inventory import CheckLowInventory
from .dtos import SessionCleanupResultDTO, LowInventoryResultDTO, LowInventoryItemDTO

__all__ = [
    "CleanExpiredSessions",
    "CheckLowInventory",
    "SessionCleanupResultDTO",
    "LowInventoryResultDTO",
    "LowInventoryItemDTO",
]
