"""Repositories for the takeaway database."""
from takeaway.infra.database.repositories.base import BaseRepository
from takeaway.infra.database.repositories.change_log import ChangeLogRepository
from takeaway.infra.database.repositories.enquiry import EnquiryRepository
from takeaway.infra.database.repositories.guest import GuestRepository
from takeaway.infra.database.repositories.menu_item import MenuItemRepository
from takeaway.infra.database.repositories.order import OrderRepository

__all__ = [
    "BaseRepository",
    "OrderRepository",
    "GuestRepository",
    "ChangeLogRepository",
    "MenuItemRepository",
    "EnquiryRepository",
]
