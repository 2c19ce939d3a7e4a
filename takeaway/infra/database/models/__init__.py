"""
takeaway.infra.database.models – SQLAlchemy 2.0 ORM models.

Exports Base, mixins, and all model classes.
"""
from takeaway.infra.database.models.base import ActorMixin, Base, TimestampMixin, _uuid_pk
from takeaway.infra.database.models.change_log import ChangeLog
from takeaway.infra.database.models.enquiry import Enquiry
from takeaway.infra.database.models.guest import Guest
from takeaway.infra.database.models.menu_item import MenuItem
from takeaway.infra.database.models.order import Order, OrderItem, OrderStatusEntry, PaymentRecord

__all__ = [
    "Base",
    "TimestampMixin",
    "ActorMixin",
    "_uuid_pk",
    "Guest",
    "Order",
    "OrderItem",
    "OrderStatusEntry",
    "PaymentRecord",
    "ChangeLog",
    "MenuItem",
    "Enquiry",
]
