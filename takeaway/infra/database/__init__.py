"""
takeaway.infra.database – PostgreSQL async engine, session, models and repositories.

Public API
──────────
  build_engine, build_session_factory, init_db, ensure_database_exists, close_engine
  Base, Order, OrderItem, OrderStatusEntry, PaymentRecord, Guest, ChangeLog, MenuItem, Enquiry
  OrderRepository, GuestRepository, ChangeLogRepository, MenuItemRepository, EnquiryRepository
"""
from takeaway.infra.database.engine import (
    build_engine,
    build_session_factory,
    close_engine,
    ensure_database_exists,
    init_db,
)
from takeaway.infra.database.models import (
    Base,
    ChangeLog,
    Enquiry,
    Guest,
    MenuItem,
    Order,
    OrderItem,
    OrderStatusEntry,
    PaymentRecord,
)
from takeaway.infra.database.repositories import (
    BaseRepository,
    ChangeLogRepository,
    EnquiryRepository,
    GuestRepository,
    MenuItemRepository,
    OrderRepository,
)

__all__ = [
    "build_engine",
    "build_session_factory",
    "init_db",
    "ensure_database_exists",
    "close_engine",
    "Base",
    "Order",
    "OrderItem",
    "OrderStatusEntry",
    "PaymentRecord",
    "Guest",
    "ChangeLog",
    "MenuItem",
    "Enquiry",
    "BaseRepository",
    "OrderRepository",
    "GuestRepository",
    "ChangeLogRepository",
    "MenuItemRepository",
    "EnquiryRepository",
]
