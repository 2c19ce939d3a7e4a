"""Service layer: order lifecycle, guest reconciliation, numbering, audit, analytics, enquiries and menu."""
from takeaway.services.analytics_service import AnalyticsService
from takeaway.services.audit_service import AuditRecorder
from takeaway.services.enquiry_service import EnquiryService
from takeaway.services.guest_service import GuestService
from takeaway.services.menu_service import MenuService
from takeaway.services.order_numbering import OrderNumberSequencer
from takeaway.services.order_service import OrderService

__all__ = [
    "OrderService",
    "GuestService",
    "OrderNumberSequencer",
    "AuditRecorder",
    "AnalyticsService",
    "EnquiryService",
    "MenuService",
]
