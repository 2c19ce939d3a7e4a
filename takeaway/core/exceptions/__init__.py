"""
Project exception system.

Usage:
    from takeaway.core.exceptions import NotFoundError, ValidationError

    raise ValidationError("Payment amount must be positive", details={"field": "amount"})
    raise NotFoundError(f"Order {order_id} not found")

The API layer turns any ProjectError into a JSON body using ``to_dict()``
and the error's ``http_status``.
"""
from takeaway.core.exceptions.base import ProjectError
from takeaway.core.exceptions.errors import (
    ConfigurationError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)

__all__ = [
    "ProjectError",
    "ConfigurationError",
    "ValidationError",
    "NotFoundError",
    "InvalidStateError",
    "ConflictError",
]
