"""
Error taxonomy used by the order engine, guest reconciliation and analytics.
"""
from __future__ import annotations

from takeaway.core.exceptions.base import ProjectError


class ConfigurationError(ProjectError):
    """Invalid or missing configuration."""

    default_code = "CONFIGURATION_ERROR"
    default_http_status = 500


class ValidationError(ProjectError):
    """Missing required field, malformed range, bad amount or unknown enum value."""

    default_code = "VALIDATION_ERROR"
    default_http_status = 400


class NotFoundError(ProjectError):
    """Referenced order, guest, item, enquiry or menu entry is absent."""

    default_code = "NOT_FOUND"
    default_http_status = 404


class InvalidStateError(ProjectError):
    """Operation not allowed in the entity's current state (e.g. soft-deleted)."""

    default_code = "INVALID_STATE"
    default_http_status = 409


class ConflictError(ProjectError):
    """Uniqueness conflict (duplicate guest email, duplicate order number)."""

    default_code = "CONFLICT"
    default_http_status = 409
