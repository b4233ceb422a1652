# Overview: Error taxonomy shared by services and routes.

"""
Every failure a caller can see is one of these kinds. Services raise them,
the app-level error handler renders them as JSON with the matching status.

Only ConflictError is safe to retry automatically: it means a concurrent
commit took the stock between validation and apply. InsufficientStockError
means the stock simply is not there.
"""

from __future__ import annotations


class PosError(Exception):
    """Base class for all caller-visible errors."""
    code = "ERROR"
    status_code = 500
    retryable = False

    def __init__(self, message: str = "An internal error occurred", details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        return {
            "error": self.message,
            "code": self.code,
            "retryable": self.retryable,
            "details": self.details,
        }


class UnauthorizedError(PosError):
    """No actor could be resolved for the request."""
    code = "UNAUTHORIZED"
    status_code = 401

    def __init__(self, message: str = "Authentication required", details: dict | None = None):
        super().__init__(message, details)


class ForbiddenError(PosError):
    """Actor does not own the resource they tried to mutate."""
    code = "FORBIDDEN"
    status_code = 403


class NotFoundError(PosError):
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, message: str = "Resource not found", details: dict | None = None):
        super().__init__(message, details)


class ValidationError(PosError, ValueError):
    """400-level input problem."""
    code = "VALIDATION"
    status_code = 400


class InsufficientStockError(PosError):
    """Requested quantity exceeds what is on hand."""
    code = "INSUFFICIENT_STOCK"
    status_code = 422

    def __init__(self, product_name: str, requested: int, available: int, product_id: int | None = None):
        message = f"Insufficient stock for {product_name}: requested {requested}, available {available}"
        super().__init__(message, details={
            "product_id": product_id,
            "product_name": product_name,
            "requested_quantity": requested,
            "available_quantity": available,
        })
        self.product_name = product_name
        self.requested = requested
        self.available = available


class ConflictError(PosError, ValueError):
    """409-level optimistic concurrency loss; safe to retry."""
    code = "CONFLICT"
    status_code = 409
    retryable = True
