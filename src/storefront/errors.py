"""Business error taxonomy.

Every error carries the HTTP status it maps to at the API edge, a
human-readable message, and optional structured details. Field-level input
errors keep using Protean's ``ValidationError``.
"""


class StorefrontError(Exception):
    status_code = 500

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFound(StorefrontError):
    status_code = 404


class Unauthorized(StorefrontError):
    status_code = 401


class Forbidden(StorefrontError):
    status_code = 403


class Conflict(StorefrontError):
    """A business rule rejected the request."""

    status_code = 400


class EmptyCart(Conflict):
    def __init__(self) -> None:
        super().__init__("Cart is empty")


class ProductUnavailable(Conflict):
    def __init__(self, product_id: str) -> None:
        super().__init__(f"Product {product_id} not found or inactive", {"product_id": product_id})


class InsufficientStock(Conflict):
    def __init__(self, product_name: str, available: int, requested: int) -> None:
        super().__init__(
            f"Insufficient stock for {product_name}. Available: {available}",
            {"available": available, "requested": requested},
        )
        self.available = available
        self.requested = requested


class InvalidTransition(Conflict):
    def __init__(self, current: str, target: str, reason: str | None = None) -> None:
        super().__init__(
            reason or f"Cannot change order status from {current} to {target}",
            {"current_status": current, "requested_status": target},
        )


class PaymentNotCompleted(Conflict):
    def __init__(self, intent_status: str) -> None:
        super().__init__("Payment not successful", {"intent_status": intent_status})


class ExternalServiceError(StorefrontError):
    """A collaborator (payment gateway) failed on a path that blocks the workflow."""

    status_code = 500


class InternalError(StorefrontError):
    status_code = 500


class StockReconciliationError(InternalError):
    """Stock reservation failed after the order was registered."""
