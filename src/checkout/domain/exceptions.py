"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the outer layers (CLI, webhook endpoint) can catch them uniformly.  Each
class carries a machine-checkable ``kind`` and the HTTP-style status an
HTTP surface should answer with.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""

    kind = "error"
    http_status = 500

    def to_response(self) -> tuple[int, dict]:
        """Render as ``(status, body)`` for a JSON surface."""
        return self.http_status, {"error": {"kind": self.kind, "message": str(self)}}


class ValidationError(DomainException):
    """A business rule or invariant was violated."""

    kind = "validation_error"
    http_status = 400


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""

    kind = "not_found"
    http_status = 404


# --- Cart ------------------------------------------------------------------


class EmptyCart(ValidationError):
    kind = "empty_cart"

    def __init__(self) -> None:
        super().__init__("Cart is empty")


class ProductUnavailable(DomainException):
    """The product is missing from the catalog or no longer active."""

    kind = "product_unavailable"
    http_status = 422

    def __init__(self, product_id: object) -> None:
        self.product_id = product_id
        super().__init__(f"Product {product_id} is currently unavailable")


class InsufficientStock(DomainException):
    kind = "insufficient_stock"
    http_status = 422

    def __init__(self, product_name: str, remaining: int | None = None) -> None:
        self.product_name = product_name
        self.remaining = remaining
        if remaining is None:
            msg = f'"{product_name}" is out of stock for the requested quantity'
        else:
            msg = f'"{product_name}" - only {remaining} left in stock'
        super().__init__(msg)


class InvalidPaymentSelector(ValidationError):
    kind = "invalid_payment_selector"

    def __init__(self, selector: str) -> None:
        self.selector = selector
        super().__init__(f"Invalid payment method: {selector!r}")


# --- Orders ----------------------------------------------------------------


class OrderNotFound(EntityNotFoundError):
    kind = "order_not_found"

    def __init__(self, order_id: int) -> None:
        self.order_id = order_id
        super().__init__(f"Order #{order_id} not found")


class InvalidStatusValue(ValidationError):
    kind = "invalid_status_value"

    def __init__(self, field: str, value: str) -> None:
        self.field = field
        self.value = value
        super().__init__(f"Invalid {field} value: {value!r}")


class InvalidStatusTransition(DomainException):
    kind = "invalid_status_transition"
    http_status = 409


class DuplicateExternalReference(DomainException):
    """A payment reference is already attached to another order."""

    kind = "duplicate_external_reference"
    http_status = 409


# --- Identity --------------------------------------------------------------


class Unauthenticated(DomainException):
    kind = "unauthenticated"
    http_status = 401


class Forbidden(DomainException):
    kind = "forbidden"
    http_status = 403


# --- Collaborators ---------------------------------------------------------


class SignatureInvalid(DomainException):
    """A payment webhook failed signature verification."""

    kind = "signature_invalid"
    http_status = 400


class StorageFailure(DomainException):
    """An atomic write failed and was rolled back."""

    kind = "storage_failure"
    http_status = 500


class UpstreamChannelFailure(DomainException):
    """The payment processor call failed or timed out."""

    kind = "upstream_channel_failure"
    http_status = 502

