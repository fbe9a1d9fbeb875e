"""
core/errors.py – Domain errors with their HTTP status.

Routes never build HTTPException by hand for these: main.py registers a
single handler for MarketplaceError.
"""


class MarketplaceError(Exception):
    status_code = 500
    message = "Server error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message


class ValidationError(MarketplaceError):
    status_code = 400
    message = "Invalid request"


class InvalidStatus(ValidationError):
    message = "Invalid status"


class Unauthorized(MarketplaceError):
    status_code = 401
    message = "No token"


class Forbidden(MarketplaceError):
    status_code = 403
    message = "Forbidden"


class NotFound(MarketplaceError):
    status_code = 404
    message = "Not found"


class InsufficientQuantity(MarketplaceError):
    """Lost race or over-sized request. Expected outcome, not a fault."""

    status_code = 400
    message = "Insufficient quantity"

    def __init__(self, listing_id: str, requested: int) -> None:
        super().__init__()
        self.listing_id = listing_id
        self.requested = requested


class OrderRecordingFailed(MarketplaceError):
    """Decrement matched but the order row could not be written."""

    status_code = 500
    message = "Order could not be recorded"

    def __init__(self, listing_id: str, quantity: int) -> None:
        super().__init__(f"{self.message} (listing={listing_id}, quantity={quantity})")
        self.listing_id = listing_id
        self.quantity = quantity


class StoreUnavailable(MarketplaceError):
    status_code = 500
    message = "Store unavailable"


_HEX = frozenset("0123456789abcdef")


def require_id(value: str | None, label: str = "") -> str:
    """Ids are 32-char lowercase hex. Malformed → ValidationError (400), not 404."""
    if not value or len(value) != 32 or not set(value) <= _HEX:
        raise ValidationError(f"Invalid {label} id" if label else "Invalid id")
    return value
