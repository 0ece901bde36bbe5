"""
Cart Errors

Error messages and the exception taxonomy of the cart action protocol.
Every error carries a machine-readable code and the HTTP status the
router maps it to.
"""

from typing import Any

# Form errors
ERROR_MISSING_FORM_INPUT = "Missing cart form input"
ERROR_MALFORMED_FORM_INPUT = "Malformed cart form input"

# Dispatch errors
ERROR_UNKNOWN_ACTION = "cart action is not defined"
ERROR_MISSING_CART_ID = "No cart id available for this cart action"

# Backend errors
ERROR_STOREFRONT_REQUEST = "Storefront API request failed"


class CartError(Exception):
    """Base error for the cart action protocol."""

    code: str = "CART_ERROR"
    status_code: int = 400

    def __init__(
        self,
        message: str,
        code: str | None = None,
        retryable: bool = False,
        details: Any = None,
    ):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.retryable = retryable
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API response."""
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class MissingFormInput(CartError):
    """The submitted form has no cart form field."""

    code = "MISSING_FORM_INPUT"

    def __init__(self, field_name: str):
        super().__init__(f"{ERROR_MISSING_FORM_INPUT}: '{field_name}'")
        self.field_name = field_name


class MalformedFormInput(CartError):
    """The cart form field is not a JSON object with an action."""

    code = "MALFORMED_FORM_INPUT"

    def __init__(self, reason: str, details: Any = None):
        super().__init__(f"{ERROR_MALFORMED_FORM_INPUT}: {reason}", details=details)
        self.reason = reason


class UnknownAction(CartError):
    """No handler is registered for the requested action."""

    code = "UNKNOWN_ACTION"

    def __init__(self, action: str):
        super().__init__(f"{action} {ERROR_UNKNOWN_ACTION}")
        self.action = action


class MissingCartId(CartError):
    """A cart mutation was attempted without a resolvable cart id."""

    code = "MISSING_CART_ID"

    def __init__(self, action: str):
        super().__init__(f"{ERROR_MISSING_CART_ID}: {action}")
        self.action = action


class StorefrontError(CartError):
    """Transport or GraphQL-level failure talking to the Storefront API."""

    code = "STOREFRONT_ERROR"
    status_code = 502

    def __init__(self, message: str, errors: list | None = None, status: int | None = None):
        super().__init__(f"{ERROR_STOREFRONT_REQUEST}: {message}", details=errors)
        self.errors = errors or []
        self.status = status


__all__ = [
    "CartError",
    "MissingFormInput",
    "MalformedFormInput",
    "UnknownAction",
    "MissingCartId",
    "StorefrontError",
]
