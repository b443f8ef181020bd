"""
storefront/core/errors.py - Error taxonomy for the cart subsystem.

Every failure the core reports is a `CartError` carrying a stable `kind`, a human readable
`message` and the HTTP status the gateway should answer with. Routers never build error
payloads themselves; `storefront.main` registers one handler for the whole hierarchy.
"""
from typing import Optional


# Common messages
ERROR_USER_NOT_FOUND = "User not found"
ERROR_PRODUCT_NOT_FOUND = "Product not found"
ERROR_ADDRESS_NOT_FOUND = "Address not found"
ERROR_ACCOUNT_EXISTS = "email or phone number is already in use"
ERROR_PRODUCT_ID_EMPTY = "product id is empty"
ERROR_USER_ID_EMPTY = "user id is empty"


class CartError(Exception):
    """Base class for every error surfaced by the storefront core."""
    kind = "error"
    status_code = 500

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_payload(self) -> dict:
        return {"error": self.kind, "message": self.message}


class InvalidInput(CartError):
    """A required identifier is missing or malformed; nothing was attempted."""
    kind = "invalid_input"
    status_code = 400


class AlreadyExists(InvalidInput):
    kind = "already_exists"


class NotFound(CartError):
    """The referenced user, product or address does not exist; nothing was mutated."""
    kind = "not_found"
    status_code = 404


class StoreError(CartError):
    """The document store failed or answered with an unexpected shape."""
    kind = "store_error"
    status_code = 500


class Timeout(StoreError):
    """The request deadline elapsed before the store call completed."""
    kind = "timeout"


class SchemaMismatch(StoreError):
    """A stored document is missing a field the aggregation depends on."""
    kind = "schema_mismatch"
