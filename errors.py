"""
Error types raised by the store and its collaborators.

The hierarchy is shallow on purpose: the HTTP layer only needs to tell
validation problems, illegal order transitions and storage failures apart.
"""


class StoreError(Exception):
    """Base class for every error raised by the store modules."""


class PersistenceError(StoreError):
    """A storage adapter could not read or write a record."""

    def __init__(self, key: str, message: str):
        super().__init__(f"{key}: {message}")
        self.key = key


class OrderValidationError(StoreError):
    """An order does not satisfy the shape the store accepts."""


class InvalidTransitionError(StoreError):
    """The requested status change is not allowed from the current status."""

    def __init__(self, order_id: str, current, requested):
        super().__init__(f"order {order_id}: cannot go from {current.value} to {requested.value}")
        self.order_id = order_id
        self.current = current
        self.requested = requested


class CheckoutValidationError(StoreError):
    """Checkout input was rejected before the store was touched."""


class CartError(StoreError):
    """A cart line could not be built from the given product selection."""


class CatalogValidationError(StoreError):
    """A product or category change was rejected by the store."""
