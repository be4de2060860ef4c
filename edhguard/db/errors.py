"""Errors raised by the card catalog."""


class CatalogError(Exception):
    """Base class for catalog failures."""

    pass


class StoreUnavailableError(CatalogError):
    """Raised when the catalog file cannot be opened or created."""

    def __init__(self, location: str, reason: str):
        self.location = location
        self.reason = reason
        super().__init__(f"Card catalog unavailable at {location}: {reason}")


class StoreClosedError(CatalogError):
    """Raised when the catalog is used before connect() or after close()."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Cannot {operation}: card catalog is not connected")


class InvalidRecordError(CatalogError):
    """Raised when a record lacks a name or type line."""

    def __init__(self, card_name: str, reason: str):
        self.card_name = card_name
        self.reason = reason
        super().__init__(f"Invalid card record '{card_name}': {reason}")


class EmptyCatalogError(CatalogError):
    """
    Raised when validation is attempted against an empty catalog.

    Every lookup would miss, so no rule could produce a meaningful result.
    """

    def __init__(self, location: str):
        self.location = location
        super().__init__(
            f"Card catalog at {location} is empty. "
            "Run `edhguard-import <path-to-card-json>` to populate it."
        )
