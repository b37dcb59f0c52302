"""
Error taxonomy for the Explore Service.

Every domain error carries a ``category`` that the HTTP boundary maps to a
status code. Only two categories exist externally.
"""

INVALID_ARGUMENT = "invalid_argument"
INTERNAL = "internal"


class ExploreError(Exception):
    """Base class for all domain errors."""

    category: str = INTERNAL


class InvalidArgumentError(ExploreError):
    """Request is malformed; the client must change it before retrying."""

    category = INVALID_ARGUMENT


class InvalidCursorError(InvalidArgumentError):
    """Pagination token failed to decode."""


class MissingFieldError(InvalidArgumentError):
    """A required request field is empty."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"{field} is required")


class SameIdentityError(InvalidArgumentError):
    """Actor and recipient of a decision are the same user."""

    def __init__(self):
        super().__init__("actor and recipient cannot be the same user")


class StorageUnavailableError(ExploreError):
    """Any storage fault during a read or write."""


class MutualCheckFailedError(StorageUnavailableError):
    """Storage fault while evaluating a mutual like."""


class CacheError(Exception):
    """
    Cache transport fault.

    Not an ``ExploreError``; the service layer treats it as a cache miss.
    """


__all__ = [
    "INVALID_ARGUMENT",
    "INTERNAL",
    "ExploreError",
    "InvalidArgumentError",
    "InvalidCursorError",
    "MissingFieldError",
    "SameIdentityError",
    "StorageUnavailableError",
    "MutualCheckFailedError",
    "CacheError",
]
