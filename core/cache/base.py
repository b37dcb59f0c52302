"""
Cache provider interface.

The service layer depends on this protocol, not on Redis, so tests can swap
in an in-memory fake.
"""

from typing import Any, Optional, Protocol, runtime_checkable


@runtime_checkable
class CacheProvider(Protocol):
    """
    Key/value store with TTL and opaque string values.

    Implementations raise ``core.exceptions.CacheError`` on transport faults
    and return ``None`` for a missing key.
    """

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str, ttl: int) -> bool: ...

    def delete(self, *keys: str) -> int: ...

    def get_json(self, key: str) -> Optional[dict[str, Any]]: ...

    def set_json(self, key: str, value: dict[str, Any], ttl: int) -> bool: ...
