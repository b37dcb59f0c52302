"""
Opaque keyset pagination cursors.

A cursor carries the ``created_at`` (epoch seconds) of the last row on the
previous page plus the page size. It travels to clients as URL-safe base64
JSON; no other module looks inside the token.
"""

import base64
import binascii
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from core.exceptions import InvalidCursorError

DEFAULT_PAGE_SIZE = 20


@dataclass(frozen=True)
class Cursor:
    """Continuation point for a keyset-paginated query."""

    last_created_at: int = 0
    limit: int = 0

    def page_size(self, default: int = DEFAULT_PAGE_SIZE, maximum: Optional[int] = None) -> int:
        """Effective page size: non-positive limits fall back to the default."""
        size = self.limit if self.limit > 0 else default
        if maximum is not None:
            size = min(size, maximum)
        return size


def encode_cursor(cursor: Cursor) -> str:
    """Encode a cursor into a URL-safe token."""
    payload = {"last_created_at": cursor.last_created_at, "limit": cursor.limit}
    return base64.urlsafe_b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")


def decode_cursor(token: Optional[str]) -> Optional[Cursor]:
    """
    Decode a pagination token.

    Args:
        token: Token previously produced by ``encode_cursor``.

    Returns:
        ``None`` for an empty token (first page, default settings), otherwise
        the decoded cursor. A non-positive limit is returned as-is.

    Raises:
        InvalidCursorError: If the token is not a structurally valid cursor or
            its timestamp is outside the representable range.
    """
    if not token:
        return None

    try:
        raw = base64.urlsafe_b64decode(token.encode("ascii"))
        data = json.loads(raw)
    except (binascii.Error, UnicodeError, ValueError) as e:
        raise InvalidCursorError("invalid pagination_token") from e

    if not isinstance(data, dict):
        raise InvalidCursorError("invalid pagination_token")

    last_created_at = data.get("last_created_at", 0)
    limit = data.get("limit", 0)
    for value in (last_created_at, limit):
        # bool is an int subclass; reject it explicitly
        if not isinstance(value, int) or isinstance(value, bool):
            raise InvalidCursorError("invalid pagination_token")

    try:
        datetime.fromtimestamp(last_created_at, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise InvalidCursorError("invalid pagination_token") from e

    return Cursor(last_created_at=last_created_at, limit=limit)


__all__ = ["Cursor", "DEFAULT_PAGE_SIZE", "encode_cursor", "decode_cursor"]
