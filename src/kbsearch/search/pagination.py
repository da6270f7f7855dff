"""Opaque cursors for paging through a materialized result list."""

import base64
import binascii

_PREFIX = "offset:"


class InvalidCursorError(ValueError):
    """Raised when a pagination cursor cannot be decoded."""

    pass


def encode_cursor(offset: int) -> str:
    """Encode a result offset as an opaque, URL-safe token."""
    raw = f"{_PREFIX}{offset}".encode("ascii")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode_cursor(cursor: str | None) -> int:
    """Decode a cursor back into a result offset.

    A missing cursor means the first page.

    Raises:
        InvalidCursorError: If the token was not produced by encode_cursor.
    """
    if not cursor:
        return 0
    padded = cursor + "=" * (-len(cursor) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded.encode("ascii")).decode("ascii")
    except (binascii.Error, UnicodeError, ValueError) as e:
        raise InvalidCursorError(f"Malformed cursor: {cursor!r}") from e

    if not raw.startswith(_PREFIX):
        raise InvalidCursorError(f"Malformed cursor: {cursor!r}")
    digits = raw[len(_PREFIX) :]
    if not digits.isdigit():
        raise InvalidCursorError(f"Malformed cursor: {cursor!r}")
    return int(digits)


def slice_page(total: int, offset: int, page_size: int) -> tuple[int, int, str | None]:
    """Bounds of a page and the cursor for the page after it.

    Returns:
        Tuple of (start, end, next_cursor); next_cursor is None on the last page.
    """
    start = min(offset, total)
    end = min(start + page_size, total)
    next_cursor = encode_cursor(end) if end < total else None
    return start, end, next_cursor
