"""Range resolution for partial-content downloads.

Only the leading start offset of a ``bytes=<start>-...`` expression is
read. Every response serves one window from that offset, clamped to the
blob; whatever end offset the client asks for is ignored, so clients page
through a blob with successive requests.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from reelstore.errors import RangeNotSatisfiableError, ValidationError

_RANGE_START_RE = re.compile(r"^\s*bytes\s*=\s*(\d+)", re.IGNORECASE)


@dataclass(frozen=True)
class ResolvedRange:
    """An inclusive byte range ready to be served."""

    start: int
    end: int
    total_length: int

    @property
    def content_length(self) -> int:
        return self.end - self.start + 1

    @property
    def content_range(self) -> str:
        """Value for the Content-Range response header."""
        return f"bytes {self.start}-{self.end}/{self.total_length}"


def resolve_range(header: str | None, length: int, window: int) -> ResolvedRange:
    """Resolve a Range header against a blob of ``length`` bytes.

    Args:
        header: Raw Range header value, e.g. ``"bytes=1000000-"``
        length: Total length of the blob
        window: Maximum number of bytes served per request

    Raises:
        ValidationError: If the header is missing or has no start offset
        RangeNotSatisfiableError: If the start lies outside the blob
    """
    if not header:
        raise ValidationError("Requires Range header")

    match = _RANGE_START_RE.match(header)
    if match is None:
        raise ValidationError(f"Malformed Range header: {header!r}")

    start = int(match.group(1))
    if start >= length:
        raise RangeNotSatisfiableError(start, length)

    end = min(start + window - 1, length - 1)
    return ResolvedRange(start=start, end=end, total_length=length)
