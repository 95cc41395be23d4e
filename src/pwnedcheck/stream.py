"""
Streaming parser for range API responses.

The response body arrives in arbitrary network chunks. LineBuffer
reassembles them into complete lines and the matchers scan those lines for
a hash suffix, stopping as soon as it is found.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

from collections.abc import AsyncIterable, AsyncIterator, Iterable, Iterator

from pwnedcheck.hashing import HASH_PREFIX_LENGTH, SHA1_LENGTH

SUFFIX_LENGTH = SHA1_LENGTH - HASH_PREFIX_LENGTH


class LineBuffer:
    """Reassembles lines that may be split across chunks.

    Lines are returned with their terminators. Chunks may be bytes or str;
    complete lines are decoded individually, so a multi-byte character split
    between two chunks is decoded correctly.
    """

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding
        self._carry = b""

    def feed(self, chunk: bytes | str) -> list[str]:
        """Add a chunk and return the lines it completed."""
        if not chunk:
            return []
        if isinstance(chunk, str):
            chunk = chunk.encode(self.encoding)

        lines = (self._carry + chunk).splitlines(keepends=True)
        # A trailing \r may be the first half of \r\n, so keep it back too
        if lines and not lines[-1].endswith(b"\n"):
            self._carry = lines.pop()
        else:
            self._carry = b""
        return [line.decode(self.encoding) for line in lines]

    def flush(self) -> str | None:
        """Return the buffered partial line at end of stream, if any."""
        carry, self._carry = self._carry, b""
        return carry.decode(self.encoding) if carry else None


def iter_lines(chunks: Iterable[bytes | str]) -> Iterator[str]:
    """Yield complete lines from an iterable of chunks."""
    buffer = LineBuffer()
    for chunk in chunks:
        yield from buffer.feed(chunk)
    last = buffer.flush()
    if last is not None:
        yield last


async def aiter_lines(chunks: AsyncIterable[bytes | str]) -> AsyncIterator[str]:
    """Yield complete lines from an async iterable of chunks."""
    buffer = LineBuffer()
    async for chunk in chunks:
        for line in buffer.feed(chunk):
            yield line
    last = buffer.flush()
    if last is not None:
        yield last


def parse_count(line: str, suffix: str) -> int | None:
    """Return the count on ``line`` if it belongs to ``suffix``.

    Lines look like ``SUFFIX:COUNT``. Suffixes are compared
    case-insensitively.

    Raises:
        ValueError: If the line matches but its count is not an integer
    """
    line = line.strip()
    if not line or line[:SUFFIX_LENGTH].upper() != suffix.upper():
        return None

    separator, count = line[SUFFIX_LENGTH:SUFFIX_LENGTH + 1], line[SUFFIX_LENGTH + 1:]
    if separator != ":":
        raise ValueError("Malformed range line: missing ':' after hash suffix")
    try:
        return int(count, 10)
    except ValueError:
        raise ValueError(f"Malformed range line: invalid count {count!r}") from None


def match_count(lines: Iterable[str], suffix: str) -> int:
    """Scan lines for ``suffix`` and return its count, or 0 if absent."""
    for line in lines:
        count = parse_count(line, suffix)
        if count is not None:
            return count
    return 0


async def amatch_count(lines: AsyncIterable[str], suffix: str) -> int:
    """Async version of match_count. Stops pulling lines once matched."""
    async for line in lines:
        count = parse_count(line, suffix)
        if count is not None:
            return count
    return 0
