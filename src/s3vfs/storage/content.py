"""Conversion helpers for file payloads.

Callers may hand over bytes-like objects, text or binary file objects.
"""

from __future__ import annotations

import io
from typing import BinaryIO

Content = bytes | bytearray | memoryview | str | BinaryIO

DEFAULT_ENCODING = "utf-8"


def to_bytes(content: Content, encoding: str = DEFAULT_ENCODING) -> bytes:
    """Return the payload as bytes, reading file objects to the end."""
    if isinstance(content, bytes):
        return content
    if isinstance(content, bytearray | memoryview):
        return bytes(content)
    if isinstance(content, str):
        return content.encode(encoding)
    data = content.read()
    if isinstance(data, str):
        return data.encode(encoding)
    return bytes(data)


def to_stream(content: Content, encoding: str = DEFAULT_ENCODING) -> BinaryIO:
    """Return the payload as a readable binary stream."""
    if isinstance(content, bytes | bytearray | memoryview | str):
        return io.BytesIO(to_bytes(content, encoding))
    return content


def to_text(data: bytes, encoding: str = DEFAULT_ENCODING) -> str:
    return data.decode(encoding)
