"""Positional writer for file entries.

Objects cannot be patched in place, so every write rebuilds the whole
object (existing head + new data + existing tail) and uploads it with the
configured write strategy. After each upload the entry's size and
timestamp are re-read from the store.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from s3vfs.storage.content import Content, to_bytes

if TYPE_CHECKING:
    from s3vfs.entries.file import FileEntry

logger = logging.getLogger(__name__)


class FileWriter:
    """Writes into a file at a movable position.

    Attributes:
        position: Byte offset the next write starts at.
        length: Current size of the file in bytes.
    """

    def __init__(self, file_entry: FileEntry) -> None:
        self.file_entry = file_entry
        self.position = 0
        self.length = file_entry.size or 0

    def seek(self, offset: int) -> None:
        """Move the write position.

        Negative offsets count back from the end; the result is clamped
        into [0, length].
        """
        if offset < 0:
            offset = self.length + offset
        self.position = max(0, min(offset, self.length))

    def write(self, content: Content) -> None:
        """Write ``content`` at the current position and advance past it."""
        data = to_bytes(content)
        end = self.position + len(data)

        if self.position == 0 and end >= self.length:
            updated = data
        else:
            current = self._read_current()
            head = current[: self.position].ljust(self.position, b"\x00")
            updated = head + data + current[end:]

        self._save(updated)
        self.position = end

    def truncate(self, size: int) -> None:
        """Cut the file to ``size`` bytes, zero-padding if it grows."""
        if size < 0:
            raise ValueError(f"size must not be negative, got {size}")
        current = self._read_current() if size > 0 else b""
        self._save(current[:size].ljust(size, b"\x00"))
        self.position = min(self.position, size)

    def _read_current(self) -> bytes:
        if self.length == 0:
            return b""
        return self.file_entry.accessor.read_bytes(self.file_entry.full_path)

    def _save(self, data: bytes) -> None:
        accessor = self.file_entry.accessor
        full_path = self.file_entry.full_path
        accessor.write_bytes(full_path, data)
        self.file_entry._refresh(accessor.get_object(full_path))
        self.length = self.file_entry.size if self.file_entry.size is not None else len(data)
        logger.debug("Wrote %d bytes to %s", len(data), full_path)
