"""File entries."""

from __future__ import annotations

from typing import TYPE_CHECKING

from s3vfs.entries.entry import Entry
from s3vfs.entries.writer import FileWriter
from s3vfs.errors import TypeMismatchError
from s3vfs.storage.content import DEFAULT_ENCODING

if TYPE_CHECKING:
    from s3vfs.entries.directory import DirectoryEntry


class FileEntry(Entry):
    """A single stored object."""

    is_file = True
    is_directory = False

    def create_writer(self) -> FileWriter:
        return FileWriter(self)

    def read_bytes(self) -> bytes:
        return self.accessor.read_bytes(self.full_path)

    def read_text(self, encoding: str = DEFAULT_ENCODING) -> str:
        return self.accessor.read_text(self.full_path, encoding=encoding)

    def remove(self) -> None:
        """Delete the file; deleting a file that is already gone succeeds."""
        self.accessor.delete(self.full_path, is_file=True)

    def copy_to(self, parent: DirectoryEntry, new_name: str | None = None) -> FileEntry:
        """Copy the file server-side into ``parent``.

        Raises:
            InvalidModificationError: If source and destination are the same.
            TypeMismatchError: If a directory already exists at the destination.
        """
        destination = self._destination_path(parent, new_name)
        existing = self._find(destination)
        if existing is not None and existing.is_directory:
            raise TypeMismatchError(
                self.filesystem.name, destination, f"{destination} is a directory"
            )
        self.accessor.copy(self.full_path, destination)
        return FileEntry(self.filesystem, self.accessor.get_object(destination))

    def move_to(self, parent: DirectoryEntry, new_name: str | None = None) -> FileEntry:
        moved = self.copy_to(parent, new_name)
        self.remove()
        return moved
