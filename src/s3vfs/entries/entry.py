"""Base class shared by file and directory entries.

An entry is a cheap value: a FileSystemObject plus the filesystem it came
from. It holds no lock on storage state, and operations re-read whatever
they need from the store.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

from s3vfs.errors import InvalidModificationError, NotFoundError, OperationNotImplementedError
from s3vfs.models import FileSystemObject, Metadata
from s3vfs.paths import ROOT_PATH, get_name, get_parent_path, join_path

if TYPE_CHECKING:
    from s3vfs.entries.directory import DirectoryEntry
    from s3vfs.filesystem import S3FileSystem
    from s3vfs.storage.accessor import S3Accessor


class Entry(ABC):
    """A file or directory in an S3 filesystem."""

    is_file: ClassVar[bool]
    is_directory: ClassVar[bool]

    def __init__(self, filesystem: S3FileSystem, obj: FileSystemObject) -> None:
        self._filesystem = filesystem
        self._obj = obj

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.filesystem.name!r}, {self.full_path!r})"

    @property
    def filesystem(self) -> S3FileSystem:
        return self._filesystem

    @property
    def accessor(self) -> S3Accessor:
        return self._filesystem.accessor

    @property
    def obj(self) -> FileSystemObject:
        return self._obj

    @property
    def name(self) -> str:
        return self._obj.name

    @property
    def full_path(self) -> str:
        return self._obj.full_path

    @property
    def last_modified(self) -> int | None:
        return self._obj.last_modified

    @property
    def size(self) -> int | None:
        return self._obj.size

    def _refresh(self, obj: FileSystemObject) -> None:
        self._obj = obj

    def _find(self, full_path: str) -> FileSystemObject | None:
        try:
            return self.accessor.get_object(full_path)
        except NotFoundError:
            return None

    def get_metadata(self) -> Metadata:
        """Return the entry's modification time and size.

        Files are re-read from storage; directories carry neither value.
        """
        if self.is_directory:
            return Metadata(modification_time=None, size=None)
        self._refresh(self.accessor.get_object(self.full_path))
        return Metadata.from_object(self._obj)

    def set_metadata(self, metadata: Metadata) -> None:
        raise OperationNotImplementedError(
            self.filesystem.name, self.full_path, "Setting metadata is not supported"
        )

    def get_parent(self) -> DirectoryEntry:
        """Return the parent directory; the root is its own parent."""
        from s3vfs.entries.directory import DirectoryEntry

        parent_path = get_parent_path(self.full_path)
        return DirectoryEntry(
            self.filesystem,
            FileSystemObject(name=get_name(parent_path), full_path=parent_path),
        )

    def to_url(self) -> str:
        """Return a presigned GET URL for this entry."""
        return self.accessor.get_url(self.full_path)

    def _destination_path(self, parent: DirectoryEntry, new_name: str | None) -> str:
        if self.full_path == ROOT_PATH:
            raise InvalidModificationError(
                self.filesystem.name, self.full_path, "The root directory cannot be copied or moved"
            )
        destination = join_path(parent.full_path, new_name or self.name)
        if destination == self.full_path:
            raise InvalidModificationError(
                self.filesystem.name,
                destination,
                "Source and destination are the same",
            )
        return destination

    @abstractmethod
    def copy_to(self, parent: DirectoryEntry, new_name: str | None = None) -> Entry:
        """Copy this entry into ``parent``, optionally renaming it."""
        ...

    @abstractmethod
    def move_to(self, parent: DirectoryEntry, new_name: str | None = None) -> Entry:
        """Move this entry into ``parent``, optionally renaming it."""
        ...

    @abstractmethod
    def remove(self) -> None: ...
