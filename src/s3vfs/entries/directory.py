"""Directory entries and readers.

Directories are virtual: they exist because keys share their prefix (or,
with the index enabled, because a marker object sits at the prefix).
``get_directory`` resolves one of four outcomes:

1. a file is stored at the path -> TypeMismatchError ("not a directory")
2. a directory is found -> PathExistsError on exclusive create, else the entry
3. nothing is found -> a new directory entry (plus a marker when indexing)
4. any other lookup error -> propagated unchanged
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from s3vfs.entries.entry import Entry
from s3vfs.entries.file import FileEntry
from s3vfs.errors import (
    InvalidModificationError,
    NotFoundError,
    PathExistsError,
    TypeMismatchError,
)
from s3vfs.models import FileSystemObject, NodeKind
from s3vfs.paths import ROOT_PATH, get_name, get_parent_path, is_ancestor, resolve_to_full_path

if TYPE_CHECKING:
    from s3vfs.filesystem import S3FileSystem

logger = logging.getLogger(__name__)


def entry_for(filesystem: S3FileSystem, obj: FileSystemObject) -> Entry:
    """Wrap a FileSystemObject in the entry type its kind calls for."""
    if obj.kind is NodeKind.FILE:
        return FileEntry(filesystem, obj)
    return DirectoryEntry(filesystem, obj)


class DirectoryReader:
    """Reads a directory's children.

    The first ``read_entries`` call returns every child; later calls
    return an empty list.
    """

    def __init__(self, directory: DirectoryEntry) -> None:
        self.directory = directory
        self.used = False

    def read_entries(self) -> list[Entry]:
        if self.used:
            return []
        filesystem = self.directory.filesystem
        objects = filesystem.accessor.get_objects(self.directory.full_path)
        self.used = True
        return [entry_for(filesystem, obj) for obj in objects]


class DirectoryEntry(Entry):
    """A directory in an S3 filesystem."""

    is_file = False
    is_directory = True

    def create_reader(self) -> DirectoryReader:
        return DirectoryReader(self)

    def list_entries(self) -> list[Entry]:
        """Return all children (a fresh reader's first batch)."""
        return self.create_reader().read_entries()

    def get_file(
        self,
        path: str,
        *,
        create: bool = False,
        exclusive: bool = False,
    ) -> FileEntry:
        """Look up, or create, a file relative to this directory.

        Args:
            path: Relative or absolute path.
            create: Create an empty file when nothing exists.
            exclusive: With ``create``, fail if the file already exists.

        Raises:
            NotFoundError: If the file is absent and ``create`` is False.
            TypeMismatchError: If a directory exists at the path, or a file
                exists where a parent directory would be.
            PathExistsError: On an exclusive create of an existing file.
        """
        full_path = resolve_to_full_path(self.full_path, path)
        try:
            obj = self.accessor.get_object(full_path)
        except NotFoundError:
            if not create:
                raise
            self._ensure_ancestors_not_files(full_path)
            self.accessor.put_empty_file(full_path)
            logger.debug("Created empty file %s", full_path)
            return FileEntry(self.filesystem, self.accessor.get_object(full_path))

        if obj.is_directory:
            raise TypeMismatchError(self.filesystem.name, full_path, f"{full_path} is not a file")
        if create and exclusive:
            raise PathExistsError(self.filesystem.name, full_path, f"{full_path} already exists")
        return FileEntry(self.filesystem, obj)

    def get_directory(
        self,
        path: str,
        *,
        create: bool = False,
        exclusive: bool = False,
    ) -> DirectoryEntry:
        """Look up, or create, a directory relative to this directory.

        A missing directory is synthesized whether or not ``create`` is set;
        only with ``create`` and the index enabled is a marker persisted.
        With ``verify_directories`` off no request is made at all.

        Raises:
            TypeMismatchError: If a file exists at the path, or at a parent
                path when creating.
            PathExistsError: On an exclusive create of an existing directory.
        """
        full_path = resolve_to_full_path(self.full_path, path)
        synthesized = FileSystemObject(name=get_name(full_path), full_path=full_path)
        if not self.accessor.options.verify_directories:
            return DirectoryEntry(self.filesystem, synthesized)

        try:
            obj = self.accessor.get_object(full_path)
        except NotFoundError:
            if create:
                self._ensure_ancestors_not_files(full_path)
                self.accessor.make_directory(full_path)
            return DirectoryEntry(self.filesystem, synthesized)

        if obj.is_file:
            raise TypeMismatchError(
                self.filesystem.name, full_path, f"{full_path} is not a directory"
            )
        if create and exclusive:
            raise PathExistsError(self.filesystem.name, full_path, f"{full_path} already exists")
        return DirectoryEntry(self.filesystem, obj)

    def _ensure_ancestors_not_files(self, full_path: str) -> None:
        """Raise TypeMismatchError if the nearest existing ancestor is a file."""
        ancestor = get_parent_path(full_path)
        while ancestor != ROOT_PATH:
            try:
                obj = self.accessor.get_object(ancestor)
            except NotFoundError:
                ancestor = get_parent_path(ancestor)
                continue
            if obj.is_file:
                raise TypeMismatchError(
                    self.filesystem.name, full_path, f"{ancestor} is not a directory"
                )
            return

    def _ensure_not_file(self) -> bool:
        """Return False if nothing exists here; raise if a file does."""
        try:
            obj = self.accessor.get_object(self.full_path)
        except NotFoundError:
            return False
        if obj.is_file:
            raise TypeMismatchError(
                self.filesystem.name, self.full_path, f"{self.full_path} is not a directory"
            )
        return True

    def remove(self) -> None:
        """Remove this directory if it is empty.

        Raises:
            InvalidModificationError: For the root, a non-empty directory,
                or a path that holds a file.
        """
        if self.full_path == ROOT_PATH:
            raise InvalidModificationError(
                self.filesystem.name, self.full_path, "The root directory cannot be removed"
            )
        if not self._ensure_not_file():
            return
        if self.accessor.has_children(self.full_path):
            raise InvalidModificationError(
                self.filesystem.name, self.full_path, f"{self.full_path} is not empty"
            )
        self.accessor.delete(self.full_path, is_file=False)

    def remove_recursively(self) -> None:
        """Delete this directory and everything below it."""
        if self.full_path != ROOT_PATH:
            self._ensure_not_file()
        self.accessor.delete_recursively(self.full_path)

    def copy_to(self, parent: DirectoryEntry, new_name: str | None = None) -> DirectoryEntry:
        """Copy this directory tree into ``parent`` child by child.

        Raises:
            InvalidModificationError: If the destination is this directory
                or lies inside it.
            TypeMismatchError: If a file exists at the destination.
        """
        destination = self._destination_path(parent, new_name)
        if is_ancestor(self.full_path, destination):
            raise InvalidModificationError(
                self.filesystem.name,
                destination,
                f"Cannot copy {self.full_path} into itself",
            )
        target = parent.get_directory(destination, create=True)
        for child in self.list_entries():
            child.copy_to(target)
        return target

    def move_to(self, parent: DirectoryEntry, new_name: str | None = None) -> DirectoryEntry:
        moved = self.copy_to(parent, new_name)
        self.remove_recursively()
        return moved
