"""Asynchronous facade over the S3 filesystem.

Every storage-touching call runs the synchronous implementation in a worker
thread via ``asyncio.to_thread``. Results and errors are identical to the
synchronous API.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any

import httpx

from s3vfs.config import S3FileSystemOptions
from s3vfs.entries.directory import DirectoryEntry, DirectoryReader
from s3vfs.entries.entry import Entry
from s3vfs.entries.file import FileEntry
from s3vfs.entries.writer import FileWriter
from s3vfs.filesystem import S3FileSystem, S3LocalFileSystem
from s3vfs.models import Metadata
from s3vfs.storage.content import DEFAULT_ENCODING, Content


def wrap_entry(entry: Entry) -> EntryAsync:
    if isinstance(entry, FileEntry):
        return FileEntryAsync(entry)
    if isinstance(entry, DirectoryEntry):
        return DirectoryEntryAsync(entry)
    raise TypeError(f"Unsupported entry type: {type(entry).__name__}")


class EntryAsync:
    """Async view of an entry."""

    def __init__(self, entry: Entry) -> None:
        self.entry = entry

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.entry!r})"

    @property
    def name(self) -> str:
        return self.entry.name

    @property
    def full_path(self) -> str:
        return self.entry.full_path

    @property
    def is_file(self) -> bool:
        return self.entry.is_file

    @property
    def is_directory(self) -> bool:
        return self.entry.is_directory

    @property
    def last_modified(self) -> int | None:
        return self.entry.last_modified

    @property
    def size(self) -> int | None:
        return self.entry.size

    async def get_metadata(self) -> Metadata:
        return await asyncio.to_thread(self.entry.get_metadata)

    async def set_metadata(self, metadata: Metadata) -> None:
        await asyncio.to_thread(self.entry.set_metadata, metadata)

    def get_parent(self) -> DirectoryEntryAsync:
        return DirectoryEntryAsync(self.entry.get_parent())

    async def to_url(self) -> str:
        return await asyncio.to_thread(self.entry.to_url)

    async def remove(self) -> None:
        await asyncio.to_thread(self.entry.remove)

    async def copy_to(
        self, parent: DirectoryEntryAsync, new_name: str | None = None
    ) -> EntryAsync:
        copied = await asyncio.to_thread(self.entry.copy_to, parent.entry, new_name)
        return wrap_entry(copied)

    async def move_to(
        self, parent: DirectoryEntryAsync, new_name: str | None = None
    ) -> EntryAsync:
        moved = await asyncio.to_thread(self.entry.move_to, parent.entry, new_name)
        return wrap_entry(moved)


class FileWriterAsync:
    def __init__(self, writer: FileWriter) -> None:
        self.writer = writer

    @property
    def position(self) -> int:
        return self.writer.position

    @property
    def length(self) -> int:
        return self.writer.length

    def seek(self, offset: int) -> None:
        self.writer.seek(offset)

    async def write(self, content: Content) -> None:
        await asyncio.to_thread(self.writer.write, content)

    async def truncate(self, size: int) -> None:
        await asyncio.to_thread(self.writer.truncate, size)


class FileEntryAsync(EntryAsync):
    entry: FileEntry

    def create_writer(self) -> FileWriterAsync:
        return FileWriterAsync(self.entry.create_writer())

    async def read_bytes(self) -> bytes:
        return await asyncio.to_thread(self.entry.read_bytes)

    async def read_text(self, encoding: str = DEFAULT_ENCODING) -> str:
        return await asyncio.to_thread(self.entry.read_text, encoding)


class DirectoryReaderAsync:
    def __init__(self, reader: DirectoryReader) -> None:
        self.reader = reader

    async def read_entries(self) -> list[EntryAsync]:
        entries = await asyncio.to_thread(self.reader.read_entries)
        return [wrap_entry(entry) for entry in entries]


class DirectoryEntryAsync(EntryAsync):
    entry: DirectoryEntry

    def create_reader(self) -> DirectoryReaderAsync:
        return DirectoryReaderAsync(self.entry.create_reader())

    async def list_entries(self) -> list[EntryAsync]:
        return await self.create_reader().read_entries()

    async def get_file(
        self, path: str, *, create: bool = False, exclusive: bool = False
    ) -> FileEntryAsync:
        entry = await asyncio.to_thread(
            self.entry.get_file, path, create=create, exclusive=exclusive
        )
        return FileEntryAsync(entry)

    async def get_directory(
        self, path: str, *, create: bool = False, exclusive: bool = False
    ) -> DirectoryEntryAsync:
        entry = await asyncio.to_thread(
            self.entry.get_directory, path, create=create, exclusive=exclusive
        )
        return DirectoryEntryAsync(entry)

    async def remove_recursively(self) -> None:
        await asyncio.to_thread(self.entry.remove_recursively)


class FileSystemAsync:
    """Async view of an S3FileSystem."""

    def __init__(self, filesystem: S3FileSystem) -> None:
        self.filesystem = filesystem
        self.name = filesystem.name
        self.root = DirectoryEntryAsync(filesystem.root)


class S3LocalFileSystemAsync:
    """Async counterpart of S3LocalFileSystem; takes the same arguments."""

    def __init__(
        self,
        bucket: str,
        options: S3FileSystemOptions | Mapping[str, Any] | None = None,
        *,
        client: Any = None,
        http_client: httpx.Client | None = None,
        list_page_size: int | None = None,
        **client_kwargs: Any,
    ) -> None:
        self.factory = S3LocalFileSystem(
            bucket,
            options,
            client=client,
            http_client=http_client,
            list_page_size=list_page_size,
            **client_kwargs,
        )

    @property
    def bucket(self) -> str:
        return self.factory.bucket

    @property
    def options(self) -> S3FileSystemOptions:
        return self.factory.options

    async def request_filesystem(self) -> FileSystemAsync:
        filesystem = await asyncio.to_thread(self.factory.request_filesystem)
        return FileSystemAsync(filesystem)
