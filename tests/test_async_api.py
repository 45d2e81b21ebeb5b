"""Tests for the asyncio facade."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from s3vfs.async_api import (
    DirectoryEntryAsync,
    FileEntryAsync,
    FileSystemAsync,
    S3LocalFileSystemAsync,
)
from s3vfs.errors import NotFoundError, PathExistsError
from tests.fakes import TEST_BUCKET, FakeS3Client


@pytest.fixture
def async_factory(fake_s3: FakeS3Client, http_client: httpx.Client) -> S3LocalFileSystemAsync:
    return S3LocalFileSystemAsync(TEST_BUCKET, client=fake_s3, http_client=http_client)


class TestAsyncFilesystem:
    def test_request_filesystem(self, async_factory: S3LocalFileSystemAsync) -> None:
        filesystem = asyncio.run(async_factory.request_filesystem())

        assert isinstance(filesystem, FileSystemAsync)
        assert filesystem.name == TEST_BUCKET
        assert isinstance(filesystem.root, DirectoryEntryAsync)

    def test_write_and_read(
        self, async_factory: S3LocalFileSystemAsync, fake_s3: FakeS3Client
    ) -> None:
        """The async facade should give the same results as the blocking API."""

        async def scenario() -> tuple[str, int | None]:
            filesystem = await async_factory.request_filesystem()
            entry = await filesystem.root.get_file("dir/a.txt", create=True)
            writer = entry.create_writer()
            await writer.write("hoge")
            await writer.write("fuga")
            metadata = await entry.get_metadata()
            return await entry.read_text(), metadata.size

        text, size = asyncio.run(scenario())

        assert text == "hogefuga"
        assert size == 8
        assert fake_s3.body("dir/a.txt") == b"hogefuga"

    def test_listing_wraps_entries(
        self, async_factory: S3LocalFileSystemAsync, fake_s3: FakeS3Client
    ) -> None:
        fake_s3.add("a.txt", b"1")
        fake_s3.add("d/b.txt")

        async def scenario() -> list:
            filesystem = await async_factory.request_filesystem()
            return await filesystem.root.list_entries()

        entries = asyncio.run(scenario())

        kinds = {e.name: type(e) for e in entries}
        assert kinds == {"a.txt": FileEntryAsync, "d": DirectoryEntryAsync}

    def test_concurrent_lookups(
        self, async_factory: S3LocalFileSystemAsync, fake_s3: FakeS3Client
    ) -> None:
        for i in range(5):
            fake_s3.add(f"f{i}.txt", b"x" * i)

        async def scenario() -> list[int | None]:
            filesystem = await async_factory.request_filesystem()
            entries = await asyncio.gather(
                *(filesystem.root.get_file(f"f{i}.txt") for i in range(5))
            )
            return [entry.size for entry in entries]

        assert asyncio.run(scenario()) == [0, 1, 2, 3, 4]

    def test_errors_propagate_unchanged(self, async_factory: S3LocalFileSystemAsync) -> None:
        async def missing() -> None:
            filesystem = await async_factory.request_filesystem()
            await filesystem.root.get_file("nope.txt")

        with pytest.raises(NotFoundError):
            asyncio.run(missing())

    def test_exclusive_conflict(
        self, async_factory: S3LocalFileSystemAsync, fake_s3: FakeS3Client
    ) -> None:
        fake_s3.add("a.txt")

        async def conflict() -> None:
            filesystem = await async_factory.request_filesystem()
            await filesystem.root.get_file("a.txt", create=True, exclusive=True)

        with pytest.raises(PathExistsError):
            asyncio.run(conflict())

    def test_move_and_remove_recursively(
        self, async_factory: S3LocalFileSystemAsync, fake_s3: FakeS3Client
    ) -> None:
        fake_s3.add("src/a.txt", b"A")
        fake_s3.add("src/s/b.txt", b"B")

        async def scenario() -> None:
            filesystem = await async_factory.request_filesystem()
            source = await filesystem.root.get_directory("src")
            moved = await source.move_to(filesystem.root, "dst")
            assert moved.full_path == "/dst"
            assert isinstance(moved, DirectoryEntryAsync)
            await moved.remove_recursively()

        asyncio.run(scenario())

        assert fake_s3.objects == {}
