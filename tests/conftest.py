"""Pytest configuration and fixtures for s3vfs tests.

Every filesystem built here talks to the in-memory client from
``tests.fakes``; presigned-URL traffic goes through an httpx MockTransport
served from the same store.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
import pytest

from s3vfs.filesystem import S3FileSystem, S3LocalFileSystem
from tests.fakes import TEST_BUCKET, FakeS3Client


@pytest.fixture
def fake_s3() -> FakeS3Client:
    """Return an empty in-memory S3 client for TEST_BUCKET."""
    return FakeS3Client()


@pytest.fixture
def http_client(fake_s3: FakeS3Client) -> Any:
    """Return an httpx client whose requests are served by ``fake_s3``."""
    with httpx.Client(transport=httpx.MockTransport(fake_s3.handle_http)) as client:
        yield client


@pytest.fixture
def make_filesystem(
    fake_s3: FakeS3Client, http_client: httpx.Client
) -> Callable[..., S3FileSystem]:
    """Return a factory building a filesystem over ``fake_s3`` with given options."""

    def _make(list_page_size: int | None = None, **options: Any) -> S3FileSystem:
        factory = S3LocalFileSystem(
            TEST_BUCKET,
            options,
            client=fake_s3,
            http_client=http_client,
            list_page_size=list_page_size,
        )
        return factory.request_filesystem()

    return _make


@pytest.fixture
def filesystem(make_filesystem: Callable[..., S3FileSystem]) -> S3FileSystem:
    """Return a filesystem with default options."""
    return make_filesystem()
