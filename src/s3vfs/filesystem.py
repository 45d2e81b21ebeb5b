"""Filesystem objects and the factory that builds them.

``S3LocalFileSystem`` resolves options and constructs the storage client
once; ``request_filesystem`` hands out the filesystem bound to it.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from typing import Any

import boto3
import httpx

from s3vfs.config import S3FileSystemOptions, resolve_options
from s3vfs.entries.directory import DirectoryEntry
from s3vfs.models import ROOT_OBJECT
from s3vfs.storage.accessor import S3Accessor

logger = logging.getLogger(__name__)


class S3FileSystem:
    """A bucket presented as a hierarchical filesystem.

    Attributes:
        accessor: Storage accessor all entries share.
        name: Filesystem name (the bucket name).
        root: Root directory entry.
    """

    def __init__(self, accessor: S3Accessor) -> None:
        self.accessor = accessor
        self.name = accessor.name
        self.root = DirectoryEntry(self, ROOT_OBJECT)

    def __repr__(self) -> str:
        return f"S3FileSystem(name={self.name!r}, root_dir={self.accessor.options.root_dir!r})"

    @property
    def options(self) -> S3FileSystemOptions:
        return self.accessor.options


class S3LocalFileSystem:
    """Factory for an S3 filesystem over one bucket."""

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
        """Initialize the factory.

        Args:
            bucket: Bucket name; also the filesystem name.
            options: Filesystem options, or a mapping of option names.
            client: Pre-built S3 client. When omitted one is created with
                ``boto3.client("s3", **client_kwargs)``.
            http_client: Optional httpx.Client for presigned-URL transfers.
            list_page_size: Optional MaxKeys for listing requests.
            **client_kwargs: Passed to ``boto3.client`` (region_name,
                endpoint_url, credentials, config...).

        Raises:
            OptionsError: If the options are invalid.
        """
        if not bucket:
            raise ValueError("bucket must not be empty")
        self.bucket = bucket
        self.options = resolve_options(options)
        self._client = client
        self._http_client = http_client
        self._list_page_size = list_page_size
        self._client_kwargs = client_kwargs
        self._filesystem: S3FileSystem | None = None
        self._lock = threading.Lock()

    def _create_client(self) -> Any:
        if self._client is not None:
            return self._client
        logger.debug("Creating S3 client for bucket=%s", self.bucket)
        return boto3.client("s3", **self._client_kwargs)

    def request_filesystem(self) -> S3FileSystem:
        """Return the filesystem, building it on first use."""
        with self._lock:
            if self._filesystem is None:
                accessor = S3Accessor(
                    self._create_client(),
                    self.bucket,
                    self.options,
                    http_client=self._http_client,
                    list_page_size=self._list_page_size,
                )
                self._filesystem = S3FileSystem(accessor)
                logger.info(
                    "S3 filesystem ready: bucket=%s root_dir=%r",
                    self.bucket,
                    self.options.root_dir,
                )
            return self._filesystem
