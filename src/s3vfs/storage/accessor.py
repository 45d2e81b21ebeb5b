"""S3 accessor: the storage façade behind every filesystem entry.

Binds the key mapper, the lister and the transfer strategies to the
operations entries need, and translates storage errors exactly once:

- not found (404 / NoSuchKey / NoSuchBucket) -> NotFoundError
- other read-path failures -> NotReadableError
- write/delete-path failures -> InvalidModificationError

Directory policy:
    A directory exists when an object lives under its prefix. With
    ``use_index`` a zero-byte marker object at the prefix ("a/b/") is also
    written when a directory is created, so empty directories persist and
    are listed. Without it, creating a directory touches nothing.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

import httpx

from s3vfs.config import S3FileSystemOptions, resolve_options
from s3vfs.errors import (
    InvalidModificationError,
    NotFoundError,
    NotReadableError,
)
from s3vfs.models import ROOT_OBJECT, FileSystemObject, to_epoch_millis
from s3vfs.paths import ROOT_PATH, get_name, normalize_path
from s3vfs.storage.client_errors import STORAGE_ERRORS, is_not_found
from s3vfs.storage.content import DEFAULT_ENCODING, Content, to_text
from s3vfs.storage.keys import KeyMapper
from s3vfs.storage.lister import MAX_KEYS_PER_REQUEST, ObjectLister
from s3vfs.storage.signed_urls import SignedUrlCache
from s3vfs.storage.tracing import traced_storage_operation
from s3vfs.storage.transfer import DEFAULT_CONTENT_TYPE, ContentTransfer, UrlSigner

logger = logging.getLogger(__name__)

T = TypeVar("T")

TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"


class S3Accessor:
    """Storage operations for one bucket, rooted at ``options.root_dir``."""

    def __init__(
        self,
        client: Any,
        bucket: str,
        options: S3FileSystemOptions | None = None,
        *,
        http_client: httpx.Client | None = None,
        list_page_size: int | None = None,
    ) -> None:
        """Initialize the accessor.

        Args:
            client: boto3 S3 client (or compatible).
            bucket: Bucket name, also used as the filesystem name.
            options: Resolved filesystem options (defaults if None).
            http_client: Optional httpx.Client for presigned-URL transfers.
            list_page_size: Optional MaxKeys for directory listings.
        """
        self.client = client
        self.name = bucket
        self.options = options if options is not None else resolve_options()
        self.keys = KeyMapper(self.options.root_dir)
        self.lister = ObjectLister(client, bucket, self.keys, page_size=list_page_size)
        self.signed_urls = SignedUrlCache(self.options.signed_url_cache_size)
        self.signer = UrlSigner(
            client,
            bucket,
            expiry_seconds=self.options.signed_url_expiry_seconds,
            cache=self.signed_urls,
        )
        self.transfer = ContentTransfer(
            client,
            bucket,
            self.options,
            signer=self.signer,
            http_client=http_client,
        )
        logger.debug(
            "S3Accessor initialized: bucket=%s root_dir=%r read=%s write=%s index=%s",
            bucket,
            self.options.root_dir,
            self.options.method_of_read.value,
            self.options.method_of_write.value,
            self.options.use_index,
        )

    @property
    def backend_name(self) -> str:
        return "s3"

    @property
    def has_index(self) -> bool:
        return self.options.use_index

    def _read_call(self, full_path: str, call: Callable[[], T]) -> T:
        try:
            return call()
        except STORAGE_ERRORS as e:
            if is_not_found(e):
                raise NotFoundError(self.name, full_path, cause=e) from e
            raise NotReadableError(self.name, full_path, cause=e) from e

    def _write_call(self, full_path: str, call: Callable[[], T]) -> T:
        try:
            return call()
        except STORAGE_ERRORS as e:
            raise InvalidModificationError(self.name, full_path, cause=e) from e

    # -- lookup ---------------------------------------------------------------

    @traced_storage_operation("get_object")
    def get_object(self, full_path: str) -> FileSystemObject:
        """Return the file or directory at ``full_path``.

        Raises:
            NotFoundError: If neither a file nor a directory exists there.
            NotReadableError: On any other lookup failure.
        """
        full_path = normalize_path(full_path)
        if full_path == ROOT_PATH:
            return ROOT_OBJECT

        if self.options.get_object_using_list_object:
            obj = self.lister.find(full_path)
            if obj is None:
                raise NotFoundError(self.name, full_path)
            return obj

        key = self.keys.to_key(full_path)
        try:
            head = self.client.head_object(Bucket=self.name, Key=key)
        except STORAGE_ERRORS as e:
            if not is_not_found(e):
                raise NotReadableError(self.name, full_path, cause=e) from e
            if self._directory_exists(full_path):
                return FileSystemObject(name=get_name(full_path), full_path=full_path)
            raise NotFoundError(self.name, full_path, cause=e) from e

        return FileSystemObject(
            name=get_name(full_path),
            full_path=full_path,
            last_modified=to_epoch_millis(head.get("LastModified")),
            size=int(head.get("ContentLength", 0)),
        )

    def _directory_exists(self, full_path: str) -> bool:
        if self.has_index and self._marker_exists(full_path):
            return True
        return self.lister.has_children(full_path)

    def _marker_exists(self, full_path: str) -> bool:
        marker = self.keys.to_prefix(full_path)
        try:
            self.client.head_object(Bucket=self.name, Key=marker)
        except STORAGE_ERRORS as e:
            if is_not_found(e):
                return False
            raise NotReadableError(self.name, full_path, cause=e) from e
        return True

    @traced_storage_operation("get_objects")
    def get_objects(self, dir_path: str) -> list[FileSystemObject]:
        """Return the immediate children of a directory, in listing order."""
        return list(self.lister.list_children(normalize_path(dir_path)))

    def has_children(self, dir_path: str) -> bool:
        return self.lister.has_children(normalize_path(dir_path))

    # -- delete ---------------------------------------------------------------

    @traced_storage_operation("delete")
    def delete(self, full_path: str, is_file: bool) -> None:
        """Delete a file, or a directory's marker.

        Deleting something that is already gone succeeds.
        """
        full_path = normalize_path(full_path)
        if is_file:
            key = self.keys.to_key(full_path)
        elif self.has_index and full_path != ROOT_PATH:
            key = self.keys.to_prefix(full_path)
        else:
            return

        try:
            self.client.delete_object(Bucket=self.name, Key=key)
        except STORAGE_ERRORS as e:
            if is_not_found(e):
                logger.debug("Delete of missing key treated as success: key=%s", key)
                return
            raise InvalidModificationError(self.name, full_path, cause=e) from e
        logger.debug("Deleted object: bucket=%s key=%s", self.name, key)

    @traced_storage_operation("delete_recursively")
    def delete_recursively(self, dir_path: str) -> int:
        """Delete every object under a directory, markers included.

        Lists the first batch of keys, batch-deletes it and repeats until a
        batch comes back smaller than the request cap.

        Returns:
            Number of objects deleted (0 for an empty directory).
        """
        dir_path = normalize_path(dir_path)
        deleted = 0
        while True:
            keys = self.lister.first_keys(dir_path, MAX_KEYS_PER_REQUEST)
            if keys:
                self._delete_batch(dir_path, keys)
                deleted += len(keys)
            if len(keys) < MAX_KEYS_PER_REQUEST:
                break
        logger.debug("Recursively deleted %d objects under %s", deleted, dir_path)
        return deleted

    def _delete_batch(self, dir_path: str, keys: list[str]) -> None:
        response = self._write_call(
            dir_path,
            lambda: self.client.delete_objects(
                Bucket=self.name,
                Delete={"Objects": [{"Key": key} for key in keys], "Quiet": True},
            ),
        )
        errors = [err for err in response.get("Errors") or [] if err.get("Code") != "NoSuchKey"]
        if errors:
            first = errors[0]
            raise InvalidModificationError(
                self.name,
                dir_path,
                f"Failed to delete {len(errors)} objects (first: {first.get('Key')} "
                f"{first.get('Code')})",
            )

    # -- write ----------------------------------------------------------------

    def _write(self, full_path: str, content: Content, content_type: str) -> None:
        full_path = normalize_path(full_path)
        key = self.keys.to_key(full_path)
        self._write_call(
            full_path, lambda: self.transfer.write(key, content, content_type=content_type)
        )

    @traced_storage_operation("write_bytes")
    def write_bytes(
        self, full_path: str, data: bytes, *, content_type: str = DEFAULT_CONTENT_TYPE
    ) -> None:
        self._write(full_path, data, content_type)

    @traced_storage_operation("write_text")
    def write_text(self, full_path: str, text: str, *, encoding: str = DEFAULT_ENCODING) -> None:
        self._write(full_path, text.encode(encoding), TEXT_CONTENT_TYPE)

    @traced_storage_operation("write_stream")
    def write_stream(
        self, full_path: str, stream: Any, *, content_type: str = DEFAULT_CONTENT_TYPE
    ) -> None:
        """Upload a binary file object, read from its current position."""
        self._write(full_path, stream, content_type)

    @traced_storage_operation("put_empty_file")
    def put_empty_file(self, full_path: str) -> None:
        """Create a zero-byte file with a single PUT, whatever the write strategy."""
        full_path = normalize_path(full_path)
        key = self.keys.to_key(full_path)
        self._write_call(
            full_path,
            lambda: self.client.put_object(
                Bucket=self.name, Key=key, Body=b"", ContentType=DEFAULT_CONTENT_TYPE
            ),
        )

    @traced_storage_operation("make_directory")
    def make_directory(self, full_path: str) -> None:
        """Persist a directory marker when the index is enabled; otherwise no-op."""
        full_path = normalize_path(full_path)
        if not self.has_index or full_path == ROOT_PATH:
            return
        marker = self.keys.to_prefix(full_path)
        self._write_call(
            full_path,
            lambda: self.client.put_object(
                Bucket=self.name, Key=marker, Body=b"", ContentType=DEFAULT_CONTENT_TYPE
            ),
        )
        logger.debug("Wrote directory marker: bucket=%s key=%s", self.name, marker)

    @traced_storage_operation("copy")
    def copy(self, full_path: str, dest_path: str) -> None:
        """Copy one file server-side.

        Raises:
            NotFoundError: If the source is gone.
            InvalidModificationError: On any other failure.
        """
        full_path = normalize_path(full_path)
        source_key = self.keys.to_key(full_path)
        dest_key = self.keys.to_key(normalize_path(dest_path))
        try:
            self.client.copy_object(
                Bucket=self.name,
                Key=dest_key,
                CopySource={"Bucket": self.name, "Key": source_key},
            )
        except STORAGE_ERRORS as e:
            if is_not_found(e):
                raise NotFoundError(self.name, full_path, cause=e) from e
            raise InvalidModificationError(self.name, dest_path, cause=e) from e

    # -- read -----------------------------------------------------------------

    @traced_storage_operation("read_bytes")
    def read_bytes(self, full_path: str) -> bytes:
        full_path = normalize_path(full_path)
        key = self.keys.to_key(full_path)
        return self._read_call(full_path, lambda: self.transfer.read(key))

    @traced_storage_operation("read_text")
    def read_text(self, full_path: str, *, encoding: str = DEFAULT_ENCODING) -> str:
        return to_text(self.read_bytes(full_path), encoding)

    def get_url(self, full_path: str) -> str:
        """Return a presigned GET URL for a file."""
        key = self.keys.to_key(normalize_path(full_path))
        return self._read_call(
            full_path,
            lambda: self.signer.url(key, "get_object", no_cache=self.options.no_cache),
        )
