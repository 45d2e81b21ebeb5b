"""Prefix listing over a flat object store.

Directories do not exist in the store; they are the common prefixes a
delimiter listing reports. Truncated responses are followed with the
continuation token in a loop, so every call yields one complete logical
listing. The sequence is lazy and restartable by calling again.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any, Final

from s3vfs.errors import NotFoundError, NotReadableError
from s3vfs.models import FileSystemObject, to_epoch_millis
from s3vfs.paths import DIR_SEPARATOR, join_path
from s3vfs.storage.client_errors import STORAGE_ERRORS, is_not_found
from s3vfs.storage.keys import KeyMapper

logger = logging.getLogger(__name__)

# Object stores cap list and batch-delete requests at this many keys.
MAX_KEYS_PER_REQUEST: Final[int] = 1000


class ObjectLister:
    """Paginated prefix/delimiter listing for one bucket."""

    def __init__(
        self,
        client: Any,
        bucket: str,
        keys: KeyMapper,
        *,
        page_size: int | None = None,
    ) -> None:
        """Initialize the lister.

        Args:
            client: boto3 S3 client (or compatible).
            bucket: Bucket name; also the filesystem name in errors.
            keys: Path/key mapper.
            page_size: Optional MaxKeys for listing requests.
        """
        self._client = client
        self._bucket = bucket
        self._keys = keys
        self._page_size = page_size

    def _pages(
        self,
        path: str,
        prefix: str,
        *,
        delimiter: str | None = None,
        max_keys: int | None = None,
        start_after: str | None = None,
        follow: bool = True,
    ) -> Iterator[dict[str, Any]]:
        """Yield raw listing pages, following continuation tokens."""
        params: dict[str, Any] = {"Bucket": self._bucket, "Prefix": prefix}
        if delimiter:
            params["Delimiter"] = delimiter
        max_keys = max_keys or self._page_size
        if max_keys:
            params["MaxKeys"] = max_keys
        if start_after:
            params["StartAfter"] = start_after

        while True:
            logger.debug("list_objects_v2 bucket=%s prefix=%r", self._bucket, prefix)
            try:
                page = self._client.list_objects_v2(**params)
            except STORAGE_ERRORS as e:
                if is_not_found(e):
                    raise NotFoundError(self._bucket, path, cause=e) from e
                raise NotReadableError(self._bucket, path, cause=e) from e

            yield page

            token = page.get("NextContinuationToken")
            if not follow or not page.get("IsTruncated") or not token:
                return
            params["ContinuationToken"] = token
            params.pop("StartAfter", None)

    def list_children(self, dir_path: str) -> Iterator[FileSystemObject]:
        """Yield the immediate children of a directory.

        Common prefixes become directories (no size, no timestamp); contents
        become files. The directory's own marker object is skipped. A key
        stored at the same path as a common prefix wins, matching what a
        lookup of that path returns; it always sorts ahead of the prefix.

        Raises:
            NotFoundError: If the bucket or root is absent.
            NotReadableError: On any other listing failure.
        """
        prefix = self._keys.to_prefix(dir_path)
        seen: set[str] = set()

        for page in self._pages(dir_path, prefix, delimiter=DIR_SEPARATOR):
            for content in page.get("Contents") or []:
                name = content["Key"][len(prefix) :]
                full_path = join_path(dir_path, name)
                if not name or full_path in seen:
                    continue
                seen.add(full_path)
                yield FileSystemObject(
                    name=name,
                    full_path=full_path,
                    last_modified=to_epoch_millis(content.get("LastModified")),
                    size=int(content.get("Size", 0)),
                )

            for common_prefix in page.get("CommonPrefixes") or []:
                name = common_prefix["Prefix"][len(prefix) :].rstrip(DIR_SEPARATOR)
                full_path = join_path(dir_path, name)
                if not name or full_path in seen:
                    continue
                seen.add(full_path)
                yield FileSystemObject(name=name, full_path=full_path)

    def find(self, full_path: str) -> FileSystemObject | None:
        """Look up one path by listing its parent level.

        Used where listing is more consistent than HEAD. An exact key match is
        a file; a matching common prefix is a directory.
        """
        key = self._keys.to_key(full_path)
        name = key.rsplit(DIR_SEPARATOR, 1)[-1]
        directory_prefix = key + DIR_SEPARATOR

        for page in self._pages(full_path, key, delimiter=DIR_SEPARATOR):
            for content in page.get("Contents") or []:
                if content["Key"] == key:
                    return FileSystemObject(
                        name=name,
                        full_path=full_path,
                        last_modified=to_epoch_millis(content.get("LastModified")),
                        size=int(content.get("Size", 0)),
                    )
            for common_prefix in page.get("CommonPrefixes") or []:
                if common_prefix["Prefix"] == directory_prefix:
                    return FileSystemObject(name=name, full_path=full_path)
        return None

    def has_children(self, dir_path: str) -> bool:
        """Probe for at least one object under a directory.

        Issues a single request capped at one key. The directory's own
        marker sorts first under its prefix, so it is skipped with StartAfter.
        """
        prefix = self._keys.to_prefix(dir_path)
        for page in self._pages(
            dir_path, prefix, max_keys=1, start_after=prefix or None, follow=False
        ):
            return bool(page.get("Contents") or page.get("CommonPrefixes"))
        return False

    def first_keys(self, dir_path: str, limit: int = MAX_KEYS_PER_REQUEST) -> list[str]:
        """Return up to ``limit`` keys anywhere under a directory, markers included."""
        prefix = self._keys.to_prefix(dir_path)
        for page in self._pages(dir_path, prefix, max_keys=limit, follow=False):
            return [content["Key"] for content in page.get("Contents") or []]
        return []
