"""Mapping between filesystem paths and storage keys.

A path maps to its key by dropping the leading separator, after prepending
the configured root directory. The root maps to the root directory's key
("" when there is none). A directory's listing prefix is its key plus a
trailing separator, except for an empty key which lists the whole bucket.
"""

from __future__ import annotations

from s3vfs.paths import DIR_SEPARATOR, ROOT_PATH, normalize_path


class KeyMapper:
    """Converts full paths to keys and prefixes, and keys back to paths."""

    def __init__(self, root_dir: str = "") -> None:
        """Initialize the mapper.

        Args:
            root_dir: Storage-side root ("" or "/a/b"); normalized here too.
        """
        root = normalize_path(root_dir) if root_dir else ROOT_PATH
        self._root_dir = "" if root == ROOT_PATH else root
        self._root_key = self._root_dir[1:]

    @property
    def root_dir(self) -> str:
        return self._root_dir

    def to_key(self, full_path: str) -> str:
        path = full_path if full_path.startswith(DIR_SEPARATOR) else normalize_path(full_path)
        if self._root_dir:
            path = self._root_dir if path == ROOT_PATH else self._root_dir + path
        return path[1:]

    def to_prefix(self, full_path: str) -> str:
        key = self.to_key(full_path)
        if key:
            key += DIR_SEPARATOR
        return key

    def to_path(self, key: str) -> str:
        """Convert a storage key back into a full path.

        Raises:
            ValueError: If ``key`` lies outside the configured root directory.
        """
        relative = key
        if self._root_key:
            if key == self._root_key:
                return ROOT_PATH
            root_prefix = self._root_key + DIR_SEPARATOR
            if not key.startswith(root_prefix):
                raise ValueError(f"Key {key!r} is outside root directory {self._root_dir!r}")
            relative = key[len(root_prefix) :]
        return DIR_SEPARATOR + relative.rstrip(DIR_SEPARATOR)
