"""Configuration for the S3 filesystem.

Options are an immutable value resolved once when the filesystem is built.
``resolve_options`` fills defaults from a mapping (snake_case field names or
the camelCase option names used by other clients of the same bucket layout);
``load_options_from_env`` reads the ``S3VFS_*`` environment variables.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Final

from s3vfs.paths import ROOT_PATH, normalize_path

logger = logging.getLogger(__name__)

ENV_ROOT_DIR: Final[str] = "S3VFS_ROOT_DIR"
ENV_METHOD_OF_READ: Final[str] = "S3VFS_METHOD_OF_READ"
ENV_METHOD_OF_WRITE: Final[str] = "S3VFS_METHOD_OF_WRITE"
ENV_NO_CACHE: Final[str] = "S3VFS_NO_CACHE"
ENV_SIGNED_URL_EXPIRY_SECONDS: Final[str] = "S3VFS_SIGNED_URL_EXPIRY_SECONDS"
ENV_USE_INDEX: Final[str] = "S3VFS_USE_INDEX"
ENV_GET_OBJECT_USING_LIST_OBJECT: Final[str] = "S3VFS_GET_OBJECT_USING_LIST_OBJECT"
ENV_VERIFY_DIRECTORIES: Final[str] = "S3VFS_VERIFY_DIRECTORIES"
ENV_MULTIPART_CHUNK_SIZE: Final[str] = "S3VFS_MULTIPART_CHUNK_SIZE"

DEFAULT_SIGNED_URL_EXPIRY_SECONDS: Final[int] = 3600
DEFAULT_MULTIPART_CHUNK_SIZE: Final[int] = 5 * 1024 * 1024
DEFAULT_SIGNED_URL_CACHE_SIZE: Final[int] = 256
DEFAULT_HTTP_TIMEOUT_SECONDS: Final[float] = 30.0


class ReadMethod(str, Enum):
    """How file content is fetched."""

    DIRECT = "direct"
    PRESIGNED_URL = "presignedUrl"


class WriteMethod(str, Enum):
    """How file content is uploaded."""

    PUT_OBJECT = "putObject"
    MANAGED_UPLOAD = "managedUpload"
    MULTIPART = "multipart"
    PRESIGNED_URL = "presignedUrl"


class OptionsError(Exception):
    """Raised when filesystem options are invalid."""


def _normalize_root_dir(root_dir: str) -> str:
    """Return ``root_dir`` as "" or "/a/b", with "." and ".." resolved."""
    normalized = normalize_path(root_dir)
    return "" if normalized == ROOT_PATH else normalized


_BOOL_FIELDS: Final[tuple[str, ...]] = (
    "no_cache",
    "use_index",
    "get_object_using_list_object",
    "verify_directories",
)
_INT_FIELDS: Final[tuple[str, ...]] = (
    "signed_url_expiry_seconds",
    "multipart_chunk_size",
    "signed_url_cache_size",
)


@dataclass(frozen=True)
class S3FileSystemOptions:
    """S3 filesystem options (immutable).

    Attributes:
        root_dir: Storage-side prefix all paths are rooted under.
        method_of_read: Strategy for reading content.
        method_of_write: Strategy for writing content.
        no_cache: Ask for cache-busting response headers on reads.
        signed_url_expiry_seconds: Lifetime of presigned URLs.
        use_index: Persist zero-byte directory marker objects so that
            empty directories survive and are listed.
        get_object_using_list_object: Resolve object metadata with a
            listing request instead of HEAD.
        verify_directories: When False, ``get_directory`` trusts the caller
            and never touches storage.
        multipart_chunk_size: Part size for multipart and managed uploads.
        signed_url_cache_size: Maximum cached presigned URLs (0 disables).
        http_timeout_seconds: Timeout for presigned-URL HTTP transfers.
    """

    root_dir: str = ""
    method_of_read: ReadMethod = ReadMethod.DIRECT
    method_of_write: WriteMethod = WriteMethod.PUT_OBJECT
    no_cache: bool = False
    signed_url_expiry_seconds: int = DEFAULT_SIGNED_URL_EXPIRY_SECONDS
    use_index: bool = False
    get_object_using_list_object: bool = False
    verify_directories: bool = True
    multipart_chunk_size: int = DEFAULT_MULTIPART_CHUNK_SIZE
    signed_url_cache_size: int = DEFAULT_SIGNED_URL_CACHE_SIZE
    http_timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        """Validate and normalize option values."""
        if not isinstance(self.root_dir, str):
            raise OptionsError(f"root_dir must be a string, got {self.root_dir!r}")
        object.__setattr__(self, "root_dir", _normalize_root_dir(self.root_dir))
        for name in _BOOL_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, bool):
                raise OptionsError(f"{name} must be a boolean, got {value!r}")
        for name in _INT_FIELDS:
            value = getattr(self, name)
            # bool is an int subclass but never a valid size or count
            if isinstance(value, bool) or not isinstance(value, int):
                raise OptionsError(f"{name} must be an integer, got {value!r}")
        if isinstance(self.http_timeout_seconds, bool) or not isinstance(
            self.http_timeout_seconds, int | float
        ):
            raise OptionsError(
                f"http_timeout_seconds must be a number, got {self.http_timeout_seconds!r}"
            )
        if not isinstance(self.method_of_read, ReadMethod):
            raise OptionsError(f"method_of_read must be a ReadMethod, got {self.method_of_read!r}")
        if not isinstance(self.method_of_write, WriteMethod):
            raise OptionsError(
                f"method_of_write must be a WriteMethod, got {self.method_of_write!r}"
            )
        if self.signed_url_expiry_seconds <= 0:
            raise OptionsError(
                "signed_url_expiry_seconds must be a positive integer, "
                f"got {self.signed_url_expiry_seconds}"
            )
        if self.multipart_chunk_size <= 0:
            raise OptionsError(
                f"multipart_chunk_size must be a positive integer, got {self.multipart_chunk_size}"
            )
        if self.signed_url_cache_size < 0:
            raise OptionsError(
                f"signed_url_cache_size must not be negative, got {self.signed_url_cache_size}"
            )
        if self.http_timeout_seconds <= 0:
            raise OptionsError(
                f"http_timeout_seconds must be positive, got {self.http_timeout_seconds}"
            )


_FIELD_NAMES: Final[frozenset[str]] = frozenset(f.name for f in fields(S3FileSystemOptions))

_OPTION_ALIASES: Final[dict[str, str]] = {
    "rootDir": "root_dir",
    "methodOfRead": "method_of_read",
    "methodOfWrite": "method_of_write",
    "noCache": "no_cache",
    "signedUrlExpirySeconds": "signed_url_expiry_seconds",
    "useIndex": "use_index",
    "getObjectUsingListObject": "get_object_using_list_object",
    "verifyDirectories": "verify_directories",
    "multipartChunkSize": "multipart_chunk_size",
    "signedUrlCacheSize": "signed_url_cache_size",
    "httpTimeoutSeconds": "http_timeout_seconds",
}


def _coerce(name: str, value: Any) -> Any:
    """Coerce string enum values into their enum members."""
    try:
        if name == "method_of_read" and not isinstance(value, ReadMethod):
            return ReadMethod(value)
        if name == "method_of_write" and not isinstance(value, WriteMethod):
            return WriteMethod(value)
    except ValueError as e:
        raise OptionsError(f"Invalid value for {name}: {value!r}") from e
    return value


def resolve_options(
    options: S3FileSystemOptions | Mapping[str, Any] | None = None,
    **overrides: Any,
) -> S3FileSystemOptions:
    """Resolve options with defaults filled in.

    Never mutates ``options``; always returns a new value.

    Args:
        options: Existing options, a mapping of option names, or None.
        **overrides: Individual option values taking precedence.

    Returns:
        Validated S3FileSystemOptions.

    Raises:
        OptionsError: On unknown option names or invalid values.
    """
    values: dict[str, Any] = {}
    if isinstance(options, S3FileSystemOptions):
        base = options
    else:
        base = S3FileSystemOptions()
        if options is not None:
            values.update(options)
    values.update(overrides)

    resolved: dict[str, Any] = {}
    for raw_name, value in values.items():
        name = _OPTION_ALIASES.get(raw_name, raw_name)
        if name not in _FIELD_NAMES:
            raise OptionsError(f"Unknown filesystem option: {raw_name}")
        resolved[name] = _coerce(name, value)

    if not resolved:
        return base
    return replace(base, **resolved)


def _parse_bool(env_var: str) -> bool | None:
    raw = os.environ.get(env_var)
    if raw is None or not raw.strip():
        return None
    val = raw.strip().lower()
    if val in ("1", "true", "yes"):
        return True
    if val in ("0", "false", "no"):
        return False
    raise OptionsError(f"{env_var} must be a boolean (1/0, true/false, yes/no), got '{raw}'")


def _parse_positive_int(env_var: str) -> int | None:
    raw = os.environ.get(env_var)
    if raw is None or not raw.strip():
        return None
    raw = raw.strip()
    try:
        value = int(raw)
    except ValueError as e:
        raise OptionsError(f"{env_var} must be a positive integer, got '{raw}'") from e
    if value <= 0:
        raise OptionsError(f"{env_var} must be a positive integer, got {value}")
    return value


def load_options_from_env() -> S3FileSystemOptions:
    """Load filesystem options from environment variables.

    Environment variables:
        S3VFS_ROOT_DIR: Storage-side root prefix (default: bucket root)
        S3VFS_METHOD_OF_READ: "direct" or "presignedUrl"
        S3VFS_METHOD_OF_WRITE: "putObject", "managedUpload", "multipart" or "presignedUrl"
        S3VFS_NO_CACHE: Boolean
        S3VFS_SIGNED_URL_EXPIRY_SECONDS: Positive integer
        S3VFS_USE_INDEX: Boolean
        S3VFS_GET_OBJECT_USING_LIST_OBJECT: Boolean
        S3VFS_VERIFY_DIRECTORIES: Boolean
        S3VFS_MULTIPART_CHUNK_SIZE: Positive integer (bytes)

    Returns:
        S3FileSystemOptions with unset variables left at their defaults.

    Raises:
        OptionsError: If any value is malformed.
    """
    values: dict[str, Any] = {}

    root_dir = os.environ.get(ENV_ROOT_DIR)
    if root_dir is not None:
        values["root_dir"] = root_dir.strip()

    for env_var, name in (
        (ENV_METHOD_OF_READ, "method_of_read"),
        (ENV_METHOD_OF_WRITE, "method_of_write"),
    ):
        raw = os.environ.get(env_var, "").strip()
        if raw:
            try:
                values[name] = _coerce(name, raw)
            except OptionsError as e:
                raise OptionsError(f"{env_var} has an unsupported value: '{raw}'") from e

    for env_var, name in (
        (ENV_NO_CACHE, "no_cache"),
        (ENV_USE_INDEX, "use_index"),
        (ENV_GET_OBJECT_USING_LIST_OBJECT, "get_object_using_list_object"),
        (ENV_VERIFY_DIRECTORIES, "verify_directories"),
    ):
        flag = _parse_bool(env_var)
        if flag is not None:
            values[name] = flag

    for env_var, name in (
        (ENV_SIGNED_URL_EXPIRY_SECONDS, "signed_url_expiry_seconds"),
        (ENV_MULTIPART_CHUNK_SIZE, "multipart_chunk_size"),
    ):
        number = _parse_positive_int(env_var)
        if number is not None:
            values[name] = number

    options = resolve_options(values)
    logger.debug(
        "Loaded filesystem options from environment: root_dir=%r read=%s write=%s",
        options.root_dir,
        options.method_of_read.value,
        options.method_of_write.value,
    )
    return options
