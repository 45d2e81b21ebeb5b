"""s3vfs filesystem error types.

Every failure surfaced by the filesystem API is one of these kinds:

- NotFoundError: the target key or prefix is absent.
- NotReadableError: a read-path failure other than not-found.
- InvalidModificationError: a write/delete-path failure, or a violation of
  hierarchy consistency (file vs. directory, exclusive create, non-empty delete).
- OperationNotImplementedError: an operation this backend does not support.

Storage-layer errors are translated into these types once, at the accessor
boundary. The original exception is kept on ``cause`` and chained.
"""

from __future__ import annotations


class FileSystemError(Exception):
    """Base exception for filesystem operations.

    Attributes:
        filesystem_name: Name of the filesystem (the bucket name).
        path: Full path the operation was acting on.
        message: Human-readable error message.
        cause: Underlying storage or transport exception, if any.
    """

    default_message = "File system error"

    def __init__(
        self,
        filesystem_name: str,
        path: str,
        message: str | None = None,
        *,
        cause: BaseException | None = None,
    ) -> None:
        self.filesystem_name = filesystem_name
        self.path = path
        self.message = message or self.default_message
        self.cause = cause
        super().__init__(self.message)

    def __str__(self) -> str:
        parts = [self.message]
        if self.filesystem_name:
            parts.append(f"filesystem={self.filesystem_name}")
        if self.path:
            parts.append(f"path={self.path}")
        return " ".join(parts)


class NotFoundError(FileSystemError):
    """Raised when the target file or directory does not exist."""

    default_message = "A requested file or directory could not be found"


class NotReadableError(FileSystemError):
    """Raised when a file or directory listing cannot be read.

    Covers network failures, permission errors and malformed responses.
    """

    default_message = "The requested file could not be read"


class InvalidModificationError(FileSystemError):
    """Raised when a modification cannot be applied."""

    default_message = "The modification requested was illegal"


class PathExistsError(InvalidModificationError):
    """Raised on an exclusive create of a path that already exists."""

    default_message = "A file or directory already exists at this path"


class TypeMismatchError(InvalidModificationError):
    """Raised when a file was found where a directory was expected, or vice versa."""

    default_message = "The entry type does not match the requested operation"


class OperationNotImplementedError(FileSystemError):
    """Raised for operations the S3 backend intentionally does not support."""

    default_message = "This operation is not implemented by the S3 backend"
