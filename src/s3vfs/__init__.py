"""s3vfs - an S3 bucket presented as a hierarchical virtual filesystem."""

from s3vfs.async_api import (
    DirectoryEntryAsync,
    FileEntryAsync,
    FileSystemAsync,
    FileWriterAsync,
    S3LocalFileSystemAsync,
)
from s3vfs.config import (
    OptionsError,
    ReadMethod,
    S3FileSystemOptions,
    WriteMethod,
    load_options_from_env,
    resolve_options,
)
from s3vfs.entries import DirectoryEntry, DirectoryReader, Entry, FileEntry, FileWriter
from s3vfs.errors import (
    FileSystemError,
    InvalidModificationError,
    NotFoundError,
    NotReadableError,
    OperationNotImplementedError,
    PathExistsError,
    TypeMismatchError,
)
from s3vfs.filesystem import S3FileSystem, S3LocalFileSystem
from s3vfs.models import FileSystemObject, Metadata

__version__ = "0.1.0"

__all__ = [
    "DirectoryEntry",
    "DirectoryEntryAsync",
    "DirectoryReader",
    "Entry",
    "FileEntry",
    "FileEntryAsync",
    "FileSystemAsync",
    "FileSystemError",
    "FileSystemObject",
    "FileWriter",
    "FileWriterAsync",
    "InvalidModificationError",
    "Metadata",
    "NotFoundError",
    "NotReadableError",
    "OperationNotImplementedError",
    "OptionsError",
    "PathExistsError",
    "ReadMethod",
    "S3FileSystem",
    "S3FileSystemOptions",
    "S3LocalFileSystem",
    "S3LocalFileSystemAsync",
    "TypeMismatchError",
    "WriteMethod",
    "load_options_from_env",
    "resolve_options",
]
