"""s3vfs data models.

FileSystemObject is the plain description of a node that every storage
operation returns. ``size`` is the only discriminator: a file always has a
size, a directory never does.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from s3vfs.paths import ROOT_PATH


class NodeKind(str, Enum):
    """Kind of filesystem node."""

    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class FileSystemObject:
    """Plain description of a file or directory.

    Attributes:
        name: Last path segment ("" for the root).
        full_path: Normalized absolute path, always starting with "/".
        last_modified: Epoch milliseconds, or None when unknown (directories).
        size: Byte count for files, None for directories.
    """

    name: str
    full_path: str
    last_modified: int | None = None
    size: int | None = None

    @property
    def kind(self) -> NodeKind:
        """Return FILE when ``size`` is set, DIRECTORY otherwise."""
        return NodeKind.FILE if self.size is not None else NodeKind.DIRECTORY

    @property
    def is_file(self) -> bool:
        return self.kind is NodeKind.FILE

    @property
    def is_directory(self) -> bool:
        return self.kind is NodeKind.DIRECTORY

    def to_dict(self) -> dict[str, str | int | None]:
        """Convert to a dictionary for JSON serialization."""
        return {
            "name": self.name,
            "full_path": self.full_path,
            "last_modified": self.last_modified,
            "size": self.size,
        }


ROOT_OBJECT = FileSystemObject(name="", full_path=ROOT_PATH)


@dataclass(frozen=True)
class Metadata:
    """Entry metadata as reported by ``Entry.get_metadata``.

    Attributes:
        modification_time: UTC timestamp, or None for directories.
        size: Byte count for files, None for directories.
    """

    modification_time: datetime | None
    size: int | None

    @classmethod
    def from_object(cls, obj: FileSystemObject) -> Metadata:
        modification_time = None
        if obj.last_modified is not None:
            modification_time = datetime.fromtimestamp(obj.last_modified / 1000, tz=UTC)
        return cls(modification_time=modification_time, size=obj.size)


def to_epoch_millis(value: datetime | None) -> int | None:
    """Convert a storage timestamp to epoch milliseconds."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return int(value.timestamp() * 1000)
