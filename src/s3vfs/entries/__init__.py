"""Filesystem entries: files, directories, readers and writers."""

from s3vfs.entries.directory import DirectoryEntry, DirectoryReader, entry_for
from s3vfs.entries.entry import Entry
from s3vfs.entries.file import FileEntry
from s3vfs.entries.writer import FileWriter

__all__ = [
    "DirectoryEntry",
    "DirectoryReader",
    "Entry",
    "FileEntry",
    "FileWriter",
    "entry_for",
]
