"""Path utilities for the virtual filesystem.

Full paths are absolute, use "/" as separator, never end with a separator
(except the root itself) and contain no "." or ".." segments.
"""

from __future__ import annotations

DIR_SEPARATOR = "/"
ROOT_PATH = "/"


def normalize_path(path: str) -> str:
    """Normalize a path into canonical absolute form.

    Collapses repeated separators, resolves "." and ".." segments and
    strips trailing separators. ".." above the root stays at the root.

    Args:
        path: Absolute or relative path string.

    Returns:
        Normalized absolute path, "/" for the root.
    """
    segments: list[str] = []
    for segment in path.split(DIR_SEPARATOR):
        if not segment or segment == ".":
            continue
        if segment == "..":
            if segments:
                segments.pop()
            continue
        segments.append(segment)
    return DIR_SEPARATOR + DIR_SEPARATOR.join(segments)


def resolve_to_full_path(base_path: str, relative_path: str) -> str:
    """Resolve a path against a base directory.

    Absolute ``relative_path`` values ignore the base.
    """
    if relative_path.startswith(DIR_SEPARATOR):
        return normalize_path(relative_path)
    if base_path == ROOT_PATH:
        return normalize_path(DIR_SEPARATOR + relative_path)
    return normalize_path(base_path + DIR_SEPARATOR + relative_path)


def get_parent_path(path: str) -> str:
    """Return the parent directory path; the root is its own parent."""
    normalized = normalize_path(path)
    index = normalized.rfind(DIR_SEPARATOR)
    if index <= 0:
        return ROOT_PATH
    return normalized[:index]


def get_name(path: str) -> str:
    """Return the last path segment ("" for the root)."""
    normalized = normalize_path(path)
    return normalized[normalized.rfind(DIR_SEPARATOR) + 1 :]


def join_path(parent_path: str, name: str) -> str:
    """Join a directory path and a child name."""
    if parent_path == ROOT_PATH:
        return DIR_SEPARATOR + name
    return parent_path + DIR_SEPARATOR + name


def is_ancestor(ancestor_path: str, path: str) -> bool:
    """Return True if ``path`` lies strictly below ``ancestor_path``."""
    if ancestor_path == ROOT_PATH:
        return path != ROOT_PATH
    return path.startswith(ancestor_path + DIR_SEPARATOR)
