"""
Path Resolver
=============

Tolerant get/set over loosely shaped nested data (dicts, lists, scalars)
using separator-delimited paths.

Reads never raise: any missing or mis-shaped step yields ``None``.
Writes never raise on shape mismatches: a non-dict intermediate is
replaced with an empty dict so the path can be created.
"""

from typing import Any, List, Optional
import logging

logger = logging.getLogger(__name__)


def split_path(path: str, sep: str = ".") -> List[str]:
    """Split a path into non-empty segments."""
    if not path:
        return []
    return [part for part in path.split(sep) if part]


def _step(current: Any, key: str) -> Optional[Any]:
    """Descend one level, returning None when the step does not exist."""
    if isinstance(current, dict):
        return current.get(key)
    if isinstance(current, (list, tuple)):
        try:
            index = int(key)
        except ValueError:
            return None
        if -len(current) <= index < len(current):
            return current[index]
        return None
    return None


def get_path(obj: Any, path: str, sep: str = ".") -> Optional[Any]:
    """
    Resolve a delimited path against nested data.

    Dict keys are matched by name; list items by integer index.

    Args:
        obj: Source object (usually form data)
        path: Path such as ``"generalInfo.documentDate"``
        sep: Segment separator

    Returns:
        The value at the path, or None if any step is missing

    Example:
        >>> get_path({"a": {"b": [10, 20]}}, "a.b.1")
        20
    """
    current = obj
    for key in split_path(path, sep):
        current = _step(current, key)
        if current is None:
            return None
    return current


def set_path(tree: dict, path: str, value: Any, sep: str = ".",
             append: bool = False) -> dict:
    """
    Write a value into a nested dict, creating intermediate dicts.

    In append mode repeated writes to the same path accumulate into an
    ordered list instead of overwriting; an existing non-list value is
    promoted to the first list item.

    Args:
        tree: Target dict (modified in place)
        path: Path such as ``"ExplanatoryNote/GeneralInfo/DocDate"``
        value: Value to store
        sep: Segment separator
        append: Accumulate into a list instead of overwriting

    Returns:
        The same ``tree`` for chaining
    """
    parts = split_path(path, sep)
    if not parts:
        logger.warning("Ignoring write to empty path")
        return tree

    current = tree
    for part in parts[:-1]:
        child = current.get(part)
        if not isinstance(child, dict):
            if child is not None:
                logger.debug(f"Replacing non-object node '{part}' while writing {path}")
            child = {}
            current[part] = child
        current = child

    last = parts[-1]
    if append:
        existing = current.get(last)
        if existing is None:
            current[last] = [value]
        elif isinstance(existing, list):
            existing.append(value)
        else:
            current[last] = [existing, value]
    else:
        current[last] = value

    return tree


def is_empty_value(value: Any) -> bool:
    """True for values treated as absent form input (None or empty string)."""
    return value is None or (isinstance(value, str) and value == "")
