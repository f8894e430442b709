"""Relative object key normalization.

Both backends share one key space: a relative key uses ``/`` as its only
separator, has no leading or trailing separator and no empty, ``.`` or
``..`` segments.  The same key string names the same logical object
under a filesystem root and under an S3 bucket prefix.

A backslash is an ordinary name character on POSIX filesystems and in S3
object names, so only :func:`key_from_path` translates ``os.sep``.
"""
import os

SEPARATOR = "/"


def normalize_key(key: str) -> str:
    """Clean a relative key into its canonical form.

    Args:
        key: ``/``-separated key, possibly with a leading slash

    Returns:
        Canonical key, e.g. ``'/a//b/./c.txt'`` becomes ``'a/b/c.txt'``

    Raises:
        ValueError: If the key is empty or escapes the root with ``..``
    """
    parts = []
    for part in key.split(SEPARATOR):
        if part in ("", "."):
            continue
        if part == "..":
            raise ValueError(f"Key escapes location root: {key!r}")
        parts.append(part)
    if not parts:
        raise ValueError(f"Empty object key: {key!r}")
    return SEPARATOR.join(parts)


def normalize_prefix(prefix: str) -> str:
    """Clean an S3 prefix; the bucket root is the empty prefix."""
    parts = [p for p in (prefix or "").split(SEPARATOR) if p not in ("", ".")]
    return SEPARATOR.join(parts)


def join_path(root: str, key: str) -> str:
    """Build the absolute filesystem path for *key* under *root*."""
    return os.path.join(root, *normalize_key(key).split(SEPARATOR))


def key_from_path(root: str, path: str) -> str:
    """Derive the relative key of an absolute filesystem path.

    Raises:
        ValueError: If *path* is not strictly below *root*
    """
    rel = os.path.relpath(os.path.abspath(path), os.path.abspath(root))
    if rel == os.curdir or rel == os.pardir or rel.startswith(os.pardir + os.sep):
        raise ValueError(f"{path} is not inside {root}")
    return normalize_key(rel.replace(os.sep, SEPARATOR))


def join_object_key(prefix: str, key: str) -> str:
    """Build the full S3 object name for *key* under *prefix*."""
    prefix = normalize_prefix(prefix)
    key = normalize_key(key)
    return f"{prefix}{SEPARATOR}{key}" if prefix else key


def key_from_object_key(prefix: str, object_key: str) -> str:
    """Derive the relative key of a full S3 object name.

    Raises:
        ValueError: If *object_key* does not live under *prefix*
    """
    prefix = normalize_prefix(prefix)
    if prefix:
        head = prefix + SEPARATOR
        if not object_key.startswith(head):
            raise ValueError(f"{object_key} is not under prefix {prefix}")
        object_key = object_key[len(head):]
    return normalize_key(object_key)
