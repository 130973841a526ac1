"""Content hashing utilities for generated identifiers."""

import hashlib
import time


def hash_content(content: str, length: int = 16) -> str:
    """Hash string content using SHA256.

    Args:
        content: String content to hash.
        length: Length of hash to return (max 64).

    Returns:
        Hex digest truncated to specified length.
    """
    return hashlib.sha256(content.encode("utf-8")).hexdigest()[:length]


def generate_id(prefix: str, *parts: object, length: int = 12) -> str:
    """Generate a prefixed id unique to the given parts and the current time.

    Args:
        prefix: Readable prefix (e.g. 'sheet', 'search').
        *parts: Values identifying the object.
        length: Length of the hash portion.

    Returns:
        Identifier such as 'sheet_3f2a9c0d1b7e'.
    """
    seed = ":".join(str(p) for p in parts)
    digest = hash_content(f"{seed}:{time.time_ns()}", length=length)
    return f"{prefix}_{digest}"
