# src/distributed_cache/domain/services/key_codec.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Storage key codec.

Maps a caller's logical key into the namespaced key actually stored in the
backing store: ``prefix + sanitize(logical_key)``. The mapping is total and
deterministic; distinct logical keys that sanitize to the same string share
a storage key.

Layer:
    domain/services
"""

from __future__ import annotations

import re
from typing import Final

__all__ = [
    "DEFAULT_KEY_REPLACE_PATTERN",
    "DEFAULT_KEY_REPLACE_WITH",
    "make_key",
    "prefix_match_pattern",
]

#: Characters rewritten by default: path separators, mail/user markers, colons.
DEFAULT_KEY_REPLACE_PATTERN: Final[re.Pattern[str]] = re.compile(r"[/@:]")
DEFAULT_KEY_REPLACE_WITH: Final[str] = "_"

# Redis glob metacharacters.
_GLOB_SPECIALS: Final[re.Pattern[str]] = re.compile(r"([*?\[\]\\])")


def make_key(
    prefix: str,
    logical_key: str,
    *,
    pattern: re.Pattern[str] = DEFAULT_KEY_REPLACE_PATTERN,
    replacement: str = DEFAULT_KEY_REPLACE_WITH,
) -> str:
    """Return the storage key for ``logical_key`` under ``prefix``.

    Args:
        prefix: Namespace prefix, prepended verbatim.
        logical_key: Caller-supplied key.
        pattern: Sanitization pattern; every match is replaced.
        replacement: Literal replacement text.

    Returns:
        str: ``prefix`` followed by the sanitized logical key.

    Example:
        >>> make_key("P:", "http://www.google.com")
        'P:http___www.google.com'
    """
    # Lambda keeps the replacement literal (no backreference expansion).
    return prefix + pattern.sub(lambda _m: replacement, str(logical_key))


def prefix_match_pattern(prefix: str) -> str:
    """Return a glob matching every storage key under ``prefix``.

    Glob metacharacters inside the prefix are escaped so the prefix matches
    literally.
    """
    return _GLOB_SPECIALS.sub(r"\\\1", prefix) + "*"
