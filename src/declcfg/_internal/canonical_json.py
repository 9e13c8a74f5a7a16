"""Centralized JSON serialization.

Every opaque Meta blob and every set-semantics comparison key goes through
``canonical_dumps`` so that equal content always yields equal text.
"""

import json
from typing import Any


def canonical_dumps(obj: Any) -> str:
    """
    Canonical JSON serialization for opaque payloads and comparison keys.

    Rules:
    - Sorted keys
    - Compact separators (",", ":")
    - Non-ASCII characters written as-is, no HTML escaping
    - Array order preserved
    - No trailing whitespace

    Args:
        obj: Python object to serialize

    Returns:
        Canonical JSON string
    """
    return json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False
    )


def indented_dumps(obj: Any) -> str:
    """Human-facing JSON with the same 4-space indent the error formatter uses.

    Key order is preserved.
    """
    return json.dumps(obj, indent=4, ensure_ascii=False)
