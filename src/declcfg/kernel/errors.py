"""Exceptions raised while decoding declarative config documents."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from declcfg.codes import ErrorKind


class DeclcfgError(ValueError):
    """Base class for all decode failures."""

    kind: ErrorKind


class MalformedJSONError(DeclcfgError):
    """Raised when input is not valid JSON."""

    kind = ErrorKind.MALFORMED_JSON

    def __init__(self, message: str, offset: int):
        self.message = message
        self.offset = offset
        super().__init__(message)


class TypeMismatchError(DeclcfgError):
    """Raised when a value does not have the expected JSON type.

    ``offset`` is the position just past the offending value in the raw
    document when it could be located, otherwise None.
    """

    kind = ErrorKind.TYPE_MISMATCH

    def __init__(self, message: str, key: str = "", value: Any = None, offset: Optional[int] = None):
        self.message = message
        self.key = key
        self.value = value
        self.offset = offset
        super().__init__(message)


class DuplicateKeyError(DeclcfgError):
    """Raised when keys of one object collide after case-folding.

    Every colliding bucket is reported, not just the first one found.
    """

    kind = ErrorKind.DUPLICATE_KEY

    def __init__(self, duplicates: Dict[str, List[str]]):
        self.duplicates = {k: sorted(v) for k, v in sorted(duplicates.items())}
        lines = [
            f"duplicate keys for key {_quote(folded)}: [{' '.join(keys)}]"
            for folded, keys in self.duplicates.items()
        ]
        if len(lines) == 1:
            message = lines[0]
        else:
            message = "[" + ", ".join(lines) + "]"
        super().__init__(message)


def _quote(s: str) -> str:
    """Quote a key the way JSON would."""
    return json.dumps(s, ensure_ascii=False)
