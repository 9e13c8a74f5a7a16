"""Error kind constants for declcfg decode failures.

These constants prevent stringly-typed error kinds and let callers
branch on the failure without parsing messages.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Decode error kinds."""

    # Input is not valid JSON syntax (carries an offset)
    MALFORMED_JSON = "MALFORMED_JSON"
    # A value has the wrong JSON type (may carry an offset)
    TYPE_MISMATCH = "TYPE_MISMATCH"
    # Two or more keys fold to the same canonical name
    DUPLICATE_KEY = "DUPLICATE_KEY"
