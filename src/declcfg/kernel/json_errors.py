"""JSON parsing with offset-carrying errors, and human-readable diagnostics.

A decode failure is reported against the raw document, which is usually a
single compact line. ``format_decode_error`` re-indents the document and
moves the failure offset to the matching spot in the indented text, so the
operator sees a ``<==`` marker at the right token.

Offsets are byte offsets into the UTF-8 encoding of the document, whether
it was handed over as bytes or as text.

Indentation is fixed at four spaces with LF newlines. ``indent_json`` and
``translate_offset`` both depend on that; it is not a parameter.
"""

import json
import logging
import re
from json.decoder import scanstring
from typing import Any, Iterator, Optional, Sequence, Union

from declcfg.kernel.casefold import fold
from declcfg.kernel.errors import MalformedJSONError, TypeMismatchError

logger = logging.getLogger(__name__)

INDENT = "    "
MARKER = "<=="

_WHITESPACE = " \t\n\r"
_WS_RE = re.compile(r"[ \t\n\r]*")
_decoder = json.JSONDecoder()


def decode_text(data: Union[bytes, bytearray, str]) -> str:
    """Decode raw document bytes as UTF-8 (str passes through)."""
    if isinstance(data, str):
        return data
    try:
        return bytes(data).decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedJSONError(f"invalid UTF-8 in JSON input: {e.reason}", e.start) from e


def loads_json(text: str) -> Any:
    """Parse a single JSON value, raising MalformedJSONError on bad syntax."""
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedJSONError(e.msg, byte_offset(text, e.pos)) from e


def byte_offset(text: str, pos: int) -> int:
    """Convert a character position in text to a UTF-8 byte offset."""
    return len(text[:pos].encode("utf-8", errors="surrogatepass"))


def char_index(raw: bytes, offset: int) -> int:
    """Convert a UTF-8 byte offset to a character index in the decoded text.

    An offset inside a multi-byte sequence moves back to the start of that
    character.
    """
    offset = max(0, min(offset, len(raw)))
    while 0 < offset < len(raw) and (raw[offset] & 0xC0) == 0x80:
        offset -= 1
    return len(raw[:offset].decode("utf-8", errors="replace"))


def skip_whitespace(text: str, idx: int) -> int:
    """Return the index of the first non-whitespace character at or after idx."""
    return _WS_RE.match(text, idx).end()


def indent_json(text: str) -> str:
    """Re-indent a JSON document, keeping every token verbatim.

    Insignificant whitespace is dropped and replaced by newlines and
    four-space indentation; colons are followed by a single space; empty
    objects and arrays stay compact. For compact input the result matches
    ``json.dumps(json.loads(text), indent=4)``, except that string escapes
    and number spellings are kept as written.

    Raises:
        ValueError: If text is not a single valid JSON value
    """
    json.loads(text)

    out = []
    depth = 0
    i = 0
    n = len(text)
    while i < n:
        c = text[i]
        if c in _WHITESPACE:
            i += 1
            continue
        if c == '"':
            end = _string_end(text, i)
            out.append(text[i:end])
            i = end
            continue
        if c in "{[":
            j = skip_whitespace(text, i + 1)
            if j < n and text[j] in "}]":
                out.append(c + text[j])
                i = j + 1
                continue
            depth += 1
            out.append(c + "\n" + INDENT * depth)
        elif c in "}]":
            depth -= 1
            out.append("\n" + INDENT * depth + c)
        elif c == ",":
            out.append(",\n" + INDENT * depth)
        elif c == ":":
            out.append(": ")
        else:
            out.append(c)
        i += 1
    return "".join(out)


def _string_end(text: str, start: int) -> int:
    """Index just past the closing quote of the string literal at start."""
    i = start + 1
    while i < len(text):
        c = text[i]
        if c == "\\":
            i += 2
            continue
        if c == '"':
            return i + 1
        i += 1
    return len(text)


def _significant_positions(text: str) -> Iterator[int]:
    """Yield indices of characters that belong to the JSON token stream.

    Whitespace outside string literals is formatting; everything else
    (including whitespace inside strings) is content.
    """
    in_string = False
    escaped = False
    for i, c in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif c == "\\":
                escaped = True
            elif c == '"':
                in_string = False
            yield i
        elif c == '"':
            in_string = True
            yield i
        elif c not in _WHITESPACE:
            yield i


def translate_offset(raw: str, pretty: str, offset: int) -> int:
    """Map an offset in ``raw`` to the equivalent offset in ``pretty``.

    Both texts must hold the same token stream. The result sits right after
    the same content character that precedes ``offset`` in ``raw``, before
    any whitespace the re-render inserted.
    """
    count = 0
    for pos in _significant_positions(raw):
        if pos >= offset:
            break
        count += 1
    if count == 0:
        return 0

    seen = 0
    for pos in _significant_positions(pretty):
        seen += 1
        if seen == count:
            return pos + 1
    return len(pretty)


def format_decode_error(data: Union[bytes, bytearray, str], message: str, offset: int) -> str:
    """Render ``message`` with the document, marking ``offset`` with ``<==``.

    The document is shown indented when it can be; otherwise the raw text is
    shown with the marker at the untranslated offset. Never raises.
    """
    if isinstance(data, str):
        raw = data.encode("utf-8", errors="surrogatepass")
    else:
        raw = bytes(data)
    text = raw.decode("utf-8", errors="replace")
    at = char_index(raw, offset)

    header = f"{message} at offset {offset} (indicated by {MARKER})\n "
    try:
        pretty = indent_json(text)
    except (ValueError, RecursionError):
        logger.debug("document could not be indented; showing raw input")
        return f"{header}{text[:at]} {MARKER} {text[at:]}"

    p_at = translate_offset(text, pretty, at)
    return f"{header}{pretty[:p_at]} {MARKER} {pretty[p_at:]}"


def resolve_decode_error(data: Union[bytes, bytearray, str], err: BaseException) -> str:
    """Turn a decode failure into operator-facing text.

    Failures that carry an offset are rendered with ``format_decode_error``;
    anything else falls back to ``str(err)``.
    """
    if isinstance(err, (MalformedJSONError, TypeMismatchError)) and err.offset is not None:
        return format_decode_error(data, err.message, err.offset)
    if isinstance(err, json.JSONDecodeError):
        return format_decode_error(data, err.msg, byte_offset(err.doc, err.pos))
    return str(err)


def locate_value_end(text: str, path: Sequence[Union[str, int]]) -> Optional[int]:
    """Find the byte offset just past the value at ``path`` in a JSON document.

    Object keys match case-insensitively. Returns None when the path does
    not exist or the text cannot be scanned.
    """
    try:
        idx = skip_whitespace(text, 0)
        for step in path:
            idx = _descend(text, idx, step)
            if idx is None:
                return None
        _, end = _decoder.raw_decode(text, idx)
        return byte_offset(text, end)
    except (ValueError, IndexError):
        return None


def _descend(text: str, idx: int, step: Union[str, int]) -> Optional[int]:
    """Return the start index of the child ``step`` of the container at idx."""
    if isinstance(step, str) and text.startswith("{", idx):
        idx = skip_whitespace(text, idx + 1)
        while text.startswith('"', idx):
            key, idx = scanstring(text, idx + 1)
            idx = skip_whitespace(text, skip_whitespace(text, idx) + 1)
            if fold(key) == fold(step):
                return idx
            idx = _skip_member(text, idx)
        return None

    if isinstance(step, int) and text.startswith("[", idx):
        idx = skip_whitespace(text, idx + 1)
        position = 0
        while not text.startswith("]", idx):
            if position == step:
                return idx
            idx = _skip_member(text, idx)
            position += 1
        return None

    return None


def _skip_member(text: str, idx: int) -> int:
    """Skip one value plus its trailing comma; return the next member's start."""
    _, idx = _decoder.raw_decode(text, idx)
    idx = skip_whitespace(text, idx)
    if text.startswith(",", idx):
        idx = skip_whitespace(text, idx + 1)
    return idx
