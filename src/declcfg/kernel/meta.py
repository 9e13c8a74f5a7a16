"""Opaque metadata records.

A ``Meta`` is the catch-all for any catalog document: it exposes the three
identity fields (schema, package, name) and keeps the whole original object
as a canonical JSON blob. The identity fields are projections of the blob,
never replacements for it, so encoding a Meta returns the blob untouched.
"""

import json
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidatorFunctionWrapHandler, model_serializer, model_validator

from declcfg._internal.canonical_json import canonical_dumps
from declcfg.kernel.casefold import extract_unique_meta_keys
from declcfg.kernel.errors import TypeMismatchError
from declcfg.kernel.json_errors import byte_offset, decode_text, loads_json, locate_value_end


class Meta(BaseModel):
    """A generic catalog record with its complete original object."""
    schema_: str = Field("", alias="schema")
    package: str = ""
    name: str = ""
    blob: str = "{}"  # Canonical JSON of the complete object

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="wrap")
    @classmethod
    def _from_catalog_object(cls, data: Any, handler: ValidatorFunctionWrapHandler) -> "Meta":
        """Route a raw catalog object through ``from_object``.

        Only field-shaped input, as used when constructing in Python (a
        ``blob`` string or the ``schema_`` keyword, plus identity fields),
        is validated field by field.
        """
        if isinstance(data, dict) and not _is_field_shaped(data):
            return cls.from_object(data)
        return handler(data)

    @classmethod
    def from_json(cls, data: Union[bytes, bytearray, str]) -> "Meta":
        """Decode a single JSON object into a Meta.

        Raises:
            MalformedJSONError: If data is not valid JSON
            TypeMismatchError: If data is not an object, or a well-known key
                holds a non-string value
            DuplicateKeyError: If keys collide after case-folding
        """
        text = decode_text(data)
        return cls.from_object(loads_json(text), text)

    @classmethod
    def from_object(cls, obj: Any, text: Optional[str] = None) -> "Meta":
        """Build a Meta from an already-parsed JSON value.

        ``text`` is the document the value was parsed from; when given, type
        errors are annotated with the offset of the offending value.
        """
        if not isinstance(obj, dict):
            offset = byte_offset(text, len(text.rstrip())) if text is not None else None
            raise TypeMismatchError(
                f"expected a JSON object, got {type(obj).__name__}",
                value=obj,
                offset=offset,
            )

        try:
            fields = extract_unique_meta_keys(obj)
        except TypeMismatchError as e:
            if text is not None and e.offset is None:
                e.offset = locate_value_end(text, (e.key,))
            raise

        return cls(
            schema_=fields["schema"],
            package=fields["package"],
            name=fields["name"],
            blob=canonical_dumps(obj),
        )

    def to_json(self) -> str:
        """Return the opaque payload exactly as stored."""
        return self.blob

    def to_object(self) -> Dict[str, Any]:
        """Return the opaque payload as a parsed JSON object."""
        return json.loads(self.blob)

    @model_serializer(mode="plain")
    def _serialize_blob(self) -> Dict[str, Any]:
        return self.to_object()


_FIELD_KEYS = frozenset({"schema", "schema_", "package", "name", "blob"})


def _is_field_shaped(data: Dict[str, Any]) -> bool:
    if not set(data) <= _FIELD_KEYS:
        return False
    if "blob" in data:
        return isinstance(data["blob"], str)
    return "schema_" in data
