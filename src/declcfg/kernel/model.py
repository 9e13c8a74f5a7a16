"""Pydantic models for declarative catalog configuration.

Wire names follow the catalog JSON format (``defaultChannel``,
``skipRange``, ``relatedImages``...); Python code uses snake_case field
names. Empty optional fields are omitted on output.

Equality rules:
- Every field takes part, including fields excluded from serialization
- Fields listed in ``SET_FIELDS`` compare as unordered collections, keyed by
  each element's canonical JSON
- All other lists compare in order
"""

import base64
import binascii
from typing import Any, ClassVar, FrozenSet, List, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_serializer,
    field_validator,
    model_serializer,
    model_validator,
)

from declcfg._internal.canonical_json import canonical_dumps
from declcfg.kernel.casefold import fold
from declcfg.kernel.meta import Meta

SCHEMA_PACKAGE = "olm.package"
SCHEMA_CHANNEL = "olm.channel"
SCHEMA_BUNDLE = "olm.bundle"


def _plain(value: Any) -> Any:
    """Convert models (and lists of them) to JSON-compatible values."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


class _Entity(BaseModel):
    """Shared wire handling and equality for catalog entities."""

    model_config = ConfigDict(populate_by_name=True)

    # Field names (python names) omitted from output when empty
    OMIT_EMPTY: ClassVar[FrozenSet[str]] = frozenset()
    # Field names compared as unordered collections
    SET_FIELDS: ClassVar[FrozenSet[str]] = frozenset()

    @model_validator(mode="before")
    @classmethod
    def _from_wire(cls, data: Any, info: ValidationInfo) -> Any:
        """Normalize a catalog object before field validation.

        Only applies when validating with ``context={"wire": True}``, i.e.
        when decoding catalog JSON rather than constructing in Python:
        - wire keys match case-insensitively, an exact spelling winning
        - python field names and excluded fields are not wire keys
        - null under a non-optional field means its zero value
        """
        if not isinstance(data, dict) or not (info.context or {}).get("wire"):
            return data

        wire_fields = {}
        python_names = set()
        for name, field in cls.model_fields.items():
            key = field.alias or name
            if field.exclude:
                python_names.add(fold(name))
            else:
                wire_fields[fold(key)] = (key, field)
                if key != name:
                    python_names.add(fold(name))

        result = {}
        for key, value in data.items():
            folded = fold(key)
            if folded not in wire_fields:
                if folded not in python_names:
                    result[key] = value
                continue
            target, field = wire_fields[folded]
            if target in result and key != target:
                continue
            if value is None and field.default is not None:
                result.pop(target, None)
                continue
            result[target] = value
        return result

    @model_serializer(mode="wrap")
    def _omit_empty_fields(self, handler):
        data = handler(self)
        if not isinstance(data, dict):
            return data
        fields = type(self).model_fields
        for name in self.OMIT_EMPTY:
            for key in (name, fields[name].alias):
                if key in data and not data[key]:
                    del data[key]
        return data

    def _comparison_key(self) -> dict:
        key = {}
        for name in type(self).model_fields:
            value = getattr(self, name)
            if name in self.SET_FIELDS:
                key[name] = sorted(canonical_dumps(_plain(v)) for v in (value or []))
            else:
                key[name] = _plain(value)
        return key

    def __eq__(self, other: object) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return self._comparison_key() == other._comparison_key()


class Property(_Entity):
    """A typed property; the value's shape is owned by its property type."""
    type: str
    value: Any = None


class Icon(_Entity):
    """Package icon: raw image bytes plus media type."""
    data: bytes = Field(b"", alias="base64data")
    media_type: str = Field("", alias="mediatype")

    @field_validator("data", mode="before")
    @classmethod
    def decode_base64(cls, v: Any) -> Any:
        """Accept base64 text (the wire form) as well as raw bytes."""
        if v is None:
            return b""
        if isinstance(v, str):
            # Line-wrapped base64 is accepted; other stray characters are not
            v = v.replace("\r", "").replace("\n", "")
            try:
                return base64.b64decode(v, validate=True)
            except binascii.Error as e:
                raise ValueError(f"icon data is not valid base64: {e}")
        return v

    @field_serializer("data", when_used="json")
    def encode_base64(self, v: bytes) -> str:
        return base64.b64encode(v).decode("ascii")


class Package(_Entity):
    """A package: the unit of installation, grouping channels and bundles."""
    schema_: Literal["olm.package"] = Field(SCHEMA_PACKAGE, alias="schema")
    name: str = ""
    default_channel: str = Field("", alias="defaultChannel")
    icon: Optional[Icon] = None
    description: str = ""
    properties: List[Property] = Field(default_factory=list)

    OMIT_EMPTY: ClassVar[FrozenSet[str]] = frozenset({"icon", "description", "properties"})
    SET_FIELDS: ClassVar[FrozenSet[str]] = frozenset({"properties"})


class ChannelEntry(_Entity):
    """One node of a channel's update graph."""
    name: str = ""
    replaces: str = ""
    skips: List[str] = Field(default_factory=list)
    skip_range: str = Field("", alias="skipRange")

    OMIT_EMPTY: ClassVar[FrozenSet[str]] = frozenset({"replaces", "skips", "skip_range"})


class Channel(_Entity):
    """A named, ordered update stream within a package."""
    schema_: Literal["olm.channel"] = Field(SCHEMA_CHANNEL, alias="schema")
    name: str = ""
    package: str = ""
    entries: List[ChannelEntry] = Field(default_factory=list)  # Order is significant
    properties: List[Property] = Field(default_factory=list)

    OMIT_EMPTY: ClassVar[FrozenSet[str]] = frozenset({"properties"})
    SET_FIELDS: ClassVar[FrozenSet[str]] = frozenset({"properties"})


class RelatedImage(_Entity):
    """An image referenced by a bundle besides its own content image."""
    name: str = ""
    image: str = ""


class Bundle(_Entity):
    """All metadata and data of a bundle.

    Top-level fields are the source of truth. ``csv_json`` and ``objects``
    are legacy views populated by an external enrichment step from
    ``olm.bundle.object`` properties; they are never written to JSON, never
    read from it, but still take part in equality.
    """
    schema_: Literal["olm.bundle"] = Field(SCHEMA_BUNDLE, alias="schema")
    name: str = ""
    package: str = ""
    image: str = ""
    properties: List[Property] = Field(default_factory=list)
    related_images: List[RelatedImage] = Field(default_factory=list, alias="relatedImages")

    csv_json: str = Field("", exclude=True)
    objects: List[str] = Field(default_factory=list, exclude=True)

    OMIT_EMPTY: ClassVar[FrozenSet[str]] = frozenset({"properties", "related_images"})
    SET_FIELDS: ClassVar[FrozenSet[str]] = frozenset({"properties", "related_images"})


Entity = Union[Package, Channel, Bundle, Meta]


class DeclarativeConfig(BaseModel):
    """A decoded catalog: every document, grouped by kind, in input order."""
    packages: List[Package] = Field(default_factory=list)
    channels: List[Channel] = Field(default_factory=list)
    bundles: List[Bundle] = Field(default_factory=list)
    others: List[Meta] = Field(default_factory=list)

    def add(self, entity: Entity) -> None:
        """Append an entity to the list for its kind."""
        if isinstance(entity, Package):
            self.packages.append(entity)
        elif isinstance(entity, Channel):
            self.channels.append(entity)
        elif isinstance(entity, Bundle):
            self.bundles.append(entity)
        elif isinstance(entity, Meta):
            self.others.append(entity)
        else:
            raise TypeError(f"unsupported catalog entity: {type(entity).__name__}")

    def __len__(self) -> int:
        return len(self.packages) + len(self.channels) + len(self.bundles) + len(self.others)
