"""Public API for declcfg.

High-level functions that turn catalog JSON into entities and back.
Callers should use these functions rather than importing from the kernel
modules directly.
"""

import json
import logging
from typing import Any, Dict, Type, Union

from pydantic import BaseModel, ValidationError

from declcfg._internal.canonical_json import indented_dumps
from declcfg.kernel.errors import DeclcfgError, MalformedJSONError, TypeMismatchError
from declcfg.kernel.json_errors import (
    byte_offset,
    decode_text,
    loads_json,
    locate_value_end,
    resolve_decode_error,
    skip_whitespace,
)
from declcfg.kernel.meta import Meta
from declcfg.kernel.model import (
    SCHEMA_BUNDLE,
    SCHEMA_CHANNEL,
    SCHEMA_PACKAGE,
    Bundle,
    Channel,
    DeclarativeConfig,
    Entity,
    Package,
)

logger = logging.getLogger(__name__)

_SCHEMA_MODELS: Dict[str, Type[BaseModel]] = {
    SCHEMA_PACKAGE: Package,
    SCHEMA_CHANNEL: Channel,
    SCHEMA_BUNDLE: Bundle,
}

_decoder = json.JSONDecoder()


def decode_document(data: Union[bytes, bytearray, str]) -> Entity:
    """Decode one catalog document into its typed entity.

    Documents whose schema is ``olm.package``, ``olm.channel`` or
    ``olm.bundle`` become Package, Channel or Bundle; anything else becomes
    a Meta holding the complete object.

    Raises:
        MalformedJSONError: If data is not valid JSON
        TypeMismatchError: If a value has the wrong type
        DuplicateKeyError: If top-level keys collide after case-folding
    """
    text = decode_text(data)
    return _decode_object(loads_json(text), text)


def load_config(data: Union[bytes, bytearray, str]) -> DeclarativeConfig:
    """Decode a stream of concatenated catalog documents.

    Documents may be separated by any amount of whitespace. Error offsets
    are relative to the start of the whole stream.
    """
    text = decode_text(data)
    cfg = DeclarativeConfig()
    idx = skip_whitespace(text, 0)
    while idx < len(text):
        try:
            obj, end = _decoder.raw_decode(text, idx)
        except json.JSONDecodeError as e:
            raise MalformedJSONError(e.msg, byte_offset(text, e.pos)) from e
        try:
            entity = _decode_object(obj, text[idx:end])
        except (TypeMismatchError, MalformedJSONError) as e:
            if e.offset is not None:
                e.offset += byte_offset(text, idx)
            raise
        cfg.add(entity)
        idx = skip_whitespace(text, end)
    logger.debug(
        "loaded %d packages, %d channels, %d bundles, %d other documents",
        len(cfg.packages), len(cfg.channels), len(cfg.bundles), len(cfg.others),
    )
    return cfg


def encode_document(entity: Entity) -> str:
    """Encode one entity as 4-space indented JSON."""
    if isinstance(entity, Meta):
        return indented_dumps(entity.to_object())
    return indented_dumps(entity.model_dump(mode="json", by_alias=True))


def dump_config(cfg: DeclarativeConfig) -> str:
    """Encode a config as a stream of documents, one per entity.

    Packages come first, then channels, bundles and other documents, each
    group in its stored order. Every document ends with a newline.
    """
    out = []
    for group in (cfg.packages, cfg.channels, cfg.bundles, cfg.others):
        for entity in group:
            out.append(encode_document(entity) + "\n")
    return "".join(out)


def explain_error(data: Union[bytes, bytearray, str], err: BaseException) -> str:
    """Render a decode failure for a human, pointing at its location."""
    return resolve_decode_error(data, err)


def _decode_object(obj: Any, text: str) -> Entity:
    meta = Meta.from_object(obj, text)
    model = _SCHEMA_MODELS.get(meta.schema_)
    if model is None:
        logger.debug("schema %r is not a well-known kind; keeping as meta", meta.schema_)
        return meta

    try:
        return model.model_validate(obj, context={"wire": True})
    except ValidationError as e:
        raise _type_mismatch(model, e, text) from e


def _type_mismatch(model: Type[BaseModel], err: ValidationError, text: str) -> DeclcfgError:
    """Convert the first pydantic error into a TypeMismatchError with an offset."""
    first = err.errors()[0]
    loc = tuple(first.get("loc", ()))
    field = ".".join(str(part) for part in loc)
    value = first.get("input")
    message = f"cannot decode {type(value).__name__} into {model.__name__}"
    if field:
        message += f".{field}"
    message += f": {first.get('msg', 'invalid value')}"
    return TypeMismatchError(
        message,
        key=field,
        value=value,
        offset=locate_value_end(text, loc),
    )
