"""declcfg: declarative catalog config model, decoding and diagnostics."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("declcfg")
except PackageNotFoundError:
    __version__ = "dev"

# Public API exports
from declcfg.api import decode_document, dump_config, encode_document, explain_error, load_config
from declcfg.codes import ErrorKind
from declcfg.kernel.errors import DeclcfgError, DuplicateKeyError, MalformedJSONError, TypeMismatchError
from declcfg.kernel.meta import Meta
from declcfg.kernel.model import (
    SCHEMA_BUNDLE,
    SCHEMA_CHANNEL,
    SCHEMA_PACKAGE,
    Bundle,
    Channel,
    ChannelEntry,
    DeclarativeConfig,
    Icon,
    Package,
    Property,
    RelatedImage,
)

__all__ = [
    "__version__",
    "decode_document",
    "load_config",
    "encode_document",
    "dump_config",
    "explain_error",
    "ErrorKind",
    "DeclcfgError",
    "DuplicateKeyError",
    "MalformedJSONError",
    "TypeMismatchError",
    "Meta",
    "Package",
    "Channel",
    "ChannelEntry",
    "Bundle",
    "RelatedImage",
    "Icon",
    "Property",
    "DeclarativeConfig",
    "SCHEMA_PACKAGE",
    "SCHEMA_CHANNEL",
    "SCHEMA_BUNDLE",
]
