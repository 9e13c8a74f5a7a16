"""Case-insensitive lookup of the well-known metadata keys.

Catalog documents in the wild spell ``schema``, ``package`` and ``name`` in
more than one casing (``Schema``, ``PACKAGE``...). Any single casing is
accepted, but an object that carries two spellings of the same key is
ambiguous and rejected outright rather than resolved by picking one.

Folding uses ``str.casefold()`` (full Unicode case folding, locale
independent), not ``str.lower()``.
"""

from typing import Any, Dict, List, Mapping, Tuple

from declcfg.kernel.errors import DuplicateKeyError, TypeMismatchError

META_KEYS: Tuple[str, ...] = ("schema", "package", "name")


def fold(key: str) -> str:
    """Return the case-folded form of a key."""
    return key.casefold()


def group_keys_by_fold(obj: Mapping[str, Any]) -> Dict[str, List[str]]:
    """Group the object's original keys by their folded form."""
    buckets: Dict[str, List[str]] = {}
    for key in obj:
        folded = fold(key)
        bucket = buckets.setdefault(folded, [])
        if key not in bucket:
            bucket.append(key)
    return buckets


def extract_unique_meta_keys(
    obj: Mapping[str, Any],
    names: Tuple[str, ...] = META_KEYS,
) -> Dict[str, str]:
    """Resolve each canonical name to the string stored under its unique key.

    Args:
        obj: Decoded JSON object
        names: Canonical field names to resolve

    Returns:
        Mapping of canonical name -> value. Names absent from the object map
        to "" (they are optional).

    Raises:
        DuplicateKeyError: If any keys of the object collide after folding.
            All collisions are reported together, including ones that do not
            involve a canonical name.
        TypeMismatchError: If a matched key holds a non-string value
    """
    buckets = group_keys_by_fold(obj)

    duplicates = {folded: keys for folded, keys in buckets.items() if len(keys) != 1}
    if duplicates:
        raise DuplicateKeyError(duplicates)

    resolved: Dict[str, str] = {}
    for name in names:
        resolved[name] = ""
        bucket = buckets.get(fold(name))
        if not bucket:
            continue
        key = bucket[0]
        if key not in obj:
            continue
        value = obj[key]
        if not isinstance(value, str):
            raise TypeMismatchError(
                f"expected value for key {key!r} to be a string, "
                f"got {type(value).__name__}: {value!r}",
                key=key,
                value=value,
            )
        resolved[name] = value
    return resolved
