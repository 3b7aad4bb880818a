"""Identity resolution for content records.

Producers disagree on how a record names itself: the store returns a
``docId``, older payloads carry ``firebaseId`` or ``__id``, and everything
has a numeric ``id`` surrogate that may arrive as ``5`` or ``"5"``.  These
helpers resolve and compare identities across all of them.
"""

from collections.abc import Callable, Mapping
from typing import Any

# Priority order: canonical remote key, secondary remote key, legacy key,
# numeric surrogate key.
IDENTITY_FIELDS: tuple[str, ...] = ("docId", "firebaseId", "__id", "id")

TEMP_KEY_FIELD = "tempId"

KeyExtractor = Callable[[Mapping[str, Any]], Any | None]


def _field_extractor(name: str) -> KeyExtractor:
    def extract(fields: Mapping[str, Any]) -> Any | None:
        value = fields.get(name)
        return value if is_identity_value(value) else None

    extract.__name__ = f"extract_{name.strip('_') or name}"
    return extract


KEY_EXTRACTORS: tuple[KeyExtractor, ...] = tuple(
    _field_extractor(name) for name in IDENTITY_FIELDS
)


def is_identity_value(value: Any) -> bool:
    """True for values usable as an identity (non-empty str, int, float)."""
    if value is None or isinstance(value, bool):
        return False
    if isinstance(value, str):
        return value.strip() != ""
    return isinstance(value, (int, float))


def normalize_identity(value: Any) -> str | None:
    """String form used for all identity comparisons.

    ``5``, ``5.0`` and ``"5"`` all normalize to ``"5"``.
    """
    if not is_identity_value(value):
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def resolve_identity(fields: Mapping[str, Any]) -> Any | None:
    """Return the first defined key value in priority order, or None."""
    for extract in KEY_EXTRACTORS:
        value = extract(fields)
        if value is not None:
            return value
    return None


def identity_keys(fields: Mapping[str, Any]) -> dict[str, str]:
    """All defined key fields of a record, normalized."""
    keys: dict[str, str] = {}
    for name, extract in zip(IDENTITY_FIELDS, KEY_EXTRACTORS):
        value = extract(fields)
        if value is not None:
            keys[name] = normalize_identity(value)  # type: ignore[assignment]
    return keys


def matches_identity(fields: Mapping[str, Any], identity: Any) -> bool:
    """True if any key field of ``fields`` equals ``identity`` after normalization."""
    wanted = normalize_identity(identity)
    if wanted is None:
        return False
    return wanted in identity_keys(fields).values()


def same_record(left: Mapping[str, Any], right: Mapping[str, Any]) -> bool:
    """True if any normalized key of one record appears among the other's keys.

    Key field names do not have to agree: ``{"firebaseId": "abc"}`` and
    ``{"docId": "abc"}`` name the same record, as ``find_by_identity`` would.
    """
    left_values = set(identity_keys(left).values())
    return not left_values.isdisjoint(identity_keys(right).values())
