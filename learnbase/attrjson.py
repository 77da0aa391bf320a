"""JSON serialisation of attributes."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any

from learnbase.attributes import (
    Attribute,
    BinaryAttribute,
    CategoricalAttribute,
    FloatAttribute,
)
from learnbase.grid import DataGrid

_FACTORIES: dict[str, type[Attribute]] = {
    "binary": BinaryAttribute,
    "float": FloatAttribute,
    "categorical": CategoricalAttribute,
}


def _dumps(obj: Any) -> bytes:
    return json.dumps(obj, sort_keys=True, separators=(",", ":")).encode("utf-8")


def _load(data: Any) -> Any:
    if isinstance(data, (bytes, bytearray)):
        data = data.decode("utf-8")
    if isinstance(data, str):
        return json.loads(data)
    return data


def marshal_attribute(attr: Attribute) -> dict[str, Any]:
    """Return the JSON description of ``attr`` as a plain dictionary."""
    return json.loads(serialize_attribute(attr))


def serialize_attribute(attr: Attribute) -> bytes:
    """Return the JSON encoding of ``attr``."""
    return _dumps(attr.to_json())


def serialize_attributes(attrs: Sequence[Attribute]) -> bytes:
    """Return the JSON encoding of a list of attributes."""
    return _dumps([attr.to_json() for attr in attrs])


def deserialize_attribute(data: Any) -> Attribute:
    """Build an attribute from its JSON encoding (bytes, text or a mapping)."""
    raw = _load(data)
    if not isinstance(raw, Mapping):
        raise ValueError("attribute description must be a JSON object")
    kind = raw.get("type", "")
    factory = _FACTORIES.get(kind)
    if factory is None:
        raise ValueError(f"Unrecognised Attribute format: {kind}")
    name = raw.get("name", "")
    if not isinstance(name, str):
        raise ValueError(f"attribute name must be a string, got {name!r}")
    attr = factory()
    try:
        attr.load_json(raw.get("attr"))
    except (ValueError, TypeError) as exc:
        raise ValueError(f"Can't deserialize: {dict(raw)} (error: {exc})") from exc
    attr.name = name
    return attr


def deserialize_attributes(data: Any) -> list[Attribute]:
    """Build a list of attributes from the JSON encoding of a list."""
    try:
        raw = _load(data)
    except ValueError as exc:
        raise ValueError(f"Failed to deserialize attributes: {exc}") from exc
    if not isinstance(raw, list):
        raise ValueError("Failed to deserialize attributes: expected a JSON list")
    return [deserialize_attribute(item) for item in raw]


def replace_deserialized_attribute(deserialized: Attribute, grid: DataGrid) -> Attribute:
    """Return the attribute of ``grid`` equal to ``deserialized``."""
    for attr in grid.all_attributes():
        if attr.equals(deserialized):
            return attr
    raise KeyError(f"Unable to match {deserialized} in {grid}")


def replace_deserialized_attributes(
    deserialized: Sequence[Attribute], grid: DataGrid
) -> list[Attribute]:
    """Return the attributes of ``grid`` equal to each of ``deserialized``."""
    return [replace_deserialized_attribute(attr, grid) for attr in deserialized]