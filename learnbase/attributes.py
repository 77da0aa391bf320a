"""Typed column descriptions and conversion between text and stored bytes."""

from __future__ import annotations

import abc
import enum
import json
from collections.abc import Mapping
from typing import Any

from learnbase.packing import pack_float, pack_u64, unpack_float, unpack_u64


class AttributeType(enum.IntEnum):
    """Broad storage category of an attribute."""

    CATEGORICAL = 0
    FLOAT64 = 1
    BINARY = 2


def _parse_float(value: str) -> float:
    """Parse a number strictly: no surrounding whitespace or digit separators."""
    if value != value.strip() or "_" in value or not value:
        raise ValueError(f"invalid float syntax: {value!r}")
    try:
        return float(value)
    except ValueError:
        lowered = value.lower()
        if "0x" in lowered:
            return float.fromhex(value)
        raise


def _decode_payload(data: Any) -> Any:
    if isinstance(data, (bytes, bytearray)):
        data = data.decode("utf-8")
    if isinstance(data, str):
        return json.loads(data) if data.strip() else None
    return data


class Attribute(abc.ABC):
    """A named, typed column of a feature matrix.

    Attributes are compared by identity when used as dictionary keys;
    use :meth:`equals` for structural equality.
    """

    attr_type: AttributeType

    def __init__(self, name: str = "") -> None:
        self.name = name

    @abc.abstractmethod
    def get_sys_val_from_string(self, value: str) -> bytes:
        """Convert a human-readable value into its stored byte form."""

    @abc.abstractmethod
    def get_string_from_sys_val(self, raw: bytes) -> str:
        """Convert a stored byte form into a human-readable value."""

    @abc.abstractmethod
    def equals(self, other: Attribute) -> bool:
        """Return True if ``other`` describes the same column."""

    @abc.abstractmethod
    def compatible(self, other: Attribute) -> bool:
        """Return True if ``other`` may share storage with this attribute."""

    @abc.abstractmethod
    def to_json(self) -> dict[str, Any]:
        """Return a JSON-ready description of this attribute."""

    @abc.abstractmethod
    def load_json(self, data: Any) -> None:
        """Load the type-specific part of a JSON description."""

    def __repr__(self) -> str:
        return str(self)


class BinaryAttribute(Attribute):
    """An attribute that holds only 0 or 1, stored in a single byte."""

    attr_type = AttributeType.BINARY

    def get_sys_val_from_string(self, value: str) -> bytes:
        return b"\x01" if _parse_float(value) > 0 else b"\x00"

    def get_string_from_sys_val(self, raw: bytes) -> str:
        return "1" if raw[0] > 0 else "0"

    def equals(self, other: Attribute) -> bool:
        return isinstance(other, BinaryAttribute) and other.name == self.name

    def compatible(self, other: Attribute) -> bool:
        return isinstance(other, BinaryAttribute)

    def to_json(self) -> dict[str, Any]:
        return {"type": "binary", "name": self.name}

    def load_json(self, data: Any) -> None:
        """Binary attributes carry no type-specific data."""

    def __str__(self) -> str:
        return f"BinaryAttribute({self.name})"


class CategoricalAttribute(Attribute):
    """An attribute holding discrete string values, stored as indices."""

    attr_type = AttributeType.CATEGORICAL

    def __init__(self, name: str = "", values: list[str] | None = None) -> None:
        super().__init__(name)
        self._values: list[str] = list(values) if values else []

    @property
    def values(self) -> list[str]:
        """All values defined so far, in index order."""
        return list(self._values)

    def get_sys_val(self, value: str) -> bytes | None:
        """Return the stored form of ``value``, or None if it is not defined."""
        try:
            return pack_u64(self._values.index(value))
        except ValueError:
            return None

    def get_usr_val(self, raw: bytes) -> str:
        """Return the value at the index stored in ``raw``."""
        return self._values[unpack_u64(raw)]

    def get_sys_val_from_string(self, value: str) -> bytes:
        """Return the stored form of ``value``, defining it if it is new."""
        try:
            index = self._values.index(value)
        except ValueError:
            self._values.append(value)
            index = len(self._values) - 1
        return pack_u64(index)

    def get_string_from_sys_val(self, raw: bytes) -> str:
        index = unpack_u64(raw)
        if index >= len(self._values):
            raise IndexError(f"Out of range: {index} in {len(self._values)} ({self})")
        return self._values[index]

    def equals(self, other: Attribute) -> bool:
        return (
            isinstance(other, CategoricalAttribute)
            and other.name == self.name
            and other._values == self._values
        )

    def compatible(self, other: Attribute) -> bool:
        return isinstance(other, CategoricalAttribute) and other._values == self._values

    def to_json(self) -> dict[str, Any]:
        return {
            "type": "categorical",
            "name": self.name,
            "attr": {"values": list(self._values)},
        }

    def load_json(self, data: Any) -> None:
        payload = _decode_payload(data)
        if not isinstance(payload, Mapping) or not isinstance(payload.get("values"), list):
            raise ValueError("categorical attribute data must contain a list of values")
        for value in payload["values"]:
            if not isinstance(value, str):
                raise ValueError(f"categorical value must be a string, got {value!r}")
            self._values.append(value)

    def __str__(self) -> str:
        return f'CategoricalAttribute("{self.name}", [{" ".join(self._values)}])'


class FloatAttribute(Attribute):
    """An attribute holding double-precision floating point numbers."""

    attr_type = AttributeType.FLOAT64

    def __init__(self, name: str = "", precision: int = 2) -> None:
        super().__init__(name)
        self.precision = precision

    def check_sys_val_from_string(self, value: str) -> bytes:
        """Return the stored form of ``value``; raise ValueError if it is not a number."""
        return pack_float(_parse_float(value))

    def get_sys_val_from_string(self, value: str) -> bytes:
        return self.check_sys_val_from_string(value)

    def get_float_from_sys_val(self, raw: bytes) -> float:
        """Return the number stored in ``raw``."""
        return unpack_float(raw)

    def get_string_from_sys_val(self, raw: bytes) -> str:
        return f"{unpack_float(raw):.{self.precision}f}"

    def equals(self, other: Attribute) -> bool:
        return isinstance(other, FloatAttribute) and other.name == self.name

    def compatible(self, other: Attribute) -> bool:
        return isinstance(other, FloatAttribute)

    def to_json(self) -> dict[str, Any]:
        return {
            "type": "float",
            "name": self.name,
            "attr": {"precision": self.precision},
        }

    def load_json(self, data: Any) -> None:
        payload = _decode_payload(data)
        if not isinstance(payload, Mapping) or "precision" not in payload:
            raise ValueError("Precision must be specified")
        self.precision = int(payload["precision"])

    def __str__(self) -> str:
        return f"FloatAttribute({self.name})"