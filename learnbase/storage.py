"""Row-major byte storage for groups of attributes that share a layout."""

from __future__ import annotations

import abc

from learnbase.attributes import Attribute


class AttributeGroup(abc.ABC):
    """A block of storage holding the values of several attributes for every row."""

    def __init__(self) -> None:
        self._attributes: list[Attribute] = []
        self._alloc = bytearray()

    @abc.abstractmethod
    def row_size_in_bytes(self) -> int:
        """Return the number of bytes each row occupies, rounded up."""

    def attributes(self) -> list[Attribute]:
        """Return the attributes of this group in column order."""
        return list(self._attributes)

    def add_attribute(self, attr: Attribute) -> None:
        """Append an attribute as a new column of this group."""
        self._attributes.append(attr)

    def storage(self) -> bytes:
        """Return a copy of the underlying storage."""
        return bytes(self._alloc)

    @abc.abstractmethod
    def get(self, col: int, row: int) -> bytes:
        """Return the stored value at a column and row."""

    @abc.abstractmethod
    def set(self, col: int, row: int, value: bytes) -> None:
        """Store a value at a column and row."""

    def resize(self, add: int) -> None:
        """Grow the storage by ``add`` zeroed bytes, keeping existing data."""
        if add < 0:
            raise ValueError(f"cannot shrink storage by {-add} bytes")
        self._alloc.extend(bytes(add))

    def row_strings(self, row: int) -> list[str]:
        """Return the human-readable value of each column on ``row``."""
        return [
            attr.get_string_from_sys_val(self.get(col, row))
            for col, attr in enumerate(self._attributes)
        ]

    def __str__(self) -> str:
        return type(self).__name__


class FixedAttributeGroup(AttributeGroup):
    """Attributes that each occupy a fixed number of bytes per row."""

    def __init__(self, size: int = 8) -> None:
        if size <= 0:
            raise ValueError(f"value size must be positive, got {size}")
        super().__init__()
        self.size = size

    def row_size_in_bytes(self) -> int:
        return len(self._attributes) * self.size

    def _span(self, col: int, row: int) -> tuple[int, int]:
        start = row * self.row_size_in_bytes() + col * self.size
        end = start + self.size
        if start < 0 or end > len(self._alloc):
            raise IndexError(f"column {col}, row {row} is outside the allocated storage")
        return start, end

    def get(self, col: int, row: int) -> bytes:
        start, end = self._span(col, row)
        return bytes(self._alloc[start:end])

    def set(self, col: int, row: int, value: bytes) -> None:
        if len(value) != self.size:
            raise ValueError(
                f"Tried to call set() with {len(value)} bytes, should be {self.size}"
            )
        start, end = self._span(col, row)
        self._alloc[start:end] = value


class BinaryAttributeGroup(AttributeGroup):
    """Binary attributes packed one bit per column."""

    def row_size_in_bytes(self) -> int:
        return (len(self._attributes) + 7) // 8

    def _locate(self, col: int, row: int) -> tuple[int, int]:
        offset = row * self.row_size_in_bytes() + col // 8
        if col < 0 or offset < 0 or offset >= len(self._alloc):
            raise IndexError(f"column {col}, row {row} is outside the allocated storage")
        return offset, 1 << (col % 8)

    def get(self, col: int, row: int) -> bytes:
        offset, mask = self._locate(col, row)
        return b"\x01" if self._alloc[offset] & mask else b"\x00"

    def set(self, col: int, row: int, value: bytes) -> None:
        if not value:
            raise ValueError("binary value must contain at least one byte")
        offset, mask = self._locate(col, row)
        if value[0] > 0:
            self._alloc[offset] |= mask
        else:
            self._alloc[offset] &= ~mask & 0xFF