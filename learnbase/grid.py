"""Abstract interfaces for data addressable by attribute and row."""

from __future__ import annotations

import abc
import enum
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from learnbase.attributes import Attribute


class SortDirection(enum.IntEnum):
    """Order in which rows are sorted."""

    DESCENDING = 1
    ASCENDING = 2


@dataclass(frozen=True)
class AttributeSpec:
    """Locates an attribute within a grid's storage."""

    pond: int
    position: int
    attr: Attribute

    def __str__(self) -> str:
        return f"AttributeSpec(Attribute: '{self.attr}', Pond: {self.pond}/{self.position})"


class DataGrid(abc.ABC):
    """Data addressable by rows and attributes.

    Lookups that cannot be resolved raise KeyError.
    """

    @abc.abstractmethod
    def get_attribute(self, attr: Attribute) -> AttributeSpec:
        """Return the specification of an attribute equal to ``attr``."""

    @abc.abstractmethod
    def all_attributes(self) -> list[Attribute]:
        """Return every attribute of the grid."""

    @abc.abstractmethod
    def add_class_attribute(self, attr: Attribute) -> None:
        """Mark an attribute as a class attribute."""

    @abc.abstractmethod
    def remove_class_attribute(self, attr: Attribute) -> None:
        """Unmark an attribute as a class attribute."""

    @abc.abstractmethod
    def all_class_attributes(self) -> list[Attribute]:
        """Return every class attribute."""

    @abc.abstractmethod
    def get(self, spec: AttributeSpec, row: int) -> bytes:
        """Return the stored value of an attribute on a row."""

    @abc.abstractmethod
    def iter_rows(self, specs: Sequence[AttributeSpec]) -> Iterator[tuple[int, list[bytes]]]:
        """Yield each row number with the values of ``specs`` on that row."""


class FixedDataGrid(DataGrid):
    """A data grid whose size is known in advance."""

    def row_string(self, row: int) -> str:
        """Return the values of every attribute on ``row``, separated by spaces."""
        parts = []
        for attr in self.all_attributes():
            spec = self.get_attribute(attr)
            parts.append(spec.attr.get_string_from_sys_val(self.get(spec, row)))
        return " ".join(parts)

    @abc.abstractmethod
    def size(self) -> tuple[int, int]:
        """Return the number of attributes and the number of rows."""


class UpdatableDataGrid(FixedDataGrid):
    """A fixed data grid whose contents and layout can be changed."""

    @abc.abstractmethod
    def set(self, spec: AttributeSpec, row: int, value: bytes) -> None:
        """Store a value for an attribute on a row."""

    @abc.abstractmethod
    def add_attribute(self, attr: Attribute) -> AttributeSpec:
        """Add an attribute and return its specification."""

    @abc.abstractmethod
    def extend(self, rows: int) -> None:
        """Allocate room for ``rows`` additional rows."""