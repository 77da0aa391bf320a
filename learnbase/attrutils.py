"""Helpers for selecting, resolving and comparing groups of attributes."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from learnbase.attributes import Attribute, FloatAttribute
from learnbase.grid import AttributeSpec, DataGrid


def non_class_float_attributes(grid: DataGrid) -> list[Attribute]:
    """Return the float attributes of ``grid`` that are not class attributes."""
    class_attrs = grid.all_class_attributes()
    return [
        attr
        for attr in grid.all_attributes()
        if isinstance(attr, FloatAttribute)
        and not any(attr.equals(cls) for cls in class_attrs)
    ]


def non_class_attributes(grid: DataGrid) -> list[Attribute]:
    """Return the attributes of ``grid`` that are not class attributes."""
    return attribute_difference_references(grid.all_attributes(), grid.all_class_attributes())


def resolve_attributes(grid: DataGrid, attrs: Iterable[Attribute]) -> list[AttributeSpec]:
    """Return the specification of each attribute, in the order given."""
    specs = []
    for attr in attrs:
        try:
            specs.append(grid.get_attribute(attr))
        except KeyError as exc:
            raise KeyError(f"Error resolving Attribute {attr}: {exc}") from exc
    return specs


def resolve_all_attributes(grid: DataGrid) -> list[AttributeSpec]:
    """Return the specification of every attribute of ``grid``."""
    return resolve_attributes(grid, grid.all_attributes())


def _unique_by_identity(attrs: Iterable[Attribute]) -> list[Attribute]:
    seen: set[int] = set()
    result = []
    for attr in attrs:
        if id(attr) not in seen:
            seen.add(id(attr))
            result.append(attr)
    return result


def attribute_intersect(
    first: Sequence[Attribute], second: Sequence[Attribute]
) -> list[Attribute]:
    """Return the attributes of ``first`` equal to one in ``second``, in ``first``'s order."""
    return [a for a in first if any(a.equals(b) for b in second)]


def attribute_intersect_references(
    first: Sequence[Attribute], second: Sequence[Attribute]
) -> list[Attribute]:
    """Return the distinct objects found in both sequences, compared by identity."""
    others = {id(b) for b in second}
    return [a for a in _unique_by_identity(first) if id(a) in others]


def attribute_difference(
    first: Sequence[Attribute], second: Sequence[Attribute]
) -> list[Attribute]:
    """Return the attributes of ``first`` equal to none in ``second``, in ``first``'s order."""
    return [a for a in first if not any(a.equals(b) for b in second)]


def attribute_difference_references(
    first: Sequence[Attribute], second: Sequence[Attribute]
) -> list[Attribute]:
    """Return the distinct objects of ``first`` absent from ``second``, compared by identity."""
    others = {id(b) for b in second}
    return [a for a in _unique_by_identity(first) if id(a) not in others]