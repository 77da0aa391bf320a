"""Reordering instances by the stored values of chosen attributes."""

from __future__ import annotations

from collections.abc import Sequence

from learnbase.attrutils import resolve_all_attributes
from learnbase.dense import DenseInstances
from learnbase.grid import AttributeSpec, FixedDataGrid, SortDirection
from learnbase.view import InstancesView


def _flip_first_byte(value: bytes) -> bytes:
    if not value:
        return value
    return bytes([value[0] ^ 0x80]) + value[1:]


def _ascending_order(inst: FixedDataGrid, specs: Sequence[AttributeSpec]) -> list[int]:
    """Return the source row for each position after an ascending sort.

    The first specification is the most significant key. Each value is
    compared byte-wise from its last stored byte to its first, and rows
    with equal keys keep their original order.
    """
    ordered = list(reversed(specs))
    _, rows = inst.size()
    keys: dict[int, bytes] = {}
    for row, values in inst.iter_rows(ordered):
        if values:
            values = [_flip_first_byte(values[0]), *values[1:]]
        keys[row] = b"".join(values)[::-1]
    return sorted(range(rows), key=lambda row: keys.get(row, b""))


def _final_order(
    inst: FixedDataGrid, direction: SortDirection, specs: Sequence[AttributeSpec]
) -> list[int]:
    order = _ascending_order(inst, specs)
    if direction == SortDirection.DESCENDING:
        order.reverse()
    return order


def sort_instances(
    inst: FixedDataGrid, direction: SortDirection, specs: Sequence[AttributeSpec]
) -> DenseInstances:
    """Sort the rows of a DenseInstances in place and return it.

    Ordering among rows whose sort keys are equal is not guaranteed to be
    meaningful outside the attributes sorted on.
    """
    if not isinstance(inst, DenseInstances):
        raise TypeError("Sort is only supported for DenseInstances")
    order = _final_order(inst, direction, specs)
    all_specs = resolve_all_attributes(inst)
    snapshot = [[inst.get(spec, row) for spec in all_specs] for row in range(len(order))]
    for new_row, old_row in enumerate(order):
        for spec, value in zip(all_specs, snapshot[old_row]):
            inst.set(spec, new_row, value)
    return inst


def lazy_sort(
    inst: FixedDataGrid, direction: SortDirection, specs: Sequence[AttributeSpec]
) -> InstancesView:
    """Return a view that presents the rows of ``inst`` in sorted order."""
    order = _final_order(inst, direction, specs)
    row_map = {position: row for position, row in enumerate(order) if position != row}
    return InstancesView.from_rows(inst, row_map)