"""Dense in-memory storage of instances, grouped by attribute type."""

from __future__ import annotations

import mmap
import threading
from collections.abc import Iterable, Iterator, Sequence

from learnbase.attributes import (
    Attribute,
    BinaryAttribute,
    CategoricalAttribute,
    FloatAttribute,
)
from learnbase.attrutils import resolve_all_attributes
from learnbase.grid import AttributeSpec, FixedDataGrid, UpdatableDataGrid
from learnbase.storage import AttributeGroup, BinaryAttributeGroup, FixedAttributeGroup

_PAGE_SIZE = mmap.PAGESIZE
_MAX_DISPLAYED_ROWS = 30


class DenseInstances(UpdatableDataGrid):
    """Stores every attribute value explicitly in per-group byte grids.

    Attributes must all be added before storage is allocated with
    :meth:`extend`; afterwards the layout is fixed.
    """

    def __init__(self) -> None:
        self._group_ids: dict[str, int] = {}
        self._group_names: dict[int, str] = {}
        self._groups: list[AttributeGroup] = []
        self._lock = threading.RLock()
        self._fixed = False
        self._class_attrs: dict[AttributeSpec, bool] = {}
        self._max_row = 0
        self._attributes: list[Attribute] = []
        self._float_row_bytes = 0
        self._cat_row_bytes = 0
        self._bin_row_bits = 0

    # Attribute groups

    def _create_group(self, name: str, size: int) -> None:
        if self._fixed:
            raise RuntimeError("Can't add additional Attributes")
        if name in self._group_ids:
            raise ValueError(f"AttributeGroup '{name}' already exists")
        group: AttributeGroup = (
            FixedAttributeGroup(size) if size != 0 else BinaryAttributeGroup()
        )
        index = len(self._groups)
        self._group_ids[name] = index
        self._group_names[index] = name
        self._groups.append(group)

    def create_attribute_group(self, name: str, size: int) -> None:
        """Add a named group; size 0 makes a bit-packed group, otherwise bytes per value."""
        with self._lock:
            self._create_group(name, size)

    def all_attribute_groups(self) -> dict[str, AttributeGroup]:
        """Return every attribute group keyed by name, in creation order."""
        with self._lock:
            return {name: self._groups[index] for name, index in self._group_ids.items()}

    def get_attribute_group(self, name: str) -> AttributeGroup:
        """Return the attribute group with the given name."""
        with self._lock:
            try:
                return self._groups[self._group_ids[name]]
            except KeyError:
                raise KeyError(f"AttributeGroup '{name}' doesn't exist") from None

    def group_name_of(self, pond: int) -> str:
        """Return the name of the group with index ``pond``."""
        try:
            return self._group_names[pond]
        except KeyError:
            raise KeyError(f"no AttributeGroup at index {pond}") from None

    # Attributes

    def add_attribute(self, attr: Attribute) -> AttributeSpec:
        """Add an attribute to a default group for its type, creating the group if needed."""
        with self._lock:
            if self._fixed:
                raise RuntimeError("Can't add additional Attributes")
            binary = False
            if isinstance(attr, CategoricalAttribute):
                self._cat_row_bytes += 8
                name = f"CAT{self._cat_row_bytes // _PAGE_SIZE}"
            elif isinstance(attr, FloatAttribute):
                self._float_row_bytes += 8
                name = f"FLOAT{self._float_row_bytes // _PAGE_SIZE}"
            elif isinstance(attr, BinaryAttribute):
                self._bin_row_bits += 1
                name = f"BIN{(self._bin_row_bits // 8) // _PAGE_SIZE}"
                binary = True
            else:
                raise TypeError("Unrecognised Attribute type")

            if name not in self._group_ids:
                self._create_group(name, 0 if binary else 8)
            index = self._group_ids[name]
            group = self._groups[index]
            group.add_attribute(attr)
            self._attributes.append(attr)
            return AttributeSpec(index, len(group.attributes()) - 1, attr)

    def add_attribute_to_attribute_group(self, attr: Attribute, group: str) -> AttributeSpec:
        """Add an attribute to an existing, named group."""
        with self._lock:
            if self._fixed:
                raise RuntimeError("Can't add additional Attributes")
            if group not in self._group_ids:
                raise KeyError(
                    f"AttributeGroup '{group}' doesn't exist. Call create_attribute_group() first"
                )
            index = self._group_ids[group]
            target = self._groups[index]
            for position, existing in enumerate(target.attributes()):
                if not existing.compatible(attr):
                    raise ValueError(
                        f"Attribute {attr} is not Compatible with {existing} "
                        f"in pond '{group}' (position {position})"
                    )
            target.add_attribute(attr)
            self._attributes.append(attr)
            return AttributeSpec(index, len(target.attributes()) - 1, attr)

    def get_attribute(self, attr: Attribute) -> AttributeSpec:
        with self._lock:
            for pond, group in enumerate(self._groups):
                for position, candidate in enumerate(group.attributes()):
                    if candidate.equals(attr):
                        return AttributeSpec(pond, position, candidate)
        raise KeyError(f"Couldn't resolve {attr}")

    def all_attributes(self) -> list[Attribute]:
        with self._lock:
            return [attr for group in self._groups for attr in group.attributes()]

    def add_class_attribute(self, attr: Attribute) -> None:
        with self._lock:
            self._class_attrs[self.get_attribute(attr)] = True

    def remove_class_attribute(self, attr: Attribute) -> None:
        with self._lock:
            self._class_attrs[self.get_attribute(attr)] = False

    def all_class_attributes(self) -> list[Attribute]:
        with self._lock:
            return [spec.attr for spec, flagged in self._class_attrs.items() if flagged]

    # Storage

    def extend(self, rows: int) -> None:
        """Allocate room for ``rows`` more rows; fixes the attribute layout."""
        if rows < 0:
            raise ValueError(f"cannot extend by a negative number of rows ({rows})")
        with self._lock:
            for group in self._groups:
                group.resize(rows * group.row_size_in_bytes())
            self._fixed = True
            self._max_row += rows

    def set(self, spec: AttributeSpec, row: int, value: bytes) -> None:
        self._groups[spec.pond].set(spec.position, row, value)

    def get(self, spec: AttributeSpec, row: int) -> bytes:
        return self._groups[spec.pond].get(spec.position, row)

    def row_string(self, row: int) -> str:
        return " ".join(" ".join(group.row_strings(row)) for group in self._groups)

    def iter_rows(self, specs: Sequence[AttributeSpec]) -> Iterator[tuple[int, list[bytes]]]:
        specs = list(specs)
        for row in range(self._max_row):
            yield row, [self._groups[s.pond].get(s.position, row) for s in specs]

    def size(self) -> tuple[int, int]:
        return len(self.all_attributes()), self._max_row

    def swap_rows(self, i: int, j: int) -> None:
        """Exchange the contents of rows ``i`` and ``j``."""
        for spec in resolve_all_attributes(self):
            first = self.get(spec, i)
            second = self.get(spec, j)
            self.set(spec, j, first)
            self.set(spec, i, second)

    def __str__(self) -> str:
        specs = resolve_all_attributes(self)
        cols, rows = self.size()
        lines = [f"Instances with {rows} row(s) {cols} attribute(s)", "Attributes: "]
        for spec in specs:
            prefix = "*\t" if self._class_attrs.get(spec, False) else "\t"
            lines.append(f"{prefix}{spec.attr}")
        text = "\n".join(lines) + "\n\nData:\n"
        shown = min(rows, _MAX_DISPLAYED_ROWS)
        for row in range(shown):
            values = "".join(
                f"{spec.attr.get_string_from_sys_val(self.get(spec, row))} " for spec in specs
            )
            text += f"\t{values}\n"
        missing = rows - shown
        if missing:
            text += f"\t...\n{missing} row(s) undisplayed"
        else:
            text += "All rows displayed"
        return text


def _copy_structure(
    of: FixedDataGrid,
) -> tuple[DenseInstances, list[AttributeSpec], list[AttributeSpec]]:
    copy = DenseInstances()
    old_specs = []
    new_specs = []
    for attr in of.all_attributes():
        old_specs.append(of.get_attribute(attr))
        new_specs.append(copy.add_attribute(attr))
    for attr in of.all_class_attributes():
        copy.add_class_attribute(attr)
    return copy, old_specs, new_specs


def new_structural_copy(of: FixedDataGrid) -> DenseInstances:
    """Return an empty DenseInstances with the same attributes and classes as ``of``."""
    copy, _, _ = _copy_structure(of)
    return copy


def new_dense_copy(of: FixedDataGrid) -> DenseInstances:
    """Return a DenseInstances holding the same attributes, classes and data as ``of``."""
    copy, old_specs, new_specs = _copy_structure(of)
    _, rows = of.size()
    copy.extend(rows)
    for row, values in of.iter_rows(old_specs):
        for spec, value in zip(new_specs, values):
            copy.set(spec, row, value)
    return copy


def copy_dense_instances(
    template: DenseInstances, template_attrs: Iterable[Attribute]
) -> DenseInstances:
    """Return an unallocated DenseInstances with the same group layout as ``template``."""
    copy = DenseInstances()
    for name, group in template.all_attribute_groups().items():
        if isinstance(group, BinaryAttributeGroup):
            copy.create_attribute_group(name, 0)
        elif isinstance(group, FixedAttributeGroup):
            copy.create_attribute_group(name, group.size)
        else:
            copy.create_attribute_group(name, 8)
    for attr in template_attrs:
        spec = template.get_attribute(attr)
        copy.add_attribute_to_attribute_group(attr, template.group_name_of(spec.pond))
    return copy