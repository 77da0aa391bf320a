"""Views that hide or reorder the rows and attributes of another grid."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence

from learnbase.attributes import Attribute
from learnbase.attrutils import resolve_all_attributes, resolve_attributes
from learnbase.grid import AttributeSpec, FixedDataGrid

_MAX_DISPLAYED_ROWS = 30


class InstancesView(FixedDataGrid):
    """A read-through view of a grid that hides or reorders rows and attributes.

    The view shares storage with its source; nothing is copied. Attribute
    specifications returned by the view are those of the source grid.
    """

    def __init__(
        self,
        src: FixedDataGrid,
        attrs: Iterable[AttributeSpec] | None = None,
        rows: Mapping[int, int] | None = None,
        mask_rows: bool = False,
    ) -> None:
        self._src = src
        self._attrs = list(attrs) if attrs is not None else None
        self._rows = dict(rows) if rows is not None else None
        self._mask_rows = mask_rows
        self._class_attrs: dict[Attribute, bool] = {}
        self._add_class_attrs_from_src()

    @classmethod
    def from_rows(cls, src: FixedDataGrid, rows: Mapping[int, int]) -> InstancesView:
        """Remap rows: an entry ``5: 1`` shows source row 1 at row 5.

        Rows without an entry appear unchanged.
        """
        return cls(src, rows=rows, mask_rows=False)

    @classmethod
    def from_visible(
        cls, src: FixedDataGrid, rows: Sequence[int], attrs: Iterable[Attribute]
    ) -> InstancesView:
        """Show only ``rows`` (in that order) and only ``attrs``."""
        return cls(
            src,
            attrs=resolve_attributes(src, attrs),
            rows=dict(enumerate(rows)),
            mask_rows=True,
        )

    @classmethod
    def from_attributes(cls, src: FixedDataGrid, attrs: Iterable[Attribute]) -> InstancesView:
        """Show every row but only ``attrs``."""
        return cls(src, attrs=resolve_attributes(src, attrs))

    def _add_class_attrs_from_src(self) -> None:
        for attr in self._src.all_class_attributes():
            if self._attrs is None or any(spec.attr.equals(attr) for spec in self._attrs):
                self._class_attrs[attr] = True

    def _resolve_row(self, row: int) -> int | None:
        if self._rows is not None:
            if row in self._rows:
                return self._rows[row]
            if self._mask_rows:
                return None
        return row

    def get_attribute(self, attr: Attribute) -> AttributeSpec:
        if attr is None:
            raise ValueError("Attribute can't be None")
        if self._attrs is None:
            return self._src.get_attribute(attr)
        for spec in self._attrs:
            if spec.attr.equals(attr):
                return spec
        raise KeyError("Requested Attribute has been filtered")

    def all_attributes(self) -> list[Attribute]:
        if self._attrs is None:
            return self._src.all_attributes()
        return [spec.attr for spec in self._attrs]

    def add_class_attribute(self, attr: Attribute) -> None:
        if not any(candidate.equals(attr) for candidate in self.all_attributes()):
            raise KeyError("Attribute has been filtered")
        self._class_attrs[attr] = True

    def remove_class_attribute(self, attr: Attribute) -> None:
        self._class_attrs[attr] = False

    def all_class_attributes(self) -> list[Attribute]:
        return [attr for attr, flagged in self._class_attrs.items() if flagged]

    def get(self, spec: AttributeSpec, row: int) -> bytes:
        """Return a value; the specification is not checked against the view's filter."""
        source_row = self._resolve_row(row)
        if source_row is None:
            raise IndexError("Out of range")
        return self._src.get(spec, source_row)

    def iter_rows(self, specs: Sequence[AttributeSpec]) -> Iterator[tuple[int, list[bytes]]]:
        specs = list(specs)
        if self._rows is None:
            yield from self._src.iter_rows(specs)
            return
        if self._mask_rows:
            for row, source_row in self._rows.items():
                yield row, [self._src.get(spec, source_row) for spec in specs]
            return
        _, count = self.size()
        for row in range(count):
            source_row = self._resolve_row(row)
            yield row, [self._src.get(spec, source_row) for spec in specs]

    def size(self) -> tuple[int, int]:
        cols, rows = self._src.size()
        if self._attrs is not None:
            cols = len(self._attrs)
        if self._rows is not None:
            if self._mask_rows or len(self._rows) > rows:
                rows = len(self._rows)
        return cols, rows

    def row_string(self, row: int) -> str:
        return " ".join(
            spec.attr.get_string_from_sys_val(self.get(spec, row))
            for spec in resolve_all_attributes(self)
        )

    def __str__(self) -> str:
        specs = resolve_all_attributes(self)
        cols, rows = self.size()
        parts = [f"InstancesView with {rows} row(s) {cols} attribute(s)\n"]
        if self._attrs is not None:
            parts.append("With defined Attribute view\n")
        if self._rows is not None:
            parts.append("With defined Row view\n")
        if self._mask_rows:
            parts.append("Row masking on.\n")
        parts.append("Attributes:\n")
        for spec in specs:
            prefix = "*\t" if self._class_attrs.get(spec.attr, False) else "\t"
            parts.append(f"{prefix}{spec.attr}\n")
        shown = min(rows, _MAX_DISPLAYED_ROWS)
        parts.append("Data:")
        for row in range(shown):
            values = "".join(
                f"{spec.attr.get_string_from_sys_val(self.get(spec, row))} " for spec in specs
            )
            parts.append(f"\t{values}\n")
        missing = rows - shown
        if missing:
            parts.append(f"\t...\n{missing} row(s) undisplayed")
        else:
            parts.append("All rows displayed")
        return "".join(parts)