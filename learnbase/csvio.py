"""Reading instances from comma-separated text files and streams."""

from __future__ import annotations

import csv
import os
import re
from collections.abc import Iterator, Mapping, MutableSequence, Sequence
from contextlib import contextmanager
from typing import TextIO, Union

from learnbase.attributes import (
    Attribute,
    BinaryAttribute,
    CategoricalAttribute,
    FloatAttribute,
)
from learnbase.attrutils import resolve_attributes
from learnbase.dense import DenseInstances, copy_dense_instances
from learnbase.grid import UpdatableDataGrid

Source = Union[str, os.PathLike, TextIO]

# The unescaped dot is deliberate: any character may join two digit runs.
_NUMBER_RUN = re.compile(r"[0-9]+(.[0-9]+)?")
_FLOAT_LITERAL = re.compile(r"[-+]?[0-9]*\.?[0-9]+([eE][-+]?[0-9]+)?")
_PRECISION_SAMPLE_LINES = 6


@contextmanager
def _text_source(source: Source) -> Iterator[TextIO]:
    """Yield a seekable text stream for a path or an already open stream."""
    if isinstance(source, (str, os.PathLike)):
        with open(source, newline="", encoding="utf-8") as handle:
            yield handle
    else:
        yield source


def _records(stream: TextIO) -> Iterator[list[str]]:
    """Yield the non-empty CSV records of ``stream`` from its start."""
    stream.seek(0)
    reader = csv.reader(stream)
    expected: int | None = None
    try:
        for record in reader:
            if not record:
                continue
            if expected is None:
                expected = len(record)
            elif len(record) != expected:
                raise ValueError(
                    f"record on line {reader.line_num} has {len(record)} field(s), "
                    f"expected {expected}"
                )
            yield record
    except csv.Error as exc:
        raise ValueError(f"CSV parse error on line {reader.line_num}: {exc}") from exc


def _count_rows(stream: TextIO) -> int:
    return sum(1 for _ in _records(stream))


def _estimate_precision(stream: TextIO) -> int:
    stream.seek(0)
    best = 0
    counted = 0
    for raw in stream:
        if counted >= _PRECISION_SAMPLE_LINES:
            break
        line = raw.rstrip("\r\n")
        if not line or line[0] in "@%":
            continue
        for match in _NUMBER_RUN.finditer(line):
            parts = match.group(0).split(".")
            if len(parts) == 2:
                best = max(best, len(parts[1]))
        counted += 1
    return best


def _sniff_names(stream: TextIO, has_headers: bool) -> list[str]:
    header = next(_records(stream), None)
    if header is None:
        raise ValueError("no records to read attribute names from")
    if has_headers:
        return [name.strip() for name in header]
    return [str(index) for index in range(len(header))]


def _sniff_types(stream: TextIO, has_headers: bool) -> list[Attribute]:
    records = _records(stream)
    if has_headers and next(records, None) is None:
        raise ValueError("no header record to skip")
    columns = next(records, None)
    if columns is None:
        raise ValueError("no data record to sniff attribute types from")
    attrs: list[Attribute] = [
        FloatAttribute("") if _FLOAT_LITERAL.fullmatch(entry.strip(" ")) else CategoricalAttribute()
        for entry in columns
    ]
    precision = _estimate_precision(stream)
    for attr in attrs:
        if isinstance(attr, FloatAttribute):
            attr.precision = precision
    return attrs


def _get_attributes(stream: TextIO, has_headers: bool) -> list[Attribute]:
    attrs = _sniff_types(stream, has_headers)
    names = _sniff_names(stream, has_headers)
    for attr, name in zip(attrs, names):
        attr.name = name
    return attrs


def _build(
    stream: TextIO, attrs: Sequence[Attribute], has_header: bool, grid: UpdatableDataGrid
) -> None:
    specs = resolve_attributes(grid, attrs)
    row = 0
    skip_header = has_header
    for record in _records(stream):
        if skip_header:
            skip_header = False
            continue
        try:
            if len(record) > len(specs):
                raise ValueError(
                    f"record has {len(record)} field(s) but only {len(specs)} attribute(s)"
                )
            for spec, value in zip(specs, record):
                grid.set(spec, row, spec.attr.get_sys_val_from_string(value.strip()))
        except (ValueError, KeyError) as exc:
            raise ValueError(f"error at line {row} (error {exc})") from exc
        row += 1


def _data_row_count(stream: TextIO, has_headers: bool) -> int:
    count = _count_rows(stream)
    return count - 1 if has_headers else count


def parse_csv_get_rows(source: Source) -> int:
    """Return the number of records, including any header record."""
    with _text_source(source) as stream:
        return _count_rows(stream)


def parse_csv_estimate_file_precision(source: Source) -> int:
    """Return the most digits seen after a decimal point in the first data lines."""
    with _text_source(source) as stream:
        return _estimate_precision(stream)


def parse_csv_get_attributes(source: Source, has_headers: bool) -> list[Attribute]:
    """Return typed attributes named after the header, or numbered if there is none."""
    with _text_source(source) as stream:
        return _get_attributes(stream, has_headers)


def parse_csv_sniff_attribute_names(source: Source, has_headers: bool) -> list[str]:
    """Return the header fields, or ``"0"``, ``"1"``, ... when there is no header."""
    with _text_source(source) as stream:
        return _sniff_names(stream, has_headers)


def parse_csv_sniff_attribute_types(source: Source, has_headers: bool) -> list[Attribute]:
    """Return unnamed attributes typed from the first data record."""
    with _text_source(source) as stream:
        return _sniff_types(stream, has_headers)


def parse_csv_build_instances(
    source: Source, attrs: Sequence[Attribute], has_header: bool, grid: UpdatableDataGrid
) -> None:
    """Store every data record into an allocated grid, column ``i`` into ``attrs[i]``."""
    with _text_source(source) as stream:
        _build(stream, attrs, has_header, grid)


def parse_csv_to_instances(source: Source, has_headers: bool) -> DenseInstances:
    """Read CSV into new instances; the last column becomes the class attribute."""
    with _text_source(source) as stream:
        rows = _data_row_count(stream, has_headers)
        attrs = _get_attributes(stream, has_headers)
        if not attrs:
            raise ValueError("no attributes found")
        instances = DenseInstances()
        for attr in attrs:
            instances.add_attribute(attr)
        instances.extend(rows)
        _build(stream, attrs, has_headers, instances)
    instances.add_class_attribute(attrs[-1])
    return instances


def parse_match_attributes(
    attrs: MutableSequence[Attribute], template_attrs: Sequence[Attribute]
) -> None:
    """Replace, in place, each attribute with a template attribute that is equal or shares its name."""
    for index, attr in enumerate(list(attrs)):
        for candidate in template_attrs:
            if attr.equals(candidate) or attr.name == candidate.name:
                attrs[index] = candidate


def parse_csv_to_templated_instances(
    source: Source, has_headers: bool, template: DenseInstances
) -> DenseInstances:
    """Read CSV into instances laid out like ``template`` and sharing its attributes."""
    with _text_source(source) as stream:
        rows = _data_row_count(stream, has_headers)
        attrs = _get_attributes(stream, has_headers)
        template_attrs = template.all_attributes()
        parse_match_attributes(attrs, template_attrs)
        instances = copy_dense_instances(template, template_attrs)
        instances.extend(rows)
        _build(stream, attrs, has_headers, instances)
    for attr in template.all_class_attributes():
        instances.add_class_attribute(attr)
    return instances


def parse_csv_to_instances_with_attribute_groups(
    source: Source,
    attr_groups: Mapping[str, str],
    class_attr_groups: Mapping[str, str],
    attr_overrides: Mapping[int, Attribute],
    has_headers: bool,
) -> DenseInstances:
    """Read CSV, placing named attributes into named groups.

    ``attr_groups`` and ``class_attr_groups`` map attribute names to group
    names; attributes named in ``class_attr_groups`` become class attributes.
    ``attr_overrides`` replaces the sniffed attribute at a column index.
    """
    with _text_source(source) as stream:
        rows = _data_row_count(stream, has_headers)
        attrs = _get_attributes(stream, has_headers)
        for index in range(len(attrs)):
            if index in attr_overrides:
                attrs[index] = attr_overrides[index]

        sizes: dict[str, int] = {}
        combined: dict[str, str] = {}
        for name, group in attr_groups.items():
            sizes[group] = 0
            combined[name] = group
        for name, group in class_attr_groups.items():
            sizes[group] = 8
            combined[name] = group
        for attr in attrs:
            group = combined.get(attr.name)
            if group is not None:
                sizes[group] = 0 if isinstance(attr, BinaryAttribute) else 8

        instances = DenseInstances()
        for group, size in sizes.items():
            instances.create_attribute_group(group, size)
        for attr in attrs:
            group = combined.get(attr.name)
            if group is not None:
                instances.add_attribute_to_attribute_group(attr, group)
            else:
                instances.add_attribute(attr)
            if attr.name in class_attr_groups:
                instances.add_class_attribute(attr)

        instances.extend(rows)
        _build(stream, attrs, has_headers, instances)
    return instances