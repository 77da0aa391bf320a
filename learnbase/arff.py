"""Reading and writing dense ARFF files."""

from __future__ import annotations

import csv
import os
from collections.abc import Sequence
from typing import TextIO

from learnbase.attributes import Attribute, CategoricalAttribute, FloatAttribute
from learnbase.attrutils import non_class_attributes, resolve_attributes
from learnbase.csvio import parse_csv_estimate_file_precision
from learnbase.dense import DenseInstances
from learnbase.grid import FixedDataGrid, UpdatableDataGrid


def serialize_instances_to_dense_arff(
    inst: FixedDataGrid, path: str | os.PathLike[str], relation: str
) -> None:
    """Write ``inst`` to an existing file; class attributes come last."""
    attrs = non_class_attributes(inst) + inst.all_class_attributes()
    serialize_instances_to_dense_arff_with_attributes(inst, attrs, path, relation)


def serialize_instances_to_dense_arff_with_attributes(
    inst: FixedDataGrid,
    attrs: Sequence[Attribute],
    path: str | os.PathLike[str],
    relation: str,
) -> None:
    """Write ``inst`` to an existing file, with attributes in the order given."""
    with open(path, "r+", encoding="utf-8", newline="") as handle:
        write_dense_arff(handle, inst, attrs, relation)
        handle.truncate()


def write_dense_arff(
    stream: TextIO, inst: FixedDataGrid, attrs: Sequence[Attribute], relation: str
) -> None:
    """Write ``inst`` in dense ARFF form to a text stream."""
    specs = resolve_attributes(inst, attrs)
    stream.write(f"@relation {relation}\n\n")
    for spec in specs:
        attr = spec.attr
        kind = "real"
        if isinstance(attr, CategoricalAttribute):
            kind = "{" + ", ".join(attr.values) + "}"
        stream.write(f"@attribute {attr.name} {kind}\n")
    stream.write("\n@data\n")
    for _, values in inst.iter_rows(specs):
        stream.write(
            ",".join(
                spec.attr.get_string_from_sys_val(value) for spec, value in zip(specs, values)
            )
        )
        stream.write("\n")


def parse_arff_get_rows(path: str | os.PathLike[str]) -> int:
    """Return the number of data rows in an ARFF file."""
    counting = False
    count = 0
    with open(path, encoding="utf-8") as handle:
        for raw in handle:
            line = raw.rstrip("\r\n")
            if not line:
                continue
            if counting:
                if line[0] in "@%":
                    continue
                count += 1
            elif line[0] == "@" and line.lower() == "@data":
                counting = True
    return count


def _categories(fields: list[str], line: str) -> list[str]:
    if not fields[-1].endswith("}"):
        raise ValueError(f"Missing categorical bracket on line '{line}'")
    cats = fields[2:] if len(fields) > 3 else fields[2].split(",")
    cats[0] = cats[0][1:]
    cats[-1] = cats[-1][:-1]
    result = []
    for cat in cats:
        cat = cat.strip()
        if cat.endswith(","):
            cat = cat[:-1]
        result.append(cat)
    return result


def parse_arff_get_attributes(path: str | os.PathLike[str]) -> list[Attribute]:
    """Return the attributes declared in an ARFF header, in declaration order."""
    attrs: list[Attribute] = []
    with open(path, encoding="utf-8") as handle:
        for raw in handle:
            line = raw.rstrip("\r\n")
            if not line or line[0] != "@":
                continue
            fields = line.split()
            if len(fields) < 3 or fields[0].lower() != "@attribute":
                continue
            attr: Attribute
            if fields[2].lower() == "real":
                attr = FloatAttribute(precision=0)
            elif fields[2].startswith("{"):
                attr = CategoricalAttribute()
                for value in _categories(fields, line):
                    attr.get_sys_val_from_string(value)
            else:
                raise ValueError(f"Unsupported Attribute type {fields[2]} on line '{line}'")
            attr.name = fields[1]
            attrs.append(attr)

    precision = parse_csv_estimate_file_precision(path)
    for attr in attrs:
        if isinstance(attr, FloatAttribute):
            attr.precision = precision
    return attrs


def parse_dense_arff_build_instances(
    stream: TextIO, attrs: Sequence[Attribute], grid: UpdatableDataGrid
) -> None:
    """Store the data section of an ARFF stream into an allocated grid."""
    specs = resolve_attributes(grid, attrs)
    reading = False
    row = 0
    for raw in stream:
        line = raw.rstrip("\r\n")
        if line.startswith("%"):
            continue
        if not reading:
            if line.strip().lower() == "@data":
                reading = True
            continue
        try:
            records = list(csv.reader([line]))
        except csv.Error as exc:
            raise ValueError(f"CSV parse error on line '{line}': {exc}") from exc
        for record in records:
            if not record:
                continue
            try:
                if len(record) > len(specs):
                    raise ValueError(
                        f"line '{line}' has {len(record)} field(s) "
                        f"but only {len(specs)} attribute(s)"
                    )
                for spec, value in zip(specs, record):
                    value = value.strip()
                    attr = spec.attr
                    if isinstance(attr, CategoricalAttribute) and attr.get_sys_val(value) is None:
                        raise ValueError(f"Unexpected class on line '{line}'")
                    grid.set(spec, row, attr.get_sys_val_from_string(value))
            except (ValueError, KeyError) as exc:
                raise ValueError(f"Error at line {row} (error {exc})") from exc
            row += 1


def parse_dense_arff_to_instances(path: str | os.PathLike[str]) -> DenseInstances:
    """Read a dense ARFF file; the last attribute becomes the class attribute."""
    rows = parse_arff_get_rows(path)
    attrs = parse_arff_get_attributes(path)
    if not attrs:
        raise ValueError("no attributes declared")
    inst = DenseInstances()
    for attr in attrs:
        inst.add_attribute(attr)
    inst.add_class_attribute(attrs[-1])
    inst.extend(rows)
    with open(path, encoding="utf-8") as handle:
        parse_dense_arff_build_instances(handle, attrs, inst)
    return inst