"""Saving instances as CSV and as compressed tar archives, and loading them back."""

from __future__ import annotations

import csv
import gzip
import io
import os
import tarfile
import zlib
from typing import BinaryIO, TextIO

from learnbase.attributes import Attribute
from learnbase.attrjson import deserialize_attributes, serialize_attributes
from learnbase.attrutils import non_class_attributes, resolve_attributes
from learnbase.dense import DenseInstances
from learnbase.grid import FixedDataGrid
from learnbase.packing import pack_u64, unpack_u64

SERIALIZATION_FORMAT_VERSION = "learnbase 1.0"


def _ordered_attributes(inst: FixedDataGrid) -> tuple[list[Attribute], list[Attribute]]:
    return non_class_attributes(inst), inst.all_class_attributes()


def serialize_instances_to_file(inst: FixedDataGrid, path: str | os.PathLike[str]) -> None:
    """Write ``inst`` as a compressed archive into an existing file."""
    with open(path, "r+b") as handle:
        serialize_instances(inst, handle)
        handle.truncate()
        handle.flush()
        os.fsync(handle.fileno())


def serialize_instances_to_csv(inst: FixedDataGrid, path: str | os.PathLike[str]) -> None:
    """Write ``inst`` as CSV into an existing file."""
    with open(path, "r+", newline="", encoding="utf-8") as handle:
        serialize_instances_to_csv_stream(inst, handle)
        handle.truncate()
        handle.flush()
        os.fsync(handle.fileno())


def serialize_instances_to_csv_stream(inst: FixedDataGrid, stream: TextIO) -> None:
    """Write a header row of names, then every row; class attributes come last."""
    normal, classes = _ordered_attributes(inst)
    attrs = normal + classes
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow([attr.name for attr in attrs])
    specs = resolve_attributes(inst, attrs)
    for _, values in inst.iter_rows(specs):
        writer.writerow(
            [attr.get_string_from_sys_val(value) for attr, value in zip(attrs, values)]
        )


def serialize_instances(inst: FixedDataGrid, stream: BinaryIO) -> None:
    """Write ``inst`` to a binary stream as a gzip-compressed tar archive."""
    with tarfile.open(fileobj=stream, mode="w:gz") as tar:
        serialize_instances_to_tar(inst, tar, "", True)


def _add_entry(tar: tarfile.TarFile, name: str, data: bytes) -> None:
    info = tarfile.TarInfo(name)
    info.size = len(data)
    tar.addfile(info, io.BytesIO(data))


def serialize_instances_to_tar(
    inst: FixedDataGrid, tar: tarfile.TarFile, prefix: str, include_data: bool
) -> None:
    """Add the entries describing ``inst`` to an open tar archive.

    Entry names are ``prefix`` followed by MANIFEST, DIMS, CATTRS, ATTRS and
    DATA. Without ``include_data`` the DATA entry is left empty.
    """
    attr_count, row_count = inst.size()
    _add_entry(tar, f"{prefix}MANIFEST", SERIALIZATION_FORMAT_VERSION.encode("utf-8"))
    _add_entry(tar, f"{prefix}DIMS", pack_u64(attr_count) + pack_u64(row_count))

    normal, classes = _ordered_attributes(inst)
    _add_entry(tar, f"{prefix}CATTRS", serialize_attributes(classes))
    _add_entry(tar, f"{prefix}ATTRS", serialize_attributes(normal))

    if not include_data:
        _add_entry(tar, f"{prefix}DATA", b"")
        return
    specs = resolve_attributes(inst, normal + classes)
    data = b"".join(value for _, values in inst.iter_rows(specs) for value in values)
    _add_entry(tar, f"{prefix}DATA", data)


def _read_entry(tar: tarfile.TarFile, name: str) -> bytes:
    try:
        member = tar.getmember(name)
    except KeyError:
        raise KeyError(f"Not found (looking for {name})") from None
    handle = tar.extractfile(member)
    if handle is None:
        raise ValueError(f"entry {name} is not a regular file")
    with handle:
        data = handle.read()
    if len(data) != member.size:
        raise ValueError(
            f"Size mismatch, got {len(data)} byte(s) for {name}, expected {member.size}"
        )
    return data


def deserialize_instances_from_tar(tar: tarfile.TarFile, prefix: str) -> DenseInstances:
    """Rebuild instances from the entries under ``prefix`` in an open tar archive."""
    manifest = _read_entry(tar, f"{prefix}MANIFEST")
    if manifest != SERIALIZATION_FORMAT_VERSION.encode("utf-8"):
        raise ValueError(f"Unsupported MANIFEST: {manifest.decode('utf-8', 'replace')}")

    dims = _read_entry(tar, f"{prefix}DIMS")
    if len(dims) < 16:
        raise ValueError("DIMS: must be 16 bytes")
    attr_count = unpack_u64(dims[0:8])
    row_count = unpack_u64(dims[8:16])

    class_attrs = deserialize_attributes(_read_entry(tar, f"{prefix}CATTRS"))
    normal_attrs = deserialize_attributes(_read_entry(tar, f"{prefix}ATTRS"))
    all_attrs = normal_attrs + class_attrs
    if len(all_attrs) != attr_count:
        raise ValueError(
            f"DIMS declares {attr_count} attribute(s) but {len(all_attrs)} were stored"
        )

    inst = DenseInstances()
    for attr in normal_attrs:
        inst.add_attribute(attr)
    for attr in class_attrs:
        inst.add_attribute(attr)
        inst.add_class_attribute(attr)
    inst.extend(row_count)

    data = _read_entry(tar, f"{prefix}DATA")
    specs = resolve_attributes(inst, all_attrs)
    cursor = 0
    for row in range(row_count):
        for spec in specs:
            width = len(inst.get(spec, row))
            chunk = data[cursor : cursor + width]
            if len(chunk) != width:
                raise ValueError(
                    f"Expected {width} bytes (read {len(chunk)}) on row {row}"
                )
            inst.set(spec, row, chunk)
            cursor += width
    return inst


def deserialize_instances(stream: BinaryIO) -> DenseInstances:
    """Read instances from a binary stream holding a gzip-compressed tar archive."""
    try:
        with tarfile.open(fileobj=stream, mode="r:gz") as tar:
            return deserialize_instances_from_tar(tar, "")
    except (tarfile.TarError, gzip.BadGzipFile, zlib.error, EOFError) as exc:
        raise ValueError(f"Can't read instances archive: {exc}") from exc