# learnbase

Foundations for machine-learning datasets: typed attributes, compact
column-grouped storage, views over rows and columns, sorting, class
statistics, and readers and writers for CSV, ARFF and a gzip-compressed tar
archive format. It has no dependencies outside the standard library.

## Installing

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Modules

| Module | What it holds |
| --- | --- |
| `learnbase.packing` | `pack_u64`, `unpack_u64`, `pack_float`, `unpack_float`: 8-byte little-endian storage forms |
| `learnbase.attributes` | `AttributeType`, `Attribute`, `FloatAttribute`, `CategoricalAttribute`, `BinaryAttribute` |
| `learnbase.storage` | `AttributeGroup`, `FixedAttributeGroup`, `BinaryAttributeGroup`: row-major byte storage |
| `learnbase.grid` | `SortDirection`, `AttributeSpec` and the abstract `DataGrid`, `FixedDataGrid`, `UpdatableDataGrid` |
| `learnbase.attrutils` | resolving attributes to specs, class/non-class selection, intersections and differences |
| `learnbase.attrjson` | JSON serialisation of attributes |
| `learnbase.dense` | `DenseInstances`, `new_structural_copy`, `new_dense_copy`, `copy_dense_instances` |
| `learnbase.view` | `InstancesView` |
| `learnbase.sorting` | `sort_instances`, `lazy_sort` |
| `learnbase.instances` | class lookup, class distributions, decomposition, shuffling, splitting, comparison |
| `learnbase.csvio` | reading CSV |
| `learnbase.arff` | reading and writing dense ARFF |
| `learnbase.serialization` | writing CSV, and writing and reading the tar archive format |

## Concepts

- **Attributes** describe columns. `FloatAttribute` stores a 64-bit float and
  prints it with `precision` decimal places (2 by default).
  `CategoricalAttribute` stores an 8-byte index into its list of `values`;
  `get_sys_val_from_string` adds unseen values, `get_sys_val` returns `None`
  for them. `BinaryAttribute` stores 0 or 1. Use `equals` for structural
  equality; as dictionary keys attributes compare by identity.
- **DenseInstances** holds the data. Attributes are placed into attribute
  groups (8-byte groups named `FLOAT0`, `CAT0`, or bit-packed `BIN0` groups for
  binary attributes, unless you create and name groups yourself). Adding an
  attribute returns an `AttributeSpec` used with `get` and `set`. All
  attributes must be added before `extend` allocates rows; after that the
  layout is fixed and adding raises `RuntimeError`.
- **InstancesView** hides or re-orders rows and attributes of another grid
  without copying: `InstancesView.from_rows`, `from_visible` and
  `from_attributes`.
- Every grid offers `iter_rows(specs)`, which yields `(row, values)` pairs.

## Reading data

```python
from learnbase.csvio import parse_csv_to_instances
from learnbase.arff import parse_dense_arff_to_instances

iris = parse_csv_to_instances("iris_headers.csv", True)
print(iris.row_string(0))        # e.g. "5.1 3.5 1.4 0.2 Iris-setosa"

weather = parse_dense_arff_to_instances("weather.arff")
```

The CSV functions accept a path or an open, seekable text stream. Column
types are sniffed from the first data record: numbers become
`FloatAttribute`s, anything else a `CategoricalAttribute`. Float precision is
estimated from the digits after the decimal point in the first lines. The
last column becomes the class attribute; for ARFF the last declared attribute
does. `parse_csv_to_templated_instances` reads a second file laid out like an
existing grid, and `parse_csv_to_instances_with_attribute_groups` places named
attributes into named groups.

## Working with a grid

```python
import random

from learnbase.attrutils import resolve_all_attributes
from learnbase.grid import SortDirection
from learnbase.sorting import sort_instances
from learnbase.instances import get_class_distribution, instances_train_test_split

specs = resolve_all_attributes(iris)
sort_instances(iris, SortDirection.ASCENDING, specs[:-1])

print(get_class_distribution(iris))

train, test = instances_train_test_split(iris, 0.5, rng=random.Random(1))
```

`sort_instances` reorders a `DenseInstances` in place (other grids raise
`TypeError`); `lazy_sort` returns a view instead. `shuffle`, `lazy_shuffle`,
`sample_with_replacement` and `instances_train_test_split` take an optional
`random.Random`. `decompose_on_attribute_values` and
`decompose_on_numeric_attribute_threshold` split a grid into views keyed by
value. `instances_are_equal`, `check_compatible` and
`check_strictly_compatible` compare grids.

## Building a grid by hand

```python
from learnbase.attributes import FloatAttribute, CategoricalAttribute
from learnbase.dense import DenseInstances
from learnbase.instances import set_class, get_class

inst = DenseInstances()
width = FloatAttribute("width")
label = CategoricalAttribute("label")
width_spec = inst.add_attribute(width)
inst.add_attribute(label)
inst.add_class_attribute(label)
inst.extend(2)

inst.set(width_spec, 0, width.get_sys_val_from_string("1.5"))
set_class(inst, 0, "small")
print(get_class(inst, 0))         # "small"
```

## Saving

```python
from learnbase.serialization import serialize_instances, deserialize_instances

with open("iris.bin", "wb") as out:
    serialize_instances(iris, out)

with open("iris.bin", "rb") as src:
    restored = deserialize_instances(src)
```

The archive holds the entries `MANIFEST`, `DIMS`, `CATTRS`, `ATTRS` and
`DATA`; `serialize_instances_to_tar` and `deserialize_instances_from_tar`
work on an open `tarfile.TarFile` with an entry-name prefix.
`serialize_instances_to_csv_stream` and `write_dense_arff` write to text
streams. The path-based writers (`serialize_instances_to_file`,
`serialize_instances_to_csv`, `serialize_instances_to_dense_arff`) overwrite a
file that must already exist.

## Errors

Malformed input raises `ValueError`, attributes that cannot be resolved raise
`KeyError`, and missing files raise the usual `OSError` subclasses.

## What it does not do

This package only holds and moves data. It contains no classifiers, no
training or prediction, and no command-line program.