"""Utilities for predictions, class lookup, splitting, shuffling and comparison of grids."""

from __future__ import annotations

import random
from collections import Counter
from collections.abc import Callable

from learnbase.attributes import Attribute, CategoricalAttribute, FloatAttribute
from learnbase.attrutils import attribute_intersect, resolve_attributes
from learnbase.dense import DenseInstances
from learnbase.grid import DataGrid, FixedDataGrid, UpdatableDataGrid
from learnbase.packing import unpack_float, unpack_u64
from learnbase.view import InstancesView


def _rng(rng: random.Random | None) -> random.Random:
    return rng if rng is not None else random.Random()


def _single_class_attribute(grid: DataGrid) -> Attribute:
    class_attrs = grid.all_class_attributes()
    if len(class_attrs) > 1:
        raise ValueError("More than one class defined")
    if not class_attrs:
        raise ValueError("No class defined!")
    return class_attrs[0]


def generate_prediction_vector(source: FixedDataGrid) -> DenseInstances:
    """Return an allocated grid holding only the class attributes of ``source``."""
    _, rows = source.size()
    result = DenseInstances()
    for attr in source.all_class_attributes():
        result.add_attribute(attr)
        result.add_class_attribute(attr)
    result.extend(rows)
    return result


def get_class(grid: DataGrid, row: int) -> str:
    """Return the class value of ``row``; the grid must have exactly one class attribute."""
    attr = _single_class_attribute(grid)
    spec = grid.get_attribute(attr)
    return attr.get_string_from_sys_val(grid.get(spec, row))


def set_class(grid: UpdatableDataGrid, row: int, cls: str) -> None:
    """Set the class value of ``row``; the grid must have exactly one class attribute."""
    attr = _single_class_attribute(grid)
    spec = grid.get_attribute(attr)
    grid.set(spec, row, attr.get_sys_val_from_string(cls))


def get_attribute_by_name(grid: DataGrid, name: str) -> Attribute | None:
    """Return the first attribute called ``name``, or None."""
    return next((attr for attr in grid.all_attributes() if attr.name == name), None)


def _only_class(grid: FixedDataGrid, kind: type[Attribute], label: str) -> Attribute:
    attrs = grid.all_class_attributes()
    if len(attrs) != 1:
        raise ValueError(f"Wrong number of class variables (has {len(attrs)}, should be 1)")
    if not isinstance(attrs[0], kind):
        raise TypeError(f"Class Attribute must be {label} (is {attrs[0]})")
    return attrs[0]


def get_class_distribution_by_binary_float_value(grid: FixedDataGrid) -> list[int]:
    """Count rows whose float class is at most 0.5 and above 0.5, in that order."""
    attr = _only_class(grid, FloatAttribute, "a FloatAttribute")
    counts = [0, 0]
    for _, values in grid.iter_rows(resolve_attributes(grid, [attr])):
        counts[1 if unpack_float(values[0]) > 0.5 else 0] += 1
    return counts


def get_class_distribution_by_categorical_value(grid: FixedDataGrid) -> list[int]:
    """Count rows per categorical class value, indexed by the value's stored index."""
    attr = _only_class(grid, CategoricalAttribute, "a CategoricalAttribute")
    counts = [0] * len(attr.values)
    for _, values in grid.iter_rows(resolve_attributes(grid, [attr])):
        counts[unpack_u64(values[0])] += 1
    return counts


def get_class_distribution(grid: FixedDataGrid) -> dict[str, int]:
    """Count rows per class value."""
    _, rows = grid.size()
    return dict(Counter(get_class(grid, row) for row in range(rows)))


def _split_distribution(
    grid: FixedDataGrid, split_key: Callable[[int], str]
) -> dict[str, dict[str, int]]:
    result: dict[str, dict[str, int]] = {}
    _, rows = grid.size()
    for row in range(rows):
        bucket = result.setdefault(split_key(row), {})
        cls = get_class(grid, row)
        bucket[cls] = bucket.get(cls, 0) + 1
    return result


def get_class_distribution_after_threshold(
    grid: FixedDataGrid, attr: Attribute, value: float
) -> dict[str, dict[str, int]]:
    """Class counts for rows above (``"1"``) and not above (``"0"``) a threshold on ``attr``."""
    spec = grid.get_attribute(attr)
    if not isinstance(attr, FloatAttribute):
        raise TypeError("Must be numeric!")
    return _split_distribution(
        grid, lambda row: "1" if unpack_float(grid.get(spec, row)) > value else "0"
    )


def get_class_distribution_after_split(
    grid: FixedDataGrid, attr: Attribute
) -> dict[str, dict[str, int]]:
    """Class counts for each value of ``attr``."""
    spec = grid.get_attribute(attr)
    return _split_distribution(
        grid, lambda row: attr.get_string_from_sys_val(grid.get(spec, row))
    )


def _decompose(
    grid: FixedDataGrid, attr: Attribute, key: Callable[[bytes], str]
) -> dict[str, InstancesView]:
    spec = grid.get_attribute(attr)
    remaining = [a for a in grid.all_attributes() if not a.equals(attr)]
    row_maps: dict[str, list[int]] = {}
    for row, values in grid.iter_rows([spec]):
        row_maps.setdefault(key(values[0]), []).append(row)
    return {
        name: InstancesView.from_visible(grid, rows, remaining)
        for name, rows in row_maps.items()
    }


def decompose_on_numeric_attribute_threshold(
    grid: FixedDataGrid, attr: Attribute, value: float
) -> dict[str, InstancesView]:
    """Split rows on a float threshold into views keyed ``"1"`` (above) and ``"0"``.

    The split attribute is left out of the resulting views.
    """
    if not isinstance(attr, FloatAttribute):
        raise TypeError("Invalid argument")
    return _decompose(grid, attr, lambda raw: "1" if unpack_float(raw) > value else "0")


def decompose_on_attribute_values(
    grid: FixedDataGrid, attr: Attribute
) -> dict[str, InstancesView]:
    """Split rows into views keyed by the value of ``attr``, which the views leave out."""
    return _decompose(grid, attr, attr.get_string_from_sys_val)


def instances_train_test_split(
    src: FixedDataGrid, prop: float, rng: random.Random | None = None
) -> tuple[InstancesView, InstancesView]:
    """Shuffle ``src`` and split it into a training and a testing view.

    About ``prop`` of the rows go to the testing view. Only meaningful for
    ``prop`` between 0.0 and 1.0.
    """
    rng = _rng(rng)
    src = shuffle(src, rng)
    training: list[int] = []
    testing: list[int] = []
    cutoff = int(100 * prop)
    _, rows = src.size()
    for row in range(rows):
        (training if rng.randint(0, 100) > cutoff else testing).append(row)
    attrs = src.all_attributes()
    return (
        InstancesView.from_visible(src, training, attrs),
        InstancesView.from_visible(src, testing, attrs),
    )


def lazy_shuffle(grid: FixedDataGrid, rng: random.Random | None = None) -> InstancesView:
    """Return a view presenting the rows of ``grid`` in a random order."""
    rng = _rng(rng)
    _, rows = grid.size()
    row_map: dict[int, int] = {}
    for i in range(rows):
        j = rng.randrange(i + 1)
        row_map[i] = j
        row_map[j] = i
    return InstancesView.from_rows(grid, row_map)


def shuffle(grid: FixedDataGrid, rng: random.Random | None = None) -> FixedDataGrid:
    """Randomise row order in place for DenseInstances, otherwise through a view."""
    rng = _rng(rng)
    if not isinstance(grid, DenseInstances):
        return lazy_shuffle(grid, rng)
    _, rows = grid.size()
    for i in range(rows):
        grid.swap_rows(i, rng.randrange(i + 1))
    return grid


def sample_with_replacement(
    grid: FixedDataGrid, size: int, rng: random.Random | None = None
) -> InstancesView:
    """Return a view whose first ``size`` rows are drawn at random from ``grid``."""
    rng = _rng(rng)
    _, rows = grid.size()
    row_map = {i: rng.randrange(rows) for i in range(size)}
    return InstancesView.from_rows(grid, row_map)


def check_compatible(first: FixedDataGrid, second: FixedDataGrid) -> list[Attribute] | None:
    """Return the shared attributes if both grids have equal attribute sets, else None."""
    first_attrs = first.all_attributes()
    second_attrs = second.all_attributes()
    shared = attribute_intersect(first_attrs, second_attrs)
    if len(shared) != len(first_attrs) or len(shared) != len(second_attrs):
        return None
    return shared


def check_strictly_compatible(first: FixedDataGrid, second: FixedDataGrid) -> bool:
    """Return True if two DenseInstances have the same groups holding equal attributes in order."""
    if not isinstance(first, DenseInstances) or not isinstance(second, DenseInstances):
        return False
    first_groups = first.all_attribute_groups()
    second_groups = second.all_attribute_groups()
    if set(first_groups) != set(second_groups):
        return False
    for name, group in first_groups.items():
        left = group.attributes()
        right = second_groups[name].attributes()
        if len(left) != len(right):
            return False
        if not all(a.equals(b) for a, b in zip(left, right)):
            return False
    return True


def instances_are_equal(inst: FixedDataGrid, other: FixedDataGrid) -> bool:
    """Return True if ``other`` has every attribute of ``inst`` with identical values."""
    _, rows = inst.size()
    _, other_rows = other.size()
    if rows != other_rows:
        return False
    for attr in inst.all_attributes():
        first_spec = inst.get_attribute(attr)
        try:
            second_spec = other.get_attribute(attr)
        except KeyError:
            return False
        if not first_spec.attr.equals(second_spec.attr):
            return False
        for row in range(rows):
            if inst.get(first_spec, row) != other.get(second_spec, row):
                return False
    return True