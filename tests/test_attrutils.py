import pytest

from learnbase.attributes import BinaryAttribute, CategoricalAttribute, FloatAttribute
from learnbase.attrutils import (
    attribute_difference,
    attribute_difference_references,
    attribute_intersect,
    attribute_intersect_references,
    non_class_attributes,
    non_class_float_attributes,
    resolve_all_attributes,
    resolve_attributes,
)
from learnbase.grid import AttributeSpec, FixedDataGrid


class _MemoryGrid(FixedDataGrid):
    def __init__(self, attrs):
        self._attrs = list(attrs)
        self._classes = []

    def get_attribute(self, attr):
        for i, a in enumerate(self._attrs):
            if a.equals(attr):
                return AttributeSpec(0, i, a)
        raise KeyError(f"Couldn't resolve {attr}")

    def all_attributes(self):
        return list(self._attrs)

    def add_class_attribute(self, attr):
        self._classes.append(self.get_attribute(attr).attr)

    def remove_class_attribute(self, attr):
        self._classes.remove(self.get_attribute(attr).attr)

    def all_class_attributes(self):
        return list(self._classes)

    def get(self, spec, row):
        return b""

    def iter_rows(self, specs):
        return iter(())

    def size(self):
        return len(self._attrs), 0


@pytest.fixture
def grid():
    attrs = [
        FloatAttribute("a"),
        CategoricalAttribute("kind", ["x"]),
        FloatAttribute("b"),
        BinaryAttribute("flag"),
        FloatAttribute("target"),
    ]
    g = _MemoryGrid(attrs)
    g.add_class_attribute(attrs[4])
    return g


def test_non_class_attributes_excludes_class(grid):
    names = [a.name for a in non_class_attributes(grid)]
    assert names == ["a", "kind", "b", "flag"]


def test_non_class_float_attributes(grid):
    names = [a.name for a in non_class_float_attributes(grid)]
    assert names == ["a", "b"]


def test_resolve_attributes_keeps_given_order(grid):
    attrs = grid.all_attributes()
    specs = resolve_attributes(grid, [attrs[2], attrs[0]])
    assert [s.position for s in specs] == [2, 0]
    assert specs[0].attr is attrs[2]


def test_resolve_attributes_by_equality(grid):
    specs = resolve_attributes(grid, [FloatAttribute("b")])
    assert specs[0].attr is grid.all_attributes()[2]


def test_resolve_attributes_unknown_raises(grid):
    with pytest.raises(KeyError):
        resolve_attributes(grid, [FloatAttribute("missing")])


def test_resolve_all_attributes(grid):
    specs = resolve_all_attributes(grid)
    assert [s.attr for s in specs] == grid.all_attributes()
    assert [s.position for s in specs] == list(range(len(specs)))


def test_attribute_intersect_uses_equality_and_first_order():
    a1 = [FloatAttribute("a"), FloatAttribute("b"), FloatAttribute("c")]
    a2 = [FloatAttribute("c"), FloatAttribute("a")]
    result = attribute_intersect(a1, a2)
    assert result == [a1[0], a1[2]]


def test_attribute_difference_uses_equality():
    a1 = [FloatAttribute("a"), FloatAttribute("b"), BinaryAttribute("c")]
    a2 = [FloatAttribute("a"), FloatAttribute("c")]
    result = attribute_difference(a1, a2)
    assert result == [a1[1], a1[2]]


def test_intersect_references_uses_identity():
    shared = FloatAttribute("a")
    lookalike = FloatAttribute("b")
    result = attribute_intersect_references([shared, lookalike], [shared, FloatAttribute("b")])
    assert result == [shared]


def test_difference_references_uses_identity():
    shared = FloatAttribute("a")
    lookalike = FloatAttribute("b")
    result = attribute_difference_references([shared, lookalike], [shared, FloatAttribute("b")])
    assert result == [lookalike]


def test_reference_operations_collapse_duplicates():
    attr = FloatAttribute("a")
    assert attribute_difference_references([attr, attr], []) == [attr]
    assert attribute_intersect_references([attr, attr], [attr]) == [attr]