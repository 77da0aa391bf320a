import pytest

from learnbase.attributes import CategoricalAttribute, FloatAttribute
from learnbase.grid import AttributeSpec, DataGrid, FixedDataGrid, UpdatableDataGrid
from learnbase.packing import pack_float, pack_u64


class _MemoryGrid(FixedDataGrid):
    def __init__(self, attrs, rows=()):
        self._attrs = list(attrs)
        self._rows = [list(r) for r in rows]
        self._classes = []

    def get_attribute(self, attr):
        for i, a in enumerate(self._attrs):
            if a.equals(attr):
                return AttributeSpec(0, i, a)
        raise KeyError(f"Couldn't resolve {attr}")

    def all_attributes(self):
        return list(self._attrs)

    def add_class_attribute(self, attr):
        spec = self.get_attribute(attr)
        if spec.attr not in self._classes:
            self._classes.append(spec.attr)

    def remove_class_attribute(self, attr):
        spec = self.get_attribute(attr)
        if spec.attr in self._classes:
            self._classes.remove(spec.attr)

    def all_class_attributes(self):
        return list(self._classes)

    def get(self, spec, row):
        return self._rows[row][spec.position]

    def iter_rows(self, specs):
        for number, row in enumerate(self._rows):
            yield number, [row[s.position] for s in specs]

    def size(self):
        return len(self._attrs), len(self._rows)


class _MemoryUpdatableGrid(UpdatableDataGrid, _MemoryGrid):
    def set(self, spec, row, value):
        self._rows[row][spec.position] = bytes(value)

    def add_attribute(self, attr):
        self._attrs.append(attr)
        return AttributeSpec(0, len(self._attrs) - 1, attr)

    def extend(self, rows):
        for _ in range(rows):
            self._rows.append([b"\x00" * 8 for _ in self._attrs])


def test_row_string_joins_formatted_values():
    cat = CategoricalAttribute("c", ["x", "y"])
    grid = _MemoryGrid(
        [FloatAttribute("f"), cat],
        [[pack_float(1.5), pack_u64(0)], [pack_float(2.0), pack_u64(1)]],
    )
    assert grid.row_string(0) == "1.50 x"
    assert grid.row_string(1) == "2.00 y"


def test_row_string_respects_precision():
    grid = _MemoryGrid([FloatAttribute("f", precision=1)], [[pack_float(7.0)]])
    assert grid.row_string(0) == "7.0"


def test_attribute_spec_str_format():
    attr = FloatAttribute("width")
    spec = AttributeSpec(2, 3, attr)
    assert str(spec) == "AttributeSpec(Attribute: 'FloatAttribute(width)', Pond: 2/3)"


def test_attribute_spec_equality_uses_identity_of_attribute():
    first = FloatAttribute("a")
    lookalike = FloatAttribute("a")
    assert AttributeSpec(0, 1, first) == AttributeSpec(0, 1, first)
    assert AttributeSpec(0, 1, first) != AttributeSpec(0, 1, lookalike)


def test_attribute_spec_usable_as_key():
    attr = FloatAttribute("a")
    marks = {AttributeSpec(0, 0, attr): True}
    assert marks[AttributeSpec(0, 0, attr)] is True


def test_attribute_spec_is_immutable():
    spec = AttributeSpec(0, 1, FloatAttribute("a"))
    with pytest.raises(AttributeError):
        spec.pond = 4
    assert spec.pond == 0
    assert spec.position == 1


@pytest.mark.parametrize("cls", [DataGrid, FixedDataGrid, UpdatableDataGrid])
def test_interfaces_cannot_be_instantiated(cls):
    with pytest.raises(TypeError):
        cls()


def test_updatable_grid_row_string_after_set():
    grid = _MemoryUpdatableGrid([])
    spec = grid.add_attribute(FloatAttribute("f"))
    grid.extend(2)
    grid.set(spec, 1, pack_float(3.25))
    assert grid.size() == (1, 2)
    assert grid.row_string(0) == "0.00"
    assert grid.row_string(1) == "3.25"