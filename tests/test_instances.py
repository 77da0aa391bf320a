import random

import pytest

from learnbase.attributes import CategoricalAttribute, FloatAttribute
from learnbase.attrutils import resolve_all_attributes
from learnbase.dense import DenseInstances, new_dense_copy
from learnbase.instances import (
    check_compatible,
    check_strictly_compatible,
    decompose_on_attribute_values,
    decompose_on_numeric_attribute_threshold,
    generate_prediction_vector,
    get_attribute_by_name,
    get_class,
    get_class_distribution,
    get_class_distribution_after_split,
    get_class_distribution_after_threshold,
    get_class_distribution_by_binary_float_value,
    get_class_distribution_by_categorical_value,
    instances_are_equal,
    instances_train_test_split,
    lazy_shuffle,
    sample_with_replacement,
    set_class,
    shuffle,
)


def build(attrs, rows, class_index=-1):
    inst = DenseInstances()
    specs = [inst.add_attribute(a) for a in attrs]
    inst.extend(len(rows))
    for r, row in enumerate(rows):
        for spec, value in zip(specs, row):
            inst.set(spec, r, spec.attr.get_sys_val_from_string(value))
    if class_index is not None:
        inst.add_class_attribute(attrs[class_index])
    return inst


def tennis():
    rows = (
        [("sunny", "no")] * 3
        + [("sunny", "yes")] * 2
        + [("overcast", "yes")] * 4
        + [("rainy", "yes")] * 3
        + [("rainy", "no")] * 2
    )
    return build([CategoricalAttribute("outlook"), CategoricalAttribute("play")], rows)


def iris(classes=("a", "b", "c")):
    rows = [
        ("5.1", "3.5", classes[0]),
        ("4.9", "3.0", classes[0]),
        ("7.0", "3.2", classes[1]),
        ("6.4", "3.2", classes[1]),
        ("6.3", "3.3", classes[2]),
    ]
    return build(
        [
            FloatAttribute("sepal", precision=1),
            FloatAttribute("width", precision=1),
            CategoricalAttribute("species"),
        ],
        rows,
    )


def test_class_distribution_after_split():
    inst = tennis()
    result = get_class_distribution_after_split(inst, inst.all_attributes()[0])
    assert result["sunny"]["no"] == 3
    assert result["sunny"]["yes"] == 2
    assert result["overcast"]["yes"] == 4
    assert result["rainy"]["yes"] == 3
    assert result["rainy"]["no"] == 2


def test_strictly_compatible_identical_layouts():
    assert check_strictly_compatible(iris(), iris()) is True


def test_strictly_compatible_different_value_order():
    assert check_strictly_compatible(iris(("a", "b", "c")), iris(("c", "b", "a"))) is False


def test_strictly_compatible_different_datasets():
    assert check_strictly_compatible(tennis(), iris()) is False


def test_categorical_equality_depends_on_value_order():
    c1 = iris(("a", "b", "c")).all_class_attributes()[0]
    c2 = iris(("c", "b", "a")).all_class_attributes()[0]
    assert c1.name == c2.name
    assert c1.equals(c2) is False
    assert c2.equals(c1) is False


def test_get_and_set_class():
    inst = tennis()
    assert get_class(inst, 0) == "no"
    set_class(inst, 0, "yes")
    assert get_class(inst, 0) == "yes"


def test_get_class_without_class_raises():
    inst = build([CategoricalAttribute("x")], [("a",)], class_index=None)
    with pytest.raises(ValueError):
        get_class(inst, 0)


def test_get_class_with_two_classes_raises():
    inst = tennis()
    inst.add_class_attribute(inst.all_attributes()[0])
    with pytest.raises(ValueError):
        get_class(inst, 0)


def test_get_attribute_by_name():
    inst = tennis()
    assert get_attribute_by_name(inst, "outlook").name == "outlook"
    assert get_attribute_by_name(inst, "missing") is None


def test_generate_prediction_vector():
    inst = iris()
    preds = generate_prediction_vector(inst)
    assert preds.size() == (1, 5)
    assert [a.name for a in preds.all_class_attributes()] == ["species"]


def test_class_distribution():
    assert get_class_distribution(tennis()) == {"no": 5, "yes": 9}


def test_class_distribution_by_categorical_value():
    assert get_class_distribution_by_categorical_value(tennis()) == [5, 9]


def test_class_distribution_by_binary_float_value():
    inst = build([FloatAttribute("y")], [("0.0",), ("1.0",), ("1.0",), ("0.2",), ("0.9",)])
    assert get_class_distribution_by_binary_float_value(inst) == [2, 3]


def test_binary_float_distribution_requires_float_class():
    with pytest.raises(TypeError):
        get_class_distribution_by_binary_float_value(tennis())


def test_class_distribution_after_threshold():
    inst = iris()
    result = get_class_distribution_after_threshold(inst, inst.all_attributes()[0], 6.0)
    assert result == {"0": {"a": 2}, "1": {"b": 2, "c": 1}}


def test_threshold_requires_float_attribute():
    inst = tennis()
    with pytest.raises(TypeError):
        get_class_distribution_after_threshold(inst, inst.all_attributes()[0], 1.0)


def test_decompose_on_numeric_threshold():
    inst = iris()
    sepal = inst.all_attributes()[0]
    parts = decompose_on_numeric_attribute_threshold(inst, sepal, 6.0)
    assert sorted(parts) == ["0", "1"]
    assert parts["0"].size() == (2, 2)
    assert parts["1"].size() == (2, 3)
    assert [a.name for a in parts["1"].all_attributes()] == ["width", "species"]
    assert parts["0"].row_string(1) == "3.0 a"


def test_decompose_on_attribute_values():
    inst = tennis()
    parts = decompose_on_attribute_values(inst, inst.all_attributes()[0])
    assert sorted(parts) == ["overcast", "rainy", "sunny"]
    assert parts["overcast"].size() == (1, 4)
    assert get_class_distribution(parts["rainy"]) == {"yes": 3, "no": 2}


def test_shuffle_preserves_rows():
    inst = iris()
    before = sorted(inst.row_string(r) for r in range(5))
    result = shuffle(inst, random.Random(7))
    assert result is inst
    assert sorted(inst.row_string(r) for r in range(5)) == before


def test_lazy_shuffle_rows_come_from_source():
    inst = iris()
    originals = {inst.row_string(r) for r in range(5)}
    view = lazy_shuffle(inst, random.Random(3))
    assert {view.row_string(r) for r in range(5)} <= originals


def test_sample_with_replacement():
    inst = iris()
    originals = {inst.row_string(r) for r in range(5)}
    view = sample_with_replacement(inst, 3, random.Random(1))
    assert all(view.row_string(r) in originals for r in range(3))
    assert view.size() == (3, 5)


def test_train_test_split_partitions_rows():
    inst = iris()
    originals = sorted(inst.row_string(r) for r in range(5))
    train, test = instances_train_test_split(inst, 0.5, random.Random(11))
    _, train_rows = train.size()
    _, test_rows = test.size()
    assert train_rows + test_rows == 5
    combined = [train.row_string(r) for r in range(train_rows)]
    combined += [test.row_string(r) for r in range(test_rows)]
    assert sorted(combined) == originals


def test_check_compatible():
    inst = iris()
    copy = new_dense_copy(inst)
    assert [a.name for a in check_compatible(inst, copy)] == ["sepal", "width", "species"]
    assert check_compatible(inst, tennis()) is None


def test_instances_are_equal():
    inst = iris()
    copy = new_dense_copy(inst)
    assert instances_are_equal(inst, copy) is True
    spec = resolve_all_attributes(copy)[0]
    copy.set(spec, 2, spec.attr.get_sys_val_from_string("1.5"))
    assert instances_are_equal(inst, copy) is False


def test_instances_are_equal_missing_attribute():
    assert instances_are_equal(iris(), tennis()) is False