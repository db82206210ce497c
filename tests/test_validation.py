"""Tests for bridgegen.validation."""

import pytest

from bridgegen.errors import MalformedDefinition, UnsupportedType, ViolationKind
from bridgegen.ir_builder import build_object
from bridgegen.syntax import (
    ConstructorDecl, InvokableDecl, ObjectDecl, ParamDecl, PropertyDecl, SignalDecl,
)
from bridgegen.validation import check, validate


def _kinds(violations):
    return [v.kind for v in violations]


def test_valid_object_has_no_violations(my_object_decl):
    assert validate(build_object(my_object_decl)) == []


def test_counter_sample_is_valid(counter_decl):
    assert validate(build_object(counter_decl)) == []


def test_missing_notify_signal_is_reported_once(my_object_decl):
    my_object_decl.signals = []

    violations = validate(build_object(my_object_decl))

    assert _kinds(violations) == [ViolationKind.MISSING_NOTIFY_SIGNAL]
    assert violations[0].subject == "property count"
    assert "countChanged" in violations[0].message


def test_explicit_notify_must_exist_for_readonly_property():
    decl = ObjectDecl(
        name="Thing",
        properties=[PropertyDecl(name="label", type="QString", readonly=True, notify="labelChanged")],
    )

    assert _kinds(validate(build_object(decl))) == [ViolationKind.MISSING_NOTIFY_SIGNAL]


def test_notify_signal_with_parameters():
    decl = ObjectDecl(
        name="Thing",
        properties=[PropertyDecl(name="count", type="i32")],
        signals=[SignalDecl(name="countChanged", params=[ParamDecl(type="i32", name="value")])],
    )

    assert _kinds(validate(build_object(decl))) == [ViolationKind.NOTIFY_SIGNAL_HAS_PARAMETERS]


def test_independent_violations_are_all_reported():
    decl = ObjectDecl(
        name="Widget",
        properties=[PropertyDecl(name="font", type="QFont", readonly=True)],
        invokables=[
            InvokableDecl(name="reset", is_static=True, is_mutating=True),
            InvokableDecl(name="greet", params=[ParamDecl(type="str", name="who")]),
            InvokableDecl(name="poke"),
            InvokableDecl(name="poke"),
        ],
        signals=[SignalDecl(name="handed", params=[ParamDecl(type="UniquePtr<Other>", name="thing")])],
    )

    violations = validate(build_object(decl), known_objects=["Other"])

    assert sorted(k.value for k in _kinds(violations)) == sorted([
        ViolationKind.UNSUPPORTED_TYPE.value,
        ViolationKind.STATIC_MUTATING.value,
        ViolationKind.UNSUPPORTED_DIRECTION.value,
        ViolationKind.OVERLOAD_COLLISION.value,
        ViolationKind.OWNED_VALUE_IN_SIGNAL.value,
    ])


def test_unsupported_type_carries_the_type_name():
    decl = ObjectDecl(name="Thing", properties=[PropertyDecl(name="font", type="QFont", readonly=True)])

    violations = validate(build_object(decl))

    assert len(violations) == 1
    assert isinstance(violations[0], UnsupportedType)
    assert violations[0].type_name == "QFont"


def test_str_cannot_be_written():
    decl = ObjectDecl(
        name="Thing",
        properties=[PropertyDecl(name="label", type="str")],
        signals=[SignalDecl(name="labelChanged")],
    )

    violations = validate(build_object(decl))

    assert _kinds(violations) == [ViolationKind.UNSUPPORTED_DIRECTION]
    assert "write" in violations[0].message


def test_owned_handle_of_unknown_object():
    decl = ObjectDecl(
        name="Canvas",
        invokables=[InvokableDecl(name="adopt", params=[ParamDecl(type="UniquePtr<Shape>", name="shape")],
                                  is_mutating=True)],
    )

    assert _kinds(validate(build_object(decl))) == [ViolationKind.UNSUPPORTED_TYPE]
    assert validate(build_object(decl), known_objects=["Shape"]) == []


def test_duplicate_names():
    decl = ObjectDecl(
        name="Thing",
        properties=[
            PropertyDecl(name="count", type="i32", readonly=True),
            PropertyDecl(name="count", type="i32", readonly=True),
        ],
        signals=[SignalDecl(name="moved", params=[
            ParamDecl(type="f64", name="x"),
            ParamDecl(type="f64", name="x"),
        ])],
    )

    violations = validate(build_object(decl))

    assert _kinds(violations) == [ViolationKind.DUPLICATE_NAME, ViolationKind.DUPLICATE_NAME]
    assert violations[0].subject == "property count"
    assert violations[1].subject == "signal moved"


def test_accessor_collides_with_invokable(my_object_decl):
    my_object_decl.invokables.append(InvokableDecl(name="getCount", return_type="i32"))

    violations = validate(build_object(my_object_decl))

    assert _kinds(violations) == [ViolationKind.ACCESSOR_COLLISION]
    assert violations[0].subject == "invokable getCount"


def test_signal_collides_with_invokable():
    decl = ObjectDecl(
        name="Thing",
        signals=[SignalDecl(name="ping")],
        invokables=[InvokableDecl(name="ping")],
    )

    assert _kinds(validate(build_object(decl))) == [ViolationKind.ACCESSOR_COLLISION]


def test_check_raises_with_every_violation(my_object_decl):
    my_object_decl.signals = []
    my_object_decl.invokables.append(InvokableDecl(name="reset", is_static=True, is_mutating=True))

    with pytest.raises(MalformedDefinition) as exc_info:
        check(build_object(my_object_decl))

    assert len(exc_info.value.violations) == 2


def test_check_returns_valid_object(my_object_decl):
    obj = build_object(my_object_decl)

    assert check(obj) is obj


def test_owned_handle_property_is_rejected():
    decl = ObjectDecl(
        name="Canvas",
        properties=[PropertyDecl(name="shape", type="UniquePtr<Shape>", readonly=True)],
    )

    violations = validate(build_object(decl), known_objects=["Shape"])

    assert _kinds(violations) == [ViolationKind.OWNED_VALUE_IN_PROPERTY]
    assert violations[0].subject == "property shape"


def test_color_property_is_valid():
    decl = ObjectDecl(
        name="Swatch",
        properties=[PropertyDecl(name="color", type="QColor")],
        signals=[SignalDecl(name="colorChanged")],
    )

    assert validate(build_object(decl)) == []


def test_mutating_invokable_parameter_cannot_shadow_the_object():
    decl = ObjectDecl(
        name="Thing",
        invokables=[InvokableDecl(name="poke", params=[ParamDecl(type="i32", name="cpp")],
                                  is_mutating=True)],
    )

    violations = validate(build_object(decl))

    assert _kinds(violations) == [ViolationKind.RESERVED_NAME]
    assert violations[0].subject == "invokable poke"
    assert "'cpp'" in violations[0].message


def test_const_invokable_may_use_cpp_as_parameter_name():
    decl = ObjectDecl(
        name="Thing",
        invokables=[InvokableDecl(name="poke", params=[ParamDecl(type="i32", name="cpp")])],
    )

    assert validate(build_object(decl)) == []


def test_returning_mutating_invokable_reserves_result():
    decl = ObjectDecl(
        name="Thing",
        invokables=[InvokableDecl(name="take", return_type="i32", is_mutating=True,
                                  params=[ParamDecl(type="i32", name="result")])],
    )

    assert _kinds(validate(build_object(decl))) == [ViolationKind.RESERVED_NAME]


def test_constructor_parameter_cannot_be_named_parent():
    decl = ObjectDecl(
        name="Thing",
        constructors=[ConstructorDecl(base_params=[ParamDecl(type="QString", name="parent")])],
    )

    violations = validate(build_object(decl))

    assert _kinds(violations) == [ViolationKind.RESERVED_NAME]
    assert violations[0].subject == "constructor"


def test_keyword_parameter_name_is_rejected():
    decl = ObjectDecl(
        name="Thing",
        invokables=[InvokableDecl(name="go", params=[ParamDecl(type="i32", name="type")])],
    )

    violations = validate(build_object(decl))

    assert _kinds(violations) == [ViolationKind.RESERVED_NAME]
    assert "'type'" in violations[0].message


@pytest.mark.parametrize("name", ["match", "delete", "namespace", "Self", "signals"])
def test_keyword_member_names_are_rejected(name):
    decl = ObjectDecl(name="Thing", invokables=[InvokableDecl(name=name)])

    assert _kinds(validate(build_object(decl))) == [ViolationKind.RESERVED_NAME]


def test_snake_case_invokable_names_collide():
    decl = ObjectDecl(
        name="Thing",
        invokables=[InvokableDecl(name="fooBar"), InvokableDecl(name="foo_bar")],
    )

    violations = validate(build_object(decl))

    assert _kinds(violations) == [ViolationKind.ACCESSOR_COLLISION]
    assert violations[0].subject == "invokable foo_bar"
    assert "safe-side name 'foo_bar'" in violations[0].message


def test_property_and_invokable_share_a_trait_method():
    decl = ObjectDecl(
        name="Thing",
        properties=[PropertyDecl(name="count", type="i32", readonly=True)],
        invokables=[InvokableDecl(name="count")],
    )

    violations = validate(build_object(decl))

    assert _kinds(violations) == [ViolationKind.ACCESSOR_COLLISION]
    assert "property count" in violations[0].message


def test_accessors_of_two_properties_collide():
    decl = ObjectDecl(
        name="Thing",
        properties=[
            PropertyDecl(name="width", type="f64", readonly=True, read="size"),
            PropertyDecl(name="height", type="f64", readonly=True, read="size"),
        ],
    )

    violations = validate(build_object(decl))

    assert _kinds(violations) == [ViolationKind.ACCESSOR_COLLISION]
    assert violations[0].subject == "property height"


def test_snake_case_parameter_names_collide():
    decl = ObjectDecl(
        name="Thing",
        signals=[SignalDecl(name="moved", params=[
            ParamDecl(type="f64", name="deltaX"),
            ParamDecl(type="f64", name="delta_x"),
        ])],
    )

    violations = validate(build_object(decl))

    assert _kinds(violations) == [ViolationKind.DUPLICATE_NAME]
    assert "'delta_x'" in violations[0].message


def test_constructor_argument_groups_are_checked():
    decl = ObjectDecl(
        name="Thing",
        constructors=[ConstructorDecl(
            base_params=[ParamDecl(type="str", name="title")],
            initialize_params=[ParamDecl(type="str", name="label")],
        )],
    )

    violations = validate(build_object(decl))

    assert _kinds(violations) == [ViolationKind.UNSUPPORTED_DIRECTION]
    assert "'label'" in violations[0].message
