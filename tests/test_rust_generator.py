"""Tests for bridgegen.rust_generator."""

from bridgegen.ir_builder import build_object
from bridgegen.layout import plan_layout
from bridgegen.rust_generator import RustGenerator
from bridgegen.syntax import (
    ConstructorDecl, InvokableDecl, ObjectDecl, ParamDecl, PropertyDecl, SignalDecl,
)


def _generate(decl, known=()):
    obj = build_object(decl)
    return RustGenerator(obj, plan_layout(obj, known), known_objects=known).generate()


def test_scenario_bridge(my_object_decl):
    shim = _generate(my_object_decl)

    assert '#[cxx::bridge(namespace = "cxx_qt::my_object")]' in shim
    assert 'include!("cxx-qt-gen/include/my_object.h");' in shim
    assert (
        '        #[cxx_name = "getCount"]\n'
        "        fn get_count_wrapper(self: &RustObj) -> i32;\n"
        '        #[cxx_name = "setCount"]\n'
        "        fn set_count_wrapper(self: &mut RustObj, value: i32);\n"
    ) in shim
    assert (
        '        #[cxx_name = "increment"]\n'
        "        fn increment_wrapper(self: &mut RustObj, cpp: Pin<&mut MyObject>);\n"
    ) in shim
    assert (
        '        #[rust_name = "update_count_raw"]\n'
        "        fn updateCount(self: Pin<&mut MyObject>, value: i32);\n"
    ) in shim
    assert (
        '        #[rust_name = "emit_count_changed_raw"]\n'
        "        fn emitCountChanged(self: Pin<&mut MyObject>);\n"
    ) in shim


def test_scenario_trait_and_wrappers(my_object_decl):
    shim = _generate(my_object_decl)

    assert (
        "pub trait MyObjectImpl: Default {\n"
        "    fn count(&self) -> i32;\n"
        "    fn set_count(&mut self, value: i32);\n"
        "    fn increment(&mut self, cpp: Pin<&mut CppObj>);\n"
        "}\n"
    ) in shim
    assert (
        "    fn set_count_wrapper(&mut self, value: i32) {\n"
        "        MyObjectImpl::set_count(self, i32_to_safe(value));\n"
        "    }\n"
    ) in shim
    assert (
        "fn create_rs() -> Box<RustObj> {\n"
        "    Box::new(RustObj::default())\n"
        "}\n"
    ) in shim
    assert (
        "    pub fn update_count(self: Pin<&mut Self>, value: i32) {\n"
        "        self.update_count_raw(i32_to_native(value));\n"
        "    }\n"
    ) in shim
    assert "pub use self::ffi::MyObject as CppObj;" in shim


def test_module_preamble(my_object_decl):
    shim = _generate(my_object_decl)

    assert shim.startswith(
        "// AUTO-GENERATED - DO NOT EDIT\n"
        "use std::pin::Pin;\n"
        "\n"
        "use super::RustObj;\n"
    )


def test_adapters_only_for_used_directions():
    decl = ObjectDecl(name="Label", properties=[PropertyDecl(name="text", type="QString", readonly=True)])

    shim = _generate(decl)

    assert "fn qstring_to_native(value: String) -> String {\n    value\n}\n" in shim
    assert "qstring_to_safe" not in shim
    assert "use cxx_qt_lib::QString;" in shim
    assert "        type QString = cxx_qt_lib::QString;" in shim
    assert "use std::pin::Pin;" not in shim


def test_adapter_order_is_first_use(counter_decl):
    shim = _generate(counter_decl)

    order = [line.split("(")[0][3:] for line in shim.splitlines()
             if line.startswith("fn ") and ("_to_safe(" in line or "_to_native(" in line)]

    assert order == [
        "i32_to_native",
        "i32_to_safe",
        "qpointf_to_native",
        "qpointf_to_safe",
        "qstring_to_native",
        "qstring_to_safe",
        "str_to_native",
    ]
    assert len(order) == len(set(order))


def test_counter_sample(counter_decl):
    shim = _generate(counter_decl)

    assert "pub trait CounterImpl: Sized {" in shim
    assert "    fn new(start: i32) -> Self;" in shim
    assert "    fn initialise(cpp: Pin<&mut CppObj>);" in shim
    assert "    fn describe(&self, prefix: String) -> String;" in shim
    assert "    fn version() -> &'static str;" in shim
    assert (
        '        #[cxx_name = "versionRs"]\n'
        "        fn version_wrapper() -> &'static str;\n"
    ) in shim
    assert (
        "fn version_wrapper() -> &'static str {\n"
        "    str_to_native(<RustObj as CounterImpl>::version())\n"
        "}\n"
    ) in shim
    assert (
        "fn create_rs(start: i32) -> Box<RustObj> {\n"
        "    Box::new(<RustObj as CounterImpl>::new(i32_to_safe(start)))\n"
        "}\n"
    ) in shim
    assert (
        '        #[cxx_name = "initialiseCpp"]\n'
        "        fn initialise_cpp(cpp: Pin<&mut Counter>);\n"
    ) in shim
    assert "fn qpointf_to_safe(value: &QPointF) -> QPointF {\n    *value\n}\n" in shim
    assert (
        "    pub fn emit_overflowed(self: Pin<&mut Self>, message: String) {\n"
        "        self.emit_overflowed_raw(qstring_to_native(message));\n"
        "    }\n"
    ) in shim
    assert "use cxx_qt_lib::{QPointF, QString};" in shim


def test_non_mirrored_property_update_takes_no_value():
    decl = ObjectDecl(
        name="Label",
        properties=[PropertyDecl(name="text", type="QString", readonly=True, notify="textChanged")],
        signals=[SignalDecl(name="textChanged")],
    )

    shim = _generate(decl)

    assert "        fn updateText(self: Pin<&mut Label>);\n" in shim
    assert "    pub fn update_text(self: Pin<&mut Self>) {\n        self.update_text_raw();\n    }\n" in shim


def test_owned_handles_and_variant_imports():
    decl = ObjectDecl(
        name="Canvas",
        constructors=[ConstructorDecl(params=[ParamDecl(type="QVariant", name="data")])],
        invokables=[InvokableDecl(name="adopt", params=[ParamDecl(type="UniquePtr<Shape>", name="shape")],
                                  is_mutating=True)],
    )

    shim = _generate(decl, known=["Shape"])

    assert "use cxx::UniquePtr;" in shim
    assert "use cxx_qt_lib::{QVariant, Variant};" in shim
    assert (
        '        #[namespace = "cxx_qt::shape"]\n'
        "        type Shape = crate::shape::CppObj;\n"
    ) in shim
    assert "use self::ffi::Shape;" in shim
    assert "fn owned_shape_to_safe(value: UniquePtr<Shape>) -> UniquePtr<Shape> {\n    value\n}\n" in shim
    assert "fn qvariant_to_safe(value: &QVariant) -> Variant {\n    value.to_rust()\n}\n" in shim
    assert "    fn adopt(&mut self, cpp: Pin<&mut CppObj>, shape: UniquePtr<Shape>);" in shim


def test_snake_case_parameter_names():
    decl = ObjectDecl(
        name="Thing",
        invokables=[InvokableDecl(name="moveBy", params=[ParamDecl(type="f64", name="deltaX")],
                                  is_mutating=True)],
    )

    shim = _generate(decl)

    assert "fn move_by_wrapper(self: &mut RustObj, cpp: Pin<&mut Thing>, delta_x: f64);" in shim
    assert "ThingImpl::move_by(self, cpp, f64_to_safe(delta_x));" in shim


def test_constructor_arguments_are_routed():
    decl = ObjectDecl(
        name="Window",
        constructors=[ConstructorDecl(
            params=[ParamDecl(type="i32", name="width")],
            base_params=[ParamDecl(type="QString", name="title")],
            initialize_params=[ParamDecl(type="bool", name="visible")],
        )],
    )

    shim = _generate(decl)

    assert "    fn new(width: i32) -> Self;" in shim
    assert "    fn initialise(cpp: Pin<&mut CppObj>, visible: bool);" in shim
    assert "        fn newCppObject(width: i32, title: &QString, visible: bool) -> UniquePtr<Window>;" in shim
    assert "        fn create_rs(width: i32) -> Box<RustObj>;" in shim
    assert "        fn initialise_cpp(cpp: Pin<&mut Window>, visible: bool);" in shim
    assert (
        "fn initialise_cpp(cpp: Pin<&mut CppObj>, visible: bool) {\n"
        "    <RustObj as WindowImpl>::initialise(cpp, bool_to_safe(visible));\n"
        "}\n"
    ) in shim


def test_color_bridge():
    decl = ObjectDecl(
        name="Swatch",
        properties=[PropertyDecl(name="color", type="QColor")],
        signals=[SignalDecl(name="colorChanged")],
    )

    shim = _generate(decl)

    assert "use cxx_qt_lib::{Color, QColor};" in shim
    assert "        type QColor = cxx_qt_lib::QColor;" in shim
    assert "    fn color(&self) -> Color;" in shim
    assert "    fn set_color(&mut self, value: Color);" in shim
    assert "fn qcolor_to_safe(value: &QColor) -> Color {\n    value.to_rust()\n}\n" in shim
    assert "fn qcolor_to_native(value: Color) -> QColor {\n    QColor::from(&value)\n}\n" in shim
