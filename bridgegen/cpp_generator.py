"""C++ Generator - generates the Qt class declaration and definition"""

from typing import Iterable

from .config import GeneratorOptions
from .layout import Slot, StoragePlan, HANDLE_SLOT, INIT_FLAG_SLOT
from .naming import as_snake_case, emitter_name, static_entry_name, update_name
from .type_registry import MarshalingKind, TypeBridge, TypeRegistry
from .types import BridgedObject, Invokable, Param, Property, Signal


class CppGenerator:
    """Generates the native C++ header and source for one bridged object"""

    def __init__(self, obj: BridgedObject, plan: StoragePlan,
                 options: GeneratorOptions = GeneratorOptions(),
                 known_objects: Iterable[str] = ()):
        self.obj = obj
        self.plan = plan
        self.options = options
        self.known_objects = set(known_objects) | {obj.name}
        self.stem = as_snake_case(obj.name)
        self.namespace = options.namespace_for(self.stem)

    def generate_header(self) -> str:
        lines = self._header_preamble()
        lines.extend(self._class_decl())
        lines.extend([
            f"std::unique_ptr<{self.obj.name}>",
            f"newCppObject({self._params_decl(self.obj.constructor.all_params)});",
            "",
            f"}} // namespace {self.namespace}",
        ])
        return "\n".join(lines) + "\n"

    def generate_source(self) -> str:
        lines = [
            "// AUTO-GENERATED - DO NOT EDIT",
            f'#include "{self.options.include_prefix}/include/{self.stem}.h"',
            f'#include "{self.options.include_prefix}/src/{self.stem}.rs.h"',
        ]
        for target in self._owned_targets():
            lines.append(f'#include "{self.options.include_prefix}/include/{as_snake_case(target)}.h"')
        if self.options.guard_initialization:
            lines.extend(["", "#include <QtCore/QDebug>"])
        lines.extend(["", f"namespace {self.namespace} {{", ""])

        lines.extend(self._constructor_impl())
        lines.append(f"{self.obj.name}::~{self.obj.name}() = default;")
        lines.append("")

        for prop in self.obj.properties:
            lines.extend(self._getter_impl(prop))
            if prop.is_writable:
                lines.extend(self._setter_impl(prop))
            if self._has_update(prop):
                lines.extend(self._update_impl(prop))

        for inv in self.obj.invokables:
            lines.extend(self._invokable_impl(inv))

        for sig in self.obj.signals:
            lines.extend(self._emitter_impl(sig))

        params = self.obj.constructor.all_params
        lines.extend([
            f"std::unique_ptr<{self.obj.name}>",
            f"newCppObject({self._params_decl(params)})",
            "{",
            f"  return std::make_unique<{self.obj.name}>({', '.join(self._forward(p) for p in params)});",
            "}",
            "",
            f"}} // namespace {self.namespace}",
        ])
        return "\n".join(lines) + "\n"

    # Header

    def _header_preamble(self) -> list[str]:
        lines = [
            "// AUTO-GENERATED - DO NOT EDIT",
            "#pragma once",
            "",
            f'#include "{self.options.base_header}"',
            "",
        ]
        includes = sorted({b.native_include for b in self._used_bridges() if b.native_include}
                          | {"<memory>"})
        lines.extend(f"#include {inc}" for inc in includes)
        lines.append("")

        others = self._owned_targets()
        for target in others:
            other_ns = self.options.namespace_for(as_snake_case(target))
            lines.extend([
                f"namespace {other_ns} {{",
                f"class {target};",
                f"}} // namespace {other_ns}",
                "",
            ])

        lines.extend([f"namespace {self.namespace} {{", "", "class RustObj;"])
        for target in others:
            lines.append(f"using {self.options.namespace_for(as_snake_case(target))}::{target};")
        lines.append("")
        return lines

    def _class_decl(self) -> list[str]:
        obj = self.obj
        lines = [
            f"class {obj.name} : public {self.options.base_class}",
            "{",
            "  Q_OBJECT",
        ]
        for prop in obj.properties:
            lines.append(f"  {self._property_macro(prop)}")

        ctor_params = self._params_decl(obj.constructor.all_params)
        ctor_params = f"{ctor_params}, QObject* parent = nullptr" if ctor_params else "QObject* parent = nullptr"
        lines.extend([
            "",
            "public:",
            f"  explicit {obj.name}({ctor_params});",
            f"  ~{obj.name}();",
        ])

        if obj.properties:
            lines.append("")
            for prop in obj.properties:
                b = self._bridge(prop.type)
                lines.append(f"  {b.native_read_type} {prop.read}() const;")

        if obj.invokables:
            lines.append("")
            for inv in obj.invokables:
                lines.append(f"  {self._invokable_decl(inv)};")

        updates = [p for p in obj.properties if self._has_update(p)]
        if updates or obj.signals:
            lines.append("")
            for prop in updates:
                lines.append(f"  void {update_name(prop.name)}({self._update_params(prop)});")
            for sig in obj.signals:
                lines.append(f"  void {emitter_name(sig.name)}({self._emitter_params(sig)});")

        writable = [p for p in obj.properties if p.is_writable]
        if writable:
            lines.extend(["", "public Q_SLOTS:"])
            for prop in writable:
                b = self._bridge(prop.type)
                lines.append(f"  void {prop.write}({b.native_param} value);")

        if obj.signals:
            lines.extend(["", "Q_SIGNALS:"])
            for sig in obj.signals:
                lines.append(f"  void {sig.name}({self._params_decl(sig.params)});")

        lines.extend(["", "private:"])
        lines.append(f"  {self.plan.handle.native_type} {HANDLE_SLOT};")
        lines.append(f"  {self.plan.init_flag.native_type} {INIT_FLAG_SLOT} = {self.plan.init_flag.default};")
        if self.plan.mirrors:
            lines.append("")
            for slot in self.plan.mirrors:
                lines.append(f"  {slot.native_type} {slot.name};")
        lines.extend(["};", ""])
        return lines

    def _property_macro(self, prop: Property) -> str:
        b = self._bridge(prop.type)
        parts = [f"Q_PROPERTY({b.native_type} {prop.name} READ {prop.read}"]
        if prop.write:
            parts.append(f"WRITE {prop.write}")
        if prop.notify:
            parts.append(f"NOTIFY {prop.notify}")
        return " ".join(parts) + ")"

    def _invokable_decl(self, inv: Invokable) -> str:
        ret = self._native_return(inv)
        static = "static " if inv.is_static else ""
        const = " const" if self._is_const(inv) else ""
        return f"Q_INVOKABLE {static}{ret} {inv.name}({self._params_decl(inv.params)}){const}"

    # Source

    def _constructor_impl(self) -> list[str]:
        obj = self.obj
        ctor = obj.constructor
        params = self._params_decl(ctor.all_params)
        params = f"{params}, QObject* parent" if params else "QObject* parent"
        base_args = [self._forward(p) for p in ctor.base_params] + ["parent"]
        factory_args = ", ".join(self._forward(p) for p in ctor.params)
        lines = [
            f"{obj.name}::{obj.name}({params})",
            f"  : {self.options.base_class}({', '.join(base_args)})",
            f"  , {HANDLE_SLOT}(createRs({factory_args}))",
        ]
        for slot in self.plan.mirrors:
            lines.append(f"  , {slot.name}({self._mirror_read(slot)})")
        lines.append("{")
        if obj.requires_initialization:
            init_args = ["*this"] + [self._forward(p) for p in ctor.initialize_params]
            lines.append(f"  initialiseCpp({', '.join(init_args)});")
        lines.extend([
            f"  {INIT_FLAG_SLOT} = true;",
            "}",
            "",
        ])
        return lines

    def _getter_impl(self, prop: Property) -> list[str]:
        b = self._bridge(prop.type)
        slot = self.plan.mirror_for(prop.name)
        if slot is not None:
            value = slot.name
        else:
            value = b.to_native.native.format(f"{HANDLE_SLOT}->{prop.read}()")
        return [
            b.native_read_type,
            f"{self.obj.name}::{prop.read}() const",
            "{",
            f"  return {value};",
            "}",
            "",
        ]

    def _setter_impl(self, prop: Property) -> list[str]:
        b = self._bridge(prop.type)
        lines = [
            "void",
            f"{self.obj.name}::{prop.write}({b.native_param} value)",
            "{",
        ]
        lines.extend(self._guard(prop.write, returns_value=False))
        lines.append(f"  {HANDLE_SLOT}->{prop.write}({b.to_safe.native.format('value')});")
        slot = self.plan.mirror_for(prop.name)
        if slot is not None:
            lines.append(f"  {slot.name} = value;")
        # Every write notifies; there is no dirty check
        lines.extend([
            f"  Q_EMIT {prop.notify}();",
            "}",
            "",
        ])
        return lines

    def _update_impl(self, prop: Property) -> list[str]:
        lines = [
            "void",
            f"{self.obj.name}::{update_name(prop.name)}({self._update_params(prop)})",
            "{",
        ]
        slot = self.plan.mirror_for(prop.name)
        if slot is not None:
            lines.append(f"  {slot.name} = {slot.bridge.to_native.native.format('value')};")
        if prop.notify:
            lines.append(f"  Q_EMIT {prop.notify}();")
        lines.extend(["}", ""])
        return lines

    def _invokable_impl(self, inv: Invokable) -> list[str]:
        const = " const" if self._is_const(inv) else ""
        lines = [
            self._native_return(inv),
            f"{self.obj.name}::{inv.name}({self._params_decl(inv.params)}){const}",
            "{",
        ]
        if not inv.is_static:
            lines.extend(self._guard(inv.name, returns_value=inv.returns_value))

        args = [self._bridge(p.type).to_safe.native.format(p.name) for p in inv.params]
        if inv.is_static:
            call = f"{static_entry_name(inv.name)}({', '.join(args)})"
        else:
            if inv.is_mutating:
                args.insert(0, "*this")
            call = f"{HANDLE_SLOT}->{inv.name}({', '.join(args)})"

        # A mutation may change any state the mirrors copy
        resync = []
        if inv.is_mutating:
            resync = [f"  {slot.name} = {self._mirror_read(slot)};" for slot in self.plan.mirrors]

        if inv.returns_value:
            b = self._bridge(inv.return_type)
            value = b.to_native.native.format(call)
            if resync:
                lines.append(f"  {b.native_type} result = {value};")
                lines.extend(resync)
                lines.append("  return result;")
            else:
                lines.append(f"  return {value};")
        else:
            lines.append(f"  {call};")
            lines.extend(resync)
        lines.extend(["}", ""])
        return lines

    def _emitter_impl(self, sig: Signal) -> list[str]:
        args = ", ".join(
            self._bridge(p.type).to_native.native.format(p.name) for p in sig.params
        )
        return [
            "void",
            f"{self.obj.name}::{emitter_name(sig.name)}({self._emitter_params(sig)})",
            "{",
            f"  Q_EMIT {sig.name}({args});",
            "}",
            "",
        ]

    def _guard(self, member: str, returns_value: bool) -> list[str]:
        if not self.options.guard_initialization:
            return []
        return [
            f"  if (!{INIT_FLAG_SLOT}) {{",
            f'    qWarning("{self.obj.name}::{member} called before initialisation");',
            "    return {};" if returns_value else "    return;",
            "  }",
        ]

    # Helpers

    def _bridge(self, type_name: str) -> TypeBridge:
        return TypeRegistry.lookup(type_name, self.known_objects)

    def _forward(self, param: Param) -> str:
        """Expression passing ``param`` on; owned handles are moved"""
        conversion = self._bridge(param.type).to_safe
        return conversion.native.format(param.name) if conversion is not None else param.name

    @staticmethod
    def _mirror_read(slot: Slot) -> str:
        return slot.bridge.to_native.native.format(f"{HANDLE_SLOT}->{slot.property.read}()")

    def _params_decl(self, params: tuple[Param, ...]) -> str:
        return ", ".join(f"{self._bridge(p.type).native_param} {p.name}" for p in params)

    def _update_params(self, prop: Property) -> str:
        slot = self.plan.mirror_for(prop.name)
        return f"{slot.bridge.native_receive} value" if slot is not None else ""

    def _emitter_params(self, sig: Signal) -> str:
        return ", ".join(f"{self._bridge(p.type).native_receive} {p.name}" for p in sig.params)

    def _native_return(self, inv: Invokable) -> str:
        return self._bridge(inv.return_type).native_type if inv.returns_value else "void"

    def _has_update(self, prop: Property) -> bool:
        return self.plan.mirror_for(prop.name) is not None or prop.notify is not None

    @staticmethod
    def _is_const(inv: Invokable) -> bool:
        return not inv.is_static and not inv.is_mutating

    def _used_bridges(self) -> list[TypeBridge]:
        return [self._bridge(t) for t in self.obj.used_types()]

    def _owned_targets(self) -> list[str]:
        targets = []
        for b in self._used_bridges():
            if b.kind is MarshalingKind.OWNED_OPAQUE:
                target = TypeRegistry.owned_target(b.identity)
                if target != self.obj.name and target not in targets:
                    targets.append(target)
        return targets

