"""Rust Generator - generates the safe-side shim for a bridged object"""

from typing import Iterable

from .config import GeneratorOptions
from .layout import StoragePlan
from .naming import as_snake_case, emitter_name, static_entry_name, update_name
from .type_registry import MarshalingKind, TypeBridge, TypeRegistry
from .types import BridgedObject, Invokable, Param, Property, Signal
from .validation import TO_NATIVE, TO_SAFE


class RustGenerator:
    """Generates the cxx bridge, implementation trait and adapters"""

    def __init__(self, obj: BridgedObject, plan: StoragePlan,
                 options: GeneratorOptions = GeneratorOptions(),
                 known_objects: Iterable[str] = ()):
        self.obj = obj
        self.plan = plan
        self.options = options
        self.known_objects = set(known_objects) | {obj.name}
        self.stem = as_snake_case(obj.name)
        self.namespace = options.namespace_for(self.stem)
        self.trait = f"{obj.name}Impl"
        # (slug, direction) -> bridge, in first-use order
        self._adapters: dict[tuple[str, str], TypeBridge] = {}

    def generate(self) -> str:
        """Generate the complete shim module"""
        self._adapters = {}

        # Bodies first so adapter usage is known before the imports are written
        body = []
        body.extend(self._generate_trait())
        body.extend(self._generate_wrappers())
        body.extend(self._generate_free_functions())
        body.extend(self._generate_entry_points())
        adapters = self._generate_adapters()

        lines = ["// AUTO-GENERATED - DO NOT EDIT"]
        lines.extend(self._generate_imports())
        lines.extend(self._generate_bridge())
        lines.extend(self._generate_reexports())
        lines.extend(body)
        lines.extend(adapters)
        while lines and lines[-1] == "":
            lines.pop()
        return "\n".join(lines) + "\n"

    # Module header

    def _generate_imports(self) -> list[str]:
        lines = []
        if self._uses_pin():
            lines.extend(["use std::pin::Pin;", ""])

        groups: dict[str, set[str]] = {}
        for b in self._used_bridges():
            paths = [f"cxx_qt_lib::{t}" for t in b.lib_types] + list(b.safe_imports)
            for path in paths:
                crate, name = path.rsplit("::", 1)
                groups.setdefault(crate, set()).add(name)
        for crate in sorted(groups):
            names = sorted(groups[crate])
            if len(names) == 1:
                lines.append(f"use {crate}::{names[0]};")
            else:
                lines.append(f"use {crate}::{{{', '.join(names)}}};")
        if groups:
            lines.append("")

        lines.extend(["use super::RustObj;", ""])
        return lines

    def _generate_bridge(self) -> list[str]:
        obj = self.obj
        lines = [
            f'#[cxx::bridge(namespace = "{self.namespace}")]',
            "mod ffi {",
            '    unsafe extern "C++" {',
            f'        include!("{self.options.include_prefix}/include/{self.stem}.h");',
            "",
            f"        type {obj.name};",
        ]
        lib_types = sorted({t for b in self._used_bridges() for t in b.lib_types})
        for t in lib_types:
            lines.append(f"        type {t} = cxx_qt_lib::{t};")
        for target in self._owned_targets():
            if target == obj.name:
                continue
            other_stem = as_snake_case(target)
            lines.append(f'        #[namespace = "{self.options.namespace_for(other_stem)}"]')
            lines.append(f"        type {target} = crate::{other_stem}::CppObj;")

        receiver = f"self: Pin<&mut {obj.name}>"
        for prop in obj.properties:
            if not self._has_update(prop):
                continue
            params = [receiver]
            slot = self.plan.mirror_for(prop.name)
            if slot is not None:
                params.append(f"value: {slot.bridge.safe_return}")
            native = update_name(prop.name)
            lines.append(f'        #[rust_name = "{as_snake_case(native)}_raw"]')
            lines.append(f"        fn {native}({', '.join(params)});")
        for sig in obj.signals:
            params = [receiver] + [
                f"{as_snake_case(p.name)}: {self._bridge(p.type).safe_return}" for p in sig.params
            ]
            native = emitter_name(sig.name)
            lines.append(f'        #[rust_name = "{as_snake_case(native)}_raw"]')
            lines.append(f"        fn {native}({', '.join(params)});")

        lines.append("")
        lines.append('        #[rust_name = "new_cpp_object"]')
        lines.append(f"        fn newCppObject({self._abi_params(obj.constructor.all_params)}) "
                     f"-> UniquePtr<{obj.name}>;")
        lines.extend([
            "    }",
            "",
            '    extern "Rust" {',
            "        type RustObj;",
            "",
            '        #[cxx_name = "createRs"]',
            f"        fn create_rs({self._abi_params(obj.constructor.params)}) -> Box<RustObj>;",
        ])
        if obj.requires_initialization:
            lines.append('        #[cxx_name = "initialiseCpp"]')
            lines.append(f"        fn initialise_cpp({self._initialise_params(obj.name, abi=True)});")

        if obj.properties:
            lines.append("")
        for prop in obj.properties:
            b = self._bridge(prop.type)
            lines.append(f'        #[cxx_name = "{prop.read}"]')
            lines.append(f"        fn {self._wrapper(prop.read)}(self: &RustObj) -> {b.safe_return};")
            if prop.is_writable:
                lines.append(f'        #[cxx_name = "{prop.write}"]')
                lines.append(f"        fn {self._wrapper(prop.write)}(self: &mut RustObj, "
                             f"value: {b.safe_param});")

        if obj.invokables:
            lines.append("")
        for inv in obj.invokables:
            cxx_name = static_entry_name(inv.name) if inv.is_static else inv.name
            params = self._receiver(inv, abi=True)
            params += [f"{as_snake_case(p.name)}: {self._bridge(p.type).safe_param}" for p in inv.params]
            ret = f" -> {self._bridge(inv.return_type).safe_return}" if inv.returns_value else ""
            lines.append(f'        #[cxx_name = "{cxx_name}"]')
            lines.append(f"        fn {self._wrapper(inv.name)}({', '.join(params)}){ret};")

        lines.extend(["    }", "}", ""])
        return lines

    def _generate_reexports(self) -> list[str]:
        lines = [f"pub use self::ffi::{self.obj.name} as CppObj;", "pub use self::ffi::new_cpp_object;"]
        targets = self._owned_targets()
        if targets:
            names = ", ".join(targets)
            lines.append(f"use self::ffi::{{{names}}};" if len(targets) > 1 else f"use self::ffi::{names};")
        lines.append("")
        return lines

    # Safe-side contract

    def _generate_trait(self) -> list[str]:
        obj = self.obj
        bound = "Sized" if obj.constructor.params else "Default"
        lines = [
            f"/// Behaviour the safe-side implementation of {obj.name} provides",
            f"pub trait {self.trait}: {bound} {{",
        ]
        if obj.constructor.params:
            lines.append(f"    fn new({self._safe_params(obj.constructor.params)}) -> Self;")
        if obj.requires_initialization:
            lines.append(f"    fn initialise({self._initialise_params('CppObj')});")

        for prop in obj.properties:
            b = self._bridge(prop.type)
            name = as_snake_case(prop.name)
            lines.append(f"    fn {name}(&self) -> {b.safe_type};")
            if prop.is_writable:
                lines.append(f"    fn set_{name}(&mut self, value: {b.safe_type});")

        for inv in obj.invokables:
            params = self._receiver(inv)
            if inv.params:
                params.append(self._safe_params(inv.params))
            ret = f" -> {self._bridge(inv.return_type).safe_type}" if inv.returns_value else ""
            lines.append(f"    fn {as_snake_case(inv.name)}({', '.join(params)}){ret};")

        lines.extend(["}", ""])
        return lines

    def _generate_wrappers(self) -> list[str]:
        methods = []
        for prop in self.obj.properties:
            methods.extend(self._property_wrappers(prop))
        for inv in self.obj.invokables:
            if not inv.is_static:
                methods.extend(self._invokable_wrapper(inv))
        if not methods:
            return []
        if methods[-1] == "":
            methods.pop()
        return ["impl RustObj {"] + methods + ["}", ""]

    def _property_wrappers(self, prop: Property) -> list[str]:
        b = self._bridge(prop.type)
        name = as_snake_case(prop.name)
        value = self._convert(b, TO_NATIVE, f"{self.trait}::{name}(self)")
        lines = [
            f"    fn {self._wrapper(prop.read)}(&self) -> {b.safe_return} {{",
            f"        {value}",
            "    }",
            "",
        ]
        if prop.is_writable:
            arg = self._convert(b, TO_SAFE, "value")
            lines.extend([
                f"    fn {self._wrapper(prop.write)}(&mut self, value: {b.safe_param}) {{",
                f"        {self.trait}::set_{name}(self, {arg});",
                "    }",
                "",
            ])
        return lines

    def _invokable_wrapper(self, inv: Invokable) -> list[str]:
        params = self._receiver(inv)
        params += [f"{as_snake_case(p.name)}: {self._bridge(p.type).safe_param}" for p in inv.params]
        args = ["self"] + (["cpp"] if inv.is_mutating else [])
        args += [self._convert(self._bridge(p.type), TO_SAFE, as_snake_case(p.name)) for p in inv.params]
        call = f"{self.trait}::{as_snake_case(inv.name)}({', '.join(args)})"

        if inv.returns_value:
            b = self._bridge(inv.return_type)
            ret = f" -> {b.safe_return}"
            body = self._convert(b, TO_NATIVE, call)
        else:
            ret = ""
            body = f"{call};"
        return [
            f"    fn {self._wrapper(inv.name)}({', '.join(params)}){ret} {{",
            f"        {body}",
            "    }",
            "",
        ]

    def _generate_free_functions(self) -> list[str]:
        obj = self.obj
        ctor_params = obj.constructor.params
        if ctor_params:
            args = ", ".join(
                self._convert(self._bridge(p.type), TO_SAFE, as_snake_case(p.name)) for p in ctor_params
            )
            state = f"<RustObj as {self.trait}>::new({args})"
        else:
            state = "RustObj::default()"
        lines = [
            f"fn create_rs({self._abi_params(ctor_params)}) -> Box<RustObj> {{",
            f"    Box::new({state})",
            "}",
            "",
        ]
        if obj.requires_initialization:
            args = ["cpp"] + [
                self._convert(self._bridge(p.type), TO_SAFE, as_snake_case(p.name))
                for p in obj.constructor.initialize_params
            ]
            lines.extend([
                f"fn initialise_cpp({self._initialise_params('CppObj', abi=True)}) {{",
                f"    <RustObj as {self.trait}>::initialise({', '.join(args)});",
                "}",
                "",
            ])

        for inv in obj.invokables:
            if not inv.is_static:
                continue
            params = ", ".join(
                f"{as_snake_case(p.name)}: {self._bridge(p.type).safe_param}" for p in inv.params
            )
            args = ", ".join(
                self._convert(self._bridge(p.type), TO_SAFE, as_snake_case(p.name)) for p in inv.params
            )
            call = f"<RustObj as {self.trait}>::{as_snake_case(inv.name)}({args})"
            if inv.returns_value:
                b = self._bridge(inv.return_type)
                ret, body = f" -> {b.safe_return}", self._convert(b, TO_NATIVE, call)
            else:
                ret, body = "", f"{call};"
            lines.extend([
                f"fn {self._wrapper(inv.name)}({params}){ret} {{",
                f"    {body}",
                "}",
                "",
            ])
        return lines

    def _generate_entry_points(self) -> list[str]:
        """Methods the safe side calls to notify the native object"""
        methods = []
        for prop in self.obj.properties:
            if self._has_update(prop):
                methods.extend(self._update_entry(prop))
        for sig in self.obj.signals:
            methods.extend(self._emit_entry(sig))
        if not methods:
            return []
        if methods[-1] == "":
            methods.pop()
        return ["impl CppObj {"] + methods + ["}", ""]

    def _update_entry(self, prop: Property) -> list[str]:
        name = as_snake_case(update_name(prop.name))
        slot = self.plan.mirror_for(prop.name)
        if slot is not None:
            params = f"self: Pin<&mut Self>, value: {slot.bridge.safe_type}"
            args = self._convert(slot.bridge, TO_NATIVE, "value")
        else:
            params, args = "self: Pin<&mut Self>", ""
        return [
            f"    pub fn {name}({params}) {{",
            f"        self.{name}_raw({args});",
            "    }",
            "",
        ]

    def _emit_entry(self, sig: Signal) -> list[str]:
        name = as_snake_case(emitter_name(sig.name))
        params = ["self: Pin<&mut Self>"] + [
            f"{as_snake_case(p.name)}: {self._bridge(p.type).safe_type}" for p in sig.params
        ]
        args = ", ".join(
            self._convert(self._bridge(p.type), TO_NATIVE, as_snake_case(p.name)) for p in sig.params
        )
        return [
            f"    pub fn {name}({', '.join(params)}) {{",
            f"        self.{name}_raw({args});",
            "    }",
            "",
        ]

    def _generate_adapters(self) -> list[str]:
        lines = []
        for (slug, direction), b in self._adapters.items():
            if direction == TO_SAFE:
                lines.extend([
                    f"fn {slug}_to_safe(value: {b.safe_param}) -> {b.safe_type} {{",
                    f"    {b.to_safe.safe.format('value')}",
                    "}",
                    "",
                ])
            else:
                lines.extend([
                    f"fn {slug}_to_native(value: {b.safe_type}) -> {b.safe_return} {{",
                    f"    {b.to_native.safe.format('value')}",
                    "}",
                    "",
                ])
        return lines

    # Helpers

    def _bridge(self, type_name: str) -> TypeBridge:
        return TypeRegistry.lookup(type_name, self.known_objects)

    def _convert(self, bridge: TypeBridge, direction: str, expr: str) -> str:
        """Wrap ``expr`` in the adapter for ``direction`` and record its use"""
        self._adapters.setdefault((bridge.slug, direction), bridge)
        return f"{bridge.slug}_{direction}({expr})"

    def _receiver(self, inv: Invokable, abi: bool = False) -> list[str]:
        """Receiver parameters; ``abi`` selects the extern block spelling"""
        if inv.is_static:
            return []
        if abi:
            if inv.is_mutating:
                return ["self: &mut RustObj", f"cpp: Pin<&mut {self.obj.name}>"]
            return ["self: &RustObj"]
        if inv.is_mutating:
            return ["&mut self", "cpp: Pin<&mut CppObj>"]
        return ["&self"]

    def _initialise_params(self, cpp_type: str, abi: bool = False) -> str:
        params = self.obj.constructor.initialize_params
        rest = self._abi_params(params) if abi else self._safe_params(params)
        return f"cpp: Pin<&mut {cpp_type}>, {rest}" if rest else f"cpp: Pin<&mut {cpp_type}>"

    def _abi_params(self, params: tuple[Param, ...]) -> str:
        return ", ".join(f"{as_snake_case(p.name)}: {self._bridge(p.type).safe_param}" for p in params)

    def _safe_params(self, params: tuple[Param, ...]) -> str:
        return ", ".join(f"{as_snake_case(p.name)}: {self._bridge(p.type).safe_type}" for p in params)

    @staticmethod
    def _wrapper(native_name: str) -> str:
        return f"{as_snake_case(native_name)}_wrapper"

    def _has_update(self, prop: Property) -> bool:
        return self.plan.mirror_for(prop.name) is not None or prop.notify is not None

    def _uses_pin(self) -> bool:
        obj = self.obj
        return (
            obj.requires_initialization
            or any(inv.is_mutating and not inv.is_static for inv in obj.invokables)
            or any(self._has_update(p) for p in obj.properties)
            or bool(obj.signals)
        )

    def _used_bridges(self) -> list[TypeBridge]:
        return [self._bridge(t) for t in self.obj.used_types()]

    def _owned_targets(self) -> list[str]:
        targets = []
        for b in self._used_bridges():
            if b.kind is MarshalingKind.OWNED_OPAQUE:
                target = TypeRegistry.owned_target(b.identity)
                if target not in targets:
                    targets.append(target)
        return targets
