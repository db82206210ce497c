"""Cross-checks the native and safe artifacts emitted for one object"""

import re
from dataclasses import dataclass
from typing import Iterable, Optional

from .errors import SignatureMismatch
from .naming import emitter_name, static_entry_name, update_name
from .type_registry import TypeBridge, TypeRegistry
from .types import BridgedObject

_MEMBER = re.compile(r'^  (Q_INVOKABLE )?(static )?(.+?) (\w+)\((.*)\)( const)?;$')
_PROPERTY = re.compile(r'^  Q_PROPERTY\(.+? (\w+) READ ')
_SECTION = re.compile(r'^((?:public|protected|private)(?: Q_SLOTS)?|Q_SIGNALS):$')
_SHIM_DECL = re.compile(
    r'#\[(cxx_name|rust_name) = "(\w+)"\]\s*\n\s*fn (\w+)\(([^)]*)\)(?: -> ([^;]+))?;'
)


@dataclass(frozen=True)
class NativeMember:
    """Member function declared in the generated class"""
    name: str
    return_type: str
    param_types: tuple[str, ...]
    is_static: bool
    is_const: bool
    is_invokable: bool
    section: str = ""


@dataclass(frozen=True)
class ShimFunction:
    """Function declared in the cxx bridge, keyed by its native name"""
    native_name: str
    rust_name: str
    params: tuple[tuple[str, str], ...]
    return_type: Optional[str]

    @property
    def param_types(self) -> tuple[str, ...]:
        return tuple(t for _, t in self.params)


def parse_header(header: str) -> tuple[list[str], dict[str, NativeMember]]:
    """Get property names and member declarations from a generated header"""
    properties = []
    members: dict[str, NativeMember] = {}
    section = ""
    for line in header.splitlines():
        if m := _SECTION.match(line):
            section = m.group(1)
            continue
        if m := _PROPERTY.match(line):
            properties.append(m.group(1))
            continue
        if line.startswith(("  explicit ", "  ~")):
            continue
        m = _MEMBER.match(line)
        if not m:
            continue
        invokable, static, ret, name, params, const = m.groups()
        members[name] = NativeMember(
            name=name,
            return_type=ret,
            param_types=tuple(p.rsplit(" ", 1)[0] for p in _split(params)),
            is_static=bool(static),
            is_const=bool(const),
            is_invokable=bool(invokable),
            section=section,
        )
    return properties, members


def parse_shim(shim: str) -> dict[str, ShimFunction]:
    """Get the bridge functions of a generated shim keyed by native name"""
    functions = {}
    for attr, attr_name, fn_name, params, ret in _SHIM_DECL.findall(shim):
        if attr == "cxx_name":
            native, rust = attr_name, fn_name
        else:
            native, rust = fn_name, attr_name
        pairs = []
        for p in _split(params):
            name, _, type_name = p.partition(": ")
            pairs.append((name, type_name))
        functions[native] = ShimFunction(
            native_name=native,
            rust_name=rust,
            params=tuple(pairs),
            return_type=ret.strip() or None,
        )
    return functions


def _split(params: str) -> list[str]:
    return [p.strip() for p in params.split(", ") if p.strip()]


class ConsistencyChecker:
    """Compares every boundary crossing declared on both sides"""

    def __init__(self, obj: BridgedObject, header: str, source: str, shim: str,
                 known_objects: Iterable[str] = ()):
        self.obj = obj
        self.source = source
        self.known_objects = set(known_objects) | {obj.name}
        self.property_order, self.members = parse_header(header)
        self.functions = parse_shim(shim)
        self.mismatches: list[str] = []

    def run(self) -> list[str]:
        self.mismatches = []
        self._check_order()
        for prop in self.obj.properties:
            b = self._bridge(prop.type)
            self._expect_native(prop.read, b.native_read_type, (), const=True)
            self._expect_safe(prop.read, (("self", "&RustObj"),), b.safe_return)
            if prop.is_writable:
                self._expect_native(prop.write, "void", (b.native_param,))
                self._expect_safe(prop.write, (("self", "&mut RustObj"), ("value", b.safe_param)), None)
            if self._has_update(prop, b):
                native_params = (b.native_receive,) if b.is_mirrored else ()
                safe_params = (("self", self._pinned()),)
                if b.is_mirrored:
                    safe_params += (("value", b.safe_return),)
                self._expect_native(update_name(prop.name), "void", native_params)
                self._expect_safe(update_name(prop.name), safe_params, None)

        for inv in self.obj.invokables:
            native_ret = self._bridge(inv.return_type).native_type if inv.returns_value else "void"
            safe_ret = self._bridge(inv.return_type).safe_return if inv.returns_value else None
            native_params = tuple(self._bridge(p.type).native_param for p in inv.params)
            self._expect_native(inv.name, native_ret, native_params,
                                const=not inv.is_static and not inv.is_mutating,
                                static=inv.is_static, invokable=True)

            receivers: tuple[tuple[str, str], ...] = ()
            if inv.is_mutating:
                receivers = (("self", "&mut RustObj"), ("cpp", self._pinned()))
            elif not inv.is_static:
                receivers = (("self", "&RustObj"),)
            safe_params = receivers + tuple(
                (p.name, self._bridge(p.type).safe_param) for p in inv.params
            )
            cxx_name = static_entry_name(inv.name) if inv.is_static else inv.name
            self._expect_safe(cxx_name, safe_params, safe_ret, by_type=True)

        for sig in self.obj.signals:
            bridges = [self._bridge(p.type) for p in sig.params]
            self._expect_native(sig.name, "void", tuple(b.native_param for b in bridges), defined=False)
            self._expect_native(emitter_name(sig.name), "void", tuple(b.native_receive for b in bridges))
            safe_params = (("self", self._pinned()),) + tuple(
                (p.name, b.safe_return) for p, b in zip(sig.params, bridges)
            )
            self._expect_safe(emitter_name(sig.name), safe_params, None, by_type=True)

        ctor = self.obj.constructor
        self._expect_safe("createRs", self._abi(ctor.params), "Box<RustObj>", by_type=True)
        self._expect_safe("newCppObject", self._abi(ctor.all_params),
                          f"UniquePtr<{self.obj.name}>", by_type=True)
        if self.obj.requires_initialization:
            self._expect_safe("initialiseCpp", (("cpp", self._pinned()),) + self._abi(ctor.initialize_params),
                              None, by_type=True)
        return self.mismatches

    def _check_order(self):
        expected = [p.name for p in self.obj.properties]
        if self.property_order != expected:
            self.mismatches.append(
                f"property order {self.property_order} does not match {expected}"
            )
        declared = [m.name for m in self.members.values() if m.is_invokable]
        expected = [inv.name for inv in self.obj.invokables]
        if declared != expected:
            self.mismatches.append(f"invokable order {declared} does not match {expected}")

        declared = [m.name for m in self.members.values() if m.section == "Q_SIGNALS"]
        expected = [sig.name for sig in self.obj.signals]
        if declared != expected:
            self.mismatches.append(f"signal order {declared} does not match {expected}")
        emitters = [emitter_name(sig.name) for sig in self.obj.signals]
        for side, names in (("header", list(self.members)), ("shim", list(self.functions))):
            declared = [name for name in names if name in emitters]
            if declared != emitters:
                self.mismatches.append(f"{side} emitter order {declared} does not match {emitters}")

    def _expect_native(self, name: str, ret: str, params: tuple[str, ...], const: bool = False,
                       static: bool = False, invokable: bool = False, defined: bool = True):
        member = self.members.get(name)
        if member is None:
            self.mismatches.append(f"header does not declare {name}")
            return
        if member.return_type != ret:
            self.mismatches.append(f"{name}: header returns {member.return_type}, expected {ret}")
        if member.param_types != params:
            self.mismatches.append(
                f"{name}: header parameters {list(member.param_types)}, expected {list(params)}"
            )
        if member.is_const != const or member.is_static != static or member.is_invokable != invokable:
            self.mismatches.append(f"{name}: header qualifiers differ")
        if defined and f"{self.obj.name}::{name}(" not in self.source:
            self.mismatches.append(f"source does not define {name}")

    def _expect_safe(self, native_name: str, params: tuple[tuple[str, str], ...],
                     ret: Optional[str], by_type: bool = False):
        """Match a bridge function; ``by_type`` ignores parameter names"""
        fn = self.functions.get(native_name)
        if fn is None:
            self.mismatches.append(f"shim does not declare {native_name}")
            return
        if fn.return_type != ret:
            self.mismatches.append(f"{native_name}: shim returns {fn.return_type}, expected {ret}")
        if by_type:
            matches = fn.param_types == tuple(t for _, t in params)
        else:
            matches = fn.params == params
        if not matches:
            self.mismatches.append(
                f"{native_name}: shim parameters {list(fn.params)}, expected {list(params)}"
            )

    def _abi(self, params) -> tuple[tuple[str, str], ...]:
        return tuple((p.name, self._bridge(p.type).safe_param) for p in params)

    def _pinned(self) -> str:
        return f"Pin<&mut {self.obj.name}>"

    def _bridge(self, type_name: str) -> TypeBridge:
        return TypeRegistry.lookup(type_name, self.known_objects)

    @staticmethod
    def _has_update(prop, bridge: TypeBridge) -> bool:
        return bridge.is_mirrored or prop.notify is not None


def check_consistency(obj: BridgedObject, header: str, source: str, shim: str,
                      known_objects: Iterable[str] = ()):
    """Raise SignatureMismatch if the artifacts disagree on any crossing"""
    mismatches = ConsistencyChecker(obj, header, source, shim, known_objects).run()
    if mismatches:
        raise SignatureMismatch(obj.name, mismatches)
