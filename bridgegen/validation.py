"""Validation of bridged objects against the type registry"""

from collections import Counter
from typing import Iterable, Optional

from .errors import MalformedDefinition, UnsupportedType, Violation, ViolationKind
from .naming import as_snake_case, emitter_name, is_reserved, update_name
from .type_registry import MarshalingKind, TypeBridge, TypeRegistry
from .types import BridgedObject, Param

# Directions as named on TypeBridge
TO_SAFE = "to_safe"
TO_NATIVE = "to_native"

_DIRECTION_TEXT = {
    TO_SAFE: "native to safe",
    TO_NATIVE: "safe to native",
}

# Parameter names the generated code already uses in the same scope
_RECEIVER_PARAM = "cpp"
_RESULT_LOCAL = "result"
_PARENT_PARAM = "parent"


class Validator:
    """Collects every violation of one object; never stops at the first"""

    def __init__(self, obj: BridgedObject, known_objects: Iterable[str] = ()):
        self.obj = obj
        self.known_objects = set(known_objects) | {obj.name}
        self.violations: list[Violation] = []

    def run(self) -> list[Violation]:
        self.violations = []
        self._check_duplicates()
        self._check_properties()
        self._check_invokables()
        self._check_signals()
        self._check_constructor()
        self._check_reserved_names()
        self._check_member_collisions()
        return self.violations

    def _check_duplicates(self):
        for kind, names in (
            ("property", [p.name for p in self.obj.properties]),
            ("signal", [s.name for s in self.obj.signals]),
        ):
            for name, count in Counter(names).items():
                if count > 1:
                    self._add(ViolationKind.DUPLICATE_NAME, f"{kind} {name}",
                              f"declared {count} times")

        # No overload resolution across the boundary
        for name, count in Counter(i.name for i in self.obj.invokables).items():
            if count > 1:
                self._add(ViolationKind.OVERLOAD_COLLISION, f"invokable {name}",
                          f"declared {count} times, overloads are not supported")

        for subject, params in self._param_owners():
            # The safe side sees snake_case names, so fooBar and foo_bar collide
            spellings: dict[str, list[str]] = {}
            for p in params:
                spellings.setdefault(as_snake_case(p.name), []).append(p.name)
            for safe_name, names in spellings.items():
                if len(names) < 2:
                    continue
                if len(set(names)) == 1:
                    message = f"parameter '{names[0]}' declared {len(names)} times"
                else:
                    message = f"parameters {', '.join(names)} are all named '{safe_name}' on the safe side"
                self._add(ViolationKind.DUPLICATE_NAME, subject, message)

    def _check_properties(self):
        for prop in self.obj.properties:
            subject = f"property {prop.name}"
            bridge = self._resolve(prop.type, subject)
            if bridge is not None and bridge.kind is MarshalingKind.OWNED_OPAQUE:
                self._add(ViolationKind.OWNED_VALUE_IN_PROPERTY, subject,
                          f"type '{bridge.identity}' is an owned handle; "
                          "every read would have to give ownership away")
            elif bridge is not None:
                self._require(bridge, TO_NATIVE, subject, "read")
                if prop.is_writable:
                    self._require(bridge, TO_SAFE, subject, "write")

            if not prop.notify_resolved:
                if prop.is_writable:
                    message = (f"writable property needs notify signal '{prop.notify}()' "
                               "but no such signal is declared")
                else:
                    message = f"notify signal '{prop.notify}' is not declared"
                self._add(ViolationKind.MISSING_NOTIFY_SIGNAL, subject, message)
            elif prop.notify is not None:
                signal = self.obj.signal(prop.notify)
                if signal is not None and signal.params:
                    self._add(ViolationKind.NOTIFY_SIGNAL_HAS_PARAMETERS, subject,
                              f"notify signal '{prop.notify}' must take no parameters")
    def _check_invokables(self):
        for inv in self.obj.invokables:
            subject = f"invokable {inv.name}"
            if inv.is_static and inv.is_mutating:
                self._add(ViolationKind.STATIC_MUTATING, subject,
                          "a static invokable has no instance to mutate")
            self._check_params(inv.params, subject, TO_SAFE)
            if inv.returns_value:
                bridge = self._resolve(inv.return_type, subject)
                if bridge is not None:
                    self._require(bridge, TO_NATIVE, subject, "return value")

    def _check_signals(self):
        for sig in self.obj.signals:
            subject = f"signal {sig.name}"
            for p in sig.params:
                bridge = self._resolve(p.type, subject)
                if bridge is None:
                    continue
                if bridge.kind is MarshalingKind.OWNED_OPAQUE:
                    self._add(ViolationKind.OWNED_VALUE_IN_SIGNAL, subject,
                              f"parameter '{p.name}' is an owned handle; "
                              "a signal may reach many observers")
                else:
                    self._require(bridge, TO_NATIVE, subject, f"parameter '{p.name}'")

    def _check_constructor(self):
        ctor = self.obj.constructor
        self._check_params(ctor.params, "constructor", TO_SAFE)
        self._check_params(ctor.initialize_params, "constructor", TO_SAFE)
        # Base class arguments stay on the native side
        for p in ctor.base_params:
            self._resolve(p.type, "constructor")

    def _check_params(self, params: tuple[Param, ...], subject: str, direction: str):
        for p in params:
            bridge = self._resolve(p.type, subject)
            if bridge is not None:
                self._require(bridge, direction, subject, f"parameter '{p.name}'")


    def _check_reserved_names(self):
        """Names must be usable as written in C++ and as snake_case in Rust"""
        obj = self.obj

        def reject_keyword(name: str, subject: str):
            if is_reserved(name):
                self._add(ViolationKind.RESERVED_NAME, subject,
                          f"'{name}' is a reserved word in C++ or Rust")

        def reject_param(params: tuple[Param, ...], subject: str, taken: str, used_for: str,
                         safe_side: bool = False):
            for p in params:
                name = as_snake_case(p.name) if safe_side else p.name
                if name == taken:
                    self._add(ViolationKind.RESERVED_NAME, subject,
                              f"parameter '{p.name}' clashes with the generated {used_for}")

        reject_keyword(obj.name, f"object {obj.name}")
        for prop in obj.properties:
            subject = f"property {prop.name}"
            for name in (prop.name, prop.read, prop.write):
                if name is not None:
                    reject_keyword(name, subject)
        for sig in obj.signals:
            subject = f"signal {sig.name}"
            reject_keyword(sig.name, subject)
            for p in sig.params:
                reject_keyword(p.name, subject)
        for inv in obj.invokables:
            subject = f"invokable {inv.name}"
            reject_keyword(inv.name, subject)
            for p in inv.params:
                reject_keyword(p.name, subject)
            if inv.is_mutating:
                reject_param(inv.params, subject, _RECEIVER_PARAM, "object parameter", safe_side=True)
                if inv.returns_value:
                    reject_param(inv.params, subject, _RESULT_LOCAL, "result variable")

        ctor = obj.constructor
        for p in ctor.all_params:
            reject_keyword(p.name, "constructor")
        reject_param(ctor.all_params, "constructor", _PARENT_PARAM, "parent parameter")
        reject_param(ctor.initialize_params, "constructor", _RECEIVER_PARAM, "object parameter",
                     safe_side=True)

    def _check_member_collisions(self):
        """Generated names must not clash, on either side of the boundary.

        Native members share the class scope. Safe-side names are checked
        within the Rust scope they are emitted into.
        """
        seen: dict[tuple[str, str], tuple[str, int]] = {}
        reported: set[frozenset] = set()

        def claim(scope: str, name: str, subject: str, member: object):
            key = (scope, name)
            if key not in seen:
                seen[key] = (subject, id(member))
                return
            prior_subject, prior_id = seen[key]
            # Repeated declarations are already reported as duplicates
            if prior_subject == subject and prior_id != id(member):
                return
            pair = frozenset((prior_subject, subject))
            if pair in reported:
                return
            reported.add(pair)
            where = "member" if scope == "native" else "safe-side name"
            if prior_subject == subject:
                message = f"{where} '{name}' is generated twice"
            else:
                message = f"{where} '{name}' clashes with {prior_subject}"
            self._add(ViolationKind.ACCESSOR_COLLISION, subject, message)

        obj = self.obj
        for prop in obj.properties:
            subject = f"property {prop.name}"
            claim("native", prop.read, subject, prop)
            if prop.write is not None:
                claim("native", prop.write, subject, prop)
            claim("native", update_name(prop.name), subject, prop)
        for sig in obj.signals:
            subject = f"signal {sig.name}"
            claim("native", sig.name, subject, sig)
            claim("native", emitter_name(sig.name), subject, sig)
        for inv in obj.invokables:
            claim("native", inv.name, f"invokable {inv.name}", inv)

        if obj.constructor.params:
            claim("trait", "new", "constructor", obj.constructor)
        if obj.requires_initialization:
            claim("trait", "initialise", "constructor", obj.constructor)
        for prop in obj.properties:
            subject = f"property {prop.name}"
            name = as_snake_case(prop.name)
            claim("trait", name, subject, prop)
            claim("wrapper", f"{as_snake_case(prop.read)}_wrapper", subject, prop)
            if prop.write is not None:
                claim("trait", f"set_{name}", subject, prop)
                claim("wrapper", f"{as_snake_case(prop.write)}_wrapper", subject, prop)
            update = as_snake_case(update_name(prop.name))
            claim("native_type", update, subject, prop)
            claim("native_type", f"{update}_raw", subject, prop)
        for inv in obj.invokables:
            subject = f"invokable {inv.name}"
            claim("trait", as_snake_case(inv.name), subject, inv)
            claim("wrapper", f"{as_snake_case(inv.name)}_wrapper", subject, inv)
        for sig in obj.signals:
            subject = f"signal {sig.name}"
            emit = as_snake_case(emitter_name(sig.name))
            claim("native_type", emit, subject, sig)
            claim("native_type", f"{emit}_raw", subject, sig)

    def _param_owners(self) -> list[tuple[str, tuple[Param, ...]]]:
        owners = [(f"invokable {i.name}", i.params) for i in self.obj.invokables]
        owners += [(f"signal {s.name}", s.params) for s in self.obj.signals]
        owners.append(("constructor", self.obj.constructor.all_params))
        return owners

    def _resolve(self, type_name: str, subject: str) -> Optional[TypeBridge]:
        bridge = TypeRegistry.find(type_name, self.known_objects)
        if bridge is None:
            self.violations.append(UnsupportedType(
                kind=ViolationKind.UNSUPPORTED_TYPE,
                subject=subject,
                message=f"type '{type_name}' has no registered bridge",
                type_name=type_name,
            ))
        return bridge

    def _require(self, bridge: TypeBridge, direction: str, subject: str, usage: str):
        if not bridge.supports(direction):
            self._add(ViolationKind.UNSUPPORTED_DIRECTION, subject,
                      f"{usage} of type '{bridge.identity}' needs "
                      f"{_DIRECTION_TEXT[direction]} conversion, which it does not support")

    def _add(self, kind: ViolationKind, subject: str, message: str):
        self.violations.append(Violation(kind, subject, message))


def validate(obj: BridgedObject, known_objects: Iterable[str] = ()) -> list[Violation]:
    """Return every violation found in ``obj``; an empty list means it can be bridged"""
    return Validator(obj, known_objects).run()


def check(obj: BridgedObject, known_objects: Iterable[str] = ()) -> BridgedObject:
    """Return ``obj`` unchanged or raise MalformedDefinition"""
    violations = validate(obj, known_objects)
    if violations:
        raise MalformedDefinition(obj.name, violations)
    return obj
