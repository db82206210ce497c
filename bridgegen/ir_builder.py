"""Builds the IR for one object from its syntax tree"""

import re

from .errors import MalformedDefinition, Violation, ViolationKind
from .naming import getter_name, setter_name, notify_name
from .syntax import ObjectDecl, ParamDecl, PropertyDecl
from .type_registry import TypeRegistry
from .types import BridgedObject, Constructor, Invokable, Param, Property, Signal

_IDENTIFIER = re.compile(r'[A-Za-z_]\w*')


class IRBuilder:
    """Turns an ObjectDecl into a BridgedObject.

    Only structural problems fail here; type support and notification
    wiring are left to the validation layer. Every problem is collected
    before raising.
    """

    def __init__(self, decl: ObjectDecl):
        self.decl = decl
        self._violations: list[Violation] = []

    def build(self) -> BridgedObject:
        self._violations = []
        decl = self.decl
        self._check_identifier(decl.name, "object", "object name")

        signal_names = {s.name for s in decl.signals}
        properties = tuple(self._build_property(p, signal_names) for p in decl.properties)
        invokables = tuple(
            Invokable(
                name=inv.name,
                params=self._build_params(inv.params, f"invokable {inv.name}"),
                return_type=self._build_return(inv.return_type, inv.name),
                is_mutating=inv.is_mutating,
                is_static=inv.is_static,
            )
            for inv in decl.invokables
            if self._check_identifier(inv.name, "invokable", "invokable name")
        )
        signals = tuple(
            Signal(name=sig.name, params=self._build_params(sig.params, f"signal {sig.name}"))
            for sig in decl.signals
            if self._check_identifier(sig.name, "signal", "signal name")
        )

        constructor = Constructor()
        if len(decl.constructors) > 1:
            self._flag("constructor", f"declared {len(decl.constructors)} times, at most one is allowed")
        elif decl.constructors:
            ctor = decl.constructors[0]
            constructor = Constructor(
                params=self._build_params(ctor.params, "constructor"),
                base_params=self._build_params(ctor.base_params, "constructor"),
                initialize_params=self._build_params(ctor.initialize_params, "constructor"),
            )

        if self._violations:
            raise MalformedDefinition(decl.name or "<unnamed>", self._violations)

        return BridgedObject(
            name=decl.name,
            properties=tuple(p for p in properties if p is not None),
            invokables=invokables,
            signals=signals,
            constructor=constructor,
            # Initialise arguments need the hook that receives them
            requires_initialization=decl.requires_initialization or bool(constructor.initialize_params),
        )

    def _build_property(self, decl: PropertyDecl, signal_names: set[str]):
        subject = f"property {decl.name or '<unnamed>'}"
        if not self._check_identifier(decl.name, subject, "property name"):
            return None
        if not decl.type:
            self._flag(subject, "missing type")
            return None
        if decl.readonly and decl.write:
            self._flag(subject, f"read-only property declares write accessor '{decl.write}'")
            return None

        for accessor in (decl.read, decl.write, decl.notify):
            if accessor is not None and not _IDENTIFIER.fullmatch(accessor):
                self._flag(subject, f"accessor '{accessor}' is not a valid identifier")
                return None

        write = None if decl.readonly else (decl.write or setter_name(decl.name))
        notify = decl.notify
        if write is not None and notify is None:
            notify = notify_name(decl.name)
        resolved = notify is None or notify in signal_names

        return Property(
            name=decl.name,
            type=TypeRegistry.normalize(decl.type),
            read=decl.read or getter_name(decl.name),
            write=write,
            notify=notify,
            notify_resolved=resolved,
        )

    def _build_params(self, params: list[ParamDecl], subject: str) -> tuple[Param, ...]:
        built = []
        for index, p in enumerate(params):
            if not p.type:
                self._flag(subject, f"parameter {index} has no type")
                continue
            if not self._check_identifier(p.name, subject, f"parameter {index} name"):
                continue
            built.append(Param(name=p.name, type=TypeRegistry.normalize(p.type)))
        return tuple(built)

    def _build_return(self, return_type: str, name: str) -> str:
        if not return_type:
            self._flag(f"invokable {name}", "missing return type, use 'void' for none")
            return "void"
        return TypeRegistry.normalize(return_type)

    def _check_identifier(self, name: str, subject: str, what: str) -> bool:
        if not name:
            self._flag(subject, f"{what} is empty")
            return False
        if not _IDENTIFIER.fullmatch(name):
            self._flag(subject, f"{what} '{name}' is not a valid identifier")
            return False
        return True

    def _flag(self, subject: str, message: str):
        self._violations.append(Violation(ViolationKind.STRUCTURE, subject, message))


def build_object(decl: ObjectDecl) -> BridgedObject:
    """Extract the IR for one object or raise MalformedDefinition"""
    return IRBuilder(decl).build()
