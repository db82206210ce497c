"""IR data types for bridgeable objects"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Param:
    """Invokable, signal or constructor parameter"""
    name: str
    type: str


@dataclass(frozen=True)
class Property:
    """Object property with its accessor triplet"""
    name: str
    type: str
    read: str
    write: Optional[str] = None
    notify: Optional[str] = None
    notify_resolved: bool = True

    @property
    def is_writable(self) -> bool:
        return self.write is not None


@dataclass(frozen=True)
class Invokable:
    """Method callable from the native framework"""
    name: str
    params: tuple[Param, ...] = ()
    return_type: str = "void"
    is_mutating: bool = False
    is_static: bool = False

    @property
    def returns_value(self) -> bool:
        return self.return_type != "void"


@dataclass(frozen=True)
class Signal:
    """Notification channel"""
    name: str
    params: tuple[Param, ...] = ()


@dataclass(frozen=True)
class Constructor:
    """Constructor arguments, split by where each one is forwarded.

    ``params`` go to the safe-side factory, ``base_params`` to the base class
    constructor and ``initialize_params`` to the safe-side initialise hook.
    The native constructor takes all of them in that order.
    """
    params: tuple[Param, ...] = ()
    base_params: tuple[Param, ...] = ()
    initialize_params: tuple[Param, ...] = ()

    @property
    def all_params(self) -> tuple[Param, ...]:
        return self.params + self.base_params + self.initialize_params


@dataclass(frozen=True)
class BridgedObject:
    """Validated description of one bridgeable object"""
    name: str
    properties: tuple[Property, ...] = ()
    invokables: tuple[Invokable, ...] = ()
    signals: tuple[Signal, ...] = ()
    constructor: Constructor = Constructor()
    requires_initialization: bool = False

    def signal(self, name: str) -> Optional[Signal]:
        return next((s for s in self.signals if s.name == name), None)

    def used_types(self) -> list[str]:
        """Type identities used anywhere on the object, first occurrence order"""
        seen: list[str] = []
        candidates = [p.type for p in self.constructor.all_params]
        candidates += [p.type for p in self.properties]
        for inv in self.invokables:
            candidates += [p.type for p in inv.params]
            candidates.append(inv.return_type)
        for sig in self.signals:
            candidates += [p.type for p in sig.params]

        for type_name in candidates:
            if type_name != "void" and type_name not in seen:
                seen.append(type_name)
        return seen
