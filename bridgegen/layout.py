"""Storage layout and ownership plan for the generated native class"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from .naming import mirror_slot_name
from .type_registry import TypeBridge, TypeRegistry
from .types import BridgedObject, Property

HANDLE_SLOT = "m_rustObj"
INIT_FLAG_SLOT = "m_initialised"


class SlotRole(Enum):
    HANDLE = "handle"
    INIT_FLAG = "init-flag"
    MIRROR = "mirror"


@dataclass(frozen=True)
class Slot:
    """One data member of the native class"""
    name: str
    native_type: str
    role: SlotRole
    default: Optional[str] = None
    property: Optional[Property] = None
    bridge: Optional[TypeBridge] = None


@dataclass(frozen=True)
class StoragePlan:
    """Members of the native class in declaration order.

    The handle comes first so that mirror slots can be initialised from
    the safe-side state in the constructor's member initialiser list.
    """
    handle: Slot
    init_flag: Slot
    mirrors: tuple[Slot, ...] = ()

    @property
    def slots(self) -> tuple[Slot, ...]:
        return (self.handle, self.init_flag) + self.mirrors

    def mirror_for(self, prop_name: str) -> Optional[Slot]:
        return next((s for s in self.mirrors if s.property.name == prop_name), None)


def plan_layout(obj: BridgedObject, known_objects: Iterable[str] = ()) -> StoragePlan:
    """Compute the storage plan for a validated object.

    Properties of trivial-copy and constructed kinds get a mirror slot that
    holds the last value synchronised with the safe side.
    """
    known = set(known_objects) | {obj.name}
    mirrors = []
    for prop in obj.properties:
        bridge = TypeRegistry.lookup(prop.type, known)
        if bridge.is_mirrored:
            mirrors.append(Slot(
                name=mirror_slot_name(prop.name),
                native_type=bridge.native_type,
                role=SlotRole.MIRROR,
                property=prop,
                bridge=bridge,
            ))

    return StoragePlan(
        handle=Slot(name=HANDLE_SLOT, native_type="rust::Box<RustObj>", role=SlotRole.HANDLE),
        init_flag=Slot(name=INIT_FLAG_SLOT, native_type="bool", role=SlotRole.INIT_FLAG,
                       default="false"),
        mirrors=tuple(mirrors),
    )
