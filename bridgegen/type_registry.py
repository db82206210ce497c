"""Closed registry of value types that may cross the native/safe boundary"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from .errors import NotRegistered
from .naming import as_snake_case
from . import values
from .values import ValueModel


class MarshalingKind(Enum):
    """How a value crosses the boundary"""
    TRIVIAL_COPY = "trivial-copy"
    CONSTRUCTED = "constructed"
    OWNED_OPAQUE = "owned-opaque"
    CLONED = "cloned"


@dataclass(frozen=True)
class Conversion:
    """One direction of a bridge as a pair of expression templates.

    ``native`` is C++ and ``safe`` is Rust; ``{0}`` stands for the value.
    For native->safe, ``native`` builds the argument passed across and
    ``safe`` turns the received argument into the safe type. For
    safe->native, ``safe`` builds the value returned across and ``native``
    turns the received value into the native type.
    """
    native: str
    safe: str


@dataclass(frozen=True)
class TypeBridge:
    """Registry entry for one value type"""
    identity: str
    kind: MarshalingKind
    native_type: str
    safe_type: str
    native_param: str
    native_receive: str
    safe_param: str
    safe_return: str
    to_safe: Optional[Conversion]
    to_native: Optional[Conversion]
    model: ValueModel
    slug: str
    native_include: Optional[str] = None
    # cxx_qt_lib types that appear in the bridge signatures
    lib_types: tuple[str, ...] = ()
    # extra Rust paths the safe-side type needs
    safe_imports: tuple[str, ...] = ()

    @property
    def is_mirrored(self) -> bool:
        """Whether properties of this type keep a native-side copy"""
        return self.kind in (MarshalingKind.TRIVIAL_COPY, MarshalingKind.CONSTRUCTED)

    @property
    def native_read_type(self) -> str:
        """Return type of a native getter reading the mirror"""
        if self.is_mirrored and self.native_param.startswith("const "):
            return self.native_param
        return self.native_type

    def supports(self, direction: str) -> bool:
        return getattr(self, direction) is not None


_IDENTITY = Conversion(native="{0}", safe="{0}")


def _scalar(identity: str, native: str, model: ValueModel) -> TypeBridge:
    return TypeBridge(
        identity=identity,
        kind=MarshalingKind.TRIVIAL_COPY,
        native_type=native,
        safe_type=identity,
        native_param=native,
        native_receive=native,
        safe_param=identity,
        safe_return=identity,
        to_safe=_IDENTITY,
        to_native=_IDENTITY,
        model=model,
        slug=identity,
    )


def _framework_value(identity: str, model: ValueModel) -> TypeBridge:
    return TypeBridge(
        identity=identity,
        kind=MarshalingKind.TRIVIAL_COPY,
        native_type=identity,
        safe_type=identity,
        native_param=f"const {identity}&",
        native_receive=identity,
        safe_param=f"&{identity}",
        safe_return=identity,
        to_safe=Conversion(native="{0}", safe="*{0}"),
        to_native=_IDENTITY,
        model=model,
        slug=identity.lower(),
        native_include=f"<QtCore/{identity}>",
        lib_types=(identity,),
    )


_BRIDGES: tuple[TypeBridge, ...] = (
    _scalar("bool", "bool", values.BOOL_MODEL),
    _scalar("i8", "qint8", values.integer_model(8, True)),
    _scalar("u8", "quint8", values.integer_model(8, False)),
    _scalar("i16", "qint16", values.integer_model(16, True)),
    _scalar("u16", "quint16", values.integer_model(16, False)),
    _scalar("i32", "qint32", values.integer_model(32, True)),
    _scalar("u32", "quint32", values.integer_model(32, False)),
    _scalar("i64", "qint64", values.integer_model(64, True)),
    _scalar("u64", "quint64", values.integer_model(64, False)),
    _scalar("f32", "float", values.float_model(32)),
    _scalar("f64", "double", values.float_model(64)),
    _framework_value("QPointF", values.POINTF_MODEL),
    _framework_value("QSizeF", values.SIZEF_MODEL),
    TypeBridge(
        identity="QMarginsF",
        kind=MarshalingKind.CONSTRUCTED,
        native_type="QMarginsF",
        safe_type="QMarginsF",
        native_param="const QMarginsF&",
        native_receive="QMarginsF",
        safe_param="&QMarginsF",
        safe_return="QMarginsF",
        to_safe=Conversion(
            native="{0}",
            safe="QMarginsF::new({0}.left(), {0}.top(), {0}.right(), {0}.bottom())",
        ),
        to_native=Conversion(
            native="{0}",
            safe="QMarginsF::new({0}.left(), {0}.top(), {0}.right(), {0}.bottom())",
        ),
        model=values.MARGINSF_MODEL,
        slug="qmarginsf",
        native_include="<QtCore/QMarginsF>",
        lib_types=("QMarginsF",),
    ),
    TypeBridge(
        identity="QColor",
        kind=MarshalingKind.CLONED,
        native_type="QColor",
        safe_type="Color",
        native_param="const QColor&",
        native_receive="QColor",
        safe_param="&QColor",
        safe_return="QColor",
        to_safe=Conversion(native="{0}", safe="{0}.to_rust()"),
        to_native=Conversion(native="{0}", safe="QColor::from(&{0})"),
        model=values.COLOR_MODEL,
        slug="qcolor",
        native_include="<QtGui/QColor>",
        lib_types=("QColor",),
        safe_imports=("cxx_qt_lib::Color",),
    ),
    TypeBridge(
        identity="QString",
        kind=MarshalingKind.CLONED,
        native_type="QString",
        safe_type="String",
        native_param="const QString&",
        native_receive="rust::String",
        safe_param="&QString",
        safe_return="String",
        to_safe=Conversion(native="{0}", safe="{0}.to_rust()"),
        to_native=Conversion(native="rustStringToQString({0})", safe="{0}"),
        model=values.STRING_MODEL,
        slug="qstring",
        native_include="<QtCore/QString>",
        lib_types=("QString",),
    ),
    TypeBridge(
        identity="str",
        kind=MarshalingKind.CLONED,
        native_type="QString",
        safe_type="&'static str",
        native_param="const QString&",
        native_receive="rust::Str",
        safe_param="&QString",
        safe_return="&'static str",
        to_safe=None,
        to_native=Conversion(native="rustStrToQString({0})", safe="{0}"),
        model=values.STR_MODEL,
        slug="str",
        native_include="<QtCore/QString>",
    ),
    TypeBridge(
        identity="QVariant",
        kind=MarshalingKind.CLONED,
        native_type="QVariant",
        safe_type="Variant",
        native_param="const QVariant&",
        native_receive="QVariant",
        safe_param="&QVariant",
        safe_return="QVariant",
        to_safe=Conversion(native="{0}", safe="{0}.to_rust()"),
        to_native=Conversion(native="{0}", safe="QVariant::from(&{0})"),
        model=values.VARIANT_MODEL,
        slug="qvariant",
        native_include="<QtCore/QVariant>",
        lib_types=("QVariant",),
        safe_imports=("cxx_qt_lib::Variant",),
    ),
)


class TypeRegistry:
    """Looks up bridging strategies for type identities"""

    # Spellings accepted for convenience, normalised before lookup
    ALIASES = {
        'int': 'i32',
        'float': 'f32',
        'double': 'f64',
    }

    BRIDGES = {bridge.identity: bridge for bridge in _BRIDGES}

    @classmethod
    def normalize(cls, identity: str) -> str:
        identity = identity.strip()
        return cls.ALIASES.get(identity, identity)

    @classmethod
    def owned_target(cls, identity: str) -> Optional[str]:
        """Get the object name of an owned-opaque identity like UniquePtr<Other>"""
        if m := re.fullmatch(r'UniquePtr<\s*(\w+)\s*>', identity.strip()):
            return m.group(1)
        return None

    @classmethod
    def lookup(cls, identity: str, known_objects: Iterable[str] = ()) -> TypeBridge:
        """Get the bridge for a type identity or raise NotRegistered.

        Owned-opaque handles resolve only for objects in ``known_objects``.
        """
        name = cls.normalize(identity)
        if name in cls.BRIDGES:
            return cls.BRIDGES[name]

        target = cls.owned_target(name)
        if target is not None and target in set(known_objects):
            return cls._owned_bridge(target)

        raise NotRegistered(identity)

    @classmethod
    def find(cls, identity: str, known_objects: Iterable[str] = ()) -> Optional[TypeBridge]:
        try:
            return cls.lookup(identity, known_objects)
        except NotRegistered:
            return None

    @classmethod
    def identities(cls) -> list[str]:
        return list(cls.BRIDGES)

    @classmethod
    def _owned_bridge(cls, target: str) -> TypeBridge:
        handle = f"UniquePtr<{target}>"
        native = f"std::unique_ptr<{target}>"
        return TypeBridge(
            identity=handle,
            kind=MarshalingKind.OWNED_OPAQUE,
            native_type=native,
            safe_type=handle,
            native_param=native,
            native_receive=native,
            safe_param=handle,
            safe_return=handle,
            to_safe=Conversion(native="std::move({0})", safe="{0}"),
            to_native=_IDENTITY,
            model=values.OWNED_MODEL,
            slug=f"owned_{as_snake_case(target)}",
            native_include="<memory>",
            safe_imports=("cxx::UniquePtr",),
        )
