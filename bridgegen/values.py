"""Value-level models of the conversions emitted for each type bridge

The emitters produce conversion *code*; these functions describe what that
code does to concrete values so the registry can be checked for lossless
round trips without compiling anything.
"""

import copy
import struct
from dataclasses import dataclass
from typing import Any, Callable, Optional


@dataclass(frozen=True)
class PointF:
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class SizeF:
    width: float = 0.0
    height: float = 0.0


@dataclass(frozen=True)
class MarginsF:
    left: float = 0.0
    top: float = 0.0
    right: float = 0.0
    bottom: float = 0.0


@dataclass(frozen=True)
class Color:
    red: int = 0
    green: int = 0
    blue: int = 0
    alpha: int = 255


class OwnedHandle:
    """Exclusive handle to an object; moving it empties the source"""

    def __init__(self, target: object):
        self._target = target

    @property
    def target(self) -> object:
        if self._target is None:
            raise ValueError("handle was moved from")
        return self._target

    @property
    def is_empty(self) -> bool:
        return self._target is None

    def take(self) -> 'OwnedHandle':
        moved = OwnedHandle(self.target)
        self._target = None
        return moved

    def __eq__(self, other):
        if not isinstance(other, OwnedHandle):
            return NotImplemented
        return self._target is other._target

    def __hash__(self):
        return id(self._target)


Converter = Callable[[Any], Any]


@dataclass(frozen=True)
class ValueModel:
    """Value conversions in both directions; None marks an unsupported direction"""
    to_safe: Optional[Converter]
    to_native: Optional[Converter]


def integer_model(bits: int, signed: bool) -> ValueModel:
    if signed:
        low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    else:
        low, high = 0, (1 << bits) - 1

    def convert(value):
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"expected an integer, got {type(value).__name__}")
        if not low <= value <= high:
            raise OverflowError(f"{value} does not fit in {bits} bits")
        return value

    return ValueModel(to_safe=convert, to_native=convert)


def _to_f32(value):
    return struct.unpack('<f', struct.pack('<f', float(value)))[0]


def float_model(bits: int) -> ValueModel:
    if bits == 32:
        return ValueModel(to_safe=_to_f32, to_native=_to_f32)
    return ValueModel(to_safe=float, to_native=float)


def _bool(value):
    if not isinstance(value, bool):
        raise TypeError(f"expected a bool, got {type(value).__name__}")
    return value


BOOL_MODEL = ValueModel(to_safe=_bool, to_native=_bool)


def _copy_point(value: PointF) -> PointF:
    return PointF(value.x, value.y)


def _copy_size(value: SizeF) -> SizeF:
    return SizeF(value.width, value.height)


POINTF_MODEL = ValueModel(to_safe=_copy_point, to_native=_copy_point)
SIZEF_MODEL = ValueModel(to_safe=_copy_size, to_native=_copy_size)


def _margins_from_components(value: MarginsF) -> MarginsF:
    return MarginsF(left=value.left, top=value.top, right=value.right, bottom=value.bottom)


MARGINSF_MODEL = ValueModel(
    to_safe=_margins_from_components,
    to_native=_margins_from_components,
)


def _rgba(value: Color) -> Color:
    for channel in (value.red, value.green, value.blue, value.alpha):
        if not 0 <= channel <= 255:
            raise ValueError(f"colour channel {channel} is outside 0..255")
    return Color(value.red, value.green, value.blue, value.alpha)


COLOR_MODEL = ValueModel(to_safe=_rgba, to_native=_rgba)


def _utf16_to_utf8(value: str) -> str:
    # QString may hold lone surrogates, a Rust String cannot
    return value.encode('utf-8').decode('utf-8')


def _utf8_to_utf16(value: str) -> str:
    return value.encode('utf-16-le').decode('utf-16-le')


STRING_MODEL = ValueModel(to_safe=_utf16_to_utf8, to_native=_utf8_to_utf16)
STR_MODEL = ValueModel(to_safe=None, to_native=_utf8_to_utf16)
VARIANT_MODEL = ValueModel(to_safe=copy.deepcopy, to_native=copy.deepcopy)


def _move(value: OwnedHandle) -> OwnedHandle:
    return value.take()


OWNED_MODEL = ValueModel(to_safe=_move, to_native=_move)
