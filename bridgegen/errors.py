"""Error taxonomy for bridge generation"""

from dataclasses import dataclass
from enum import Enum


class ViolationKind(Enum):
    """Reasons a definition cannot be bridged"""
    STRUCTURE = "structure"
    UNSUPPORTED_TYPE = "unsupported-type"
    UNSUPPORTED_DIRECTION = "unsupported-direction"
    MISSING_NOTIFY_SIGNAL = "missing-notify-signal"
    NOTIFY_SIGNAL_HAS_PARAMETERS = "notify-signal-has-parameters"
    DUPLICATE_NAME = "duplicate-name"
    OVERLOAD_COLLISION = "overload-collision"
    ACCESSOR_COLLISION = "accessor-collision"
    STATIC_MUTATING = "static-mutating"
    OWNED_VALUE_IN_SIGNAL = "owned-value-in-signal"
    OWNED_VALUE_IN_PROPERTY = "owned-value-in-property"
    RESERVED_NAME = "reserved-name"
    DUPLICATE_OBJECT = "duplicate-object"


@dataclass(frozen=True)
class Violation:
    """One problem found in an object definition.

    ``subject`` names the offending member, e.g. ``property count`` or
    ``invokable increment``.
    """
    kind: ViolationKind
    subject: str
    message: str

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.subject}: {self.message}"


@dataclass(frozen=True)
class UnsupportedType(Violation):
    """A value type absent from the type registry"""
    type_name: str = ""


class BridgeGenError(Exception):
    """Base class for all generator errors"""


class ParseFailure(BridgeGenError):
    """Raised by the front-end when source text cannot be turned into a syntax tree"""

    def __init__(self, problems: list[str]):
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))


class NotRegistered(BridgeGenError):
    """Raised when a type identity has no registry entry"""

    def __init__(self, type_name: str):
        self.type_name = type_name
        super().__init__(f"type '{type_name}' is not registered")


class MalformedDefinition(BridgeGenError):
    """Raised when an object definition has one or more violations.

    Carries every violation found for the object, never just the first.
    """

    def __init__(self, object_name: str, violations: list[Violation]):
        self.object_name = object_name
        self.violations = list(violations)
        details = "\n".join(f"  {v}" for v in self.violations)
        super().__init__(
            f"{object_name}: {len(self.violations)} violation(s)\n{details}"
        )


class SignatureMismatch(BridgeGenError):
    """Internal error: the emitted native and safe artifacts disagree"""

    def __init__(self, object_name: str, mismatches: list[str]):
        self.object_name = object_name
        self.mismatches = list(mismatches)
        details = "\n".join(f"  {m}" for m in self.mismatches)
        super().__init__(f"{object_name}: emitted artifacts disagree\n{details}")
