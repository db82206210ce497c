"""Attributed syntax tree handed to the translator by a front-end"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .errors import ParseFailure


@dataclass
class ParamDecl:
    """Parameter as written in the source"""
    type: str
    name: str


@dataclass
class PropertyDecl:
    """Property declaration with optional custom accessor names"""
    name: str
    type: str
    readonly: bool = False
    read: Optional[str] = None
    write: Optional[str] = None
    notify: Optional[str] = None


@dataclass
class InvokableDecl:
    """Invokable method declaration"""
    name: str
    return_type: str = "void"
    params: list[ParamDecl] = field(default_factory=list)
    is_mutating: bool = False
    is_static: bool = False


@dataclass
class SignalDecl:
    """Signal declaration"""
    name: str
    params: list[ParamDecl] = field(default_factory=list)


@dataclass
class ConstructorDecl:
    """Constructor arguments, grouped by where they are forwarded"""
    params: list[ParamDecl] = field(default_factory=list)
    base_params: list[ParamDecl] = field(default_factory=list)
    initialize_params: list[ParamDecl] = field(default_factory=list)


@dataclass
class ObjectDecl:
    """One bridgeable object definition"""
    name: str
    properties: list[PropertyDecl] = field(default_factory=list)
    invokables: list[InvokableDecl] = field(default_factory=list)
    signals: list[SignalDecl] = field(default_factory=list)
    constructors: list[ConstructorDecl] = field(default_factory=list)
    requires_initialization: bool = False


def load_syntax_tree(json_path: str) -> list[ObjectDecl]:
    """Load object declarations from a JSON file"""
    text = Path(json_path).read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseFailure([f"{json_path}: invalid JSON ({exc})"]) from exc
    return objects_from_dict(data)


def objects_from_dict(data: dict) -> list[ObjectDecl]:
    """Create object declarations from a dictionary.

    Expected shape::

        {"objects": [{"name": "Counter",
                      "properties": [{"name": "count", "type": "i32"}],
                      "invokables": [{"name": "increment", "mutating": true}],
                      "signals": [{"name": "countChanged"}]}]}
    """
    if not isinstance(data, dict) or not isinstance(data.get("objects"), list):
        raise ParseFailure(["syntax tree must be a mapping with an 'objects' list"])

    problems: list[str] = []
    objects = []
    for index, raw in enumerate(data["objects"]):
        where = f"objects[{index}]"
        if not isinstance(raw, dict):
            problems.append(f"{where}: expected a mapping")
            continue
        objects.append(_parse_object(raw, where, problems))

    if problems:
        raise ParseFailure(problems)
    return objects


def _parse_object(raw: dict, where: str, problems: list[str]) -> ObjectDecl:
    obj = ObjectDecl(
        name=_as_str(raw.get("name"), f"{where}.name", problems),
        requires_initialization=_as_bool(raw.get("initialize"), f"{where}.initialize", problems),
    )

    for i, prop in enumerate(_as_list(raw.get("properties"), f"{where}.properties", problems)):
        at = f"{where}.properties[{i}]"
        if not isinstance(prop, dict):
            problems.append(f"{at}: expected a mapping")
            continue
        obj.properties.append(PropertyDecl(
            name=_as_str(prop.get("name"), f"{at}.name", problems),
            type=_as_str(prop.get("type"), f"{at}.type", problems),
            readonly=_as_bool(prop.get("readonly"), f"{at}.readonly", problems),
            read=_as_optional_str(prop.get("read"), f"{at}.read", problems),
            write=_as_optional_str(prop.get("write"), f"{at}.write", problems),
            notify=_as_optional_str(prop.get("notify"), f"{at}.notify", problems),
        ))

    for i, inv in enumerate(_as_list(raw.get("invokables"), f"{where}.invokables", problems)):
        at = f"{where}.invokables[{i}]"
        if not isinstance(inv, dict):
            problems.append(f"{at}: expected a mapping")
            continue
        obj.invokables.append(InvokableDecl(
            name=_as_str(inv.get("name"), f"{at}.name", problems),
            return_type=_as_optional_str(inv.get("return"), f"{at}.return", problems) or "void",
            params=_parse_params(inv.get("params"), at, problems),
            is_mutating=_as_bool(inv.get("mutating"), f"{at}.mutating", problems),
            is_static=_as_bool(inv.get("static"), f"{at}.static", problems),
        ))

    for i, sig in enumerate(_as_list(raw.get("signals"), f"{where}.signals", problems)):
        at = f"{where}.signals[{i}]"
        if not isinstance(sig, dict):
            problems.append(f"{at}: expected a mapping")
            continue
        obj.signals.append(SignalDecl(
            name=_as_str(sig.get("name"), f"{at}.name", problems),
            params=_parse_params(sig.get("params"), at, problems),
        ))

    ctor = raw.get("constructor")
    if isinstance(ctor, dict):
        at = f"{where}.constructor"
        obj.constructors.append(ConstructorDecl(
            params=_parse_params(ctor.get("params"), at, problems),
            base_params=_parse_params(ctor.get("base"), f"{at}.base", problems),
            initialize_params=_parse_params(ctor.get("initialize"), f"{at}.initialize", problems),
        ))
    elif ctor is not None:
        # A bare list is shorthand for factory arguments only
        obj.constructors.append(ConstructorDecl(
            params=_parse_params(ctor, f"{where}.constructor", problems),
        ))

    return obj


def _parse_params(value, where: str, problems: list[str]) -> list[ParamDecl]:
    params = []
    for i, p in enumerate(_as_list(value, f"{where}.params", problems)):
        if not isinstance(p, dict):
            problems.append(f"{where}.params[{i}]: expected a mapping")
            continue
        params.append(ParamDecl(
            type=_as_str(p.get("type"), f"{where}.params[{i}].type", problems),
            name=_as_str(p.get("name"), f"{where}.params[{i}].name", problems),
        ))
    return params


def _as_list(value, where: str, problems: list[str]) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        problems.append(f"{where}: expected a list")
        return []
    return value


def _as_str(value, where: str, problems: list[str]) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        problems.append(f"{where}: expected a string")
        return ""
    return value


def _as_optional_str(value, where: str, problems: list[str]) -> Optional[str]:
    if value is None:
        return None
    return _as_str(value, where, problems) or None


def _as_bool(value, where: str, problems: list[str]) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        problems.append(f"{where}: expected true or false")
        return False
    return value
