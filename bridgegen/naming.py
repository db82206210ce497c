"""Identifier conventions shared by both emitters"""

import re


def as_snake_case(name: str) -> str:
    """Convert camelCase or PascalCase to snake_case

    Examples:
        MyObject -> my_object
        sayHi -> say_hi
        HTTPServer -> http_server
    """
    name = re.sub(r'([A-Z]+)([A-Z][a-z])', r'\1_\2', name)
    name = re.sub(r'([a-z0-9])([A-Z])', r'\1_\2', name)
    return name.lower()


def upper_first(name: str) -> str:
    """count -> Count"""
    return name[:1].upper() + name[1:]


def getter_name(prop_name: str) -> str:
    return f"get{upper_first(prop_name)}"


def setter_name(prop_name: str) -> str:
    return f"set{upper_first(prop_name)}"


def notify_name(prop_name: str) -> str:
    return f"{prop_name}Changed"


def update_name(prop_name: str) -> str:
    """Native entry point the safe side calls after changing a property itself"""
    return f"update{upper_first(prop_name)}"


def emitter_name(signal_name: str) -> str:
    return f"emit{upper_first(signal_name)}"


def static_entry_name(invokable_name: str) -> str:
    """Free safe-side function backing a static invokable"""
    return f"{invokable_name}Rs"


def mirror_slot_name(prop_name: str) -> str:
    return f"m_{prop_name}"


RUST_KEYWORDS = frozenset({
    'abstract', 'as', 'async', 'await', 'become', 'box', 'break', 'const', 'continue',
    'crate', 'do', 'dyn', 'else', 'enum', 'extern', 'false', 'final', 'fn', 'for', 'gen',
    'if', 'impl', 'in', 'let', 'loop', 'macro', 'match', 'mod', 'move', 'mut', 'override',
    'priv', 'pub', 'ref', 'return', 'self', 'Self', 'static', 'struct', 'super', 'trait',
    'true', 'try', 'type', 'typeof', 'unsafe', 'unsized', 'use', 'virtual', 'where',
    'while', 'yield',
})

CPP_KEYWORDS = frozenset({
    'alignas', 'alignof', 'and', 'asm', 'auto', 'bool', 'break', 'case', 'catch', 'char',
    'class', 'concept', 'const', 'consteval', 'constexpr', 'const_cast', 'continue',
    'co_await', 'co_return', 'co_yield', 'decltype', 'default', 'delete', 'do', 'double',
    'dynamic_cast', 'else', 'enum', 'explicit', 'export', 'extern', 'false', 'float', 'for',
    'friend', 'goto', 'if', 'inline', 'int', 'long', 'mutable', 'namespace', 'new',
    'noexcept', 'not', 'nullptr', 'operator', 'or', 'private', 'protected', 'public',
    'register', 'reinterpret_cast', 'requires', 'return', 'short', 'signed', 'sizeof',
    'static', 'static_assert', 'static_cast', 'struct', 'switch', 'template', 'this',
    'throw', 'true', 'try', 'typedef', 'typeid', 'typename', 'union', 'unsigned', 'using',
    'virtual', 'void', 'volatile', 'while', 'xor',
    # Qt keyword macros
    'emit', 'foreach', 'signals', 'slots',
})


def is_reserved(name: str) -> bool:
    """Whether ``name`` cannot be used as written in C++ or snake_cased in Rust"""
    return name in CPP_KEYWORDS or as_snake_case(name) in RUST_KEYWORDS
