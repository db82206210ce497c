"""Bridge IDL parser"""

import re
from .errors import ParseFailure
from .syntax import (
    ParamDecl, PropertyDecl, InvokableDecl, SignalDecl, ConstructorDecl, ObjectDecl,
)


class BridgeParser:
    """Parses bridge IDL syntax into object declarations"""

    def __init__(self, content: str):
        self.content = self._strip_comments(content)
        self._problems: list[str] = []

    def _strip_comments(self, content: str) -> str:
        content = re.sub(r'//.*$', '', content, flags=re.MULTILINE)
        content = re.sub(r'/\*.*?\*/', '', content, flags=re.DOTALL)
        return content

    def parse(self) -> list[ObjectDecl]:
        self._problems = []
        objects = self._parse_objects()
        if self._problems:
            raise ParseFailure(self._problems)
        return objects

    def _parse_objects(self) -> list[ObjectDecl]:
        objects = []
        pattern = r'object\s+(\w+)\s*\{([^}]*)\}'
        consumed = []
        for match in re.finditer(pattern, self.content):
            name, body = match.groups()
            obj = ObjectDecl(name=name)
            self._parse_object_body(body, obj)
            objects.append(obj)
            consumed.append(match.span())

        # Anything outside object blocks is a typo, not something to skip silently
        leftover = self.content
        for start, end in reversed(consumed):
            leftover = leftover[:start] + leftover[end:]
        if leftover.strip():
            self._problems.append(f"unexpected text outside object blocks: {leftover.strip()[:40]!r}")
        return objects

    def _parse_object_body(self, body: str, obj: ObjectDecl):
        for line in body.strip().split(';'):
            line = ' '.join(line.split())
            if not line:
                continue

            if line == 'initialize':
                obj.requires_initialization = True
            # Check for constructor: constructor(params) [base(params)] [initialize(params)]
            elif m := re.fullmatch(r'constructor\s*\(([^)]*)\)((?:\s*\w+\s*\([^)]*\))*)', line):
                ctor = ConstructorDecl(params=self._parse_params(m.group(1), obj.name))
                if self._parse_constructor_clauses(m.group(2), ctor, obj.name):
                    obj.constructors.append(ctor)
            # Check for property: [readonly] property type name [READ x] [WRITE y] [NOTIFY z]
            elif m := re.fullmatch(r'(readonly\s+)?property\s+(\S+)\s+(\w+)(.*)', line):
                prop = PropertyDecl(
                    name=m.group(3),
                    type=m.group(2),
                    readonly=m.group(1) is not None,
                )
                if self._parse_property_clauses(m.group(4), prop, obj.name):
                    obj.properties.append(prop)
            # Check for signal: signal name(params)
            elif m := re.fullmatch(r'signal\s+(\w+)\s*\(([^)]*)\)', line):
                obj.signals.append(SignalDecl(
                    name=m.group(1),
                    params=self._parse_params(m.group(2), obj.name),
                ))
            # Check for invokable: [static] invokable type name(params) [mut]
            elif m := re.fullmatch(r'(static\s+)?invokable\s+(\S+)\s+(\w+)\s*\(([^)]*)\)\s*(mut)?', line):
                obj.invokables.append(InvokableDecl(
                    name=m.group(3),
                    return_type=m.group(2),
                    params=self._parse_params(m.group(4), obj.name),
                    is_mutating=m.group(5) is not None,
                    is_static=m.group(1) is not None,
                ))
            else:
                self._problems.append(f"{obj.name}: cannot parse member '{line}'")

    def _parse_property_clauses(self, clauses: str, prop: PropertyDecl, owner: str) -> bool:
        tokens = clauses.split()
        if len(tokens) % 2:
            self._problems.append(f"{owner}: incomplete accessor clause for property '{prop.name}'")
            return False

        for keyword, value in zip(tokens[::2], tokens[1::2]):
            if keyword == 'READ':
                prop.read = value
            elif keyword == 'WRITE':
                prop.write = value
            elif keyword == 'NOTIFY':
                prop.notify = value
            else:
                self._problems.append(f"{owner}: unknown clause '{keyword}' on property '{prop.name}'")
                return False
        return True

    def _parse_constructor_clauses(self, clauses: str, ctor: ConstructorDecl, owner: str) -> bool:
        seen = set()
        for keyword, params in re.findall(r'(\w+)\s*\(([^)]*)\)', clauses):
            if keyword not in ('base', 'initialize'):
                self._problems.append(f"{owner}: unknown constructor clause '{keyword}'")
                return False
            if keyword in seen:
                self._problems.append(f"{owner}: constructor clause '{keyword}' given twice")
                return False
            seen.add(keyword)
            if keyword == 'base':
                ctor.base_params = self._parse_params(params, owner)
            else:
                ctor.initialize_params = self._parse_params(params, owner)
        return True

    def _parse_params(self, params_str: str, owner: str) -> list[ParamDecl]:
        params = []
        if not params_str.strip():
            return params

        for p in params_str.split(','):
            p = p.strip()
            parts = p.rsplit(None, 1)
            if len(parts) != 2:
                self._problems.append(f"{owner}: parameter '{p}' needs a type and a name")
                continue
            params.append(ParamDecl(type=parts[0].strip(), name=parts[1].strip()))

        return params
