"""Generator options and their loading from bridgegen.toml"""

import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be used."""


@dataclass(frozen=True)
class GeneratorOptions:
    """Settings shared by both emitters"""

    namespace_prefix: str = "cxx_qt"
    base_class: str = "CxxQObject"
    base_header: str = "rust/cxx_qt.h"
    include_prefix: str = "cxx-qt-gen"
    # Refuse invocations that arrive before the post-construction routine ran
    guard_initialization: bool = False

    def namespace_for(self, stem: str) -> str:
        return f"{self.namespace_prefix}::{stem}" if self.namespace_prefix else stem

    def with_overrides(self, **overrides: Any) -> "GeneratorOptions":
        """Return a copy with every non-None override applied"""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def load_options(config_path: Path) -> GeneratorOptions:
    """Load options from the ``[bridgegen]`` table of a TOML file"""
    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigError(f"{config_path} does not exist")

    try:
        data = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"{config_path}: {exc}") from exc

    table = data.get("bridgegen", {})
    if not isinstance(table, dict):
        raise ConfigError(f"{config_path}: [bridgegen] must be a table")

    known = {f.name: f for f in fields(GeneratorOptions)}
    values: dict[str, Any] = {}
    for key, value in table.items():
        option = key.replace("-", "_")
        if option not in known:
            raise ConfigError(f"{config_path}: unknown option '{key}'")
        expected = bool if known[option].type in (bool, "bool") else str
        if not isinstance(value, expected):
            raise ConfigError(
                f"{config_path}: option '{key}' must be a {expected.__name__}"
            )
        values[option] = value

    return GeneratorOptions(**values)
