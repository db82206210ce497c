from pathlib import Path

import pytest

from bridgegen.parser import BridgeParser
from bridgegen.syntax import InvokableDecl, ObjectDecl, PropertyDecl, SignalDecl

SAMPLES_DIR = Path(__file__).resolve().parent.parent / "samples"


@pytest.fixture
def my_object_decl() -> ObjectDecl:
    """MyObject with a notifying count property and a mutating increment."""
    return ObjectDecl(
        name="MyObject",
        properties=[PropertyDecl(name="count", type="i32")],
        invokables=[InvokableDecl(name="increment", is_mutating=True)],
        signals=[SignalDecl(name="countChanged")],
    )


@pytest.fixture
def counter_decl() -> ObjectDecl:
    """The Counter object from samples/counter.bridge."""
    text = (SAMPLES_DIR / "counter.bridge").read_text(encoding="utf-8")
    return BridgeParser(text).parse()[0]


@pytest.fixture
def samples_dir() -> Path:
    return SAMPLES_DIR
