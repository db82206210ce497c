"""
Bridge Generator Package

Parses object definitions (bridge IDL or JSON syntax trees) and generates:
  1. A Qt/C++ class declaration and definition
  2. A Rust shim with the cxx bridge and an implementation trait
"""

from .errors import (
    BridgeGenError, ParseFailure, NotRegistered, MalformedDefinition, SignatureMismatch,
    Violation, ViolationKind, UnsupportedType,
)
from .syntax import ObjectDecl, load_syntax_tree, objects_from_dict
from .parser import BridgeParser
from .types import Param, Property, Invokable, Signal, Constructor, BridgedObject
from .ir_builder import IRBuilder, build_object
from .type_registry import MarshalingKind, TypeBridge, TypeRegistry
from .validation import validate, check
from .layout import StoragePlan, plan_layout
from .config import GeneratorOptions, ConfigError, load_options
from .cpp_generator import CppGenerator
from .rust_generator import RustGenerator
from .consistency import check_consistency
from .translator import GeneratedArtifacts, BatchResult, translate, translate_batch

__all__ = [
    'BridgeGenError', 'ParseFailure', 'NotRegistered', 'MalformedDefinition',
    'SignatureMismatch', 'Violation', 'ViolationKind', 'UnsupportedType',
    'ObjectDecl', 'load_syntax_tree', 'objects_from_dict', 'BridgeParser',
    'Param', 'Property', 'Invokable', 'Signal', 'Constructor', 'BridgedObject',
    'IRBuilder', 'build_object',
    'MarshalingKind', 'TypeBridge', 'TypeRegistry',
    'validate', 'check', 'StoragePlan', 'plan_layout',
    'GeneratorOptions', 'ConfigError', 'load_options',
    'CppGenerator', 'RustGenerator', 'check_consistency',
    'GeneratedArtifacts', 'BatchResult', 'translate', 'translate_batch',
]
