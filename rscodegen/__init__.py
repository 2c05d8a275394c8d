from .codegen import BuilderError, CodegenError, Formatter, SinkError
from .model import (
    AssociatedType, Block, Bound, Docs, Field, Fields, FieldsKind, Type, TypeDef, Variant,
)
from .items import Enum, Function, Impl, Struct, Trait
from .scope import Import, Item, Module, Raw, Scope
from .validation import ValidationResult, validate_scope
from .loader import SpecError, load_scope, load_scope_file

__all__ = [
    # rendering
    "Formatter", "CodegenError", "BuilderError", "SinkError",
    # model
    "Type", "Bound", "AssociatedType", "Field", "Fields", "FieldsKind", "Variant", "Docs",
    "TypeDef", "Block",
    # declarations
    "Function", "Struct", "Enum", "Trait", "Impl", "Import", "Module", "Raw", "Item", "Scope",
    # validation & loading
    "ValidationResult", "validate_scope", "SpecError", "load_scope", "load_scope_file",
]
