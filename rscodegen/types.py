from __future__ import annotations

from typing import Literal, NotRequired, TypedDict, Union


class NamedTypeSpec(TypedDict):
    name: str
    generics: NotRequired[list[TypeSpec]]


TypeSpec = Union[str, NamedTypeSpec]


class FieldSpec(TypedDict):
    name: str
    type: TypeSpec
    doc: NotRequired[list[str]]
    annotation: NotRequired[list[str]]


class BoundSpec(TypedDict):
    name: str
    type: TypeSpec


class BlockSpec(TypedDict, total=False):
    before: str
    after: str
    body: list[BodySpec]


BodySpec = Union[str, BlockSpec]


class FunctionSpec(TypedDict):
    kind: NotRequired[Literal["fn"]]
    name: str
    vis: NotRequired[str]
    doc: NotRequired[str]
    allow: NotRequired[str]
    attrs: NotRequired[list[str]]
    extern_abi: NotRequired[str]
    is_async: NotRequired[bool]
    generics: NotRequired[list[str]]
    receiver: NotRequired[Literal["self", "&self", "&mut self"]]
    args: NotRequired[list[FieldSpec]]
    ret: NotRequired[TypeSpec]
    bounds: NotRequired[list[BoundSpec]]
    # omitted: default body for impls/scopes, signature only for traits
    body: NotRequired[list[BodySpec] | None]


class _TypeDefSpec(TypedDict):
    name: str
    vis: NotRequired[str]
    doc: NotRequired[str]
    derive: NotRequired[list[str]]
    allow: NotRequired[list[str]]
    repr: NotRequired[str]
    macros: NotRequired[list[str]]
    generics: NotRequired[list[str]]
    bounds: NotRequired[list[BoundSpec]]


class StructSpec(_TypeDefSpec):
    kind: Literal["struct"]
    attrs: NotRequired[list[str]]
    fields: NotRequired[list[FieldSpec]]
    tuple_fields: NotRequired[list[TypeSpec]]


class VariantSpec(TypedDict):
    name: str
    fields: NotRequired[list[FieldSpec]]
    tuple_fields: NotRequired[list[TypeSpec]]


class EnumSpec(_TypeDefSpec):
    kind: Literal["enum"]
    variants: NotRequired[list[VariantSpec]]


class AssociatedTypeSpec(TypedDict):
    name: str
    bounds: NotRequired[list[TypeSpec]]


class TraitSpec(_TypeDefSpec):
    kind: Literal["trait"]
    parents: NotRequired[list[TypeSpec]]
    associated_types: NotRequired[list[AssociatedTypeSpec]]
    fns: NotRequired[list[FunctionSpec]]


class ImplSpec(TypedDict):
    kind: Literal["impl"]
    target: TypeSpec
    generics: NotRequired[list[str]]
    trait: NotRequired[TypeSpec]
    macros: NotRequired[list[str]]
    associated_types: NotRequired[list[FieldSpec]]
    bounds: NotRequired[list[BoundSpec]]
    fns: NotRequired[list[FunctionSpec]]


class RawSpec(TypedDict):
    kind: Literal["raw"]
    text: str


class ImportSpec(TypedDict):
    path: str
    name: str
    vis: NotRequired[str]


class ModuleSpec(TypedDict):
    kind: Literal["mod"]
    name: str
    vis: NotRequired[str]
    imports: NotRequired[list[ImportSpec]]
    items: NotRequired[list[ItemSpec]]


ItemSpec = Union[ModuleSpec, StructSpec, FunctionSpec, TraitSpec, EnumSpec, ImplSpec, RawSpec]


class ScopeSpec(TypedDict, total=False):
    imports: list[ImportSpec]
    items: list[ItemSpec]
