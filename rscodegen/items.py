from __future__ import annotations

import copy
from dataclasses import dataclass, field

from .codegen import BuilderError, Formatter, fmt_bounds, fmt_generics
from .model import (
    AssociatedType, Block, Body, Bound, Docs, Field, Fields, FieldsKind, Type, TypeDef,
    TypeLike, Variant, fmt_body,
)


# -----------------------------
# Functions
# -----------------------------

@dataclass
class Function:
    name: str
    docs: Docs | None = None
    lint_allow: str | None = None
    visibility: str | None = None
    generics: list[str] = field(default_factory=list)
    receiver: str | None = None
    args: list[Field] = field(default_factory=list)
    return_type: Type | None = None
    bounds: list[Bound] = field(default_factory=list)
    # None means "signature only", which only a trait accepts
    body: list[Body] | None = field(default_factory=list)
    attributes: list[str] = field(default_factory=list)
    abi: str | None = None
    is_async: bool = False
    in_trait: bool = field(default=False, repr=False, compare=False)

    def doc(self, docs: str) -> Function:
        self.docs = Docs(docs)
        return self

    def allow(self, allow: str) -> Function:
        self.lint_allow = allow
        return self

    def vis(self, vis: str) -> Function:
        if self.in_trait:
            raise BuilderError(f"trait fns do not have visibility modifiers: {self.name!r}")
        self.visibility = vis
        return self

    def set_async(self, is_async: bool = True) -> Function:
        self.is_async = is_async
        return self

    def extern_abi(self, abi: str) -> Function:
        self.abi = abi
        return self

    def generic(self, name: str) -> Function:
        self.generics.append(name)
        return self

    def arg_self(self) -> Function:
        self.receiver = "self"
        return self

    def arg_ref_self(self) -> Function:
        self.receiver = "&self"
        return self

    def arg_mut_self(self) -> Function:
        self.receiver = "&mut self"
        return self

    def arg(self, name: str, ty: TypeLike) -> Function:
        self.args.append(Field.new(name, ty))
        return self

    def ret(self, ty: TypeLike) -> Function:
        self.return_type = Type.coerce(ty)
        return self

    def bound(self, name: str, ty: TypeLike) -> Function:
        self.bounds.append(Bound(name, [Type.coerce(ty)]))
        return self

    def attr(self, attribute: str) -> Function:
        self.attributes.append(attribute)
        return self

    def line(self, line: object) -> Function:
        if self.body is None:
            self.body = []
        self.body.append(str(line))
        return self

    def push_block(self, block: Block) -> Function:
        if self.body is None:
            self.body = []
        self.body.append(block)
        return self

    def to_code(self, fmt: Formatter, is_trait: bool = False) -> None:
        if self.docs is not None:
            self.docs.to_code(fmt)
        if self.lint_allow is not None:
            fmt.write(f"#[allow({self.lint_allow})]\n")
        for attr in self.attributes:
            fmt.write(f"#[{attr}]\n")

        if is_trait and self.visibility is not None:
            raise BuilderError(f"trait fns do not have visibility modifiers: {self.name!r}")

        if self.visibility is not None:
            fmt.write(f"{self.visibility} ")
        if self.abi is not None:
            fmt.write(f'extern "{self.abi}" ')
        if self.is_async:
            fmt.write("async ")

        fmt.write(f"fn {self.name}")
        fmt_generics(self.generics, fmt)

        fmt.write("(")
        if self.receiver is not None:
            fmt.write(self.receiver)
        for i, arg in enumerate(self.args):
            if i or self.receiver is not None:
                fmt.write(", ")
            fmt.write(f"{arg.name}: ")
            arg.ty.to_code(fmt)
        fmt.write(")")

        if self.return_type is not None:
            fmt.write(" -> ")
            self.return_type.to_code(fmt)

        fmt_bounds(self.bounds, fmt)

        if self.body is not None:
            with fmt.block():
                fmt_body(self.body, fmt)
        elif is_trait:
            fmt.write(";\n")
        else:
            raise BuilderError(f"fn {self.name!r} must define a body outside of a trait")


# -----------------------------
# Nominal types
# -----------------------------

class _TypeDefMixin:
    """Header mutators delegating to the owned `TypeDef`."""
    type_def: TypeDef

    @property
    def ty(self) -> Type:
        return self.type_def.ty

    def vis(self, vis: str):
        self.type_def.vis = vis
        return self

    def generic(self, name: str):
        self.type_def.ty.generic(name)
        return self

    def bound(self, name: str, ty: TypeLike):
        self.type_def.bound(name, ty)
        return self

    def doc(self, docs: str):
        self.type_def.docs = Docs(docs)
        return self

    def macro(self, macro: str):
        self.type_def.macros.append(macro)
        return self

    def derive(self, name: str):
        self.type_def.derive.append(name)
        return self

    def allow(self, allow: str):
        self.type_def.allow.append(allow)
        return self

    def repr(self, repr: str):
        self.type_def.repr = repr
        return self


class Struct(_TypeDefMixin):
    def __init__(self, name: str) -> None:
        self.type_def = TypeDef.new(name)
        self.fields = Fields()
        self.attributes: list[str] = []

    def push_field(self, fld: Field) -> Struct:
        self.fields.push_named(fld)
        return self

    def field(self, name: str, ty: TypeLike) -> Struct:
        self.fields.named(name, ty)
        return self

    def tuple_field(self, ty: TypeLike) -> Struct:
        self.fields.tuple(ty)
        return self

    def attr(self, attribute: str) -> Struct:
        self.attributes.append(attribute)
        return self

    def to_code(self, fmt: Formatter) -> None:
        for a in self.attributes:
            fmt.write(f"{a}\n")
        self.type_def.fmt_head("struct", [], fmt)
        self.fields.to_code(fmt)
        if self.fields.kind is not FieldsKind.NAMED:
            fmt.write(";\n")


class Enum(_TypeDefMixin):
    def __init__(self, name: str) -> None:
        self.type_def = TypeDef.new(name)
        self.variants: list[Variant] = []

    def new_variant(self, name: str) -> Variant:
        self.push_variant(Variant(name))
        return self.variants[-1]

    def push_variant(self, item: Variant) -> Enum:
        self.variants.append(item)
        return self

    def to_code(self, fmt: Formatter) -> None:
        self.type_def.fmt_head("enum", [], fmt)
        with fmt.block():
            for v in self.variants:
                v.to_code(fmt)


class Trait(_TypeDefMixin):
    def __init__(self, name: str) -> None:
        self.type_def = TypeDef.new(name)
        self.parents: list[Type] = []
        self.associated_tys: list[AssociatedType] = []
        self.fns: list[Function] = []

    def parent(self, ty: TypeLike) -> Trait:
        self.parents.append(Type.coerce(ty))
        return self

    def associated_type(self, name: str) -> AssociatedType:
        self.associated_tys.append(AssociatedType(Bound(name)))
        return self.associated_tys[-1]

    def new_fn(self, name: str) -> Function:
        self.push_fn(Function(name, body=None))
        return self.fns[-1]

    def push_fn(self, item: Function) -> Trait:
        if item.visibility is not None:
            raise BuilderError(f"trait fns do not have visibility modifiers: {item.name!r}")
        # the trait keeps its own copy; the caller's function is left untouched
        item = copy.deepcopy(item)
        item.in_trait = True
        self.fns.append(item)
        return self

    def to_code(self, fmt: Formatter) -> None:
        self.type_def.fmt_head("trait", self.parents, fmt)
        with fmt.block():
            for ty in self.associated_tys:
                ty.to_code(fmt)
            for i, func in enumerate(self.fns):
                if i or self.associated_tys:
                    fmt.write("\n")
                func.to_code(fmt, is_trait=True)


# -----------------------------
# Impl blocks
# -----------------------------

class Impl:
    def __init__(self, target: TypeLike) -> None:
        self.target = Type.coerce(target)
        self.generics: list[str] = []
        self.impl_trait: Type | None = None
        self.assoc_tys: list[Field] = []
        self.bounds: list[Bound] = []
        self.fns: list[Function] = []
        self.macros: list[str] = []

    def generic(self, name: str) -> Impl:
        self.generics.append(name)
        return self

    def target_generic(self, ty: TypeLike) -> Impl:
        self.target.generic(ty)
        return self

    def for_trait(self, ty: TypeLike) -> Impl:
        self.impl_trait = Type.coerce(ty)
        return self

    def macro(self, macro: str) -> Impl:
        self.macros.append(macro)
        return self

    def associate_type(self, name: str, ty: TypeLike) -> Impl:
        self.assoc_tys.append(Field.new(name, ty))
        return self

    def bound(self, name: str, ty: TypeLike) -> Impl:
        self.bounds.append(Bound(name, [Type.coerce(ty)]))
        return self

    def new_fn(self, name: str) -> Function:
        self.push_fn(Function(name))
        return self.fns[-1]

    def push_fn(self, item: Function) -> Impl:
        if item.body is None:
            raise BuilderError(f"impl blocks must define fn bodies: {item.name!r}")
        self.fns.append(item)
        return self

    def to_code(self, fmt: Formatter) -> None:
        for m in self.macros:
            fmt.write(f"{m}\n")
        fmt.write("impl")
        fmt_generics(self.generics, fmt)
        if self.impl_trait is not None:
            fmt.write(" ")
            self.impl_trait.to_code(fmt)
            fmt.write(" for")
        fmt.write(" ")
        self.target.to_code(fmt)
        fmt_bounds(self.bounds, fmt)

        with fmt.block():
            for ty in self.assoc_tys:
                fmt.write(f"type {ty.name} = ")
                ty.ty.to_code(fmt)
                fmt.write(";\n")
            for i, func in enumerate(self.fns):
                if i or self.assoc_tys:
                    fmt.write("\n")
                func.to_code(fmt)
