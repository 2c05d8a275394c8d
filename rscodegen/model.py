"""Building blocks shared by every declaration kind.

Types with their generics, `where` bounds, struct/variant fields, doc
comments, the shared header of nominal type definitions, and the
statement-body tree used for function bodies.
"""

from __future__ import annotations

import copy
import enum
from dataclasses import dataclass, field
from typing import Union

from .codegen import BuilderError, Formatter, fmt_bound_rhs, fmt_bounds


# -----------------------------
# Types & bounds
# -----------------------------

@dataclass
class Type:
    name: str
    generics: list[Type] = field(default_factory=list)

    @classmethod
    def coerce(cls, value: TypeLike) -> Type:
        """Return an owned `Type` for a name or a type built elsewhere."""
        if isinstance(value, Type):
            return copy.deepcopy(value)
        if isinstance(value, str):
            return cls(value)
        raise TypeError(f"expected str or Type, got {type(value).__name__}")

    def generic(self, ty: TypeLike) -> Type:
        if "<" in self.name:
            raise BuilderError(f"type name already includes generics: {self.name!r}")
        self.generics.append(Type.coerce(ty))
        return self

    def to_code(self, fmt: Formatter) -> None:
        fmt.write(self.name)
        if self.generics:
            fmt.write("<")
            for i, ty in enumerate(self.generics):
                if i:
                    fmt.write(", ")
                ty.to_code(fmt)
            fmt.write(">")

    def __str__(self) -> str:
        fmt = Formatter()
        self.to_code(fmt)
        return fmt.getvalue()


TypeLike = Union[str, Type]


@dataclass
class Bound:
    """A `where`-style constraint: `name: bound[0] + bound[1] + ...`."""
    name: str
    bound: list[Type] = field(default_factory=list)


@dataclass
class AssociatedType:
    """An associated type declared by a trait, e.g. `type Item: Clone;`."""
    inner: Bound

    @property
    def name(self) -> str:
        return self.inner.name

    def bound(self, ty: TypeLike) -> AssociatedType:
        self.inner.bound.append(Type.coerce(ty))
        return self

    def to_code(self, fmt: Formatter) -> None:
        fmt.write(f"type {self.inner.name}")
        if self.inner.bound:
            fmt.write(": ")
            fmt_bound_rhs(self.inner.bound, fmt)
        fmt.write(";\n")


# -----------------------------
# Fields
# -----------------------------

@dataclass
class Field:
    name: str
    ty: Type
    documentation: list[str] = field(default_factory=list)
    annotation: list[str] = field(default_factory=list)

    @classmethod
    def new(cls, name: str, ty: TypeLike) -> Field:
        return cls(name=name, ty=Type.coerce(ty))

    def doc(self, documentation: list[str]) -> Field:
        self.documentation = list(documentation)
        return self

    def annotate(self, annotation: list[str]) -> Field:
        self.annotation = list(annotation)
        return self


class FieldsKind(enum.Enum):
    EMPTY = "empty"
    TUPLE = "tuple"
    NAMED = "named"


class Fields:
    """
    Field list of a struct or enum variant.
    Starts empty; the first push decides between tuple and named fields
    and the other kind is rejected from then on.
    """

    def __init__(self) -> None:
        self.kind: FieldsKind = FieldsKind.EMPTY
        self._named: list[Field] = []
        self._tuple: list[Type] = []

    @property
    def named_fields(self) -> list[Field]:
        return list(self._named)

    @property
    def tuple_types(self) -> list[Type]:
        return list(self._tuple)

    def __len__(self) -> int:
        return len(self._named) + len(self._tuple)

    def push_named(self, fld: Field) -> Fields:
        if self.kind is FieldsKind.TUPLE:
            raise BuilderError(f"cannot add named field {fld.name!r}: field list is tuple")
        self.kind = FieldsKind.NAMED
        self._named.append(fld)
        return self

    def named(self, name: str, ty: TypeLike) -> Fields:
        return self.push_named(Field.new(name, ty))

    def tuple(self, ty: TypeLike) -> Fields:
        if self.kind is FieldsKind.NAMED:
            raise BuilderError("cannot add tuple field: field list is named")
        owned = Type.coerce(ty)
        self.kind = FieldsKind.TUPLE
        self._tuple.append(owned)
        return self

    def to_code(self, fmt: Formatter, after: str = "") -> None:
        if self.kind is FieldsKind.NAMED:
            with fmt.block(after):
                for f in self._named:
                    for doc in f.documentation:
                        fmt.write(f"/// {doc}\n")
                    for ann in f.annotation:
                        fmt.write(f"{ann}\n")
                    fmt.write(f"{f.name}: ")
                    f.ty.to_code(fmt)
                    fmt.write(",\n")
        elif self.kind is FieldsKind.TUPLE:
            fmt.write("(")
            for i, ty in enumerate(self._tuple):
                if i:
                    fmt.write(", ")
                ty.to_code(fmt)
            fmt.write(")")


@dataclass
class Variant:
    name: str
    fields: Fields = field(default_factory=Fields)

    def named(self, name: str, ty: TypeLike) -> Variant:
        self.fields.named(name, ty)
        return self

    def tuple(self, ty: TypeLike) -> Variant:
        self.fields.tuple(ty)
        return self

    def to_code(self, fmt: Formatter) -> None:
        fmt.write(self.name)
        if self.fields.kind is FieldsKind.NAMED:
            # struct-like variant: the comma goes right after the closing brace
            self.fields.to_code(fmt, after=",")
        else:
            self.fields.to_code(fmt)
            fmt.write(",\n")


# -----------------------------
# Docs & shared type header
# -----------------------------

@dataclass
class Docs:
    docs: str

    def to_code(self, fmt: Formatter) -> None:
        for ln in self.docs.splitlines():
            fmt.write(f"/// {ln}\n")


@dataclass
class TypeDef:
    """Header state shared by structs, enums and traits."""
    ty: Type
    vis: str | None = None
    docs: Docs | None = None
    derive: list[str] = field(default_factory=list)
    allow: list[str] = field(default_factory=list)
    repr: str | None = None
    bounds: list[Bound] = field(default_factory=list)
    macros: list[str] = field(default_factory=list)

    @classmethod
    def new(cls, name: str) -> TypeDef:
        return cls(ty=Type(name))

    def bound(self, name: str, ty: TypeLike) -> None:
        self.bounds.append(Bound(name, [Type.coerce(ty)]))

    def fmt_head(self, keyword: str, parents: list[Type], fmt: Formatter) -> None:
        if self.docs is not None:
            self.docs.to_code(fmt)
        for allow in self.allow:
            fmt.write(f"#[allow({allow})]\n")
        if self.derive:
            fmt.write(f"#[derive({', '.join(self.derive)})]\n")
        if self.repr is not None:
            fmt.write(f"#[repr({self.repr})]\n")
        for m in self.macros:
            fmt.write(f"{m}\n")

        if self.vis is not None:
            fmt.write(f"{self.vis} ")
        fmt.write(f"{keyword} ")
        self.ty.to_code(fmt)

        for i, parent in enumerate(parents):
            fmt.write(": " if i == 0 else " + ")
            parent.to_code(fmt)

        fmt_bounds(self.bounds, fmt)


# -----------------------------
# Statement bodies
# -----------------------------

@dataclass
class Block:
    """
    A braced group of lines inside a function body.
    `before` is emitted ahead of the opening brace (e.g. `if x`), `after`
    right behind the closing one (e.g. `;`).
    """
    before: str | None = ""
    after: str | None = None
    body: list[Body] = field(default_factory=list)

    def line(self, line: object) -> Block:
        self.body.append(str(line))
        return self

    def push_block(self, block: Block) -> Block:
        self.body.append(block)
        return self

    def set_after(self, after: str) -> Block:
        self.after = after
        return self

    def to_code(self, fmt: Formatter) -> None:
        if self.before:
            fmt.write(self.before)
        if not fmt.is_start_of_line():
            fmt.write(" ")
        fmt.write("{\n")
        with fmt.indented():
            fmt_body(self.body, fmt)
        fmt.write("}")
        if self.after:
            fmt.write(self.after)
        fmt.write("\n")


Body = Union[str, Block]


def fmt_body(body: list[Body], fmt: Formatter) -> None:
    for b in body:
        if isinstance(b, Block):
            b.to_code(fmt)
        else:
            fmt.write(f"{b}\n")
