from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

from .items import Enum, Function, Impl, Struct, Trait
from .model import Block, Field, Type, Variant
from .scope import Module, Scope
from .types import (
    BlockSpec, EnumSpec, FieldSpec, FunctionSpec, ImplSpec, ModuleSpec, ScopeSpec, StructSpec,
    TraitSpec, TypeSpec, VariantSpec,
)

logger = logging.getLogger(__name__)


class SpecError(ValueError):
    """A plain-data declaration tree is malformed."""


def _require_str(data: Mapping[str, Any], key: str, where: str) -> str:
    value: Any = data.get(key)
    if not isinstance(value, str) or not value:
        raise SpecError(f"{where}: `{key}` missing or not a string")
    return value


def _str_list(data: Mapping[str, Any], key: str, where: str) -> list[str]:
    raw: Any = data.get(key, [])
    if not isinstance(raw, list) or not all(isinstance(v, str) for v in raw):
        raise SpecError(f"{where}: `{key}` must be a list of strings")
    return raw


def _dict_list(data: Mapping[str, Any], key: str, where: str) -> list[dict[str, Any]]:
    raw: Any = data.get(key, [])
    if not isinstance(raw, list) or not all(isinstance(v, dict) for v in raw):
        raise SpecError(f"{where}: `{key}` must be a list of objects")
    return raw


def mk_type(raw: TypeSpec) -> Type:
    if isinstance(raw, str):
        return Type(raw)
    if isinstance(raw, dict):
        ty = Type(_require_str(raw, "name", "type"))
        generics: Any = raw.get("generics", [])
        if not isinstance(generics, list):
            raise SpecError(f"type {ty.name}: `generics` must be a list")
        for g in generics:
            ty.generic(mk_type(g))
        return ty
    raise SpecError(f"type must be a string or an object, got {type(raw).__name__}")


def mk_field(fd: FieldSpec) -> Field:
    name = _require_str(fd, "name", "field")
    if "type" not in fd:
        raise SpecError(f"field {name}: `type` missing")
    return Field(
        name=name,
        ty=mk_type(fd["type"]),
        documentation=_str_list(fd, "doc", f"field {name}"),
        annotation=_str_list(fd, "annotation", f"field {name}"),
    )


def mk_block(raw: BlockSpec) -> Block:
    block = Block(before=raw.get("before", ""), after=raw.get("after"))
    for entry in _body_list(raw.get("body", []), "block"):
        _push_body(block, entry)
    return block


def _body_list(raw: Any, where: str) -> list[Any]:
    if not isinstance(raw, list):
        raise SpecError(f"{where}: `body` must be a list")
    return raw


def _push_body(target: Block | Function, entry: Any) -> None:
    if isinstance(entry, str):
        target.line(entry)
    elif isinstance(entry, dict):
        target.push_block(mk_block(entry))
    else:
        raise SpecError(f"body entries must be strings or blocks, got {type(entry).__name__}")


def mk_function(fd: FunctionSpec, in_trait: bool = False) -> Function:
    name = _require_str(fd, "name", "fn")
    where = f"fn {name}"
    func = Function(name, body=None if in_trait else [])
    func.in_trait = in_trait

    if "vis" in fd:
        func.vis(_require_str(fd, "vis", where))
    if "doc" in fd:
        func.doc(_require_str(fd, "doc", where))
    if "allow" in fd:
        func.allow(_require_str(fd, "allow", where))
    for attr in _str_list(fd, "attrs", where):
        func.attr(attr)
    if "extern_abi" in fd:
        func.extern_abi(_require_str(fd, "extern_abi", where))
    if fd.get("is_async"):
        func.set_async(True)
    for g in _str_list(fd, "generics", where):
        func.generic(g)

    receiver: Any = fd.get("receiver")
    if receiver is not None:
        if receiver not in ("self", "&self", "&mut self"):
            raise SpecError(f"{where}: unknown receiver {receiver!r}")
        func.receiver = receiver

    for arg in _dict_list(fd, "args", where):
        func.args.append(mk_field(arg))
    if "ret" in fd:
        func.ret(mk_type(fd["ret"]))
    for b in _dict_list(fd, "bounds", where):
        func.bound(_require_str(b, "name", f"{where} bound"), mk_type(b.get("type")))

    body: Any = fd.get("body")
    if "body" in fd and body is None:
        func.body = None
    elif body is not None:
        func.body = []
        for entry in _body_list(body, where):
            _push_body(func, entry)
    return func


def _apply_type_def(item: Struct | Enum | Trait, data: Mapping[str, Any], where: str) -> None:
    if "vis" in data:
        item.vis(_require_str(data, "vis", where))
    if "doc" in data:
        item.doc(_require_str(data, "doc", where))
    for d in _str_list(data, "derive", where):
        item.derive(d)
    for a in _str_list(data, "allow", where):
        item.allow(a)
    if "repr" in data:
        item.repr(_require_str(data, "repr", where))
    for m in _str_list(data, "macros", where):
        item.macro(m)
    for g in _str_list(data, "generics", where):
        item.generic(g)
    for b in _dict_list(data, "bounds", where):
        item.bound(_require_str(b, "name", f"{where} bound"), mk_type(b.get("type")))


def _apply_fields(target: Struct | Variant, data: StructSpec | VariantSpec, where: str) -> None:
    for fd in _dict_list(data, "fields", where):
        target.fields.push_named(mk_field(fd))
    tuple_fields: Any = data.get("tuple_fields", [])
    if not isinstance(tuple_fields, list):
        raise SpecError(f"{where}: `tuple_fields` must be a list")
    for ty in tuple_fields:
        target.fields.tuple(mk_type(ty))


def mk_struct(data: StructSpec) -> Struct:
    name = _require_str(data, "name", "struct")
    where = f"struct {name}"
    item = Struct(name)
    _apply_type_def(item, data, where)
    for attr in _str_list(data, "attrs", where):
        item.attr(attr)
    _apply_fields(item, data, where)
    return item


def mk_enum(data: EnumSpec) -> Enum:
    name = _require_str(data, "name", "enum")
    where = f"enum {name}"
    item = Enum(name)
    _apply_type_def(item, data, where)
    for vd in _dict_list(data, "variants", where):
        variant = item.new_variant(_require_str(vd, "name", f"{where} variant"))
        _apply_fields(variant, vd, f"{where}::{variant.name}")
    return item


def mk_trait(data: TraitSpec) -> Trait:
    name = _require_str(data, "name", "trait")
    where = f"trait {name}"
    item = Trait(name)
    _apply_type_def(item, data, where)
    parents: Any = data.get("parents", [])
    if not isinstance(parents, list):
        raise SpecError(f"{where}: `parents` must be a list")
    for p in parents:
        item.parent(mk_type(p))
    for ad in _dict_list(data, "associated_types", where):
        assoc = item.associated_type(_require_str(ad, "name", f"{where} associated type"))
        for b in ad.get("bounds", []):
            assoc.bound(mk_type(b))
    for fd in _dict_list(data, "fns", where):
        item.push_fn(mk_function(fd, in_trait=True))
    return item


def mk_impl(data: ImplSpec) -> Impl:
    if "target" not in data:
        raise SpecError("impl: `target` missing")
    item = Impl(mk_type(data["target"]))
    where = f"impl {item.target.name}"
    for g in _str_list(data, "generics", where):
        item.generic(g)
    if "trait" in data:
        item.for_trait(mk_type(data["trait"]))
    for m in _str_list(data, "macros", where):
        item.macro(m)
    for fd in _dict_list(data, "associated_types", where):
        assoc = mk_field(fd)
        item.associate_type(assoc.name, assoc.ty)
    for b in _dict_list(data, "bounds", where):
        item.bound(_require_str(b, "name", f"{where} bound"), mk_type(b.get("type")))
    for fd in _dict_list(data, "fns", where):
        item.push_fn(mk_function(fd))
    return item


def mk_module(data: ModuleSpec) -> Module:
    module = Module(_require_str(data, "name", "mod"))
    if "vis" in data:
        module.vis(_require_str(data, "vis", f"mod {module.name}"))
    _fill_scope(module.scope, data, f"mod {module.name}")
    return module


def _fill_scope(scope: Scope, data: ScopeSpec | ModuleSpec, where: str) -> None:
    for imp in _dict_list(data, "imports", where):
        entry = scope.import_(
            _require_str(imp, "path", f"{where} import"),
            _require_str(imp, "name", f"{where} import"),
        )
        if "vis" in imp:
            entry.vis(_require_str(imp, "vis", f"{where} import"))

    for item in _dict_list(data, "items", where):
        kind: Any = item.get("kind")
        if kind == "mod":
            scope.push_module(mk_module(item))
        elif kind == "struct":
            scope.push_struct(mk_struct(item))
        elif kind == "fn":
            scope.push_fn(mk_function(item))
        elif kind == "trait":
            scope.push_trait(mk_trait(item))
        elif kind == "enum":
            scope.push_enum(mk_enum(item))
        elif kind == "impl":
            scope.push_impl(mk_impl(item))
        elif kind == "raw":
            scope.raw(_require_str(item, "text", f"{where} raw"))
        else:
            raise SpecError(f"{where}: unknown item kind {kind!r}")
        logger.debug("%s: built %s item", where, kind)


def load_scope(data: ScopeSpec) -> Scope:
    if not isinstance(data, dict):
        raise SpecError("declaration tree must be a JSON object")
    scope = Scope()
    _fill_scope(scope, data, "scope")
    return scope


def load_scope_file(path: str | Path) -> Scope:
    text = Path(path).read_text(encoding="utf-8")
    try:
        data: Any = json.loads(text)
    except json.JSONDecodeError as e:
        raise SpecError(f"{path}: invalid JSON: {e}") from e
    logger.debug("loaded declaration tree from %s", path)
    return load_scope(data)
