from hypothesis import assume, given, strategies as st
import pytest

from rscodegen import BuilderError, Fields, FieldsKind, Formatter, Scope, Type

NAMES = st.from_regex(r"[A-Za-z_][A-Za-z0-9_]{0,8}", fullmatch=True)


def _with_generics(name: str, children: list[Type]) -> Type:
    ty = Type(name)
    for child in children:
        ty.generic(child)
    return ty


TYPES = st.recursive(
    st.builds(Type, NAMES),
    lambda children: st.builds(_with_generics, NAMES, st.lists(children, min_size=1, max_size=3)),
    max_leaves=20,
)


def _depth(ty: Type) -> int:
    if not ty.generics:
        return 0
    return 1 + max(_depth(g) for g in ty.generics)


@given(TYPES)
def test_angle_brackets_balance_to_construction_depth(ty: Type) -> None:
    text = str(ty)
    level = 0
    deepest = 0
    for ch in text:
        if ch == "<":
            level += 1
            deepest = max(deepest, level)
        elif ch == ">":
            level -= 1
            assert level >= 0
    assert level == 0
    assert deepest == _depth(ty)


@given(TYPES, NAMES)
def test_generic_never_added_to_rendered_type(ty: Type, extra: str) -> None:
    assume(ty.generics)
    bracketed = Type(str(ty))
    with pytest.raises(BuilderError):
        bracketed.generic(extra)
    assert bracketed.generics == []


def _build_scope(structs: list[tuple[str, list[tuple[str, Type]]]]) -> Scope:
    scope = Scope()
    module = scope.new_module("generated")
    for name, fields in structs:
        s = module.new_struct(name)
        for field_name, ty in fields:
            s.field(field_name, ty)
        f = module.new_impl(name).new_fn("describe").arg_ref_self().ret("String")
        f.line(f'"{name}".to_string()')
    return scope


STRUCTS = st.lists(
    st.tuples(NAMES, st.lists(st.tuples(NAMES, TYPES), max_size=4)),
    max_size=4,
)


@given(STRUCTS)
def test_render_is_repeatable_and_balanced(structs) -> None:
    scope = _build_scope(structs)
    fmt = Formatter()
    scope.to_code(fmt)
    assert fmt.depth == 0
    first = fmt.getvalue()
    assert scope.render() == first
    assert scope.render() == first
    assert first.count("{") == first.count("}")


@given(st.lists(st.tuples(NAMES, TYPES), min_size=1, max_size=5), TYPES)
def test_mode_violation_keeps_named_state(named, tuple_ty: Type) -> None:
    fields = Fields()
    for name, ty in named:
        fields.named(name, ty)
    with pytest.raises(BuilderError):
        fields.tuple(tuple_ty)
    assert fields.kind is FieldsKind.NAMED
    assert [f.name for f in fields.named_fields] == [n for n, _ in named]
    assert fields.tuple_types == []
