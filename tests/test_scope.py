import pytest

from rscodegen import BuilderError, Formatter, Module, Raw, Scope, Trait


def test_module_mut() -> None:
    scope = Scope()
    scope.new_module("foo").import_("bar", "Bar")
    module = scope.get_module("foo")
    assert module is not None
    module.new_struct("Foo").field("bar", "Bar")
    assert str(scope) == (
        "mod foo {\n"
        "    use bar::Bar;\n"
        "\n"
        "    struct Foo {\n"
        "        bar: Bar,\n"
        "    }\n"
        "}"
    )


def test_get_or_new_module_is_idempotent() -> None:
    scope = Scope()
    assert scope.get_module("foo") is None
    first = scope.get_or_new_module("foo")
    first.import_("bar", "Bar")
    second = scope.get_or_new_module("foo")
    assert second is first
    second.new_struct("Foo").field("bar", "Bar")
    assert len(first.scope.items) == 1
    assert len(scope.items) == 1
    assert str(scope) == (
        "mod foo {\n"
        "    use bar::Bar;\n"
        "\n"
        "    struct Foo {\n"
        "        bar: Bar,\n"
        "    }\n"
        "}"
    )


def test_new_module_collision() -> None:
    scope = Scope()
    scope.new_module("foo")
    with pytest.raises(BuilderError, match="already exists"):
        scope.new_module("foo")
    with pytest.raises(BuilderError, match="already exists"):
        scope.push_module(Module("foo"))
    assert len(scope.items) == 1


def test_same_module_name_in_different_scopes() -> None:
    scope = Scope()
    outer = scope.new_module("a")
    outer.new_module("a")
    assert outer.get_module("a") is not None
    assert scope.get_module("a") is outer


def test_struct_inside_module_indentation() -> None:
    scope = Scope()
    scope.new_module("shapes").vis("pub").new_struct("Circle").field("radius", "f64")
    lines = scope.render().splitlines()
    assert lines[0] == "pub mod shapes {"
    assert lines[1] == "    struct Circle {"
    assert lines[2] == "        radius: f64,"
    assert lines[3] == "    }"
    assert lines[4] == "}"


def test_imports_render_first_and_dedupe() -> None:
    scope = Scope()
    scope.new_struct("A")
    scope.import_("std::fmt", "Debug")
    scope.import_("std::fmt", "Debug")
    scope.import_("std::io", "Write").vis("pub")
    assert len(scope.imports) == 2
    assert scope.render() == "use std::fmt::Debug;\nuse std::io::Write;\n\nstruct A;\n"


def test_import_visibility_not_rendered() -> None:
    scope = Scope()
    imp = scope.import_("crate", "Thing").vis("pub")
    assert imp.visibility == "pub"
    assert "pub use" not in scope.render()


def test_items_separated_by_blank_line() -> None:
    scope = Scope()
    scope.raw("// generated")
    scope.new_struct("A")
    scope.new_fn("f")
    assert scope.render() == "// generated\n\nstruct A;\n\nfn f() {\n}\n"
    assert isinstance(scope.items[0], Raw)


def test_nested_modules() -> None:
    scope = Scope()
    scope.new_module("a").new_module("b").new_fn("f").line("1")
    assert scope.render() == (
        "mod a {\n"
        "    mod b {\n"
        "        fn f() {\n"
        "            1\n"
        "        }\n"
        "    }\n"
        "}\n"
    )


def test_empty_scope_renders_empty() -> None:
    assert Scope().render() == ""
    assert str(Scope()) == ""


def test_render_with_custom_indent() -> None:
    scope = Scope()
    scope.new_fn("f").line("x")
    assert scope.render(indent="  ") == "fn f() {\n  x\n}\n"


def test_unknown_item_rejected() -> None:
    scope = Scope()
    scope.items.append(object())  # type: ignore[arg-type]
    with pytest.raises(BuilderError, match="unsupported item"):
        scope.render()


def test_failed_nested_render_resets_depth() -> None:
    scope = Scope()
    trait = scope.new_module("outer").new_module("inner").new_trait("T")
    trait.new_fn("f").visibility = "pub"
    fmt = Formatter()
    assert fmt.depth == 0
    with pytest.raises(BuilderError, match="visibility"):
        scope.to_code(fmt)
    assert fmt.depth == 0


def test_module_push_helpers_chain() -> None:
    module = Module("m")
    module.push_trait(Trait("T")).new_enum("E").new_variant("A")
    assert module.scope.render() == "trait T {\n}\n\nenum E {\n    A,\n}\n"
