import io

import pytest

from rscodegen import BuilderError, Field, Fields, FieldsKind, Formatter, SinkError, Type


def test_write_indents_each_line_at_depth() -> None:
    fmt = Formatter()
    fmt.write("a\n")
    with fmt.indented():
        fmt.write("b\nc\n")
    fmt.write("d")
    assert fmt.getvalue() == "a\n    b\n    c\nd"


def test_empty_lines_are_not_indented() -> None:
    fmt = Formatter()
    with fmt.indented():
        fmt.write("x\n\ny\n")
    assert fmt.getvalue() == "    x\n\n    y\n"


def test_block_adds_separating_space_mid_line() -> None:
    fmt = Formatter()
    fmt.write("loop")
    with fmt.block():
        fmt.write("body;\n")
    assert fmt.getvalue() == "loop {\n    body;\n}\n"


def test_block_at_line_start_has_no_space() -> None:
    fmt = Formatter()
    with fmt.block():
        fmt.write("x\n")
    assert fmt.getvalue() == "{\n    x\n}\n"


def test_custom_indent_unit() -> None:
    fmt = Formatter(indent="\t")
    fmt.write("mod a")
    with fmt.block():
        fmt.write("mod b")
        with fmt.block():
            fmt.write("x\n")
    assert fmt.getvalue() == "mod a {\n\tmod b {\n\t\tx\n\t}\n}\n"


def test_block_restores_depth_when_body_fails() -> None:
    fmt = Formatter()
    fmt.write("outer")
    with pytest.raises(RuntimeError, match="boom"):
        with fmt.block():
            with fmt.block():
                raise RuntimeError("boom")
    assert fmt.depth == 0
    # the aborted block is never closed
    assert not fmt.getvalue().endswith("}\n")


def test_writes_go_to_external_sink() -> None:
    out = io.StringIO()
    fmt = Formatter(sink=out)
    fmt.write("fn f()")
    with fmt.block():
        fmt.write("g();\n")
    assert out.getvalue() == "fn f() {\n    g();\n}\n"
    assert fmt.getvalue() == ""


class _BrokenSink:
    def __init__(self, fail_after: int) -> None:
        self.calls = 0
        self.fail_after = fail_after

    def write(self, text: str) -> int:
        self.calls += 1
        if self.calls > self.fail_after:
            raise OSError("disk full")
        return len(text)


def test_sink_failure_aborts_with_sink_error() -> None:
    fmt = Formatter(sink=_BrokenSink(fail_after=2))
    with pytest.raises(SinkError, match="disk full"):
        fmt.write("struct A")
        with fmt.block():
            fmt.write("a: u8,\n")
    assert fmt.depth == 0


def test_type_with_nested_generics() -> None:
    ty = Type("HashMap").generic("K").generic(Type("Vec").generic("u8"))
    assert str(ty) == "HashMap<K, Vec<u8>>"


def test_generic_on_bracketed_name_rejected() -> None:
    ty = Type("Vec<u8>")
    with pytest.raises(BuilderError, match="already includes generics"):
        ty.generic("T")
    assert ty.generics == []


def test_coerce_copies_type() -> None:
    shared = Type("Vec").generic("u8")
    owned = Type.coerce(shared)
    owned.generics.append(Type("extra"))
    assert str(shared) == "Vec<u8>"


def test_fields_named_then_tuple_rejected() -> None:
    f = Fields()
    f.named("a", "u8")
    with pytest.raises(BuilderError, match="field list is named"):
        f.tuple("u16")
    assert f.kind is FieldsKind.NAMED
    assert [x.name for x in f.named_fields] == ["a"]
    assert f.tuple_types == []


def test_fields_tuple_then_named_rejected() -> None:
    f = Fields()
    f.tuple("u8")
    with pytest.raises(BuilderError, match="field list is tuple"):
        f.push_named(Field.new("a", "u8"))
    assert f.kind is FieldsKind.TUPLE
    assert len(f) == 1


def test_empty_fields_render_nothing() -> None:
    fmt = Formatter()
    Fields().to_code(fmt)
    assert fmt.getvalue() == ""


def test_named_fields_with_doc_and_annotation() -> None:
    f = Fields()
    f.push_named(
        Field.new("name", "String").doc(["The name"]).annotate(['#[serde(rename = "n")]'])
    )
    f.named("tags", Type("Vec").generic("String"))
    fmt = Formatter()
    fmt.write("struct S")
    f.to_code(fmt)
    assert fmt.getvalue() == (
        "struct S {\n"
        "    /// The name\n"
        '    #[serde(rename = "n")]\n'
        "    name: String,\n"
        "    tags: Vec<String>,\n"
        "}\n"
    )
