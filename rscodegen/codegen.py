from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from .model import Bound, Type


class CodegenError(Exception):
    """Base class for every error raised while building or rendering."""


class BuilderError(CodegenError):
    """The declaration tree was built in a way the renderer cannot honor."""


class SinkError(CodegenError):
    """The output sink rejected a write; the text emitted so far is partial."""


class Sink(Protocol):
    def write(self, text: str, /) -> Any: ...


@dataclass
class Formatter:
    """
    Indentation-aware text sink.
    Tracks depth and line-start state so nested blocks never need to
    know where they are rendered.
    """
    indent: str = "    "
    sink: Sink | None = None
    _parts: list[str] = field(default_factory=list)
    _depth: int = 0
    _at_line_start: bool = True

    @property
    def depth(self) -> int:
        return self._depth

    def is_start_of_line(self) -> bool:
        return self._at_line_start

    def write(self, text: str) -> None:
        for i, piece in enumerate(text.split("\n")):
            if i:
                self._emit("\n")
                self._at_line_start = True
            if not piece:
                continue
            if self._at_line_start and self._depth:
                self._emit(self.indent * self._depth)
            self._emit(piece)
            self._at_line_start = False

    def indented(self) -> "_Indent":
        return _Indent(self)

    def block(self, after: str = "") -> "_Block":
        return _Block(self, after)

    def getvalue(self) -> str:
        return "".join(self._parts)

    def _emit(self, text: str) -> None:
        if self.sink is None:
            self._parts.append(text)
            return
        try:
            self.sink.write(text)
        except OSError as e:
            raise SinkError(f"output sink rejected write: {e}") from e


class _Indent:
    def __init__(self, fmt: Formatter) -> None:
        self.fmt = fmt

    def __enter__(self) -> Formatter:
        self.fmt._depth += 1
        return self.fmt

    def __exit__(self, exc_type, exc, tb) -> None:
        self.fmt._depth -= 1


class _Block:
    """`{`, an indented body, `}`. The brace is only closed on success."""

    def __init__(self, fmt: Formatter, after: str = "") -> None:
        self.fmt = fmt
        self.after = after
        self._indent = _Indent(fmt)

    def __enter__(self) -> Formatter:
        if not self.fmt.is_start_of_line():
            self.fmt.write(" ")
        self.fmt.write("{\n")
        return self._indent.__enter__()

    def __exit__(self, exc_type, exc, tb) -> None:
        self._indent.__exit__(exc_type, exc, tb)
        if exc_type is None:
            self.fmt.write(f"}}{self.after}\n")


# -----------------------------
# Shared fragments
# -----------------------------

def fmt_generics(generics: list[str], fmt: Formatter) -> None:
    if generics:
        fmt.write(f"<{', '.join(generics)}>")


def fmt_bound_rhs(tys: list[Type], fmt: Formatter) -> None:
    for i, ty in enumerate(tys):
        if i:
            fmt.write(" + ")
        ty.to_code(fmt)


def fmt_bounds(bounds: list[Bound], fmt: Formatter) -> None:
    if not bounds:
        return
    fmt.write("\n")
    for i, bound in enumerate(bounds):
        # continuation lines line up under the first bound name
        fmt.write(f"where {bound.name}: " if i == 0 else f"      {bound.name}: ")
        fmt_bound_rhs(bound.bound, fmt)
        fmt.write(",\n")
