from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union

from .codegen import BuilderError, Formatter, Sink
from .items import Enum, Function, Impl, Struct, Trait

logger = logging.getLogger(__name__)


@dataclass
class Import:
    line: str
    # stored for callers, never rendered
    visibility: str | None = None

    @classmethod
    def new(cls, path: str, ty: str) -> Import:
        return cls(line=f"{path}::{ty}")

    def vis(self, vis: str) -> Import:
        self.visibility = vis
        return self

    def to_code(self) -> str:
        return f"use {self.line};"


@dataclass
class Raw:
    """Text emitted exactly as given."""
    text: str


class Module:
    def __init__(self, name: str) -> None:
        self.name = name
        self.visibility: str | None = None
        self.scope = Scope()

    def vis(self, vis: str) -> Module:
        self.visibility = vis
        return self

    def import_(self, path: str, ty: str) -> Module:
        self.scope.import_(path, ty)
        return self

    def new_module(self, name: str) -> Module:
        return self.scope.new_module(name)

    def get_module(self, name: str) -> Module | None:
        return self.scope.get_module(name)

    def get_or_new_module(self, name: str) -> Module:
        return self.scope.get_or_new_module(name)

    def push_module(self, item: Module) -> Module:
        self.scope.push_module(item)
        return self

    def new_struct(self, name: str) -> Struct:
        return self.scope.new_struct(name)

    def push_struct(self, item: Struct) -> Module:
        self.scope.push_struct(item)
        return self

    def new_fn(self, name: str) -> Function:
        return self.scope.new_fn(name)

    def push_fn(self, item: Function) -> Module:
        self.scope.push_fn(item)
        return self

    def new_trait(self, name: str) -> Trait:
        return self.scope.new_trait(name)

    def push_trait(self, item: Trait) -> Module:
        self.scope.push_trait(item)
        return self

    def new_enum(self, name: str) -> Enum:
        return self.scope.new_enum(name)

    def push_enum(self, item: Enum) -> Module:
        self.scope.push_enum(item)
        return self

    def new_impl(self, target: str) -> Impl:
        return self.scope.new_impl(target)

    def push_impl(self, item: Impl) -> Module:
        self.scope.push_impl(item)
        return self

    def to_code(self, fmt: Formatter) -> None:
        if self.visibility is not None:
            fmt.write(f"{self.visibility} ")
        fmt.write(f"mod {self.name}")
        with fmt.block():
            self.scope.to_code(fmt)


Item = Union[Module, Struct, Function, Trait, Enum, Impl, Raw]


class Scope:
    """
    Root of a declaration tree.
    Imports render first, then items in the order they were pushed.
    """

    def __init__(self) -> None:
        self._imports: dict[str, Import] = {}
        self.items: list[Item] = []

    @property
    def imports(self) -> list[Import]:
        return list(self._imports.values())

    # ----------- building ------------

    def import_(self, path: str, ty: str) -> Import:
        imp = Import.new(path, ty)
        return self._imports.setdefault(imp.line, imp)

    def new_module(self, name: str) -> Module:
        self.push_module(Module(name))
        return self.items[-1]  # type: ignore[return-value]

    def get_module(self, name: str) -> Module | None:
        return next(
            (it for it in self.items if isinstance(it, Module) and it.name == name),
            None,
        )

    def get_or_new_module(self, name: str) -> Module:
        existing = self.get_module(name)
        if existing is not None:
            return existing
        return self.new_module(name)

    def push_module(self, item: Module) -> Scope:
        if self.get_module(item.name) is not None:
            raise BuilderError(f"module {item.name!r} already exists in this scope")
        self.items.append(item)
        return self

    def new_struct(self, name: str) -> Struct:
        self.push_struct(Struct(name))
        return self.items[-1]  # type: ignore[return-value]

    def push_struct(self, item: Struct) -> Scope:
        self.items.append(item)
        return self

    def new_fn(self, name: str) -> Function:
        self.push_fn(Function(name))
        return self.items[-1]  # type: ignore[return-value]

    def push_fn(self, item: Function) -> Scope:
        self.items.append(item)
        return self

    def new_trait(self, name: str) -> Trait:
        self.push_trait(Trait(name))
        return self.items[-1]  # type: ignore[return-value]

    def push_trait(self, item: Trait) -> Scope:
        self.items.append(item)
        return self

    def new_enum(self, name: str) -> Enum:
        self.push_enum(Enum(name))
        return self.items[-1]  # type: ignore[return-value]

    def push_enum(self, item: Enum) -> Scope:
        self.items.append(item)
        return self

    def new_impl(self, target: str) -> Impl:
        self.push_impl(Impl(target))
        return self.items[-1]  # type: ignore[return-value]

    def push_impl(self, item: Impl) -> Scope:
        self.items.append(item)
        return self

    def raw(self, text: str) -> Scope:
        self.items.append(Raw(text))
        return self

    # ----------- codegen ------------

    def to_code(self, fmt: Formatter) -> None:
        for imp in self._imports.values():
            fmt.write(f"{imp.to_code()}\n")
        if self._imports:
            fmt.write("\n")

        for i, item in enumerate(self.items):
            if i:
                fmt.write("\n")
            if isinstance(item, Raw):
                fmt.write(f"{item.text}\n")
            elif isinstance(item, Function):
                item.to_code(fmt, is_trait=False)
            elif isinstance(item, (Module, Struct, Trait, Enum, Impl)):
                item.to_code(fmt)
            else:
                raise BuilderError(f"unsupported item in scope: {type(item).__name__}")

    def render(self, indent: str = "    ", sink: Sink | None = None) -> str:
        """Render the whole tree; returns the text, or "" when a sink was given."""
        fmt = Formatter(indent=indent, sink=sink)
        logger.debug("rendering scope: %d imports, %d items", len(self._imports), len(self.items))
        self.to_code(fmt)
        # a complete render always unwinds every block it opened
        assert fmt.depth == 0, f"unbalanced indentation after render: {fmt.depth}"
        return fmt.getvalue()

    def to_string(self) -> str:
        code = self.render()
        return code[:-1] if code.endswith("\n") else code

    def __str__(self) -> str:
        return self.to_string()
