from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from .codegen import BuilderError, Formatter
from .items import Function, Impl, Trait
from .scope import Module, Scope

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    ok: bool
    errors: List[str]


def _walk(scope: Scope, path: str, errors: List[str]) -> None:
    for item in scope.items:
        if isinstance(item, Module):
            _walk(item.scope, f"{path}{item.name}::", errors)
        elif isinstance(item, Function):
            if item.body is None:
                errors.append(f"{path}{item.name}: fn must define a body outside of a trait")
        elif isinstance(item, Impl):
            for func in item.fns:
                if func.body is None:
                    errors.append(f"{path}impl {item.target}: fn {func.name} must define a body")
        elif isinstance(item, Trait):
            for func in item.fns:
                if func.visibility is not None:
                    errors.append(
                        f"{path}trait {item.ty}: fn {func.name} must not have a visibility modifier"
                    )


def validate_scope(scope: Scope) -> ValidationResult:
    """
    Report every builder contract violation in the tree.
    Structural checks come first so all problems are listed; a trial render
    then catches whatever they do not cover.
    """
    errors: List[str] = []
    _walk(scope, "", errors)

    if not errors:
        try:
            scope.to_code(Formatter())
        except BuilderError as e:
            errors.append(str(e))

    logger.debug("validated scope: %d error(s)", len(errors))
    return ValidationResult(len(errors) == 0, errors)
