"""Run-scoped state shared by the plugins of one generation run."""

import ast
from dataclasses import dataclass, field
from typing import Any

from upath import UPath

from haru.openapi import OpenAPI

__all__ = ['Diagnostic', 'GeneratedModule', 'SharedStorage']


@dataclass(eq=False)
class GeneratedModule:
    """One generated Python module, before it is turned into text.

    Instances hash by identity so they can key weak associations.

    Attributes:
        path: File path relative to the output directory, e.g. ``'Pet.py'``.
        imports: Import statements, emitted first.
        statements: Declarations, in generation order.
        exports: Export statements (aliases and ``__all__``), emitted last.
        header: Optional docstring placed at the top of the module.
        verbatim: Ready-made source text; bypasses the AST when set.
    """

    path: str
    imports: list[ast.stmt] = field(default_factory=list)
    statements: list[ast.stmt] = field(default_factory=list)
    exports: list[ast.stmt] = field(default_factory=list)
    header: str | None = None
    verbatim: str | None = None

    def to_ast(self) -> ast.Module:
        body: list[ast.stmt] = []
        if self.header:
            body.append(ast.Expr(value=ast.Constant(value=self.header)))
        body.extend([*self.imports, *self.statements, *self.exports])
        return ast.fix_missing_locations(ast.Module(body=body, type_ignores=[]))


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal problem noticed during generation."""

    plugin: str
    message: str

    def __str__(self) -> str:
        return f'[{self.plugin}] {self.message}'


@dataclass
class SharedStorage:
    """State handed from plugin to plugin during one run.

    Attributes:
        api: The parsed OpenAPI document.
        output_dir: Directory the generated files go to, if known.
        sources: Every module produced so far, in production order.
        plugin_storage: Free-form per-plugin data; keys are owned by the
            plugin that writes them.
        diagnostics: Non-fatal problems recorded by the plugins.
    """

    api: OpenAPI
    output_dir: UPath | None = None
    sources: list[GeneratedModule] = field(default_factory=list)
    plugin_storage: dict[str, Any] = field(default_factory=dict)
    diagnostics: list[Diagnostic] = field(default_factory=list)
