"""AST helpers for building generated Python modules.

Besides small node factories this module defines the canonical structural
comparison of type expressions: two annotations are equal when they denote
the same shape, compared deeply and order-sensitively, except that the members
of a union are compared as a set.
"""

import ast
from collections.abc import Iterable

__all__ = [
    '_all',
    '_argument',
    '_assign',
    '_async_func',
    '_attr',
    '_call',
    '_name',
    '_none',
    '_subscript',
    '_union_expr',
    'type_expression_key',
    'types_equal',
    'unique_type_expressions',
    'union_members',
]


def _name(name: str) -> ast.Name:
    return ast.Name(id=name, ctx=ast.Load())


def _none() -> ast.Constant:
    return ast.Constant(value=None)


def _attr(value: str | ast.expr, attr: str) -> ast.Attribute:
    return ast.Attribute(
        value=_name(value) if isinstance(value, str) else value,
        attr=attr,
        ctx=ast.Load(),
    )


def _subscript(generic: str, inner: ast.expr) -> ast.Subscript:
    return ast.Subscript(value=_name(generic), slice=inner, ctx=ast.Load())


def _union_expr(types: list[ast.expr]) -> ast.expr:
    # A | B | C
    if not types:
        raise ValueError('_union_expr requires at least one type')
    result = types[0]
    for t in types[1:]:
        result = ast.BinOp(left=result, op=ast.BitOr(), right=t)
    return result


def _argument(name: str, annotation: ast.expr | None = None) -> ast.arg:
    return ast.arg(arg=name, annotation=annotation)


def _assign(target: ast.expr, value: ast.expr) -> ast.Assign:
    if isinstance(target, ast.Name):
        target = ast.Name(id=target.id, ctx=ast.Store())
    return ast.Assign(targets=[target], value=value)


def _call(
    func: ast.expr,
    args: list[ast.expr] | None = None,
    keywords: list[ast.keyword] | None = None,
) -> ast.Call:
    return ast.Call(func=func, args=args or [], keywords=keywords or [])


def _async_func(
    name: str,
    args: list[ast.arg],
    body: list[ast.stmt],
    returns: ast.expr | None = None,
    defaults: list[ast.expr] | None = None,
) -> ast.AsyncFunctionDef:
    return ast.AsyncFunctionDef(
        name=name,
        args=ast.arguments(
            posonlyargs=[],
            args=args,
            kwonlyargs=[],
            kw_defaults=[],
            defaults=defaults or [],
        ),
        body=body,
        decorator_list=[],
        returns=returns,
        type_params=[],
    )


def _all(names: Iterable[str]) -> ast.Assign:
    return _assign(
        target=_name('__all__'),
        value=ast.Tuple(
            elts=[ast.Constant(value=name) for name in names], ctx=ast.Load()
        ),
    )


def union_members(node: ast.expr) -> list[ast.expr]:
    """Flatten a ``A | B | C`` chain into its members."""
    if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
        return union_members(node.left) + union_members(node.right)
    return [node]


def type_expression_key(node: ast.AST | list | None) -> str:
    """Canonical text for a type expression.

    Load/store contexts and source positions are ignored, union members are
    deduplicated and sorted so ``A | B`` and ``B | A`` share a key.
    """
    if isinstance(node, list):
        return '[' + ', '.join(type_expression_key(item) for item in node) + ']'

    if not isinstance(node, ast.AST):
        return f'{type(node).__name__}:{node!r}'

    if isinstance(node, ast.expr):
        members = union_members(node)
        if len(members) > 1:
            keys = sorted({type_expression_key(member) for member in members})
            return 'Union(' + ', '.join(keys) + ')'

    fields = ', '.join(
        f'{field}={type_expression_key(getattr(node, field, None))}'
        for field in node._fields
        if field != 'ctx'
    )
    return f'{type(node).__name__}({fields})'


def types_equal(left: ast.expr, right: ast.expr) -> bool:
    return type_expression_key(left) == type_expression_key(right)


def unique_type_expressions(types: Iterable[ast.expr]) -> list[ast.expr]:
    """Drop structural duplicates, keeping the first occurrence of each shape."""
    seen: set[str] = set()
    result: list[ast.expr] = []
    for type_ in types:
        key = type_expression_key(type_)
        if key not in seen:
            seen.add(key)
            result.append(type_)
    return result
