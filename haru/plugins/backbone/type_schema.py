"""Schema to annotation synthesis.

:class:`TypeSchemaProcessor` maps one schema to a list of candidate
annotation expressions; callers join the candidates into a union. A nullable
schema produces an extra ``None`` candidate.
"""

import ast

from haru.core.schema import SchemaResolver
from haru.openapi import Reference, Schema
from haru.utils.ast_utils import (
    _name,
    _none,
    _subscript,
    _union_expr,
    unique_type_expressions,
)
from haru.utils.dependencies import DependencyManager
from haru.utils.naming import sanitize_identifier

__all__ = ['BUILTIN_TYPE_NAMES', 'MODELS_MODULE', 'TypeSchemaProcessor']

MODELS_MODULE = 'models'

# builtins written unqualified into annotations
BUILTIN_TYPE_NAMES = frozenset(
    {'bool', 'bytes', 'dict', 'float', 'int', 'list', 'object', 'str'}
)

# (type, format) -> (module, name); module None means a builtin
_PRIMITIVE_TYPE_MAP: dict[tuple[str, str | None], tuple[str | None, str]] = {
    ('string', None): (None, 'str'),
    ('string', 'binary'): (None, 'bytes'),
    ('string', 'byte'): (None, 'str'),
    ('string', 'date-time'): ('datetime', 'datetime'),
    ('string', 'date'): ('datetime', 'date'),
    ('string', 'uuid'): ('uuid', 'UUID'),
    ('integer', None): (None, 'int'),
    ('number', None): (None, 'float'),
    ('boolean', None): (None, 'bool'),
}

_LITERAL_TYPES = (str, int, float, bool, type(None))


class TypeSchemaProcessor:
    """Turns a schema into candidate annotations for one generated module.

    References to ``#/components/schemas/<Name>`` become the model class of
    that name. Outside the models module the class is imported from it
    through ``dependencies``; inside it (``models_module=None``) the class is
    referred to by the binding it is exported under.
    """

    def __init__(
        self,
        schema: Schema | Reference,
        dependencies: DependencyManager,
        resolver: SchemaResolver,
        models_module: str | None = MODELS_MODULE,
    ):
        self.schema = schema
        self.dependencies = dependencies
        self.resolver = resolver
        self.models_module = models_module

    def process(self) -> list[ast.expr]:
        return self._process(self.schema)

    def _process(self, schema: Schema | Reference) -> list[ast.expr]:
        if isinstance(schema, Reference):
            return [self._reference(schema)]

        nodes = self._process_value(schema)
        if schema.nullable or 'null' in schema.types:
            nodes.append(_none())
        return unique_type_expressions(nodes)

    def _process_value(self, schema: Schema) -> list[ast.expr]:
        if schema.allOf:
            if len(schema.allOf) == 1:
                return self._process(schema.allOf[0])
            return [_name('object')]

        if schema.anyOf or schema.oneOf:
            return [
                node
                for member in (schema.anyOf or []) + (schema.oneOf or [])
                for node in self._process(member)
            ]

        if schema.enum and all(
            isinstance(value, _LITERAL_TYPES) for value in schema.enum
        ):
            return [self._literal(schema.enum)]

        types = [type_ for type_ in schema.types if type_ != 'null']
        if not types:
            if schema.properties is not None or schema.additionalProperties:
                types = ['object']
            elif schema.items is not None:
                types = ['array']
            elif 'null' in schema.types:
                return []
            else:
                return [_name('object')]

        return [self._typed(type_, schema) for type_ in types]

    def _typed(self, type_: str, schema: Schema) -> ast.expr:
        if type_ == 'array':
            if schema.items is None:
                return _subscript('list', _name('object'))
            return _subscript('list', _union_expr(self._process(schema.items)))

        if type_ == 'object':
            value: ast.expr = _name('object')
            if isinstance(schema.additionalProperties, (Schema, Reference)):
                value = _union_expr(self._process(schema.additionalProperties))
            return _subscript(
                'dict', ast.Tuple(elts=[_name('str'), value], ctx=ast.Load())
            )

        module, name = _PRIMITIVE_TYPE_MAP.get(
            (type_, schema.format),
            _PRIMITIVE_TYPE_MAP.get((type_, None), (None, 'object')),
        )
        if module is None:
            return _name(name)
        return _name(self.dependencies.imports.named.add(module, name))

    def _literal(self, values: list) -> ast.expr:
        identifier = self.dependencies.imports.named.add('typing', 'Literal')
        elts = [ast.Constant(value=value) for value in values]
        inner = elts[0] if len(elts) == 1 else ast.Tuple(elts=elts, ctx=ast.Load())
        return _subscript(identifier, inner)

    def _reference(self, reference: Reference) -> ast.expr:
        self.resolver.resolve(reference)
        name = sanitize_identifier(SchemaResolver.reference_name(reference.ref))
        if self.models_module is None:
            return _name(self.dependencies.exports.get_binding(name) or name)

        path = self.dependencies.paths.create_relative_path(self.models_module)
        return _name(self.dependencies.imports.named.add(path, name))
