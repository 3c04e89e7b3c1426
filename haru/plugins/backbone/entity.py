"""Generation of the ``models`` module from ``components.schemas``.

Every component becomes one declaration:

- object schemas with properties become pydantic models, ``allOf``
  references their bases;
- string enums become ``(str, Enum)`` classes;
- everything else becomes a type alias.

The module starts with ``from __future__ import annotations``, so field
annotations may refer to classes declared further down. Bases and alias
targets are evaluated eagerly, so their declarations are ordered first.
"""

import ast
from dataclasses import dataclass, field

from haru.core.plugin import Plugin
from haru.core.schema import SchemaKind
from haru.core.storage import GeneratedModule, SharedStorage
from haru.exceptions import CodeGenerationError
from haru.openapi import Reference, Schema
from haru.plugins.backbone.type_schema import (
    BUILTIN_TYPE_NAMES,
    MODELS_MODULE,
    TypeSchemaProcessor,
)
from haru.utils.ast_utils import (
    _assign,
    _attr,
    _call,
    _name,
    _none,
    _union_expr,
)
from haru.utils.dependencies import DependencyManager, PathManager
from haru.utils.naming import sanitize_identifier, sanitize_parameter_name

__all__ = ['EntityProcessor']

_CONSTANT_TYPES = (str, int, float, bool)


@dataclass
class _Declaration:
    name: str
    node: ast.stmt
    eager: set[str] = field(default_factory=set)
    lazy: set[str] = field(default_factory=set)
    is_model: bool = False


def _referenced_names(node: ast.AST) -> set[str]:
    return {n.id for n in ast.walk(node) if isinstance(n, ast.Name)}


def _field_name(wire_name: str) -> str:
    # pydantic treats names with a leading underscore as private attributes
    name = sanitize_parameter_name(wire_name)
    if name.startswith('_'):
        name = f'field_{name.lstrip("_")}'.rstrip('_') or 'field'
    return name


class EntityProcessor:
    def __init__(
        self,
        schemas: dict[str, Schema | Reference],
        storage: SharedStorage,
        owner: Plugin,
    ):
        self.schemas = schemas
        self.storage = storage
        self.owner = owner
        self.file_path = PathManager().create_file_path(MODELS_MODULE)
        self.dependencies = DependencyManager(
            PathManager(), module=self.file_path, reserved=BUILTIN_TYPE_NAMES
        )
        # a component named like a builtin is declared under a suffixed
        # binding and aliased after the module body
        self.bindings = {
            name: self.dependencies.exports.add(sanitize_identifier(name))
            for name in schemas
        }

    def process(self) -> GeneratedModule:
        self.owner.logger.debug(f'Processing {len(self.schemas)} entities')

        declarations = [
            self._process_component(name, component)
            for name, component in self.schemas.items()
        ]
        ordered = self._sort(declarations)

        statements = [declaration.node for declaration in ordered]
        statements.extend(self._rebuild_statements(ordered))

        future = ast.ImportFrom(
            module='__future__', names=[ast.alias(name='annotations')], level=0
        )
        return GeneratedModule(
            path=self.file_path,
            imports=[future, *self.dependencies.imports.to_ast()],
            statements=statements,
            exports=self.dependencies.exports.to_ast(),
        )

    def _import(self, module: str, name: str) -> str:
        return self.dependencies.imports.named.add(module, name)

    def _annotations(self, schema: Schema | Reference) -> list[ast.expr]:
        return TypeSchemaProcessor(
            schema, self.dependencies, self.owner.resolver, models_module=None
        ).process()

    def _process_component(
        self, name: str, component: Schema | Reference
    ) -> _Declaration:
        binding = self.bindings[name]
        self.owner.logger.debug(f'Processing entity: {name}')

        if isinstance(component, Reference):
            return self._alias(binding, component)

        kind = self.owner.resolver.classify(component)
        if kind is SchemaKind.OBJECT and component.properties:
            return self._model(binding, component)
        if kind is SchemaKind.ENUM and all(
            isinstance(value, str) for value in component.enum
        ):
            return self._enum(binding, component)
        if kind is SchemaKind.COMPOSITE and len(component.allOf or []) > 1:
            return self._model(binding, component)
        return self._alias(binding, component)

    def _alias(self, binding: str, schema: Schema | Reference) -> _Declaration:
        value = _union_expr(self._annotations(schema))
        return _Declaration(
            name=binding,
            node=_assign(_name(binding), value),
            eager=_referenced_names(value),
        )

    def _enum(self, binding: str, schema: Schema) -> _Declaration:
        body: list[ast.stmt] = []
        if schema.description:
            body.append(ast.Expr(value=ast.Constant(value=schema.description)))

        used: set[str] = set()
        for value in schema.enum:
            member = sanitize_parameter_name(value).upper() if value else ''
            if not member or member.startswith('_'):
                member = f'VALUE{member}'
            candidate, counter = member, 1
            while candidate in used:
                counter += 1
                candidate = f'{member}_{counter}'
            used.add(candidate)
            body.append(_assign(_name(candidate), ast.Constant(value=value)))

        node = ast.ClassDef(
            name=binding,
            bases=[_name('str'), _name(self._import('enum', 'Enum'))],
            keywords=[],
            body=body,
            decorator_list=[],
            type_params=[],
        )
        return _Declaration(name=binding, node=node)

    def _model(self, binding: str, schema: Schema) -> _Declaration:
        resolver = self.owner.resolver
        bases: list[ast.expr] = []
        properties: dict[str, Schema | Reference] = {}
        required: set[str] = set(schema.required)

        for member in schema.allOf or []:
            if isinstance(member, Reference):
                bases.extend(self._annotations(member))
                continue
            properties.update(member.properties or {})
            required.update(member.required)
        properties.update(schema.properties or {})

        if not bases:
            bases = [_name(self._import('pydantic', 'BaseModel'))]

        body: list[ast.stmt] = []
        if schema.description:
            body.append(ast.Expr(value=ast.Constant(value=schema.description)))

        fields: list[ast.stmt] = []
        lazy: set[str] = set()
        has_alias = False
        seen: dict[str, str] = {}
        for wire_name, property_schema in properties.items():
            field_name = _field_name(wire_name)
            if field_name in seen:
                raise CodeGenerationError(
                    f"Properties '{seen[field_name]}' and '{wire_name}' "
                    f"both map to the field '{field_name}'",
                    context=binding,
                )
            seen[field_name] = wire_name

            annotations = self._annotations(property_schema)
            is_required = wire_name in required
            if not is_required and not any(
                isinstance(node, ast.Constant) and node.value is None
                for node in annotations
            ):
                annotations.append(_none())
            annotation = _union_expr(annotations)
            lazy |= _referenced_names(annotation)

            keywords: list[ast.keyword] = []
            default = resolver.resolve(property_schema).default
            if isinstance(default, _CONSTANT_TYPES):
                keywords.append(ast.keyword(arg='default', value=ast.Constant(default)))
            elif not is_required:
                keywords.append(ast.keyword(arg='default', value=_none()))
            if field_name != wire_name:
                has_alias = True
                keywords.append(ast.keyword(arg='alias', value=ast.Constant(wire_name)))

            value: ast.expr | None = None
            if len(keywords) == 1 and keywords[0].arg == 'default':
                value = keywords[0].value
            elif keywords:
                value = _call(_name(self._import('pydantic', 'Field')), keywords=keywords)

            fields.append(
                ast.AnnAssign(
                    target=ast.Name(id=field_name, ctx=ast.Store()),
                    annotation=annotation,
                    value=value,
                    simple=1,
                )
            )

        if has_alias:
            body.append(
                _assign(
                    _name('model_config'),
                    _call(
                        _name(self._import('pydantic', 'ConfigDict')),
                        keywords=[
                            ast.keyword(arg='populate_by_name', value=ast.Constant(True))
                        ],
                    ),
                )
            )
        body.extend(fields)

        node = ast.ClassDef(
            name=binding,
            bases=bases,
            keywords=[],
            body=body or [ast.Pass()],
            decorator_list=[],
            type_params=[],
        )
        return _Declaration(
            name=binding,
            node=node,
            eager={n for base in bases for n in _referenced_names(base)},
            lazy=lazy,
            is_model=True,
        )

    def _sort(self, declarations: list[_Declaration]) -> list[_Declaration]:
        by_name = {declaration.name: declaration for declaration in declarations}
        ordered: list[_Declaration] = []
        temp_mark: set[str] = set()
        perm_mark: set[str] = set()

        def visit(declaration: _Declaration) -> None:
            if declaration.name in perm_mark:
                return
            if declaration.name in temp_mark:
                raise CodeGenerationError(
                    f'Cyclic dependency detected for type: {declaration.name}',
                    context=self.file_path,
                )

            temp_mark.add(declaration.name)
            for dependency in sorted(declaration.eager):
                if dependency in by_name and dependency != declaration.name:
                    visit(by_name[dependency])
                elif dependency == declaration.name:
                    raise CodeGenerationError(
                        f'Type {declaration.name} refers to itself eagerly',
                        context=self.file_path,
                    )

            perm_mark.add(declaration.name)
            temp_mark.remove(declaration.name)
            ordered.append(declaration)

        for declaration in declarations:
            visit(declaration)
        return ordered

    def _rebuild_statements(self, ordered: list[_Declaration]) -> list[ast.stmt]:
        # models whose annotations refer to themselves or to later
        # declarations, and models deriving from those
        statements: list[ast.stmt] = []
        names = {declaration.name for declaration in ordered}
        declared: set[str] = set()
        rebuilt: set[str] = set()
        for declaration in ordered:
            declared.add(declaration.name)
            if not declaration.is_model:
                continue
            forward = (declaration.lazy & names) - (declared - {declaration.name})
            if forward or declaration.eager & rebuilt:
                rebuilt.add(declaration.name)
                statements.append(
                    ast.Expr(value=_call(_attr(declaration.name, 'model_rebuild')))
                )
        return statements
