"""Merging path, query and request-body parameters into one signature."""

import ast
from collections.abc import Sequence
from dataclasses import dataclass

from haru.core.plugin import Plugin
from haru.core.storage import SharedStorage
from haru.exceptions import CodeGenerationError
from haru.openapi import (
    Parameter,
    ParameterLocation,
    Reference,
    RequestBody,
    Schema,
)
from haru.plugins.backbone.type_schema import TypeSchemaProcessor
from haru.plugins.backbone.utils import select_media_type
from haru.utils.ast_utils import _argument, _name, _none, _union_expr
from haru.utils.dependencies import DependencyManager
from haru.utils.naming import sanitize_parameter_name

__all__ = [
    'DEFAULT_INIT_PARAM_NAME',
    'EndpointMethodRequestBodyProcessor',
    'INIT_TYPE_NAME',
    'RequestBodyProcessingResult',
]

DEFAULT_INIT_PARAM_NAME = 'init'
INIT_TYPE_NAME = 'ClientRequestInit'


@dataclass(frozen=True)
class RequestBodyProcessingResult:
    """Signature pieces of one generated function.

    Attributes:
        parameters: Data parameters in path, query, body order, then the
            extra-options parameter.
        defaults: Defaults aligned to the end of ``parameters``.
        packed_parameters: Dict literal mapping wire names to local names.
        init_param: Name of the extra-options parameter.
    """

    parameters: list[ast.arg]
    defaults: list[ast.expr]
    packed_parameters: ast.Dict
    init_param: ast.Name


class EndpointMethodRequestBodyProcessor:
    def __init__(
        self,
        request_body: RequestBody | Reference | None,
        dependencies: DependencyManager,
        owner: Plugin,
        storage: SharedStorage,
        client_module_path: str,
        path_parameters: Sequence[Parameter] | None = None,
        operation_parameters: Sequence[Parameter | Reference] | None = None,
    ):
        self.owner = owner
        self.storage = storage
        self.dependencies = dependencies
        self.request_body: RequestBody | None = (
            owner.resolver.resolve(request_body) if request_body else None
        )
        self.client_module_path = client_module_path
        self.path_parameters = list(path_parameters or [])
        self.query_parameters = [
            parameter
            for parameter in (
                owner.resolver.resolve(item) for item in operation_parameters or []
            )
            if parameter.in_ is ParameterLocation.query
        ]

    def process(self) -> RequestBodyProcessingResult:
        imports, paths = self.dependencies.imports, self.dependencies.paths
        client_path = paths.create_relative_path(self.client_module_path)
        init_type = _union_expr(
            [_name(imports.named.add(client_path, INIT_TYPE_NAME)), _none()]
        )

        parameter_data = self._parameter_data(warn=True)

        if not parameter_data:
            return RequestBodyProcessingResult(
                parameters=[_argument(DEFAULT_INIT_PARAM_NAME, init_type)],
                defaults=[_none()],
                packed_parameters=ast.Dict(keys=[], values=[]),
                init_param=_name(DEFAULT_INIT_PARAM_NAME),
            )

        local_names = self._local_names([name for name, _ in parameter_data])
        init_param_name = DEFAULT_INIT_PARAM_NAME
        while init_param_name in local_names:
            init_param_name = f'_{init_param_name}'

        parameters = [
            _argument(
                local_name,
                _union_expr(
                    TypeSchemaProcessor(
                        schema, self.dependencies, self.owner.resolver
                    ).process()
                ),
            )
            for local_name, (_, schema) in zip(local_names, parameter_data)
        ]
        parameters.append(_argument(init_param_name, init_type))

        return RequestBodyProcessingResult(
            parameters=parameters,
            defaults=[_none()],
            packed_parameters=ast.Dict(
                keys=[ast.Constant(value=name) for name, _ in parameter_data],
                values=[_name(local_name) for local_name in local_names],
            ),
            init_param=_name(init_param_name),
        )

    @staticmethod
    def _local_names(wire_names: list[str]) -> list[str]:
        local_names = [sanitize_parameter_name(name) for name in wire_names]
        seen: dict[str, str] = {}
        for wire_name, local_name in zip(wire_names, local_names):
            if local_name in seen:
                raise CodeGenerationError(
                    f"Parameters '{seen[local_name]}' and '{wire_name}' "
                    f"both map to the argument '{local_name}'"
                )
            seen[local_name] = wire_name
        return local_names

    def local_parameter_names(self) -> list[str]:
        """Local names of the data parameters, without touching the module."""
        return self._local_names([name for name, _ in self._parameter_data()])

    def _parameter_data(
        self, warn: bool = False
    ) -> list[tuple[str, Schema | Reference]]:
        parameter_data: list[tuple[str, Schema | Reference]] = [
            (parameter.name, parameter.schema_)
            for parameter in (*self.path_parameters, *self.query_parameters)
            if parameter.schema_ is not None
        ]
        if self.request_body:
            parameter_data.extend(self._extract_parameter_data(warn))
        return parameter_data

    def _extract_parameter_data(
        self, warn: bool
    ) -> list[tuple[str, Schema | Reference]]:
        media_type = select_media_type(self.request_body.content)
        if media_type is None or media_type.schema_ is None:
            return []

        resolver = self.owner.resolver
        schema = resolver.resolve(media_type.schema_)
        if resolver.is_object(schema) and not resolver.is_empty_object(schema):
            return list(schema.properties.items())

        if warn:
            self.owner.warn(
                self.storage,
                "A schema provided for endpoint method's 'requestBody' is not supported",
            )
        return []
