import ast
from collections.abc import Sequence

from haru.core.plugin import Plugin
from haru.core.storage import SharedStorage
from haru.exceptions import CodeGenerationError
from haru.openapi import HttpMethod, Operation, Parameter
from haru.plugins.backbone.request_body import EndpointMethodRequestBodyProcessor
from haru.plugins.backbone.response import EndpointMethodResponseProcessor
from haru.plugins.client import ClientPlugin
from haru.utils.ast_utils import (
    _async_func,
    _attr,
    _call,
    _name,
    _none,
    _union_expr,
    unique_type_expressions,
)
from haru.utils.dependencies import DependencyManager

_BODY_METHODS = frozenset({HttpMethod.post, HttpMethod.put, HttpMethod.patch})


class EndpointMethodOperationProcessor:
    """Builds the ``async def`` of one operation.

    The generated function forwards its arguments to the transport helper::

        async def getPet(petId: int, init: ClientRequestInit_1 | None = None) -> Pet_1:
            return await client_1.call('GET', '/pets/{petId}', {'petId': petId}, init)
    """

    def __init__(
        self,
        http_method: HttpMethod,
        path: str,
        function_name: str,
        operation: Operation,
        path_parameters: Sequence[Parameter],
        dependencies: DependencyManager,
        storage: SharedStorage,
        client_module: str,
        owner: Plugin,
    ):
        self.http_method = http_method
        self.path = path
        self.function_name = function_name
        self.operation = operation
        self.path_parameters = path_parameters
        self.dependencies = dependencies
        self.storage = storage
        self.client_module = client_module
        self.owner = owner

    async def process(self) -> ast.AsyncFunctionDef | None:
        exports, imports, paths = (
            self.dependencies.exports,
            self.dependencies.imports,
            self.dependencies.paths,
        )
        method = self.http_method.value.upper()
        self.owner.logger.debug(
            f'{self.function_name} - processing {method} {self.path}'
        )

        signature = self._signature_processor().process()

        method_identifier = exports.add(self.function_name)
        response_type = self._prepare_response_type()

        client_module = await ClientPlugin.get_client_file_name(
            self.storage.output_dir
        )
        client_identifier = imports.default.get_identifier(
            paths.create_relative_path(client_module)
        )
        if client_identifier is None:
            raise CodeGenerationError(
                f"Transport module '{client_module}' is not imported",
                context=self.function_name,
            )

        call = _call(
            _attr(client_identifier, 'call'),
            [
                ast.Constant(value=method),
                ast.Constant(value=self.path),
                signature.packed_parameters,
                signature.init_param,
            ],
        )

        body: list[ast.stmt] = []
        docstring = self.operation.summary or self.operation.description
        if docstring:
            body.append(ast.Expr(value=ast.Constant(value=docstring)))
        body.append(ast.Return(value=ast.Await(value=call)))

        return _async_func(
            method_identifier,
            signature.parameters,
            body,
            returns=response_type,
            defaults=signature.defaults,
        )

    def local_parameter_names(self) -> list[str]:
        return self._signature_processor().local_parameter_names()

    def _signature_processor(self) -> EndpointMethodRequestBodyProcessor:
        return EndpointMethodRequestBodyProcessor(
            self.operation.requestBody if self.http_method in _BODY_METHODS else None,
            self.dependencies,
            self.owner,
            self.storage,
            self.client_module,
            self.path_parameters,
            self.operation.parameters,
        )

    def _prepare_response_type(self) -> ast.expr:
        self.owner.logger.debug(
            f'{self.function_name} {self.http_method.value.upper()} - processing response type'
        )

        response_types = unique_type_expressions(
            node
            for code, response in self.operation.responses.items()
            for node in EndpointMethodResponseProcessor(
                code, response, self.dependencies, self.owner
            ).process()
        )

        if not response_types:
            return _none()
        return _union_expr(response_types)
