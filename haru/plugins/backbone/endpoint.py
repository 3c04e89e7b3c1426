import ast
import re
from collections.abc import Iterator
from contextlib import contextmanager

from haru.core.plugin import Plugin
from haru.core.storage import GeneratedModule, SharedStorage
from haru.exceptions import EndpointGenerationError, HaruError
from haru.plugins.backbone.grouping import OperationInfo
from haru.plugins.backbone.operation import EndpointMethodOperationProcessor
from haru.plugins.backbone.type_schema import BUILTIN_TYPE_NAMES
from haru.plugins.backbone.utils import run_in_order
from haru.plugins.client import ClientPlugin
from haru.utils.dependencies import DependencyManager, PathManager
from haru.utils.naming import capitalize, sanitize_module_name, sanitize_parameter_name

__all__ = ['EndpointProcessor', 'derive_function_name']


def derive_function_name(tag: str, info: OperationInfo) -> str:
    """Name of the generated function for one operation.

    ``<tag>_<inner>_<METHOD>`` operation ids yield ``<inner>``, other ids are
    used as they are, and without an id the name is built from the method and
    the path: ``GET /pets/{petId}`` gives ``getPetsPetId``.
    """
    method = info.http_method.value
    operation_id = info.operation.operationId

    if not operation_id:
        path_part = ''.join(
            capitalize(segment)
            for segment in info.path.replace('{', '').replace('}', '').split('/')
            if segment
        )
        return sanitize_parameter_name(method.lower() + path_part)

    match = re.match(rf'^{re.escape(tag)}_(.+)_{method.upper()}$', operation_id)
    if match:
        return sanitize_parameter_name(match.group(1))

    return sanitize_parameter_name(operation_id)


class EndpointProcessor:
    """Generates the module of one tag: one function per operation."""

    @classmethod
    async def create(
        cls,
        name: str,
        operations: list[OperationInfo],
        storage: SharedStorage,
        owner: Plugin,
    ) -> 'EndpointProcessor':
        endpoint = cls(name, operations, storage, owner)
        endpoint.client_module = await ClientPlugin.get_client_file_name(
            storage.output_dir
        )
        dependencies = endpoint.dependencies
        dependencies.imports.default.add(
            dependencies.paths.create_relative_path(endpoint.client_module), 'client'
        )
        return endpoint

    def __init__(
        self,
        name: str,
        operations: list[OperationInfo],
        storage: SharedStorage,
        owner: Plugin,
    ):
        self.name = name
        self.operations = operations
        self.storage = storage
        self.owner = owner
        self.client_module = ClientPlugin.DEFAULT_CLIENT_FILE_NAME

        self.created_file_paths = PathManager(extension='py')
        self.file_path = self.created_file_paths.create_file_path(
            sanitize_module_name(name)
        )
        self.dependencies = DependencyManager(
            PathManager(), module=self.file_path, reserved=BUILTIN_TYPE_NAMES
        )
        # function names, and the parameter names that would shadow an
        # import inside a function body
        self.dependencies.claim(
            *(derive_function_name(name, operation) for operation in operations)
        )
        for operation in operations:
            with self._operation_errors(operation):
                self.dependencies.claim(
                    *self._operation_processor(operation).local_parameter_names()
                )

    async def process(self) -> GeneratedModule:
        self.owner.logger.debug(f'Processing endpoint: {self.name}')

        statements = await run_in_order(
            self._process_operation(operation) for operation in self.operations
        )

        imports, exports = self.dependencies.imports, self.dependencies.exports
        return GeneratedModule(
            path=self.file_path,
            imports=imports.to_ast(),
            statements=[s for s in statements if s is not None],
            exports=exports.to_ast(),
        )

    async def _process_operation(
        self, info: OperationInfo
    ) -> ast.AsyncFunctionDef | None:
        processor = self._operation_processor(info)
        self.owner.logger.debug(
            f'Processing operation: {self.name}.{processor.function_name} '
            f'({info.http_method.value.upper()} {info.path})'
        )

        with self._operation_errors(info):
            return await processor.process()

    def _operation_processor(
        self, info: OperationInfo
    ) -> EndpointMethodOperationProcessor:
        return EndpointMethodOperationProcessor(
            info.http_method,
            info.path,
            derive_function_name(self.name, info),
            info.operation,
            info.path_parameters,
            self.dependencies,
            self.storage,
            self.client_module,
            self.owner,
        )

    @contextmanager
    def _operation_errors(self, info: OperationInfo) -> Iterator[None]:
        try:
            yield
        except HaruError:
            raise
        except Exception as e:
            raise EndpointGenerationError(
                self.name, info.http_method.value, info.path, cause=e
            )
