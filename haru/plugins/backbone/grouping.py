"""Grouping the operations of a document by tag."""

from dataclasses import dataclass, field

from haru.core.schema import SchemaResolver
from haru.openapi import HttpMethod, OpenAPI, Operation, Parameter, ParameterLocation

__all__ = ['DEFAULT_TAG', 'OperationInfo', 'derive_tag', 'group_operations']

DEFAULT_TAG = 'Default'


@dataclass(frozen=True)
class OperationInfo:
    path: str
    http_method: HttpMethod
    operation: Operation
    path_parameters: list[Parameter] = field(default_factory=list)


def derive_tag(path: str, operation: Operation) -> str:
    """First declared tag, else the first path segment, else ``'Default'``."""
    if operation.tags:
        return operation.tags[0]
    return next((segment for segment in path.split('/') if segment), DEFAULT_TAG)


def _merge_parameters(
    path_level: list[Parameter], operation_level: list[Parameter]
) -> list[Parameter]:
    # an operation-level parameter overrides the path-level one with the
    # same name and location
    overridden = {(parameter.name, parameter.in_) for parameter in operation_level}
    return [
        *(p for p in path_level if (p.name, p.in_) not in overridden),
        *operation_level,
    ]


def group_operations(
    api: OpenAPI, resolver: SchemaResolver
) -> dict[str, list[OperationInfo]]:
    """Collect every operation of ``api`` under its tag.

    Tags keep the order they are first seen in; operations keep document
    order within their tag. Methods are visited in :class:`HttpMethod` order.
    """
    groups: dict[str, list[OperationInfo]] = {}

    for path, path_item in api.paths.items():
        if path_item is None:
            continue

        path_level = [resolver.resolve(p) for p in path_item.parameters]

        for http_method in HttpMethod:
            operation = path_item.operation(http_method)
            if operation is None:
                continue

            operation_level = [resolver.resolve(p) for p in operation.parameters]
            path_parameters = [
                parameter
                for parameter in _merge_parameters(path_level, operation_level)
                if parameter.in_ is ParameterLocation.path
            ]

            groups.setdefault(derive_tag(path, operation), []).append(
                OperationInfo(path, http_method, operation, path_parameters)
            )

    return groups
