"""Typed models for the parts of an OpenAPI 3.x document haru consumes."""

from haru.openapi.models import (
    Components,
    HttpMethod,
    MediaType,
    OpenAPI,
    Operation,
    Parameter,
    ParameterLocation,
    PathItem,
    Reference,
    RequestBody,
    Response,
    Schema,
)

__all__ = [
    'Components',
    'HttpMethod',
    'MediaType',
    'OpenAPI',
    'Operation',
    'Parameter',
    'ParameterLocation',
    'PathItem',
    'Reference',
    'RequestBody',
    'Response',
    'Schema',
]
