from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, field_validator


class HttpMethod(str, Enum):
    get = 'get'
    put = 'put'
    post = 'post'
    delete = 'delete'
    options = 'options'
    head = 'head'
    patch = 'patch'
    trace = 'trace'


class ParameterLocation(str, Enum):
    query = 'query'
    header = 'header'
    path = 'path'
    cookie = 'cookie'


def _discriminate_reference(data: Any) -> str:
    """Discriminator separating ``$ref`` objects from inline values."""
    if isinstance(data, dict):
        return 'reference' if '$ref' in data else 'value'
    return 'reference' if isinstance(data, Reference) else 'value'


class Reference(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='allow', frozen=True)

    ref: str = Field(alias='$ref')
    summary: str | None = None
    description: str | None = None


class Schema(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='allow', frozen=True)

    title: str | None = None
    description: str | None = None
    type: str | list[str] | None = None
    format: str | None = None
    enum: list[Any] | None = None
    nullable: bool = False
    default: Any = None
    required: list[str] = Field(default_factory=list)
    properties: 'dict[str, SchemaOrReference] | None' = None
    additionalProperties: 'bool | SchemaOrReference | None' = None
    items: 'SchemaOrReference | None' = None
    allOf: 'list[SchemaOrReference] | None' = None
    anyOf: 'list[SchemaOrReference] | None' = None
    oneOf: 'list[SchemaOrReference] | None' = None

    @property
    def types(self) -> list[str]:
        """Declared types as a list, covering the 3.1 ``type: [..]`` form."""
        if self.type is None:
            return []
        if isinstance(self.type, str):
            return [self.type]
        return list(self.type)


SchemaOrReference = Annotated[
    Annotated[Reference, Tag('reference')] | Annotated[Schema, Tag('value')],
    Discriminator(_discriminate_reference),
]

Schema.model_rebuild()


class MediaType(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='allow', frozen=True)

    schema_: SchemaOrReference | None = Field(default=None, alias='schema')


class Parameter(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='allow', frozen=True)

    name: str
    in_: ParameterLocation = Field(alias='in')
    description: str | None = None
    required: bool = False
    deprecated: bool = False
    schema_: SchemaOrReference | None = Field(default=None, alias='schema')


ParameterOrReference = Annotated[
    Annotated[Reference, Tag('reference')] | Annotated[Parameter, Tag('value')],
    Discriminator(_discriminate_reference),
]


class RequestBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='allow', frozen=True)

    description: str | None = None
    content: dict[str, MediaType] = Field(default_factory=dict)
    required: bool = False


RequestBodyOrReference = Annotated[
    Annotated[Reference, Tag('reference')] | Annotated[RequestBody, Tag('value')],
    Discriminator(_discriminate_reference),
]


class Response(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='allow', frozen=True)

    description: str | None = None
    content: dict[str, MediaType] | None = None


ResponseOrReference = Annotated[
    Annotated[Reference, Tag('reference')] | Annotated[Response, Tag('value')],
    Discriminator(_discriminate_reference),
]


def _stringify_keys(value: Any) -> Any:
    # YAML reads `200:` as an integer key
    if isinstance(value, dict):
        return {str(key): item for key, item in value.items()}
    return value


class Operation(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='allow', frozen=True)

    tags: list[str] = Field(default_factory=list)
    summary: str | None = None
    description: str | None = None
    operationId: str | None = None
    parameters: list[ParameterOrReference] = Field(default_factory=list)
    requestBody: RequestBodyOrReference | None = None
    responses: dict[str, ResponseOrReference] = Field(default_factory=dict)
    deprecated: bool = False

    @field_validator('responses', mode='before')
    @classmethod
    def _status_codes_as_strings(cls, value: Any) -> Any:
        return _stringify_keys(value)


class PathItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='allow', frozen=True)

    summary: str | None = None
    description: str | None = None
    parameters: list[ParameterOrReference] = Field(default_factory=list)
    get: Operation | None = None
    put: Operation | None = None
    post: Operation | None = None
    delete: Operation | None = None
    options: Operation | None = None
    head: Operation | None = None
    patch: Operation | None = None
    trace: Operation | None = None

    def operation(self, method: HttpMethod) -> Operation | None:
        return getattr(self, method.value)


class Components(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='allow', frozen=True)

    schemas: dict[str, SchemaOrReference] = Field(default_factory=dict)
    parameters: dict[str, ParameterOrReference] = Field(default_factory=dict)
    requestBodies: dict[str, RequestBodyOrReference] = Field(default_factory=dict)
    responses: dict[str, ResponseOrReference] = Field(default_factory=dict)


class OpenAPI(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='allow', frozen=True)

    openapi: str
    info: dict[str, Any] = Field(default_factory=dict)
    servers: list[dict[str, Any]] = Field(default_factory=list)
    paths: dict[str, PathItem | None] = Field(default_factory=dict)
    components: Components | None = None
