"""haru - Generate typed async Python clients from OpenAPI documents.

haru turns the operations of an OpenAPI 3.x document into Python modules: one
module per tag holding an ``async def`` per operation, a pydantic ``models``
module, a small httpx transport module and an ``endpoints`` module
re-exporting every endpoint module.

Quick Start:
    >>> from haru import Codegen, DocumentConfig
    >>>
    >>> config = DocumentConfig(
    ...     source="https://api.example.com/openapi.json",
    ...     output="./client"
    ... )
    >>> Codegen(config).generate()

CLI Usage:
    $ haru generate --source ./api.yaml --output ./client
    $ haru generate --config haru.yaml
"""

from importlib.metadata import PackageNotFoundError, version

from haru.codegen import Codegen
from haru.config import DocumentConfig, HaruConfig, get_config
from haru.core import Generator, GeneratorResult, Plugin, SchemaLoader, SchemaResolver
from haru.exceptions import (
    CodeGenerationError,
    ConfigurationError,
    DuplicateExportError,
    EndpointGenerationError,
    HaruError,
    OutputError,
    PluginError,
    SchemaError,
    SchemaLoadError,
    SchemaReferenceError,
)

__all__ = [
    # Main classes
    'Codegen',
    'Generator',
    'GeneratorResult',
    'Plugin',
    'SchemaLoader',
    'SchemaResolver',
    # Configuration
    'DocumentConfig',
    'HaruConfig',
    'get_config',
    # Exceptions
    'HaruError',
    'SchemaError',
    'SchemaLoadError',
    'SchemaReferenceError',
    'CodeGenerationError',
    'EndpointGenerationError',
    'ConfigurationError',
    'DuplicateExportError',
    'PluginError',
    'OutputError',
]

try:
    __version__ = version('haru')
except PackageNotFoundError:
    __version__ = 'unknown'
