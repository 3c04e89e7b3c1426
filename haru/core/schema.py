"""Loading OpenAPI documents and resolving the references inside them.

This module provides:
- :class:`SchemaLoader`, reading a document from a URL or a local JSON/YAML file
- :class:`SchemaResolver`, dereferencing ``#/components/...`` references and
  classifying resolved schemas into a closed set of shapes
"""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any, TypeVar

import httpx
import yaml
from pydantic import ValidationError

from haru.exceptions import SchemaLoadError, SchemaReferenceError
from haru.openapi import OpenAPI, Reference, Schema
from haru.utils.naming import is_url

logger = logging.getLogger(__name__)

__all__ = [
    'SchemaKind',
    'SchemaLoader',
    'SchemaResolver',
]

T = TypeVar('T')

_PRIMITIVE_TYPES = frozenset({'string', 'integer', 'number', 'boolean', 'null'})
_COMPONENT_SECTIONS = ('schemas', 'parameters', 'requestBodies', 'responses')


class SchemaLoader:
    """Loads OpenAPI documents from URLs or file paths.

    JSON and YAML are both accepted. The content is parsed into the typed
    models of :mod:`haru.openapi`; nothing beyond their structure is checked.

    Example:
        >>> loader = SchemaLoader()
        >>> api = loader.load('https://api.example.com/openapi.json')
        >>> api = loader.load('./openapi.yaml')
    """

    def __init__(
        self,
        http_client: httpx.Client | None = None,
        base_path: str | Path | None = None,
    ):
        self._http_client = http_client
        self._base_path = Path(base_path) if base_path else Path.cwd()

    def load(self, source: str) -> OpenAPI:
        """Load and parse a document.

        Raises:
            SchemaLoadError: If the source can't be read or parsed.
        """
        try:
            if is_url(source):
                content = self._load_from_url(source)
            else:
                content = self._load_from_file(source)
            return self._parse(content, source)
        except SchemaLoadError:
            raise
        except Exception as e:
            raise SchemaLoadError(source, cause=e)

    def _load_from_url(self, url: str) -> dict:
        logger.debug('Fetching %s', url)
        try:
            if self._http_client:
                response = self._http_client.get(url)
            else:
                response = httpx.get(url, follow_redirects=True, timeout=30.0)

            response.raise_for_status()
            content_type = response.headers.get('content-type', '')

            if 'yaml' in content_type or url.endswith(('.yaml', '.yml')):
                return yaml.safe_load(response.text)
            return json.loads(response.text)

        except httpx.HTTPError as e:
            raise SchemaLoadError(url, cause=e)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise SchemaLoadError(url, cause=e)

    def _load_from_file(self, file_path: str) -> dict:
        path = Path(file_path)
        if not path.is_absolute():
            path = self._base_path / path

        if not path.exists():
            raise SchemaLoadError(
                str(file_path), cause=FileNotFoundError(f'File not found: {path}')
            )

        try:
            content = path.read_text(encoding='utf-8')
            if path.suffix.lower() in ('.yaml', '.yml'):
                return yaml.safe_load(content)
            return json.loads(content)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise SchemaLoadError(str(file_path), cause=e)
        except OSError as e:
            raise SchemaLoadError(str(file_path), cause=e)

    def _parse(self, content: Any, source: str) -> OpenAPI:
        if not isinstance(content, dict):
            raise SchemaLoadError(source, cause=TypeError('Document is not a mapping'))
        if 'swagger' in content:
            raise SchemaLoadError(
                source, cause=ValueError('Swagger 2.0 documents are not supported')
            )
        try:
            return OpenAPI.model_validate(content)
        except ValidationError as e:
            raise SchemaLoadError(source, cause=e)


class SchemaKind(str, Enum):
    """Closed set of shapes a resolved schema can take."""

    OBJECT = 'object'
    ENUM = 'enum'
    ARRAY = 'array'
    PRIMITIVE = 'primitive'
    COMPOSITE = 'composite'
    UNKNOWN = 'unknown'


class SchemaResolver:
    """Resolves ``$ref`` references against one OpenAPI document.

    Resolution is idempotent: a value that is not a reference comes back
    unchanged. References to references are followed to the end.

    Example:
        >>> resolver = SchemaResolver(api)
        >>> schema = resolver.resolve(Reference(ref='#/components/schemas/Pet'))
        >>> resolver.classify(schema)
        <SchemaKind.OBJECT: 'object'>
    """

    def __init__(self, api: OpenAPI):
        self.api = api
        self._cache: dict[str, Any] = {}

    def resolve(self, value: T | Reference) -> T:
        """Dereference ``value`` if it is a reference.

        Raises:
            SchemaReferenceError: If the reference can't be resolved.
        """
        seen: set[str] = set()
        while isinstance(value, Reference):
            ref = value.ref
            if ref in seen:
                raise SchemaReferenceError(ref, 'Circular reference')
            seen.add(ref)
            if ref not in self._cache:
                self._cache[ref] = self._lookup(ref)
            value = self._cache[ref]
        return value

    def _lookup(self, ref: str) -> Any:
        if is_url(ref) or ref.startswith(('./', '../')):
            raise SchemaReferenceError(
                ref,
                'External references are not supported. '
                'Consider bundling the document first.',
            )
        if not ref.startswith('#/'):
            raise SchemaReferenceError(ref, 'Unknown reference format')

        parts = [
            part.replace('~1', '/').replace('~0', '~') for part in ref[2:].split('/')
        ]
        if len(parts) != 3 or parts[0] != 'components':
            raise SchemaReferenceError(
                ref, 'Only #/components/<section>/<name> references are supported'
            )

        _, section, name = parts
        if section not in _COMPONENT_SECTIONS:
            raise SchemaReferenceError(ref, f"Unsupported section '{section}'")
        if not self.api.components:
            raise SchemaReferenceError(ref, 'Document has no components section')

        entries: dict[str, Any] = getattr(self.api.components, section)
        if name not in entries:
            available = ', '.join(sorted(entries)[:10])
            if len(entries) > 10:
                available += f', ... ({len(entries)} total)'
            raise SchemaReferenceError(
                ref, f"'{name}' not found. Available {section}: {available or 'none'}"
            )
        return entries[name]

    @staticmethod
    def reference_name(ref: str) -> str:
        """The component name a ``#/components/schemas/<name>`` reference targets."""
        if not ref.startswith('#/components/schemas/'):
            raise SchemaReferenceError(
                ref, 'Can only name #/components/schemas/ references'
            )
        return ref.rsplit('/', 1)[-1].replace('~1', '/').replace('~0', '~')

    def get_all_schemas(self) -> dict[str, Schema | Reference]:
        if not self.api.components:
            return {}
        return dict(self.api.components.schemas)

    def classify(self, schema: Schema | Reference) -> SchemaKind:
        schema = self.resolve(schema)
        if schema.enum is not None:
            return SchemaKind.ENUM
        if schema.allOf or schema.anyOf or schema.oneOf:
            return SchemaKind.COMPOSITE

        types = set(schema.types)
        if (
            'object' in types
            or schema.properties is not None
            or isinstance(schema.additionalProperties, (Schema, Reference))
        ):
            return SchemaKind.OBJECT
        if 'array' in types or schema.items is not None:
            return SchemaKind.ARRAY
        if types and types <= _PRIMITIVE_TYPES:
            return SchemaKind.PRIMITIVE
        return SchemaKind.UNKNOWN

    def is_object(self, schema: Schema | Reference) -> bool:
        return self.classify(schema) is SchemaKind.OBJECT

    def is_empty_object(self, schema: Schema | Reference) -> bool:
        """An object shape declaring no properties."""
        return self.is_object(schema) and not self.resolve(schema).properties
