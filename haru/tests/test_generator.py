"""Tests for the plugin host, the emitter and the code generation pipeline."""

import ast
import asyncio
import importlib
import json
import sys
from unittest.mock import patch

import httpx
import pytest

from haru.codegen import Codegen
from haru.config import DocumentConfig
from haru.core.emitter import HEADER, FileWriter, SourceEmitter
from haru.core.generator import Generator
from haru.core.storage import GeneratedModule
from haru.exceptions import CodeGenerationError, ConfigurationError, SchemaReferenceError
from haru.openapi import OpenAPI
from haru.plugins import BackbonePlugin, BarrelPlugin, ClientPlugin
from haru.tests.fixtures import MISSING_REFERENCE_SPEC, NO_PROPERTIES_SPEC, PETSTORE_SPEC

DEFAULT_PLUGIN_CLASSES = [BackbonePlugin, ClientPlugin, BarrelPlugin]


def _process(spec: dict, plugins=DEFAULT_PLUGIN_CLASSES, **kwargs):
    generator = Generator(plugins, **kwargs)
    return asyncio.run(generator.process(OpenAPI.model_validate(spec)))


class TestGenerator:
    """Tests for Generator."""

    def test_files(self):
        result = _process(PETSTORE_SPEC)
        assert list(result.files) == [
            'Pet.py',
            'store.py',
            'models.py',
            'connect_client_default.py',
            'endpoints.py',
        ]
        assert result.diagnostics == []

    def test_generated_files_are_valid_python(self):
        result = _process(PETSTORE_SPEC)
        for path, source in result.files.items():
            ast.parse(source, filename=path)

    def test_header(self):
        result = _process(PETSTORE_SPEC)
        assert result.files['Pet.py'].startswith(HEADER)
        assert result.files['connect_client_default.py'] == ClientPlugin.read_template()

    def test_diagnostics_are_returned(self):
        result = _process(NO_PROPERTIES_SPEC)
        assert [diagnostic.plugin for diagnostic in result.diagnostics] == ['BackbonePlugin']

    def test_repeatable(self):
        assert _process(PETSTORE_SPEC).files == _process(PETSTORE_SPEC).files

    def test_module_path_collision(self):
        spec = {
            'openapi': '3.0.0',
            'info': {'title': 't', 'version': '1'},
            'paths': {'/models': {'get': {'responses': {}}}},
            'components': {'schemas': {'Pet': {'type': 'string'}}},
        }
        with pytest.raises(ConfigurationError, match="share the path 'models.py'"):
            _process(spec)

    def test_errors_propagate(self):
        with pytest.raises(SchemaReferenceError):
            _process(MISSING_REFERENCE_SPEC)


class TestSourceEmitter:
    """Tests for SourceEmitter."""

    def test_verbatim_module(self):
        module = GeneratedModule('x.py', verbatim='x = 1\n')
        assert SourceEmitter().emit(module) == 'x = 1\n'

    def test_header_docstring(self):
        module = GeneratedModule('x.py', header='Generated endpoints.')
        assert SourceEmitter().emit(module) == HEADER + '"""Generated endpoints."""\n'

    def test_invalid_module(self):
        statement = ast.Return(value=None)
        with pytest.raises(CodeGenerationError, match='not valid Python'):
            SourceEmitter().emit(GeneratedModule('x.py', statements=[statement]))

    def test_black_formatting(self):
        black = pytest.importorskip('black')
        result = _process(PETSTORE_SPEC, format_code=True)
        source = result.files['Pet.py']
        assert black.format_str(source, mode=black.Mode()) == source
        assert 'init: ClientRequestInit_1 | None = None' in source

    def test_missing_black_is_not_fatal(self, caplog):
        with patch.dict(sys.modules, {'black': None}):
            source = SourceEmitter(format_code=True).emit(
                GeneratedModule('x.py', statements=[ast.Pass()])
            )
        assert source == HEADER + 'pass\n'
        assert 'black is not installed' in caplog.text


class TestFileWriter:
    """Tests for FileWriter."""

    def test_writes_files_and_init(self, tmp_path):
        paths = FileWriter(tmp_path / 'out').write({'a.py': 'a = 1\n', 'sub/b.py': 'b = 2\n'})
        assert [path.name for path in paths] == ['a.py', 'b.py']
        assert (tmp_path / 'out' / 'a.py').read_text() == 'a = 1\n'
        assert (tmp_path / 'out' / '__init__.py').exists()
        assert (tmp_path / 'out' / 'sub' / '__init__.py').exists()

    def test_existing_init_is_kept(self, tmp_path):
        (tmp_path / '__init__.py').write_text('VERSION = 1\n')
        FileWriter(tmp_path).write({'a.py': ''})
        assert (tmp_path / '__init__.py').read_text() == 'VERSION = 1\n'


@pytest.fixture
def petstore_package(tmp_path, monkeypatch):
    """Generate the petstore client into an importable package."""
    package = 'petstore_generated'
    source = tmp_path / 'openapi.json'
    source.write_text(json.dumps(PETSTORE_SPEC))

    config = DocumentConfig(source=str(source), output=str(tmp_path / package))
    result = Codegen(config).generate()

    monkeypatch.syspath_prepend(str(tmp_path))
    yield package, result
    for name in list(sys.modules):
        if name == package or name.startswith(f'{package}.'):
            del sys.modules[name]


class TestCodegen:
    """End-to-end tests for Codegen."""

    def test_writes_package(self, petstore_package, tmp_path):
        package, result = petstore_package
        written = sorted(path.name for path in (tmp_path / package).iterdir())
        assert written == sorted([*result.files, '__init__.py'])

    def test_generated_client_calls_server(self, petstore_package):
        package, _ = petstore_package
        endpoints = importlib.import_module(f'{package}.endpoints')
        transport = importlib.import_module(f'{package}.connect_client_default')
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if request.method == 'POST':
                return httpx.Response(201, json=json.loads(request.content))
            return httpx.Response(200, json={'id': 1, 'name': 'Rex'})

        async def run():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
                transport.configure('https://petstore.test', http_client=http)
                fetched = await endpoints.Pet.getPetById(1)
                created = await endpoints.Pet.createPet(
                    2, 'Tom', None, 'available', {'headers': {'X-Trace': 'abc'}}
                )
                return fetched, created

        fetched, created = asyncio.run(run())
        assert fetched == {'id': 1, 'name': 'Rex'}
        assert created == {'id': 2, 'name': 'Tom', 'tag': None, 'status': 'available'}
        assert str(requests[0].url) == 'https://petstore.test/pets/1'
        assert requests[1].headers['X-Trace'] == 'abc'

    def test_models_are_importable(self, petstore_package):
        package, _ = petstore_package
        models = importlib.import_module(f'{package}.models')
        assert models.Pet(id=1, name='Rex').tag is None

    def test_nothing_written_on_failure(self, tmp_path):
        source = tmp_path / 'openapi.json'
        source.write_text(json.dumps(MISSING_REFERENCE_SPEC))
        output = tmp_path / 'client'
        with pytest.raises(SchemaReferenceError):
            Codegen(DocumentConfig(source=str(source), output=str(output))).generate()
        assert not output.exists()

    def test_invalid_plugin(self, tmp_path):
        config = DocumentConfig(
            source=str(tmp_path / 'openapi.json'),
            output=str(tmp_path / 'client'),
            plugins=['haru.plugins.client'],
        )
        with pytest.raises(ConfigurationError):
            Codegen(config).generate()
