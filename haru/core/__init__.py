from haru.core.emitter import FileWriter, SourceEmitter
from haru.core.generator import Generator, GeneratorResult
from haru.core.plugin import Plugin, load_plugin
from haru.core.schema import SchemaKind, SchemaLoader, SchemaResolver
from haru.core.storage import Diagnostic, GeneratedModule, SharedStorage

__all__ = [
    'Diagnostic',
    'FileWriter',
    'GeneratedModule',
    'Generator',
    'GeneratorResult',
    'Plugin',
    'SchemaKind',
    'SchemaLoader',
    'SchemaResolver',
    'SharedStorage',
    'SourceEmitter',
    'load_plugin',
]
