"""Code generation entry point.

:class:`Codegen` runs the whole pipeline for one configured document: load the
OpenAPI document, run the plugins and write the files.
"""

import asyncio
import logging

from upath import UPath

from haru.config import DocumentConfig
from haru.core.emitter import FileWriter
from haru.core.generator import Generator, GeneratorResult
from haru.core.plugin import load_plugin
from haru.core.schema import SchemaLoader

logger = logging.getLogger(__name__)

__all__ = ['Codegen']


class Codegen:
    """Generates a Python client package for one document.

    Example:
        >>> config = DocumentConfig(source='./openapi.yaml', output='./client')
        >>> result = Codegen(config).generate()
        >>> sorted(result.files)
        ['Pet.py', 'connect_client_default.py', 'endpoints.py', 'models.py']
    """

    def __init__(self, config: DocumentConfig, loader: SchemaLoader | None = None):
        self.config = config
        self.loader = loader or SchemaLoader()

    async def generate_async(self) -> GeneratorResult:
        plugins = [load_plugin(reference) for reference in self.config.plugins]
        output_dir = UPath(self.config.output)

        logger.info('Loading %s', self.config.source)
        api = self.loader.load(self.config.source)

        generator = Generator(
            plugins, output_dir=output_dir, format_code=self.config.format_code
        )
        result = await generator.process(api)

        FileWriter(output_dir).write(result.files)
        logger.info('Wrote %d files to %s', len(result.files), output_dir)
        return result

    def generate(self) -> GeneratorResult:
        return asyncio.run(self.generate_async())
