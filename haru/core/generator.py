"""Plugin host: runs the generation stages over one document."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from upath import UPath

from haru.core.emitter import SourceEmitter
from haru.core.plugin import Plugin
from haru.core.schema import SchemaResolver
from haru.core.storage import Diagnostic, SharedStorage
from haru.exceptions import ConfigurationError
from haru.openapi import OpenAPI

logger = logging.getLogger(__name__)

__all__ = ['Generator', 'GeneratorResult']


@dataclass
class GeneratorResult:
    """Output of one run.

    Attributes:
        files: Source text keyed by file path relative to the output directory.
        diagnostics: Non-fatal problems recorded during the run.
    """

    files: dict[str, str] = field(default_factory=dict)
    diagnostics: list[Diagnostic] = field(default_factory=list)


class Generator:
    """Runs plugins in order over a shared storage and emits their modules.

    Nothing is written here; when any plugin raises, the exception propagates
    and no result is produced.

    Example:
        >>> generator = Generator([BackbonePlugin, ClientPlugin, BarrelPlugin])
        >>> result = asyncio.run(generator.process(api))
        >>> sorted(result.files)
        ['Pet.py', 'connect_client_default.py', 'endpoints.py', 'models.py']
    """

    def __init__(
        self,
        plugins: Sequence[type[Plugin]],
        output_dir: str | Path | UPath | None = None,
        format_code: bool = False,
    ):
        self.plugins = list(plugins)
        self.output_dir = UPath(output_dir) if output_dir is not None else None
        self.emitter = SourceEmitter(format_code=format_code)

    async def process(self, api: OpenAPI) -> GeneratorResult:
        resolver = SchemaResolver(api)
        storage = SharedStorage(api=api, output_dir=self.output_dir)

        for plugin_class in self.plugins:
            plugin = plugin_class(
                resolver, logging.getLogger(f'haru.{plugin_class.__name__}')
            )
            logger.debug('Running %s', plugin.name)
            await plugin.execute(storage)

        files: dict[str, str] = {}
        for module in storage.sources:
            if module.path in files:
                raise ConfigurationError(
                    f"Two generated modules share the path '{module.path}'"
                )
            files[module.path] = self.emitter.emit(module)

        logger.debug('Generated %d files', len(files))
        return GeneratorResult(files=files, diagnostics=list(storage.diagnostics))
