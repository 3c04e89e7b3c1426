"""Emits ``endpoints.py``, re-exporting every endpoint module."""

from haru.core.plugin import Plugin
from haru.core.storage import GeneratedModule, SharedStorage
from haru.exceptions import PluginError
from haru.plugins.backbone import BackbonePlugin, BackboneSourceType
from haru.utils.dependencies import DependencyManager, PathManager

__all__ = ['BarrelPlugin', 'BarrelProcessor']

BARREL_MODULE = 'endpoints'


class BarrelProcessor:
    def __init__(self, endpoints: list[GeneratedModule], owner: Plugin):
        self.endpoints = endpoints
        self.owner = owner
        self.file_path = PathManager().create_file_path(BARREL_MODULE)
        self.dependencies = DependencyManager(PathManager(), module=self.file_path)

    def process(self) -> GeneratedModule:
        self.owner.logger.debug('Processing barrel file')
        paths = self.dependencies.paths
        names = [paths.strip_extension(module.path) for module in self.endpoints]
        self.dependencies.claim(*(name.rsplit('/', 1)[-1] for name in names))

        for name in names:
            export_name = name.rsplit('/', 1)[-1]
            identifier = self.dependencies.imports.default.add(
                paths.create_relative_path(name), export_name
            )
            self.dependencies.exports.add(export_name, identifier)

        return GeneratedModule(
            path=self.file_path,
            imports=self.dependencies.imports.to_ast(),
            exports=self.dependencies.exports.to_ast(),
        )


class BarrelPlugin(Plugin):
    async def execute(self, storage: SharedStorage) -> None:
        tags = storage.plugin_storage.get(BackbonePlugin.BACKBONE_PLUGIN_FILE_TAGS)
        if tags is None:
            raise PluginError(f'{BackbonePlugin.__name__} should be run first.', self.name)

        endpoints = [
            module
            for module in storage.sources
            if tags.get(module) is BackboneSourceType.ENDPOINT
        ]
        storage.sources.append(BarrelProcessor(endpoints, self).process())
