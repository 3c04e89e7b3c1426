"""Endpoint and entity generation.

:class:`BackbonePlugin` groups the operations of the document by tag, builds
one endpoint module per tag and the ``models`` module, and records which of
the produced modules is which so later plugins can find them.
"""

import weakref
from enum import Enum

from haru.core.plugin import Plugin
from haru.core.storage import GeneratedModule, SharedStorage
from haru.plugins.backbone.endpoint import EndpointProcessor
from haru.plugins.backbone.entity import EntityProcessor
from haru.plugins.backbone.grouping import OperationInfo, group_operations
from haru.plugins.backbone.utils import run_in_order

__all__ = ['BackbonePlugin', 'BackboneSourceType', 'OperationInfo']


class BackboneSourceType(str, Enum):
    ENDPOINT = 'endpoint'
    ENTITY = 'entity'


class BackbonePlugin(Plugin):
    BACKBONE_PLUGIN_FILE_TAGS = 'BACKBONE_PLUGIN_FILE_TAGS'

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._tags: weakref.WeakKeyDictionary[GeneratedModule, BackboneSourceType] = (
            weakref.WeakKeyDictionary()
        )

    async def execute(self, storage: SharedStorage) -> None:
        endpoint_modules = await self._process_endpoints(storage)
        entity_modules = self._process_entities(storage)

        for module in endpoint_modules:
            self._tags[module] = BackboneSourceType.ENDPOINT
        for module in entity_modules:
            self._tags[module] = BackboneSourceType.ENTITY

        storage.sources.extend([*endpoint_modules, *entity_modules])
        storage.plugin_storage[self.BACKBONE_PLUGIN_FILE_TAGS] = self._tags

    async def _process_endpoints(self, storage: SharedStorage) -> list[GeneratedModule]:
        self.logger.debug('Processing endpoints')
        tag_groups = group_operations(storage.api, self.resolver)

        processors = await run_in_order(
            EndpointProcessor.create(tag, operations, storage, self)
            for tag, operations in tag_groups.items()
        )
        return await run_in_order(processor.process() for processor in processors)

    def _process_entities(self, storage: SharedStorage) -> list[GeneratedModule]:
        self.logger.debug('Processing entities')
        schemas = self.resolver.get_all_schemas()
        if not schemas:
            return []
        return [EntityProcessor(schemas, storage, self).process()]
