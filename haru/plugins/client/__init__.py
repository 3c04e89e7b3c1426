"""Emits the transport module the endpoint modules call into."""

import asyncio
from importlib.resources import files
from pathlib import Path

from upath import UPath

from haru.core.plugin import Plugin
from haru.core.storage import GeneratedModule, SharedStorage
from haru.utils.dependencies import PathManager

__all__ = ['ClientPlugin']


class ClientPlugin(Plugin):
    """Adds ``connect_client_default.py`` to the output.

    When the output directory already holds a user-provided
    ``connect_client.py``, endpoint modules import that one instead and
    nothing is emitted.
    """

    CLIENT_FILE_NAME = 'connect_client'
    DEFAULT_CLIENT_FILE_NAME = 'connect_client_default'

    @classmethod
    async def get_client_file_name(
        cls, output_dir: str | Path | UPath | None = None
    ) -> str:
        if output_dir is None:
            return cls.DEFAULT_CLIENT_FILE_NAME

        custom_client = UPath(output_dir) / f'{cls.CLIENT_FILE_NAME}.py'
        if await asyncio.to_thread(custom_client.exists):
            return cls.CLIENT_FILE_NAME
        return cls.DEFAULT_CLIENT_FILE_NAME

    @staticmethod
    def read_template() -> str:
        return (
            files('haru.plugins.client')
            .joinpath('connect_client.py')
            .read_text(encoding='utf-8')
        )

    async def execute(self, storage: SharedStorage) -> None:
        file_name = await self.get_client_file_name(storage.output_dir)
        if file_name == self.CLIENT_FILE_NAME:
            self.logger.debug(f'Using custom {file_name}.py from the output directory')
            return

        self.logger.debug(f'Emitting {file_name}.py')
        storage.sources.append(
            GeneratedModule(
                path=PathManager().create_file_path(file_name),
                verbatim=self.read_template(),
            )
        )
