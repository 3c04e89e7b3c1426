import importlib
import logging

from haru.core.schema import SchemaResolver
from haru.core.storage import Diagnostic, SharedStorage
from haru.exceptions import ConfigurationError

__all__ = ['Plugin', 'load_plugin']


class Plugin:
    """Base class of the generation stages run by :class:`~haru.core.generator.Generator`.

    A plugin reads from and appends to the run's :class:`SharedStorage`.
    Plugins run one after another in the configured order.
    """

    def __init__(self, resolver: SchemaResolver, logger: logging.Logger | None = None):
        self.resolver = resolver
        self.logger = logger or logging.getLogger(f'haru.{self.name}')

    @property
    def name(self) -> str:
        return type(self).__name__

    async def execute(self, storage: SharedStorage) -> None:
        raise NotImplementedError

    def warn(self, storage: SharedStorage, message: str) -> None:
        """Log a warning and keep it as a diagnostic of the run."""
        self.logger.warning(message)
        storage.diagnostics.append(Diagnostic(self.name, message))


def load_plugin(reference: str) -> type[Plugin]:
    """Load a plugin class from a ``'package.module:ClassName'`` reference."""
    module_name, sep, class_name = reference.partition(':')
    if not sep or not module_name or not class_name:
        raise ConfigurationError(
            f"Invalid plugin reference '{reference}', expected 'module:ClassName'",
            field='plugins',
        )

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(
            f"Cannot import plugin module '{module_name}': {e}", field='plugins'
        )

    plugin = getattr(module, class_name, None)
    if not isinstance(plugin, type) or not issubclass(plugin, Plugin):
        raise ConfigurationError(
            f"'{reference}' is not a haru plugin class", field='plugins'
        )
    return plugin
