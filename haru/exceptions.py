"""Errors raised by haru.

Everything a generation run raises on purpose derives from ``HaruError``.
Problems that do not stop the run (an unsupported request body, for example)
are not exceptions: plugins log them and record a ``Diagnostic`` instead.
"""


class HaruError(Exception):
    """Root of the haru error hierarchy.

    ``message`` is the text without the cause; ``str(error)`` appends the
    cause when there is one.

    Example:
        try:
            Codegen(config).generate()
        except HaruError as e:
            console.print(f'[red]Error:[/red] {e}')
    """

    def __init__(self, message: str, cause: Exception | None = None):
        self.message = message
        self.cause = cause
        super().__init__(f'{message}: {cause}' if cause is not None else message)


class SchemaError(HaruError):
    """The API document cannot be used."""


class SchemaLoadError(SchemaError):
    """The API document could not be read, parsed or validated."""

    def __init__(self, source: str, cause: Exception | None = None):
        self.source = source
        super().__init__(f"Cannot load API document '{source}'", cause)


class SchemaReferenceError(SchemaError):
    """A ``$ref`` points nowhere the resolver can follow."""

    def __init__(self, reference: str, reason: str | None = None):
        self.reference = reference
        self.reason = reason
        message = f"Unresolved reference '{reference}'"
        if reason:
            message += f' ({reason})'
        super().__init__(message)


class CodeGenerationError(HaruError):
    """A module could not be synthesized.

    Attributes:
        context: The module or declaration being generated, if known.
    """

    def __init__(
        self, message: str, context: str | None = None, cause: Exception | None = None
    ):
        self.context = context
        if context:
            message = f'{message} [{context}]'
        super().__init__(message, cause)


class EndpointGenerationError(CodeGenerationError):
    """An operation of an endpoint module failed with an unexpected error.

    The original exception is kept as ``cause``; ``method`` and ``path``
    locate the operation inside the document.
    """

    def __init__(
        self,
        endpoint: str,
        method: str | None = None,
        path: str | None = None,
        cause: Exception | None = None,
    ):
        self.endpoint = endpoint
        self.method = method
        self.path = path
        if method and path:
            message = f'Cannot generate operation {method.upper()} {path}'
        else:
            message = 'Cannot generate endpoint module'
        super().__init__(message, context=endpoint, cause=cause)


class ConfigurationError(HaruError):
    """The run is set up wrongly; nothing is generated."""

    def __init__(
        self, message: str, config_path: str | None = None, field: str | None = None
    ):
        self.config_path = config_path
        self.field = field
        if config_path:
            message = f'{config_path}: {message}'
        if field:
            message += f' [{field}]'
        super().__init__(message)


class DuplicateExportError(ConfigurationError):
    """One generated module would export the same name twice."""

    def __init__(self, name: str, module: str | None = None):
        self.name = name
        self.module = module
        message = f"'{name}' is exported twice"
        if module:
            message += f" from '{module}'"
        super().__init__(message)


class PluginError(ConfigurationError):
    """A plugin cannot run with the plugins that ran before it."""

    def __init__(self, message: str, plugin: str | None = None):
        self.plugin = plugin
        super().__init__(f'[{plugin}] {message}' if plugin else message)


class OutputError(HaruError):
    """A generated file could not be written."""

    def __init__(self, output_path: str, cause: Exception | None = None):
        self.output_path = output_path
        super().__init__(f"Cannot write '{output_path}'", cause)
