"""Turning generated modules into source text and writing them to disk."""

import ast
import logging
from collections.abc import Mapping
from pathlib import Path

from upath import UPath

from haru.core.storage import GeneratedModule
from haru.exceptions import CodeGenerationError, OutputError

logger = logging.getLogger(__name__)

__all__ = ['FileWriter', 'SourceEmitter']

HEADER = '# This file is generated by haru. Do not edit.\n'


class SourceEmitter:
    """Emits a :class:`GeneratedModule` as Python source.

    Modules are unparsed with :func:`ast.unparse`, checked by compiling the
    result and optionally formatted with black (installed through the
    ``format`` extra).
    """

    def __init__(self, format_code: bool = False, header: str = HEADER):
        self.format_code = format_code
        self.header = header

    def emit(self, module: GeneratedModule) -> str:
        if module.verbatim is not None:
            return module.verbatim

        try:
            source = ast.unparse(module.to_ast())
        except Exception as e:
            raise CodeGenerationError(
                'Cannot unparse module', context=module.path, cause=e
            )

        self._validate_syntax(source, module.path)

        if self.format_code:
            source = self._format_source(source)
        if not source.endswith('\n'):
            source += '\n'
        return self.header + source

    @staticmethod
    def _validate_syntax(source: str, name: str) -> None:
        try:
            compile(source, name, 'exec')
        except SyntaxError as e:
            raise CodeGenerationError(
                'Generated code is not valid Python', context=name, cause=e
            )

    @staticmethod
    def _format_source(source: str) -> str:
        try:
            import black
        except ImportError:
            logger.warning(
                'black is not installed, leaving generated code unformatted. '
                "Install haru with the 'format' extra to enable formatting."
            )
            return source
        return black.format_str(source, mode=black.Mode())


class FileWriter:
    """Writes emitted files below an output directory.

    Every directory that receives a Python file also gets an empty
    ``__init__.py`` when it doesn't have one, so the relative imports between
    generated modules resolve.
    """

    def __init__(self, output_dir: str | Path | UPath):
        self.output_dir = UPath(output_dir)

    def write(self, files: Mapping[str, str]) -> list[UPath]:
        written: list[UPath] = []
        for relative_path, content in files.items():
            path = self.output_dir / relative_path
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(content, encoding='utf-8')
            except OSError as e:
                raise OutputError(str(path), cause=e)
            logger.debug('Wrote %s', path)
            written.append(path)

        for directory in sorted({path.parent for path in written}, key=str):
            self.write_init_file(directory)
        return written

    @staticmethod
    def write_init_file(directory: UPath) -> None:
        init_file = directory / '__init__.py'
        if not init_file.exists():
            directory.mkdir(parents=True, exist_ok=True)
            init_file.touch()
