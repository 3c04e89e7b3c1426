"""Import/export bookkeeping for one generated module.

A :class:`DependencyManager` is created per generated module. It hands out the
local identifiers under which other generated modules are imported, remembers
them so a repeated request never produces a second import, and keeps the
registry of names the module exports.

Every method is synchronous: concurrent operation tasks sharing one manager
never observe a half-applied change.

Example:
    >>> deps = DependencyManager(PathManager())
    >>> path = deps.paths.create_relative_path('connect_client_default')
    >>> deps.imports.default.add(path, 'client')
    'client_1'
    >>> deps.imports.named.add(path, 'ClientRequestInit')
    'ClientRequestInit_1'
"""

import ast
from collections.abc import Iterable
from pathlib import PurePosixPath

from haru.exceptions import DuplicateExportError
from haru.utils.ast_utils import _all, _assign, _name

__all__ = [
    'DefaultImportManager',
    'DependencyManager',
    'ExportManager',
    'IdentifierScope',
    'ImportManager',
    'NamedImportManager',
    'PathManager',
    'split_relative_path',
]


class IdentifierScope:
    """The set of top-level names bound in one generated module.

    ``reserved`` names count as bound from the start: the module refers to
    them unqualified (builtins written into annotations), so nothing
    generated may rebind them before the module body has run.
    """

    def __init__(self, reserved: Iterable[str] = ()):
        self._taken: set[str] = set(reserved)
        self._claimed: set[str] = set()

    def is_taken(self, name: str) -> bool:
        return name in self._taken

    def reserve(self, name: str) -> str:
        self._taken.add(name)
        return name

    def claim(self, name: str) -> None:
        """Keep ``name`` away from :meth:`allocate` without binding it yet."""
        self._claimed.add(name)

    def allocate(self, name: str) -> str:
        """Allocate a fresh ``<name>_<n>`` identifier."""
        counter = 1
        while f'{name}_{counter}' in self._taken | self._claimed:
            counter += 1
        return self.reserve(f'{name}_{counter}')


def split_relative_path(path: str) -> tuple[int, str]:
    """Split ``'..models'`` into the import level and the dotted module."""
    module = path.lstrip('.')
    return len(path) - len(module), module


class PathManager:
    """Computes file names and relative import paths between generated modules.

    Module paths are ``/``-separated and relative to the output directory,
    e.g. ``'connect_client_default'`` or ``'api/models'``. Results never
    depend on the current working directory.
    """

    def __init__(self, extension: str = 'py', relative_to: str = '.'):
        self.extension = extension.lstrip('.')
        self.relative_to = relative_to

    def strip_extension(self, path: str) -> str:
        suffix = f'.{self.extension}'
        return path[: -len(suffix)] if path.endswith(suffix) else path

    def create_file_path(self, name: str) -> str:
        return f'{self.strip_extension(name)}.{self.extension}'

    def create_relative_path(self, path: str, relative_to: str | None = None) -> str:
        """Relative module spec for ``path`` as seen from ``relative_to``.

        ``'api/models'`` seen from ``'.'`` is ``'.api.models'``; ``'models'``
        seen from ``'api'`` is ``'..models'``.
        """
        target = [
            part for part in PurePosixPath(self.strip_extension(path)).parts if part != '.'
        ]
        base = [
            part
            for part in PurePosixPath(relative_to or self.relative_to).parts
            if part != '.'
        ]
        if not target:
            raise ValueError(f'Cannot create a relative path to {path!r}')

        common = 0
        for base_part, target_part in zip(base, target[:-1]):
            if base_part != target_part:
                break
            common += 1

        level = len(base) - common + 1
        return '.' * level + '.'.join(target[common:])


class DefaultImportManager:
    """Whole-module imports: ``from <package> import <module> as <identifier>``."""

    def __init__(self, scope: IdentifierScope):
        self._scope = scope
        self._identifiers: dict[str, str] = {}

    def add(self, path: str, name: str) -> str:
        if path in self._identifiers:
            return self._identifiers[path]
        identifier = self._scope.allocate(name)
        self._identifiers[path] = identifier
        return identifier

    def get_identifier(self, path: str) -> str | None:
        return self._identifiers.get(path)

    def __len__(self) -> int:
        return len(self._identifiers)

    def to_ast(self) -> list[ast.stmt]:
        statements: list[ast.stmt] = []
        for path in sorted(self._identifiers):
            level, module = split_relative_path(path)
            identifier = self._identifiers[path]
            if level == 0:
                statements.append(
                    ast.Import(names=[ast.alias(name=module, asname=identifier)])
                )
                continue
            package, _, name = module.rpartition('.')
            statements.append(
                ast.ImportFrom(
                    module=package or None,
                    names=[ast.alias(name=name, asname=identifier)],
                    level=level,
                )
            )
        return statements


class NamedImportManager:
    """Single-name imports: ``from <module> import <name> as <identifier>``."""

    def __init__(self, scope: IdentifierScope):
        self._scope = scope
        self._identifiers: dict[str, dict[str, str]] = {}

    def add(self, path: str, name: str) -> str:
        names = self._identifiers.setdefault(path, {})
        if name in names:
            return names[name]
        identifier = self._scope.allocate(name)
        names[name] = identifier
        return identifier

    def get_identifier(self, path: str, name: str) -> str | None:
        return self._identifiers.get(path, {}).get(name)

    def __len__(self) -> int:
        return sum(len(names) for names in self._identifiers.values())

    def to_ast(self) -> list[ast.stmt]:
        statements: list[ast.stmt] = []
        for path in sorted(self._identifiers):
            level, module = split_relative_path(path)
            names = self._identifiers[path]
            statements.append(
                ast.ImportFrom(
                    module=module,
                    names=[
                        ast.alias(name=name, asname=names[name])
                        for name in sorted(names)
                    ],
                    level=level,
                )
            )
        return statements


class ImportManager:
    def __init__(self, scope: IdentifierScope):
        self.default = DefaultImportManager(scope)
        self.named = NamedImportManager(scope)

    def to_ast(self) -> list[ast.stmt]:
        return [*self.default.to_ast(), *self.named.to_ast()]


class ExportManager:
    """Registry of the names a module exports.

    Each exported name maps to the local binding holding the value. A name can
    be exported once; a second registration is an input error.
    """

    def __init__(self, scope: IdentifierScope, module: str | None = None):
        self._scope = scope
        self._module = module
        self._bindings: dict[str, str] = {}

    def add(self, name: str, binding: str | None = None) -> str:
        """Export ``name`` and return the local binding to declare it under.

        Without an explicit binding the name itself is used, unless something
        in the module already took it; then a suffixed binding is allocated
        and ``name = binding`` is emitted with the exports.
        """
        if name in self._bindings:
            raise DuplicateExportError(name, self._module)
        if binding is None:
            if self._scope.is_taken(name):
                binding = self._scope.allocate(name)
            else:
                binding = self._scope.reserve(name)
        else:
            self._scope.reserve(binding)
        self._bindings[name] = binding
        return binding

    def get_binding(self, name: str) -> str | None:
        return self._bindings.get(name)

    def names(self) -> list[str]:
        return sorted(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)

    def to_ast(self) -> list[ast.stmt]:
        if not self._bindings:
            return []
        aliases: list[ast.stmt] = [
            _assign(_name(name), _name(self._bindings[name]))
            for name in self.names()
            if self._bindings[name] != name
        ]
        return [*aliases, _all(self.names())]


class DependencyManager:
    """Symbol table of one generated module."""

    def __init__(
        self,
        paths: PathManager,
        module: str | None = None,
        reserved: Iterable[str] = (),
    ):
        self.paths = paths
        self.scope = IdentifierScope(reserved)
        self.imports = ImportManager(self.scope)
        self.exports = ExportManager(self.scope, module)

    def claim(self, *names: str) -> None:
        """Claim names the module binds itself so imports never take them."""
        for name in names:
            self.scope.claim(name)
