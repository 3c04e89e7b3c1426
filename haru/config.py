import os
import re
import tomllib
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from haru.exceptions import ConfigurationError
from haru.plugins import DEFAULT_PLUGINS

DEFAULT_FILENAMES = ['haru.yaml', 'haru.yml']

_ENV_PATTERN = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}')


class DocumentConfig(BaseModel):
    """Represents a single document to be processed."""

    source: str = Field(..., description='Path or URL to the OpenAPI document.')

    output: str = Field(..., description='Output directory for the generated code.')

    plugins: list[str] = Field(
        default_factory=lambda: list(DEFAULT_PLUGINS),
        description="Plugins to run, in order, as 'package.module:ClassName'.",
    )

    format_code: bool = Field(
        False, description='Whether to format the generated code with black.'
    )

    @field_validator('plugins')
    @classmethod
    def _plugins_not_empty(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError('at least one plugin is required')
        return value


class HaruConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='HARU_')

    documents: list[DocumentConfig] = Field(
        ..., description='List of OpenAPI documents to process.'
    )

    verbose: bool = Field(False, description='Whether to log debug output.')


def expand_env(value: Any) -> Any:
    """Expand ``${VAR}`` and ``${VAR:-default}`` in every string of ``value``."""
    if isinstance(value, str):

        def replace(match: re.Match) -> str:
            name, default = match.group(1), match.group(2)
            if name in os.environ:
                return os.environ[name]
            if default is not None:
                return default
            raise ConfigurationError(
                f"Environment variable '{name}' is not set", field=name
            )

        return _ENV_PATTERN.sub(replace, value)
    if isinstance(value, dict):
        return {key: expand_env(item) for key, item in value.items()}
    if isinstance(value, list):
        return [expand_env(item) for item in value]
    return value


def load_yaml(path: str | Path) -> dict:
    try:
        content = yaml.safe_load(Path(path).read_text(encoding='utf-8'))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f'Cannot read configuration: {e}', config_path=str(path))
    if not isinstance(content, dict):
        raise ConfigurationError('Configuration must be a mapping', config_path=str(path))
    return content


def _validate(data: dict, path: Path) -> HaruConfig:
    try:
        # init kwargs so HARU_* environment variables fill the gaps
        return HaruConfig(**expand_env(data))
    except ValidationError as e:
        raise ConfigurationError(f'Invalid configuration: {e}', config_path=str(path))


def get_config(path: str | None = None, cwd: str | Path | None = None) -> HaruConfig:
    """Load configuration from a file.

    Looks, in order, at ``path``, ``haru.yaml``/``haru.yml`` and the
    ``[tool.haru]`` table of ``pyproject.toml`` in ``cwd``.
    """
    if path:
        if not Path(path).exists():
            raise ConfigurationError('Configuration file not found', config_path=path)
        return _validate(load_yaml(path), Path(path))

    base = Path(cwd) if cwd else Path(os.getcwd())

    for filename in DEFAULT_FILENAMES:
        candidate = base / filename
        if candidate.exists():
            return _validate(load_yaml(candidate), candidate)

    candidate = base / 'pyproject.toml'
    if candidate.exists():
        pyproject = tomllib.loads(candidate.read_text(encoding='utf-8'))
        tools = pyproject.get('tool', {})

        if 'haru' in tools:
            return _validate(tools['haru'], candidate)

    raise ConfigurationError(
        f"No configuration found, create {' or '.join(DEFAULT_FILENAMES)} "
        'or add [tool.haru] to pyproject.toml',
        config_path=str(base),
    )
