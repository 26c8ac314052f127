"""Configuration sources for directory lookup.

The discovery engine only needs read access to configuration: a single
`get` call returning a directory or a list of directories for a dotted
key. This module declares that contract and ships a dictionary-backed
implementation able to merge YAML files.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from yaml import safe_load
from yaml.error import MarkedYAMLError, YAMLError

from class_discovery.errors import ConfigurationError, ErrorContext
from class_discovery.models import DiscoverySettings

if TYPE_CHECKING:
    from os import PathLike
    from typing import Self

logger = logging.getLogger(__name__)

#: Separator of dotted configuration keys.
KEY_SEPARATOR = '.'

#: Configuration key accepted by sources.
type KeyPath = str | Sequence[str | int]


@runtime_checkable
class ConfigurationSource(Protocol):
    """Read-only configuration storage."""

    def get(self, path: KeyPath, default: Any = None) -> Any:  # noqa: ANN401
        """Return the value stored under `path`, or `default` when absent."""
        ...  # pragma: no cover


class Configuration:
    """Dictionary-backed configuration source.

    Keys are dotted strings (`system.dirs.controllers`) or sequences of
    segments. Integer segments, or digit-only string segments, index
    into lists.
    """

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        """Initialize a configuration source.

        Args:
            data: Nested configuration mapping.
        """
        self.data: dict[str, Any] = dict(data or {})

    def __repr__(self) -> str:
        """String representation."""
        return f'{self.__class__.__name__}({self.data!r})'

    def get(self, path: KeyPath, default: Any = None) -> Any:  # noqa: ANN401
        """Return the value stored under a key path.

        Args:
            path: Dotted key or sequence of key segments.
            default: Value returned if any segment is missing.

        Returns:
            The stored value or `default`.
        """
        value: Any = self.data

        for segment in self.split_path(path):
            if isinstance(value, Mapping) and segment in value:
                value = value[segment]
            elif isinstance(value, Sequence) and not isinstance(value, str) and _is_index(segment):
                index = int(segment)
                if not -len(value) <= index < len(value):
                    return default
                value = value[index]
            else:
                return default

        return value

    @staticmethod
    def split_path(path: KeyPath) -> list[str | int]:
        """Split a key path into segments.

        Args:
            path: Dotted key or sequence of key segments.

        Returns:
            A list of non-empty key segments.
        """
        if isinstance(path, str):
            return [segment for segment in path.split(KEY_SEPARATOR) if segment]

        return list(path)

    def merge(self, data: Mapping[str, Any]) -> None:
        """Deep-merge a mapping into the configuration.

        Nested mappings are merged recursively; any other value
        replaces the existing one.

        Args:
            data: Mapping to merge.
        """
        _deep_merge(self.data, data)

    @classmethod
    def from_yaml(cls, *files: 'str | PathLike[str]') -> 'Self':
        """Build a configuration by merging YAML files in order.

        Args:
            *files: YAML files with a mapping at the document root.
                Empty documents are skipped.

        Returns:
            A configuration source holding the merged data.

        Raises:
            ConfigurationError: If a file cannot be read, is not valid
                YAML, or its root is not a mapping.
        """
        configuration = cls()

        for filename in files:
            try:
                with open(filename, encoding='utf-8') as stream:
                    data = safe_load(stream)

            except MarkedYAMLError as base:
                raise ConfigurationError.from_yaml_error(base, filename=str(filename)) from base

            except (OSError, YAMLError) as base:
                raise ConfigurationError(
                    f'Can not read configuration: {base}',
                    context=ErrorContext(filename=str(filename), error=base),
                ) from base

            if data is None:
                logger.debug('Configuration file %s is empty', filename)
                continue

            if not isinstance(data, Mapping):
                raise ConfigurationError(
                    'Configuration root must be a mapping',
                    context=ErrorContext(filename=str(filename), value=data),
                )

            logger.debug('Merging configuration file %s', filename)
            configuration.merge(data)

        return configuration

    @classmethod
    def from_settings(cls, settings: DiscoverySettings | None = None) -> 'Self':
        """Build a configuration from environment-driven settings.

        Args:
            settings: Resolved settings; read from the environment if omitted.

        Returns:
            A configuration source merging `settings.config_files`.
        """
        if settings is None:
            settings = DiscoverySettings()

        return cls.from_yaml(*settings.config_files)


def _is_index(segment: str | int) -> bool:
    """Check whether a key segment addresses a list item."""
    if isinstance(segment, int):
        return True

    return segment.lstrip('-').isdigit()


def _deep_merge(target: dict[str, Any], source: Mapping[str, Any]) -> None:
    """Recursively merge `source` into `target` in place."""
    for key, value in source.items():
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            _deep_merge(current, value)
        elif isinstance(value, Mapping):
            target[key] = {}
            _deep_merge(target[key], value)
        else:
            target[key] = value
