"""Directory resolution and file scanning.

This module defines a mixin turning a configuration key into the ordered
list of existing directories it names, and those directories into the
ordered list of files matching a glob filter.
"""

import logging
import os
from glob import escape, glob
from pathlib import Path
from typing import TYPE_CHECKING, Any

from class_discovery.errors import ConfigurationError, ErrorContext

if TYPE_CHECKING:
    from class_discovery.configuration import ConfigurationSource

logger = logging.getLogger(__name__)


def expand_braces(pattern: str) -> list[str]:
    """Expand brace alternatives of a glob pattern.

    `*.{py,pyc}` expands to `*.py` and `*.pyc`. Nested groups are
    expanded recursively; braces without a top-level comma are kept
    literally.

    Args:
        pattern: Glob pattern.

    Returns:
        Expanded patterns in alternative order.
    """
    depth = 0
    start = None

    for index, char in enumerate(pattern):
        if char == '{':
            if depth == 0:
                start = index
            depth += 1
        elif char == '}' and depth:
            depth -= 1
            if depth == 0 and start is not None:
                alternatives = _split_alternatives(pattern[start + 1:index])
                if len(alternatives) > 1:
                    prefix, suffix = pattern[:start], pattern[index + 1:]
                    return [
                        expanded
                        for alternative in alternatives
                        for expanded in expand_braces(f'{prefix}{alternative}{suffix}')
                    ]
                start = None

    return [pattern]


def _split_alternatives(body: str) -> list[str]:
    """Split a brace group body on top-level commas."""
    alternatives = []
    depth = 0
    current = ''

    for char in body:
        if char == ',' and depth == 0:
            alternatives.append(current)
            current = ''
            continue
        if char == '{':
            depth += 1
        elif char == '}' and depth:
            depth -= 1
        current += char

    alternatives.append(current)

    return alternatives


class DirectoryScannerMixin:
    """Mixin defining directory resolution and file scanning behavior.

    Implementers provide the configuration source; the mixin only
    normalizes configured values and applies glob filters.
    """

    configuration: 'ConfigurationSource'

    def read_directories(self, config_path: str) -> list[str]:
        """Read the configured directory value as a list.

        Args:
            config_path: Configuration key naming the directories.

        Returns:
            Configured entries, empty if nothing is configured.

        Raises:
            ConfigurationError: If the value is neither a string
                nor a list of strings.
        """
        value: Any = self.configuration.get(config_path)
        if not value:
            return []

        if isinstance(value, (str, os.PathLike)):
            value = [value]

        if not isinstance(value, (list, tuple)) or not all(
            isinstance(item, (str, os.PathLike)) for item in value
        ):
            raise ConfigurationError(
                'Directories must be a path or a list of paths',
                context=ErrorContext(config_path=config_path, value=value),
            )

        return [os.fspath(item) for item in value]

    def resolve_directories(self, config_path: str) -> list[Path]:
        """Resolve configured directories that exist on the filesystem.

        Entries are normalized to absolute paths. Missing directories are
        logged and skipped, repeated ones are kept once, and configuration
        order is preserved.

        Args:
            config_path: Configuration key naming the directories.

        Returns:
            Ordered list of existing directories.
        """
        directories: list[Path] = []

        for entry in self.read_directories(config_path):
            directory = Path(os.path.abspath(os.path.normpath(entry)))

            if not directory.exists():
                logger.warning('Directory %s does not exist', directory)
                continue

            if directory in directories:
                logger.debug('Directory %s is configured twice', directory)
                continue

            directories.append(directory)

        return directories

    @staticmethod
    def scan_directory(directory: Path, pattern: str) -> list[Path]:
        """Apply a glob filter under one directory.

        Args:
            directory: Directory to scan.
            pattern: Glob filter, relative to the directory.

        Returns:
            Sorted, unique matching file paths.
        """
        pattern = pattern.lstrip('/\\')
        matches: set[str] = set()

        for expanded in expand_braces(pattern):
            matches.update(glob(os.path.join(escape(os.fspath(directory)), expanded), recursive=True))

        return [Path(match) for match in sorted(matches) if os.path.isfile(match)]

    def scan_files(self, directories: list[Path], pattern: str) -> list[Path]:
        """Apply a glob filter under every directory.

        Matches repeated across directories are kept, each of them is
        processed independently.

        Args:
            directories: Directories to scan, in order.
            pattern: Glob filter.

        Returns:
            Matches in directory order, then sorted match order.
        """
        return [
            match
            for directory in directories
            for match in self.scan_directory(directory, pattern)
        ]

