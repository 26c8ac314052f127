"""Module loaders used to read the namespace exported by a discovered file.

A module loader turns a file path into a mapping of exported names.
The default `ImportLoader` imports the file with `importlib`; the
`TypeRegistry` (see `class_discovery.registry`) serves pre-registered
classes instead of importing anything.
"""

import logging
import sys
from hashlib import sha1
from importlib.util import module_from_spec, spec_from_file_location
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from class_discovery.errors import ErrorContext, ReflectionError

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import ModuleType

logger = logging.getLogger(__name__)

#: Prefix of synthetic module names given to imported files.
MODULE_PREFIX = '_class_discovery_'


@runtime_checkable
class ModuleLoader(Protocol):
    """Loader returning the namespace exported by a file."""

    def load(self, path: Path) -> 'Mapping[str, Any]':
        """Return names exported by the file at `path`."""
        ...  # pragma: no cover


class ImportLoader:
    """Loader importing files as Python modules.

    Every file is imported at most once per loader: modules are cached by
    resolved path and registered in `sys.modules` under a synthetic name
    derived from the path, so files sharing a base name in different
    directories never collide.
    """

    def __init__(self) -> None:
        """Initialize an empty module cache."""
        self.modules: dict[Path, 'ModuleType'] = {}

    def load(self, path: Path) -> 'Mapping[str, Any]':
        """Import a file (once) and return its namespace.

        Args:
            path: Python source file or extension module.

        Returns:
            The module namespace.

        Raises:
            ReflectionError: If no import machinery can load the file.
            Exception: Any error raised while executing the module.
        """
        path = Path(path).resolve()

        module = self.modules.get(path)
        if module is None:
            module = self.import_file(path)
            self.modules[path] = module

        return vars(module)

    @staticmethod
    def module_name(path: Path) -> str:
        """Build a unique, importable module name for a file."""
        digest = sha1(str(path).encode(), usedforsecurity=False).hexdigest()[:12]
        stem = ''.join(char if char.isalnum() else '_' for char in path.stem)

        return f'{MODULE_PREFIX}{stem}_{digest}'

    def import_file(self, path: Path) -> 'ModuleType':
        """Execute a file as a new module.

        Args:
            path: Resolved file path.

        Returns:
            The executed module.

        Raises:
            ReflectionError: If no import machinery can load the file.
        """
        name = self.module_name(path)

        spec = spec_from_file_location(name, path)
        if spec is None or spec.loader is None:
            raise ReflectionError(
                f'cannot import file {path}',
                context=ErrorContext(filename=str(path)),
            )

        module = module_from_spec(spec)
        sys.modules[name] = module

        try:
            spec.loader.exec_module(module)
        except BaseException:
            del sys.modules[name]
            raise

        logger.debug('Imported %s as %s', path, name)

        return module

    def clear(self) -> None:
        """Forget imported modules so the next load re-imports them."""
        for path in self.modules:
            sys.modules.pop(self.module_name(path), None)

        self.modules = {}
