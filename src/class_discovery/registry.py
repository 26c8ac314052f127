"""Explicit type registry and registry plugin loading.

The registry is an alternative module loader: instead of importing a
discovered file, the engine looks up the symbol derived from the file
name in a mapping populated ahead of discovery. Classes are registered
explicitly or contributed by plugins exposed via Python entry points.

Off strict mode, a broken plugin or a clashing registration is reported
as a `PluginWarning` and the remaining plugins are still loaded.
"""

import logging
from functools import partial
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, overload
from warnings import warn

from pydantic import Field, ValidationError

from class_discovery.errors import PluginError, PluginWarning
from class_discovery.models import SchemaModel
from class_discovery.names import SYMBOL_PATTERN, Symbol  # noqa: TC001

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from importlib.metadata import EntryPoint
    from pathlib import Path

logger = logging.getLogger(__name__)

#: Default entry point group scanned for registry plugins.
PLUGINS_GROUP = 'class_discovery_plugins'


class Plugin(SchemaModel):
    """Declarative container of classes contributed to a registry.

    A plugin is a description only: it is consumed by
    `TypeRegistry.load_plugins` which registers every class it lists.
    """

    name: Symbol = Field(
        title='Plugin namespace',
        description='Logical name of the plugin, used in diagnostics.',
    )

    types: list[type[Any]] = Field(
        default_factory=list,
        title='Classes',
        description='Classes registered under their own `__name__`.',
    )

    aliases: dict[Symbol, type[Any]] = Field(
        default_factory=dict,
        title='Aliased classes',
        description='Classes registered under an explicit symbol name.',
    )


class TypeRegistry:
    """Registry mapping symbol names to classes.

    The registry implements the module loader contract: every discovered
    file sees the whole registry as its namespace, and the symbol derived
    from the file name selects the class.

    Attributes:
        strict_mode: If True, any plugin loading issue raises an error.
            If False, issues are emitted as warnings and loading continues.
    """

    def __init__(self, *, strict: bool = False) -> None:
        """Initialize an empty registry.

        Args:
            strict: Whether plugin issues raise instead of warning.
        """
        self.strict_mode = strict
        self.types: dict[str, type[Any]] = {}

    def load(self, path: 'Path') -> 'Mapping[str, Any]':
        """Return registered classes as the namespace of a file.

        Args:
            path: Discovered file; only its name is relevant to lookups.

        Returns:
            A read-only view of the registered classes.
        """
        logger.debug('Serving %s from the type registry', path)

        return MappingProxyType(self.types)

    @overload
    def register[T: type[Any]](self, cls: T, /, *, name: str | None = None,
                               entrypoint: 'EntryPoint | None' = None) -> T:
        ...  # pragma: no cover

    @overload
    def register[T: type[Any]](self, cls: None = None, /, *, name: str | None = None,
                               entrypoint: 'EntryPoint | None' = None) -> 'Callable[[T], T]':
        ...  # pragma: no cover

    def register(self, cls: Any = None, /, *, name: str | None = None,
                 entrypoint: 'EntryPoint | None' = None) -> Any:
        """Register a class, directly or as a class decorator.

        An invalid symbol, or a symbol already taken by another class,
        is reported; off strict mode the class is registered anyway.

        Args:
            cls: Class to register. If omitted, a decorator is returned.
            name: Symbol name; defaults to the class `__name__`.
            entrypoint: Entry point contributing the class, for diagnostics.

        Returns:
            The registered class, or a decorator registering one.

        Raises:
            PluginError: On strict mode, if the symbol is invalid or
                shadows an existing registration.
        """
        if cls is None:
            return partial(self.register, name=name, entrypoint=entrypoint)

        symbol = name or cls.__name__
        origin = entrypoint.value if entrypoint else cls.__module__

        if not SYMBOL_PATTERN.match(symbol):
            self.report(f'Symbol {symbol!r} is not a valid class name', entrypoint)

        current = self.types.get(symbol)
        if current is not None and current is not cls:
            self.report(f'Class {symbol!r} from {origin!r} is shadowing an existing', entrypoint)

        self.types[symbol] = cls

        return cls

    def report(self, message: str, entrypoint: 'EntryPoint | None' = None, *,
               cause: BaseException | None = None) -> None:
        """Report a plugin issue.

        Args:
            message: Issue description.
            entrypoint: Entry point the issue comes from, if any.
            cause: Exception behind the issue, if any.

        Raises:
            PluginError: On strict mode.
        """
        if self.strict_mode:
            raise PluginError(message, entrypoint=entrypoint) from cause

        logger.warning(message)
        warn(message, category=PluginWarning, stacklevel=3)

    def load_plugin(self, entrypoint: 'EntryPoint') -> None:
        """Register classes of the plugin exposed by an entry point.

        Args:
            entrypoint: Entry point expected to load a `Plugin`.

        Raises:
            PluginError: On strict mode, if the entry point cannot be
                loaded or does not provide a valid plugin.
        """
        try:
            plugin = entrypoint.load()
        except Exception as base:  # noqa: BLE001
            action = 'validate' if isinstance(base, ValidationError) else 'load'
            self.report(f'Failed to {action} entrypoint {entrypoint.name!r}', entrypoint, cause=base)
            return

        if not isinstance(plugin, Plugin):
            self.report(f'Loaded from entrypoint {entrypoint.name!r} object is not a plugin', entrypoint)
            return

        registrations = [
            *((cls, None) for cls in plugin.types),
            *((cls, symbol) for symbol, cls in plugin.aliases.items()),
        ]
        for cls, symbol in registrations:
            self.register(cls, name=symbol, entrypoint=entrypoint)

        logger.debug('Loaded plugin %r from %s', plugin.name, entrypoint.value)

    def clear(self) -> None:
        """Remove all registered classes."""
        self.types = {}

    def load_plugins(self, group: str = PLUGINS_GROUP) -> None:
        """Load every plugin of an entry point group.

        Args:
            group: Entry point group to scan.

        Raises:
            PluginError: On strict mode, at the first plugin issue.
        """
        from importlib.metadata import entry_points  # noqa: PLC0415

        for entrypoint in entry_points().select(group=group):
            self.load_plugin(entrypoint)
