"""Directory-driven, lazily evaluated class discovery.

The `class_discovery` package finds source files matching a glob filter
under directories named by a configuration key, loads the class each file
exports, and either lists those classes or resolves them through a
dependency-injection container.

Key features:
- lazily computed, memoized bindings usable as class attributes;
- mixed synchronous and asynchronous resolution reconciled into one
  order-preserving list, or a single future of it;
- fail-fast batches: no partial result is ever returned on failure;
- importlib-based loading or an explicit, plugin-fed type registry.
"""

from .binding import FilesBinding, FilesProperty, bind_files, list_from_files, resolve_from_files
from .capabilities import AsyncResolvable, Container, SyncResolvable
from .configuration import Configuration, ConfigurationSource
from .context import DiscoveryContext, discovery_context
from .errors import (
    ConfigurationError,
    ContextNotSetError,
    DiscoveryError,
    InvalidArgumentError,
    MissingSymbolError,
    PluginError,
    PluginWarning,
    ReflectionError,
    ResolutionError,
)
from .loaders import ImportLoader, ModuleLoader
from .models import ClassInfo, DiscoverySettings
from .registry import Plugin, TypeRegistry

__all__ = (
    'AsyncResolvable',
    'ClassInfo',
    'Configuration',
    'ConfigurationError',
    'ConfigurationSource',
    'Container',
    'ContextNotSetError',
    'DiscoveryContext',
    'DiscoveryError',
    'DiscoverySettings',
    'FilesBinding',
    'FilesProperty',
    'ImportLoader',
    'InvalidArgumentError',
    'MissingSymbolError',
    'ModuleLoader',
    'Plugin',
    'PluginError',
    'PluginWarning',
    'ReflectionError',
    'ResolutionError',
    'SyncResolvable',
    'TypeRegistry',
    'bind_files',
    'discovery_context',
    'list_from_files',
    'resolve_from_files',
)
