"""Lazily computed, memoized discovery bindings.

A binding runs the discovery pipeline on its first read and stores the
produced list, or the produced future, for every later read. Storing the
future itself lets concurrent readers share one in-flight computation.

Two surfaces are provided:
- `FilesBinding`, an explicit object exposing `get()`;
- `FilesProperty`, a read-only descriptor keeping one binding per
  owner instance, created by `resolve_from_files` and `list_from_files`.
"""

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, overload

from pydantic import Field, ValidationError

from class_discovery.context import DiscoveryContext, discovery_context
from class_discovery.core import DiscoveryPipeline
from class_discovery.errors import InvalidArgumentError
from class_discovery.models import SchemaModel
from class_discovery.names import ConfigKey, GlobPattern  # noqa: TC001

if TYPE_CHECKING:
    from typing import Self

if TYPE_CHECKING:
    from class_discovery.core import BatchResult

logger = logging.getLogger(__name__)

#: Marker of a binding that was not computed yet.
_UNSET: Any = object()


class BindingOptions(SchemaModel):
    """Validated arguments of a discovery binding."""

    filter: GlobPattern = Field(
        title='File filter',
        description='Glob pattern applied under every configured directory.',
    )

    config_path: ConfigKey = Field(
        validation_alias='configPath',
        title='Configuration key',
        description='Configuration key naming the directories to scan.',
    )

    type_matcher: Callable[[str], str] | None = Field(
        default=None,
        validation_alias='typeMatcher',
        title='Type matcher',
        description='Optional mapping from a file base name to the symbol to look up.',
    )

    resolve: bool = Field(
        default=False,
        title='Resolve mode',
        description='Whether instances are requested from the container.',
    )

    context: DiscoveryContext | None = Field(
        default=None,
        title='Discovery context',
        description='Collaborators; the process-wide context is used if omitted.',
    )

    @classmethod
    def create(cls, pattern: Any, config_path: Any,  # noqa: ANN401
               type_matcher: Any = None, *,  # noqa: ANN401
               resolve: bool = False,
               context: DiscoveryContext | None = None) -> 'Self':
        """Validate binding arguments eagerly.

        Raises:
            InvalidArgumentError: If `pattern` or `config_path` is not
                a non-empty string, or `type_matcher` is not callable.
        """
        try:
            return cls.model_validate({
                'filter': pattern,
                'configPath': config_path,
                'typeMatcher': type_matcher,
                'resolve': resolve,
                'context': context,
            })
        except ValidationError as base:
            raise InvalidArgumentError.from_pydantic_error(base) from base

    def make_pipeline(self) -> DiscoveryPipeline:
        """Build the pipeline, binding collaborators late."""
        return DiscoveryPipeline(
            self.filter,
            self.config_path,
            context=self.context or discovery_context.get_current(),
            resolve=self.resolve,
            type_matcher=self.type_matcher,
        )


class FilesBinding:
    """Memoized discovery result.

    The pipeline runs on the first `get()` call. The returned list or
    future is stored before being returned, and every later call returns
    the identical object, whether or not the future has settled. If the
    first run raises, nothing is stored and the next call runs again.
    """

    def __init__(self, options: BindingOptions) -> None:
        """Initialize a binding that was not computed yet.

        Args:
            options: Validated binding arguments.
        """
        self.options = options
        self._value: BatchResult = _UNSET

    def __repr__(self) -> str:
        """String representation."""
        state = 'computed' if self.computed else 'pending'
        return (
            f'{self.__class__.__name__}({self.options.filter!r}, '
            f'{self.options.config_path!r}, {state})'
        )

    @property
    def computed(self) -> bool:
        """Whether the binding already holds a value."""
        return self._value is not _UNSET

    def get(self) -> 'BatchResult':
        """Return the discovered classes, computing them on first call.

        Returns:
            The `ClassInfo` list, or a future of it if any discovered
            class resolves asynchronously.
        """
        if self._value is _UNSET:
            self._value = self.options.make_pipeline().run()

        return self._value


class FilesProperty:
    """Read-only descriptor exposing a discovery binding per instance.

    Reading the attribute on an instance returns that instance's
    binding value; reading it on the class returns the descriptor.
    """

    def __init__(self, options: BindingOptions) -> None:
        """Initialize a descriptor.

        Args:
            options: Validated binding arguments shared by all instances.
        """
        self.options = options
        self.name: str | None = None
        self.attribute: str | None = None

    def __set_name__(self, owner: type, name: str) -> None:
        """Remember the attribute name the descriptor is assigned to."""
        self.name = name
        self.attribute = f'__files_binding_{name}'

    @overload
    def __get__(self, instance: None, owner: type | None = None) -> 'Self':
        ...  # pragma: no cover

    @overload
    def __get__(self, instance: object, owner: type | None = None) -> 'BatchResult':
        ...  # pragma: no cover

    def __get__(self, instance: object | None, owner: type | None = None) -> Any:  # noqa: ANN401
        """Return the binding value of an instance."""
        if instance is None:
            return self

        return self.binding(instance).get()

    def __set__(self, instance: object, value: Any) -> None:  # noqa: ANN401
        """Reject assignment of discovered classes."""
        raise AttributeError(f'{self.name!r} is a read-only discovery binding')

    def binding(self, instance: object) -> FilesBinding:
        """Return the binding owned by an instance, creating it if needed.

        Args:
            instance: Owner object.

        Returns:
            The instance binding.

        Raises:
            TypeError: If the descriptor was never assigned to a class,
                or the owner has no instance `__dict__` (`__slots__` classes).
        """
        if self.attribute is None:
            raise TypeError('Discovery binding is not assigned to a class attribute')

        try:
            storage = vars(instance)
        except TypeError as base:
            raise TypeError(
                f'Discovery binding {self.name!r} needs {type(instance).__name__} '
                'instances to have a __dict__',
            ) from base

        binding = storage.get(self.attribute)
        if binding is None:
            binding = storage[self.attribute] = FilesBinding(self.options)
            logger.debug('Created binding %r for %s', self.name, type(instance).__name__)

        return binding


def bind_files(pattern: str, config_path: str,
               type_matcher: Callable[[str], str] | None = None, *,
               resolve: bool = False,
               context: DiscoveryContext | None = None) -> FilesBinding:
    """Build a standalone discovery binding.

    Args:
        pattern: Glob filter, for example `**/*.py`.
        config_path: Configuration key naming the directories,
            for example `system.dirs.controllers`.
        type_matcher: Optional mapping from file base name to symbol.
        resolve: Whether instances are requested from the container.
        context: Collaborators; the process-wide context is used if omitted.

    Returns:
        A binding exposing `get()`.

    Raises:
        InvalidArgumentError: If arguments are invalid.
    """
    return FilesBinding(BindingOptions.create(
        pattern, config_path, type_matcher,
        resolve=resolve,
        context=context,
    ))


def resolve_from_files(pattern: str, config_path: str,
                       type_matcher: Callable[[str], str] | None = None, *,
                       context: DiscoveryContext | None = None) -> FilesProperty:
    """Declare an attribute resolving classes found in configured directories.

    Every discovered class is resolved through the container. The
    attribute value is a list of `ClassInfo`, or a future of that list
    if any class is asynchronously resolvable.

    Args:
        pattern: Glob filter, for example `**/*.py`.
        config_path: Configuration key naming the directories.
        type_matcher: Optional mapping from file base name to symbol.
        context: Collaborators; the process-wide context is used if omitted.

    Returns:
        A read-only descriptor.

    Raises:
        InvalidArgumentError: If arguments are invalid.
    """
    return FilesProperty(BindingOptions.create(
        pattern, config_path, type_matcher,
        resolve=True,
        context=context,
    ))


def list_from_files(pattern: str, config_path: str,
                    type_matcher: Callable[[str], str] | None = None, *,
                    context: DiscoveryContext | None = None) -> FilesProperty:
    """Declare an attribute listing classes found in configured directories.

    No instance is created: `ClassInfo.instance` is always `None`.

    Args:
        pattern: Glob filter, for example `**/*.py`.
        config_path: Configuration key naming the directories.
        type_matcher: Optional mapping from file base name to symbol.
        context: Collaborators; the process-wide context is used if omitted.

    Returns:
        A read-only descriptor.

    Raises:
        InvalidArgumentError: If arguments are invalid.
    """
    return FilesProperty(BindingOptions.create(
        pattern, config_path, type_matcher,
        resolve=False,
        context=context,
    ))
