"""Collaborators used by the discovery engine.

A `DiscoveryContext` carries the configuration source, the optional
dependency-injection container, and the module loader. Bindings either
receive a context explicitly or look up the process-wide one the first
time they are read.
"""

from pydantic import Field

from class_discovery.capabilities import Container  # noqa: TC001
from class_discovery.configuration import Configuration, ConfigurationSource
from class_discovery.errors import ContextNotSetError
from class_discovery.loaders import ImportLoader, ModuleLoader
from class_discovery.models import DiscoverySettings, SchemaModel
from class_discovery.registry import TypeRegistry


class DiscoveryContext(SchemaModel):
    """Collaborators of a discovery pipeline."""

    configuration: ConfigurationSource = Field(
        title='Configuration source',
        description='Source queried for the configured directories.',
    )

    container: Container | None = Field(
        default=None,
        title='Container',
        description='Dependency-injection container, required in resolve mode.',
    )

    loader: ModuleLoader = Field(
        default_factory=ImportLoader,
        title='Module loader',
        description='Loader returning the namespace exported by a file.',
    )

    @classmethod
    def from_settings(cls, settings: DiscoverySettings | None = None, *,
                      container: Container | None = None,
                      registry: TypeRegistry | None = None) -> 'DiscoveryContext':
        """Build a context from environment-driven settings.

        When a registry is given, plugins from the configured entry point
        group are loaded into it and it becomes the module loader.

        Args:
            settings: Resolved settings; read from the environment if omitted.
            container: Dependency-injection container.
            registry: Optional type registry used instead of imports.

        Returns:
            A ready-to-use discovery context.
        """
        if settings is None:
            settings = DiscoverySettings()

        loader: ModuleLoader = ImportLoader()
        if registry is not None:
            registry.strict_mode = settings.strict_plugins
            registry.load_plugins(settings.plugin_group)
            loader = registry

        return cls(
            configuration=Configuration.from_settings(settings),
            container=container,
            loader=loader,
        )


class ContextHolder:
    """Holder of the process-wide discovery context.

    The binding is process-global for this holder. It is not task-local
    or thread-local.
    """

    def __init__(self) -> None:
        """Initialize an unbound holder."""
        self._context: DiscoveryContext | None = None

    def set_current(self, context: DiscoveryContext) -> None:
        """Bind the process-wide context."""
        self._context = context

    def get_current(self) -> DiscoveryContext:
        """Return the bound context.

        Raises:
            ContextNotSetError: If no context is bound.
        """
        if self._context is None:
            raise ContextNotSetError(
                'Discovery context is not set. '
                'Call discovery_context.set_current(context) before reading bindings.',
            )

        return self._context

    def reset(self) -> None:
        """Unbind the process-wide context."""
        self._context = None


discovery_context = ContextHolder()
