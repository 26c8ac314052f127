"""Tests configurations and fixtures."""

from collections import Counter
from importlib.metadata import EntryPoint, EntryPoints
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest

from class_discovery.capabilities import get_capability
from class_discovery.configuration import Configuration
from class_discovery.context import DiscoveryContext, discovery_context

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

if TYPE_CHECKING:
    from pytest_mock import MockerFixture, MockType

if TYPE_CHECKING:
    from class_discovery.registry import Plugin

#: Directory holding fixture service modules.
SERVICES = Path(__file__).parent / 'services'

#: Fixture directories configured under `system.dirs`.
SERVICE_DIRS = (
    'singletons',
    'alwaysnew',
    'asynchronous',
    'mixed',
    'throw',
    'throwasync',
    'matcher',
    'empty',
    'nested',
    'aborted',
    'abortedasync',
    'failing',
    'failingmixed',
)


class FakeContainer:
    """Minimal dependency-injection container for tests.

    Classes are singletons unless they declare `singleton = False`.
    Asynchronously resolvable instances have `resolve_async` awaited
    once, when they are created.
    """

    def __init__(self) -> None:
        self.instances: dict[type[Any], Any] = {}
        self.calls: Counter[str] = Counter()

    def resolve(self, cls: type[Any]) -> Any:  # noqa: ANN401
        self.calls[cls.__name__] += 1

        if get_capability(cls) == 'async':
            return self._resolve_async(cls)

        instance, _ = self._make(cls)

        return instance

    def _make(self, cls: type[Any]) -> tuple[Any, bool]:
        if getattr(cls, 'singleton', True) and cls in self.instances:
            return self.instances[cls], False

        instance = cls()
        if getattr(cls, 'singleton', True):
            self.instances[cls] = instance

        return instance, True

    async def _resolve_async(self, cls: type[Any]) -> Any:  # noqa: ANN401
        instance, created = self._make(cls)
        if created:
            await instance.resolve_async(self)

        return instance


@pytest.fixture(autouse=True)
def reset_discovery_context() -> 'Iterator[None]':
    """Leave the process-wide discovery context unbound around each test."""
    discovery_context.reset()
    yield
    discovery_context.reset()


@pytest.fixture
def configuration() -> Configuration:
    """Provide a configuration pointing `system.dirs.*` at fixture services.

    `system.dirs.partial` mixes a missing directory with an existing one,
    `system.dirs.single` names one directory as a plain string.
    """
    dirs: dict[str, Any] = {
        name: [str(SERVICES / name)]
        for name in SERVICE_DIRS
    }
    dirs['partial'] = [
        str(SERVICES / 'missing'),
        str(SERVICES / 'singletons'),
    ]
    dirs['single'] = str(SERVICES / 'matcher')

    return Configuration({'system': {'dirs': dirs}})


@pytest.fixture
def container() -> FakeContainer:
    """Provide a fresh fake container."""
    return FakeContainer()


@pytest.fixture
def context(configuration: Configuration, container: FakeContainer) -> DiscoveryContext:
    """Provide a discovery context over fixture services."""
    return DiscoveryContext(configuration=configuration, container=container)


@pytest.fixture
def bound_context(context: DiscoveryContext) -> DiscoveryContext:
    """Bind the fixture context as the process-wide discovery context."""
    discovery_context.set_current(context)

    return context


@pytest.fixture
def patch_entrypoints(mocker: 'MockerFixture') -> 'Callable[..., MockType]':
    """Provide a factory for mocking `importlib.metadata.entry_points`.

    Returns a callable that patches `entry_points()` to simulate
    discovery of plugins in the `class_discovery_plugins` group.

    The returned factory allows configuring:
    - successfully loadable plugins,
    - or an exception raised during plugin loading,
    - or an empty entry point list.
    """
    def patch(*plugins: 'Plugin | object', raises: Exception | None = None) -> 'MockType':
        """Patch `entry_points` with a controlled plugin configuration.

        Args:
            plugins: Objects to be returned by `EntryPoint.load()`.
                If empty, no entry points are registered.
            raises: Exception to raise when `EntryPoint.load()` is called.

        Returns:
            A mock patch object replacing `importlib.metadata.entry_points`
            for the duration of the test.
        """
        entrypoints = []
        for plugin in plugins:
            ep = mocker.Mock(spec=EntryPoint)
            ep.group = 'class_discovery_plugins'
            ep.name = 'tests'
            ep.value = 'tests.plugins:services'
            ep.load.return_value = plugin
            if raises is not None:
                ep.load.side_effect = raises
            entrypoints.append(ep)

        return mocker.patch(
            'importlib.metadata.entry_points',
            return_value=EntryPoints(entrypoints),
        )

    return patch
