"""Per-file resolution outcomes and the strategy producing them.

Every discovered file yields exactly one outcome:
- `Immediate` when its `ClassInfo` is already available;
- `Deferred` when the container resolves the class asynchronously;
- `Failed` when loading or resolving the file raised;
- `Skipped` for files following a failure, never passed to the container.

The aggregator decides the shape of the whole batch from these tags only.
"""

import logging
from asyncio import isfuture
from inspect import isawaitable
from typing import TYPE_CHECKING, Any, NamedTuple

from class_discovery.capabilities import get_capability
from class_discovery.errors import ResolutionError
from class_discovery.models import ClassInfo

if TYPE_CHECKING:
    from pathlib import Path

if TYPE_CHECKING:
    from class_discovery.capabilities import Capability, Container

logger = logging.getLogger(__name__)


class Immediate(NamedTuple):
    """Outcome available synchronously."""

    info: ClassInfo[Any]


class Deferred(NamedTuple):
    """Outcome of an asynchronous container resolution."""

    file: 'Path'
    name: str
    type: Any
    awaitable: Any

    async def settle(self) -> ClassInfo[Any]:
        """Await the container and wrap the instance into a `ClassInfo`."""
        instance = self.awaitable
        if isawaitable(instance):
            instance = await instance

        return ClassInfo(file=self.file, name=self.name, type=self.type, instance=instance)

    def discard(self) -> None:
        """Drop the pending awaitable.

        Scheduled futures and tasks are cancelled; coroutines that were
        never started are closed.
        """
        if isfuture(self.awaitable):
            self.awaitable.cancel()
            return

        close = getattr(self.awaitable, 'close', None)
        if close is not None and callable(close):
            close()


class Failed(NamedTuple):
    """Outcome of a file whose loading or resolution raised."""

    file: 'Path'
    error: BaseException


class Skipped(NamedTuple):
    """Outcome of a file discovered after a failure in the same batch.

    Only the declared capability is kept, so the batch shape does not
    depend on where the failure happened.
    """

    file: 'Path'
    capability: 'Capability'


#: Outcome of resolving one discovered file.
type Outcome = Immediate | Deferred | Failed | Skipped


class ResolutionStrategyMixin:
    """Mixin turning a loaded class into a resolution outcome.

    Attributes:
        resolve: Whether instances are requested from the container.
        container: Container used in resolve mode.
    """

    resolve: bool = False
    container: 'Container | None' = None

    def get_container(self) -> 'Container':
        """Return the container required by resolve mode.

        Raises:
            ResolutionError: If no container is configured.
        """
        if self.container is None:
            raise ResolutionError('Container is required to resolve discovered classes')

        return self.container

    def make_outcome(self, file: 'Path', name: str, cls: Any) -> Outcome:  # noqa: ANN401
        """Produce the outcome of one loaded class.

        In list mode no instance is created. In resolve mode the class
        capability selects between a synchronous and an asynchronous
        resolution.

        Args:
            file: File the class was loaded from.
            name: Looked-up symbol.
            cls: Loaded class.

        Returns:
            `Immediate` or `Deferred` outcome.

        Raises:
            Exception: Any error raised by the container in sync resolution.
        """
        if not self.resolve:
            return Immediate(ClassInfo(file=file, name=name, type=cls))

        container = self.get_container()

        if get_capability(cls) == 'async':
            logger.debug('Resolving %s asynchronously', name)
            return Deferred(file, name, cls, container.resolve(cls))

        instance = container.resolve(cls)

        return Immediate(ClassInfo(file=file, name=name, type=cls, instance=instance))
