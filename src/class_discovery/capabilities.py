"""Resolution capabilities and the container contract.

A discovered class declares how the container constructs it: either
synchronously (the default) or asynchronously. The capability is a plain
class-level tag, so dispatch never depends on what the container returns
at runtime.
"""

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Literal, Protocol, runtime_checkable

from class_discovery.errors import ErrorContext, ResolutionError

#: Tag of a resolution capability.
type Capability = Literal['sync', 'async']

CAPABILITY_ATTRIBUTE = 'resolution_capability'


@runtime_checkable
class Container(Protocol):
    """Dependency-injection container consumed in resolve mode.

    `resolve` returns an instance for synchronously resolvable classes
    and an awaitable of an instance for asynchronously resolvable ones.
    """

    def resolve(self, cls: type[Any]) -> Any:  # noqa: ANN401
        """Produce an instance of `cls`, or an awaitable of one."""
        ...  # pragma: no cover


class SyncResolvable:
    """Capability of classes constructed synchronously by the container.

    Declaring it is optional: classes without a capability tag are
    treated as synchronously resolvable.
    """

    resolution_capability: ClassVar[Capability] = 'sync'


class AsyncResolvable(ABC):
    """Capability of classes whose construction completes asynchronously.

    The container is expected to create the instance and then await
    `resolve_async` before handing it out, so `Container.resolve`
    returns an awaitable for such classes.
    """

    resolution_capability: ClassVar[Capability] = 'async'

    @abstractmethod
    async def resolve_async(self, container: Container) -> None:
        """Finish asynchronous initialization of the instance.

        Args:
            container: Container that is resolving the instance.
        """


def get_capability(cls: type[Any]) -> Capability:
    """Return the resolution capability declared by a class.

    Args:
        cls: Discovered class.

    Returns:
        `'async'` for asynchronously resolvable classes, otherwise `'sync'`.

    Raises:
        ResolutionError: If the class declares an unknown capability tag.
    """
    match getattr(cls, CAPABILITY_ATTRIBUTE, 'sync'):
        case 'sync':
            return 'sync'
        case 'async':
            return 'async'
        case other:
            raise ResolutionError(
                f'Unknown resolution capability {other!r} of {cls!r}',
                context=ErrorContext(value=other),
            )
