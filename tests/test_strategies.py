"""Tests for resolution outcomes and their aggregation."""

from asyncio import CancelledError, Future, ensure_future, sleep
from pathlib import Path
from typing import Any, ClassVar

import pytest

from class_discovery.capabilities import (
    AsyncResolvable,
    Container,
    SyncResolvable,
    get_capability,
)
from class_discovery.core.aggregator import ResultAggregatorMixin, join_outcomes
from class_discovery.core.strategies import (
    Deferred,
    Failed,
    Immediate,
    ResolutionStrategyMixin,
    Skipped,
)
from class_discovery.errors import MissingSymbolError, ResolutionError
from class_discovery.models import ClassInfo
from tests.conftest import FakeContainer

FILE = Path('/srv/services/Service.py')


class SyncService(SyncResolvable):
    pass


class AsyncService(AsyncResolvable):
    resolved = False

    async def resolve_async(self, container: Container) -> None:
        await sleep(0)
        self.resolved = True


class UnknownService:
    resolution_capability: ClassVar[str] = 'lazy'


class EagerContainer:
    """Container returning plain instances even for asynchronous classes."""

    def resolve(self, cls: type[Any]) -> Any:  # noqa: ANN401
        return cls()


class Strategy(ResolutionStrategyMixin, ResultAggregatorMixin):

    def __init__(self, *, resolve: bool = False, container: Any = None) -> None:  # noqa: ANN401
        self.resolve = resolve
        self.container = container


def info(name: str) -> ClassInfo[Any]:
    return ClassInfo(file=FILE, name=name, type=object)


@pytest.mark.parametrize('cls, expected', (
    (object, 'sync'),
    (SyncService, 'sync'),
    (AsyncService, 'async'),
))
def test_get_capability(cls: type[Any], expected: str) -> None:
    """Verify capability tags."""
    assert get_capability(cls) == expected


def test_get_unknown_capability() -> None:
    """Verify unknown capability tags are rejected."""
    with pytest.raises(ResolutionError, match=r"^Unknown resolution capability 'lazy'"):
        get_capability(UnknownService)


def test_list_outcome() -> None:
    """Verify list mode never calls the container."""
    container = FakeContainer()
    outcome = Strategy(container=container).make_outcome(FILE, 'AsyncService', AsyncService)

    assert isinstance(outcome, Immediate)
    assert outcome.info.instance is None
    assert outcome.info.type is AsyncService
    assert not container.calls


def test_sync_outcome() -> None:
    """Verify synchronous resolution."""
    outcome = Strategy(resolve=True, container=FakeContainer()).make_outcome(FILE, 'SyncService', SyncService)

    assert isinstance(outcome, Immediate)
    assert isinstance(outcome.info.instance, SyncService)
    assert outcome.info.name == 'SyncService'


@pytest.mark.asyncio
async def test_async_outcome() -> None:
    """Verify asynchronous resolution is deferred until settled."""
    outcome = Strategy(resolve=True, container=FakeContainer()).make_outcome(FILE, 'AsyncService', AsyncService)

    assert isinstance(outcome, Deferred)

    settled = await outcome.settle()

    assert settled.instance.resolved
    assert settled.file == FILE


@pytest.mark.asyncio
async def test_async_outcome_with_settled_value() -> None:
    """Verify non-awaitable container results are accepted as settled."""
    outcome = Strategy(resolve=True, container=EagerContainer()).make_outcome(FILE, 'AsyncService', AsyncService)

    settled = await outcome.settle()

    assert isinstance(settled.instance, AsyncService)
    assert not settled.instance.resolved


def test_outcome_without_container() -> None:
    """Verify resolve mode requires a container."""
    with pytest.raises(ResolutionError, match=r'^Container is required'):
        Strategy(resolve=True).make_outcome(FILE, 'SyncService', SyncService)


def test_aggregate_immediate() -> None:
    """Verify all-immediate batches are plain lists in order."""
    result = Strategy().aggregate([Immediate(info('First')), Immediate(info('Second'))])

    assert isinstance(result, list)
    assert [item.name for item in result] == ['First', 'Second']


def test_aggregate_nothing() -> None:
    """Verify empty batches are empty lists."""
    assert Strategy().aggregate([]) == []


def test_aggregate_first_failure() -> None:
    """Verify the first failure of a synchronous batch is raised."""
    first = MissingSymbolError('First', str(FILE))
    second = RuntimeError('second')

    with pytest.raises(MissingSymbolError) as error:
        Strategy().aggregate([Immediate(info('Zero')), Failed(FILE, first), Failed(FILE, second)])

    assert error.value is first


def test_aggregate_deferred_without_loop() -> None:
    """Verify deferred batches need a running loop and close pending work."""
    container = FakeContainer()
    pending = container.resolve(AsyncService)

    with pytest.raises(ResolutionError, match=r'running event loop$'):
        Strategy().aggregate([Deferred(FILE, 'AsyncService', AsyncService, pending)])

    assert pending.cr_frame is None


@pytest.mark.asyncio
async def test_aggregate_deferred() -> None:
    """Verify deferred batches join into one ordered list."""
    container = FakeContainer()
    outcomes = [
        Deferred(FILE, 'AsyncService', AsyncService, container.resolve(AsyncService)),
        Immediate(info('Sync')),
    ]

    future = Strategy().aggregate(outcomes)

    assert isinstance(future, Future)

    result = await future

    assert [item.name for item in result] == ['AsyncService', 'Sync']
    assert result[0].instance.resolved


@pytest.mark.asyncio
async def test_aggregate_deferred_with_failure() -> None:
    """Verify deferred batches with a failure are rejected without partial results."""
    container = FakeContainer()
    pending = container.resolve(AsyncService)
    failure = MissingSymbolError('Other', str(FILE))

    future = Strategy().aggregate([
        Deferred(FILE, 'AsyncService', AsyncService, pending),
        Failed(FILE, failure),
    ])

    assert isinstance(future, Future)
    assert future.done()
    assert pending.cr_frame is None

    with pytest.raises(MissingSymbolError) as error:
        await future

    assert error.value is failure


@pytest.mark.asyncio
async def test_join_deferred_failure() -> None:
    """Verify a failing container rejects the joined batch."""
    async def failing() -> None:
        raise RuntimeError('container failure')

    with pytest.raises(RuntimeError, match=r'^container failure$'):
        await join_outcomes([
            Immediate(info('Sync')),
            Deferred(FILE, 'AsyncService', AsyncService, failing()),
        ])


@pytest.mark.asyncio
async def test_aggregate_cancels_scheduled_work() -> None:
    """Verify scheduled container tasks are cancelled when the batch is rejected."""
    async def forever() -> None:
        await sleep(3600)

    pending = ensure_future(forever())
    failure = MissingSymbolError('Other', str(FILE))

    future = Strategy().aggregate([
        Deferred(FILE, 'AsyncService', AsyncService, pending),
        Failed(FILE, failure),
    ])

    with pytest.raises(CancelledError):
        await pending

    assert pending.cancelled()
    with pytest.raises(MissingSymbolError):
        await future


def test_aggregate_skipped_synchronous() -> None:
    """Verify skipped synchronous files keep the failure synchronous."""
    failure = MissingSymbolError('Other', str(FILE))

    with pytest.raises(MissingSymbolError) as error:
        Strategy().aggregate([Failed(FILE, failure), Skipped(FILE, 'sync')])

    assert error.value is failure


@pytest.mark.asyncio
async def test_aggregate_skipped_asynchronous() -> None:
    """Verify skipped asynchronous files turn the failure into a rejected future."""
    failure = MissingSymbolError('Other', str(FILE))

    future = Strategy().aggregate([Failed(FILE, failure), Skipped(FILE, 'async')])

    assert isinstance(future, Future)
    with pytest.raises(MissingSymbolError) as error:
        await future

    assert error.value is failure
