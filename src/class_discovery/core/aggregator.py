"""Aggregation of per-file outcomes into one batch result.

A batch made only of immediate outcomes is returned as a plain list.
As soon as one outcome is deferred, the whole batch becomes a single
future joining every member with fail-fast semantics: it resolves to the
full list in discovery order, or rejects with the first failure.
"""

import logging
from asyncio import Future, gather, get_running_loop
from typing import TYPE_CHECKING, Any

from class_discovery.errors import ResolutionError

from .strategies import Deferred, Failed, Immediate, Skipped

if TYPE_CHECKING:
    from collections.abc import Sequence

if TYPE_CHECKING:
    from class_discovery.models import ClassInfo

    from .strategies import Outcome

logger = logging.getLogger(__name__)

#: Collection of discovered classes.
type ClassList = list[ClassInfo[Any]]

#: Result of a batch: a list, or a future of a list if any member is asynchronous.
type BatchResult = ClassList | Future[ClassList]


async def join_outcomes(outcomes: 'Sequence[Outcome]') -> 'ClassList':
    """Await every deferred outcome and rebuild the list in order.

    Args:
        outcomes: Immediate and deferred outcomes, in discovery order.

    Returns:
        The `ClassInfo` list in discovery order.

    Raises:
        Exception: The first failure of any deferred member.
    """
    settled = iter(await gather(*(
        outcome.settle()
        for outcome in outcomes
        if isinstance(outcome, Deferred)
    )))

    return [
        next(settled) if isinstance(outcome, Deferred) else outcome.info
        for outcome in outcomes
        if isinstance(outcome, (Deferred, Immediate))
    ]


class ResultAggregatorMixin:
    """Mixin combining resolution outcomes into a batch result."""

    @staticmethod
    def discard_pending(outcomes: 'Sequence[Outcome]') -> None:
        """Drop deferred awaitables that will never be awaited."""
        for outcome in outcomes:
            if isinstance(outcome, Deferred):
                outcome.discard()

    @staticmethod
    def is_asynchronous(outcome: 'Outcome') -> bool:
        """Check whether an outcome makes the batch asynchronous."""
        if isinstance(outcome, Skipped):
            return outcome.capability == 'async'

        return isinstance(outcome, Deferred)

    def aggregate(self, outcomes: 'Sequence[Outcome]') -> BatchResult:
        """Combine outcomes into a list or a single future.

        Args:
            outcomes: One outcome per discovered file, in discovery order.

        Returns:
            The `ClassInfo` list if every outcome is immediate, otherwise
            a future resolving to that list.

        Raises:
            Exception: The first failure of an all-synchronous batch.
            ResolutionError: If an asynchronous batch is aggregated
                without a running event loop.
        """
        failure = next((outcome for outcome in outcomes if isinstance(outcome, Failed)), None)

        if not any(map(self.is_asynchronous, outcomes)):
            if failure is not None:
                raise failure.error

            return [outcome.info for outcome in outcomes if isinstance(outcome, Immediate)]

        try:
            loop = get_running_loop()
        except RuntimeError as base:
            self.discard_pending(outcomes)
            raise ResolutionError(
                'Asynchronous resolution requires a running event loop',
            ) from base

        if failure is not None:
            logger.debug('Rejecting batch on failure in %s', failure.file)
            self.discard_pending(outcomes)
            future: Future[ClassList] = loop.create_future()
            future.set_exception(failure.error)
            return future

        return loop.create_task(join_outcomes(outcomes))
