"""Discovery pipeline.

This module defines the pipeline that chains every discovery stage:
configured directories, glob scanning, symbol lookup, per-file
resolution and batch aggregation.
"""

import logging
from typing import TYPE_CHECKING

from class_discovery.capabilities import get_capability

from .aggregator import BatchResult, ResultAggregatorMixin
from .loader import TypeLoaderMixin
from .scanner import DirectoryScannerMixin
from .strategies import Failed, Outcome, ResolutionStrategyMixin, Skipped

if TYPE_CHECKING:
    from pathlib import Path

if TYPE_CHECKING:
    from class_discovery.context import DiscoveryContext

    from .loader import TypeMatcher

logger = logging.getLogger(__name__)


class DiscoveryPipeline(DirectoryScannerMixin, TypeLoaderMixin,
                        ResolutionStrategyMixin, ResultAggregatorMixin):
    """Directory-driven class discovery with optional resolution.

    The pipeline is stateless between runs; memoization is the concern
    of the binding that owns it.
    """

    def __init__(self, pattern: str, config_path: str, *,
                 context: 'DiscoveryContext',
                 resolve: bool = False,
                 type_matcher: 'TypeMatcher | None' = None) -> None:
        """Initialize a discovery pipeline.

        Args:
            pattern: Glob filter applied under every directory.
            config_path: Configuration key naming the directories.
            context: Collaborators (configuration, container, loader).
            resolve: Whether instances are requested from the container.
            type_matcher: Optional base name to symbol mapping.
        """
        self.pattern = pattern
        self.config_path = config_path
        self.resolve = resolve
        self.type_matcher = type_matcher

        self.configuration = context.configuration
        self.container = context.container
        self.loader = context.loader

    def discover(self) -> list['Path']:
        """Return files matched under the configured directories."""
        directories = self.resolve_directories(self.config_path)
        if not directories:
            logger.debug('No directories configured by %s', self.config_path)
            return []

        return self.scan_files(directories, self.pattern)

    def process(self, file: 'Path') -> 'Outcome':
        """Load and resolve one file into an outcome.

        Failures are captured so the aggregator can decide whether they
        are raised or delivered through the batch future.
        """
        try:
            name, cls = self.load_type(file)
            return self.make_outcome(file, name, cls)
        except Exception as error:  # noqa: BLE001
            return Failed(file, error)

    def skip(self, file: 'Path') -> Skipped:
        """Record a file discovered after a failure without resolving it.

        In resolve mode the class is still loaded to read its capability;
        a file that cannot be loaded counts as synchronous.
        """
        if not self.resolve:
            return Skipped(file, 'sync')

        try:
            _, cls = self.load_type(file)
            return Skipped(file, get_capability(cls))
        except Exception:  # noqa: BLE001
            return Skipped(file, 'sync')

    def run(self) -> BatchResult:
        """Run every stage and aggregate the outcomes.

        The container is not called for files discovered after the first
        failure.

        Returns:
            The `ClassInfo` list, or a future of it if any discovered
            class resolves asynchronously.

        Raises:
            ResolutionError: If resolve mode is requested without a container.
            ConfigurationError: If the configured directories are malformed.
            Exception: The first failure of an all-synchronous batch.
        """
        if self.resolve:
            self.get_container()

        outcomes: list[Outcome] = []
        failure: Failed | None = None

        for file in self.discover():
            if failure is not None:
                outcomes.append(self.skip(file))
                continue

            outcome = self.process(file)
            if isinstance(outcome, Failed):
                logger.debug('Aborting batch on failure in %s', file)
                failure = outcome
            outcomes.append(outcome)

        logger.debug('Discovered %d classes for %s', len(outcomes), self.config_path)

        return self.aggregate(outcomes)
