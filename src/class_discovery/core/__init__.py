"""Core discovery engine.

This package defines the stages of class discovery, each as a mixin:
- directory resolution and glob scanning;
- symbol lookup through a module loader;
- per-file resolution into immediate, deferred or failed outcomes;
- fail-fast aggregation into a list or a single future.

The primary entry point is `DiscoveryPipeline`, which chains the stages
for one glob filter and one configuration key.
"""

from .aggregator import BatchResult, ClassList
from .pipeline import DiscoveryPipeline

__all__ = (
    'BatchResult',
    'ClassList',
    'DiscoveryPipeline',
)
