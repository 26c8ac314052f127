"""Symbol lookup for discovered files.

This module defines a mixin deriving the exported symbol name from a
file name and fetching the class from the file namespace provided by a
module loader.
"""

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from class_discovery.errors import MissingSymbolError

if TYPE_CHECKING:
    from pathlib import Path

if TYPE_CHECKING:
    from class_discovery.loaders import ModuleLoader

logger = logging.getLogger(__name__)

#: Function mapping a file base name to the symbol to look up.
type TypeMatcher = Callable[[str], str]


class TypeLoaderMixin:
    """Mixin defining how a discovered file provides its class.

    Attributes:
        loader: Module loader returning a file namespace.
        type_matcher: Optional base name to symbol mapping.
    """

    loader: 'ModuleLoader'
    type_matcher: 'TypeMatcher | None' = None

    def symbol_for(self, path: 'Path') -> str:
        """Derive the symbol name exported by a file.

        Args:
            path: Discovered file.

        Returns:
            The file base name without extension, passed through the
            type matcher when one is configured.
        """
        name = path.stem
        if self.type_matcher is not None:
            return self.type_matcher(name)

        return name

    def load_type(self, path: 'Path') -> tuple[str, Any]:
        """Load the class exported by a file.

        Args:
            path: Discovered file.

        Returns:
            A tuple of the looked-up symbol and the class.

        Raises:
            MissingSymbolError: If the file does not export the symbol,
                or exports a falsy value under it.
            Exception: Any error raised while loading the file.
        """
        logger.debug('Loading file %s', path)

        symbol = self.symbol_for(path)
        cls = self.loader.load(path).get(symbol)

        if not cls:
            raise MissingSymbolError(symbol, str(path))

        return symbol, cls
