"""Exceptions and warnings raised by class discovery.

Every error carries an optional `ErrorContext`. When it is rendered,
the message is followed by indented lines naming the file, symbol and
configuration key involved, and by a YAML dump of the offending value
or the snippet of a broken YAML document.
"""

from collections.abc import Mapping, Sequence
from os import PathLike, fspath, linesep
from typing import TYPE_CHECKING, Any, TypedDict

from yaml import safe_dump
from yaml.error import MarkedYAMLError

if TYPE_CHECKING:
    from importlib.metadata import EntryPoint
    from typing import Self

    from pydantic import ValidationError

#: Indentation of location lines.
LOCATION_INDENT = 4
#: Indentation of value and YAML snippets.
DETAILS_INDENT = 8

#: Placeholder of values that have no YAML representation.
FORMAT_REPLACER = '<runtime object>'


class ErrorContext(TypedDict, total=False):
    """Details attached to a discovery error.

    Every key is optional; only present keys are rendered.
    """

    #: File being processed.
    filename: str | None
    #: Exported symbol looked up in the file.
    symbol: str | None

    #: Configuration key naming the scanned directories.
    config_path: str | None
    #: Directory being scanned.
    directory: str | None

    #: Exception the error was raised from.
    error: Exception | None
    #: Offending value (configuration entry, argument, etc.).
    value: Any


def _plain(value: Any) -> Any:  # noqa: ANN401
    """Convert a value to plain YAML-serializable data."""
    if value is None or isinstance(value, (str, int, float, bool)):
        return value

    if isinstance(value, PathLike):
        return fspath(value)

    if isinstance(value, Mapping):
        return {str(key): _plain(item) for key, item in value.items()}

    if isinstance(value, (Sequence, set, frozenset)) and not isinstance(value, bytes):
        return [_plain(item) for item in value]

    return FORMAT_REPLACER


def _indented(text: str, width: int) -> list[str]:
    """Indent non-blank lines of a text."""
    return [f'{" " * width}{line}' for line in text.splitlines() if line.strip()]


class ErrorFormatter:
    """Renderer of an error message with its context."""

    @classmethod
    def format(cls, message: str, context: ErrorContext | None = None) -> str:
        """Render a message followed by its context lines.

        Args:
            message: Human-readable error message.
            context: Optional error details.

        Returns:
            The message, alone if the context has nothing to show.
        """
        if not context:
            return message

        lines = [message, *cls.location_lines(context), *cls.details_lines(context)]

        return linesep.join(lines)

    @staticmethod
    def location_lines(context: ErrorContext) -> list[str]:
        """Describe where the error happened.

        Args:
            context: Error details.

        Returns:
            A line for the file and symbol, and a line for the
            configuration key and directory, when they are known.
        """
        lines = []
        indent = ' ' * LOCATION_INDENT

        if filename := context.get('filename'):
            line = f'{indent}in "{filename}"'
            if symbol := context.get('symbol'):
                line += f', looking up "{symbol}"'
            lines.append(line)

        if config_path := context.get('config_path'):
            line = f'{indent}configured by "{config_path}"'
            if directory := context.get('directory'):
                line += f', directory "{directory}"'
            lines.append(line)

        return lines

    @staticmethod
    def details_lines(context: ErrorContext) -> list[str]:
        """Show what was wrong.

        A broken YAML document is shown by its marked snippet; any other
        offending value is dumped as YAML.

        Args:
            context: Error details.

        Returns:
            Indented snippet lines, possibly none.
        """
        error = context.get('error')
        if isinstance(error, MarkedYAMLError):
            mark = error.problem_mark
            snippet = mark.get_snippet(indent=0) if mark else None
            return _indented(snippet or '', DETAILS_INDENT)

        if 'value' in context:
            data = safe_dump(_plain(context['value']), indent=2, sort_keys=False)
            data = data.removesuffix('...\n')
            return _indented(data, DETAILS_INDENT)

        return []


class PluginWarning(UserWarning):
    """Warning emitted for non-fatal plugin-related issues.

    Used when a registry plugin cannot be loaded or shadows an already
    registered symbol, but strict mode is disabled.
    """


class DiscoveryError(Exception, ErrorFormatter):
    """Base exception for all class-discovery errors.

    All custom exceptions raised by the library inherit from this class
    to allow unified error handling by callers.
    """

    def __init__(self, message: str, *,
                 context: ErrorContext | None = None) -> None:
        """Initialize an error.

        Args:
            message: Human-readable error description.
            context: Error context containing optional location values.
        """
        self.message = message
        self.context = context

        super().__init__(message)

    def __str__(self) -> str:
        """String representation."""
        return self.format(self.message, self.context)


class InvalidArgumentError(DiscoveryError, ValueError):
    """Error raised when a binding is declared with invalid arguments.

    Raised eagerly, at decoration time, never on attribute read.
    """

    @classmethod
    def from_pydantic_error(cls, error: 'ValidationError') -> 'Self':
        """Create an argument error from a Pydantic validation failure.

        The first failing field is reported; missing or empty values
        are reported as null or empty parameters.

        Args:
            error: ValidationError raised while validating binding options.

        Returns:
            InvalidArgumentError naming the offending parameter.
        """
        for item in error.errors(include_url=False):
            if item['loc']:
                field = item['loc'][0]
                value = item.get('input')
                problem = 'is null or empty' if value is None or value == '' else 'is invalid'
                return cls(
                    f'{field} parameter {problem}',
                    context=ErrorContext(value=value, error=error),
                )

        return cls('Invalid binding arguments', context=ErrorContext(error=error))  # pragma: no cover


class ConfigurationError(DiscoveryError):
    """Error raised when configuration cannot be read or has a wrong shape."""

    @classmethod
    def from_yaml_error(cls, error: MarkedYAMLError, *,
                        filename: str | None = None) -> 'Self':
        """Create a configuration error from a YAML parsing failure.

        Args:
            error: Exception raised by the YAML parser.
            filename: Configuration file being parsed.

        Returns:
            ConfigurationError representing the YAML parsing failure.
        """
        message = 'Invalid YAML configuration'
        if error.problem:
            message += f'{linesep}{' ' * LOCATION_INDENT}{error.problem}'

        return cls(message, context=ErrorContext(filename=filename, error=error))


class ReflectionError(DiscoveryError):
    """Error raised when a discovered file cannot provide its class."""


class MissingSymbolError(ReflectionError, LookupError):
    """Error raised when a discovered file does not export the expected symbol."""

    def __init__(self, symbol: str, filename: str) -> None:
        """Initialize a missing symbol error.

        Args:
            symbol: Name that was looked up (after name mapping).
            filename: File that was expected to export the symbol.
        """
        self.symbol = symbol
        self.filename = filename

        super().__init__(
            f'cannot find class {symbol} in file {filename}',
            context=ErrorContext(filename=filename, symbol=symbol),
        )


class ResolutionError(DiscoveryError):
    """Error raised when resolve mode cannot be carried out.

    Covers a missing container and asynchronous batches evaluated
    without a running event loop. Failures raised by the container
    itself are never wrapped into this error.
    """


class ContextNotSetError(DiscoveryError):
    """Error raised when a binding is read before a discovery context is bound."""


class PluginError(DiscoveryError):
    """Error raised for fatal plugin-related failures in strict mode."""

    def __init__(self, message: str, *,
                 entrypoint: 'EntryPoint | None' = None) -> None:
        """Initialize a plugin error.

        Args:
            message: Human-readable error description.
            entrypoint: Optional plugin entry point associated with the error.
        """
        self.entrypoint = entrypoint

        super().__init__(message)
