"""CLI utilities for inspecting class discovery.

The commands run discovery in list mode only: classes are loaded and
reported, never instantiated.
"""

from json import dumps
from pathlib import Path
from typing import TYPE_CHECKING

from click import ClickException, argument, echo, group, option
from click import Path as PathParam

from class_discovery.binding import bind_files
from class_discovery.configuration import Configuration
from class_discovery.context import DiscoveryContext
from class_discovery.core import DiscoveryPipeline
from class_discovery.errors import DiscoveryError
from class_discovery.loaders import ImportLoader
from class_discovery.models import DiscoverySettings
from class_discovery.registry import TypeRegistry

if TYPE_CHECKING:
    from class_discovery.models import ClassInfo

ConfigFilepath = PathParam(
    exists=True,
    dir_okay=False,
    readable=True,
    path_type=Path,
)


def _make_context(config_files: tuple[Path, ...], *, registry: bool) -> DiscoveryContext:
    """Build a discovery context from CLI options.

    Without explicit configuration files, `CLASS_DISCOVERY_*` settings
    are used.

    Args:
        config_files: YAML configuration files, merged in order.
        registry: Whether classes come from the plugin-fed registry.

    Returns:
        A discovery context without container.
    """
    settings = DiscoverySettings()
    if config_files:
        settings = settings.model_copy(update={'config_files': list(config_files)})

    try:
        if registry:
            return DiscoveryContext.from_settings(settings, registry=TypeRegistry())

        return DiscoveryContext(
            configuration=Configuration.from_settings(settings),
            loader=ImportLoader(),
        )

    except DiscoveryError as error:
        raise ClickException(str(error)) from error


def _describe(info: 'ClassInfo') -> dict[str, str]:
    """Build a JSON-serializable record of a discovered class."""
    cls = info.type

    return {
        'file': info.file.as_posix(),
        'name': info.name,
        'type': f'{getattr(cls, '__module__', '?')}.{getattr(cls, '__qualname__', cls)!s}',
    }


@group(help='Command-line utilities for class discovery.')
def cli() -> None:
    """Root CLI group for class discovery tools."""
    return None


@cli.command(
    name='dirs',
    help='Print existing directories configured under CONFIG_PATH.',
)
@option(
    '-c', '--config',
    'config_files',
    type=ConfigFilepath,
    multiple=True,
    help='YAML configuration file; may be repeated.',
)
@argument('config_path')
def print_directories(config_files: tuple[Path, ...], config_path: str) -> None:
    """Print resolved directories, one per line."""
    context = _make_context(config_files, registry=False)

    pipeline = DiscoveryPipeline('**', config_path, context=context)
    try:
        directories = pipeline.resolve_directories(config_path)
    except DiscoveryError as error:
        raise ClickException(str(error)) from error

    for directory in directories:
        echo(directory.as_posix())


@cli.command(
    name='list',
    help='List classes exported by files matching PATTERN under CONFIG_PATH.',
)
@option(
    '-c', '--config',
    'config_files',
    type=ConfigFilepath,
    multiple=True,
    help='YAML configuration file; may be repeated.',
)
@option(
    '-s', '--suffix',
    default='',
    help='Suffix appended to file base names to build the looked-up class name.',
)
@option(
    '--registry',
    is_flag=True,
    default=False,
    help='Look classes up in the plugin-fed registry instead of importing files.',
)
@argument('pattern')
@argument('config_path')
def list_classes(config_files: tuple[Path, ...], suffix: str, registry: bool,
                 pattern: str, config_path: str) -> None:
    """Print discovered classes as a JSON list."""
    context = _make_context(config_files, registry=registry)

    try:
        binding = bind_files(
            pattern, config_path,
            (lambda name: f'{name}{suffix}') if suffix else None,
            context=context,
        )
        classes = binding.get()
    except DiscoveryError as error:
        raise ClickException(str(error)) from error

    echo(dumps([_describe(info) for info in classes], ensure_ascii=False, indent=4))  # type: ignore[union-attr]


if __name__ == '__main__':
    cli()
