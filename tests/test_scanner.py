"""Tests for directory resolution and file scanning."""

import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest

from class_discovery.configuration import Configuration
from class_discovery.core.scanner import DirectoryScannerMixin, expand_braces
from class_discovery.errors import ConfigurationError

if TYPE_CHECKING:
    from pyfakefs.fake_filesystem import FakeFilesystem


class Scanner(DirectoryScannerMixin):

    def __init__(self, **dirs: Any) -> None:  # noqa: ANN401
        self.configuration = Configuration({'dirs': dirs})


@pytest.mark.parametrize('pattern, expected', (
    ('**/*.py', ['**/*.py']),
    ('*.{py,pyc}', ['*.py', '*.pyc']),
    ('{a,b}/{c,d}.py', ['a/c.py', 'a/d.py', 'b/c.py', 'b/d.py']),
    ('{a,{b,c}}.py', ['a.py', 'b.py', 'c.py']),
    ('*.{py}', ['*.{py}']),
    ('*.{py,}', ['*.py', '*.']),
))
def test_expand_braces(pattern: str, expected: list[str]) -> None:
    """Verify brace alternatives expansion."""
    assert expand_braces(pattern) == expected


@pytest.mark.parametrize('value, expected', (
    (None, []),
    ('', []),
    ([], []),
    ('/srv/services', ['/srv/services']),
    (['/srv/a', '/srv/b'], ['/srv/a', '/srv/b']),
    (('/srv/a',), ['/srv/a']),
))
def test_read_directories(value: Any, expected: list[str]) -> None:  # noqa: ANN401
    """Verify normalization of configured directory values."""
    assert Scanner(services=value).read_directories('dirs.services') == expected


def test_read_unknown_directories() -> None:
    """Verify an unknown key means no directories."""
    assert Scanner().read_directories('dirs.services') == []


@pytest.mark.parametrize('value', (
    42,
    {'path': '/srv'},
    ['/srv/a', 1],
    [None],
))
def test_read_malformed_directories(value: Any) -> None:  # noqa: ANN401
    """Verify malformed directory values are rejected."""
    with pytest.raises(ConfigurationError, match=r'^Directories must be a path or a list of paths'):
        Scanner(services=value).read_directories('dirs.services')


def test_resolve_directories(fs: 'FakeFilesystem', caplog: pytest.LogCaptureFixture) -> None:
    """Verify existing directories are kept once in configuration order."""
    fs.create_dir('/srv/a')
    fs.create_dir('/srv/b')

    scanner = Scanner(services=['/srv/b', '/srv/missing', '/srv/a', '/srv/b/../b/'])
    with caplog.at_level('WARNING', logger='class_discovery'):
        directories = scanner.resolve_directories('dirs.services')

    assert directories == [Path('/srv/b'), Path('/srv/a')]
    assert 'Directory /srv/missing does not exist' in caplog.text


def test_resolve_relative_directories(fs: 'FakeFilesystem') -> None:
    """Verify relative directories become absolute."""
    fs.create_dir('/srv/services')
    os.chdir('/srv')

    directories = Scanner(services='services').resolve_directories('dirs.services')

    assert directories == [Path('/srv/services')]


def test_scan_directory(fs: 'FakeFilesystem') -> None:
    """Verify glob matching keeps sorted, unique files only."""
    fs.create_file('/srv/a/One.py')
    fs.create_file('/srv/a/Three.pyc')
    fs.create_file('/srv/a/notes.txt')
    fs.create_file('/srv/a/sub/Two.py')
    fs.create_dir('/srv/a/package.py')

    matches = Scanner.scan_directory(Path('/srv/a'), '/**/*.{py,pyc}')

    assert matches == [
        Path('/srv/a/One.py'),
        Path('/srv/a/Three.pyc'),
        Path('/srv/a/sub/Two.py'),
    ]


def test_scan_directory_overlapping_alternatives(fs: 'FakeFilesystem') -> None:
    """Verify a file matched by several alternatives is listed once."""
    fs.create_file('/srv/a/One.py')

    matches = Scanner.scan_directory(Path('/srv/a'), '{*.py,One.*}')

    assert matches == [Path('/srv/a/One.py')]


def test_scan_directory_with_special_characters(fs: 'FakeFilesystem') -> None:
    """Verify directory names are not interpreted as glob patterns."""
    fs.create_file('/srv/[a]/One.py')
    fs.create_file('/srv/a/Two.py')

    matches = Scanner.scan_directory(Path('/srv/[a]'), '*.py')

    assert matches == [Path('/srv/[a]/One.py')]


def test_scan_files(fs: 'FakeFilesystem') -> None:
    """Verify directory order and duplicates across directories."""
    fs.create_file('/srv/a/One.py')
    fs.create_file('/srv/b/One.py')
    fs.create_file('/srv/b/Alpha.py')

    files = Scanner().scan_files([Path('/srv/b'), Path('/srv/a')], '**/*.py')

    assert files == [
        Path('/srv/b/Alpha.py'),
        Path('/srv/b/One.py'),
        Path('/srv/a/One.py'),
    ]


def test_scan_nothing(fs: 'FakeFilesystem') -> None:
    """Verify an empty directory yields no files."""
    fs.create_dir('/srv/a')

    assert Scanner().scan_files([Path('/srv/a')], '**/*.py') == []
