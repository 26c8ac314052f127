"""Name primitive types and validation rules.

This module defines strongly-typed aliases used to validate binding
arguments and registry symbols.
"""

from re import ASCII
from re import compile as regexp
from typing import Annotated

from pydantic import Field, StrictStr

#: Base pattern for exported symbol names (Python identifiers, ASCII only).
_SYMBOL_PATTERN = r'[a-zA-Z_]\w*'

#: Compiled pattern for exported symbol names.
SYMBOL_PATTERN = regexp(rf'^{_SYMBOL_PATTERN}$', flags=ASCII)


GlobPattern = Annotated[
    StrictStr, Field(
        min_length=1,
        title='File filter',
        description=(
            'Glob pattern applied under every configured directory. '
            'Supports recursive `**` and brace alternatives.'
        ),
        examples=[
            '**/*.py',
            '/**/*.{py,pyc}',
        ],
    ),
]

ConfigKey = Annotated[
    StrictStr, Field(
        min_length=1,
        title='Configuration key',
        description=(
            'Dotted configuration path naming one directory '
            'or a list of directories to scan.'
        ),
        examples=[
            'system.dirs.controllers',
        ],
    ),
]

Symbol = Annotated[
    str, Field(
        pattern=rf'^{_SYMBOL_PATTERN}$',
        title='Symbol name',
        description='Name under which a class is exported or registered.',
        examples=[
            'FooService',
        ],
    ),
]
