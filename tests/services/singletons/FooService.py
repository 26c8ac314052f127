"""Service resolved as a container singleton."""

from typing import ClassVar


class FooService:
    counter: ClassVar[int] = 0

    def __init__(self) -> None:
        type(self).counter += 1
