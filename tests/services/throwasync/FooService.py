"""Asynchronous service discovered next to a broken file."""

from class_discovery import AsyncResolvable


class FooService(AsyncResolvable):

    async def resolve_async(self, container):  # noqa: ANN001, ANN201
        return None
