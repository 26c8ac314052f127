"""Fast asynchronous service."""

from class_discovery import AsyncResolvable


class FooService3(AsyncResolvable):
    ready = False

    async def resolve_async(self, container):  # noqa: ANN001, ANN201
        self.ready = True
