"""Second singleton service."""

from class_discovery import SyncResolvable


class FooService2(SyncResolvable):
    pass
