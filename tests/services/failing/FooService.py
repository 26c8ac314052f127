"""Service whose constructor fails."""


class FooService:

    def __init__(self) -> None:
        raise RuntimeError('construction failed')
