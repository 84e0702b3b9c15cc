from typing import Protocol

from sqlalchemy.engine import Engine


class HostContext(Protocol):
    def is_bound(self) -> bool:
        """Return True when the pipeline runs attached to its destination host."""
        ...


class EngineContext:
    """Bound when a destination engine is attached."""

    def __init__(self, engine: Engine | None):
        self.engine = engine

    def is_bound(self) -> bool:
        return self.engine is not None


class StaticContext:
    def __init__(self, bound: bool = True):
        self.bound = bound

    def is_bound(self) -> bool:
        return self.bound
