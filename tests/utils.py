import threading
from dataclasses import dataclass, field
from typing import Any, Optional

from sqlalchemy import MetaData
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.sql import Insert

from logsql.errors import SinkError
from logsql.options import SinkOptions


def truncate_all(engine: Engine) -> None:
    meta = MetaData()
    meta.reflect(bind=engine)
    with engine.begin() as conn:
        for table in reversed(meta.sorted_tables):
            conn.execute(table.delete())


def database_error(reason: str) -> OperationalError:
    return OperationalError("INSERT", {}, Exception(reason))


def inserted_values(statement: Insert) -> dict[str, Any]:
    return dict(statement.compile().params)


@dataclass
class Recorder:
    """Stands in for the completion callback, keeping every call."""

    calls: list[tuple[Optional[SinkError], Optional[bool]]] = field(default_factory=list)

    def __call__(self, error: Optional[SinkError], success: Optional[bool]) -> None:
        self.calls.append((error, success))


class StubConnection:
    def __init__(self, pool: "StubPool") -> None:
        self.pool = pool

    def __enter__(self) -> "StubConnection":
        return self

    def __exit__(self, *_: Any) -> None:
        self.close()

    def execute(self, statement: Insert) -> None:
        with self.pool.lock:
            self.pool.executed.append(statement)
        if self.pool.execute_error is not None:
            raise self.pool.execute_error

    def commit(self) -> None:
        with self.pool.lock:
            self.pool.commits += 1

    def close(self) -> None:
        with self.pool.lock:
            self.pool.released += 1


class StubPool:
    """Counts what the sink does with its pool, failing on demand."""

    def __init__(
        self,
        connect_error: Optional[BaseException] = None,
        execute_error: Optional[BaseException] = None,
    ) -> None:
        self.connect_error = connect_error
        self.execute_error = execute_error
        self.lock = threading.Lock()
        self.acquisitions = 0
        self.commits = 0
        self.disposed = 0
        self.executed: list[Insert] = []
        self.released = 0

    def connect(self) -> StubConnection:
        with self.lock:
            self.acquisitions += 1
        if self.connect_error is not None:
            raise self.connect_error
        return StubConnection(self)

    def dispose(self) -> None:
        self.disposed += 1


@dataclass
class PoolFactory:
    pool: StubPool = field(default_factory=StubPool)
    created_with: list[SinkOptions] = field(default_factory=list)

    def __call__(self, options: SinkOptions) -> StubPool:
        self.created_with.append(options)
        return self.pool
