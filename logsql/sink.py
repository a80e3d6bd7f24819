import logging
from concurrent.futures import Future, ThreadPoolExecutor
from types import TracebackType
from typing import Any, Callable, Mapping, Optional, Type, Union

from sqlalchemy.engine import Engine

from logsql.errors import AcquisitionError, ExecutionError, SinkError
from logsql.log_table import build_row, insert_row, log_table
from logsql.options import SinkOptions, as_options
from logsql.pool import create_pool

logger = logging.getLogger(__name__)

OnDone = Callable[[Optional[SinkError], Optional[bool]], None]
PoolFactory = Callable[[SinkOptions], Engine]


def notify(on_done: Optional[OnDone], error: Optional[SinkError]) -> bool:
    if on_done is not None:
        try:
            if error is None:
                on_done(None, True)
            else:
                on_done(error, None)
        except Exception:  # pylint: disable=broad-except
            logger.exception("Completion callback %r failed", on_done)
    return error is None


class SqlSink:
    """
    Persists log records as rows of a relational table.

    Every non-silent ``write`` borrows one connection from the pool, runs one INSERT and gives the
    connection back, all of it on a worker thread so the caller never waits on the database.
    """

    NAME = "sql"

    def __init__(
        self,
        options: Union[SinkOptions, Mapping[str, Any]],
        pool_factory: PoolFactory = create_pool,
    ) -> None:
        self.options = as_options(options)
        self.fields = self.options.fields
        self.table = log_table(self.options)
        self.pool = pool_factory(self.options)
        self._executor = ThreadPoolExecutor(max_workers=self.options.workers, thread_name_prefix="logsql")
        self._closed = False
        logger.debug("Sink %r ready for table %s", self.NAME, self.options.table)

    def __enter__(self) -> "SqlSink":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, level: str, message: str, meta: Any = None, on_done: Optional[OnDone] = None) -> "Future[bool]":
        """
        Queue one log record for insertion and return right away.

        ``on_done`` is called with ``(None, True)`` once the row is stored, or with ``(error, None)`` when
        it could not be. The returned future resolves to the same outcome as a boolean.
        """
        if self.options.silent:
            future: "Future[bool]" = Future()
            future.set_result(notify(on_done, None))
            return future
        try:
            return self._executor.submit(self._insert, level, message, meta, on_done)
        except RuntimeError as exc:
            raise SinkError("Cannot write to a closed sink") from exc

    def _insert(self, level: str, message: str, meta: Any, on_done: Optional[OnDone]) -> bool:
        try:
            connection = self.pool.connect()
        except Exception as exc:  # pylint: disable=broad-except
            acquisition_error = AcquisitionError(f"Could not acquire a connection: {exc}", exc)
            acquisition_error.__cause__ = exc
            return notify(on_done, acquisition_error)

        error: Optional[SinkError] = None
        # closing the connection hands it back to the pool, on failure too
        with connection:
            try:
                row = build_row(level, message, meta)
                connection.execute(insert_row(self.table, row, self.fields))
                connection.commit()
            except Exception as exc:  # pylint: disable=broad-except
                error = ExecutionError(f"Could not insert into {self.options.table}: {exc}", exc)
                error.__cause__ = exc
        return notify(on_done, error)

    def close(self, wait: bool = True) -> None:
        """Wait for queued writes (unless ``wait`` is false) and dispose of the pool."""
        if self._closed:
            return
        self._closed = True
        self._executor.shutdown(wait=wait)
        self.pool.dispose()
        logger.debug("Sink %r for table %s closed", self.NAME, self.options.table)
