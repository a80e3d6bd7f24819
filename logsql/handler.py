import logging
import sys
import traceback
from typing import Any, Mapping, Optional, Union

from logsql.errors import SinkError
from logsql.options import SinkOptions, as_options
from logsql.pool import create_pool
from logsql.sink import PoolFactory, SqlSink

# attributes every LogRecord has, anything else on a record came in through `extra`
RECORD_ATTRIBUTES = frozenset(vars(logging.LogRecord("", logging.NOTSET, "", 0, "", (), None))) | {
    "message",
    "asctime",
    "taskName",
}
IGNORED_LOGGERS = ("logsql", "sqlalchemy")


class FeedbackFilter(logging.Filter):
    """Drops records emitted while writing records, which would otherwise loop back into the sink."""

    def filter(self, record: logging.LogRecord) -> bool:
        return not any(record.name == name or record.name.startswith(name + ".") for name in IGNORED_LOGGERS)


def record_meta(record: logging.LogRecord) -> Any:
    if "meta" in vars(record):
        return getattr(record, "meta")
    meta = {key: value for key, value in vars(record).items() if key not in RECORD_ATTRIBUTES}
    if record.exc_info:
        meta["exc_text"] = logging.Formatter().formatException(record.exc_info)
    return meta


class SqlHandler(logging.Handler):
    """
    Logging handler writing each record through a :class:`SqlSink`.

    Can be built from an existing sink or from sink options, in which case the handler owns the sink
    and closes it along with itself. Works with ``logging.config.dictConfig`` through the ``()`` key::

        "handlers": {"sql": {"()": "logsql.handler.SqlHandler", "options": {...}}}
    """

    def __init__(
        self,
        sink: Optional[SqlSink] = None,
        options: Union[SinkOptions, Mapping[str, Any], None] = None,
        pool_factory: PoolFactory = create_pool,
    ) -> None:
        if sink is None and options is None:
            raise ValueError("Either a sink or sink options are required")
        self._owns_sink = sink is None
        if sink is None:
            sink = SqlSink(as_options(options), pool_factory=pool_factory)  # type: ignore[arg-type]
        super().__init__(sink.options.level)
        self.sink = sink
        self.addFilter(FeedbackFilter())

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record) if self.formatter is not None else record.getMessage()
            self.sink.write(
                record.levelname.lower(),
                message,
                record_meta(record),
                on_done=lambda error, _: self.report(record, error),
            )
        except RecursionError:
            raise
        except Exception:  # pylint: disable=broad-except
            self.handleError(record)

    def report(self, record: logging.LogRecord, error: Optional[SinkError]) -> None:
        # same policy as Handler.handleError, which can't be used here since we're outside an except block
        if error is None or not logging.raiseExceptions:
            return
        sys.stderr.write(f"--- Logging error in {type(self).__name__} ---\n")
        traceback.print_exception(type(error), error, error.__traceback__, file=sys.stderr)
        sys.stderr.write(f"Record was: {record.name} {record.levelname} {record.msg!r}\n")

    def close(self) -> None:
        try:
            if self._owns_sink:
                self.sink.close()
        finally:
            super().close()
