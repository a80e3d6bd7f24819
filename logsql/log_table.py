import datetime as dt
from dataclasses import dataclass
from typing import Any

from sqlalchemy import String, Text, column, insert, table
from sqlalchemy.sql import Insert, TableClause
from sqlalchemy_utc import UtcDateTime

from logsql.options import FieldMapping, SinkOptions
from logsql.util import now_in_utc, to_json


@dataclass
class LogRow:
    level: str
    message: str
    meta: str
    timestamp: dt.datetime

    def as_columns(self, fields: FieldMapping) -> dict[str, Any]:
        return {
            fields.level: self.level,
            fields.message: self.message,
            fields.meta: self.meta,
            fields.timestamp: self.timestamp,
        }


def log_table(options: SinkOptions) -> TableClause:
    # a lightweight clause is enough to render INSERT, the table itself is provisioned by the caller
    fields = options.fields
    return table(
        options.table_name,
        column(fields.level, String),
        column(fields.message, Text),
        column(fields.meta, Text),
        column(fields.timestamp, UtcDateTime),
        schema=options.schema,
    )


def build_row(level: str, message: str, meta: Any) -> LogRow:
    return LogRow(
        level=level,
        message=message,
        meta=to_json(meta),
        timestamp=now_in_utc(),
    )


def insert_row(target: TableClause, row: LogRow, fields: FieldMapping) -> Insert:
    return insert(target).values(row.as_columns(fields))
