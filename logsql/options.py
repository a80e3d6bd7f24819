import logging
import re
from dataclasses import dataclass, field
from dataclasses import fields as dataclass_fields
from typing import Any, Mapping, Optional, Union

from logsql.errors import ConfigurationError

IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_$]*$")
ROLES = ("level", "message", "meta", "timestamp")
FIELD_ALIASES = ("field_mapping", "fieldMapping")

FieldMappingLike = Union["FieldMapping", Mapping[str, Optional[str]], None]


def validate_identifier(kind: str, name: Any) -> str:
    if not isinstance(name, str) or not IDENTIFIER.match(name):
        raise ConfigurationError(f"Invalid {kind} name: {name!r}")
    return name


@dataclass(frozen=True)
class FieldMapping:
    """Column name used for each of the four parts of a log record."""

    level: str = "level"
    message: str = "message"
    meta: str = "meta"
    timestamp: str = "timestamp"

    def __post_init__(self) -> None:
        columns = self.columns()
        for column in columns.values():
            validate_identifier("column", column)
        if len(set(columns.values())) != len(columns):
            raise ConfigurationError(f"Field mapping assigns the same column twice: {columns}")

    @classmethod
    def merge(cls, mapping: FieldMappingLike) -> "FieldMapping":
        """
        Build a mapping from whatever the caller supplied.

        Roles missing from ``mapping`` (or set to ``None``) keep their default column name.
        """
        if mapping is None:
            return cls()
        if isinstance(mapping, FieldMapping):
            return mapping
        unknown = set(mapping) - set(ROLES)
        if unknown:
            raise ConfigurationError(f"Unknown field roles: {', '.join(sorted(unknown))}")
        return cls(**{role: column for role, column in mapping.items() if column is not None})

    def columns(self) -> dict[str, str]:
        return {role: getattr(self, role) for role in ROLES}


@dataclass(frozen=True)
class SinkOptions:  # pylint: disable=too-many-instance-attributes
    user: Optional[str] = None
    database: Optional[str] = None
    table: Optional[str] = None
    fields: FieldMapping = field(default_factory=FieldMapping)
    silent: bool = False
    level: Union[int, str] = logging.NOTSET
    workers: int = 5
    # connection
    drivername: str = "mysql+pymysql"
    password: Optional[str] = None
    host: Optional[str] = None
    port: Optional[int] = None
    # pool, handed to create_engine as is
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: float = 30.0
    pool_recycle: int = -1
    pool_pre_ping: bool = False
    echo: bool = False
    logging_name: Optional[str] = None
    connect_args: dict[str, Any] = field(default_factory=dict)
    engine_options: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.user:
            raise ConfigurationError("The database username is required")
        if not self.database:
            raise ConfigurationError("The database name is required")
        if not self.table:
            raise ConfigurationError("The database table is required")
        for part in self.table.split(".", 1):
            validate_identifier("table", part)
        if self.workers < 1:
            raise ConfigurationError(f"At least one worker is required, got {self.workers}")
        # frozen, so go through object.__setattr__ like dataclasses itself does
        object.__setattr__(self, "fields", FieldMapping.merge(self.fields))

    @property
    def table_name(self) -> str:
        return str(self.table).rsplit(".", 1)[-1]

    @property
    def schema(self) -> Optional[str]:
        parts = str(self.table).split(".", 1)
        return parts[0] if len(parts) == 2 else None

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> "SinkOptions":
        """
        Build options from a plain dictionary.

        ``field_mapping`` and ``fieldMapping`` are accepted as aliases of ``fields``. Keys that are not
        options of their own are passed through to ``create_engine`` inside ``engine_options``.
        """
        known = {f.name for f in dataclass_fields(cls)}
        values: dict[str, Any] = {}
        engine_options = dict(options.get("engine_options") or {})
        for key, value in options.items():
            if key in FIELD_ALIASES:
                values["fields"] = value
            elif key == "engine_options":
                continue
            elif key in known:
                values[key] = value
            else:
                engine_options[key] = value
        return cls(**values, engine_options=engine_options)


def as_options(options: Union[SinkOptions, Mapping[str, Any]]) -> SinkOptions:
    if isinstance(options, SinkOptions):
        return options
    return SinkOptions.from_mapping(options)
