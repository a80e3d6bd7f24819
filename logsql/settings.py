from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from logsql.options import FieldMapping, SinkOptions


class BaseEnvironment(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="LOGSQL_", extra="ignore")


class Environment(BaseEnvironment):
    user: Optional[str] = None
    password: Optional[str] = None
    host: Optional[str] = None
    port: Optional[int] = None
    database: Optional[str] = None
    table: Optional[str] = None
    drivername: str = "mysql+pymysql"
    silent: bool = False
    level: str = "NOTSET"
    workers: int = 5
    pool_size: int = 5
    max_overflow: int = 10
    echo: bool = False
    level_column: str = "level"
    message_column: str = "message"
    meta_column: str = "meta"
    timestamp_column: str = "timestamp"

    def to_options(self) -> SinkOptions:
        return SinkOptions(
            user=self.user,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.database,
            table=self.table,
            drivername=self.drivername,
            silent=self.silent,
            level=self.level,
            workers=self.workers,
            pool_size=self.pool_size,
            max_overflow=self.max_overflow,
            echo=self.echo,
            fields=FieldMapping(
                level=self.level_column,
                message=self.message_column,
                meta=self.meta_column,
                timestamp=self.timestamp_column,
            ),
        )
