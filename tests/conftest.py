from typing import Iterator

from pytest import fixture
from sqlalchemy.engine import Engine

from logsql.options import SinkOptions
from tests import database
from tests.models import metadata
from tests.settings import Environment
from tests.utils import PoolFactory, Recorder, StubPool, truncate_all


@fixture(name="env", scope="session")
def _env() -> Environment:
    return Environment()


@fixture(name="init_database", scope="session")
def _init_database(env: Environment) -> None:
    database.init_engines(env)


@fixture(name="log_engine", scope="function")
def _log_engine(init_database: None) -> Iterator[Engine]:  # pylint: disable=unused-argument
    metadata.create_all(database.LOG_ENGINE)
    yield database.LOG_ENGINE
    truncate_all(database.LOG_ENGINE)


@fixture(name="options", scope="function")
def _options() -> SinkOptions:
    return SinkOptions(user="logger", database="logtest", table="sys_logs_default")


@fixture(name="pool", scope="function")
def _pool() -> StubPool:
    return StubPool()


@fixture(name="pool_factory", scope="function")
def _pool_factory(pool: StubPool) -> PoolFactory:
    return PoolFactory(pool)


@fixture(name="on_done", scope="function")
def _on_done() -> Recorder:
    return Recorder()
