import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine

from logsql.options import SinkOptions

logger = logging.getLogger(__name__)


def connection_url(options: SinkOptions) -> URL:
    return URL.create(
        options.drivername,
        username=options.user,
        password=options.password,
        host=options.host,
        port=options.port,
        database=options.database,
    )


def create_pool(options: SinkOptions) -> Engine:
    """
    Create the engine whose pool every write borrows connections from.

    Nothing connects here, the first connection is opened by the first write.
    """
    url = connection_url(options)
    engine_options = dict(
        pool_size=options.pool_size,
        max_overflow=options.max_overflow,
        pool_timeout=options.pool_timeout,
        pool_recycle=options.pool_recycle,
        pool_pre_ping=options.pool_pre_ping,
        echo=options.echo,
        future=True,
    )
    if options.logging_name:
        engine_options["logging_name"] = options.logging_name
    if options.connect_args:
        engine_options["connect_args"] = options.connect_args
    engine_options.update(options.engine_options)
    logger.debug("Creating pool for %s", url.render_as_string(hide_password=True))
    return create_engine(url, **engine_options)
