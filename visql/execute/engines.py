"""SQLAlchemy engine construction for datasources.

One :class:`~sqlalchemy.engine.Engine` is one bounded connection pool.  The
pool never overflows: once ``max_size`` connections are checked out, further
callers wait up to ``connect_timeout`` seconds and then fail.
"""
from __future__ import annotations

import logging
from collections.abc import Callable

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import QueuePool

from visql.compile.base import SQLDialect
from visql.schema.datasource import DataSource
from visql.settings import PoolSettings

logger = logging.getLogger(__name__)

#: ``(datasource, dialect, pool_settings) -> Engine``
EngineFactory = Callable[[DataSource, SQLDialect, PoolSettings], Engine]


def create_datasource_engine(
    datasource: DataSource, dialect: SQLDialect, pool: PoolSettings
) -> Engine:
    """Create the pooled engine for ``datasource``.

    The URL comes from :meth:`DataSource.build_url` using the dialect's
    driver name; pool bounds come from ``pool``.  No connection is opened
    until the first checkout.
    """
    url = datasource.build_url(dialect.driver_name, dialect.default_port)
    connect_args = dialect.connect_args(datasource, pool)
    # Driver options set explicitly on the datasource win.
    for key in datasource.options:
        connect_args.pop(key, None)

    logger.info(
        "Creating connection pool for datasource %s (%s, max_size=%d)",
        datasource.id,
        url.render_as_string(hide_password=True),
        pool.max_size,
    )
    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=pool.max_size,
        max_overflow=0,
        pool_timeout=pool.connect_timeout,
        pool_recycle=int(pool.idle_timeout),
        pool_pre_ping=pool.pre_ping,
        connect_args=connect_args,
    )
