"""Opening and closing the primary and replica database engines."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine
from sqlalchemy.pool import QueuePool

from .config import PostgresConfig

_DSN_FORMAT = (
    "host={host} user={user} password={password} dbname={dbname} "
    "port={port:d} sslmode={sslmode} timezone={timezone}"
)


def build_dsn(host, username, password, database, port, ssl_mode, timezone):
    """Return a keyword/value connection string for PostgreSQL."""
    return _DSN_FORMAT.format(
        host=host,
        user=username,
        password=password,
        dbname=database,
        port=int(port),
        sslmode=ssl_mode,
        timezone=timezone,
    )


def _dsn_to_url(dsn):
    params = {}
    for item in dsn.split():
        key, sep, value = item.partition("=")
        if not sep:
            raise ValueError(f"malformed connection string entry {item!r}")
        params[key] = value
    query = {}
    if params.get("sslmode"):
        query["sslmode"] = params["sslmode"]
    if params.get("timezone"):
        query["options"] = f"-c timezone={params['timezone']}"
    port = params.get("port")
    return URL.create(
        "postgresql",
        username=params.get("user") or None,
        password=params.get("password") or None,
        host=params.get("host") or None,
        port=int(port) if port else None,
        database=params.get("dbname") or None,
        query=query,
    )


def _pool_options(config):
    max_open = config.max_open_connections
    max_idle = config.max_idle_connections
    if max_open > 0:
        size = max(1, min(max_idle, max_open))
        overflow = max_open - size
    else:
        size = max(1, max_idle)
        overflow = -1
    lifetime = config.conn_max_lifetime
    recycle = int(lifetime) if lifetime > 0 else -1
    return {"pool_size": size, "max_overflow": overflow, "pool_recycle": recycle}


def open_engine(url, config):
    """Create an engine for *url* sized by *config* and check it answers.

    *url* is either a database URL or a keyword/value connection string.
    Raises ConnectionError when the database cannot be reached.
    """
    if isinstance(url, str) and "://" not in url:
        url = _dsn_to_url(url)
    engine = create_engine(url, poolclass=QueuePool, **_pool_options(config))
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as exc:
        engine.dispose()
        raise ConnectionError(f"cannot reach database: {exc}") from exc
    return engine


@dataclass
class DatabaseConnection:
    """The primary (write) and replica (read) engines."""

    master: Optional[Engine] = None
    slave: Optional[Engine] = None

    def close(self):
        """Dispose both engines' connection pools."""
        for engine in (self.master, self.slave):
            if engine is not None:
                engine.dispose()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
        return False


def open_connection(config: PostgresConfig):
    """Open the primary and replica engines described by *config*."""
    master_dsn = build_dsn(
        config.master_host,
        config.master_username,
        config.master_password,
        config.database,
        config.master_port,
        config.master_ssl_mode,
        config.timezone,
    )
    slave_dsn = build_dsn(
        config.slave_host,
        config.slave_username,
        config.slave_password,
        config.database,
        config.slave_port,
        config.slave_ssl_mode,
        config.timezone,
    )
    master = open_engine(master_dsn, config)
    try:
        slave = open_engine(slave_dsn, config)
    except Exception:
        master.dispose()
        raise
    return DatabaseConnection(master=master, slave=slave)