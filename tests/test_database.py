import pytest

from lendingdesk.config import PostgresConfig
from lendingdesk.database import DatabaseConnection, build_dsn, open_engine


def _url(path):
    return f"sqlite:///{path}"


def test_build_dsn_follows_keyword_format():
    password = "password"
    dsn = build_dsn(
        host="db.example.com",
        username="app",
        password=password,
        database="lending",
        port=5432,
        ssl_mode="disable",
        timezone="Asia/Jakarta",
    )
    assert dsn == (
        "host=db.example.com user=app password=password dbname=lending "
        "port=5432 sslmode=disable timezone=Asia/Jakarta"
    )


def test_build_dsn_has_every_key_once():
    password = "password"
    dsn = build_dsn("h", "u", password, "d", 1, "require", "UTC")
    keys = [item.split("=", 1)[0] for item in dsn.split()]
    assert keys == ["host", "user", "password", "dbname", "port", "sslmode", "timezone"]


def test_open_engine_pings_and_sizes_pool(tmp_path):
    config = PostgresConfig(
        max_open_connections=3, max_idle_connections=2, conn_max_lifetime=60
    )
    engine = open_engine(_url(tmp_path / "a.db"), config)
    try:
        assert engine.pool.size() == 2
        assert engine.pool.checkedin() == 1
    finally:
        engine.dispose()


def test_open_engine_caps_idle_at_open(tmp_path):
    config = PostgresConfig(max_open_connections=3, max_idle_connections=10)
    engine = open_engine(_url(tmp_path / "b.db"), config)
    try:
        assert engine.pool.size() == 3
    finally:
        engine.dispose()


def test_open_engine_unreachable_raises(tmp_path):
    missing = tmp_path / "missing" / "x.db"
    with pytest.raises(ConnectionError):
        open_engine(_url(missing), PostgresConfig())


def test_close_disposes_pools(tmp_path):
    config = PostgresConfig()
    master = open_engine(_url(tmp_path / "m.db"), config)
    slave = open_engine(_url(tmp_path / "s.db"), config)
    conn = DatabaseConnection(master=master, slave=slave)
    assert master.pool.checkedin() == 1
    conn.close()
    assert master.pool.checkedin() == 0
    assert slave.pool.checkedin() == 0


def test_close_tolerates_missing_replica(tmp_path):
    master = open_engine(_url(tmp_path / "m.db"), PostgresConfig())
    with DatabaseConnection(master=master) as conn:
        assert conn.slave is None
    assert master.pool.checkedin() == 0