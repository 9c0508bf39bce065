"""Application settings read from a dotenv file and the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import dotenv_values

_DEFAULTS = {
    "CONTEXT_TIMEOUT": "5",
    "POSTGRES_TIMEZONE": "Asia/Jakarta",
    "POSTGRES_MAX_OPEN_CONNECTIONS": "10",
    "POSTGRES_MAX_IDLE_CONNECTIONS": "10",
    "POSTGRES_CONN_MAX_LIFETIME": "300",
}

_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}


@dataclass(frozen=True)
class ApplicationConfig:
    name: str = ""
    env: str = ""
    port: int = 0
    url: str = ""


@dataclass(frozen=True)
class PostgresConfig:
    master_host: str = ""
    master_username: str = ""
    master_password: str = ""
    master_port: int = 0
    master_ssl_mode: str = ""
    slave_host: str = ""
    slave_username: str = ""
    slave_password: str = ""
    slave_port: int = 0
    slave_ssl_mode: str = ""
    database: str = ""
    timezone: str = "Asia/Jakarta"
    max_open_connections: int = 10
    max_idle_connections: int = 10
    conn_max_lifetime: float = 300.0  # seconds


@dataclass(frozen=True)
class MailConfig:
    host: str = ""
    port: int = 0
    username: str = ""
    password: str = ""
    tls: bool = False


@dataclass(frozen=True)
class JaegerConfig:
    host: str = ""
    port: int = 0
    service_name: str = ""


@dataclass(frozen=True)
class Config:
    application: ApplicationConfig
    postgres: PostgresConfig
    mail: MailConfig
    jaeger: JaegerConfig
    context_timeout: float = 5.0  # seconds

    @property
    def app_url(self):
        return self.application.url


def _to_int(key, value):
    value = value.strip()
    if not value:
        return 0
    try:
        return int(value, 0)
    except ValueError:
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"{key}: cannot parse {value!r} as an integer") from None


def _to_bool(key, value):
    value = value.strip()
    if not value:
        return False
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{key}: cannot parse {value!r} as a boolean")


def _to_seconds(key, value):
    try:
        return float(value.strip())
    except ValueError:
        raise ValueError(f"{key}: invalid duration {value!r}") from None


def load(path=".env", environ=None):
    """Read settings from the dotenv file at *path*, overridden by *environ*.

    Raises FileNotFoundError when the file is missing and ValueError when a
    value cannot be converted.
    """
    env_file = Path(path)
    if not env_file.is_file():
        raise FileNotFoundError(f"config file not found: {env_file}")

    file_values = {
        key.upper(): value or "" for key, value in dotenv_values(env_file).items()
    }
    environ = os.environ if environ is None else environ

    def get(key):
        from_env = environ.get(key)
        if from_env:
            return from_env
        if key in file_values:
            return file_values[key]
        return _DEFAULTS.get(key, "")

    application = ApplicationConfig(
        name=get("APP_NAME"),
        env=get("APP_ENV"),
        port=_to_int("APP_PORT", get("APP_PORT")),
        url=get("APP_URL"),
    )
    postgres = PostgresConfig(
        master_host=get("POSTGRES_MASTER_HOST"),
        master_username=get("POSTGRES_MASTER_USERNAME"),
        master_password=get("POSTGRES_MASTER_PASSWORD"),
        master_port=_to_int("POSTGRES_MASTER_PORT", get("POSTGRES_MASTER_PORT")),
        master_ssl_mode=get("POSTGRES_MASTER_SSL_MODE"),
        slave_host=get("POSTGRES_SLAVE_HOST"),
        slave_username=get("POSTGRES_SLAVE_USERNAME"),
        slave_password=get("POSTGRES_SLAVE_PASSWORD"),
        slave_port=_to_int("POSTGRES_SLAVE_PORT", get("POSTGRES_SLAVE_PORT")),
        slave_ssl_mode=get("POSTGRES_SLAVE_SSL_MODE"),
        database=get("POSTGRES_DATABASE"),
        timezone=get("POSTGRES_TIMEZONE"),
        max_open_connections=_to_int(
            "POSTGRES_MAX_OPEN_CONNECTIONS", get("POSTGRES_MAX_OPEN_CONNECTIONS")
        ),
        max_idle_connections=_to_int(
            "POSTGRES_MAX_IDLE_CONNECTIONS", get("POSTGRES_MAX_IDLE_CONNECTIONS")
        ),
        conn_max_lifetime=_to_seconds(
            "POSTGRES_CONN_MAX_LIFETIME", get("POSTGRES_CONN_MAX_LIFETIME")
        ),
    )
    mail = MailConfig(
        host=get("MAIL_HOST"),
        port=_to_int("MAIL_PORT", get("MAIL_PORT")),
        username=get("MAIL_USERNAME"),
        password=get("MAIL_PASSWORD"),
        tls=_to_bool("MAIL_TLS", get("MAIL_TLS")),
    )
    jaeger = JaegerConfig(
        host=get("JAEGER_HOST"),
        port=_to_int("JAEGER_PORT", get("JAEGER_PORT")),
        service_name=get("JAEGER_SERVICE_NAME"),
    )
    return Config(
        application=application,
        postgres=postgres,
        mail=mail,
        jaeger=jaeger,
        context_timeout=_to_seconds("CONTEXT_TIMEOUT", get("CONTEXT_TIMEOUT")),
    )