import logging
from typing import Any, Dict, Protocol

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Connection, Engine

from projection_loader.domain.exceptions import DatabaseConnectionError
from projection_loader.infrastructure.config import ConnectionConfig, DatabaseTarget


logger = logging.getLogger(__name__)


class SecretsProvider(Protocol):
    def get_secret(self, name: str) -> Dict[str, Any]:
        ...


class DatabaseHandle:
    """An open connection together with the engine that owns it."""

    def __init__(self, name: str, engine: Engine, connection: Connection) -> None:
        self.name = name
        self.engine = engine
        self.connection = connection

    def close(self) -> None:
        """Close the connection and release the engine's pool."""
        try:
            self.connection.close()
        finally:
            self.engine.dispose()
        logger.info("Database connection closed: %s", self.name)


def _first(credentials: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = credentials.get(key)
        if value:
            return value
    raise KeyError(f"None of {keys} found in credentials")


def build_mssql_url(credentials: Dict[str, Any]) -> URL:
    """Build a SQL Server URL from a `{user|username, password, server|url, name_database|database}` blob."""
    return URL.create(
        "mssql+pymssql",
        username=_first(credentials, "user", "username"),
        password=credentials.get("password"),
        host=_first(credentials, "server", "url"),
        database=_first(credentials, "name_database", "database"),
    )


def build_oracle_url(credentials: Dict[str, Any]) -> URL:
    """Build an Oracle URL from a `{userName, password, host, port, serviceName}` blob."""
    return URL.create(
        "oracle+oracledb",
        username=_first(credentials, "userName"),
        password=credentials.get("password"),
        host=_first(credentials, "host"),
        port=int(_first(credentials, "port")),
        query={"service_name": _first(credentials, "serviceName")},
    )


class ConnectionProvider:
    """Opens database handles from credentials kept in a secret store."""

    def __init__(self, secrets: SecretsProvider, config: ConnectionConfig) -> None:
        self.secrets = secrets
        self.config = config

    def build_engine(self, target: DatabaseTarget, credentials: Dict[str, Any]) -> Engine:
        if target.dialect == "mssql":
            return create_engine(
                build_mssql_url(credentials),
                connect_args={
                    "login_timeout": self.config.login_timeout_seconds,
                    "timeout": self.config.query_timeout_seconds,
                },
            )
        if target.dialect == "oracle":
            return create_engine(build_oracle_url(credentials))
        raise ValueError(f"Unsupported database dialect: {target.dialect}")

    def connect(self, target: DatabaseTarget) -> DatabaseHandle:
        """
        Resolve the target's credentials and open a connection.

        Args:
            target (DatabaseTarget): Secret name and dialect of the database

        Raises:
            DatabaseConnectionError: if the secret cannot be read, lacks a
                required key, names an unsupported dialect or the server refuses
        """
        try:
            credentials = self.secrets.get_secret(target.secret_name)
            engine = self.build_engine(target, credentials)
            connection = engine.connect()
        except Exception as exc:
            logger.error("Connection or query problems on %s: %s", target.name, exc)
            raise DatabaseConnectionError(f"Cannot connect to {target.name} database: {exc}") from exc

        logger.info("Database connection opened: %s (%s)", target.name, target.dialect)
        return DatabaseHandle(target.name, engine, connection)
