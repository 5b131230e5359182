from typing import Callable, List

import pytest
from sqlalchemy import create_engine, text

from projection_loader.infrastructure.config import ForecastConfig
from projection_loader.infrastructure.database import DatabaseHandle

from fakes import SCHEMA


@pytest.fixture
def sqlite_url(tmp_path) -> str:
    url = f"sqlite:///{tmp_path / 'projection.db'}"
    engine = create_engine(url)
    with engine.begin() as connection:
        for statement in SCHEMA:
            connection.execute(text(statement))
    engine.dispose()
    return url


@pytest.fixture
def open_handle(sqlite_url) -> Callable[[str], DatabaseHandle]:
    """Factory of handles to the test database; every handle is closed after the test."""
    opened: List[DatabaseHandle] = []

    def _open(name: str = "target") -> DatabaseHandle:
        engine = create_engine(sqlite_url)
        handle = DatabaseHandle(name, engine, engine.connect())
        opened.append(handle)
        return handle

    yield _open

    for handle in opened:
        if not handle.connection.closed:
            handle.close()


@pytest.fixture
def handle(open_handle) -> DatabaseHandle:
    return open_handle("target")


@pytest.fixture
def forecast_config() -> ForecastConfig:
    return ForecastConfig(
        url="http://forecast.test/Prod/hello/",
        data_path="s3://bucket/csv/projection.csv",
        season="2024-2025",
        timeout_seconds=5,
    )

