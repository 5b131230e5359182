import os
from dataclasses import dataclass, field
from typing import List
from dotenv import load_dotenv

from projection_loader.infrastructure.queries import SqlScripts


load_dotenv(dotenv_path=os.path.join(os.path.dirname(__file__), "..", "..", ".env"))


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class DatabaseTarget:
    """Named database: which secret holds its credentials and which dialect it speaks."""

    name: str
    secret_name: str
    dialect: str = "mssql"


@dataclass
class ConnectionConfig:
    """Options shared by every database connection."""

    region: str = os.getenv("AWS_REGION", "us-east-1")
    login_timeout_seconds: int = int(os.getenv("DB_LOGIN_TIMEOUT_SECONDS", "60"))
    query_timeout_seconds: int = int(os.getenv("DB_QUERY_TIMEOUT_SECONDS", "60"))


@dataclass
class ForecastConfig:
    """Prediction service endpoint and the fixed part of every request."""

    url: str = os.getenv("FORECAST_URL", "https://itzs15wy50.execute-api.us-east-1.amazonaws.com/Prod/hello/")
    data_path: str = os.getenv("FORECAST_DATA_PATH", "s3://data-forecast-model/csv/proyeccion-vs-real-20230907.csv")
    season: str = os.getenv("FORECAST_SEASON", "2023-2024")
    timeout_seconds: int = int(os.getenv("FORECAST_TIMEOUT_SECONDS", "120"))


@dataclass
class EmailConfig:
    """SES sender, recipients and subjects of the summary e-mail."""

    region: str = os.getenv("AWS_REGION", "us-east-1")
    sender: str = os.getenv("EMAIL_SENDER", "email_projection@projection-tiveg.awsapps.com")
    recipients: List[str] = field(
        default_factory=lambda: _split_csv(os.getenv("EMAIL_RECIPIENTS", "edgar.verduzco@tiveg.com"))
    )
    success_subject: str = os.getenv("EMAIL_SUCCESS_SUBJECT", "Projection load processed correctly")
    failure_subject: str = os.getenv("EMAIL_FAILURE_SUBJECT", "Projection load failed")


@dataclass
class Settings:
    """Service configuration loaded from environment variables."""

    # Databases
    source_db: DatabaseTarget = field(default_factory=lambda: DatabaseTarget(
        name="source",
        secret_name=os.getenv("SOURCE_DB_SECRET", "fk_database_credentials"),
        dialect=os.getenv("SOURCE_DB_DIALECT", "mssql"),
    ))
    target_db: DatabaseTarget = field(default_factory=lambda: DatabaseTarget(
        name="target",
        secret_name=os.getenv("TARGET_DB_SECRET", "aws_database_credentials"),
        dialect=os.getenv("TARGET_DB_DIALECT", "mssql"),
    ))
    connection: ConnectionConfig = field(default_factory=ConnectionConfig)
    scripts: SqlScripts = field(default_factory=SqlScripts)

    # Prediction service and e-mail
    forecast: ForecastConfig = field(default_factory=ForecastConfig)
    email: EmailConfig = field(default_factory=EmailConfig)

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Using metrics
    enable_metrics: bool = os.getenv("ENABLE_METRICS", "true").lower() == "true"
    pushgateway_url: str = os.getenv("PUSHGATEWAY_URL", "")
    metrics_job_name: str = os.getenv("METRICS_JOB_NAME", "projection_loader")


settings = Settings()
