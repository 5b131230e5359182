from projection_loader.infrastructure.config import Settings, settings
from projection_loader.infrastructure.database import ConnectionProvider
from projection_loader.infrastructure.forecast_client import ForecastClient
from projection_loader.infrastructure.secrets import AwsSecretsManagerProvider
from projection_loader.services.job_service import JobServicesDTO, ProjectionJob
from projection_loader.services.notification_service import NotificationService
from projection_loader.services.pipeline_service import PipelineService
from projection_loader.services.projection_service import ProjectionService
from projection_loader.services.report_service import ReportService
from projection_loader.services.source_service import SourceService


# Default implementations of injection
def get_settings() -> Settings:
    """Provide service settings as a dependency."""
    return settings

def get_connection_provider() -> ConnectionProvider:
    """Provide database connections resolved from AWS Secrets Manager."""
    config = get_settings().connection
    return ConnectionProvider(AwsSecretsManagerProvider(config.region), config)

def get_forecast_client() -> ForecastClient:
    """Provide the prediction service client as a dependency."""
    return ForecastClient(get_settings().forecast)

def get_report_service() -> ReportService:
    return ReportService()

def get_pipeline_service() -> PipelineService:
    """Provide the per-entry forecast and insert pipeline."""
    current = get_settings()
    return PipelineService(
        forecast_client=get_forecast_client(),
        projections=ProjectionService(current.scripts),
        config=current.forecast,
    )

def get_notification_service() -> NotificationService:
    """Provide the SES notifier as a dependency."""
    return NotificationService(get_settings().email, get_report_service())

def get_projection_job() -> ProjectionJob:
    """
    Provide a ready batch run with every default service.
    """
    current = get_settings()
    contract = JobServicesDTO(
        connections=get_connection_provider(),
        source=SourceService(current.scripts),
        pipeline=get_pipeline_service(),
        reporter=get_report_service(),
        notifier=get_notification_service(),
    )
    return ProjectionJob(contract, source_db=current.source_db, target_db=current.target_db)
