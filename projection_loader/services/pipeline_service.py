import logging
from typing import List

from projection_loader.domain.dto import (
    BatchReport,
    EntryFailed,
    EntryOutcome,
    EntrySucceeded,
    ProducerOrchardCode,
    SourceEntry,
)
from projection_loader.domain.exceptions import (
    DuplicateProjectionError,
    ForecastRequestError,
    InsertError,
    MalformedCodeError,
)
from projection_loader.infrastructure.config import ForecastConfig
from projection_loader.infrastructure.database import DatabaseHandle
from projection_loader.infrastructure.forecast_client import ForecastClient
from projection_loader.metrics.metrics import projection_last_run_entries, update_entry_metrics
from projection_loader.services.projection_service import ProjectionService


logger = logging.getLogger(__name__)

NOT_ADDED = "not added"
DB_OPERATION_FAILED = "DB operation failed"


class PipelineService:
    """Requests a forecast for every source entry and stores the new ones."""

    def __init__(
            self,
            forecast_client: ForecastClient,
            projections: ProjectionService,
            config: ForecastConfig) -> None:
        self.forecast_client = forecast_client
        self.projections = projections
        self.config = config

    def process_entry(self, entry: SourceEntry, handle: DatabaseHandle) -> EntryOutcome:
        """Run both phases for one entry and decide its outcome. Never raises per-entry errors."""
        provider_code = entry.producer_orchard_code

        try:
            code = ProducerOrchardCode.parse(provider_code)
            forecast, forecast_ms = self.forecast_client.request_forecast(
                self.config.data_path, self.config.season, provider_code, entry.fruit_name
            )
        except (MalformedCodeError, ForecastRequestError) as exc:
            logger.warning("Entry %s %s not added: %s", provider_code, entry.fruit_name, exc)
            update_entry_metrics("forecast_failed")
            return EntryFailed(provider_code=provider_code, message=NOT_ADDED, error_details=str(exc))
        except Exception as exc:
            logger.exception("Entry %s %s not added, unexpected error: %s", provider_code, entry.fruit_name, exc)
            update_entry_metrics("forecast_failed")
            return EntryFailed(provider_code=provider_code, message=NOT_ADDED, error_details=str(exc))

        try:
            _, db_ms = self.projections.save(handle, forecast, code)
        except (DuplicateProjectionError, InsertError) as exc:
            logger.warning("Entry %s %s DB operation failed: %s", provider_code, entry.fruit_name, exc)
            update_entry_metrics("db_failed", forecast_ms=forecast_ms)
            return EntryFailed(provider_code=provider_code, message=DB_OPERATION_FAILED, error_details=str(exc))
        except Exception as exc:
            logger.exception("Entry %s %s DB operation failed, unexpected error: %s", provider_code, entry.fruit_name, exc)
            update_entry_metrics("db_failed", forecast_ms=forecast_ms)
            return EntryFailed(provider_code=provider_code, message=DB_OPERATION_FAILED, error_details=str(exc))

        update_entry_metrics("success", forecast_ms=forecast_ms, db_ms=db_ms)
        return EntrySucceeded(input=forecast.input)

    def process(self, entries: List[SourceEntry], handle: DatabaseHandle) -> BatchReport:
        """
        Process every entry sequentially, in source order.

        Args:
            entries (List[SourceEntry]): Combinations returned by the source query
            handle (DatabaseHandle): Open connection to the projection database

        Returns:
            BatchReport: one success or failure line per entry
        """
        outcomes: List[EntryOutcome] = []
        total = len(entries)
        projection_last_run_entries.set(total)

        for counter, entry in enumerate(entries, start=1):
            outcomes.append(self.process_entry(entry, handle))
            logger.info("Process: %s of %s", counter, total)

        report = BatchReport.from_outcomes(outcomes)
        logger.info(
            "Batch finished: %s succeeded, %s failed",
            len(report.success_responses),
            len(report.failed_responses),
        )
        return report

    def close(self) -> None:
        """Release the prediction service client."""
        self.forecast_client.close()
