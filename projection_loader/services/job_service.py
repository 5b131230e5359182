import logging
from enum import Enum
from typing import List, Optional

from projection_loader.domain.dto import BatchReport
from projection_loader.infrastructure.config import DatabaseTarget
from projection_loader.infrastructure.database import ConnectionProvider, DatabaseHandle
from projection_loader.services.notification_service import NotificationService
from projection_loader.services.pipeline_service import PipelineService
from projection_loader.services.report_service import ReportService
from projection_loader.services.source_service import SourceService


logger = logging.getLogger(__name__)


class RunState(str, Enum):
    INIT = "INIT"
    SOURCE_FETCH = "SOURCE_FETCH"
    VALIDATE_LOOP = "VALIDATE_LOOP"
    REPORT = "REPORT"
    CLEANUP = "CLEANUP"
    DONE = "DONE"


class JobServicesDTO:
    """The contract to serve necessary services to a batch run.
    """

    def __init__(
            self,
            connections: ConnectionProvider,
            source: SourceService,
            pipeline: PipelineService,
            reporter: ReportService,
            notifier: NotificationService) -> None:
        self.connections = connections
        self.source = source
        self.pipeline = pipeline
        self.reporter = reporter
        self.notifier = notifier


class ProjectionJob:
    """One batch run: source fetch, per-entry forecast and insert, summary e-mail.

    Every connection opened by the run is closed exactly once, whichever way
    the run ends. A failure e-mail that cannot be sent propagates as
    NotificationError after cleanup.
    """

    def __init__(self, services: JobServicesDTO, source_db: DatabaseTarget, target_db: DatabaseTarget) -> None:
        self.services = services
        self.source_db = source_db
        self.target_db = target_db
        self.state = RunState.INIT

    def _enter(self, state: RunState) -> None:
        logger.info("Run state: %s -> %s", self.state.value, state.value)
        self.state = state

    def _cleanup(self, handles: List[DatabaseHandle]) -> None:
        for handle in handles:
            try:
                handle.close()
            except Exception as exc:
                logger.error("Error while closing %s connection: %s", handle.name, exc, exc_info=True)

    def run(self) -> Optional[BatchReport]:
        """
        Execute the batch run.

        Returns:
            BatchReport of the run if the report e-mail was sent, None if the
            run failed and the failure e-mail was sent instead

        Raises:
            NotificationError: if the failure e-mail cannot be sent
        """
        handles: List[DatabaseHandle] = []
        report: Optional[BatchReport] = None
        services = self.services

        try:
            target = services.connections.connect(self.target_db)
            handles.append(target)
            source = services.connections.connect(self.source_db)
            handles.append(source)

            self._enter(RunState.SOURCE_FETCH)
            entries = services.source.fetch_entries(source)

            self._enter(RunState.VALIDATE_LOOP)
            report = services.pipeline.process(entries, target)

            self._enter(RunState.REPORT)
            services.notifier.send(services.reporter.build_report_content(report), is_success=True)
        except Exception as exc:
            logger.exception("Projection load failed in state %s: %s", self.state.value, exc)
            report = None
            self._enter(RunState.REPORT)
            services.notifier.send(services.reporter.build_failure_content(exc), is_success=False)
        finally:
            self._enter(RunState.CLEANUP)
            self._cleanup(handles)
            self._enter(RunState.DONE)

        return report

    def close(self) -> None:
        """Release resources that outlive a single run."""
        self.services.pipeline.close()
