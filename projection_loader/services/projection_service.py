import logging
import time
from typing import Any, Dict, Tuple

from sqlalchemy import text
from sqlalchemy.engine import Connection

from projection_loader.domain.dto import ForecastResult, ProducerOrchardCode
from projection_loader.domain.exceptions import DuplicateProjectionError, InsertError
from projection_loader.infrastructure.database import DatabaseHandle
from projection_loader.infrastructure.queries import SqlScripts


logger = logging.getLogger(__name__)


class ProjectionService:
    """Stores forecasts as a projection row plus one detail row per future date."""

    def __init__(self, scripts: SqlScripts) -> None:
        self.scripts = scripts

    def _execute(self, connection: Connection, sql: str, params: Dict[str, Any]):
        """Execute a statement and return its first row, if it produced any."""
        result = connection.execute(text(sql), params)
        if result.returns_rows:
            return result.first()
        return None

    def exists(self, handle: DatabaseHandle, forecast: ForecastResult, code: ProducerOrchardCode) -> bool:
        """
        Checks if a projection for the same date, producer, orchard and fruit is already stored.

        Fruit names are compared upper-cased.
        """
        row = self._execute(
            handle.connection,
            self.scripts.exist_projection,
            {
                "date_projection": forecast.output.last_date,
                "pr_producer": code.producer_code,
                "id_orchard": code.orchard_id,
                "fruit_name": forecast.input.fruit_name.upper(),
            },
        )
        return row is not None

    def _insert(self, connection: Connection, forecast: ForecastResult, code: ProducerOrchardCode) -> int:
        output = forecast.output
        result = connection.execute(
            text(self.scripts.insert_projection),
            {
                "date": output.last_date,
                "prod": code.producer_code,
                "fruit": forecast.input.fruit_name.upper(),
                "id_orchard": code.orchard_id,
            },
        )
        # SQL Server hands the id back through OUTPUT, other dialects through the cursor
        if result.returns_rows:
            id_projection = int(result.first()[0])
        else:
            id_projection = int(result.lastrowid)

        for future_date, human, model in zip(
                output.future_dates, output.human_predictions, output.model_predictions):
            self._execute(
                connection,
                self.scripts.insert_projection_detail,
                {
                    "id_projection": id_projection,
                    "future_date": future_date,
                    "human": human,
                    "ia_model": model,
                },
            )
        return id_projection

    def save(self, handle: DatabaseHandle, forecast: ForecastResult, code: ProducerOrchardCode) -> Tuple[int, int]:
        """
        Inserts the projection and its details if it is not stored yet.

        The projection and its details are committed together; on any database
        error the entry's statements are rolled back.

        Args:
            handle (DatabaseHandle): Open connection to the projection database
            forecast (ForecastResult): Parsed response of the prediction service
            code (ProducerOrchardCode): Producer and orchard of the entry

        Returns:
            Tuple[int, int]:
                - Number of inserted detail rows
                - Time taken for the operation in milliseconds

        Raises:
            DuplicateProjectionError: if the projection already exists
            InsertError: if any statement fails
        """
        start = time.perf_counter()
        connection = handle.connection

        try:
            if self.exists(handle, forecast, code):
                raise DuplicateProjectionError(
                    f"Projection already exists for {code.producer_code}-{code.orchard_id} "
                    f"{forecast.input.fruit_name.upper()} on {forecast.output.last_date}"
                )
            id_projection = self._insert(connection, forecast, code)
            connection.commit()
        except DuplicateProjectionError:
            connection.rollback()
            raise
        except Exception as exc:
            connection.rollback()
            logger.error("Insert failed for %s-%s: %s", code.producer_code, code.orchard_id, exc)
            raise InsertError(f"Cannot insert projection: {exc}") from exc

        details = len(forecast.output.future_dates)
        logger.debug("Projection %s stored with %s details", id_projection, details)
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        return details, elapsed_ms
