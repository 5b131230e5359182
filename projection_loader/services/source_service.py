import logging
from typing import List

from sqlalchemy import text

from projection_loader.domain.dto import SourceEntry
from projection_loader.domain.exceptions import NoDataError
from projection_loader.infrastructure.database import DatabaseHandle
from projection_loader.infrastructure.queries import SqlScripts


logger = logging.getLogger(__name__)


class SourceService:
    """Reads the producer/orchard/fruit combinations that had receptions this year."""

    def __init__(self, scripts: SqlScripts) -> None:
        self.scripts = scripts

    def fetch_entries(self, handle: DatabaseHandle) -> List[SourceEntry]:
        """
        Run the source query and map its `(ProducerOrchard, Fruit)` rows.

        Raises:
            NoDataError: if the query returns no rows
        """
        rows = handle.connection.execute(text(self.scripts.list_producers)).mappings().all()
        if not rows:
            raise NoDataError("No producers with receptions found")

        entries = [
            SourceEntry(producer_orchard_code=str(row["ProducerOrchard"]), fruit_name=str(row["Fruit"]))
            for row in rows
        ]
        logger.info("Fetched %s producer entries from %s", len(entries), handle.name)
        return entries
