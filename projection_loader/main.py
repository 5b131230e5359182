import logging
import sys

from projection_loader.domain.exceptions import NotificationError
from projection_loader.infrastructure.service_provider import get_projection_job, get_settings
from projection_loader.metrics.metrics import push_metrics


logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=[logging.StreamHandler()],
    )


def main() -> int:
    """Run one batch and return the process exit code."""
    current = get_settings()
    configure_logging(current.log_level)

    job = get_projection_job()
    try:
        job.run()
    except NotificationError as exc:
        logger.error("Run finished without notification: %s", exc)
        return 1
    finally:
        job.close()
        push_metrics(current)

    return 0


if __name__ == "__main__":
    sys.exit(main())
