import logging

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, push_to_gateway


logger = logging.getLogger(__name__)

registry = CollectorRegistry()

# Core metrics of a batch run
forecast_request_seconds = Histogram(
    "forecast_request_seconds", "Time spent waiting for the prediction service in seconds", registry=registry
)
db_insert_seconds = Histogram(
    "db_insert_seconds", "Time spent inserting one projection with its details in seconds", registry=registry
)
projection_entries_total = Counter(
    "projection_entries_total", "Processed source entries by outcome", ["outcome"], registry=registry
)
projection_last_run_entries = Gauge(
    "projection_last_run_entries", "Number of source entries in the last batch run", registry=registry
)


def update_entry_metrics(
        outcome: str,
        forecast_ms: int = 0,
        db_ms: int = 0):
    """
    Update per-entry metrics.

    Args:
        outcome (str): `success`, `forecast_failed` or `db_failed`
        forecast_ms (int): Time taken by the forecast request in milliseconds, 0 if it did not complete
        db_ms (int): Time taken to insert the projection in milliseconds, 0 if nothing was inserted
    """
    projection_entries_total.labels(outcome=outcome).inc()
    if forecast_ms:
        forecast_request_seconds.observe(forecast_ms / 1000.0)
    if db_ms:
        db_insert_seconds.observe(db_ms / 1000.0)


def push_metrics(settings) -> None:
    """Push the run's metrics to a Prometheus Pushgateway when one is configured."""
    if not settings.enable_metrics or not settings.pushgateway_url:
        return
    try:
        push_to_gateway(settings.pushgateway_url, job=settings.metrics_job_name, registry=registry)
    except Exception as exc:
        logger.error("Error while pushing metrics to %s: %s", settings.pushgateway_url, exc, exc_info=True)
