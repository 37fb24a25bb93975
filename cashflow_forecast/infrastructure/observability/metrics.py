"""Prometheus metrics for monitoring forecast outcomes and latency"""

from prometheus_client import Counter, Histogram

# Forecast metrics
forecast_counter = Counter(
    "cashflow_forecast_total",
    "Total forecast computations",
    ["outcome"],  # success | validation | data_access
)

forecast_latency_histogram = Histogram(
    "cashflow_forecast_latency_seconds",
    "Forecast computation time",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

forecast_weeks_histogram = Histogram(
    "cashflow_forecast_weeks",
    "Weeks returned per successful forecast",
    buckets=[1, 4, 13, 26, 52, 104, 260],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_forecast(success: bool, week_count: int, error_type: str | None = None) -> None:
    """Record forecast outcome; failures are labelled by error type"""
    outcome = "success" if success else (error_type or "failure")
    forecast_counter.labels(outcome=outcome).inc()

    if success:
        forecast_weeks_histogram.observe(week_count)
