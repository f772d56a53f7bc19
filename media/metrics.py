"""
Prometheus metrics for the download pipeline.

Counters are process-wide; the exporter is only started when
YTSYNC_METRICS_PORT is set.
"""

from prometheus_client import Counter, Histogram, start_http_server

ITEMS_TOTAL = Counter(
    'ytsync_items',
    'Queue items by terminal state',
    ['outcome'],
)
ITEM_DURATION = Histogram(
    'ytsync_item_duration_seconds',
    'Wall time spent on one queue item',
    ['outcome'],
    buckets=(0.1, 0.5, 1, 5, 15, 30, 60, 120, 300, 600),
)
STRATEGY_ATTEMPTS = Counter(
    'ytsync_strategy_attempts',
    'Download attempts by client strategy and result',
    ['strategy', 'outcome'],
)
BATCH_DURATION = Histogram(
    'ytsync_batch_duration_seconds',
    'Wall time spent on one batch',
)


def observe_item(outcome, seconds):
    ITEMS_TOTAL.labels(outcome=outcome).inc()
    ITEM_DURATION.labels(outcome=outcome).observe(seconds)


def observe_attempt(strategy, outcome):
    STRATEGY_ATTEMPTS.labels(strategy=strategy, outcome=outcome).inc()


def observe_batch(seconds):
    BATCH_DURATION.observe(seconds)


def start_metrics_server(port):
    """Expose /metrics on the given port"""
    start_http_server(port)
