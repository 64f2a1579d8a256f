"""Prometheus metrics for monitoring"""
from prometheus_client import Counter, Histogram, Gauge, CollectorRegistry

registry = CollectorRegistry()

request_count = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status'],
    registry=registry
)

request_duration = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    registry=registry
)

quote_events = Counter(
    'quote_events_total',
    'Total quote draft events applied',
    ['event'],
    registry=registry
)

quote_submissions = Counter(
    'quote_submissions_total',
    'Total quote submission attempts',
    ['status'],
    registry=registry
)

catalog_loads = Counter(
    'catalog_loads_total',
    'Total catalog loads',
    ['source', 'status'],
    registry=registry
)

cache_hits = Counter(
    'cache_hits_total',
    'Total cache hits',
    ['cache_key'],
    registry=registry
)

cache_misses = Counter(
    'cache_misses_total',
    'Total cache misses',
    ['cache_key'],
    registry=registry
)

redis_connected = Gauge(
    'redis_connected',
    'Redis connection status (1=connected, 0=disconnected)',
    registry=registry
)


def get_metrics_text() -> str:
    """Generate Prometheus metrics in text format"""
    from prometheus_client import generate_latest
    return generate_latest(registry).decode('utf-8')
