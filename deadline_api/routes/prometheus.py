from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import APIRouter, Request, Response
import time

router = APIRouter()

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP Requests",
    ["method", "endpoint", "http_status"]
)

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["endpoint"]
)

EXCEPTION_COUNT = Counter(
    "http_exceptions_total",
    "Total exceptions",
    ["endpoint"]
)

OFFSET_CHECKS = Counter(
    "reminder_offset_checks_total",
    "Candidate reminder offsets checked against a deadline",
    ["result"]
)

SCHEDULE_VALIDATIONS = Counter(
    "schedule_validations_total",
    "Task schedules validated at submit time",
    ["result"]
)

OCCURRENCES_SPAWNED = Counter(
    "recurring_occurrences_spawned_total",
    "Next occurrences created for completed recurring tasks"
)

@router.get("/")
def metrics():
    data = generate_latest()
    return Response(data, media_type=CONTENT_TYPE_LATEST)

def _endpoint_label(request: Request) -> str:
    # Route template keeps label cardinality bounded
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)

async def metrics_middleware(request: Request, call_next):
    start_time = time.perf_counter()

    try:
        response = await call_next(request)
    except Exception:
        EXCEPTION_COUNT.labels(endpoint=_endpoint_label(request)).inc()
        raise

    endpoint = _endpoint_label(request)
    REQUEST_LATENCY.labels(endpoint=endpoint).observe(time.perf_counter() - start_time)
    REQUEST_COUNT.labels(
        method=request.method,
        endpoint=endpoint,
        http_status=response.status_code
    ).inc()

    return response
