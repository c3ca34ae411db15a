"""
Prometheus metrics and the request logging/metrics middleware
"""

import logging
import time

from fastapi import Request
from prometheus_client import Counter, Histogram

logger = logging.getLogger(__name__)

request_count = Counter(
    'patient_api_requests_total',
    'Total API requests',
    ['method', 'route', 'status']
)
request_duration = Histogram(
    'patient_api_request_duration_seconds',
    'API request duration',
    ['method', 'route']
)
patient_operations = Counter(
    'patient_operations_total',
    'Patient operations by outcome',
    ['operation', 'outcome']
)


async def observe_requests(request: Request, call_next):
    """Log each request and record its count and latency"""
    start_time = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - start_time

    route = request.scope.get("route")
    route_path = getattr(route, "path", "unmatched")

    request_count.labels(
        method=request.method,
        route=route_path,
        status=str(response.status_code)
    ).inc()
    request_duration.labels(method=request.method, route=route_path).observe(elapsed)

    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code} "
        f"({elapsed * 1000:.1f}ms)"
    )
    return response
