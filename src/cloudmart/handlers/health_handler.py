"""
Health Handler - liveness endpoints for load balancers and monitors.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from aws_lambda_powertools.event_handler import Response, content_types
from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.typing import LambdaContext

from cloudmart.handlers.utils.dependencies import get_settings
from cloudmart.handlers.utils.observability import logger, metrics, tracer
from cloudmart.handlers.utils.rest_api_resolver import HEALTH_PATH, PING_PATH, build_resolver
from cloudmart.models.output import HealthResponse

app = build_resolver()


@app.get(HEALTH_PATH)
@tracer.capture_method
def health() -> Response:
    settings = get_settings()
    metrics.add_metric(name="HealthCheck", unit=MetricUnit.Count, value=1)
    body = HealthResponse(
        timestamp=datetime.now(timezone.utc).isoformat(),
        environment=settings.ENVIRONMENT,
        version=settings.APP_VERSION,
    )
    return Response(status_code=200, content_type=content_types.APPLICATION_JSON, body=body.model_dump_json())


@app.get(PING_PATH)
def ping() -> Response:
    return Response(status_code=200, content_type=content_types.TEXT_PLAIN, body='pong')


@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST, clear_state=True)
@tracer.capture_lambda_handler
@metrics.log_metrics(capture_cold_start_metric=True)
def lambda_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    return app.resolve(event, context)
