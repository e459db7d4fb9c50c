"""
Auth Handler - Lambda function for registration and login.
"""

from typing import Any, Dict

from aws_lambda_powertools.event_handler import Response
from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.utilities.typing import LambdaContext

from cloudmart.handlers.utils.dependencies import get_auth_service
from cloudmart.handlers.utils.observability import logger, metrics, tracer
from cloudmart.handlers.utils.rest_api_resolver import AUTH_PATH, build_resolver, ok, parse_body
from cloudmart.models.input import LoginRequest, RegisterRequest

app = build_resolver()


@app.post(f'{AUTH_PATH}/register')
@tracer.capture_method
def register() -> Response:
    request = parse_body(app, RegisterRequest)
    return ok(get_auth_service().register(request), message='User registered successfully', status_code=201)


@app.post(f'{AUTH_PATH}/login')
@tracer.capture_method
def login() -> Response:
    request = parse_body(app, LoginRequest)
    return ok(get_auth_service().login(request), message='Login successful')


@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST, clear_state=True)
@tracer.capture_lambda_handler
@metrics.log_metrics(capture_cold_start_metric=True)
def lambda_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    return app.resolve(event, context)
