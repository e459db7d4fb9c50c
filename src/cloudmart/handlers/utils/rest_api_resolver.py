"""
REST API resolver utilities for the CloudMart handlers.

Every API Lambda builds its resolver here so CORS, security headers, error
mapping, response envelopes and request parsing behave the same across the
whole API.
"""

import json
from decimal import Decimal
from typing import Any, Callable, Optional, Sequence, Type, TypeVar

from aws_lambda_powertools.event_handler import APIGatewayRestResolver, CORSConfig, Response, content_types
from aws_lambda_powertools.event_handler.middlewares import NextMiddleware
from aws_lambda_powertools.metrics import MetricUnit
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from cloudmart.handlers.utils.errors import (
    BaseServiceError,
    ValidationError,
    format_error_response,
    get_http_status_code,
    log_error_metrics,
)
from cloudmart.handlers.utils.observability import logger, metrics
from cloudmart.models.output import ApiResponse, PageResponse

T = TypeVar('T', bound=BaseModel)

# API path constants
API_PREFIX = '/api'
AUTH_PATH = f'{API_PREFIX}/auth'
USERS_PATH = f'{API_PREFIX}/users'
PRODUCTS_PATH = f'{API_PREFIX}/products'
CATEGORIES_PATH = f'{API_PREFIX}/categories'
CART_PATH = f'{API_PREFIX}/cart'
ORDERS_PATH = f'{API_PREFIX}/orders'
HEALTH_PATH = f'{API_PREFIX}/health'
PING_PATH = f'{API_PREFIX}/ping'

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

SECURITY_HEADERS = {
    'X-Content-Type-Options': 'nosniff',
    'X-Frame-Options': 'DENY',
    'Strict-Transport-Security': 'max-age=31536000; includeSubDomains',
    'Cache-Control': 'no-store',
}

cors_config = CORSConfig(
    allow_origin='*',
    max_age=3600,
    allow_headers=['Authorization', 'Content-Type'],
    allow_credentials=False,
)


def security_headers_middleware(app: APIGatewayRestResolver, next_middleware: NextMiddleware) -> Response:
    response = next_middleware(app)
    response.headers.update(SECURITY_HEADERS)
    return response


def error_response(status_code: int, message: str, path: Optional[str], details: Optional[list] = None) -> Response:
    return Response(
        status_code=status_code,
        content_type=content_types.APPLICATION_JSON,
        body=json.dumps(format_error_response(status_code, message, path, details)),
    )


def build_resolver() -> APIGatewayRestResolver:
    """
    Create an API Gateway REST resolver with the shared CloudMart behaviour.

    Returns:
        Resolver with CORS, security headers and exception handlers registered
    """
    app = APIGatewayRestResolver(cors=cors_config)
    app.use(middlewares=[security_headers_middleware])

    @app.exception_handler(BaseServiceError)
    def handle_service_error(ex: BaseServiceError) -> Response:
        log_error_metrics(ex)
        details = ex.details if isinstance(ex, ValidationError) else None
        response = error_response(get_http_status_code(ex), ex.user_message, app.current_event.path, details)
        if ex.retry_after:
            response.headers['Retry-After'] = str(ex.retry_after)
        return response

    @app.exception_handler(PydanticValidationError)
    def handle_validation_error(ex: PydanticValidationError) -> Response:
        metrics.add_metric(name="ValidationError", unit=MetricUnit.Count, value=1)
        details = [
            f"{'.'.join(str(part) for part in error['loc']) or 'body'}: {error['msg']}"
            for error in ex.errors()
        ]
        logger.warning("Request validation failed", extra={"validation_errors": details})
        return error_response(400, 'Validation failed', app.current_event.path, details)

    @app.exception_handler(Exception)
    def handle_unexpected_error(ex: Exception) -> Response:
        logger.exception("Unexpected error in handler")
        metrics.add_metric(name="UnexpectedError", unit=MetricUnit.Count, value=1)
        return error_response(500, 'An unexpected error occurred', app.current_event.path)

    return app


def ok(data: Any = None, message: Optional[str] = None, status_code: int = 200) -> Response:
    """Wrap data in the success envelope."""
    envelope = ApiResponse(success=True, message=message, data=data)
    return Response(
        status_code=status_code,
        content_type=content_types.APPLICATION_JSON,
        body=envelope.model_dump_json(),
    )


def parse_body(app: APIGatewayRestResolver, model: Type[T]) -> T:
    """
    Validate the JSON request body against a model.

    JSON numbers with a fraction are parsed as Decimal so prices keep their
    exact value.

    Raises:
        ValidationError: If the body is not valid JSON
        pydantic.ValidationError: If the body does not match the model
    """
    raw = app.current_event.decoded_body or '{}'
    try:
        data = json.loads(raw, parse_float=Decimal)
    except json.JSONDecodeError as e:
        raise ValidationError('Malformed JSON request body', details=[str(e)]) from e
    return model.model_validate(data)


def query_param(app: APIGatewayRestResolver, name: str, default: Optional[str] = None) -> Optional[str]:
    return (app.current_event.query_string_parameters or {}).get(name, default)


def required_query_param(app: APIGatewayRestResolver, name: str) -> str:
    value = query_param(app, name)
    if value is None or value == '':
        raise ValidationError(f"Missing required query parameter '{name}'")
    return value


def _parse(name: str, value: str, parser: Callable[[str], Any]) -> Any:
    try:
        return parser(value)
    except (ValueError, ArithmeticError):
        raise ValidationError(f"Invalid value for query parameter '{name}': {value}")


def decimal_query_param(app: APIGatewayRestResolver, name: str) -> Decimal:
    value = _parse(name, required_query_param(app, name), Decimal)
    if not value.is_finite():
        raise ValidationError(f"Invalid value for query parameter '{name}': {value}")
    return value


def int_query_param(app: APIGatewayRestResolver, name: str) -> int:
    return _parse(name, required_query_param(app, name), int)


def page_params(app: APIGatewayRestResolver) -> tuple[int, int]:
    """Read ``page`` (zero based) and ``size`` from the query string."""
    page = _parse('page', query_param(app, 'page', '0'), int)
    size = _parse('size', query_param(app, 'size', str(DEFAULT_PAGE_SIZE)), int)
    if page < 0:
        raise ValidationError('Page index must not be negative')
    if size < 1 or size > MAX_PAGE_SIZE:
        raise ValidationError(f'Page size must be between 1 and {MAX_PAGE_SIZE}')
    return page, size


def paged(app: APIGatewayRestResolver, items: Sequence[Any], mapper: Callable[[Any], BaseModel]) -> PageResponse:
    """Slice sorted domain objects into the requested page and map them to responses."""
    page, size = page_params(app)
    result = PageResponse.from_items(items, page, size)
    result.content = [mapper(item) for item in result.content]
    return result
