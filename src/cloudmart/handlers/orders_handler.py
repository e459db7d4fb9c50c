"""
Orders Handler - Lambda function for order management API.

Checkout, order history and cancellation for customers, plus order
administration for admins. Payment happens asynchronously in the order
consumer.
"""

from typing import Any, Dict

from aws_lambda_powertools.event_handler import Response
from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.utilities.typing import LambdaContext

from cloudmart.handlers.utils.dependencies import get_current_user, get_order_service
from cloudmart.handlers.utils.observability import logger, metrics, tracer
from cloudmart.handlers.utils.rest_api_resolver import (
    ORDERS_PATH,
    build_resolver,
    ok,
    paged,
    parse_body,
    required_query_param,
)
from cloudmart.models.input import CreateOrderRequest
from cloudmart.models.output import OrderResponse

app = build_resolver()


@app.post(ORDERS_PATH)
@tracer.capture_method
def create_order() -> Response:
    current_user = get_current_user(app)
    request = parse_body(app, CreateOrderRequest)
    order = get_order_service().create_order(request, current_user)
    return ok(OrderResponse.from_order(order), message='Order created successfully', status_code=201)


@app.get(f'{ORDERS_PATH}/my-orders')
@tracer.capture_method
def my_orders() -> Response:
    orders = get_order_service().get_user_orders(get_current_user(app))
    return ok(paged(app, orders, OrderResponse.from_order))


@app.get(ORDERS_PATH)
@tracer.capture_method
def all_orders() -> Response:
    orders = get_order_service().get_all_orders(get_current_user(app))
    return ok(paged(app, orders, OrderResponse.from_order))


@app.get(f'{ORDERS_PATH}/number/<order_number>')
@tracer.capture_method
def get_order_by_number(order_number: str) -> Response:
    order = get_order_service().get_order_by_number(order_number, get_current_user(app))
    return ok(OrderResponse.from_order(order))


@app.get(f'{ORDERS_PATH}/status/<status>')
@tracer.capture_method
def orders_by_status(status: str) -> Response:
    orders = get_order_service().get_orders_by_status(status, get_current_user(app))
    return ok(paged(app, orders, OrderResponse.from_order))


@app.get(f'{ORDERS_PATH}/<order_id>')
@tracer.capture_method
def get_order(order_id: str) -> Response:
    return ok(OrderResponse.from_order(get_order_service().get_order(order_id, get_current_user(app))))


@app.patch(f'{ORDERS_PATH}/<order_id>/status')
@tracer.capture_method
def update_order_status(order_id: str) -> Response:
    current_user = get_current_user(app)
    order = get_order_service().update_order_status(order_id, required_query_param(app, 'status'), current_user)
    return ok(OrderResponse.from_order(order), message='Order status updated')


@app.post(f'{ORDERS_PATH}/<order_id>/cancel')
@tracer.capture_method
def cancel_order(order_id: str) -> Response:
    order = get_order_service().cancel_order(order_id, get_current_user(app))
    return ok(OrderResponse.from_order(order), message='Order cancelled successfully')


@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST, clear_state=True)
@tracer.capture_lambda_handler
@metrics.log_metrics(capture_cold_start_metric=True)
def lambda_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    """
    Main Lambda handler function.

    Args:
        event: API Gateway proxy event
        context: Lambda context object

    Returns:
        API Gateway proxy response
    """
    return app.resolve(event, context)
