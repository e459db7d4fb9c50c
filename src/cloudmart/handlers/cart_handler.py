"""
Cart Handler - Lambda function for the current user's shopping cart.
"""

from typing import Any, Dict

from aws_lambda_powertools.event_handler import Response
from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.utilities.typing import LambdaContext

from cloudmart.handlers.utils.dependencies import get_cart_service, get_current_user
from cloudmart.handlers.utils.observability import logger, metrics, tracer
from cloudmart.handlers.utils.rest_api_resolver import CART_PATH, build_resolver, int_query_param, ok, parse_body
from cloudmart.models.input import AddToCartRequest
from cloudmart.models.output import CartResponse

app = build_resolver()


@app.get(CART_PATH)
@tracer.capture_method
def get_cart() -> Response:
    cart = get_cart_service().get_cart(get_current_user(app).id)
    return ok(CartResponse.from_cart(cart))


@app.post(f'{CART_PATH}/items')
@tracer.capture_method
def add_to_cart() -> Response:
    user = get_current_user(app)
    request = parse_body(app, AddToCartRequest)
    cart = get_cart_service().add_to_cart(user.id, request)
    return ok(CartResponse.from_cart(cart), message='Product added to cart')


@app.put(f'{CART_PATH}/items/<product_id>')
@tracer.capture_method
def update_cart_item(product_id: str) -> Response:
    user = get_current_user(app)
    cart = get_cart_service().update_cart_item_quantity(user.id, product_id, int_query_param(app, 'quantity'))
    return ok(CartResponse.from_cart(cart), message='Cart updated')


@app.delete(f'{CART_PATH}/items/<product_id>')
@tracer.capture_method
def remove_from_cart(product_id: str) -> Response:
    cart = get_cart_service().remove_from_cart(get_current_user(app).id, product_id)
    return ok(CartResponse.from_cart(cart), message='Product removed from cart')


@app.delete(CART_PATH)
@tracer.capture_method
def clear_cart() -> Response:
    get_cart_service().clear_cart(get_current_user(app).id)
    return ok(message='Cart cleared')


@app.post(f'{CART_PATH}/sync')
@tracer.capture_method
def sync_cart() -> Response:
    cart = get_cart_service().sync_cart_with_inventory(get_current_user(app).id)
    return ok(CartResponse.from_cart(cart), message='Cart synchronized with inventory')


@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST, clear_state=True)
@tracer.capture_lambda_handler
@metrics.log_metrics(capture_cold_start_metric=True)
def lambda_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    return app.resolve(event, context)
