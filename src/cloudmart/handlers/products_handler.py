"""
Products Handler - Lambda function for the product catalog API.

Browsing is public; creating, updating and deleting products requires a
seller or admin token.
"""

from typing import Any, Dict

from aws_lambda_powertools.event_handler import Response
from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.utilities.typing import LambdaContext

from cloudmart.handlers.utils.dependencies import get_current_user, get_product_service
from cloudmart.handlers.utils.observability import logger, metrics, tracer
from cloudmart.handlers.utils.rest_api_resolver import (
    CATEGORIES_PATH,
    PRODUCTS_PATH,
    build_resolver,
    decimal_query_param,
    ok,
    paged,
    parse_body,
    query_param,
    required_query_param,
)
from cloudmart.models.input import CreateProductRequest, UpdateProductRequest
from cloudmart.models.output import ProductResponse

app = build_resolver()


@app.post(PRODUCTS_PATH)
@tracer.capture_method
def create_product() -> Response:
    current_user = get_current_user(app)
    request = parse_body(app, CreateProductRequest)
    product = get_product_service().create_product(request, current_user)
    return ok(ProductResponse.from_product(product), message='Product created successfully', status_code=201)


@app.get(PRODUCTS_PATH)
@tracer.capture_method
def list_products() -> Response:
    products = get_product_service().list_products(
        sort_by=query_param(app, 'sort_by', 'created_at'),
        direction=query_param(app, 'direction', 'DESC'),
    )
    return ok(paged(app, products, ProductResponse.from_product))


@app.get(f'{PRODUCTS_PATH}/search')
@tracer.capture_method
def search_products() -> Response:
    products = get_product_service().search_products(required_query_param(app, 'keyword'))
    return ok(paged(app, products, ProductResponse.from_product))


@app.get(f'{PRODUCTS_PATH}/price-range')
@tracer.capture_method
def products_by_price_range() -> Response:
    products = get_product_service().get_products_by_price_range(
        decimal_query_param(app, 'min_price'),
        decimal_query_param(app, 'max_price'),
    )
    return ok(paged(app, products, ProductResponse.from_product))


@app.get(f'{PRODUCTS_PATH}/my-products')
@tracer.capture_method
def my_products() -> Response:
    products = get_product_service().get_seller_products(get_current_user(app))
    return ok(paged(app, products, ProductResponse.from_product))


@app.get(f'{PRODUCTS_PATH}/category/<category>')
@tracer.capture_method
def products_by_category(category: str) -> Response:
    products = get_product_service().get_products_by_category(category)
    return ok(paged(app, products, ProductResponse.from_product))


@app.get(f'{PRODUCTS_PATH}/<product_id>')
@tracer.capture_method
def get_product(product_id: str) -> Response:
    return ok(ProductResponse.from_product(get_product_service().get_product(product_id)))


@app.put(f'{PRODUCTS_PATH}/<product_id>')
@tracer.capture_method
def update_product(product_id: str) -> Response:
    current_user = get_current_user(app)
    request = parse_body(app, UpdateProductRequest)
    product = get_product_service().update_product(product_id, request, current_user)
    return ok(ProductResponse.from_product(product), message='Product updated successfully')


@app.delete(f'{PRODUCTS_PATH}/<product_id>')
@tracer.capture_method
def delete_product(product_id: str) -> Response:
    get_product_service().delete_product(product_id, get_current_user(app))
    return ok(message='Product deleted successfully')


@app.get(CATEGORIES_PATH)
@tracer.capture_method
def list_categories() -> Response:
    return ok(get_product_service().get_categories())


@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST, clear_state=True)
@tracer.capture_lambda_handler
@metrics.log_metrics(capture_cold_start_metric=True)
def lambda_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    return app.resolve(event, context)
