"""
Service wiring for the CloudMart Lambdas.

Services are built lazily on first use and cached for the lifetime of the
container, so AWS clients are created once per cold start.
"""

from functools import lru_cache

from aws_lambda_powertools.event_handler import APIGatewayRestResolver

from cloudmart.dal.cart_repository import CartRepository
from cloudmart.dal.dynamodb_handler import DynamoDBHandler
from cloudmart.dal.order_repository import OrderRepository
from cloudmart.dal.product_repository import ProductRepository
from cloudmart.dal.user_repository import UserRepository
from cloudmart.handlers.models.env_vars import CloudMartEnvVars, get_handler_env_vars
from cloudmart.handlers.utils.parameter_store import ParameterStoreService
from cloudmart.logic.auth_service import AuthService
from cloudmart.logic.cart_service import CartService
from cloudmart.logic.notification_service import NotificationPublisher
from cloudmart.logic.order_processor import OrderProcessor, PaymentSimulator
from cloudmart.logic.order_service import OrderService
from cloudmart.logic.product_service import ProductService
from cloudmart.logic.queue_service import OrderQueuePublisher
from cloudmart.logic.storage_service import StorageService
from cloudmart.logic.user_service import UserService
from cloudmart.models.user import User
from cloudmart.security.auth import TokenService
from cloudmart.security.secrets_manager import SecretsManagerService


@lru_cache(maxsize=1)
def get_settings() -> CloudMartEnvVars:
    return get_handler_env_vars()


@lru_cache(maxsize=1)
def get_secrets() -> SecretsManagerService:
    settings = get_settings()
    return SecretsManagerService(enabled=settings.SECRETS_ENABLED, cache_ttl_seconds=settings.CONFIG_CACHE_TTL_SECONDS)


@lru_cache(maxsize=1)
def get_parameter_store() -> ParameterStoreService:
    settings = get_settings()
    return ParameterStoreService(enabled=settings.PARAMETER_STORE_ENABLED, cache_ttl_seconds=settings.CONFIG_CACHE_TTL_SECONDS)


@lru_cache(maxsize=1)
def get_token_service() -> TokenService:
    """Build the token service, preferring the signing key from Secrets Manager."""
    settings = get_settings()
    secret_key = settings.JWT_SECRET
    if settings.SECRETS_ENABLED and settings.JWT_SECRET_NAME:
        secret_key = get_secrets().get_secret(settings.JWT_SECRET_NAME) or secret_key
    return TokenService(secret_key=secret_key, expiration_seconds=settings.JWT_EXPIRATION_SECONDS)


@lru_cache(maxsize=1)
def get_user_repository() -> UserRepository:
    return UserRepository(DynamoDBHandler(get_settings().USERS_TABLE_NAME))


@lru_cache(maxsize=1)
def get_product_repository() -> ProductRepository:
    return ProductRepository(DynamoDBHandler(get_settings().PRODUCTS_TABLE_NAME))


@lru_cache(maxsize=1)
def get_cart_repository() -> CartRepository:
    return CartRepository(DynamoDBHandler(get_settings().CARTS_TABLE_NAME))


@lru_cache(maxsize=1)
def get_order_repository() -> OrderRepository:
    return OrderRepository(DynamoDBHandler(get_settings().ORDERS_TABLE_NAME))


@lru_cache(maxsize=1)
def get_notification_publisher() -> NotificationPublisher:
    return NotificationPublisher(topic_arn=get_settings().ORDER_TOPIC_ARN)


@lru_cache(maxsize=1)
def get_auth_service() -> AuthService:
    return AuthService(users=get_user_repository(), tokens=get_token_service())


@lru_cache(maxsize=1)
def get_user_service() -> UserService:
    return UserService(users=get_user_repository())


@lru_cache(maxsize=1)
def get_product_service() -> ProductService:
    settings = get_settings()
    storage = StorageService(
        bucket_name=settings.PRODUCT_IMAGES_BUCKET,
        prefix=settings.PRODUCT_IMAGES_PREFIX,
        allowed_extensions=settings.allowed_extensions,
        max_file_size=settings.UPLOAD_MAX_FILE_SIZE,
    )
    return ProductService(products=get_product_repository(), storage=storage)


@lru_cache(maxsize=1)
def get_cart_service() -> CartService:
    return CartService(carts=get_cart_repository(), products=get_product_repository())


@lru_cache(maxsize=1)
def get_order_service() -> OrderService:
    return OrderService(
        orders=get_order_repository(),
        products=get_product_repository(),
        carts=get_cart_service(),
        queue=OrderQueuePublisher(queue_url=get_settings().ORDER_QUEUE_URL),
        notifications=get_notification_publisher(),
    )


@lru_cache(maxsize=1)
def get_order_processor() -> OrderProcessor:
    settings = get_settings()
    parameter_name = f'{settings.PARAMETER_PREFIX}/payment/success-rate-percent'
    payments = PaymentSimulator(
        success_rate_percent=lambda: get_parameter_store().get_int_parameter(
            parameter_name, settings.PAYMENT_SUCCESS_RATE_PERCENT
        ),
        delay_seconds=settings.PAYMENT_PROCESSING_DELAY_SECONDS,
    )
    return OrderProcessor(orders=get_order_service(), notifications=get_notification_publisher(), payments=payments)


def get_current_user(app: APIGatewayRestResolver) -> User:
    """Authenticate the caller of the current request."""
    return get_auth_service().authenticate(app.current_event.headers)


def reset_dependencies() -> None:
    """Drop every cached service so the next call rebuilds it."""
    for factory in (
        get_settings,
        get_secrets,
        get_parameter_store,
        get_token_service,
        get_user_repository,
        get_product_repository,
        get_cart_repository,
        get_order_repository,
        get_notification_publisher,
        get_auth_service,
        get_user_service,
        get_product_service,
        get_cart_service,
        get_order_service,
        get_order_processor,
    ):
        factory.cache_clear()
