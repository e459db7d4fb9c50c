"""
Pytest configuration and shared fixtures for CloudMart.

Environment variables are set at import time, before any cloudmart module
creates Powertools instances or reads its settings. AWS is simulated with
moto; every test using the ``aws`` fixture gets fresh tables, queues, topic
and bucket.
"""

import json
import os

os.environ.update({
    "AWS_DEFAULT_REGION": "us-east-1",
    "AWS_ACCESS_KEY_ID": "testing",
    "AWS_SECRET_ACCESS_KEY": "testing",
    "AWS_SECURITY_TOKEN": "testing",
    "AWS_SESSION_TOKEN": "testing",
    "USERS_TABLE_NAME": "cloudmart-users-test",
    "PRODUCTS_TABLE_NAME": "cloudmart-products-test",
    "CARTS_TABLE_NAME": "cloudmart-carts-test",
    "ORDERS_TABLE_NAME": "cloudmart-orders-test",
    "ORDER_QUEUE_URL": "https://sqs.us-east-1.amazonaws.com/123456789012/cloudmart-orders-test",
    "ORDER_TOPIC_ARN": "arn:aws:sns:us-east-1:123456789012:cloudmart-order-notifications-test",
    "PRODUCT_IMAGES_BUCKET": "cloudmart-images-test",
    "JWT_SECRET": "test-signing-key-that-is-long-enough-for-hs256",
    "ENVIRONMENT": "test",
    "APP_VERSION": "test-1.0.0",
    "PAYMENT_PROCESSING_DELAY_SECONDS": "0",
    "POWERTOOLS_SERVICE_NAME": "cloudmart-test",
    "POWERTOOLS_METRICS_NAMESPACE": "CloudMartTest",
    "POWERTOOLS_TRACE_DISABLED": "true",
    "LOG_LEVEL": "DEBUG",
    "LAMBDA_ENV_MODELER_DISABLE_CACHE": "true",
})

from dataclasses import dataclass  # noqa: E402
from decimal import Decimal  # noqa: E402
from typing import Any, Callable, Dict, List, Optional  # noqa: E402
from unittest.mock import Mock  # noqa: E402

import boto3  # noqa: E402
import pytest  # noqa: E402
from moto import mock_aws  # noqa: E402

from cloudmart.handlers.utils.dependencies import (  # noqa: E402
    get_product_repository,
    get_token_service,
    get_user_repository,
    reset_dependencies,
)
from cloudmart.models.product import Product  # noqa: E402
from cloudmart.models.user import User, UserRole, UserStatus  # noqa: E402
from cloudmart.security.auth import hash_password  # noqa: E402

REGION = "us-east-1"
DEFAULT_PASSWORD = "secret123"

# bcrypt is slow on purpose; hash once and reuse for fixture users
_DEFAULT_PASSWORD_HASH = hash_password(DEFAULT_PASSWORD)


def _create_table(dynamodb, name: str, key: str, indexes: Optional[List[Dict[str, Any]]] = None) -> None:
    attributes = {key}
    table_kwargs: Dict[str, Any] = {
        "TableName": name,
        "KeySchema": [{"AttributeName": key, "KeyType": "HASH"}],
        "BillingMode": "PAY_PER_REQUEST",
    }
    if indexes:
        table_kwargs["GlobalSecondaryIndexes"] = []
        for index in indexes:
            key_schema = [{"AttributeName": index["hash"], "KeyType": "HASH"}]
            attributes.add(index["hash"])
            if index.get("range"):
                key_schema.append({"AttributeName": index["range"], "KeyType": "RANGE"})
                attributes.add(index["range"])
            table_kwargs["GlobalSecondaryIndexes"].append({
                "IndexName": index["name"],
                "KeySchema": key_schema,
                "Projection": {"ProjectionType": "ALL"},
            })
    table_kwargs["AttributeDefinitions"] = [
        {"AttributeName": attribute, "AttributeType": "S"} for attribute in sorted(attributes)
    ]
    dynamodb.create_table(**table_kwargs)


@dataclass
class AwsResources:
    """Handles to the simulated AWS resources of one test."""

    sqs: Any
    s3: Any
    ssm: Any
    secretsmanager: Any
    order_queue_url: str
    notification_queue_url: str
    bucket: str

    def order_messages(self) -> List[Dict[str, Any]]:
        return [json.loads(body) for body in _drain(self.sqs, self.order_queue_url)]

    def notifications(self) -> List[Dict[str, Any]]:
        """Notifications published to the order topic, as SNS envelopes."""
        return [json.loads(body) for body in _drain(self.sqs, self.notification_queue_url)]


def _drain(sqs, queue_url: str) -> List[str]:
    bodies: List[str] = []
    while True:
        response = sqs.receive_message(QueueUrl=queue_url, MaxNumberOfMessages=10)
        messages = response.get("Messages", [])
        if not messages:
            return bodies
        for message in messages:
            bodies.append(message["Body"])
            sqs.delete_message(QueueUrl=queue_url, ReceiptHandle=message["ReceiptHandle"])


@pytest.fixture
def aws() -> AwsResources:
    """Create every table, queue, topic and bucket CloudMart uses inside moto."""
    with mock_aws():
        dynamodb = boto3.resource("dynamodb", region_name=REGION)
        _create_table(dynamodb, os.environ["USERS_TABLE_NAME"], "id", [
            {"name": "email-index", "hash": "email"},
        ])
        _create_table(dynamodb, os.environ["PRODUCTS_TABLE_NAME"], "id")
        _create_table(dynamodb, os.environ["CARTS_TABLE_NAME"], "user_id")
        _create_table(dynamodb, os.environ["ORDERS_TABLE_NAME"], "id", [
            {"name": "order_number-index", "hash": "order_number"},
            {"name": "user_id-index", "hash": "user_id", "range": "created_at"},
        ])

        sqs = boto3.client("sqs", region_name=REGION)
        order_queue_url = sqs.create_queue(QueueName="cloudmart-orders-test")["QueueUrl"]
        notification_queue_url = sqs.create_queue(QueueName="cloudmart-notifications-capture")["QueueUrl"]
        notification_queue_arn = sqs.get_queue_attributes(
            QueueUrl=notification_queue_url, AttributeNames=["QueueArn"]
        )["Attributes"]["QueueArn"]

        sns = boto3.client("sns", region_name=REGION)
        topic_arn = sns.create_topic(Name="cloudmart-order-notifications-test")["TopicArn"]
        sns.subscribe(TopicArn=topic_arn, Protocol="sqs", Endpoint=notification_queue_arn)

        s3 = boto3.client("s3", region_name=REGION)
        s3.create_bucket(Bucket=os.environ["PRODUCT_IMAGES_BUCKET"])

        reset_dependencies()
        yield AwsResources(
            sqs=sqs,
            s3=s3,
            ssm=boto3.client("ssm", region_name=REGION),
            secretsmanager=boto3.client("secretsmanager", region_name=REGION),
            order_queue_url=order_queue_url,
            notification_queue_url=notification_queue_url,
            bucket=os.environ["PRODUCT_IMAGES_BUCKET"],
        )
        reset_dependencies()


@pytest.fixture
def lambda_context():
    """Create a mock Lambda context for testing."""
    context = Mock()
    context.function_name = "cloudmart-test-function"
    context.function_version = "1"
    context.invoked_function_arn = "arn:aws:lambda:us-east-1:123456789012:function:cloudmart-test-function"
    context.memory_limit_in_mb = 512
    context.get_remaining_time_in_millis = lambda: 30000
    context.aws_request_id = "test-request-id-123"
    context.log_group_name = "/aws/lambda/cloudmart-test-function"
    context.log_stream_name = "2024/01/01/[$LATEST]test123"
    return context


def build_api_event(
    method: str,
    path: str,
    body: Any = None,
    token: Optional[str] = None,
    query: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """Build an API Gateway REST proxy event."""
    headers = {"Content-Type": "application/json", "User-Agent": "pytest"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    if body is not None and not isinstance(body, str):
        body = json.dumps(body)
    return {
        "resource": path,
        "httpMethod": method,
        "path": path,
        "headers": headers,
        "multiValueHeaders": {name: [value] for name, value in headers.items()},
        "body": body,
        "queryStringParameters": query,
        "multiValueQueryStringParameters": {name: [value] for name, value in query.items()} if query else None,
        "pathParameters": None,
        "stageVariables": None,
        "isBase64Encoded": False,
        "requestContext": {
            "requestId": "test-request-id-123",
            "accountId": "123456789012",
            "stage": "test",
            "httpMethod": method,
            "path": path,
            "protocol": "HTTP/1.1",
            "resourcePath": path,
            "identity": {"sourceIp": "127.0.0.1", "userAgent": "pytest"},
        },
    }


@pytest.fixture
def api_event() -> Callable[..., Dict[str, Any]]:
    return build_api_event


@pytest.fixture
def invoke(lambda_context) -> Callable:
    """Call a handler module's lambda_handler and decode the JSON body."""

    def _invoke(handler_module, event: Dict[str, Any]):
        response = handler_module.lambda_handler(event, lambda_context)
        body = response.get("body")
        try:
            parsed = json.loads(body) if body else None
        except json.JSONDecodeError:
            parsed = body
        return response["statusCode"], parsed

    return _invoke


@pytest.fixture
def make_user(aws) -> Callable[..., User]:
    """Insert a user straight into the users table."""
    counter = {"n": 0}

    def _make_user(
        role: UserRole = UserRole.CUSTOMER,
        email: Optional[str] = None,
        status: UserStatus = UserStatus.ACTIVE,
        first_name: str = "Test",
        last_name: str = "User",
    ) -> User:
        counter["n"] += 1
        user = User.create(
            first_name=first_name,
            last_name=last_name,
            email=email or f"{role.value.lower()}{counter['n']}@example.com",
            password_hash=_DEFAULT_PASSWORD_HASH,
            role=role,
        )
        user.status = status
        return get_user_repository().create(user)

    return _make_user


@pytest.fixture
def password() -> str:
    """Plain password of every user created by make_user."""
    return DEFAULT_PASSWORD


@pytest.fixture
def token_for(aws) -> Callable[[User], str]:
    return lambda user: get_token_service().issue_token(user)


@pytest.fixture
def customer(make_user) -> User:
    return make_user(UserRole.CUSTOMER, first_name="Jane", last_name="Doe")


@pytest.fixture
def seller(make_user) -> User:
    return make_user(UserRole.SELLER, first_name="Sam", last_name="Seller")


@pytest.fixture
def admin(make_user) -> User:
    return make_user(UserRole.ADMIN, first_name="Ada", last_name="Admin")


@pytest.fixture
def make_product(aws, seller) -> Callable[..., Product]:
    """Insert an ACTIVE product owned by the ``seller`` fixture."""

    def _make_product(
        name: str = "Running Shoe",
        price: str = "59.90",
        stock: int = 10,
        category: str = "Footwear",
        owner: Optional[User] = None,
        description: Optional[str] = None,
    ) -> Product:
        owner = owner or seller
        product = Product.create(
            name=name,
            description=description,
            price=Decimal(price),
            stock=stock,
            category=category,
            seller_id=owner.id,
            seller_name=owner.full_name,
        )
        return get_product_repository().save(product)

    return _make_product


# Pytest configuration
def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        path = str(item.fspath)
        if f"{os.sep}unit{os.sep}" in path:
            item.add_marker(pytest.mark.unit)
        elif f"{os.sep}integration{os.sep}" in path:
            item.add_marker(pytest.mark.integration)
        elif f"{os.sep}e2e{os.sep}" in path:
            item.add_marker(pytest.mark.e2e)
