"""
Environment variable models for type-safe configuration.

This module defines the Pydantic model for the environment variables shared by
the CloudMart Lambda handlers, parsed once per container with
aws-lambda-env-modeler.
"""

from typing import Annotated

from aws_lambda_env_modeler import get_environment_variables
from pydantic import BaseModel, Field


class CloudMartEnvVars(BaseModel):
    """Environment variables for CloudMart handlers."""

    # DynamoDB tables
    USERS_TABLE_NAME: Annotated[str, Field(min_length=1, description='DynamoDB table for users')]
    PRODUCTS_TABLE_NAME: Annotated[str, Field(min_length=1, description='DynamoDB table for products')]
    CARTS_TABLE_NAME: Annotated[str, Field(min_length=1, description='DynamoDB table for shopping carts')]
    ORDERS_TABLE_NAME: Annotated[str, Field(min_length=1, description='DynamoDB table for orders')]

    # Order pipeline, empty values disable publishing
    ORDER_QUEUE_URL: Annotated[str, Field(
        default='',
        description='SQS queue URL receiving new order messages'
    )] = ''

    ORDER_TOPIC_ARN: Annotated[str, Field(
        default='',
        description='SNS topic ARN for order notifications'
    )] = ''

    # Product images
    PRODUCT_IMAGES_BUCKET: Annotated[str, Field(
        default='',
        description='S3 bucket for product images'
    )] = ''

    PRODUCT_IMAGES_PREFIX: Annotated[str, Field(
        default='products/',
        description='Key prefix for uploaded product images'
    )] = 'products/'

    UPLOAD_ALLOWED_EXTENSIONS: Annotated[str, Field(
        default='jpg,jpeg,png,gif,webp',
        description='Comma separated list of allowed image extensions'
    )] = 'jpg,jpeg,png,gif,webp'

    UPLOAD_MAX_FILE_SIZE: Annotated[int, Field(
        default=5 * 1024 * 1024,
        ge=1,
        description='Maximum upload size in bytes'
    )] = 5 * 1024 * 1024

    # Authentication
    JWT_SECRET: Annotated[str, Field(
        default='',
        description='HMAC key for signing access tokens when Secrets Manager is disabled'
    )] = ''

    JWT_SECRET_NAME: Annotated[str, Field(
        default='',
        description='Secrets Manager secret holding the token signing key'
    )] = ''

    JWT_EXPIRATION_SECONDS: Annotated[int, Field(
        default=86400,
        ge=60,
        description='Access token lifetime in seconds'
    )] = 86400

    SECRETS_ENABLED: Annotated[bool, Field(
        default=False,
        description='Read secrets from AWS Secrets Manager'
    )] = False

    PARAMETER_STORE_ENABLED: Annotated[bool, Field(
        default=False,
        description='Read runtime tunables from SSM Parameter Store'
    )] = False

    PARAMETER_PREFIX: Annotated[str, Field(
        default='/cloudmart',
        description='Parameter Store path prefix'
    )] = '/cloudmart'

    CONFIG_CACHE_TTL_SECONDS: Annotated[int, Field(
        default=300,
        ge=1,
        description='Cache TTL for parameters and secrets'
    )] = 300

    # Payment simulation for the order consumer
    PAYMENT_SUCCESS_RATE_PERCENT: Annotated[int, Field(
        default=95,
        ge=0,
        le=100,
        description='Default percentage of simulated payments that succeed'
    )] = 95

    PAYMENT_PROCESSING_DELAY_SECONDS: Annotated[float, Field(
        default=2.0,
        ge=0,
        description='Simulated payment processing time'
    )] = 2.0

    ENVIRONMENT: Annotated[str, Field(
        default='dev',
        description='Deployment environment name',
        pattern=r'^(dev|test|staging|prod)$'
    )] = 'dev'

    APP_VERSION: Annotated[str, Field(
        default='1.0.0',
        description='Application version string'
    )] = '1.0.0'

    @property
    def allowed_extensions(self) -> list[str]:
        return [ext.strip().lower() for ext in self.UPLOAD_ALLOWED_EXTENSIONS.split(',') if ext.strip()]


def get_handler_env_vars() -> CloudMartEnvVars:
    """
    Get typed environment variables for Lambda handlers.

    Returns:
        Validated environment variables model instance
    """
    return get_environment_variables(model=CloudMartEnvVars)
