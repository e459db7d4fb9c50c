"""
CloudMart serverless storefront backend.

This package contains the Lambda implementation of the CloudMart API,
organised in the three-layer architecture used across the service:

- handlers: API Gateway and SQS entry points
- logic: business rules for users, products, carts and orders
- dal: DynamoDB repositories
- models: domain, input and output schemas
- security: password hashing, tokens and secrets
"""

__version__ = "1.0.0"
__description__ = "CloudMart e-commerce backend on AWS Lambda"
