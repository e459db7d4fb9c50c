"""
AWS Lambda Handlers Module.

Each module in this package is a Lambda entry point:

- auth_handler, users_handler, products_handler, cart_handler,
  orders_handler, health_handler: REST handlers behind API Gateway
- order_consumer: SQS consumer for the order payment pipeline
"""
