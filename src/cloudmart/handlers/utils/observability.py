"""
Shared Powertools instances for the CloudMart Lambdas.

Logger, Tracer and Metrics are created once per container and imported by
every layer so logs, traces and metrics share the same service name.
"""

from aws_lambda_powertools.logging import Logger
from aws_lambda_powertools.metrics import Metrics
from aws_lambda_powertools.tracing import Tracer

METRICS_NAMESPACE = 'CloudMart'

# Service name comes from POWERTOOLS_SERVICE_NAME
logger: Logger = Logger()

# Disabled by setting POWERTOOLS_TRACE_DISABLED to "true"
tracer: Tracer = Tracer()

metrics = Metrics(namespace=METRICS_NAMESPACE)
