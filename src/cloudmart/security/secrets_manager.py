"""
AWS Secrets Manager integration.

Secrets are cached per container with a TTL so a warm Lambda reads each
secret at most once per cache period.
"""

import json
from typing import Any, Dict, Optional

import boto3
from aws_lambda_powertools.metrics import MetricUnit
from botocore.exceptions import BotoCoreError, ClientError
from cachetools import TTLCache

from cloudmart.handlers.utils.errors import ExternalServiceError
from cloudmart.handlers.utils.observability import logger, metrics, tracer


class SecretsManagerService:
    """Read-only access to Secrets Manager with caching."""

    def __init__(
        self,
        enabled: bool = True,
        cache_ttl_seconds: int = 300,
        max_cache_size: int = 100,
        client: Optional[Any] = None,
    ):
        """
        Initialize the secrets service.

        Args:
            enabled: When False every lookup returns None without calling AWS
            cache_ttl_seconds: Cache TTL in seconds
            max_cache_size: Maximum number of secrets to cache
            client: Preconfigured boto3 secretsmanager client
        """
        self.enabled = enabled
        self._cache: TTLCache = TTLCache(maxsize=max_cache_size, ttl=cache_ttl_seconds)
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client('secretsmanager')
        return self._client

    @tracer.capture_method
    def get_secret(self, secret_name: str) -> Optional[str]:
        """
        Get a secret string.

        Args:
            secret_name: Name or ARN of the secret

        Returns:
            Secret value, or None when the service is disabled

        Raises:
            ExternalServiceError: If the secret cannot be retrieved
        """
        if not self.enabled:
            logger.debug("Secrets Manager disabled, skipping lookup", extra={"secret_name": secret_name})
            return None

        if secret_name in self._cache:
            metrics.add_metric(name="SecretCacheHit", unit=MetricUnit.Count, value=1)
            return self._cache[secret_name]

        try:
            response = self.client.get_secret_value(SecretId=secret_name)
        except (ClientError, BotoCoreError) as e:
            logger.error("Failed to retrieve secret", extra={"secret_name": secret_name, "error": str(e)})
            raise ExternalServiceError(
                message=f"Failed to retrieve secret {secret_name}: {str(e)}",
                service_name="SecretsManager",
            ) from e

        value = response.get('SecretString')
        if value is None:
            value = response['SecretBinary'].decode('utf-8')

        self._cache[secret_name] = value
        logger.info("Secret retrieved", extra={"secret_name": secret_name})
        return value

    def get_secret_json(self, secret_name: str) -> Optional[Dict[str, Any]]:
        """Get a secret holding a JSON document."""
        value = self.get_secret(secret_name)
        if value is None:
            return None
        try:
            return json.loads(value)
        except json.JSONDecodeError as e:
            raise ExternalServiceError(
                message=f"Secret {secret_name} is not valid JSON",
                service_name="SecretsManager",
            ) from e

    def clear_cache(self) -> None:
        self._cache.clear()
