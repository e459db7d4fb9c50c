"""
Runtime configuration from AWS Systems Manager Parameter Store.

Parameters are decrypted and cached with a TTL. When Parameter Store is
disabled every lookup falls back to the caller's default, which keeps local
and test runs free of SSM calls.
"""

from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from cachetools import TTLCache

from cloudmart.handlers.utils.errors import ExternalServiceError
from cloudmart.handlers.utils.observability import logger, tracer

TRUE_VALUES = frozenset({'true', '1', 'yes', 'on'})


class ParameterStoreService:
    def __init__(
        self,
        enabled: bool = True,
        cache_ttl_seconds: int = 300,
        max_cache_size: int = 100,
        client: Optional[Any] = None,
    ):
        self.enabled = enabled
        self._cache: TTLCache = TTLCache(maxsize=max_cache_size, ttl=cache_ttl_seconds)
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client('ssm')
        return self._client

    @tracer.capture_method
    def get_parameter(self, name: str) -> Optional[str]:
        """
        Get a decrypted parameter value.

        Args:
            name: Full parameter name, e.g. /cloudmart/payment/success-rate-percent

        Returns:
            The value, or None when disabled or the parameter does not exist

        Raises:
            ExternalServiceError: For any failure other than a missing parameter
        """
        if not self.enabled:
            logger.debug("Parameter Store disabled, skipping lookup", extra={"parameter": name})
            return None

        if name in self._cache:
            return self._cache[name]

        try:
            response = self.client.get_parameter(Name=name, WithDecryption=True)
        except ClientError as e:
            if e.response['Error']['Code'] == 'ParameterNotFound':
                logger.warning("Parameter not found", extra={"parameter": name})
                return None
            logger.error("Failed to get parameter", extra={"parameter": name, "error": str(e)})
            raise ExternalServiceError(
                message=f"Failed to get parameter {name}: {str(e)}",
                service_name="ParameterStore",
            ) from e
        except BotoCoreError as e:
            logger.error("Failed to get parameter", extra={"parameter": name, "error": str(e)})
            raise ExternalServiceError(
                message=f"Failed to get parameter {name}: {str(e)}",
                service_name="ParameterStore",
            ) from e

        value = response['Parameter']['Value']
        self._cache[name] = value
        logger.debug("Parameter retrieved", extra={"parameter": name})
        return value

    def get_parameter_with_default(self, name: str, default: str) -> str:
        value = self.get_parameter(name)
        return value if value is not None else default

    def get_boolean_parameter(self, name: str, default: bool) -> bool:
        value = self.get_parameter(name)
        if value is None:
            return default
        return value.strip().lower() in TRUE_VALUES

    def get_int_parameter(self, name: str, default: int) -> int:
        value = self.get_parameter(name)
        if value is None:
            return default
        try:
            return int(value.strip())
        except ValueError:
            logger.warning("Invalid integer parameter, using default", extra={
                "parameter": name,
                "value": value,
                "default": default,
            })
            return default

    def clear_cache(self) -> None:
        self._cache.clear()
        logger.info("Parameter cache cleared")
