"""
Shared helpers for domain models persisted in DynamoDB.
"""

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel

CENTS = Decimal('0.01')


def utc_now() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def to_money(value: Any) -> Decimal:
    """Round a numeric value to two decimal places."""
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def _to_attribute(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: _to_attribute(inner) for key, inner in value.items()}
    if isinstance(value, list):
        return [_to_attribute(inner) for inner in value]
    return value


class DynamoModel(BaseModel):
    """Base model that converts to and from DynamoDB items."""

    def to_item(self) -> Dict[str, Any]:
        """Serialize to a DynamoDB item, dropping empty attributes."""
        return _to_attribute(self.model_dump(exclude_none=True))

    @classmethod
    def from_item(cls, item: Dict[str, Any]):
        return cls.model_validate(item)
