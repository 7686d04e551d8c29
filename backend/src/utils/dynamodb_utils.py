"""DynamoDB storage helpers.

DynamoDB hands numbers back as Decimal and refuses Python floats on write, so
climb records are converted at the table boundary. The gear checklist is
stored as an opaque blob: older rows hold it as a JSON string, newer ones as
a native list.
"""

import json
import logging
from decimal import Decimal
from typing import Any

logger = logging.getLogger(__name__)


def decimal_to_python(obj: Any) -> Any:
    """Recursively turn Decimal values into int (whole numbers) or float."""
    if isinstance(obj, Decimal):
        if obj % 1 == 0:
            return int(obj)
        return float(obj)
    if isinstance(obj, dict):
        return {key: decimal_to_python(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [decimal_to_python(item) for item in obj]
    return obj


def python_to_decimal(obj: Any) -> Any:
    """Recursively turn floats and ints into Decimal for storage.

    Floats go through str() rounded to 6 places so 0.1 is stored as 0.1 and
    not as its binary expansion. Booleans are left alone.
    """
    if isinstance(obj, float):
        return Decimal(str(round(obj, 6)))
    if isinstance(obj, int) and not isinstance(obj, bool):
        return Decimal(obj)
    if isinstance(obj, dict):
        return {key: python_to_decimal(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [python_to_decimal(item) for item in obj]
    return obj


def prepare_for_dynamodb(item: dict[str, Any]) -> dict[str, Any]:
    """Prepare a model dump for put_item, dropping None attributes."""
    cleaned = {key: value for key, value in item.items() if value is not None}
    return python_to_decimal(cleaned)


def parse_from_dynamodb(item: dict[str, Any]) -> dict[str, Any]:
    """Parse a get_item/query result back into Python-native types."""
    return decimal_to_python(item)


def parse_items_from_dynamodb(items: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Parse a list of DynamoDB items."""
    return [parse_from_dynamodb(item) for item in items]


def decode_gear_blob(value: Any) -> list[Any]:
    """Decode a stored required_gear value into a list.

    Accepts a native list or a JSON-encoded list. Anything else (None,
    malformed JSON, a JSON object) decodes to an empty list.
    """
    if isinstance(value, (list, tuple)):
        return list(value)
    if isinstance(value, (str, bytes)):
        try:
            decoded = json.loads(value)
        except (TypeError, ValueError):
            logger.warning("Ignoring malformed gear blob (%d chars)", len(value))
            return []
        return decoded if isinstance(decoded, list) else []
    return []
