"""JSON serialization for memory entries.

Used for the human-readable memory dump and for the Redis backend. Handles
the value types decoders and callers commonly put into entries.

Special Type Handling:
    - datetime/date/time: Converted to ISO format strings
    - Decimal: Converted to float
    - UUID: Converted to string
    - bytes: Base64 encoded
    - set: Converted to list
    - pydantic models: Converted with model_dump()
"""

import base64
import json
import logging
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Optional, Union
from uuid import UUID

from pydantic import BaseModel

logger = logging.getLogger(__name__)


def _json_default(obj: Any) -> Any:
    """
    Custom JSON encoder for special types.

    Args:
        obj: Object to encode

    Returns:
        JSON-serializable representation

    Raises:
        TypeError: If object type is not supported
    """
    if isinstance(obj, BaseModel):
        return obj.model_dump()

    if isinstance(obj, (datetime, date, time)):
        return obj.isoformat()

    if isinstance(obj, Decimal):
        return float(obj)

    if isinstance(obj, UUID):
        return str(obj)

    if isinstance(obj, bytes):
        return base64.b64encode(obj).decode("utf-8")

    if isinstance(obj, set):
        return sorted(obj, key=str)

    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def serialize_json(data: Any, indent: Optional[int] = None) -> str:
    """
    Serialize data to a JSON string.

    Args:
        data: Python object to serialize
        indent: Pretty-print indentation (None = compact)

    Returns:
        JSON string

    Raises:
        ValueError: If serialization fails
    """
    separators = None if indent is not None else (",", ":")
    try:
        return json.dumps(
            data,
            default=_json_default,
            indent=indent,
            separators=separators,
            ensure_ascii=False,
        )
    except (TypeError, ValueError) as e:
        logger.error(f"JSON serialization failed: {e}", exc_info=True)
        raise ValueError(f"Failed to serialize to JSON: {e}") from e


def deserialize_json(data: Union[str, bytes]) -> Any:
    """
    Deserialize data from a JSON string.

    Args:
        data: JSON string or bytes

    Returns:
        Deserialized Python object

    Raises:
        ValueError: If deserialization fails
    """
    try:
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        return json.loads(data)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error(f"JSON deserialization failed: {e}", exc_info=True)
        raise ValueError(f"Failed to deserialize from JSON: {e}") from e
