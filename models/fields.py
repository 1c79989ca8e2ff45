"""
Field coercion helpers for parsing backend payloads.

Every model's ``from_dict`` goes through these so that a malformed payload
fails loudly with ResponseSchemaError instead of surfacing later as a
KeyError inside a template.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from core.exceptions import ResponseSchemaError


def require_mapping(data: Any, model: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ResponseSchemaError(model, f"expected an object, got {type(data).__name__}")
    return data


def require_list(data: Any, model: str) -> List[Any]:
    if not isinstance(data, list):
        raise ResponseSchemaError(model, f"expected a list, got {type(data).__name__}")
    return data


def identifier(data: Dict[str, Any], model: str, required: bool = True) -> str:
    """Backend ids arrive as "_id" (Mongo) or "id"."""
    value = data.get("_id", data.get("id"))
    if value is None or value == "":
        if required:
            raise ResponseSchemaError(model, "missing identifier")
        return ""
    return str(value)


def text(data: Dict[str, Any], key: str, model: str, default: Optional[str] = "") -> str:
    """
    Read a string field.

    A default of None marks the field as required.
    """
    value = data.get(key)
    if value is None:
        if default is None:
            raise ResponseSchemaError(model, f"missing field '{key}'")
        return default
    if not isinstance(value, (str, int, float)) or isinstance(value, bool):
        raise ResponseSchemaError(model, f"field '{key}' should be text")
    return str(value)


def number(data: Dict[str, Any], key: str, model: str, default: Optional[float] = 0.0) -> float:
    """Read a numeric field; numeric strings ("1500.00") are accepted."""
    value = data.get(key)
    if value is None or value == "":
        if default is None:
            raise ResponseSchemaError(model, f"missing field '{key}'")
        return default
    if isinstance(value, bool):
        raise ResponseSchemaError(model, f"field '{key}' should be a number")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ResponseSchemaError(model, f"field '{key}' should be a number, got {value!r}")


def integer(data: Dict[str, Any], key: str, model: str, default: Optional[int] = 0) -> int:
    value = number(data, key, model, None if default is None else float(default))
    if value != int(value):
        raise ResponseSchemaError(model, f"field '{key}' should be a whole number, got {value}")
    return int(value)


def timestamp(data: Dict[str, Any], key: str, model: str) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp ("2025-01-05T10:00:00.000Z"); None when absent."""
    value = data.get(key)
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise ResponseSchemaError(model, f"field '{key}' should be an ISO timestamp")
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise ResponseSchemaError(model, f"field '{key}' is not a valid timestamp: {value!r}")


def iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def unwrap(payload: Any, key: str) -> Any:
    """Mutation responses wrap the document: {"message": ..., key: {...}}."""
    if isinstance(payload, dict) and isinstance(payload.get(key), dict):
        return payload[key]
    return payload


def message_of(payload: Any, default: str = "") -> str:
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return default
