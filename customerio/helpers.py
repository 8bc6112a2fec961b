"""Request-body helpers shared by the resource modules.

Flattening of key/value collections, timestamp conversion, and the
empty-value cleaning applied to every outgoing body.
"""
from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Optional
import json
import random
import string
import time

from customerio.errors import NodeOperationError

_BASE36 = string.digits + string.ascii_lowercase

# Values at or above this are epoch milliseconds rather than seconds
_MILLISECONDS_THRESHOLD = 10_000_000_000


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------

def parse_json(value: Any, error_message: str, expected: Optional[type] = None) -> Any:
    """Parse a JSON string parameter; non-strings pass through unchanged.

    With ``expected`` set, a result of any other type is rejected with the
    same ``error_message``.
    """
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError as exc:
            raise NodeOperationError(error_message) from exc
    if expected is not None and not isinstance(value, expected):
        raise NodeOperationError(error_message)
    return value


def parse_json_lenient(value: Any, fallback: Any = None) -> Any:
    """Parse a JSON string, returning ``fallback`` (or the raw value) on failure."""
    if not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except ValueError:
        return value if fallback is None else fallback


# ---------------------------------------------------------------------------
# Collections
# ---------------------------------------------------------------------------

def prepare_attributes(collection: Optional[dict]) -> dict[str, Any]:
    """Flatten ``{"attribute": [{name, value}]}`` or
    ``{"attribute_values": [{key, value}]}`` into ``{name: value}``.

    String values that are valid JSON are decoded, so ``"42"`` becomes ``42``
    and ``'{"a": 1}'`` becomes a dict.
    """
    if not collection:
        return {}
    items = collection.get("attribute") or collection.get("attribute_values") or []
    attributes = {}
    for item in items:
        key = item.get("name") or item.get("key")
        if key:
            attributes[key] = parse_json_lenient(item.get("value"))
    return attributes


def prepare_object_attributes(collection: Optional[dict]) -> dict[str, Any]:
    """Flatten ``{"attribute_values": [{key, value}]}``, decoding JSON values."""
    if not collection:
        return {}
    attributes = {}
    for item in collection.get("attribute_values") or []:
        key = item.get("key")
        if key:
            attributes[key] = parse_json_lenient(item.get("value"))
    return attributes


def collect_named_values(collection: Optional[dict], group: str) -> dict[str, Any]:
    """Flatten ``{group: [{name, value}]}`` keeping values verbatim."""
    if not collection:
        return {}
    return {item["name"]: item.get("value") for item in collection.get(group) or [] if item.get("name")}


def split_list(value: str) -> list[str]:
    """Split a comma-separated parameter into trimmed entries."""
    return [part.strip() for part in value.split(",")]


# ---------------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------------

def format_timestamp(value: Any) -> Optional[int]:
    """Convert a date parameter to Unix seconds.

    Accepts ``datetime``, ISO-8601 strings, epoch seconds and epoch
    milliseconds. Naive datetimes are read as UTC. Empty input (including
    ``0``) gives ``None``.
    """
    if isinstance(value, bool):
        raise NodeOperationError(f"Invalid timestamp: {value!r}")

    if not value:
        return None

    if isinstance(value, (int, float)):
        if value > _MILLISECONDS_THRESHOLD:
            return int(value // 1000)
        return int(value)

    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return int(value.timestamp())

    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return format_timestamp(int(text))
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError as exc:
            raise NodeOperationError(f"Invalid timestamp: {value!r}") from exc
        return format_timestamp(parsed)

    raise NodeOperationError(f"Invalid timestamp: {value!r}")


def parse_timestamp(value: Any) -> Optional[str]:
    """Convert Unix seconds to an ISO-8601 UTC string (``...sssZ``)."""
    if not value:
        return None
    try:
        seconds = int(value)
    except (TypeError, ValueError):
        return None
    moment = datetime.fromtimestamp(seconds, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def iso_timestamp(value: Any) -> Optional[str]:
    """Render a date parameter as an ISO-8601 string for the Pipelines API.

    Strings are sent as given; ``datetime`` and epoch numbers are converted.
    """
    if value is None or value == "":
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        moment = value.astimezone(timezone.utc)
        return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return parse_timestamp(format_timestamp(value))
    raise NodeOperationError(f"Invalid timestamp: {value!r}")


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ---------------------------------------------------------------------------
# Cleaning
# ---------------------------------------------------------------------------

def prepare_filters(filters: Optional[dict]) -> dict[str, Any]:
    """Drop ``None`` and empty-string entries; ``False`` and ``0`` are kept."""
    return {key: value for key, value in (filters or {}).items() if value is not None and value != ""}


def clean_object(obj: dict) -> dict:
    """Recursively drop ``None``/empty-string values and dicts left empty."""
    cleaned = {}
    for key, value in obj.items():
        if value is None or value == "":
            continue
        if isinstance(value, dict):
            nested = clean_object(value)
            if nested:
                cleaned[key] = nested
        else:
            cleaned[key] = value
    return cleaned


def deep_merge(target: dict, source: dict) -> dict:
    output = dict(target)
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            output[key] = deep_merge(target[key], value)
        else:
            output[key] = value
    return output


# ---------------------------------------------------------------------------
# Misc
# ---------------------------------------------------------------------------

def generate_anonymous_id() -> str:
    """``anon_<epoch ms>_<random base36>`` for events sent without an identity."""
    suffix = "".join(random.choice(_BASE36) for _ in range(13))
    return f"anon_{int(time.time() * 1000)}_{suffix}"


def prepare_event_data(name: str, data: Optional[dict] = None, timestamp: Optional[int] = None) -> dict:
    event = {"name": name, "data": data or {}}
    if timestamp:
        event["timestamp"] = timestamp
    return event
