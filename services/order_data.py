"""
Normalization and display of the `order_data` payload

The ingestion workflow writes the payload either as a JSON object or as the
raw model output, which may be wrapped in a Markdown code fence and uses the
literal string "NULL" for missing values. Everything that knows about those
quirks lives in this module.
"""
import json
import logging
import re
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

NULL_SENTINEL = "NULL"
PLACEHOLDER = "-"

_FENCE_OPEN_RE = re.compile(r"^```[\w-]*[ \t]*\n?")
_FENCE_CLOSE_RE = re.compile(r"\n?```\s*$")

# Customer domains with a fixed display name; others fall back to the mailbox
KNOWN_DEBTORS = {
    "hittra": "Hittra",
    "gmail": "Gmail",
    "pgm": "Pgm",
    "pure-and-noble": "Pure-And-Noble",
}

# Links on this host need a Google login and cannot be embedded
RESTRICTED_DOCUMENT_HOSTS = ("storage.googleapis.com",)


def strip_code_fence(text: str) -> str:
    """Remove a surrounding ```json ... ``` block, if any"""
    text = text.strip()
    if not text.startswith("```"):
        return text
    text = _FENCE_OPEN_RE.sub("", text, count=1)
    return _FENCE_CLOSE_RE.sub("", text, count=1)


def parse_order_data(raw: Any) -> Dict[str, Any]:
    """
    Turn the stored payload into a dict, whatever shape it arrived in.

    Never raises: missing, undecodable or non-object payloads give an empty
    dict so that an order with garbled data can still be triaged. Valid JSON
    that is not an object (an array, a string, a number) is treated the same
    way: the result is always a dict, never the decoded array or scalar.
    """
    if raw is None:
        return {}

    if isinstance(raw, Mapping):
        return raw if isinstance(raw, dict) else dict(raw)

    if not isinstance(raw, str):
        logger.warning(f"Ignoring order_data of unexpected type {type(raw).__name__}")
        return {}

    text = strip_code_fence(raw)
    if not text:
        return {}

    try:
        decoded = json.loads(text)
    except ValueError as e:
        logger.warning(f"Failed to parse order_data: {e}")
        return {}

    if not isinstance(decoded, dict):
        logger.warning(f"order_data decoded to {type(decoded).__name__}, expected an object")
        return {}
    return decoded


def is_missing(value: Any) -> bool:
    return value is None or value == NULL_SENTINEL


def clean_value(value: Any) -> Any:
    """None for absent values and the "NULL" sentinel, the value otherwise"""
    return None if is_missing(value) else value


def section(payload: Mapping, key: str) -> Dict[str, Any]:
    """A nested object of the payload, or an empty dict"""
    value = payload.get(key) if isinstance(payload, Mapping) else None
    return value if isinstance(value, dict) else {}


def goods_items(payload: Mapping) -> list:
    value = payload.get("goederen") if isinstance(payload, Mapping) else None
    return [item for item in value if isinstance(item, dict)] if isinstance(value, list) else []


def goods_count(payload: Mapping) -> int:
    return len(goods_items(payload))


def display_value(value: Any) -> str:
    """Render a payload value; every kind of "no value" becomes a dash"""
    value = clean_value(value)
    if value is None:
        return PLACEHOLDER
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_weight(value: Any) -> str:
    value = clean_value(value)
    if value in (None, "", 0):
        return PLACEHOLDER
    return f"{display_value(value)} kg"


def format_date(value: Any) -> str:
    """ISO date (or datetime) as dd-mm-YYYY; unparsable text is shown unchanged"""
    value = clean_value(value)
    if not value:
        return PLACEHOLDER
    if isinstance(value, (date, datetime)):
        return value.strftime("%d-%m-%Y")
    text = str(value).strip()
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return text
    return parsed.strftime("%d-%m-%Y")


def format_time(value: Any) -> str:
    value = clean_value(value)
    if not value or value == "00:00":
        return PLACEHOLDER
    return str(value)


def format_date_time(date_value: Any, time_value: Any) -> str:
    """Combined "date - time" cell of the overview table"""
    date_text = format_date(date_value)
    time_text = format_time(time_value)
    if date_text == PLACEHOLDER and time_text == PLACEHOLDER:
        return PLACEHOLDER
    if time_text == PLACEHOLDER:
        return date_text
    return f"{date_text} - {time_text}"


def format_timestamp(value: Optional[datetime]) -> str:
    if value is None:
        return PLACEHOLDER
    return value.strftime("%d-%m-%Y %H:%M")


def debtor_from_email(email: Optional[str]) -> str:
    """Customer display name derived from the sender address"""
    if not email:
        return PLACEHOLDER
    lowered = email.lower()
    for marker, name in KNOWN_DEBTORS.items():
        if marker in lowered:
            return name
    return email.split("@")[0]


def document_view(url: Optional[str]) -> str:
    """How the source document can be shown: embed, restricted or missing"""
    if not url:
        return "missing"
    if any(host in url for host in RESTRICTED_DOCUMENT_HOSTS):
        return "restricted"
    return "embed"
