import re
import json
from datetime import date, datetime
from decimal import Decimal

TAG_PATTERN = re.compile(r"<[^>]*>")


def strip_tags(text):
    """Drop anything that looks like a markup tag, keep the text between tags."""
    return TAG_PATTERN.sub("", text)


def _json_default(value):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if hasattr(value, "to_dict"):
        return value.to_dict()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def safe_json_dumps(data):
    try:
        if data is None:
            return "{}"
        return json.dumps(data, ensure_ascii=False, separators=(',', ':'), default=_json_default)
    except (TypeError, ValueError):
        return "{}"


def generate_timestamp():
    return datetime.now()
