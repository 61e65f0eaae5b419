from __future__ import annotations

from typing import Any, Dict, Iterable, Optional
from flask import request

from bakeryshop.app.common.errors import abort_json


def get_json() -> Dict[str, Any]:
    if not request.is_json:
        abort_json(400, "invalid_json", "Request must be application/json")
    data = request.get_json(silent=True)
    if data is None or not isinstance(data, dict):
        abort_json(400, "invalid_json", "Malformed JSON body")
    return data


def clean_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def optional_str(value: Any) -> Optional[str]:
    return clean_str(value) or None


def require_fields(data: Dict[str, Any], fields: Iterable[str], message: str = "Missing required fields") -> None:
    """Blank strings count as missing."""
    missing = [f for f in fields if not clean_str(data.get(f))]
    if missing:
        abort_json(400, "validation_error", message, {"missing": missing})


def parse_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        abort_json(400, "validation_error", f"{field_name} must be an integer")
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        abort_json(400, "validation_error", f"{field_name} must be an integer")
