from __future__ import annotations

import re
from typing import Any, Iterable, List, Mapping

EMAIL_REGEX = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"
PASSWORD_MIN_LENGTH = 6


def validate_form(values: Mapping[str, Any], required: Iterable[str] = ()) -> List[str]:
    """Names of the fields that should be flagged before submitting.

    Empty list means the form can be sent.
    """
    invalid: List[str] = []

    for name in required:
        if not str(values.get(name) or "").strip():
            invalid.append(name)

    email = str(values.get("email") or "")
    if email and not re.match(EMAIL_REGEX, email) and "email" not in invalid:
        invalid.append("email")

    password = str(values.get("password") or "")
    if password and len(password) < PASSWORD_MIN_LENGTH and "password" not in invalid:
        invalid.append("password")

    confirm = str(values.get("confirmPassword") or "")
    if confirm and confirm != password and "confirmPassword" not in invalid:
        invalid.append("confirmPassword")

    return invalid
