from __future__ import annotations

import re
from typing import Any, Optional

from ..core.exceptions import ValidationError

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_identifier(value: Optional[str], field_name: str) -> str:
    """Collection and column names end up inside SQL, so only plain identifiers pass."""
    name = require_non_empty(value, field_name)
    if not _IDENTIFIER.match(name):
        raise ValidationError(f"{field_name} is not a valid identifier: {name!r}")
    return name


def require_identity(value: Any, field_name: str) -> Any:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field_name} is required")
    return value


def has_value(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True
