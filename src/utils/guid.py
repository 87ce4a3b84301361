"""GnuCash GUID helpers."""

import re
import uuid

_GUID_PATTERN = re.compile(r"^[0-9a-f]{32}$")


def generate_guid() -> str:
    """Return a new GnuCash-compatible GUID (32 lowercase hex characters)."""
    return uuid.uuid4().hex


def is_valid_guid(value: str | None) -> bool:
    """Return True when the value looks like a GnuCash GUID.

    Args:
        value: Candidate identifier.

    Returns:
        bool: True for 32-character hex strings (case-insensitive).
    """
    if not value or not isinstance(value, str):
        return False
    return bool(_GUID_PATTERN.match(value.lower()))


__all__ = ["generate_guid", "is_valid_guid"]
