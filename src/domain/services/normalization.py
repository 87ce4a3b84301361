"""Domain normalization helpers for raw repository values."""


def normalize_namespace(namespace: str | None) -> str | None:
    """Normalize commodity namespace values.

    Args:
        namespace: Raw namespace value from a repository.

    Returns:
        str | None: Upper-cased namespace, None when blank.
    """
    if not namespace:
        return None
    cleaned = namespace.strip()
    return cleaned.upper() if cleaned else None


def normalize_mnemonic(mnemonic: str | None) -> str | None:
    """Normalize commodity mnemonic values.

    Args:
        mnemonic: Raw mnemonic value from a repository.

    Returns:
        str | None: Upper-cased mnemonic, None when blank.
    """
    if not mnemonic:
        return None
    cleaned = mnemonic.strip()
    return cleaned.upper() if cleaned else None


def normalize_account_type(raw_type) -> str:
    """Normalize account types from SQL strings or piecash enums.

    Args:
        raw_type: String or enum-like object with a ``name``.

    Returns:
        str: Upper-cased account type, empty when missing.
    """
    if raw_type is None:
        return ""
    if hasattr(raw_type, "name") and not isinstance(raw_type, str):
        return str(raw_type.name).upper()
    return str(raw_type).strip().upper()


def coerce_flag(raw_value) -> bool:
    """Convert GnuCash integer flags (0/1, None) to booleans."""
    if raw_value is None:
        return False
    return bool(int(raw_value))


__all__ = [
    "normalize_namespace",
    "normalize_mnemonic",
    "normalize_account_type",
    "coerce_flag",
]
