"""Settings helpers for infrastructure adapters."""

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

from src.infrastructure.logging.logger import get_app_logger
from src.utils.utils import get_project_root

SUPPORTED_BACKENDS = ("sqlalchemy", "piecash")


@dataclass(frozen=True)
class LedgerSettings:
    """Settings for the ledger backend and book.

    Attributes:
        backend: Backend identifier (sqlalchemy or piecash).
        piecash_file: Optional path or URI to the piecash book.
        base_currency: Mnemonic of the reporting currency.
        book_root_guid: Optional ROOT account GUID; the first book otherwise.
    """

    backend: str = "sqlalchemy"
    piecash_file: Optional[Path | str] = None
    base_currency: str = "USD"
    book_root_guid: Optional[str] = None

    @classmethod
    def from_env(cls) -> "LedgerSettings":
        """Build settings from environment variables.

        Returns:
            LedgerSettings: Settings sourced from environment variables.

        Raises:
            ValueError: If ``GNUCASH_BACKEND`` names an unknown backend.
        """
        logger = get_app_logger()
        backend = os.getenv("GNUCASH_BACKEND", "sqlalchemy").strip().lower()
        if backend not in SUPPORTED_BACKENDS:
            raise ValueError(
                "Unsupported GnuCash backend: "
                f"{backend}. Expected sqlalchemy or piecash."
            )
        raw_piecash = os.getenv("PIECASH_FILE")
        if raw_piecash:
            piecash_file = cls._normalize_path(raw_piecash, logger=logger)
        else:
            piecash_file = cls._default_piecash_file(logger=logger)
        base_currency = (
            os.getenv("BASE_CURRENCY", "USD").strip().upper() or "USD"
        )
        book_root_guid = (os.getenv("BOOK_ROOT_GUID") or "").strip() or None
        return cls(
            backend=backend,
            piecash_file=piecash_file,
            base_currency=base_currency,
            book_root_guid=book_root_guid,
        )

    @staticmethod
    def _normalize_path(
        raw_path: str,
        logger,
    ) -> Path | str:
        """Normalize the piecash file path or URI.

        Args:
            raw_path: Raw file path string.
            logger: Logger used for warnings.

        Returns:
            Path | str: Normalized filesystem path or URI string.
        """
        parsed = urlparse(raw_path)
        if parsed.scheme and parsed.scheme != "file":
            return raw_path
        if parsed.scheme == "file":
            raw_path = unquote(parsed.path)
        path = Path(raw_path).expanduser().resolve()
        if not path.exists():
            logger.warning(f"PieCash file does not exist at {path}")
        return path

    @staticmethod
    def _default_piecash_file(logger) -> Path | None:
        """Return the single book found in ``data/``, if any."""
        data_dir = get_project_root() / "data"
        if not data_dir.exists():
            return None
        matches = sorted(data_dir.glob("*.gnucash"))
        if len(matches) == 1:
            return matches[0].resolve()
        if len(matches) > 1:
            logger.warning(
                "Multiple .gnucash files found in data/. "
                "Set PIECASH_FILE to choose one."
            )
        return None


__all__ = ["LedgerSettings", "SUPPORTED_BACKENDS"]
