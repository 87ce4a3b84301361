"""Helpers for importing piecash and opening books read-only."""

from __future__ import annotations

import inspect
import warnings
from pathlib import Path
from urllib.parse import urlparse

from sqlalchemy.exc import SAWarning

_PIECASH = None


def _patch_sqlalchemy_for_piecash() -> None:
    """Drop the ``constructor`` argument older piecash passes to SQLAlchemy 2."""
    from sqlalchemy.orm import decl_api

    signature = inspect.signature(decl_api.registry.generate_base)
    if "constructor" in signature.parameters:
        return
    original = decl_api.registry.generate_base
    if getattr(original, "_ledger_patched", False):
        return

    def _generate_base(self, *args, **kwargs):
        kwargs.pop("constructor", None)
        return original(self, *args, **kwargs)

    _generate_base._ledger_patched = True  # type: ignore[attr-defined]
    decl_api.registry.generate_base = _generate_base


def load_piecash():
    """Import piecash once, with SQLAlchemy warnings silenced."""
    global _PIECASH
    if _PIECASH is None:
        _patch_sqlalchemy_for_piecash()
        warnings.filterwarnings("ignore", category=SAWarning)
        import piecash

        _PIECASH = piecash
    return _PIECASH


def book_location(book_path: Path | str) -> tuple[str | None, str | None]:
    """Split a book location into ``(sqlite_file, uri_conn)``.

    Args:
        book_path: Filesystem path, ``file://`` URI or database URI.

    Returns:
        tuple[str | None, str | None]: Exactly one of the two is set.
    """
    if isinstance(book_path, Path):
        return str(book_path), None
    parsed = urlparse(book_path)
    if parsed.scheme and parsed.scheme != "file":
        return None, book_path
    raw_path = parsed.path if parsed.scheme == "file" else book_path
    return str(Path(raw_path).expanduser().resolve()), None


def open_piecash_book(piecash, book_path: Path | str):
    """Open a book read-only, even when GnuCash holds the lock."""
    sqlite_file, uri_conn = book_location(book_path)
    return piecash.open_book(
        sqlite_file=sqlite_file,
        uri_conn=uri_conn,
        readonly=True,
        open_if_lock=True,
        do_backup=False,
    )


__all__ = ["load_piecash", "book_location", "open_piecash_book"]
