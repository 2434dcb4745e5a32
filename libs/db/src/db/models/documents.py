from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, String, text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# ---------------------------
# Core: ledger_documents
# ---------------------------


class LedgerDocument(Base):
    """One JSON document per store path (e.g. ``weeks/2025-03-03/data``).

    The store is path-addressed: the whole document is replaced on every
    write (last writer wins). Absence of a row means "empty", never an error.
    """

    __tablename__ = "ledger_documents"

    # Slash-separated path; delivery paths end in an ISO date so prefix
    # scans sort chronologically.
    path: Mapped[str] = mapped_column(String(255), primary_key=True)
    body: Mapped[Any] = mapped_column(JSON, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )


__all__ = [
    "Base",
    "LedgerDocument",
]
