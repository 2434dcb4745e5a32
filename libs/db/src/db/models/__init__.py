from __future__ import annotations

from .documents import Base, LedgerDocument

__all__ = [
    "Base",
    "LedgerDocument",
]
