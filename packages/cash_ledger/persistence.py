"""SQLAlchemy-backed document store.

Documents live in ``ledger_documents`` (owned by ``libs/db``), one row per
path with the JSON body. Sessions come from ``db.client.session_scope`` so
each ``put`` is its own short transaction. Change notifications are
delivered in-process after the commit succeeds.
"""

from __future__ import annotations

from typing import Any

from db.client import create_schema, session_scope
from db.models.documents import LedgerDocument
from sqlalchemy import func, select

from .logging_setup import get_logger
from .store import ChangeCallback, SubscriberRegistry, Unsubscribe

_logger = get_logger("cash_ledger.persistence")


class SqlDocumentStore:
    """:class:`~cash_ledger.store.DocumentStore` over a SQL database.

    Parameters
    ----------
    database_url:
        SQLAlchemy URL. Falls back to ``DATABASE_URL`` when ``None``.
    create_tables:
        Create the ``ledger_documents`` table when missing (default True).
    """

    def __init__(self, database_url: str | None = None, *, create_tables: bool = True) -> None:
        self._database_url = database_url
        self._subscribers = SubscriberRegistry()
        if create_tables:
            create_schema(database_url=database_url)

    def get(self, path: str) -> Any | None:
        with session_scope(database_url=self._database_url) as session:
            doc = session.get(LedgerDocument, path)
            return None if doc is None else doc.body

    def put(self, path: str, value: Any | None) -> None:
        with session_scope(database_url=self._database_url) as session:
            doc = session.get(LedgerDocument, path)
            if value is None:
                if doc is not None:
                    session.delete(doc)
            elif doc is None:
                session.add(LedgerDocument(path=path, body=value))
            else:
                doc.body = value
                doc.updated_at = func.now()
        _logger.debug("store:put path=%s deleted=%s", path, value is None)
        self._subscribers.notify(path, value)

    def subscribe(self, path: str, on_change: ChangeCallback) -> Unsubscribe:
        unsubscribe = self._subscribers.add(path, on_change)
        on_change(self.get(path))
        return unsubscribe

    def list_paths(self, prefix: str) -> list[str]:
        # Escape LIKE wildcards so zone names cannot widen the scan.
        escaped = prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        stmt = (
            select(LedgerDocument.path)
            .where(LedgerDocument.path.like(f"{escaped}%", escape="\\"))
            .order_by(LedgerDocument.path)
        )
        with session_scope(database_url=self._database_url) as session:
            return list(session.execute(stmt).scalars())


__all__ = ["SqlDocumentStore"]
