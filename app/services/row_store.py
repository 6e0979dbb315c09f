"""
Row store - table-oriented access to the shop database.

The shop services only ever need four operations against the backend:
read rows by filter, insert rows, update rows, delete rows. This module
exposes exactly those, keyed by table name, on top of a SQLAlchemy session.
Every write is its own unit of work (committed on success, rolled back on
failure), so callers that chain writes must compensate themselves.
"""
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from sqlalchemy import asc, desc
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import RemoteReadError, RemoteWriteError, ValidationError
from app.models import (
    Campaign, CartItem, Order, OrderItem, ParentInvitation, Product, Profile, School, Store,
)

logger = logging.getLogger(__name__)

TABLES = {
    'campaigns': Campaign,
    'stores': Store,
    'schools': School,
    'profiles': Profile,
    'products': Product,
    'cart_items': CartItem,
    'orders': Order,
    'order_items': OrderItem,
    'parent_invitations': ParentInvitation,
}

_OPERATORS = {
    'eq': lambda col, value: col == value,
    'in': lambda col, value: col.in_(list(value)),
    'gte': lambda col, value: col >= value,
    'lte': lambda col, value: col <= value,
}


class RowStore:
    """Query/insert/update/delete rows by table name."""

    def __init__(self, session: Session, read_retries: int = 2):
        self.session = session
        self.read_retries = max(0, int(read_retries))

    # =====================================================
    # READS
    # =====================================================

    def query(self, table: str, filters: Optional[Mapping[str, Any]] = None,
              order_by: Optional[str] = None) -> List[Any]:
        """
        Return rows of ``table`` matching ``filters``.

        Filters map a column to a value; list, tuple and set values mean IN,
        and ``column__gte`` / ``column__lte`` keys compare ranges.
        ``order_by`` is a column name, prefixed with '-' for descending.
        Reads are retried on OperationalError (timeouts, lost connections).
        """
        model = self._model(table)
        criteria = self._criteria(model, filters)
        ordering = self._ordering(model, order_by)

        attempt = 0
        while True:
            try:
                q = self.session.query(model).filter(*criteria)
                if ordering is not None:
                    q = q.order_by(ordering)
                return q.all()
            except OperationalError as e:
                self.session.rollback()
                if attempt >= self.read_retries:
                    logger.error(f"[STORE] Read on {table} failed after {attempt + 1} attempts: {e}")
                    raise RemoteReadError(payload={'table': table}) from e
                attempt += 1
                logger.warning(f"[STORE] Read on {table} failed, retrying ({attempt}/{self.read_retries})")
            except SQLAlchemyError as e:
                self.session.rollback()
                logger.error(f"[STORE] Read on {table} failed: {e}")
                raise RemoteReadError(payload={'table': table}) from e

    def get(self, table: str, row_id: str) -> Optional[Any]:
        """Return the row with primary key ``row_id`` or None."""
        rows = self.query(table, {'id': row_id})
        return rows[0] if rows else None

    # =====================================================
    # WRITES (never retried)
    # =====================================================

    def insert(self, table: str, rows: Iterable[Dict[str, Any]]) -> List[Any]:
        """Insert ``rows`` and return the persisted objects."""
        model = self._model(table)
        objects = []
        for row in rows:
            self._check_columns(model, row.keys())
            objects.append(model(**row))
        if not objects:
            return []

        try:
            self.session.add_all(objects)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"[STORE] Insert into {table} failed: {e}")
            raise RemoteWriteError(payload={'table': table}) from e
        return objects

    def update(self, table: str, filters: Mapping[str, Any], patch: Dict[str, Any]) -> int:
        """Apply ``patch`` to matching rows, returning the number of rows touched."""
        model = self._model(table)
        self._check_columns(model, patch.keys())
        criteria = self._criteria(model, filters)

        try:
            count = self.session.query(model).filter(*criteria).update(
                patch, synchronize_session='fetch'
            )
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"[STORE] Update on {table} failed: {e}")
            raise RemoteWriteError(payload={'table': table}) from e
        return count

    def delete(self, table: str, filters: Mapping[str, Any]) -> int:
        """Delete matching rows, returning the number of rows removed."""
        model = self._model(table)
        criteria = self._criteria(model, filters)
        if not criteria:
            raise ValidationError(f"Suppression sans filtre refusée sur {table}")

        try:
            count = self.session.query(model).filter(*criteria).delete(
                synchronize_session='fetch'
            )
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"[STORE] Delete on {table} failed: {e}")
            raise RemoteWriteError(payload={'table': table}) from e
        return count

    # =====================================================
    # PRIVATE HELPERS
    # =====================================================

    @staticmethod
    def _model(table: str):
        model = TABLES.get(table)
        if model is None:
            raise ValidationError(f"Table inconnue : {table}")
        return model

    @staticmethod
    def _column(model, name: str):
        column = model.__table__.columns.get(name)
        if column is None:
            raise ValidationError(f"Colonne inconnue : {model.__tablename__}.{name}")
        return getattr(model, name)

    def _check_columns(self, model, names: Iterable[str]) -> None:
        for name in names:
            self._column(model, name)

    def _criteria(self, model, filters: Optional[Mapping[str, Any]]) -> list:
        criteria = []
        for key, value in (filters or {}).items():
            name, _, op = key.partition('__')
            if not op:
                op = 'in' if isinstance(value, (list, tuple, set, frozenset)) else 'eq'
            build = _OPERATORS.get(op)
            if build is None:
                raise ValidationError(f"Opérateur de filtre inconnu : {op}")
            criteria.append(build(self._column(model, name), value))
        return criteria

    def _ordering(self, model, order_by: Optional[str]):
        if not order_by:
            return None
        if order_by.startswith('-'):
            return desc(self._column(model, order_by[1:]))
        return asc(self._column(model, order_by))
