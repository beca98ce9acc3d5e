# File path: modules/backend/client.py

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from flask import current_app
from sqlalchemy import inspect, or_
from sqlalchemy.exc import SQLAlchemyError

from database.models import db

logger = logging.getLogger(__name__)


ROLE_ANON = "anon"
ROLE_SERVICE = "service_role"

# Row-level security: writes to these tables need the service role.
SERVICE_ROLE_TABLES = frozenset({"ncrs", "vendor_operations", "job_timelines"})
# Reads too.
SERVICE_ROLE_READ_TABLES = frozenset({"ncrs"})

FILTER_OPS = ("eq", "neq", "gt", "gte", "lt", "lte", "in", "is", "isnot", "ilike")

Filter = Tuple[str, str, Any]
Filters = Union[Dict[str, Any], Sequence[Filter], None]


class BackendError(Exception):
    pass


class TableMissingError(BackendError):
    pass


class PermissionDeniedError(BackendError):
    pass


class ConfigError(BackendError):
    pass


def _model_for(table: str):
    for mapper in db.Model.registry.mappers:
        if getattr(mapper.local_table, "name", None) == table:
            return mapper.class_
    raise TableMissingError(f"Table '{table}' does not exist")


def _column_attrs(model) -> Dict[str, str]:
    """Database column name -> mapped attribute key."""
    return {prop.columns[0].name: prop.key for prop in inspect(model).column_attrs}


def parse_datetime(value):
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    text = str(value).strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _serialize(value):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


class TableClient:
    """
    Table-name addressed access to the backend.

    Every verb is one unit of work: it commits on success, rolls back and
    raises BackendError on failure. Rows go in and come out as plain dicts
    keyed by database column name.
    """

    def __init__(self, role: str = ROLE_ANON):
        if role not in (ROLE_ANON, ROLE_SERVICE):
            raise ValueError(f"Unknown backend role: {role}")
        self.role = role

    def __repr__(self):
        return f"<TableClient role={self.role}>"

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _authorize(self, table: str, write: bool) -> None:
        if self.role == ROLE_SERVICE:
            return
        guarded = SERVICE_ROLE_TABLES if write else SERVICE_ROLE_READ_TABLES
        if table in guarded:
            action = "write" if write else "read"
            raise PermissionDeniedError(
                f"Row-level security: role '{self.role}' cannot {action} '{table}'"
            )

    def _column(self, model, name: str):
        attrs = _column_attrs(model)
        key = attrs.get(name)
        if key is None and name in attrs.values():
            key = name
        if key is None:
            raise BackendError(f"Column '{name}' does not exist on '{model.__tablename__}'")
        return getattr(model, key)

    def _coerce(self, column, value):
        if value is None:
            return None
        python_type = None
        try:
            python_type = column.type.python_type
        except NotImplementedError:
            return value
        if python_type is datetime:
            return parse_datetime(value)
        if python_type is float and value != "":
            return float(value)
        if python_type is int and value != "" and not isinstance(value, bool):
            return int(value)
        return value

    def _conditions(self, model, filters: Filters) -> List:
        if not filters:
            return []
        if isinstance(filters, dict):
            filters = [(name, "eq", value) for name, value in filters.items()]

        conds = []
        for name, op, value in filters:
            if op not in FILTER_OPS:
                raise BackendError(f"Unsupported filter operator '{op}'")
            col = self._column(model, name)
            if op == "in":
                conds.append(col.in_([self._coerce(col, v) for v in value]))
            elif op == "is":
                conds.append(col.is_(value))
            elif op == "isnot":
                conds.append(col.isnot(value))
            elif op == "ilike":
                conds.append(col.ilike(value))
            else:
                try:
                    v = self._coerce(col, value)
                except (TypeError, ValueError) as e:
                    raise BackendError(f"Invalid filter value for '{name}': {value!r}") from e
                conds.append({
                    "eq": lambda: col == v,
                    "neq": lambda: col != v,
                    "gt": lambda: col > v,
                    "gte": lambda: col >= v,
                    "lt": lambda: col < v,
                    "lte": lambda: col <= v,
                }[op]())
        return conds

    def _to_dict(self, model, obj) -> Dict[str, Any]:
        return {
            name: _serialize(getattr(obj, key))
            for name, key in _column_attrs(model).items()
        }

    def _assign(self, model, obj, row: Dict[str, Any]) -> None:
        attrs = _column_attrs(model)
        for name, value in row.items():
            key = attrs.get(name)
            if key is None:
                if name in attrs.values():
                    key = name
                else:
                    raise BackendError(f"Column '{name}' does not exist on '{model.__tablename__}'")
            try:
                coerced = self._coerce(getattr(model, key), value)
            except (TypeError, ValueError) as e:
                raise BackendError(f"Invalid value for '{name}': {value!r}") from e
            setattr(obj, key, coerced)

    @contextmanager
    def _unit_of_work(self, source: str, commit: bool = True):
        try:
            yield
            if commit:
                db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise BackendError(f"{source} failed: {e}") from e
        except BackendError:
            db.session.rollback()
            raise

    # ------------------------------------------------------------------
    # verbs
    # ------------------------------------------------------------------
    def select(
        self,
        table: str,
        filters: Filters = None,
        or_filters: Filters = None,
        order_by: Optional[str] = None,
        desc: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        model = _model_for(table)
        self._authorize(table, write=False)

        q = db.session.query(model)
        for cond in self._conditions(model, filters):
            q = q.filter(cond)
        if or_filters:
            q = q.filter(or_(*self._conditions(model, or_filters)))
        if order_by:
            col = self._column(model, order_by)
            q = q.order_by(col.desc() if desc else col.asc())
        q = q.order_by(model.id.asc())
        if limit:
            q = q.limit(int(limit))

        with self._unit_of_work(f"select {table}", commit=False):
            rows = q.all()
        return [self._to_dict(model, r) for r in rows]

    def count(self, table: str, filters: Filters = None) -> int:
        model = _model_for(table)
        self._authorize(table, write=False)
        q = db.session.query(model)
        for cond in self._conditions(model, filters):
            q = q.filter(cond)
        with self._unit_of_work(f"count {table}", commit=False):
            return q.count()

    def insert(self, table: str, rows: Union[Dict, Iterable[Dict]]) -> List[Dict[str, Any]]:
        model = _model_for(table)
        self._authorize(table, write=True)
        rows = [rows] if isinstance(rows, dict) else list(rows)

        created = []
        with self._unit_of_work(f"insert {table}"):
            for row in rows:
                obj = model()
                self._assign(model, obj, row)
                db.session.add(obj)
                created.append(obj)
            db.session.flush()
            out = [self._to_dict(model, obj) for obj in created]
        return out

    def upsert(
        self,
        table: str,
        rows: Union[Dict, Iterable[Dict]],
        on_conflict: Union[str, Sequence[str]] = "id",
    ) -> List[Dict[str, Any]]:
        """
        Insert or update on the conflict columns (comma separated or a list).
        Repeated keys inside one call resolve to the last row.
        """
        model = _model_for(table)
        self._authorize(table, write=True)
        rows = [rows] if isinstance(rows, dict) else list(rows)
        keys = [on_conflict] if isinstance(on_conflict, str) else list(on_conflict)
        if len(keys) == 1 and "," in keys[0]:
            keys = [k.strip() for k in keys[0].split(",")]

        touched = []
        with self._unit_of_work(f"upsert {table}"):
            for row in rows:
                existing = None
                if all(row.get(k) is not None for k in keys):
                    q = db.session.query(model)
                    for cond in self._conditions(model, [(k, "eq", row[k]) for k in keys]):
                        q = q.filter(cond)
                    existing = q.first()
                obj = existing or model()
                self._assign(model, obj, row)
                if existing is None:
                    db.session.add(obj)
                    db.session.flush()
                if obj not in touched:
                    touched.append(obj)
            db.session.flush()
            out = [self._to_dict(model, obj) for obj in touched]
        return out

    def update(self, table: str, values: Dict[str, Any], filters: Filters) -> List[Dict[str, Any]]:
        if not filters:
            raise BackendError("update requires a filter")
        model = _model_for(table)
        self._authorize(table, write=True)

        with self._unit_of_work(f"update {table}"):
            q = db.session.query(model)
            for cond in self._conditions(model, filters):
                q = q.filter(cond)
            objs = q.all()
            for obj in objs:
                self._assign(model, obj, values)
            db.session.flush()
            out = [self._to_dict(model, obj) for obj in objs]
        return out

    def delete(self, table: str, filters: Filters) -> int:
        """Delete matching rows. A filter is required; use ('id', 'neq', 0) to clear."""
        if not filters:
            raise BackendError("delete requires a filter")
        model = _model_for(table)
        self._authorize(table, write=True)

        with self._unit_of_work(f"delete {table}"):
            q = db.session.query(model)
            for cond in self._conditions(model, filters):
                q = q.filter(cond)
            objs = q.all()
            for obj in objs:
                db.session.delete(obj)
        return len(objs)

    # ------------------------------------------------------------------
    # schema introspection
    # ------------------------------------------------------------------
    def table_exists(self, table: str) -> bool:
        try:
            _model_for(table)
        except TableMissingError:
            return False
        with self._unit_of_work(f"inspect {table}", commit=False):
            return inspect(db.engine).has_table(table)

    def list_tables(self) -> List[str]:
        with self._unit_of_work("list tables", commit=False):
            return sorted(inspect(db.engine).get_table_names())


def public_client() -> TableClient:
    return TableClient(ROLE_ANON)


def service_client() -> TableClient:
    key = current_app.config.get("BACKEND_SERVICE_ROLE_KEY")
    if not key:
        raise ConfigError("BACKEND_SERVICE_ROLE_KEY is not configured")
    return TableClient(ROLE_SERVICE)


def handle_db_error(error: Exception, source: str) -> None:
    logger.error("Database error in %s: %s", source, error)
