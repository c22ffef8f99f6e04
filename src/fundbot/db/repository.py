"""
Record repository

Read-only access to the three record collections (clients, valuations,
transactions) behind one small contract:

    find_one(collection, filters)                     -> dict | None
    find_all(collection, filters, sort=None, limit=None) -> list[dict]

Filters map a record field to Exact, Contains (case-insensitive substring)
or Between (inclusive range). Plain values are treated as Exact.

Two backends are available, selected with STORE_BACKEND:
- memory: lists of dicts, optionally seeded from a JSON file
- sql:    SQLAlchemy async engine over the tables in db.models
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import Select, and_, select
from sqlalchemy.exc import SQLAlchemyError

from ..errors import StoreError
from .models import COLLECTIONS
from .session import create_engine, create_session_factory

logger = logging.getLogger("fundbot.db.repository")

CLIENTS = "clients"
VALUATIONS = "valuations"
TRANSACTIONS = "transactions"

DESC = "desc"
ASC = "asc"

SortSpec = Sequence[Tuple[str, str]]


@dataclass(frozen=True)
class Exact:
    value: Any


@dataclass(frozen=True)
class Contains:
    pattern: str


@dataclass(frozen=True)
class Between:
    lower: Any = None
    upper: Any = None


def _as_condition(value: Any) -> Any:
    if isinstance(value, (Exact, Contains, Between)):
        return value
    return Exact(value)


def _as_date(value: Any) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip()[:10]).date()
        except ValueError:
            return None
    return None


def _sort_key(value: Any) -> Tuple[int, Any]:
    """
    Total ordering for mixed field values: missing < text < numbers < dates.
    Only values of the same rank are ever compared with each other.
    """
    if value is None:
        return (0, "")
    as_day = _as_date(value)
    if as_day is not None:
        return (3, as_day)
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return (2, value)
    return (1, str(value))


# ---------------------------------------------------------------------------
# In-memory backend
# ---------------------------------------------------------------------------

class InMemoryRecordRepository:
    """
    Repository over plain lists of dicts. Used by the CLI demo and tests.
    """

    def __init__(self, collections: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self.collections: Dict[str, List[Dict[str, Any]]] = {name: [] for name in COLLECTIONS}
        for name, records in (collections or {}).items():
            self._check_collection(name)
            self.collections[name] = [dict(r) for r in records]

    @classmethod
    def from_file(cls, path: str) -> "InMemoryRecordRepository":
        """
        Load seed data from a JSON file with "clients", "valuations" and
        "transactions" arrays (all optional).
        """
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(payload, dict):
            raise ValueError(f"Seed file {path} must contain a JSON object")
        seeded = {name: payload.get(name) or [] for name in COLLECTIONS}
        logger.info(
            "Seeded in-memory store from %s (%s)",
            path,
            ", ".join(f"{k}={len(v)}" for k, v in seeded.items()),
        )
        return cls(seeded)

    @staticmethod
    def _check_collection(collection: str) -> None:
        if collection not in COLLECTIONS:
            raise ValueError(f"Unknown collection: {collection}")

    @staticmethod
    def _matches(record: Dict[str, Any], filters: Dict[str, Any]) -> bool:
        for field_name, raw in filters.items():
            cond = _as_condition(raw)
            value = record.get(field_name)
            if isinstance(cond, Exact):
                if value is None or str(value) != str(cond.value):
                    return False
            elif isinstance(cond, Contains):
                if value is None or cond.pattern.lower() not in str(value).lower():
                    return False
            else:
                current = _as_date(value) if isinstance(cond.lower or cond.upper, date) else value
                if current is None:
                    return False
                if cond.lower is not None and current < cond.lower:
                    return False
                if cond.upper is not None and current > cond.upper:
                    return False
        return True

    @staticmethod
    def _sorted(records: List[Dict[str, Any]], sort: Optional[SortSpec]) -> List[Dict[str, Any]]:
        ordered = list(records)
        # Stable sorts applied from the least significant key
        for field_name, direction in reversed(list(sort or [])):
            ordered.sort(key=lambda r, f=field_name: _sort_key(r.get(f)), reverse=(direction == DESC))
        return ordered

    async def find_one(self, collection: str, filters: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        self._check_collection(collection)
        for record in self.collections[collection]:
            if self._matches(record, filters):
                return dict(record)
        return None

    async def find_all(
        self,
        collection: str,
        filters: Dict[str, Any],
        sort: Optional[SortSpec] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        self._check_collection(collection)
        matched = [dict(r) for r in self.collections[collection] if self._matches(r, filters)]
        matched = self._sorted(matched, sort)
        if limit:
            matched = matched[:limit]
        return matched

    async def close(self) -> None:
        return None


# ---------------------------------------------------------------------------
# SQL backend
# ---------------------------------------------------------------------------

def build_select(
    collection: str,
    filters: Dict[str, Any],
    sort: Optional[SortSpec] = None,
    limit: Optional[int] = None,
) -> Select:
    """
    Translate a filter spec into a SELECT on the collection's table.

    Raises:
        ValueError: unknown collection or field.
    """
    model = COLLECTIONS.get(collection)
    if model is None:
        raise ValueError(f"Unknown collection: {collection}")

    def column(field_name: str):
        attr = getattr(model, field_name, None)
        if attr is None:
            raise ValueError(f"Unknown field '{field_name}' for collection '{collection}'")
        return attr

    clauses = []
    for field_name, raw in filters.items():
        cond = _as_condition(raw)
        col = column(field_name)
        if isinstance(cond, Exact):
            clauses.append(col == cond.value)
        elif isinstance(cond, Contains):
            clauses.append(col.ilike(f"%{cond.pattern}%"))
        else:
            if cond.lower is not None:
                clauses.append(col >= cond.lower)
            if cond.upper is not None:
                clauses.append(col <= cond.upper)

    stmt = select(model)
    if clauses:
        stmt = stmt.where(and_(*clauses))
    for field_name, direction in sort or []:
        col = column(field_name)
        stmt = stmt.order_by(col.desc() if direction == DESC else col.asc())
    if limit:
        stmt = stmt.limit(limit)
    return stmt


def row_to_record(row: Any) -> Dict[str, Any]:
    """Mapped row -> dict keyed by record field names (primary key dropped)."""
    return {
        attr.key: getattr(row, attr.key)
        for attr in row.__mapper__.column_attrs
        if attr.key != "id"
    }


class SqlRecordRepository:
    """
    Repository backed by an async SQLAlchemy engine. Driver errors and
    timeouts are raised as StoreError.
    """

    def __init__(self, database_url: str, timeout: float = 10, echo: bool = False):
        self.engine = create_engine(database_url, echo=echo)
        self.session_factory = create_session_factory(self.engine)
        self.timeout = timeout

    async def _fetch(self, stmt: Select) -> List[Any]:
        async with self.session_factory() as session:
            res = await session.execute(stmt)
            return list(res.scalars().all())

    async def _run(self, stmt: Select, collection: str) -> List[Any]:
        try:
            return await asyncio.wait_for(self._fetch(stmt), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.warning("Store query on %s timed out after %ss", collection, self.timeout)
            raise StoreError(f"Query on {collection} timed out") from e
        except (SQLAlchemyError, OSError) as e:
            logger.exception("Store query on %s failed: %s", collection, e)
            raise StoreError(f"Query on {collection} failed") from e

    async def find_one(self, collection: str, filters: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        rows = await self._run(build_select(collection, filters, limit=1), collection)
        return row_to_record(rows[0]) if rows else None

    async def find_all(
        self,
        collection: str,
        filters: Dict[str, Any],
        sort: Optional[SortSpec] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        rows = await self._run(build_select(collection, filters, sort=sort, limit=limit), collection)
        return [row_to_record(r) for r in rows]

    async def close(self) -> None:
        try:
            await self.engine.dispose()
        except Exception:
            logger.exception("Error disposing engine on shutdown")


def get_repository(settings: Any):
    """
    Build the repository selected by settings.store_backend.
    """
    if settings.store_backend == "sql":
        logger.info("Using SQL record store")
        return SqlRecordRepository(settings.database_url, timeout=settings.store_timeout_seconds)
    if settings.store_seed_file:
        return InMemoryRecordRepository.from_file(settings.store_seed_file)
    logger.warning("Using empty in-memory record store; set STORE_SEED_FILE or STORE_BACKEND=sql")
    return InMemoryRecordRepository()
