# src/infra/document_store.py
"""
Документное хранилище поверх PostgreSQL JSONB.

Каждая коллекция — таблица (id TEXT PRIMARY KEY, doc JSONB).
Фильтры: равенство, $in, $ne, $gt, $gte, $lt, $lte.
Обновления: $set, $inc.

Построители SQL — чистые функции (build_where, build_update),
чтобы их можно было проверять без базы.
"""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable

import asyncpg
from pydantic_core import to_jsonable_python

from src.common.logger import log_debug, log_error
from src.infra.database import DatabaseManager, get_db
from src.shared.errors import InfrastructureError

# Коллекции, объявленные в migrations/init.sql
COLLECTIONS = ("passengers", "routes", "trips", "tickets", "payments", "notifications")

_FIELD_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_COMPARISONS = {"$gt": ">", "$gte": ">=", "$lt": "<", "$lte": "<="}

Filter = dict[str, Any]
Update = dict[str, dict[str, Any]]
Sort = Iterable[tuple[str, int]]


class DuplicateKeyError(InfrastructureError):
    """Документ с таким ключом (или уникальным полем) уже существует."""

    status_code = 409


# =============================================================================
# ПОСТРОЕНИЕ SQL
# =============================================================================

def _field(name: str) -> str:
    if not _FIELD_RE.match(name):
        raise ValueError(f"Недопустимое имя поля: {name!r}")
    return name


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def _typed_operand(field: str, value: Any) -> tuple[str, Any]:
    """Возвращает выражение над doc и параметр с согласованным типом."""
    value = _plain(value)
    if isinstance(value, bool):
        return f"(doc->>'{field}')::boolean", value
    if isinstance(value, (int, float, Decimal)):
        return f"(doc->>'{field}')::numeric", Decimal(str(value))
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return f"(doc->>'{field}')::timestamptz", value
    return f"doc->>'{field}'", str(value)


def build_where(query: Filter | None, start: int = 1) -> tuple[str, list[Any]]:
    """
    Строит WHERE-условие по фильтру.

    Args:
        query: Фильтр вида {"status": "PAID", "validUntil": {"$lt": now}}
        start: Номер первого позиционного параметра ($start)

    Returns:
        (sql, params)
    """
    if not query:
        return "TRUE", []

    clauses: list[str] = []
    params: list[Any] = []
    index = start

    for raw_field, condition in query.items():
        field = _field(raw_field)
        operators = condition if isinstance(condition, dict) else {"$eq": condition}

        for op, value in operators.items():
            if op == "$eq":
                if value is None:
                    clauses.append(f"doc->>'{field}' IS NULL")
                    continue
                expr, param = _typed_operand(field, value)
                clauses.append(f"{expr} = ${index}")
            elif op == "$ne":
                if value is None:
                    clauses.append(f"doc->>'{field}' IS NOT NULL")
                    continue
                expr, param = _typed_operand(field, value)
                clauses.append(f"{expr} IS DISTINCT FROM ${index}")
            elif op == "$in":
                param = [str(_plain(v)) for v in value]
                clauses.append(f"doc->>'{field}' = ANY(${index}::text[])")
            elif op in _COMPARISONS:
                expr, param = _typed_operand(field, value)
                clauses.append(f"{expr} {_COMPARISONS[op]} ${index}")
            else:
                raise ValueError(f"Неподдерживаемый оператор фильтра: {op}")
            params.append(param)
            index += 1

    return " AND ".join(clauses) if clauses else "TRUE", params


def build_update(update: Update, start: int = 1) -> tuple[str, list[Any]]:
    """
    Строит выражение нового значения doc.

    $set сливает поля в документ, $inc прибавляет число к числовому полю
    (отсутствующее поле считается нулём).
    """
    unknown = set(update) - {"$set", "$inc"}
    if unknown:
        raise ValueError(f"Неподдерживаемые операторы обновления: {sorted(unknown)}")

    expr = "doc"
    params: list[Any] = []
    index = start

    to_set = update.get("$set") or {}
    if to_set:
        for name in to_set:
            _field(name)
        expr = f"({expr} || ${index}::jsonb)"
        params.append(json.dumps(to_jsonable_python(to_set), ensure_ascii=False))
        index += 1

    for name, amount in (update.get("$inc") or {}).items():
        field = _field(name)
        expr = (
            f"jsonb_set({expr}, '{{{field}}}', "
            f"to_jsonb(COALESCE((doc->>'{field}')::numeric, 0) + ${index}::numeric))"
        )
        params.append(Decimal(str(amount)))
        index += 1

    if not params:
        raise ValueError("Пустое обновление")
    return expr, params


def build_order_by(sort: Sort | None) -> str:
    if not sort:
        return ""
    parts = [f"doc->'{_field(name)}' {'DESC' if direction < 0 else 'ASC'}" for name, direction in sort]
    return " ORDER BY " + ", ".join(parts)


def _load(raw: Any) -> dict[str, Any]:
    return json.loads(raw) if isinstance(raw, str) else dict(raw)


def _parse_count(status: str) -> int:
    # asyncpg возвращает статус команды вида "UPDATE 3"
    try:
        return int(status.rsplit(" ", 1)[-1])
    except (ValueError, AttributeError):
        return 0


# =============================================================================
# КОЛЛЕКЦИЯ
# =============================================================================

class Collection:
    """
    Коллекция документов.

    Все ошибки хранилища оборачиваются в InfrastructureError(DATABASE_ERROR).
    """

    def __init__(self, name: str, db: DatabaseManager | None = None) -> None:
        if name not in COLLECTIONS:
            raise ValueError(f"Неизвестная коллекция: {name}")
        self.name = name
        self._db = db

    @property
    def db(self) -> DatabaseManager:
        return self._db or get_db()

    async def _wrap(self, action: str, coro):
        try:
            return await coro
        except asyncpg.UniqueViolationError as e:
            raise DuplicateKeyError(f"{self.name}: документ уже существует ({e.constraint_name})") from e
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, RuntimeError) as e:
            await log_error(f"Ошибка хранилища [{self.name}.{action}]: {e}")
            raise InfrastructureError(f"Ошибка хранилища при операции {action}: {e}") from e

    async def insert_one(self, doc_id: str, doc: dict[str, Any]) -> dict[str, Any]:
        """Вставляет документ с ключом doc_id."""
        payload = json.dumps(to_jsonable_python(doc), ensure_ascii=False)
        await self._wrap(
            "insert_one",
            self.db.execute(f"INSERT INTO {self.name} (id, doc) VALUES ($1, $2::jsonb)", doc_id, payload),
        )
        await log_debug(f"{self.name}: вставлен документ {doc_id}")
        return doc

    async def find_one(self, query: Filter) -> dict[str, Any] | None:
        where, params = build_where(query)
        row = await self._wrap(
            "find_one",
            self.db.fetchrow(f"SELECT doc FROM {self.name} WHERE {where} LIMIT 1", *params),
        )
        return _load(row["doc"]) if row else None

    async def find_by_id(self, doc_id: str) -> dict[str, Any] | None:
        row = await self._wrap(
            "find_by_id",
            self.db.fetchrow(f"SELECT doc FROM {self.name} WHERE id = $1", doc_id),
        )
        return _load(row["doc"]) if row else None

    async def find(
        self,
        query: Filter | None = None,
        sort: Sort | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        where, params = build_where(query)
        sql = f"SELECT doc FROM {self.name} WHERE {where}{build_order_by(sort)}"
        if limit is not None:
            params.append(int(limit))
            sql += f" LIMIT ${len(params)}"
        rows = await self._wrap("find", self.db.fetch(sql, *params))
        return [_load(row["doc"]) for row in rows]

    async def update_one(self, query: Filter, update: Update) -> dict[str, Any] | None:
        """
        Атомарное условное обновление одного документа.

        Условие перепроверяется в самом UPDATE, поэтому из двух конкурентных
        запросов условие выполнит только первый.

        Returns:
            Обновлённый документ или None, если ни один документ не подошёл
        """
        set_expr, set_params = build_update(update)
        where, where_params = build_where(query, start=len(set_params) + 1)
        sql = (
            f"UPDATE {self.name} SET doc = {set_expr} "
            f"WHERE id = (SELECT id FROM {self.name} WHERE {where} LIMIT 1) AND {where} "
            f"RETURNING doc"
        )
        row = await self._wrap("update_one", self.db.fetchrow(sql, *set_params, *where_params))
        return _load(row["doc"]) if row else None

    async def update_many(self, query: Filter, update: Update) -> int:
        """Обновляет все подходящие документы и возвращает их количество."""
        set_expr, set_params = build_update(update)
        where, where_params = build_where(query, start=len(set_params) + 1)
        status = await self._wrap(
            "update_many",
            self.db.execute(f"UPDATE {self.name} SET doc = {set_expr} WHERE {where}", *set_params, *where_params),
        )
        return _parse_count(status)

    async def count(self, query: Filter | None = None) -> int:
        where, params = build_where(query)
        value = await self._wrap(
            "count",
            self.db.fetchval(f"SELECT count(*) FROM {self.name} WHERE {where}", *params),
        )
        return int(value or 0)
