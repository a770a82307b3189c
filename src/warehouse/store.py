"""
Target stores: where committed conformed and dimensional tables live.

Every load is a full refresh. replace_all() swaps the given tables in one
step: readers see either the previous state or the new one, never a mix.
"""

import threading
import types
import typing
from collections.abc import Mapping, Sequence
from datetime import date
from typing import Protocol

from psycopg import sql
from pydantic import BaseModel

from src.core.models import (
    CategoryRecord,
    CustomerDimensionRow,
    CustomerRecord,
    ErpCustomerRecord,
    LocationRecord,
    ProductDimensionRow,
    ProductRecord,
    SalesFactRow,
    SalesLineRecord,
)
from src.observability.logger import get_logger

from .connection import DatabaseConnectionPool

logger = get_logger(__name__)

CONFORMED_TARGETS: dict[str, type[BaseModel]] = {
    "customers": CustomerRecord,
    "products": ProductRecord,
    "sales_lines": SalesLineRecord,
    "erp_customers": ErpCustomerRecord,
    "erp_locations": LocationRecord,
    "erp_categories": CategoryRecord,
}

DIMENSIONAL_TARGETS: dict[str, type[BaseModel]] = {
    "dim_customers": CustomerDimensionRow,
    "dim_products": ProductDimensionRow,
    "fact_sales": SalesFactRow,
}

TARGETS: dict[str, type[BaseModel]] = {**CONFORMED_TARGETS, **DIMENSIONAL_TARGETS}

LAYER_TARGETS = {
    "conformed": tuple(CONFORMED_TARGETS),
    "dimensional": tuple(DIMENSIONAL_TARGETS),
}

# Row order when reading tables back
ORDER_BY = {
    "customers": ("customer_id",),
    "products": ("product_number", "start_date", "product_id"),
    "sales_lines": ("order_number", "product_number"),
    "erp_customers": ("customer_number",),
    "erp_locations": ("customer_number",),
    "erp_categories": ("category_id",),
    "dim_customers": ("customer_key",),
    "dim_products": ("product_key",),
    "fact_sales": ("order_number", "product_number"),
}


def layer_of(target: str) -> str:
    if target in CONFORMED_TARGETS:
        return "conformed"
    if target in DIMENSIONAL_TARGETS:
        return "dimensional"
    raise ValueError(f"Unknown target table: {target}")


def targets_for(scope: str) -> tuple[str, ...]:
    """Targets covered by a scope: a layer name or "all"."""
    if scope == "all":
        return tuple(TARGETS)
    try:
        return LAYER_TARGETS[scope]
    except KeyError:
        raise ValueError(f"Unknown scope '{scope}'. Expected conformed, dimensional or all") from None


def _check_rows(target: str, rows: Sequence[BaseModel]) -> None:
    model = TARGETS.get(target)
    if model is None:
        raise ValueError(f"Unknown target table: {target}")
    for row in rows:
        if not isinstance(row, model):
            raise TypeError(f"Target '{target}' expects {model.__name__}, got {type(row).__name__}")


class TargetStore(Protocol):
    """Committed state of the warehouse tables."""

    def replace_all(self, tables: Mapping[str, Sequence[BaseModel]]) -> None:
        ...

    def load(self, target: str) -> list[BaseModel]:
        ...


def load_scope(store: TargetStore, scope: str) -> dict[str, list[BaseModel]]:
    """Read every table of a scope from a store."""
    return {target: store.load(target) for target in targets_for(scope)}


class InMemoryTargetStore:
    """Holds committed tables in process memory."""

    def __init__(self):
        self._tables: dict[str, tuple[BaseModel, ...]] = {}
        self._lock = threading.Lock()

    def replace_all(self, tables: Mapping[str, Sequence[BaseModel]]) -> None:
        for target, rows in tables.items():
            _check_rows(target, rows)

        with self._lock:
            snapshot = dict(self._tables)
            snapshot.update({target: tuple(rows) for target, rows in tables.items()})
            self._tables = snapshot

    def load(self, target: str) -> list[BaseModel]:
        if target not in TARGETS:
            raise ValueError(f"Unknown target table: {target}")
        return list(self._tables.get(target, ()))


def _sql_type(annotation) -> str:
    args = [a for a in typing.get_args(annotation) if a is not type(None)]
    if isinstance(annotation, types.UnionType) or typing.get_origin(annotation) is typing.Union:
        annotation = args[0]
    if annotation is int:
        return "BIGINT"
    if annotation is float:
        return "DOUBLE PRECISION"
    if annotation is date:
        return "DATE"
    return "TEXT"


class PostgresTargetStore:
    """
    Stores tables in PostgreSQL, one schema per layer.

    replace_all() truncates and reloads every given table in a single
    transaction; a failure rolls the whole refresh back.
    """

    def __init__(self, pool: DatabaseConnectionPool):
        self.pool = pool

    @staticmethod
    def _table(target: str) -> sql.Identifier:
        return sql.Identifier(layer_of(target), target)

    @staticmethod
    def _columns(target: str) -> list[str]:
        return list(TARGETS[target].model_fields)

    def create_tables(self) -> None:
        """Create the layer schemas and target tables if they do not exist."""
        with self.pool.get_connection() as conn:
            with conn.transaction():
                with conn.cursor() as cur:
                    for layer in LAYER_TARGETS:
                        cur.execute(sql.SQL("CREATE SCHEMA IF NOT EXISTS {}").format(sql.Identifier(layer)))
                    for target, model in TARGETS.items():
                        columns = sql.SQL(", ").join(
                            sql.SQL("{} {}").format(sql.Identifier(name), sql.SQL(_sql_type(field.annotation)))
                            for name, field in model.model_fields.items()
                        )
                        cur.execute(
                            sql.SQL("CREATE TABLE IF NOT EXISTS {} ({})").format(self._table(target), columns)
                        )

    def replace_all(self, tables: Mapping[str, Sequence[BaseModel]]) -> None:
        for target, rows in tables.items():
            _check_rows(target, rows)

        with self.pool.get_connection() as conn:
            with conn.transaction():
                with conn.cursor() as cur:
                    for target, rows in tables.items():
                        columns = self._columns(target)
                        cur.execute(sql.SQL("TRUNCATE TABLE {}").format(self._table(target)))
                        if not rows:
                            continue
                        insert = sql.SQL("INSERT INTO {} ({}) VALUES ({})").format(
                            self._table(target),
                            sql.SQL(", ").join(map(sql.Identifier, columns)),
                            sql.SQL(", ").join(sql.Placeholder() * len(columns)),
                        )
                        cur.executemany(
                            insert,
                            [tuple(getattr(row, c) for c in columns) for row in rows]
                        )
                        logger.debug(
                            f"Loaded {len(rows)} rows into {target}",
                            extra={"target": target, "rows": len(rows)}
                        )

    def load(self, target: str) -> list[BaseModel]:
        model = TARGETS.get(target)
        if model is None:
            raise ValueError(f"Unknown target table: {target}")

        query = sql.SQL("SELECT {} FROM {} ORDER BY {}").format(
            sql.SQL(", ").join(map(sql.Identifier, self._columns(target))),
            self._table(target),
            sql.SQL(", ").join(map(sql.Identifier, ORDER_BY[target])),
        )
        with self.pool.get_cursor() as cur:
            cur.execute(query)
            return [model(**row) for row in cur.fetchall()]
