"""
Integration tests for the PostgreSQL target store.

Runs against a PostgreSQL testcontainer; skipped when Docker is unavailable.
"""

from datetime import date

import pytest

from src.batch.pipeline import WarehousePipeline
from src.batch.readers import InMemorySourceProvider
from src.core.errors import SourceReadFailure
from src.core.models import CustomerRecord, ProductDimensionRow
from src.warehouse import TARGETS, PostgresTargetStore, UnitOfWork

pytestmark = [pytest.mark.integration, pytest.mark.slow]


@pytest.fixture
def pg_store(db_pool):
    store = PostgresTargetStore(db_pool)
    store.create_tables()
    store.replace_all({target: [] for target in TARGETS})
    return store


def test_create_tables_is_idempotent(pg_store):
    pg_store.create_tables()
    assert pg_store.load("customers") == []


def test_round_trip_with_nulls(pg_store):
    rows = [
        ProductDimensionRow(product_key=2, product_id=212, product_number="BK-R93R-62",
                            cost=2200.0, start_date=date(2012, 7, 1)),
        ProductDimensionRow(product_key=1, product_id=210, product_number="FR-R92B-58",
                            category=None, start_date=date(2003, 7, 1)),
    ]

    pg_store.replace_all({"dim_products": rows})

    assert pg_store.load("dim_products") == sorted(rows, key=lambda r: r.product_key)


def test_replace_all_truncates(pg_store):
    pg_store.replace_all({"customers": [CustomerRecord(customer_id=1), CustomerRecord(customer_id=2)]})
    pg_store.replace_all({"customers": [CustomerRecord(customer_id=3)]})

    assert [c.customer_id for c in pg_store.load("customers")] == [3]


def test_unit_of_work_failure_keeps_previous_tables(pg_store):
    pg_store.replace_all({"customers": [CustomerRecord(customer_id=1)]})

    with pytest.raises(RuntimeError):
        with UnitOfWork(pg_store) as uow:
            uow.stage("customers", [CustomerRecord(customer_id=2)])
            raise RuntimeError("assembly failed")

    assert [c.customer_id for c in pg_store.load("customers")] == [1]


@pytest.mark.e2e
def test_pipeline_against_postgres(pg_store, sample_source_rows, rule_engine, normalizer):
    pipeline = WarehousePipeline(
        InMemorySourceProvider(sample_source_rows), pg_store, rule_engine, normalizer, as_of=date(2026, 1, 1)
    )

    result = pipeline.run_pipeline()

    assert result.status == "success"
    assert len(pg_store.load("fact_sales")) == 4
    assert [row.product_number for row in pg_store.load("dim_products")] == [
        "FR-R92B-58", "BK-R93R-62", "HL-U509-R",
    ]

    recheck = pipeline.run_quality_checks("dimensional")
    assert recheck.get("fact_sales_product_resolves").violating_record_identifiers == ["SO43699:XX-9999"]


@pytest.mark.e2e
def test_failed_run_leaves_postgres_untouched(pg_store, sample_source_rows, rule_engine, normalizer):
    WarehousePipeline(
        InMemorySourceProvider(sample_source_rows), pg_store, rule_engine, normalizer, as_of=date(2026, 1, 1)
    ).run_pipeline()
    before = pg_store.load("dim_customers")

    class BrokenSource(InMemorySourceProvider):
        def read_all(self, entity):
            if entity == "sales_lines":
                raise SourceReadFailure(entity, "truncated extract")
            return super().read_all(entity)

    result = WarehousePipeline(
        BrokenSource(sample_source_rows), pg_store, rule_engine, normalizer
    ).run_pipeline()

    assert result.status == "failed"
    assert pg_store.load("dim_customers") == before
