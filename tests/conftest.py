"""
Pytest configuration and fixtures for sales-warehouse-pipeline tests

This module provides shared fixtures for unit, integration, and E2E tests.
"""
import os
from datetime import date
from typing import Generator

import pytest

from src.core.rules import RuleConfigLoader, RuleEngine
from src.core.transforms import RecordConformer, VocabularyLoader


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that require Spark or Docker containers"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests that run the full pipeline"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that take more than 5 seconds to run"
    )


# =======================
# SPARK FIXTURES
# =======================

@pytest.fixture(scope="session")
def spark_session():
    """
    Create a Spark session for testing with local mode

    Yields:
        SparkSession configured for local testing
    """
    from pyspark.sql import SparkSession

    spark = (
        SparkSession.builder
        .appName("sales-warehouse-test")
        .master("local[2]")
        .config("spark.sql.shuffle.partitions", "2")
        .config("spark.driver.memory", "1g")
        .config("spark.ui.enabled", "false")
        .getOrCreate()
    )
    spark.sparkContext.setLogLevel("WARN")

    yield spark

    spark.stop()


# =======================
# DATABASE FIXTURES (Testcontainers)
# =======================

@pytest.fixture(scope="session")
def postgres_container():
    """
    Start a PostgreSQL container; skips when Docker is not available

    Yields:
        PostgresContainer instance
    """
    from testcontainers.postgres import PostgresContainer

    container = PostgresContainer(
        image="postgres:16.2-alpine",
        username="test_pipeline",
        password="test_password",
        dbname="test_warehouse",
    )
    try:
        container.start()
    except Exception as e:
        pytest.skip(f"Docker is not available: {e}")

    yield container

    container.stop()


@pytest.fixture(scope="function")
def db_pool(postgres_container) -> Generator:
    """
    Open a connection pool against the test container

    Yields:
        Open DatabaseConnectionPool
    """
    from src.warehouse.connection import DatabaseConnectionPool

    pool = DatabaseConnectionPool(
        host=postgres_container.get_container_host_ip(),
        port=int(postgres_container.get_exposed_port(5432)),
        database="test_warehouse",
        user="test_pipeline",
        password="test_password",
    )
    with pool:
        yield pool


# =======================
# CONFIGURATION FIXTURES
# =======================

@pytest.fixture(scope="session")
def test_env_vars():
    """Load config/test.env into the environment when present"""
    from dotenv import load_dotenv

    env_path = os.path.join(os.path.dirname(os.path.dirname(__file__)), "config", "test.env")
    if os.path.exists(env_path):
        load_dotenv(env_path, override=True)


@pytest.fixture(scope="session")
def normalizer():
    """Normalizer built from the shipped vocabularies"""
    return VocabularyLoader().load()


@pytest.fixture(scope="session")
def quality_rules():
    """Quality rules shipped with the pipeline"""
    return RuleConfigLoader().load_rules()


@pytest.fixture
def rule_engine(quality_rules, normalizer):
    return RuleEngine(quality_rules, normalizer=normalizer)


@pytest.fixture
def conformer(normalizer):
    return RecordConformer(normalizer, as_of=date(2026, 1, 1))


# =======================
# SOURCE DATA FIXTURES
# =======================

@pytest.fixture
def sample_source_rows() -> dict[str, list[dict]]:
    """
    A small but dirty CRM/ERP extract.

    - customer 11000 appears twice (the 2025-10-06 row is the latest)
    - one customer row has no id
    - customer 11002 has no sales
    - product BK-R93R-62 has a historical and a current version
    - sales line SO43699 references a product that does not exist
    - SO43698 has no amount, SO43700 a negative price and no order date
    """
    return {
        "customers": [
            {"cst_id": "11000", "cst_key": "AW00011000", "cst_firstname": " Jon",
             "cst_lastname": "Yang ", "cst_marital_status": "M", "cst_gndr": "M",
             "cst_create_date": "2025-10-06"},
            {"cst_id": "11000", "cst_key": "AW00011000", "cst_firstname": "Jonathan",
             "cst_lastname": "Yang", "cst_marital_status": "S", "cst_gndr": "M",
             "cst_create_date": "2025-01-01"},
            {"cst_id": "11001", "cst_key": "AW00011001", "cst_firstname": "Eugene",
             "cst_lastname": "Huang", "cst_marital_status": "s", "cst_gndr": None,
             "cst_create_date": "2025-10-06"},
            {"cst_id": None, "cst_key": "AW00099999", "cst_firstname": "Ghost",
             "cst_lastname": "Row", "cst_marital_status": "M", "cst_gndr": "F",
             "cst_create_date": "2025-10-06"},
            {"cst_id": "11002", "cst_key": "AW00011002", "cst_firstname": "Ruben",
             "cst_lastname": "Torres", "cst_marital_status": "M", "cst_gndr": "M",
             "cst_create_date": "2025-10-06"},
        ],
        "products": [
            {"prd_id": "210", "prd_key": "CO-RF-FR-R92B-58", "prd_nm": "HL Road Frame - Black- 58",
             "prd_cost": None, "prd_line": "R ", "prd_start_dt": "2003-07-01", "prd_end_dt": None},
            {"prd_id": "211", "prd_key": "BI-RB-BK-R93R-62", "prd_nm": "Road-150 Red- 62",
             "prd_cost": "2171", "prd_line": "R", "prd_start_dt": "2011-07-01",
             "prd_end_dt": "2011-12-28"},
            {"prd_id": "212", "prd_key": "BI-RB-BK-R93R-62", "prd_nm": "Road-150 Red- 62",
             "prd_cost": "2200", "prd_line": "R", "prd_start_dt": "2012-07-01", "prd_end_dt": None},
            {"prd_id": "213", "prd_key": "AC-HE-HL-U509-R", "prd_nm": "Sport-100 Helmet- Red",
             "prd_cost": "13", "prd_line": "S", "prd_start_dt": "2013-07-01", "prd_end_dt": None},
        ],
        "sales_lines": [
            {"sls_ord_num": "SO43697", "sls_prd_key": "BK-R93R-62", "sls_cust_id": "11000",
             "sls_order_dt": "20101229", "sls_ship_dt": "20110105", "sls_due_dt": "20110110",
             "sls_sales": "3578", "sls_quantity": "1", "sls_price": "3578"},
            {"sls_ord_num": "SO43698", "sls_prd_key": "FR-R92B-58", "sls_cust_id": "11001",
             "sls_order_dt": "20101229", "sls_ship_dt": "20110105", "sls_due_dt": "20110110",
             "sls_sales": None, "sls_quantity": "2", "sls_price": "1000"},
            {"sls_ord_num": "SO43699", "sls_prd_key": "XX-9999", "sls_cust_id": "11000",
             "sls_order_dt": "20101229", "sls_ship_dt": "20110105", "sls_due_dt": "20110110",
             "sls_sales": "50", "sls_quantity": "1", "sls_price": "50"},
            {"sls_ord_num": "SO43700", "sls_prd_key": "HL-U509-R", "sls_cust_id": "11001",
             "sls_order_dt": "0", "sls_ship_dt": "20110105", "sls_due_dt": "20110110",
             "sls_sales": "35", "sls_quantity": "1", "sls_price": "-35"},
        ],
        "erp_customers": [
            {"cid": "NASAW00011000", "bdate": "1971-10-06", "gen": "Male"},
            {"cid": "AW00011001", "bdate": "1976-05-10", "gen": "F"},
            {"cid": "NASAW00011002", "bdate": "2999-01-01", "gen": ""},
        ],
        "erp_locations": [
            {"cid": "AW-00011000", "cntry": "Australia"},
            {"cid": "AW-00011001", "cntry": "US"},
            {"cid": "AW-00011002", "cntry": "DE "},
        ],
        "erp_categories": [
            {"id": "CO_RF", "cat": "Components", "subcat": "Road Frames", "maintenance": "Yes"},
            {"id": "BI_RB", "cat": "Bikes", "subcat": "Road Bikes", "maintenance": "Yes"},
            {"id": "AC_HE", "cat": "Accessories", "subcat": "Helmets", "maintenance": "Yes"},
        ],
    }
