"""
Unit tests for per-entity conformance of raw source rows.
"""

from datetime import date

import pytest

from src.core.models import RawRecord
from src.core.transforms.conform import ENTITY_SOURCE_SYSTEMS


def raw(entity, rows):
    return [
        RawRecord(entity=entity, source_system=ENTITY_SOURCE_SYSTEMS[entity], fields=row)
        for row in rows
    ]


class TestConformCustomers:

    def test_latest_row_per_customer_survives(self, conformer, sample_source_rows):
        result = conformer.conform("customers", raw("customers", sample_source_rows["customers"]))

        assert [c.customer_id for c in result.records] == [11000, 11001, 11002]
        jon = result.records[0]
        assert jon.first_name == "Jon"
        assert jon.last_name == "Yang"
        assert jon.marital_status == "Married"
        assert jon.create_date == date(2025, 10, 6)

    def test_drop_counts(self, conformer, sample_source_rows):
        result = conformer.conform("customers", raw("customers", sample_source_rows["customers"]))

        assert result.null_keys_dropped == 1
        assert result.duplicates_dropped == 1
        assert result.faults == []
        assert result.dropped == 1

    def test_missing_gender_normalized_to_sentinel(self, conformer, sample_source_rows):
        result = conformer.conform("customers", raw("customers", sample_source_rows["customers"]))
        eugene = result.records[1]
        assert eugene.gender == "n/a"
        assert eugene.marital_status == "Single"

    def test_unparseable_id_is_a_fault(self, conformer):
        rows = raw("customers", [
            {"cst_id": "abc", "cst_key": "AW1", "cst_create_date": "2025-01-01"},
            {"cst_id": "1", "cst_key": "AW2", "cst_create_date": "2025-01-01"},
        ])
        result = conformer.conform("customers", rows)

        assert [c.customer_id for c in result.records] == [1]
        assert len(result.faults) == 1
        assert result.faults[0].record_id == "customers:abc"


class TestConformProducts:

    def test_keys_split_and_ranges_derived(self, conformer, sample_source_rows):
        result = conformer.conform("products", raw("products", sample_source_rows["products"]))
        by_id = {p.product_id: p for p in result.records}

        frame = by_id[210]
        assert frame.category_id == "CO_RF"
        assert frame.product_number == "FR-R92B-58"
        assert frame.cost == 0
        assert frame.product_line == "Road"
        assert frame.is_current

        assert by_id[211].end_date == date(2012, 6, 30)
        assert not by_id[211].is_current
        assert by_id[212].end_date is None

    def test_source_end_date_is_ignored(self, conformer, sample_source_rows):
        result = conformer.conform("products", raw("products", sample_source_rows["products"]))
        historical = next(p for p in result.records if p.product_id == 211)
        assert historical.end_date != date(2011, 12, 28)

    @pytest.mark.parametrize("row", [
        {"prd_id": None, "prd_key": "CO-RF-FR-R92B-58", "prd_start_dt": "2003-07-01"},
        {"prd_id": "1", "prd_key": "CO-RF", "prd_start_dt": "2003-07-01"},
        {"prd_id": "1", "prd_key": "CO-RF-FR-R92B-58", "prd_start_dt": None},
    ])
    def test_malformed_versions_are_faults(self, conformer, row):
        result = conformer.conform("products", raw("products", [row]))
        assert result.records == []
        assert len(result.faults) == 1


class TestConformSalesLines:

    def test_amounts_and_prices_reconciled(self, conformer, sample_source_rows):
        result = conformer.conform("sales_lines", raw("sales_lines", sample_source_rows["sales_lines"]))
        lines = {line.order_number: line for line in result.records}

        assert lines["SO43698"].sales_amount == 2000
        assert lines["SO43700"].price == 35
        assert lines["SO43697"].order_date == date(2010, 12, 29)

    def test_invalid_compact_date_becomes_none(self, conformer, sample_source_rows):
        result = conformer.conform("sales_lines", raw("sales_lines", sample_source_rows["sales_lines"]))
        line = next(line for line in result.records if line.order_number == "SO43700")
        assert line.order_date is None
        assert line.ship_date == date(2011, 1, 5)

    def test_missing_order_number_is_a_fault(self, conformer):
        result = conformer.conform("sales_lines", raw("sales_lines", [{"sls_ord_num": " "}]))
        assert result.records == []
        assert len(result.faults) == 1


class TestConformErp:

    def test_erp_customers(self, conformer, sample_source_rows):
        result = conformer.conform("erp_customers", raw("erp_customers", sample_source_rows["erp_customers"]))
        by_number = {c.customer_number: c for c in result.records}

        assert set(by_number) == {"AW00011000", "AW00011001", "AW00011002"}
        assert by_number["AW00011001"].gender == "Female"
        assert by_number["AW00011002"].birthdate is None
        assert by_number["AW00011002"].gender == "n/a"

    def test_future_birthdate_checked_against_current_day(self, normalizer, monkeypatch):
        """Without an explicit as_of, every batch is compared to the day it runs."""
        from src.core.transforms import conform as conform_module

        class FrozenDate(date):
            current = date(2000, 1, 1)

            @classmethod
            def today(cls):
                return cls.current

        monkeypatch.setattr(conform_module, "date", FrozenDate)
        long_lived = conform_module.RecordConformer(normalizer)
        rows = raw("erp_customers", [{"cid": "NASAW00011000", "bdate": "2010-05-05", "gen": "M"}])

        assert long_lived.conform("erp_customers", rows).records[0].birthdate is None

        FrozenDate.current = date(2020, 1, 1)
        assert long_lived.conform("erp_customers", rows).records[0].birthdate == date(2010, 5, 5)

    def test_locations(self, conformer, sample_source_rows):
        result = conformer.conform("erp_locations", raw("erp_locations", sample_source_rows["erp_locations"]))
        countries = {loc.customer_number: loc.country for loc in result.records}

        assert countries == {
            "AW00011000": "Australia",
            "AW00011001": "United States",
            "AW00011002": "Germany",
        }

    def test_location_country_alias_column(self, conformer):
        result = conformer.conform("erp_locations", raw("erp_locations", [{"cid": "AW-1", "country": "USA"}]))
        assert result.records[0].country == "United States"

    def test_categories_trimmed(self, conformer):
        result = conformer.conform("erp_categories", raw("erp_categories", [
            {"id": "AC_BR", "cat": " Accessories ", "subcat": "Bike Racks", "maintenance": "Yes "},
        ]))
        category = result.records[0]
        assert category.category == "Accessories"
        assert category.maintenance == "Yes"


class TestConformer:

    def test_unknown_entity_raises(self, conformer):
        with pytest.raises(ValueError, match="Unknown source entity"):
            conformer.conform("invoices", [])

    def test_entities(self, conformer):
        assert set(conformer.entities) == set(ENTITY_SOURCE_SYSTEMS)

    def test_vocabulary_drift(self, conformer):
        rows = raw("customers", [
            {"cst_id": "1", "cst_marital_status": "D", "cst_gndr": "M"},
            {"cst_id": "2", "cst_marital_status": "D", "cst_gndr": "U"},
            {"cst_id": "3", "cst_marital_status": "S", "cst_gndr": None},
        ])
        drift = conformer.vocabulary_drift("customers", rows)

        assert drift["marital_status"] == {"D": 2}
        assert drift["gender"] == {"U": 1}

    def test_no_drift_for_clean_rows(self, conformer, sample_source_rows):
        rows = raw("erp_locations", sample_source_rows["erp_locations"])
        assert conformer.vocabulary_drift("erp_locations", rows) == {}
