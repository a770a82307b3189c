"""
Per-entity conformance: raw source rows -> conformed records.

Flow per entity:
    customers:      deduplicate (latest create date) -> normalize -> conform
    products:       conform -> derive validity ranges per product number
    sales_lines:    repair dates -> reconcile amount and price
    erp_customers:  strip id prefix, drop future birthdates, normalize gender
    erp_locations:  strip dashes from id, normalize country
    erp_categories: trim and pass through

A row that violates a hard precondition (unparseable or missing identity)
raises TransformationFault; conformers drop such rows and return the faults
so the caller can log and count them.
"""

from collections import Counter
from collections.abc import Callable, Iterable
from datetime import date
from operator import attrgetter
from typing import Any, NamedTuple, TypeVar

from src.core.errors import TransformationFault
from src.core.models import (
    CategoryRecord,
    CustomerRecord,
    ErpCustomerRecord,
    LocationRecord,
    ProductRecord,
    RawRecord,
    SalesLineRecord,
)

from .coercion import compact_int_to_date, to_date, to_float, to_int, to_text
from .deduplication import deduplicate
from .normalizer import FieldNormalizer
from .reconciliation import reconcile_line
from .temporal import assign_validity_ranges

T = TypeVar("T")

ENTITY_SOURCE_SYSTEMS = {
    "customers": "crm",
    "products": "crm",
    "sales_lines": "crm",
    "erp_customers": "erp",
    "erp_locations": "erp",
    "erp_categories": "erp",
}

# Raw field identifying a row in fault logs
RAW_IDENTITY_FIELDS = {
    "customers": "cst_id",
    "products": "prd_id",
    "sales_lines": "sls_ord_num",
    "erp_customers": "cid",
    "erp_locations": "cid",
    "erp_categories": "id",
}

# Raw field -> vocabulary, per entity
NORMALIZED_FIELDS = {
    "customers": {"cst_marital_status": "marital_status", "cst_gndr": "gender"},
    "products": {"prd_line": "product_line"},
    "erp_customers": {"gen": "gender"},
    "erp_locations": {"cntry": "country"},
}

ERP_CUSTOMER_PREFIX = "NAS"
CATEGORY_PREFIX_LENGTH = 5
PRODUCT_NUMBER_OFFSET = 6


class ConformResult(NamedTuple):
    """Conformed records of one entity and what was dropped on the way."""

    records: list[Any]
    faults: list[TransformationFault]
    null_keys_dropped: int = 0
    duplicates_dropped: int = 0

    @property
    def dropped(self) -> int:
        return len(self.faults) + self.null_keys_dropped


class _KeyedRow(NamedTuple):
    business_key: int | None
    order_key: date | None
    row: RawRecord


def raw_identity(row: RawRecord) -> str:
    field = RAW_IDENTITY_FIELDS.get(row.entity)
    value = row.get(field) if field else None
    return f"{row.entity}:{value}"


def _location_country(row: RawRecord) -> Any:
    return row.get("cntry", row.get("country"))


def conform_each(
    rows: Iterable[T],
    convert: Callable[[T], Any],
    identify: Callable[[T], str],
) -> tuple[list[Any], list[TransformationFault]]:
    """
    Apply convert to every row, collecting faults instead of aborting.

    ValueError (pydantic's ValidationError included) is treated as a
    fault of the row being converted. Anything else propagates.
    """
    converted = []
    faults = []
    for row in rows:
        try:
            converted.append(convert(row))
        except TransformationFault as fault:
            faults.append(fault)
        except ValueError as e:
            faults.append(TransformationFault(str(e).splitlines()[0], record_id=identify(row)))
    return converted, faults


class RecordConformer:
    """
    Turns raw rows of each source entity into conformed records.

    Args:
        normalizer: Field normalizer holding the vocabularies
        as_of: Reference date for "future" checks (defaults to the day each
            batch is conformed)
    """

    def __init__(self, normalizer: FieldNormalizer, as_of: date | None = None):
        self.normalizer = normalizer
        self.as_of = as_of
        self._conformers: dict[str, Callable[[list[RawRecord]], ConformResult]] = {
            "customers": self.conform_customers,
            "products": self.conform_products,
            "sales_lines": self.conform_sales_lines,
            "erp_customers": self.conform_erp_customers,
            "erp_locations": self.conform_erp_locations,
            "erp_categories": self.conform_erp_categories,
        }

    @property
    def entities(self) -> list[str]:
        return list(self._conformers)

    def conform(self, entity: str, rows: list[RawRecord]) -> ConformResult:
        try:
            conformer = self._conformers[entity]
        except KeyError:
            raise ValueError(f"Unknown source entity: {entity}") from None
        return conformer(rows)

    def vocabulary_drift(self, entity: str, rows: list[RawRecord]) -> dict[str, Counter]:
        """Unrecognized non-blank codes per normalized field of an entity."""
        drift = {}
        for raw_field, vocabulary in NORMALIZED_FIELDS.get(entity, {}).items():
            if raw_field == "cntry":
                values = [_location_country(row) for row in rows]
            else:
                values = [row.get(raw_field) for row in rows]
            unmapped = self.normalizer.unmapped_values(vocabulary, values)
            if unmapped:
                drift[vocabulary] = unmapped
        return drift

    # ------------------------------------------------------------------
    # CRM
    # ------------------------------------------------------------------

    def conform_customers(self, rows: list[RawRecord]) -> ConformResult:
        keyed, key_faults = conform_each(rows, self._key_customer, raw_identity)
        deduped = deduplicate(
            keyed,
            business_key=attrgetter("business_key"),
            order_key=attrgetter("order_key"),
        )
        records, faults = conform_each(
            deduped.records, self._to_customer, lambda k: raw_identity(k.row)
        )
        records.sort(key=attrgetter("customer_id"))
        return ConformResult(
            records=records,
            faults=key_faults + faults,
            null_keys_dropped=deduped.null_keys_dropped,
            duplicates_dropped=deduped.duplicates_dropped,
        )

    def _key_customer(self, row: RawRecord) -> _KeyedRow:
        return _KeyedRow(
            business_key=to_int(row.get("cst_id")),
            order_key=to_date(row.get("cst_create_date")),
            row=row,
        )

    def _to_customer(self, keyed: _KeyedRow) -> CustomerRecord:
        row = keyed.row
        return CustomerRecord(
            customer_id=keyed.business_key,
            customer_number=to_text(row.get("cst_key")),
            first_name=to_text(row.get("cst_firstname")),
            last_name=to_text(row.get("cst_lastname")),
            marital_status=self.normalizer.normalize("marital_status", row.get("cst_marital_status")),
            gender=self.normalizer.normalize("gender", row.get("cst_gndr")),
            create_date=keyed.order_key,
        )

    def conform_products(self, rows: list[RawRecord]) -> ConformResult:
        versions, faults = conform_each(rows, self._to_product_version, raw_identity)
        ranged = assign_validity_ranges(
            versions,
            business_key=attrgetter("product_number"),
            start=attrgetter("start_date"),
            tie_break=attrgetter("product_id"),
            with_end=lambda version, end: version.model_copy(update={"end_date": end}),
        )
        return ConformResult(records=ranged, faults=faults)

    def _to_product_version(self, row: RawRecord) -> ProductRecord:
        product_id = to_int(row.get("prd_id"))
        raw_key = to_text(row.get("prd_key"))
        start_date = to_date(row.get("prd_start_dt"))
        identity = raw_identity(row)

        if product_id is None:
            raise TransformationFault("Product version has no product id", record_id=identity)
        if raw_key is None or len(raw_key) <= PRODUCT_NUMBER_OFFSET:
            raise TransformationFault(f"Malformed product key {raw_key!r}", record_id=identity)
        if start_date is None:
            raise TransformationFault("Product version has no start date", record_id=identity)

        cost = to_float(row.get("prd_cost"))
        return ProductRecord(
            product_id=product_id,
            category_id=raw_key[:CATEGORY_PREFIX_LENGTH].replace("-", "_"),
            product_number=raw_key[PRODUCT_NUMBER_OFFSET:],
            product_name=to_text(row.get("prd_nm")),
            cost=cost if cost is not None else 0,
            product_line=self.normalizer.normalize("product_line", row.get("prd_line")),
            start_date=start_date,
        )

    def conform_sales_lines(self, rows: list[RawRecord]) -> ConformResult:
        records, faults = conform_each(rows, self._to_sales_line, raw_identity)
        return ConformResult(records=records, faults=faults)

    def _to_sales_line(self, row: RawRecord) -> SalesLineRecord:
        order_number = to_text(row.get("sls_ord_num"))
        if order_number is None:
            raise TransformationFault("Sales line has no order number", record_id=raw_identity(row))

        line = reconcile_line(
            quantity=to_int(row.get("sls_quantity")),
            unit_price=to_float(row.get("sls_price")),
            line_amount=to_float(row.get("sls_sales")),
        )
        return SalesLineRecord(
            order_number=order_number,
            product_number=to_text(row.get("sls_prd_key")),
            customer_id=to_int(row.get("sls_cust_id")),
            order_date=compact_int_to_date(row.get("sls_order_dt")),
            ship_date=compact_int_to_date(row.get("sls_ship_dt")),
            due_date=compact_int_to_date(row.get("sls_due_dt")),
            sales_amount=line.line_amount,
            quantity=line.quantity,
            price=line.unit_price,
        )

    # ------------------------------------------------------------------
    # ERP
    # ------------------------------------------------------------------

    def conform_erp_customers(self, rows: list[RawRecord]) -> ConformResult:
        as_of = self.as_of or date.today()
        records, faults = conform_each(
            rows, lambda row: self._to_erp_customer(row, as_of), raw_identity
        )
        return ConformResult(records=records, faults=faults)

    def _to_erp_customer(self, row: RawRecord, as_of: date) -> ErpCustomerRecord:
        customer_number = to_text(row.get("cid"))
        if customer_number is None:
            raise TransformationFault("ERP customer has no id", record_id=raw_identity(row))
        if customer_number.startswith(ERP_CUSTOMER_PREFIX):
            customer_number = customer_number[len(ERP_CUSTOMER_PREFIX):]

        birthdate = to_date(row.get("bdate"))
        if birthdate is not None and birthdate > as_of:
            birthdate = None

        return ErpCustomerRecord(
            customer_number=customer_number,
            birthdate=birthdate,
            gender=self.normalizer.normalize("gender", row.get("gen")),
        )

    def conform_erp_locations(self, rows: list[RawRecord]) -> ConformResult:
        records, faults = conform_each(rows, self._to_location, raw_identity)
        return ConformResult(records=records, faults=faults)

    def _to_location(self, row: RawRecord) -> LocationRecord:
        customer_number = to_text(row.get("cid"))
        if customer_number is None:
            raise TransformationFault("Location has no customer id", record_id=raw_identity(row))
        return LocationRecord(
            customer_number=customer_number.replace("-", ""),
            country=self.normalizer.normalize("country", _location_country(row)),
        )

    def conform_erp_categories(self, rows: list[RawRecord]) -> ConformResult:
        records, faults = conform_each(rows, self._to_category, raw_identity)
        return ConformResult(records=records, faults=faults)

    def _to_category(self, row: RawRecord) -> CategoryRecord:
        category_id = to_text(row.get("id"))
        if category_id is None:
            raise TransformationFault("Category has no id", record_id=raw_identity(row))
        return CategoryRecord(
            category_id=category_id,
            category=to_text(row.get("cat")),
            subcategory=to_text(row.get("subcat")),
            maintenance=to_text(row.get("maintenance")),
        )
