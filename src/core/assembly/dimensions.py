"""
Dimension assembly: customer and product dimensions with surrogate keys.

Enrichment sources are joined with left-outer semantics: a failed lookup
leaves the enrichment attributes None and never removes the base row.
"""

from collections.abc import Iterable
from operator import attrgetter

from src.core.models import (
    CategoryRecord,
    CustomerDimensionRow,
    CustomerRecord,
    ErpCustomerRecord,
    LocationRecord,
    ProductDimensionRow,
    ProductRecord,
)

from .surrogate_keys import assign_surrogate_keys, index_by

SENTINEL = "n/a"


def resolve_gender(crm_gender: str, erp_gender: str | None) -> str:
    """The CRM is the master for gender; the ERP fills in where the CRM has none."""
    if crm_gender != SENTINEL:
        return crm_gender
    return erp_gender or SENTINEL


def build_customer_dimension(
    customers: Iterable[CustomerRecord],
    erp_customers: Iterable[ErpCustomerRecord] = (),
    locations: Iterable[LocationRecord] = (),
) -> list[CustomerDimensionRow]:
    """
    Assemble the customer dimension.

    Surrogate keys follow customer_id ascending. Each customer is enriched
    with birthdate and fallback gender from the ERP and with the country
    from the location feed, all looked up by customer_number.
    """
    demographics = index_by(erp_customers, attrgetter("customer_number"), "erp_customers")
    countries = index_by(locations, attrgetter("customer_number"), "erp_locations")

    rows = []
    for customer_key, customer in assign_surrogate_keys(customers, attrgetter("customer_id")):
        erp = demographics.get(customer.customer_number)
        location = countries.get(customer.customer_number)
        rows.append(CustomerDimensionRow(
            customer_key=customer_key,
            customer_id=customer.customer_id,
            customer_number=customer.customer_number,
            first_name=customer.first_name,
            last_name=customer.last_name,
            country=location.country if location else None,
            marital_status=customer.marital_status,
            gender=resolve_gender(customer.gender, erp.gender if erp else None),
            birthdate=erp.birthdate if erp else None,
            create_date=customer.create_date,
        ))
    return rows


def build_product_dimension(
    products: Iterable[ProductRecord],
    categories: Iterable[CategoryRecord] = (),
) -> list[ProductDimensionRow]:
    """
    Assemble the product dimension from currently active versions only.

    Historical versions (closed validity range) never receive a surrogate
    key. Keys follow (start_date, product_number) ascending.
    """
    category_lookup = index_by(categories, attrgetter("category_id"), "erp_categories")
    active = [p for p in products if p.is_current]

    rows = []
    ordered = assign_surrogate_keys(active, lambda p: (p.start_date, p.product_number))
    for product_key, product in ordered:
        category = category_lookup.get(product.category_id)
        rows.append(ProductDimensionRow(
            product_key=product_key,
            product_id=product.product_id,
            product_number=product.product_number,
            product_name=product.product_name,
            category_id=product.category_id,
            category=category.category if category else None,
            subcategory=category.subcategory if category else None,
            maintenance=category.maintenance if category else None,
            cost=product.cost,
            product_line=product.product_line,
            start_date=product.start_date,
        ))
    return rows
