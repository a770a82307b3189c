"""
Fact assembly: sales lines resolved to dimension surrogate keys.
"""

from collections.abc import Iterable
from operator import attrgetter

from src.core.models import (
    CustomerDimensionRow,
    ProductDimensionRow,
    SalesFactRow,
    SalesLineRecord,
)
from src.observability.logger import get_logger

from .surrogate_keys import index_by

logger = get_logger(__name__)


def build_sales_facts(
    sales_lines: Iterable[SalesLineRecord],
    dim_customers: Iterable[CustomerDimensionRow],
    dim_products: Iterable[ProductDimensionRow],
) -> list[SalesFactRow]:
    """
    Resolve every sales line to customer and product surrogate keys.

    A line whose natural key has no dimension row keeps a None surrogate
    key and is still emitted; referential integrity is reported by the
    quality rules, not enforced here.
    """
    customer_keys = index_by(dim_customers, attrgetter("customer_id"), "dim_customers")
    product_keys = index_by(dim_products, attrgetter("product_number"), "dim_products")

    facts = []
    unresolved = 0
    for line in sales_lines:
        customer = customer_keys.get(line.customer_id)
        product = product_keys.get(line.product_number)
        if customer is None or product is None:
            unresolved += 1

        facts.append(SalesFactRow(
            order_number=line.order_number,
            product_number=line.product_number,
            customer_id=line.customer_id,
            product_key=product.product_key if product else None,
            customer_key=customer.customer_key if customer else None,
            order_date=line.order_date,
            shipping_date=line.ship_date,
            due_date=line.due_date,
            sales_amount=line.sales_amount,
            quantity=line.quantity,
            price=line.price,
        ))

    if unresolved:
        logger.warning(
            f"{unresolved} sales line(s) reference a missing dimension row",
            extra={"unresolved_lines": unresolved},
        )
    return facts
