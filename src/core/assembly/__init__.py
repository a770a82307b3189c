"""
Dimensional assembly: surrogate keys, enriched dimensions and facts.
"""

from .dimensions import build_customer_dimension, build_product_dimension, resolve_gender
from .facts import build_sales_facts
from .surrogate_keys import assign_surrogate_keys, index_by

__all__ = [
    "assign_surrogate_keys",
    "index_by",
    "build_customer_dimension",
    "build_product_dimension",
    "build_sales_facts",
    "resolve_gender",
]
