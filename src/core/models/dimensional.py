"""
Dimensional-layer models: star-schema dimension and fact rows.
"""

from datetime import date

from pydantic import BaseModel, Field


class CustomerDimensionRow(BaseModel):
    """
    Customer dimension row keyed by a pipeline-assigned surrogate key.

    Attributes:
        customer_key: Dense surrogate key (1..n), unique within the run
        customer_id: Natural key from the CRM
        customer_number: Alternate customer code
        first_name: First name
        last_name: Last name
        country: Country from the ERP location feed (None if no match)
        marital_status: Marital status
        gender: CRM gender, falling back to the ERP value
        birthdate: Birthdate from the ERP (None if no match)
        create_date: CRM creation date
    """

    customer_key: int = Field(..., ge=1)
    customer_id: int
    customer_number: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    country: str | None = None
    marital_status: str = "n/a"
    gender: str = "n/a"
    birthdate: date | None = None
    create_date: date | None = None

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "customer_key": 1,
                "customer_id": 11000,
                "customer_number": "AW00011000",
                "first_name": "Jon",
                "last_name": "Yang",
                "country": "Australia",
                "marital_status": "Married",
                "gender": "Male",
                "birthdate": "1971-10-06",
                "create_date": "2025-10-06"
            }
        }

    @property
    def record_id(self) -> str:
        return str(self.customer_key)


class ProductDimensionRow(BaseModel):
    """
    Product dimension row for the currently active version of a product.

    Attributes:
        product_key: Dense surrogate key (1..n), unique within the run
        product_id: Source identifier of the active version
        product_number: Natural product key
        product_name: Product name
        category_id: Category code
        category: Category name (None if no category match)
        subcategory: Subcategory name
        maintenance: Maintenance flag from the category feed
        cost: Product cost
        product_line: Product line
        start_date: Start date of the active version
    """

    product_key: int = Field(..., ge=1)
    product_id: int
    product_number: str
    product_name: str | None = None
    category_id: str | None = None
    category: str | None = None
    subcategory: str | None = None
    maintenance: str | None = None
    cost: float = 0
    product_line: str = "n/a"
    start_date: date

    class Config:
        frozen = True

    @property
    def record_id(self) -> str:
        return str(self.product_key)


class SalesFactRow(BaseModel):
    """
    Sales fact row referencing the customer and product dimensions.

    The natural keys are kept next to the resolved surrogate keys; a lookup
    that found no dimension row leaves the surrogate key as None.
    """

    order_number: str
    product_number: str | None = None
    customer_id: int | None = None
    product_key: int | None = None
    customer_key: int | None = None
    order_date: date | None = None
    shipping_date: date | None = None
    due_date: date | None = None
    sales_amount: float | None = None
    quantity: int | None = None
    price: float | None = None

    class Config:
        frozen = True

    @property
    def record_id(self) -> str:
        return f"{self.order_number}:{self.product_number}"
