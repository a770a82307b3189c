"""
Conformed-layer models: typed, cleaned projections of raw source rows.

Conformed records live for one batch cycle only. Every run truncates and
reloads the conformed layer, so no record survives across runs.
"""

from datetime import date

from pydantic import BaseModel, Field


class CustomerRecord(BaseModel):
    """
    Customer master row from the CRM, one per customer after deduplication.

    Attributes:
        customer_id: Business key assigned by the CRM
        customer_number: Alternate customer code, shared with the ERP feeds
        first_name: Trimmed first name
        last_name: Trimmed last name
        marital_status: Normalized marital status (Single, Married, n/a)
        gender: Normalized gender (Female, Male, n/a)
        create_date: CRM creation date, the latest-wins ordering key
    """

    customer_id: int
    customer_number: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    marital_status: str = "n/a"
    gender: str = "n/a"
    create_date: date | None = None

    class Config:
        frozen = True

    @property
    def record_id(self) -> str:
        return str(self.customer_id)


class ProductRecord(BaseModel):
    """
    One version of a CRM product, with its derived validity range.

    A product number can appear several times (one row per version). The
    version whose end_date is None is the currently active one.

    Attributes:
        product_id: Source identifier of this version
        category_id: Category code derived from the raw product key
        product_number: Product key without the category prefix
        product_name: Trimmed product name
        cost: Product cost (missing cost defaults to 0)
        product_line: Normalized product line
        start_date: Start of validity
        end_date: End of validity (None = open, currently active)
    """

    product_id: int
    category_id: str | None = None
    product_number: str
    product_name: str | None = None
    cost: float = 0
    product_line: str = "n/a"
    start_date: date
    end_date: date | None = None

    class Config:
        frozen = True

    @property
    def record_id(self) -> str:
        return f"{self.product_id}:{self.product_number}"

    @property
    def is_current(self) -> bool:
        return self.end_date is None


class SalesLineRecord(BaseModel):
    """
    Sales order line after date repair and numeric reconciliation.

    Attributes:
        order_number: Sales order number
        product_number: Natural product key referenced by the line
        customer_id: Natural customer key referenced by the line
        order_date: Order date (None when the source value was invalid)
        ship_date: Shipping date
        due_date: Payment due date
        sales_amount: Reconciled line amount
        quantity: Quantity sold (passed through, never repaired)
        price: Reconciled unit price (None when unrecoverable)
    """

    order_number: str
    product_number: str | None = None
    customer_id: int | None = None
    order_date: date | None = None
    ship_date: date | None = None
    due_date: date | None = None
    sales_amount: float | None = None
    quantity: int | None = None
    price: float | None = None

    class Config:
        frozen = True

    @property
    def record_id(self) -> str:
        return f"{self.order_number}:{self.product_number}"


class ErpCustomerRecord(BaseModel):
    """Secondary customer demographics from the ERP."""

    customer_number: str
    birthdate: date | None = None
    gender: str = "n/a"

    class Config:
        frozen = True

    @property
    def record_id(self) -> str:
        return self.customer_number


class LocationRecord(BaseModel):
    """Customer location from the ERP."""

    customer_number: str
    country: str = "n/a"

    class Config:
        frozen = True

    @property
    def record_id(self) -> str:
        return self.customer_number


class CategoryRecord(BaseModel):
    """Product category lookup from the ERP, passed through trimmed."""

    category_id: str = Field(..., min_length=1)
    category: str | None = None
    subcategory: str | None = None
    maintenance: str | None = None

    class Config:
        frozen = True

    @property
    def record_id(self) -> str:
        return self.category_id
