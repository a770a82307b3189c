"""
RawRecord model representing one untyped row extracted from an upstream system.
"""

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field


class RawRecord(BaseModel):
    """
    An untyped row as delivered by a source system (immutable once ingested).

    Raw records are superseded wholesale by the next batch run; they are
    never updated in place.

    Attributes:
        entity: Source entity the row belongs to (e.g. "customers")
        source_system: Upstream system: "crm" or "erp"
        fields: Field name -> untyped scalar, exactly as extracted
        ingested_at: When the row entered the pipeline
    """

    entity: str = Field(..., min_length=1)
    source_system: Literal["crm", "erp"]
    fields: dict[str, Any]
    ingested_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "entity": "customers",
                "source_system": "crm",
                "fields": {
                    "cst_id": "11000",
                    "cst_key": "AW00011000",
                    "cst_firstname": " Jon",
                    "cst_lastname": "Yang ",
                    "cst_marital_status": "M",
                    "cst_gndr": "M",
                    "cst_create_date": "2025-10-06"
                }
            }
        }

    def get(self, field_name: str, default: Any = None) -> Any:
        """Return a raw field value (None if the extract did not carry it)."""
        return self.fields.get(field_name, default)
