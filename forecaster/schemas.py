from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from . import settings


class ItemRecord(BaseModel):
    """
    A single cleaned row from either the sales or the inventory export.
    Every record has a location, a canonical (zero-stripped) SKU and a valid date.
    """

    location: str
    sku: str
    date: datetime
    description: str = ""
    department: str = "Unknown"

    @field_validator("location")
    @classmethod
    def location_not_excluded(cls, value: str) -> str:
        if value in settings.EXCLUDED_LOCATIONS:
            raise ValueError(f"location '{value}' is an excluded facility")
        return value


class SalesRecord(ItemRecord):
    quantity: float = Field(default=0, ge=0)


class InventoryRecord(ItemRecord):
    count: float = 0


class ReportRow(BaseModel):
    """
    One line of the purchase forecast, keyed by 'location|sku'.
    Aliases match the report column names used in exports and the settings store.
    """

    id: str
    campground: str = Field(..., alias="Campground")
    department: str = Field(default="", alias="Department")
    sku: str = Field(..., alias="SKU")
    item: str = Field(default="", alias="Item")
    vendor: str = Field(default="", alias="Vendor")
    description: str = Field(default="", alias="Description")
    qty_sold: float = Field(default=0, alias="QTYSold")
    in_stock: float = Field(default=0, alias="InStock")
    forecast: float = Field(default=0, alias="Forecast")
    purchase: float = Field(default=0, alias="Purchase")

    class Config:
        populate_by_name = True


class SummaryGroup(BaseModel):
    """A named, frozen snapshot of selected report rows and their totals."""

    id: int
    name: str
    date: str
    line_items: int = Field(default=0, alias="lineItems")
    total_sold: float = Field(default=0, alias="totalSold")
    total_stock: float = Field(default=0, alias="totalStock")
    total_forecast: float = Field(default=0, alias="totalForecast")
    total_purchase: float = Field(default=0, alias="totalPurchase")
    items: list[ReportRow] = Field(default_factory=list)

    class Config:
        populate_by_name = True


class ReportFilters(BaseModel):
    """Filter state applied to the report before rows are selected."""

    campground: list[str] = Field(default_factory=list)
    department: list[str] = Field(default_factory=list)
    vendor: list[str] = Field(default_factory=list)
    item_sku: str = Field(default="", alias="itemSku")
    item_includes: str = Field(default="", alias="itemIncludes")
    item_excludes: str = Field(default="", alias="itemExcludes")
    desc_includes: str = Field(default="", alias="descIncludes")
    desc_excludes: str = Field(default="", alias="descExcludes")
    qty_min: float | None = Field(default=None, alias="qtyMin")
    qty_max: float | None = Field(default=None, alias="qtyMax")
    stock_min: float | None = Field(default=None, alias="stockMin")
    stock_max: float | None = Field(default=None, alias="stockMax")

    class Config:
        populate_by_name = True

    @field_validator("qty_min", "qty_max", "stock_min", "stock_max", mode="before")
    @classmethod
    def blank_bound_is_unbounded(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value
