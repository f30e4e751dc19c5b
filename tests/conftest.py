import pandas as pd
import pytest

from forecaster.schemas import ReportRow

SALES_CSV = """Property,Sales_Date,Last_Sales_Date,SKU,Original_Title,Qty_Sold,Department
MGC,2024-06-15,2024-06-15,123,_Hat_Acme_Blue,50,Apparel
MGC,2023-06-15,2023-06-15,0123,_Hat_Acme_Blue,50,Apparel
ALG,2024-06-15,2024-06-15,555,_Cup_Acme_Red,"1,000",Kitchen
"""

# The second data row is split by a stray line break inside Item_Name.
INVENTORY_CSV = """Count_UID,Property,Count_Timestamp,SKU,Item_Name,Counted_Qty,Department
a1b2c3d4e5,MGC,2024-07-01 09:00,00123,_Hat_Acme_Blue
Wide Brim,20,Apparel
b2c3d4e5f6,ALG,2024-07-01 09:00,555,_Cup_Acme_Red,5,Kitchen
"""


def _frame(rows, measure):
    columns = ["location", "sku", "date", "description", "department", measure]
    df = pd.DataFrame(
        [
            {
                "description": "",
                "department": "Unknown",
                measure: 0.0,
                **row,
                "date": pd.Timestamp(row["date"]),
            }
            for row in rows
        ],
        columns=columns,
    )
    df["date"] = pd.to_datetime(df["date"])
    return df


@pytest.fixture
def make_sales():
    """Builds a normalized sales frame from dicts (quantity defaults to 0)."""
    return lambda rows: _frame(rows, "quantity")


@pytest.fixture
def make_inventory():
    """Builds a normalized inventory frame from dicts (count defaults to 0)."""
    return lambda rows: _frame(rows, "count")


@pytest.fixture
def report_rows():
    return [
        ReportRow(
            id="MGC|123", Campground="MGC", Department="Apparel", SKU="123",
            Item="Hat", Vendor="Acme", Description="Blue",
            QTYSold=100, InStock=20, Forecast=50, Purchase=30,
        ),
        ReportRow(
            id="MGC|456", Campground="MGC", Department="Kitchen", SKU="456",
            Item="Mug", Vendor="Bolt", Description="Large, white",
            QTYSold=12, InStock=3, Forecast=6, Purchase=3,
        ),
        ReportRow(
            id="SPR|789", Campground="SPR", Department="Apparel", SKU="789",
            Item="Shirt", Vendor="Acme", Description="Red",
            QTYSold=40, InStock=25, Forecast=20, Purchase=0,
        ),
    ]


@pytest.fixture
def sales_csv():
    return SALES_CSV


@pytest.fixture
def inventory_csv():
    return INVENTORY_CSV
