"""
Seasonal demand forecast and purchase suggestion per (location, SKU).

Merge policy for the two aggregation maps built by one run:

* demand map (seasonal sales): quantities are summed; the description,
  department, location and SKU of the FIRST record seen for a key are kept.
* inventory map: records are ordered newest first and the FIRST (most
  recent) record per key wins; older counts are ignored, never summed.

Both maps are local to a single call; nothing carries over between runs.
"""

import logging
import math
from enum import Enum
from typing import Callable, Iterable

import pandas as pd

from . import settings
from .normalizer import empty_frame, records_to_frame
from .schemas import ItemRecord, ReportRow

logger = logging.getLogger(__name__)

KEY_SEPARATOR = "|"

REPORT_COLUMNS = [
    "id",
    "Campground",
    "Department",
    "SKU",
    "Item",
    "Vendor",
    "Description",
    "QTYSold",
    "InStock",
    "Forecast",
    "Purchase",
]


class InclusionPolicy(str, Enum):
    """Which composite keys produce a report row."""

    PURCHASE_OR_STOCK = "purchase_or_stock"
    PURCHASE_ONLY = "purchase_only"
    ALL = "all"

    def includes(self, purchase: float, on_hand: float) -> bool:
        if self is InclusionPolicy.ALL:
            return True
        if self is InclusionPolicy.PURCHASE_ONLY:
            return purchase > 0
        return purchase > 0 or on_hand > 0


def composite_key(location: str, sku: str) -> str:
    return f"{location}{KEY_SEPARATOR}{sku}"


def split_description(raw: str | None) -> tuple[str, str, str]:
    """
    Splits an 'Item_Vendor_Description' title into its three parts.
    A single leading underscore is dropped first; missing parts are ''.
    """
    name = raw or ""
    if name.startswith("_"):
        name = name[1:]
    parts = name.split("_")
    parts += [""] * (3 - len(parts))
    return parts[0], parts[1], parts[2]


def _as_frame(data, source_type: str) -> pd.DataFrame:
    if data is None:
        return empty_frame(source_type)
    if isinstance(data, pd.DataFrame):
        df = data.copy()
    else:
        df = records_to_frame(list(data), source_type)
    df["date"] = pd.to_datetime(df["date"])
    if source_type == "sales":
        # sold quantities are non-negative; frames built by hand may not be
        df["quantity"] = df["quantity"].clip(lower=0)
    df["key"] = [
        composite_key(loc, sku) for loc, sku in zip(df["location"], df["sku"])
    ]
    return df


def _demand_by_key(seasonal: pd.DataFrame) -> pd.DataFrame:
    # first() would skip nulls; descriptions are '' rather than null after normalizing
    return seasonal.groupby("key", sort=False).agg(
        qty=("quantity", "sum"),
        description=("description", "first"),
        department=("department", "first"),
        location=("location", "first"),
        sku=("sku", "first"),
    )


def _latest_inventory_by_key(inventory: pd.DataFrame) -> pd.DataFrame:
    newest_first = inventory.sort_values("date", ascending=False, kind="stable")
    latest = newest_first.drop_duplicates(subset="key", keep="first")
    return latest.set_index("key")[["count", "description", "department"]]


def _trailing_sales_by_key(sales: pd.DataFrame) -> pd.Series:
    if sales.empty:
        return pd.Series(dtype=float)
    last_date = sales["date"].max()
    cutoff = last_date - pd.DateOffset(years=1)
    recent = sales[sales["date"] >= cutoff]
    return recent.groupby("key", sort=False)["quantity"].sum()


def compute_forecast(
    sales: pd.DataFrame | Iterable[ItemRecord] | None,
    inventory: pd.DataFrame | Iterable[ItemRecord] | None,
    *,
    season_months: tuple[int, int] | None = None,
    policy: InclusionPolicy | str | None = None,
    on_progress: Callable[[str], None] | None = None,
) -> pd.DataFrame:
    """
    Joins normalized sales and inventory records into the purchase forecast.

    Returns one row per composite key that passes the inclusion policy, with
    the report column names (id, Campground, ..., Purchase). Row order is not
    meaningful; sorting is left to the caller.
    """
    if season_months is None:
        season_months = (settings.SEASON_START_MONTH, settings.SEASON_END_MONTH)
    policy = InclusionPolicy(policy or settings.REPORT_INCLUSION_POLICY)

    def progress(stage: str):
        logger.debug(f"  > {stage}")
        if on_progress is not None:
            on_progress(stage)

    sales_df = _as_frame(sales, "sales")
    inventory_df = _as_frame(inventory, "inventory")

    # 1-3. Seasonal demand and the number of seasons it covers
    progress("seasonal demand")
    start_month, end_month = season_months
    seasonal = sales_df[sales_df["date"].dt.month.between(start_month, end_month)]
    season_years = max(seasonal["date"].dt.year.nunique(), 1)
    demand = _demand_by_key(seasonal)

    # 4. Trailing twelve months of sales, across all months
    progress("trailing sales")
    sold_12mo = _trailing_sales_by_key(sales_df)

    # 5. Most recent count per key
    progress("latest counts")
    on_hand_map = _latest_inventory_by_key(inventory_df)

    # 6-10. Union of keys, derived values and metadata
    progress("building report")
    keys = list(dict.fromkeys(list(demand.index) + list(on_hand_map.index)))
    report = []
    for key in keys:
        has_demand = key in demand.index
        has_count = key in on_hand_map.index

        forecast = (
            int(math.floor(demand.at[key, "qty"] / season_years)) if has_demand else 0
        )
        on_hand = float(on_hand_map.at[key, "count"]) if has_count else 0.0
        purchase = max(forecast - on_hand, 0)

        if not policy.includes(purchase, on_hand):
            continue

        if has_demand:
            desc = demand.at[key, "description"]
            dept = demand.at[key, "department"]
            location = demand.at[key, "location"]
            sku = demand.at[key, "sku"]
        else:
            desc = on_hand_map.at[key, "description"] or ""
            dept = on_hand_map.at[key, "department"] or ""
            location, _, sku = key.partition(KEY_SEPARATOR)

        item, vendor, description = split_description(desc)
        report.append(
            {
                "id": key,
                "Campground": location,
                "Department": dept,
                "SKU": sku,
                "Item": item,
                "Vendor": vendor,
                "Description": description,
                "QTYSold": float(sold_12mo.get(key, 0)),
                "InStock": on_hand,
                "Forecast": forecast,
                "Purchase": float(purchase),
            }
        )

    logger.info(
        f"  > Forecast built: {len(report)} rows from {len(keys)} keys "
        f"({season_years} season year(s))."
    )
    progress("done")
    return pd.DataFrame(report, columns=REPORT_COLUMNS)


def to_report_rows(df: pd.DataFrame) -> list[ReportRow]:
    return [
        ReportRow(**{str(k): v for k, v in rec.items()}) for rec in df.to_dict("records")
    ]
