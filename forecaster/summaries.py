"""
Summary groups: creation from a selection, spreadsheet export in two shapes,
and re-import of either shape.

The backup shape (one row per summary item) is the one that round-trips.
The table shape only carries each summary's totals; importing it gives
groups with totals and a line-item count but no items.
"""

import logging
import time
from datetime import date
from typing import Any, Iterable

import pandas as pd

from . import utils
from .errors import SchemaMismatchError, SummaryValidationError
from .filters import selection_totals
from .normalizer import parse_number
from .schemas import ReportRow, SummaryGroup

logger = logging.getLogger(__name__)

TABLE_COLUMNS = [
    "Summary Name",
    "Date",
    "Line Items",
    "Total Sold (12mo)",
    "Total In Stock",
    "Total Forecast",
    "Total Purchase",
]

BACKUP_COLUMNS = [
    "Summary Name",
    "Summary Date",
    "SKU",
    "Item",
    "Vendor",
    "Description",
    "QTY Sold",
    "In Stock",
    "Forecast",
    "Purchase",
    "Campground",
    "Department",
]


def _now_ms() -> int:
    return int(time.time() * 1000)


def _unique_id(taken: set[int], start: int) -> int:
    candidate = start
    while candidate in taken:
        candidate += 1
    return candidate


# --- Create / Delete ---


def create_summary(
    report_rows: Iterable[ReportRow],
    selected_ids: Iterable[str],
    existing: list[SummaryGroup],
    name: str | None = None,
    totals: dict[str, float] | None = None,
    today: date | None = None,
) -> SummaryGroup:
    """
    Freezes the selected report rows into a new SummaryGroup.

    `report_rows` is the currently visible (filtered) report; only rows whose
    id is in `selected_ids` are kept, in report order. Items are deep copies,
    so later changes to the live report never reach a saved summary.
    Raises SummaryValidationError when nothing is selected.
    """
    selected = set(selected_ids)
    rows = list(report_rows)
    items = [row.model_copy(deep=True) for row in rows if row.id in selected]
    if not items:
        raise SummaryValidationError("No items selected!")

    if totals is None:
        totals = selection_totals(items, selected)

    summary = SummaryGroup(
        id=_unique_id({s.id for s in existing}, _now_ms()),
        name=(name or "").strip() or f"Summary {len(existing) + 1}",
        date=utils.format_display_date(today or date.today()),
        line_items=len(items),
        total_sold=totals["sold"],
        total_stock=totals["stock"],
        total_forecast=totals["forecast"],
        total_purchase=totals["purchase"],
        items=items,
    )
    logger.info(f"✅ Created summary '{summary.name}' with {summary.line_items} line items.")
    return summary


def delete_summary(
    summaries: list[SummaryGroup], summary_id: int, confirmed: bool = False
) -> list[SummaryGroup]:
    if not confirmed:
        raise SummaryValidationError("Deleting a summary requires confirmation.")
    remaining = [s for s in summaries if s.id != summary_id]
    if len(remaining) == len(summaries):
        logger.warning(f"⚠️ No summary with id {summary_id}.")
    return remaining


# --- Export ---


def export_table(summaries: Iterable[SummaryGroup]) -> pd.DataFrame:
    rows = [
        {
            "Summary Name": s.name,
            "Date": s.date,
            "Line Items": s.line_items,
            "Total Sold (12mo)": s.total_sold,
            "Total In Stock": s.total_stock,
            "Total Forecast": s.total_forecast,
            "Total Purchase": s.total_purchase,
        }
        for s in summaries
    ]
    return pd.DataFrame(rows, columns=TABLE_COLUMNS)


def export_backup(summaries: Iterable[SummaryGroup]) -> pd.DataFrame:
    rows = [
        {
            "Summary Name": s.name,
            "Summary Date": s.date,
            "SKU": item.sku,
            "Item": item.item,
            "Vendor": item.vendor,
            "Description": item.description,
            "QTY Sold": item.qty_sold,
            "In Stock": item.in_stock,
            "Forecast": item.forecast,
            "Purchase": item.purchase,
            "Campground": item.campground,
            "Department": item.department,
        }
        for s in summaries
        for item in s.items
    ]
    return pd.DataFrame(rows, columns=BACKUP_COLUMNS)


# --- Import ---


def _find_column(columns: list[str], fragment: str) -> str | None:
    """First column whose lower-cased name contains the fragment."""
    for column in columns:
        if fragment in str(column).lower().strip():
            return column
    return None


def _text(value: Any) -> str:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    if isinstance(value, float) and value.is_integer():
        # Spreadsheets hand numeric SKUs back as floats
        return str(int(value))
    return str(value).strip()


def decode_summaries(
    rows: list[dict[str, Any]],
    start_id: int | None = None,
    taken: Iterable[int] = (),
) -> list[SummaryGroup]:
    """
    Rebuilds summary groups from exported rows (dicts keyed by column name).

    Rows with a SKU column are backup lines: items are rebuilt and the totals
    are recomputed from them. Rows without one are legacy table rows: the
    totals and line-item count are taken as written.
    Groups get consecutive ids from `start_id` (default: now, in ms), skipping
    any id in `taken`.
    Raises SchemaMismatchError when there is no 'Summary Name' column.
    """
    if not rows:
        return []

    columns = list(rows[0].keys())
    name_col = _find_column(columns, "summary name")
    if name_col is None:
        raise SchemaMismatchError("Invalid file format. Missing 'Summary Name' column.")

    col = {
        fragment: _find_column(columns, fragment)
        for fragment in (
            "sku", "date", "campground", "sold", "stock", "forecast", "purchase",
            "item", "vendor", "description", "department", "qty sold", "in stock",
            "line item",
        )
    }
    detailed = col["sku"] is not None

    def value(row: dict, fragment: str) -> Any:
        column = col[fragment]
        return row.get(column) if column is not None else None

    groups: dict[str, dict[str, Any]] = {}

    for row in rows:
        name = _text(row.get(name_col))
        if name not in groups:
            groups[name] = {
                "name": name,
                "date": _text(value(row, "date"))
                or utils.format_display_date(date.today()),
                "line_items": int(parse_number(value(row, "line item"))),
                "total_sold": parse_number(value(row, "sold")),
                "total_stock": parse_number(value(row, "stock")),
                "total_forecast": parse_number(value(row, "forecast")),
                "total_purchase": parse_number(value(row, "purchase")),
                "items": [],
            }

        if detailed:
            campground = _text(value(row, "campground"))
            sku = _text(value(row, "sku"))
            groups[name]["items"].append(
                ReportRow(
                    id=f"{campground}|{sku}",
                    campground=campground,
                    department=_text(value(row, "department")),
                    sku=sku,
                    item=_text(value(row, "item")),
                    vendor=_text(value(row, "vendor")),
                    description=_text(value(row, "description")),
                    qty_sold=parse_number(value(row, "qty sold")),
                    in_stock=parse_number(value(row, "in stock")),
                    forecast=parse_number(value(row, "forecast")),
                    purchase=parse_number(value(row, "purchase")),
                )
            )

    used = set(taken)
    next_id = start_id if start_id is not None else _now_ms()
    decoded = []
    for group in groups.values():
        group["id"] = next_id = _unique_id(used, next_id)
        used.add(next_id)
        if detailed:
            items = group["items"]
            group["line_items"] = len(items)
            group["total_sold"] = sum(item.qty_sold for item in items)
            group["total_stock"] = sum(item.in_stock for item in items)
            group["total_forecast"] = sum(item.forecast for item in items)
            group["total_purchase"] = sum(item.purchase for item in items)
        decoded.append(SummaryGroup(**group))

    logger.info(
        f"✅ Decoded {len(decoded)} summaries "
        f"({'detailed backup' if detailed else 'legacy table'} format)."
    )
    return decoded


def import_summaries(
    rows: list[dict[str, Any]], existing: list[SummaryGroup]
) -> list[SummaryGroup]:
    """Appends the decoded groups to the existing collection."""
    decoded = decode_summaries(rows, taken={s.id for s in existing})
    return list(existing) + decoded


def summaries_to_json(summaries: Iterable[SummaryGroup]) -> list[dict]:
    return [s.model_dump(mode="json", by_alias=True) for s in summaries]


def summaries_from_json(data: list[dict] | None) -> list[SummaryGroup]:
    return [SummaryGroup(**entry) for entry in (data or [])]
