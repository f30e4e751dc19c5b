"""Filtering, sorting and selection totals over report rows."""

from typing import Iterable

from .schemas import ReportFilters, ReportRow

DEFAULT_SORT_KEY = "Purchase"


def _keywords(value: str) -> list[str]:
    return [part.strip().lower() for part in (value or "").split(",") if part.strip()]


def check_keywords(text: str | None, includes: str, excludes: str) -> bool:
    """
    Comma-separated, case-insensitive keyword test.
    Any exclude match rejects; otherwise any include match (or no includes) accepts.
    """
    target = (text or "").lower()

    if any(word in target for word in _keywords(excludes)):
        return False

    wanted = _keywords(includes)
    if wanted:
        return any(word in target for word in wanted)
    return True


def _in_range(value: float, low: float | None, high: float | None) -> bool:
    if low is not None and value < low:
        return False
    if high is not None and value > high:
        return False
    return True


def matches(row: ReportRow, filters: ReportFilters) -> bool:
    if filters.item_sku and filters.item_sku.lower() not in row.sku.lower():
        return False
    if not check_keywords(row.item, filters.item_includes, filters.item_excludes):
        return False
    if not check_keywords(row.description, filters.desc_includes, filters.desc_excludes):
        return False

    if filters.campground and row.campground not in filters.campground:
        return False
    if filters.department and row.department not in filters.department:
        return False
    if filters.vendor and row.vendor not in filters.vendor:
        return False

    if not _in_range(row.qty_sold, filters.qty_min, filters.qty_max):
        return False
    return _in_range(row.in_stock, filters.stock_min, filters.stock_max)


def apply_filters(rows: Iterable[ReportRow], filters: ReportFilters) -> list[ReportRow]:
    return [row for row in rows if matches(row, filters)]


def sort_rows(
    rows: Iterable[ReportRow], key: str = DEFAULT_SORT_KEY, direction: str = "desc"
) -> list[ReportRow]:
    """Sorts by a report column name (e.g. 'Purchase', 'SKU')."""
    field = _field_for_alias(key)
    return sorted(
        rows, key=lambda row: getattr(row, field), reverse=(direction == "desc")
    )


def _field_for_alias(key: str) -> str:
    for name, info in ReportRow.model_fields.items():
        if key in (name, info.alias):
            return name
    raise ValueError(f"Unknown report column '{key}'")


def filter_options(rows: list[ReportRow], filters: ReportFilters) -> dict[str, list[str]]:
    """
    Option lists for the category filters. Departments narrow to the active
    campgrounds; vendors narrow to the active campgrounds and departments.
    """
    departments = set()
    vendors = set()
    for row in rows:
        camp_ok = not filters.campground or row.campground in filters.campground
        dept_ok = not filters.department or row.department in filters.department
        if camp_ok:
            departments.add(row.department)
        if camp_ok and dept_ok:
            vendors.add(row.vendor)

    return {
        "campground": sorted({row.campground for row in rows}),
        "department": sorted(departments),
        "vendor": sorted(vendors),
    }


def selection_totals(rows: Iterable[ReportRow], selected_ids: Iterable[str]) -> dict[str, float]:
    selected = set(selected_ids)
    totals = {"sold": 0.0, "stock": 0.0, "forecast": 0.0, "purchase": 0.0}
    for row in rows:
        if row.id in selected:
            totals["sold"] += row.qty_sold
            totals["stock"] += row.in_stock
            totals["forecast"] += row.forecast
            totals["purchase"] += row.purchase
    return totals
