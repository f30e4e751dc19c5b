"""
Maps the two raw export layouts (sales, inventory) onto one record shape.

Headers are matched fuzzily: each header is lower-cased and stripped of
anything that is not a letter or digit, then tested against an ordered table
of (field, predicate) rules. A header is claimed by the first rule it
satisfies; a field keeps the first header that claims it.
"""

import logging
import re
from typing import Callable, Iterable

import pandas as pd

from . import settings
from .schemas import InventoryRecord, ItemRecord, SalesRecord

logger = logging.getLogger(__name__)

SOURCE_TYPES = ("sales", "inventory")
BASE_COLUMNS = ["location", "sku", "date", "description", "department"]
MEASURE_COLUMN = {"sales": "quantity", "inventory": "count"}
RECORD_MODEL = {"sales": SalesRecord, "inventory": InventoryRecord}

ColumnRule = tuple[str, Callable[[str], bool]]

COLUMN_RULES: dict[str, tuple[ColumnRule, ...]] = {
    "sales": (
        ("location", lambda h: "property" in h),
        ("date", lambda h: "salesdate" in h and "last" not in h),
        ("sku", lambda h: "sku" in h),
        ("description", lambda h: "originaltitle" in h or "itemname" in h),
        ("quantity", lambda h: "qtysold" in h or "quantity" in h),
        ("department", lambda h: "department" in h),
    ),
    "inventory": (
        ("location", lambda h: "property" in h),
        (
            "date",
            lambda h: "counttimestamp" in h or ("date" in h and "sales" not in h),
        ),
        ("sku", lambda h: "sku" in h),
        ("description", lambda h: "itemname" in h),
        (
            "count",
            lambda h: "countedqty" in h or h == "count" or ("qty" in h and "count" in h),
        ),
        ("department", lambda h: "department" in h),
    ),
}


def _check_source_type(source_type: str) -> None:
    if source_type not in SOURCE_TYPES:
        raise ValueError(
            f"Unknown source type '{source_type}', expected one of {SOURCE_TYPES}"
        )


def clean_header(header) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "", str(header or "")).lower()


def resolve_columns(headers: list[str], source_type: str) -> dict[str, int]:
    """Returns a field -> column index mapping for one header row."""
    _check_source_type(source_type)
    mapping: dict[str, int] = {}
    for index, header in enumerate(headers):
        cleaned = clean_header(header)
        for field, matches in COLUMN_RULES[source_type]:
            if matches(cleaned):
                mapping.setdefault(field, index)
                break
    return mapping


def parse_number(value) -> float:
    """Strips thousands separators and parses a float, defaulting to 0."""
    if value is None:
        return 0.0
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return 0.0 if pd.isna(value) else float(value)
    try:
        return float(str(value).replace(",", "").strip())
    except ValueError:
        return 0.0


def _parse_numbers(series: pd.Series) -> pd.Series:
    cleaned = series.fillna("0").astype(str).str.replace(",", "", regex=False)
    return pd.to_numeric(cleaned, errors="coerce").fillna(0.0).astype(float)


def _parse_dates(series: pd.Series) -> pd.Series:
    parsed = pd.to_datetime(series, errors="coerce", format="mixed", utc=True)
    return parsed.dt.tz_localize(None)


def empty_frame(source_type: str) -> pd.DataFrame:
    _check_source_type(source_type)
    df = pd.DataFrame(columns=BASE_COLUMNS + [MEASURE_COLUMN[source_type]])
    df["date"] = pd.to_datetime(df["date"])
    df[MEASURE_COLUMN[source_type]] = df[MEASURE_COLUMN[source_type]].astype(float)
    return df


def normalize_rows(rows: list[list[str]], source_type: str) -> pd.DataFrame:
    """
    Turns parsed rows (header first) into a cleaned record frame with the
    columns location, sku, date, description, department and quantity/count.
    """
    _check_source_type(source_type)
    if not rows or len(rows) < 2:
        return empty_frame(source_type)

    headers = rows[0]
    mapping = resolve_columns(headers, source_type)
    measure = MEASURE_COLUMN[source_type]

    missing = [f for f in ("location", "sku", "date") if f not in mapping]
    if missing:
        logger.warning(f"    - ⚠️  No column found for: {', '.join(missing)}")

    # Short rows usually mean the repair pass merged or split a row wrongly.
    body = [row for row in rows[1:] if len(row) >= len(headers)]
    skipped = len(rows) - 1 - len(body)

    df = pd.DataFrame(index=range(len(body)))
    for field in BASE_COLUMNS + [measure]:
        index = mapping.get(field)
        df[field] = [row[index] for row in body] if index is not None else None

    df["sku"] = df["sku"].fillna("").astype(str).str.replace(r"^0+", "", regex=True)
    df["date"] = _parse_dates(df["date"])
    df["description"] = df["description"].fillna("").astype(str)
    department = df["department"].fillna("").astype(str)
    df["department"] = department.where(department != "", "Unknown")
    df[measure] = _parse_numbers(df[measure])
    negatives = int((df[measure] < 0).sum()) if source_type == "sales" else 0
    if negatives:
        df[measure] = df[measure].clip(lower=0)

    keep = (
        df["location"].notna()
        & ~df["location"].isin(settings.EXCLUDED_LOCATIONS)
        & df["date"].notna()
    )
    df = df[keep].reset_index(drop=True)
    df["location"] = df["location"].astype(str)

    logger.info(f"    - Rows Analyzed: {len(rows) - 1}")
    if skipped:
        logger.warning(f"    - ⚠️  Short rows skipped: {skipped}")
    dropped = len(body) - len(df)
    if dropped:
        logger.info(f"    - Dropped (bad date / excluded location): {dropped}")
    if negatives:
        logger.warning(f"    - ⚠️  Negative quantities set to 0: {negatives}")
    logger.info(f"    - Records kept: {len(df)}")

    return df


def to_records(df: pd.DataFrame, source_type: str) -> list[ItemRecord]:
    """Validates a normalized frame into SalesRecord / InventoryRecord models."""
    _check_source_type(source_type)
    model = RECORD_MODEL[source_type]
    columns = BASE_COLUMNS + [MEASURE_COLUMN[source_type]]
    return [model(**row) for row in df[columns].to_dict("records")]


def records_to_frame(records: Iterable[ItemRecord], source_type: str) -> pd.DataFrame:
    """Inverse of to_records, used after loading a dataset from the store."""
    _check_source_type(source_type)
    rows = [record.model_dump() for record in records]
    if not rows:
        return empty_frame(source_type)
    df = pd.DataFrame(rows)
    df["date"] = pd.to_datetime(df["date"])
    return df[BASE_COLUMNS + [MEASURE_COLUMN[source_type]]]
