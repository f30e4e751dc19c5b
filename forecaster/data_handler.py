import json
import logging
from pathlib import Path
from typing import Any, Optional

import pandas as pd
import requests

from . import settings
from . import utils
from .csv_parser import parse_csv
from .schemas import ReportRow

logger = logging.getLogger(__name__)


def save_outputs(validated_data: list[ReportRow], base_name: str) -> Path:
    """Saves the report to CSV and conditionally to JSON, with dated filenames."""
    settings.OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    date_suffix = utils.get_date_suffix_for_filename()

    csv_path = settings.OUTPUT_DIR / f"{base_name}_{date_suffix}.csv"
    json_path = settings.OUTPUT_DIR / f"{base_name}_{date_suffix}.json"

    columns = [info.alias or name for name, info in ReportRow.model_fields.items()]
    df = pd.DataFrame(
        [item.model_dump(by_alias=True) for item in validated_data], columns=columns
    )
    df.to_csv(csv_path, index=False)
    logger.info(f"✅ Report saved to: {csv_path}")

    if settings.SAVE_JSON_OUTPUT:
        with open(json_path, "w") as f:
            json_data = [item.model_dump(by_alias=True) for item in validated_data]
            json.dump(json_data, f, indent=2, default=str)
        logger.info(f"✅ JSON output saved to: {json_path}")
    else:
        logger.info("INFO: Skipping JSON file save as per configuration.")

    return csv_path


def post_to_webhook(
    validated_data: list[ReportRow],
    metadata: Optional[dict[str, Any]] = None,
    report_type: str = "forecast",
):
    """
    Posts the validated report rows and a metadata block to the webhook.
    """
    if not settings.WEBHOOK_URL:
        logger.warning("⚠️ WEBHOOK_URL not set. Skipping webhook post.")
        return

    logger.info(f"🚀 Posting {report_type} data to webhook: {settings.WEBHOOK_URL}")

    payload = {
        "reportType": report_type,
        "reportData": [
            item.model_dump(mode="json", by_alias=True) for item in validated_data
        ],
        "metadata": metadata or {},
    }

    try:
        response = requests.post(settings.WEBHOOK_URL, json=payload, timeout=15)
        response.raise_for_status()
        logger.info("✅ Data successfully posted to webhook.")
    except requests.exceptions.RequestException as e:
        logger.error(f"❌ Error posting to webhook: {e}")


# --- Spreadsheet files ---


def write_workbook(df: pd.DataFrame, path: Path, sheet_name: str) -> Path:
    """Writes one DataFrame to a single-sheet .xlsx (or .csv by extension)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() == ".csv":
        df.to_csv(path, index=False)
    else:
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name=sheet_name, index=False)
    logger.info(f"✅ Exported {len(df)} rows to: {path}")
    return path


def read_tabular_file(path: Path) -> list[dict[str, Any]]:
    """
    Reads an exported file back into generic rows keyed by column name.
    CSV goes through the quote-aware parser; anything else is read as a
    workbook (first sheet).
    """
    path = Path(path)
    if path.suffix.lower() == ".csv":
        text = utils.load_text(path)
        rows = parse_csv(text or "")
        if not rows:
            return []
        header, body = rows[0], rows[1:]
        return [
            {column: (row[i] if i < len(row) else "") for i, column in enumerate(header)}
            for row in body
            if any(row)
        ]

    df = pd.read_excel(path, sheet_name=0, dtype=object, engine="openpyxl")
    df = df.astype(object).where(df.notna(), "")
    return df.to_dict("records")
