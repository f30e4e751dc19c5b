import logging
from datetime import date, datetime
from pathlib import Path

logger = logging.getLogger(__name__)


def get_date_suffix_for_filename() -> str:
    """Returns the current date as a YYYY-MM-DD string for filenames."""
    return datetime.now().strftime("%Y-%m-%d")


def format_display_date(day: date) -> str:
    """Short month/day/year string used on summary groups, e.g. '6/5/2024'."""
    return f"{day.month}/{day.day}/{day.year}"


def find_latest_report(directory: Path, prefix: str) -> tuple[Path, date] | None:
    """
    Finds the most recently modified '<prefix>*.csv' in a directory.
    Returns the path along with the file's modification date, or None.
    """
    if not directory.exists():
        return None

    candidates = [p for p in directory.glob(f"{prefix}*.csv") if p.is_file()]
    if not candidates:
        return None

    latest = max(candidates, key=lambda p: p.stat().st_mtime)
    return latest, date.fromtimestamp(latest.stat().st_mtime)


def load_text(file_path: Path) -> str | None:
    """
    Reads a text export with a multi-stage encoding fallback.
    1. UTF-8 with BOM support ('utf-8-sig').
    2. Latin-1, which can decode any byte sequence.
    """
    try:
        return file_path.read_text(encoding="utf-8-sig")

    except UnicodeDecodeError:
        logger.info(
            f"INFO: UTF-8 decoding failed for {file_path.name}. Retrying with 'latin-1'."
        )
        try:
            return file_path.read_text(encoding="latin-1")
        except OSError as e_latin1:
            logger.error(
                f"ERROR: Could not read {file_path.name} even with latin-1. Reason: {e_latin1}"
            )
            return None

    except FileNotFoundError:
        logger.info(f"INFO: Report not found at {file_path}, skipping.")
        return None

    except OSError as e_general:
        logger.error(
            f"ERROR: An unexpected error occurred while reading {file_path.name}. Reason: {e_general}"
        )
        return None
