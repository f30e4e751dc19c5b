import logging
import re

logger = logging.getLogger(__name__)

# Inventory count rows start with a hex UID (8+ chars) followed by a comma.
# Any line break NOT followed by that pattern is a break inside an unquoted field.
_BROKEN_NEWLINE = re.compile(r"\r?\n(?![0-9a-fA-F]{8,},)")


def repair_malformed_csv(text: str, source_type: str) -> str:
    """
    Re-joins inventory rows that were split by stray line breaks.

    Only the inventory export needs this; sales text is returned unchanged.
    The repair cannot be undone, so it must run exactly once, before parsing.
    """
    if source_type != "inventory":
        return text

    repaired, merged = _BROKEN_NEWLINE.subn(" ", text)
    if merged:
        logger.info(f"  > Repaired {merged} line break(s) inside unquoted fields.")
    return repaired


def audit_row_widths(rows: list[list[str]]) -> int:
    """
    Counts data rows whose cell count differs from the header row.

    The repair heuristic has no way to know when it merged too much or too
    little; this is the closest thing to a check, and is reported as a warning.
    """
    if len(rows) < 2:
        return 0
    width = len(rows[0])
    return sum(1 for row in rows[1:] if len(row) != width)
