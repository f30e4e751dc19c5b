import logging

from forecaster import settings
from forecaster.pipelines.source import SourcePipeline
from forecaster.repair import audit_row_widths, repair_malformed_csv

logger = logging.getLogger(__name__)


class InventoryPipeline(SourcePipeline):
    source_type = "inventory"
    filename_prefix = settings.INVENTORY_FILENAME_PREFIX

    def preprocess(self, text: str) -> str:
        return repair_malformed_csv(text, self.source_type)

    def inspect_rows(self, rows: list[list[str]]) -> None:
        mismatched = audit_row_widths(rows)
        if mismatched:
            logger.warning(
                f"    - ⚠️  {mismatched} row(s) still differ from the header width after repair."
            )
