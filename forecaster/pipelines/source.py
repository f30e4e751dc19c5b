import logging
from pathlib import Path

import pandas as pd

from forecaster import normalizer, settings, utils
from forecaster.csv_parser import parse_csv
from forecaster.pipeline import DataPipeline
from forecaster.schemas import ItemRecord
from forecaster.store import DatasetStore

logger = logging.getLogger(__name__)


class SourcePipeline(DataPipeline):
    """
    Reads one CSV export, normalizes it and replaces the stored dataset.
    Subclasses set the source type and may pre-process the raw text.
    """

    source_type: str = ""
    filename_prefix: str = ""

    def __init__(
        self,
        file_path: Path | None = None,
        store: DatasetStore | None = None,
        test_mode: bool = False,
    ):
        super().__init__(f"{self.source_type} upload", test_mode=test_mode)
        self.file_path = Path(file_path) if file_path is not None else None
        self.store = store or DatasetStore()

    def locate(self) -> Path | None:
        if self.file_path is not None:
            return self.file_path
        found_info = utils.find_latest_report(settings.INPUT_DIR, self.filename_prefix)
        if not found_info:
            logger.warning(f"  > ⚠️  File missing ({self.filename_prefix}*.csv). Skipping.")
            return None
        path, file_date = found_info
        logger.info(f"  > Found: {path.name} (File Date: {file_date})")
        return path

    def preprocess(self, text: str) -> str:
        return text

    def inspect_rows(self, rows: list[list[str]]) -> None:
        pass

    def extract(self) -> pd.DataFrame | None:
        logger.info(f"--- Reading {self.source_type.capitalize()} Export ---")
        path = self.locate()
        if path is None:
            return None

        text = utils.load_text(path)
        if text is None:
            return None

        rows = parse_csv(self.preprocess(text))
        self.inspect_rows(rows)
        return normalizer.normalize_rows(rows, self.source_type)

    def transform(self, df: pd.DataFrame) -> list[ItemRecord] | None:
        if df.empty:
            # Keep whatever was stored before rather than wiping it
            logger.warning(f"⚠️ No usable {self.source_type} records; stored data left unchanged.")
            return None

        logger.info("Validating data against schema...")
        validated_data = normalizer.to_records(df, self.source_type)
        logger.info(f"✅ Data validation successful ({len(validated_data)} records).")
        return validated_data

    def load(self, validated_data: list[ItemRecord]):
        self.store.save(self.source_type, validated_data)
