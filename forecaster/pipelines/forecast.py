import logging
from datetime import date

import pandas as pd

from forecaster import data_handler, normalizer, settings
from forecaster.forecast import compute_forecast, to_report_rows
from forecaster.pipeline import DataPipeline
from forecaster.schemas import ReportRow
from forecaster.store import DatasetStore

logger = logging.getLogger(__name__)


class ForecastPipeline(DataPipeline):
    """Builds the purchase forecast from the stored sales and inventory datasets."""

    def __init__(self, store: DatasetStore | None = None, test_mode: bool = False):
        super().__init__("forecast", test_mode=test_mode)
        self.store = store or DatasetStore()
        self.system_date = date.today()
        self.output_path = None

    def extract(self) -> dict[str, pd.DataFrame] | None:
        logger.info("--- Loading Stored Datasets ---")
        frames = {}
        for key in ("sales", "inventory"):
            records = self.store.load(key)
            if records is None:
                logger.error(f"  > ERROR: No {key} data uploaded yet.")
                return None
            logger.info(f"  > {key.capitalize()}: {len(records)} records")
            frames[key] = normalizer.records_to_frame(records, key)
        return frames

    def transform(self, frames: dict[str, pd.DataFrame]) -> list[ReportRow] | None:
        logger.info("\n--- Computing Forecast ---")
        report_df = compute_forecast(
            frames["sales"],
            frames["inventory"],
            on_progress=lambda stage: logger.info(f"  > ⏳ {stage}..."),
        )

        logger.info("Validating data against schema...")
        validated_data = to_report_rows(report_df)
        logger.info(f"✅ Data validation successful ({len(validated_data)} rows).")
        return validated_data

    def load(self, validated_data: list[ReportRow]):
        if validated_data:
            self.output_path = data_handler.save_outputs(
                validated_data, settings.REPORT_FILENAME_BASE
            )
        else:
            logger.warning("No data to save to disk.")

        if not self.test_mode:
            data_handler.post_to_webhook(
                validated_data=validated_data,
                metadata={
                    "status": "Forecast Updated",
                    "count": len(validated_data),
                    "date": self.system_date.isoformat(),
                },
                report_type="forecast",
            )
        else:
            logger.info("🧪 Test Mode: Skipping webhook post.")
