import logging
from abc import ABC, abstractmethod
from typing import Any

from pydantic import ValidationError

from .errors import ForecasterError

logger = logging.getLogger(__name__)


class DataPipeline(ABC):
    """
    Abstract base class for the ingestion and report pipelines.
    Follows an Extract -> Transform -> Load (ETL) pattern.
    """

    def __init__(self, report_type: str, test_mode: bool = False):
        self.report_type = report_type
        self.test_mode = test_mode

    def run(self) -> list[Any] | None:
        """
        Orchestrates the pipeline execution. Returns the validated data that
        was loaded, or None when a stage failed (the failure is logged).
        """
        logger.info(f"🚀 STEP: {self.report_type.upper()}")
        logger.info("-" * 30)

        try:
            # --- 1. EXTRACT ---
            raw_data = self.extract()
            if raw_data is None:
                logger.warning(f"⚠️ No data extracted for {self.report_type}.")
                return None

            # --- 2. TRANSFORM ---
            validated_data = self.transform(raw_data)
            if validated_data is None:
                logger.error(f"❌ Transformation failed for {self.report_type}.")
                return None

            # --- 3. LOAD ---
            self.load(validated_data)

        except ValidationError as e:
            logger.error("❌ Data validation failed!")
            logger.error(e)
            return None
        except ForecasterError as e:
            logger.error(f"❌ {self.report_type.capitalize()} failed: {e}")
            return None

        logger.info(f"✅ {self.report_type.capitalize()} Pipeline Finished.\n")
        logger.info("=" * 60)
        return validated_data

    @abstractmethod
    def extract(self) -> Any | None:
        """Finds and reads the source data. Returns None when there is nothing to process."""
        pass

    @abstractmethod
    def transform(self, raw_data: Any) -> list[Any] | None:
        """Normalizes and validates the extracted data into pydantic models."""
        pass

    @abstractmethod
    def load(self, validated_data: list[Any]):
        """Persists or publishes the validated data."""
        pass
