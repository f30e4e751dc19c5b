"""
Local persistence: the two uploaded datasets and a small settings document.

Datasets are stored one JSON file per key and replaced wholesale on save.
Dates are written as ISO strings and re-parsed into datetimes on load.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from . import settings
from .errors import StorageError
from .schemas import InventoryRecord, ItemRecord, SalesRecord

logger = logging.getLogger(__name__)

DATASET_MODELS = {"sales": SalesRecord, "inventory": InventoryRecord}


def _write_json_atomic(path: Path, payload: Any) -> None:
    """Writes to a temp file next to the target, then swaps it in."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, default=str)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class DatasetStore:
    """Key-value store for the 'sales' and 'inventory' record sets."""

    def __init__(self, directory: Path | None = None):
        self.directory = Path(directory) if directory is not None else settings.DATA_DIR

    def _path(self, key: str) -> Path:
        if key not in DATASET_MODELS:
            raise ValueError(f"Unknown dataset '{key}', expected one of {tuple(DATASET_MODELS)}")
        return self.directory / f"{key}.json"

    def save(self, key: str, records: list[ItemRecord]) -> None:
        path = self._path(key)
        payload = [record.model_dump(mode="json") for record in records]
        try:
            _write_json_atomic(path, payload)
        except OSError as e:
            raise StorageError(f"Could not save '{key}' dataset: {e}") from e
        logger.info(f"💾 Saved {len(records)} {key} records to {path}")

    def load(self, key: str) -> list[ItemRecord] | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with open(path, encoding="utf-8") as f:
                payload = json.load(f)
            model = DATASET_MODELS[key]
            return [model(**entry) for entry in payload]
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            raise StorageError(f"Could not load '{key}' dataset: {e}") from e

    def clear(self) -> None:
        for key in DATASET_MODELS:
            try:
                self._path(key).unlink(missing_ok=True)
            except OSError as e:
                raise StorageError(f"Could not clear '{key}' dataset: {e}") from e
        logger.info("🧹 Cleared stored datasets.")


class SettingsStore:
    """String key -> JSON value store kept in a single document."""

    def __init__(self, path: Path | None = None):
        self.path = (
            Path(path) if path is not None else settings.DATA_DIR / settings.SETTINGS_FILENAME
        )

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Could not read settings from {self.path}: {e}") from e

    def get(self, key: str, default: Any = None) -> Any:
        return self._read().get(key, default)

    def set(self, key: str, value: Any) -> None:
        document = self._read()
        document[key] = value
        try:
            _write_json_atomic(self.path, document)
        except (OSError, TypeError) as e:
            raise StorageError(f"Could not save setting '{key}': {e}") from e

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Could not clear settings: {e}") from e
