"""
Tests for local persistence of datasets and settings.
"""

from datetime import datetime

import pytest

from forecaster.errors import StorageError
from forecaster.schemas import InventoryRecord, SalesRecord
from forecaster.store import DatasetStore, SettingsStore


class TestDatasetStore:
    def test_save_and_load_keeps_dates(self, tmp_path):
        store = DatasetStore(tmp_path)
        records = [
            SalesRecord(
                location="MGC", sku="123", date=datetime(2024, 6, 15, 8, 30),
                description="_Hat_Acme_Blue", department="Apparel", quantity=4,
            )
        ]
        store.save("sales", records)

        loaded = store.load("sales")
        assert loaded == records
        assert isinstance(loaded[0].date, datetime)

    def test_missing_dataset_is_none(self, tmp_path):
        assert DatasetStore(tmp_path).load("inventory") is None

    def test_save_replaces_whole_dataset(self, tmp_path):
        store = DatasetStore(tmp_path)
        first = InventoryRecord(location="A", sku="1", date=datetime(2024, 1, 1), count=1)
        second = InventoryRecord(location="B", sku="2", date=datetime(2024, 1, 2), count=2)
        store.save("inventory", [first])
        store.save("inventory", [second])
        assert store.load("inventory") == [second]

    def test_clear(self, tmp_path):
        store = DatasetStore(tmp_path)
        store.save("inventory", [])
        store.clear()
        assert store.load("inventory") is None
        assert store.load("sales") is None

    def test_unknown_key(self, tmp_path):
        with pytest.raises(ValueError):
            DatasetStore(tmp_path).load("returns")

    def test_corrupt_file(self, tmp_path):
        (tmp_path / "sales.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(StorageError):
            DatasetStore(tmp_path).load("sales")

    def test_no_temp_files_left_behind(self, tmp_path):
        DatasetStore(tmp_path).save("sales", [])
        assert sorted(p.name for p in tmp_path.iterdir()) == ["sales.json"]


class TestSettingsStore:
    def test_get_default(self, tmp_path):
        assert SettingsStore(tmp_path / "settings.json").get("missing", []) == []

    def test_set_and_get(self, tmp_path):
        store = SettingsStore(tmp_path / "settings.json")
        store.set("inventory_selection", ["MGC|123"])
        store.set("inventory_filters", {"campground": ["MGC"]})
        assert store.get("inventory_selection") == ["MGC|123"]
        assert store.get("inventory_filters") == {"campground": ["MGC"]}

    def test_clear(self, tmp_path):
        store = SettingsStore(tmp_path / "settings.json")
        store.set("k", 1)
        store.clear()
        assert store.get("k") is None

    def test_corrupt_document(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("[", encoding="utf-8")
        with pytest.raises(StorageError):
            SettingsStore(path).get("k")
