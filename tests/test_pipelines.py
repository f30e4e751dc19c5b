"""
End-to-end tests: CSV exports -> stored datasets -> forecast report.

Covers:
  - Sales and inventory ingestion (repair, normalization, exclusion)
  - Newest-file discovery in the input directory
  - An empty export leaving the stored dataset untouched
  - Forecast report output and the webhook payload
"""

import pytest

from forecaster import data_handler, settings
from forecaster.pipelines.forecast import ForecastPipeline
from forecaster.pipelines.inventory import InventoryPipeline
from forecaster.pipelines.sales import SalesPipeline
from forecaster.store import DatasetStore


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    input_dir = tmp_path / "input"
    input_dir.mkdir()
    monkeypatch.setattr(settings, "INPUT_DIR", input_dir)
    monkeypatch.setattr(settings, "OUTPUT_DIR", tmp_path / "output")
    monkeypatch.setattr(settings, "SAVE_JSON_OUTPUT", False)
    monkeypatch.setattr(settings, "WEBHOOK_URL", None)
    return tmp_path


@pytest.fixture
def store(workspace):
    return DatasetStore(workspace / "data")


@pytest.fixture
def sales_file(workspace, sales_csv):
    return _write(workspace, "sales.csv", sales_csv)


@pytest.fixture
def inventory_file(workspace, inventory_csv):
    return _write(workspace, "inventory.csv", inventory_csv)


def _write(directory, name, text):
    path = directory / name
    path.write_text(text, encoding="utf-8")
    return path


# ── Ingestion ──────────────────────────────────────────────────────────


class TestIngestion:
    def test_sales_upload(self, sales_file, store):
        records = SalesPipeline(file_path=sales_file, store=store).run()

        assert [(r.location, r.sku, r.quantity) for r in records] == [
            ("MGC", "123", 50.0),
            ("MGC", "123", 50.0),
        ]
        assert store.load("sales") == records

    def test_inventory_upload_repairs_split_rows(self, inventory_file, store):
        records = InventoryPipeline(file_path=inventory_file, store=store).run()

        assert len(records) == 1
        record = records[0]
        assert (record.location, record.sku, record.count) == ("MGC", "123", 20.0)
        assert record.description == "_Hat_Acme_Blue Wide Brim"
        assert record.department == "Apparel"

    def test_finds_newest_export_in_input_dir(self, sales_csv, store):
        _write(settings.INPUT_DIR, "sales_june.csv", sales_csv)
        records = SalesPipeline(store=store).run()
        assert len(records) == 2

    def test_missing_export(self, workspace, store):
        assert SalesPipeline(store=store).run() is None
        assert store.load("sales") is None

    def test_empty_export_keeps_stored_data(self, workspace, sales_file, sales_csv, store):
        SalesPipeline(file_path=sales_file, store=store).run()

        header_only = sales_csv.splitlines()[0] + "\n"
        path = _write(workspace, "sales_empty.csv", header_only)
        assert SalesPipeline(file_path=path, store=store).run() is None
        assert len(store.load("sales")) == 2


# ── Forecast ───────────────────────────────────────────────────────────


@pytest.fixture
def loaded_store(sales_file, inventory_file, store):
    SalesPipeline(file_path=sales_file, store=store).run()
    InventoryPipeline(file_path=inventory_file, store=store).run()
    return store


class TestForecastPipeline:
    def test_report_rows(self, loaded_store):
        pipeline = ForecastPipeline(store=loaded_store, test_mode=True)
        report = pipeline.run()

        assert [row.id for row in report] == ["MGC|123"]
        row = report[0]
        assert (row.item, row.vendor, row.description) == ("Hat", "Acme", "Blue")
        assert row.department == "Apparel"
        assert row.qty_sold == 100
        assert row.in_stock == 20
        assert row.forecast == 50
        assert row.purchase == 30

        assert pipeline.output_path.exists()
        assert pipeline.output_path.read_text().splitlines()[0] == (
            "id,Campground,Department,SKU,Item,Vendor,Description,QTYSold,InStock,Forecast,Purchase"
        )

    def test_needs_both_datasets(self, sales_file, store):
        SalesPipeline(file_path=sales_file, store=store).run()
        assert ForecastPipeline(store=store, test_mode=True).run() is None

    def test_posts_report_to_webhook(self, loaded_store, monkeypatch):
        calls = []

        class FakeResponse:
            def raise_for_status(self):
                pass

        def fake_post(url, json, timeout):
            calls.append((url, json))
            return FakeResponse()

        monkeypatch.setattr(settings, "WEBHOOK_URL", "https://hooks.example.test/forecast")
        monkeypatch.setattr(data_handler.requests, "post", fake_post)

        ForecastPipeline(store=loaded_store).run()

        assert len(calls) == 1
        url, payload = calls[0]
        assert url == "https://hooks.example.test/forecast"
        assert payload["reportType"] == "forecast"
        assert payload["metadata"]["count"] == 1
        assert payload["reportData"][0]["Purchase"] == 30

    def test_test_mode_skips_webhook(self, loaded_store, monkeypatch):
        monkeypatch.setattr(settings, "WEBHOOK_URL", "https://hooks.example.test/forecast")
        monkeypatch.setattr(
            data_handler.requests, "post", lambda *a, **k: pytest.fail("webhook called")
        )
        assert ForecastPipeline(store=loaded_store, test_mode=True).run()

    def test_return_lines_do_not_break_the_report(self, workspace, store, inventory_file):
        returns = (
            "Property,Sales_Date,SKU,Original_Title,Qty_Sold,Department\n"
            "MGC,2024-06-15,123,_Hat_Acme_Blue,-5,Apparel\n"
        )
        SalesPipeline(file_path=_write(workspace, "returns.csv", returns), store=store).run()
        InventoryPipeline(file_path=inventory_file, store=store).run()

        report = ForecastPipeline(store=store, test_mode=True).run()
        assert [(r.id, r.forecast, r.in_stock, r.purchase) for r in report] == [
            ("MGC|123", 0, 20, 0)
        ]
