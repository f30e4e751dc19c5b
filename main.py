import argparse
import logging
import sys
from datetime import date
from pathlib import Path

from pydantic import ValidationError

from forecaster import data_handler, filters, settings, summaries
from forecaster.errors import ForecasterError, StorageError, SummaryValidationError
from forecaster.forecast import compute_forecast, to_report_rows
from forecaster.logger import setup_logger
from forecaster.pipelines.forecast import ForecastPipeline
from forecaster.pipelines.inventory import InventoryPipeline
from forecaster.pipelines.sales import SalesPipeline
from forecaster.schemas import ReportFilters, ReportRow
from forecaster.store import DatasetStore, SettingsStore

logger = logging.getLogger(__name__)

# --- Pipeline Registry ---
INGEST_PIPELINES = {
    "sales": SalesPipeline,
    "inventory": InventoryPipeline,
}


# --- Shared state helpers ---


def load_summaries(settings_store: SettingsStore) -> list:
    return summaries.summaries_from_json(settings_store.get(settings.SUMMARIES_KEY, []))


def save_summaries(settings_store: SettingsStore, groups: list) -> None:
    settings_store.set(settings.SUMMARIES_KEY, summaries.summaries_to_json(groups))


def load_filters(settings_store: SettingsStore) -> ReportFilters:
    return ReportFilters(**settings_store.get(settings.FILTERS_KEY, {}))


def visible_report(store: DatasetStore, settings_store: SettingsStore) -> list[ReportRow]:
    """Recomputes the report from the stored datasets and applies the saved filters."""
    sales = store.load("sales")
    inventory = store.load("inventory")
    if sales is None or inventory is None:
        raise SummaryValidationError("Upload both sales and inventory data first.")

    report = to_report_rows(compute_forecast(sales, inventory))
    visible = filters.apply_filters(report, load_filters(settings_store))
    return filters.sort_rows(visible)


# --- Commands ---


def cmd_ingest(args, store, settings_store) -> int:
    pipeline = INGEST_PIPELINES[args.source](file_path=args.file, store=store)
    return 0 if pipeline.run() is not None else 1


def cmd_forecast(args, store, settings_store) -> int:
    pipeline = ForecastPipeline(store=store, test_mode=args.test)
    report = pipeline.run()
    if report is None:
        return 1

    visible = filters.sort_rows(filters.apply_filters(report, load_filters(settings_store)))
    totals = filters.selection_totals(visible, [row.id for row in visible])
    logger.info(f"\n--- Visible Rows: {len(visible)} of {len(report)} ---")
    logger.info(
        f"Total Sold: {totals['sold']:,.0f} | Total Stock: {totals['stock']:,.0f} | "
        f"Total Forecast: {totals['forecast']:,.0f} | Total Purchase: {totals['purchase']:,.0f}"
    )
    return 0


def cmd_filters(args, store, settings_store) -> int:
    if args.action == "reset":
        settings_store.set(settings.FILTERS_KEY, ReportFilters().model_dump(by_alias=True))
        logger.info("✅ Filters reset.")
        return 0

    current = load_filters(settings_store)
    if args.action == "set":
        updates = {
            field: value
            for field, value in vars(args).items()
            if field in ReportFilters.model_fields and value is not None
        }
        current = current.model_copy(update=updates)
        settings_store.set(settings.FILTERS_KEY, current.model_dump(by_alias=True))
        logger.info("✅ Filters saved.")

    for field, value in current.model_dump(by_alias=True).items():
        logger.info(f"{field}: {value}")
    return 0


def cmd_select(args, store, settings_store) -> int:
    if args.action == "clear":
        settings_store.set(settings.SELECTION_KEY, [])
        logger.info("✅ Selection cleared.")
    elif args.action == "set":
        settings_store.set(settings.SELECTION_KEY, list(dict.fromkeys(args.ids)))
        logger.info(f"✅ Selected {len(args.ids)} item(s).")
    else:
        selection = settings_store.get(settings.SELECTION_KEY, [])
        logger.info(f"Selected ({len(selection)}): {', '.join(selection) or '-'}")
    return 0


def cmd_summary(args, store, settings_store) -> int:
    groups = load_summaries(settings_store)

    if args.action == "list":
        if not groups:
            logger.info("No summaries created yet.")
        for s in groups:
            logger.info(
                f"[{s.id}] {s.name} ({s.date}) - {s.line_items} items | "
                f"Sold {s.total_sold:,.0f} | Stock {s.total_stock:,.0f} | "
                f"Forecast {s.total_forecast:,.0f} | Purchase {s.total_purchase:,.0f}"
            )

    elif args.action == "create":
        visible = visible_report(store, settings_store)
        # With no saved selection, every visible row is selected
        selected = settings_store.get(settings.SELECTION_KEY) or [row.id for row in visible]
        totals = filters.selection_totals(visible, selected)
        summary = summaries.create_summary(visible, selected, groups, name=args.name, totals=totals)
        save_summaries(settings_store, groups + [summary])

    elif args.action == "delete":
        save_summaries(settings_store, summaries.delete_summary(groups, args.id, confirmed=args.yes))
        logger.info(f"🗑️  Summary {args.id} deleted.")

    elif args.action == "export":
        if not groups:
            raise SummaryValidationError("There are no summaries to export.")
        today = date.today().isoformat()
        if args.kind == "table":
            df, sheet, default_name = summaries.export_table(groups), "Summaries", f"Summary_Report_{today}"
        else:
            df, sheet, default_name = summaries.export_backup(groups), "Backup_Data", f"Inventory_Backup_{today}"
        output = args.output or settings.OUTPUT_DIR / f"{default_name}.xlsx"
        data_handler.write_workbook(df, output, sheet)

    elif args.action == "import":
        rows = data_handler.read_tabular_file(args.path)
        if not rows:
            logger.warning("⚠️ The file has no rows to import.")
            return 0
        merged = summaries.import_summaries(rows, groups)
        save_summaries(settings_store, merged)
        logger.info(f"✅ Imported {len(merged) - len(groups)} summaries successfully!")

    return 0


def cmd_clear(args, store, settings_store) -> int:
    if not args.yes:
        raise SummaryValidationError("Clearing all data requires --yes.")
    store.clear()
    settings_store.clear()
    logger.info("✅ All data cleared.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="forecaster",
        description="Seasonal demand forecast and purchase planner for sales + inventory exports.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    ingest = sub.add_parser("ingest", help="Load a sales or inventory CSV export")
    ingest.add_argument("source", choices=sorted(INGEST_PIPELINES))
    ingest.add_argument("--file", type=Path, help="Explicit CSV path (default: newest in INPUT_DIR)")
    ingest.set_defaults(func=cmd_ingest)

    forecast = sub.add_parser("forecast", help="Build the purchase forecast report")
    forecast.add_argument("--test", action="store_true", help="Skip the webhook post")
    forecast.set_defaults(func=cmd_forecast)

    flt = sub.add_parser("filters", help="Show, set or reset report filters")
    flt.add_argument("action", choices=["show", "set", "reset"])
    flt.add_argument("--campground", action="append")
    flt.add_argument("--department", action="append")
    flt.add_argument("--vendor", action="append")
    flt.add_argument("--sku", dest="item_sku")
    flt.add_argument("--item-includes", dest="item_includes")
    flt.add_argument("--item-excludes", dest="item_excludes")
    flt.add_argument("--desc-includes", dest="desc_includes")
    flt.add_argument("--desc-excludes", dest="desc_excludes")
    flt.add_argument("--qty-min", dest="qty_min", type=float)
    flt.add_argument("--qty-max", dest="qty_max", type=float)
    flt.add_argument("--stock-min", dest="stock_min", type=float)
    flt.add_argument("--stock-max", dest="stock_max", type=float)
    flt.set_defaults(func=cmd_filters)

    select = sub.add_parser("select", help="Manage the selected report row ids")
    select.add_argument("action", choices=["show", "set", "clear"])
    select.add_argument("ids", nargs="*", help="Row ids ('LOCATION|SKU') for 'set'")
    select.set_defaults(func=cmd_select)

    summary = sub.add_parser("summary", help="Create, list, export and import summary groups")
    summary_sub = summary.add_subparsers(dest="action", required=True)
    summary_sub.add_parser("list")
    create = summary_sub.add_parser("create")
    create.add_argument("--name")
    delete = summary_sub.add_parser("delete")
    delete.add_argument("id", type=int)
    delete.add_argument("--yes", action="store_true")
    export = summary_sub.add_parser("export")
    export.add_argument("kind", choices=["table", "backup"])
    export.add_argument("--output", type=Path)
    imp = summary_sub.add_parser("import")
    imp.add_argument("path", type=Path)
    summary.set_defaults(func=cmd_summary)

    clear = sub.add_parser("clear", help="Delete stored datasets, filters and summaries")
    clear.add_argument("--yes", action="store_true")
    clear.set_defaults(func=cmd_clear)

    return parser


def main(argv: list[str] | None = None) -> int:
    setup_logger()
    args = build_parser().parse_args(argv)
    store = DatasetStore()
    settings_store = SettingsStore()

    try:
        return args.func(args, store, settings_store)
    except StorageError as e:
        logger.error(f"❌ Storage error: {e}")
        return 1
    except ForecasterError as e:
        logger.error(f"❌ {e}")
        return 1
    except ValidationError as e:
        logger.error("❌ Data validation failed!")
        logger.error(e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
