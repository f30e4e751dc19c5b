import os
from pathlib import Path
from dotenv import load_dotenv

# --- Base Directory ---
BASE_DIR = Path(__file__).resolve().parent.parent

# --- Load Environment Variables ---
load_dotenv(BASE_DIR / ".env")

# --- Path Configuration ---
INPUT_DIR = BASE_DIR / os.getenv("INPUT_DIR", "input")
OUTPUT_DIR = BASE_DIR / os.getenv("OUTPUT_DIR", "output")
# Where the uploaded datasets and the settings document are persisted.
DATA_DIR = BASE_DIR / os.getenv("DATA_DIR", "data")

# --- Filename Configuration ---
SALES_FILENAME_PREFIX = os.getenv("SALES_FILENAME_PREFIX", "sales")
INVENTORY_FILENAME_PREFIX = os.getenv("INVENTORY_FILENAME_PREFIX", "inventory")
REPORT_FILENAME_BASE = os.getenv("REPORT_FILENAME", "forecast_report")
SETTINGS_FILENAME = os.getenv("SETTINGS_FILENAME", "settings.json")

# --- Outputs ---
WEBHOOK_URL = os.getenv("WEBHOOK_URL")
SAVE_JSON_OUTPUT = os.getenv("SAVE_JSON_OUTPUT", "false").lower() in ("1", "true", "yes")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = BASE_DIR / os.getenv("LOG_DIR", "logs")
LOG_FILENAME = os.getenv("LOG_FILENAME", "forecaster.log")
LOG_TO_FILE = os.getenv("LOG_TO_FILE", "true").lower() in ("1", "true", "yes")

# --- Shared Business Logic ---
# Facilities whose records are dropped entirely during normalization.
EXCLUDED_LOCATIONS = [
    code.strip()
    for code in os.getenv("EXCLUDED_LOCATIONS", "ALG").split(",")
    if code.strip()
]

# The selling season, inclusive (April through October).
SEASON_START_MONTH = int(os.getenv("SEASON_START_MONTH", "4"))
SEASON_END_MONTH = int(os.getenv("SEASON_END_MONTH", "10"))

# Which keys make it into the report: purchase_or_stock, purchase_only or all.
REPORT_INCLUSION_POLICY = os.getenv("REPORT_INCLUSION_POLICY", "purchase_or_stock")

# Keys used in the settings store.
SUMMARIES_KEY = "inventory_summaries"
FILTERS_KEY = "inventory_filters"
SELECTION_KEY = "inventory_selection"
