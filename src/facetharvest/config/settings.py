import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parents[3]
OUTPUT_DIR = Path(os.environ.get("FACETHARVEST_OUTPUT_DIR", BASE_DIR / "data"))

SITE_URL = "https://cruise.airtkt.com"

# Page bootstrap (milliseconds, Playwright units)
NAVIGATION_TIMEOUT_MS = 60000
READY_TIMEOUT_MS = 30000

# Selection list protocol
OPEN_TIMEOUT_MS = 20000
CLOSE_TIMEOUT_MS = 5000
SETTLE_MS = 1200
MAX_ROUNDS = 50
REQUIRED_STABLE_ROUNDS = 2

# Search form
SEARCH_WINDOW_MONTHS = 3
SEARCH_DURATION_MIN = 0
SEARCH_DURATION_MAX = 365
RESULTS_TIMEOUT_MS = 30000
