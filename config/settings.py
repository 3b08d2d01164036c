import os

# Project root directory (foresight/)
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# Default location of the published prediction documents
PUBLIC_DIR = os.path.join(BASE_DIR, "public")

# Base path the documents are resolved against (directory, file:// or http(s):// URL)
DATA_BASE_URL = os.getenv("FORESIGHT_PUBLIC_URL") or PUBLIC_DIR

PRIMARY_DOCUMENT = "future.json"
SUMMARY_DOCUMENT = "future_summary.json"

# None means wait on the producer indefinitely
FETCH_TIMEOUT_SECONDS = None

TOP_PERFORMERS_LIMIT = 10
COMPARISON_LIMIT = 15

LOGS_DIR = os.path.join(BASE_DIR, "logs")
REPORTS_DIR = os.path.join(BASE_DIR, "reports")

# Ensure required local directories exist
os.makedirs(LOGS_DIR, exist_ok=True)
