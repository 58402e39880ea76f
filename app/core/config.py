import os

# Database Configuration
# Uses default credentials for local Docker Compose setup
DB_URL = os.getenv("DATABASE_URL", "postgres://user:password@db:5432/wbtracks_db")
GENERATE_SCHEMAS = os.getenv("GENERATE_SCHEMAS", "true").lower() == "true"

# Application Metadata
PROJECT_NAME = "WB-Tracks Inventory Service"
VERSION = "1.0.0"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Inventory rules
DEFAULT_MIN_STOCK_LEVEL = int(os.getenv("DEFAULT_MIN_STOCK_LEVEL", 5)) # Threshold for newly created inventory rows
TRANSACTION_RETRIES = int(os.getenv("TRANSACTION_RETRIES", 1)) # Extra attempts when a concurrent write invalidates a unit of work
DEFAULT_CONSUME_NOTES = "Used in production"
PUBLISH_TIMEOUT = float(os.getenv("PUBLISH_TIMEOUT", 2)) # Seconds a change push may take before it is abandoned
WS_SEND_TIMEOUT = float(os.getenv("WS_SEND_TIMEOUT", 1)) # Per-client send bound; stalled clients are dropped

# Temporary barcodes
TEMP_BARCODE_PREFIX = "TEMP-"
TEMP_BARCODE_MAX_HOURS = int(os.getenv("TEMP_BARCODE_MAX_HOURS", 168)) # One week
TEMP_BARCODE_DEFAULT_HOURS = 24

# Outbox Poller Configuration (delivers low stock alerts and change events)
POLLING_INTERVAL = int(os.getenv("POLLING_INTERVAL", 1)) # Poller checks for new events every N seconds
MAX_ATTEMPTS = int(os.getenv("MAX_ATTEMPTS", 5)) # Max retries for an event
BATCH_SIZE = int(os.getenv("BATCH_SIZE", 50)) # How many events to fetch per poll
