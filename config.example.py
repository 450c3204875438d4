# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
The app process and every widget host must agree on DOTCAT_STORE_DB_PATH and
DOTCAT_SNAPSHOT_KEY, otherwise the widgets read a channel nobody writes.
"""

ENV_VARS = {
    # App / logging
    "DOTCAT_APP_NAME": "App display name (default: dotcat).",
    "DOTCAT_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Paths
    "DOTCAT_DATA_DIR": "Local data directory for the store and logs (default: .local/dotcat).",
    "DOTCAT_STORE_DB_PATH": "Shared snapshot store file (default: <data_dir>/widget.sqlite3).",
    # Snapshot channel
    "DOTCAT_SNAPSHOT_KEY": "Base store key; per-pet channels append ':<pet id>' (default: widget_snapshot).",
    # Refresh cadence
    "DOTCAT_REFRESH_INTERVAL_MINUTES": "Widget refresh / republish interval, never below 15 (default: 15).",
    "DOTCAT_PUBLISH_POLL_SECONDS": "How often the writer ticker checks for due republishes (default: 60).",
    # Renderer slots
    "DOTCAT_MAX_ITEMS_SMALL": "Task rows on the small widget (default: 0, badge only).",
    "DOTCAT_MAX_ITEMS_MEDIUM": "Task rows on the medium widget (default: 3).",
}
