# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKCLOCK_APP_NAME": "App display name (default: taskclock).",
    "TASKCLOCK_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Storage
    "TASKCLOCK_DATA_DIR": "Local data directory for the database and logs (default: .local/taskclock).",
    "TASKCLOCK_STORAGE_BACKEND": "sqlite | json | memory (default: sqlite).",
    "TASKCLOCK_DB_PATH": "SQLite file for the sqlite backend (default: <data_dir>/tasks.sqlite3).",
    "TASKCLOCK_JSON_PATH": "JSON file for the json backend (default: <data_dir>/tasks.json).",
    "TASKCLOCK_STORAGE_KEY": "Record key holding the task snapshot (default: todo-tasks).",
    # Timer
    "TASKCLOCK_TICK_INTERVAL_SECONDS": "Wake-up interval for running timers (default: 1.0, min 0.05).",
    # Console
    "TASKCLOCK_AUTO_RENDER": "Reprint the task list after every change (true/false, default: true).",
}
