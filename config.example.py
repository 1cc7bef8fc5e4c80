# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TT_APP_NAME": "App display name (default: todo-tracker).",
    "TT_LOG_LEVEL": "Console logging level; the log file always gets DEBUG (default: WARNING).",
    # Paths
    "TT_DB_FILENAME": "SQLite task store path (default: ~/.todo_tracker.sqlite).",
    "TT_LOG_FILENAME": "Diagnostic log file path (default: ~/.todo_tracker.log).",
}
