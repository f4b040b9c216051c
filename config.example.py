# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets. Use .env (local, gitignored).

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKMINDER_APP_NAME": "App display name (default: taskminder).",
    "TASKMINDER_LOG_LEVEL": "Console logging level (default: INFO).",
    # Scheduler
    "TASKMINDER_SHUTDOWN_GRACE_SECONDS": "How long shutdown waits for a running reminder (default: 60).",
    "TASKMINDER_REMINDER_LEAD_MINUTES": "Default reminder lead before the due time for /add (default: 15).",
    # Connectors / notifiers
    "TASKMINDER_CONSOLE_ENABLED": "Run the console REPL (true/false, default: true).",
    "TASKMINDER_CONSOLE_BELL": "Ring the terminal bell on reminders (true/false).",
    "TASKMINDER_MATRIX_ENABLED": "Also send reminders to Matrix (true/false).",
    # Matrix
    "TASKMINDER_MATRIX_HOMESERVER": "Matrix homeserver URL.",
    "TASKMINDER_MATRIX_USER_ID": "Matrix user ID (bot).",
    "TASKMINDER_MATRIX_PASSWORD": "Password for first login (session stored locally).",
    "TASKMINDER_MATRIX_ROOM_ID": "Room that receives reminders.",
    # Paths (gitignored)
    "TASKMINDER_DATA_DIR": "Local data directory (default: .local/taskminder).",
    "TASKMINDER_TASKS_DB_PATH": "TaskStore SQLite path (default: <data_dir>/tasks.sqlite3).",
    "TASKMINDER_MATRIX_STORE_PATH": "Matrix session store path (default: <data_dir>/matrix_store).",
}
