"""Root conftest — shared test configuration."""

import os

# Ensure tests never touch a real database file or a developer .env
os.environ.setdefault("TASKBOARD_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("TASKBOARD_LOG_FORMAT", "text")
