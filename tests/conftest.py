"""Test environment: in-memory SQLite and no background scheduler."""

import os

# Must be set before firmwatch.core.config is imported (settings are cached at import).
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SCHEDULER_ENABLED", "false")
