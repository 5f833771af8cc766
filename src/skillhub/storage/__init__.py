"""SQLite storage: connection, migrations, and transactions."""

from skillhub.storage.database import Database, now_ms
from skillhub.storage.schema import run_migrations

__all__ = ["Database", "now_ms", "run_migrations"]
