"""
Single source of truth for database tables that exist after migrations.

Use these names when writing raw SQL. Must match the models and the alembic revisions.
"""
ALL_TABLE_NAMES = (
    "sessions",
    "conversations",
)
