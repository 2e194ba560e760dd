"""SQL database infrastructure (SQLAlchemy async)."""
