"""ORM models and key helpers for the single-table keyspace."""
