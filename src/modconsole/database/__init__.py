"""
SQLite storage behind the message store and registry collaborators.

- **db_connection.py**: the single shared aiosqlite connection with
  serialised write transactions.
- **db_schema.py**: tables, indexes and schema version.
"""
