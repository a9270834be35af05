"""DB Explorer: browse PostgreSQL tables, follow foreign keys and diagram the schema."""

__version__ = "0.1.0"
