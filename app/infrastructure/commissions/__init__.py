"""
Infrastructure adapters for the commissions bounded context.

Each adapter implements a domain port (ABC) on top of a
SQLAlchemy engine backed by SQLite.
"""
