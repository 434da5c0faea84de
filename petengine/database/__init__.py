"""Persistence schemas (SQLAlchemy ORM rows)."""
