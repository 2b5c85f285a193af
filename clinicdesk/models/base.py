"""Shared metadata for all tables."""

from sqlalchemy import MetaData

# One MetaData so foreign keys between tables resolve on create_all
metadata = MetaData()
