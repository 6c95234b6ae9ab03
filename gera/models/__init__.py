"""
SQLAlchemy ORM models package.

All models are imported here so that Base.metadata knows every table
before create_all() runs.
"""

from gera.models.issued_pass import IssuedPass  # noqa: F401
