"""SQLAlchemy declarative Base shared by the ingestion, issue and risk tables."""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

# Same names SQLAlchemy generates for index=True / foreign keys, spelled out so
# Alembic autogenerate stays stable.
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
}


class Base(DeclarativeBase):
    """Declarative base for all Firmwatch ORM models."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)
