"""Import all models so SQLAlchemy metadata knows about them."""
from schema_registry.models.base import Base
from schema_registry.models.schema_record import SchemaRecord, SchemaType

__all__ = ["Base", "SchemaRecord", "SchemaType"]
