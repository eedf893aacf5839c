"""Storage layer: filter compilation and the record store."""
from schema_registry.store.filters import FilterCriteria, build_filter_query
from schema_registry.store.records import RecordStore, validate_identity

__all__ = ["FilterCriteria", "RecordStore", "build_filter_query", "validate_identity"]
