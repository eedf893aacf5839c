"""Registry business logic."""
from schema_registry.services.registry import RegistryService
from schema_registry.services.upsert import Outcome, Resolution, UpsertResolver

__all__ = ["Outcome", "RegistryService", "Resolution", "UpsertResolver"]
