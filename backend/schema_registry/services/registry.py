"""Registry service: the operations the API layer calls."""
from typing import Any, Optional

from schema_registry.config import Settings
from schema_registry.database import Database
from schema_registry.models.schema_record import SchemaRecord, SchemaType
from schema_registry.services.upsert import Resolution, UpsertResolver
from schema_registry.store import FilterCriteria, RecordStore, validate_identity


class RegistryService:
    """Register, update, look up, list and delete schema records.

    Holds no state of its own beyond the database handle.
    """

    def __init__(self, database: Database):
        self.database = database
        self.store = RecordStore(database)
        self.resolver = UpsertResolver(self.store)

    @classmethod
    def from_settings(cls, settings: Settings) -> "RegistryService":
        return cls(Database(settings))

    async def register(self, name: str, type: "str | SchemaType", version: str, payload: Any) -> int:
        """Insert a new record. ConstraintViolation if the identity exists."""
        name, schema_type, version = validate_identity(name, type, version)
        return await self.store.insert(name, schema_type, version, payload)

    async def update(
        self,
        name: str,
        type: "str | SchemaType",
        version: str,
        payload: Any,
        base_id: Optional[int] = None,
    ) -> Resolution:
        """Update the payload in place, or fork when the identity changed."""
        return await self.resolver.resolve(name, type, version, payload, base_id=base_id)

    async def lookup(self, criteria: FilterCriteria) -> list[SchemaRecord]:
        return await self.store.query_by_filter(criteria)

    async def list_all(self) -> list[SchemaRecord]:
        return await self.store.query_by_filter(FilterCriteria())

    async def get(self, record_id: int) -> SchemaRecord:
        return await self.store.get_by_id(record_id)

    async def delete(self, record_id: int) -> None:
        await self.store.delete_by_id(record_id)

    async def ping(self) -> None:
        await self.store.ping()

    async def close(self) -> None:
        await self.database.dispose()
