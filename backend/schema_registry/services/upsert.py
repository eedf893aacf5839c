"""Upsert resolver: in-place payload update or fork into a new record.

A record is identified by (name, type, version). Given a candidate, the
resolver finds the record the caller is editing:

  1. the record with `base_id`, when the caller names one;
  2. otherwise the record with exactly the candidate's identity;
  3. otherwise the oldest record sharing the candidate's name (its lineage).

If that record has the candidate's identity its payload is overwritten in
place. If the identity differs, the existing record is left untouched and
the candidate is inserted as a new record (a fork). A name that was never
registered cannot be updated and raises NotFound.

The read-then-write sequence is not atomic. Two callers forking into the
same new identity race on the uniqueness constraint and the loser gets
ConstraintViolation. A fork insert stands once committed even if the
caller goes away before the read-back.
"""
import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from schema_registry.errors import NotFound
from schema_registry.models.schema_record import SchemaRecord, SchemaType
from schema_registry.store import FilterCriteria, RecordStore, validate_identity

logger = logging.getLogger(__name__)


class Outcome(str, enum.Enum):
    UPDATED = "updated"
    FORKED = "forked"


@dataclass
class Resolution:
    """What an update did, and the records now stored under the candidate identity."""
    outcome: Outcome
    records: list[SchemaRecord] = field(default_factory=list)

    @property
    def forked(self) -> bool:
        return self.outcome is Outcome.FORKED


class UpsertResolver:
    def __init__(self, store: RecordStore):
        self.store = store

    async def _find_existing(
        self, name: str, schema_type: SchemaType, version: str, base_id: Optional[int]
    ) -> SchemaRecord:
        if base_id is not None:
            return await self.store.get_by_id(base_id)

        matches = await self.store.query_by_filter(
            FilterCriteria.identity(name, schema_type, version)
        )
        if matches:
            return matches[0]

        lineage = await self.store.query_by_filter(FilterCriteria(name=name))
        if lineage:
            return lineage[0]

        raise NotFound(
            f"Schema {name}/{schema_type.value}/{version} not found; register it first",
            name=name, type=schema_type.value, version=version,
        )

    async def resolve(
        self,
        name: str,
        type: "str | SchemaType",
        version: str,
        payload: Any,
        base_id: Optional[int] = None,
    ) -> Resolution:
        name, schema_type, version = validate_identity(name, type, version)
        existing = await self._find_existing(name, schema_type, version, base_id)
        candidate = FilterCriteria.identity(name, schema_type, version)

        if existing.identity == (name, schema_type, version):
            await self.store.update_payload(name, schema_type, version, payload)
            return Resolution(Outcome.UPDATED, await self.store.query_by_filter(candidate))

        new_id = await self.store.insert(name, schema_type, version, payload)
        logger.info(
            f"Forked schema {existing.id} ({existing.name}/{existing.type.value}/{existing.version}) "
            f"into {new_id} ({name}/{schema_type.value}/{version})"
        )
        return Resolution(Outcome.FORKED, await self.store.query_by_filter(candidate))
