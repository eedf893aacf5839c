"""Record store: durable CRUD primitives over schema records.

Each operation runs in its own short session and commits a single
statement. Uniqueness of (name, type, version) is left to the database
constraint; a lost insert race comes back as ConstraintViolation.
"""
import logging
from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy import delete, update
from sqlalchemy.exc import DataError, IntegrityError, InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from schema_registry.database import Database
from schema_registry.errors import ConstraintViolation, InvalidInput, NotFound, StorageUnavailable
from schema_registry.models.base import utcnow
from schema_registry.models.schema_record import SchemaRecord, SchemaType
from schema_registry.store.filters import FilterCriteria, build_filter_query

logger = logging.getLogger(__name__)

# Connection, pool and transport failures. The caller may retry these.
_UNAVAILABLE_ERRORS = (OperationalError, InterfaceError, PoolTimeoutError, OSError)


def validate_identity(name: str, type: "str | SchemaType", version: str) -> tuple[str, SchemaType, str]:
    """Check the identity triple before any storage call.

    Returns the triple with `type` converted to SchemaType.
    """
    if not name:
        raise InvalidInput("Schema name must not be empty", field="name")
    if not type:
        raise InvalidInput("Schema type must not be empty", field="type")
    if not version:
        raise InvalidInput("Schema version must not be empty", field="version")
    for field, value in (("name", name), ("version", version)):
        limit = SchemaRecord.__table__.c[field].type.length
        if len(value) > limit:
            raise InvalidInput(
                f"Schema {field} is {len(value)} characters long (at most {limit} allowed)",
                field=field,
            )
    return name, SchemaType.parse(type), version


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """Translate database failures into the registry error taxonomy."""
    try:
        yield
    except IntegrityError as e:
        logger.warning("%s rejected by uniqueness constraint: %s", operation, e.orig)
        raise ConstraintViolation(
            "A schema with this name, type and version already exists"
        ) from e
    except DataError as e:
        logger.warning("%s rejected by the database: %s", operation, e.orig)
        raise InvalidInput(f"Value rejected by storage during {operation}") from e
    except _UNAVAILABLE_ERRORS as e:
        logger.warning("%s failed, storage unavailable: %s", operation, e)
        raise StorageUnavailable(f"Storage unavailable during {operation}") from e


class RecordStore:
    """CRUD over the schema table."""

    def __init__(self, database: Database):
        self.database = database

    async def insert(self, name: str, type: "str | SchemaType", version: str, payload: Any) -> int:
        """Create a record and return its new id."""
        name, schema_type, version = validate_identity(name, type, version)
        now = utcnow()
        record = SchemaRecord(
            name=name,
            type=schema_type,
            version=version,
            payload=payload,
            created=now,
            modified=now,
        )
        with storage_errors("insert"):
            async with self.database.session() as db:
                db.add(record)
                await db.commit()
        logger.info(f"Inserted schema {record.id} ({name}/{schema_type.value}/{version})")
        return record.id

    async def get_by_id(self, record_id: int) -> SchemaRecord:
        with storage_errors("get"):
            async with self.database.session() as db:
                record = await db.get(SchemaRecord, record_id)
        if record is None:
            raise NotFound(f"Schema {record_id} not found", id=record_id)
        return record

    async def query_by_filter(self, criteria: FilterCriteria) -> list[SchemaRecord]:
        """All records matching every set predicate, by ascending id."""
        with storage_errors("query"):
            async with self.database.session() as db:
                result = await db.execute(build_filter_query(criteria))
                return list(result.scalars().all())

    async def update_payload(
        self, name: str, type: "str | SchemaType", version: str, payload: Any
    ) -> SchemaRecord:
        """Overwrite the payload of the record with this exact identity.

        Only `payload` and `modified` change.
        """
        name, schema_type, version = validate_identity(name, type, version)
        identity = FilterCriteria.identity(name, schema_type, version)
        stmt = (
            update(SchemaRecord)
            .where(
                SchemaRecord.name == name,
                SchemaRecord.type == schema_type,
                SchemaRecord.version == version,
            )
            .values(payload=payload, modified=utcnow())
            .execution_options(synchronize_session=False)
        )
        with storage_errors("update"):
            async with self.database.session() as db:
                result = await db.execute(stmt)
                if result.rowcount == 0:
                    await db.rollback()
                    raise NotFound(
                        f"Schema {name}/{schema_type.value}/{version} not found",
                        name=name, type=schema_type.value, version=version,
                    )
                refreshed = await db.execute(build_filter_query(identity))
                record = refreshed.scalar_one()
                await db.commit()
        logger.info(f"Updated payload of schema {record.id} ({name}/{schema_type.value}/{version})")
        return record

    async def delete_by_id(self, record_id: int) -> None:
        with storage_errors("delete"):
            async with self.database.session() as db:
                result = await db.execute(
                    delete(SchemaRecord)
                    .where(SchemaRecord.id == record_id)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount == 0:
                    await db.rollback()
                    raise NotFound(f"Schema {record_id} not found", id=record_id)
                await db.commit()
        logger.info(f"Deleted schema {record_id}")

    async def ping(self) -> None:
        with storage_errors("ping"):
            await self.database.ping()
