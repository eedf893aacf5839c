"""Tests for the record store against a temporary SQLite database."""
from datetime import timedelta

import pytest
from sqlalchemy.exc import DataError, IntegrityError, OperationalError

from schema_registry.errors import ConstraintViolation, InvalidInput, NotFound, StorageUnavailable
from schema_registry.models import SchemaType
from schema_registry.store import FilterCriteria
from schema_registry.store.records import storage_errors, validate_identity

pytestmark = pytest.mark.asyncio


async def _seed(store):
    rows = [
        ("orders", "json", "1.0.0", {"v": 1}),
        ("orders", "avro", "1.0.0", {"v": 2}),
        ("payments", "json", "1.0.0", {"v": 3}),
        ("orders", "json", "1.0.1", {"v": 4}),
    ]
    return [await store.insert(*row) for row in rows]


class TestInsert:
    async def test_insert_then_get(self, store, orders_v1):
        record_id = await store.insert("orders", "json", "1.0.0", orders_v1)

        record = await store.get_by_id(record_id)
        assert record.id == record_id
        assert record.name == "orders"
        assert record.type is SchemaType.JSON
        assert record.version == "1.0.0"
        assert record.payload == orders_v1
        assert record.created == record.modified

    async def test_duplicate_identity_is_constraint_violation(self, store, orders_v1):
        await store.insert("orders", "json", "1.0.0", orders_v1)

        with pytest.raises(ConstraintViolation):
            await store.insert("orders", "json", "1.0.0", {"other": True})

        rows = await store.query_by_filter(FilterCriteria.identity("orders", SchemaType.JSON, "1.0.0"))
        assert len(rows) == 1
        assert rows[0].payload == orders_v1

    async def test_same_name_and_version_different_type_is_allowed(self, store):
        first = await store.insert("orders", "json", "1.0.0", {})
        second = await store.insert("orders", "avro", "1.0.0", {})
        assert second > first

    @pytest.mark.parametrize(
        "name,type_,version",
        [("", "json", "1.0.0"), ("orders", "", "1.0.0"), ("orders", "json", ""), ("orders", "yaml", "1.0.0")],
    )
    async def test_invalid_identity_is_rejected(self, store, name, type_, version):
        with pytest.raises(InvalidInput):
            await store.insert(name, type_, version, {})
        assert await store.query_by_filter(FilterCriteria()) == []

    async def test_version_longer_than_column_is_rejected(self, store):
        with pytest.raises(InvalidInput) as exc_info:
            await store.insert("orders", "json", "1.0.0-rc.1+build", {})
        assert exc_info.value.context == {"field": "version"}
        assert await store.query_by_filter(FilterCriteria()) == []

    async def test_name_longer_than_column_is_rejected(self, store):
        with pytest.raises(InvalidInput):
            await store.insert("o" * 256, "json", "1.0.0", {})

    async def test_identity_at_column_limits_is_accepted(self, store):
        record_id = await store.insert("o" * 255, "json", "1" * 15, {})
        assert (await store.get_by_id(record_id)).version == "1" * 15

    async def test_ids_are_not_reused_after_delete(self, store):
        first = await store.insert("orders", "json", "1.0.0", {})
        await store.delete_by_id(first)

        second = await store.insert("orders", "json", "1.0.0", {})
        assert second > first


class TestQueryByFilter:
    async def test_empty_criteria_returns_everything_in_id_order(self, store):
        ids = await _seed(store)

        rows = await store.query_by_filter(FilterCriteria())
        assert [r.id for r in rows] == ids

    async def test_single_field_filter(self, store):
        ids = await _seed(store)

        rows = await store.query_by_filter(FilterCriteria(name="orders"))
        assert [r.id for r in rows] == [ids[0], ids[1], ids[3]]

    async def test_fields_are_anded(self, store):
        ids = await _seed(store)

        rows = await store.query_by_filter(FilterCriteria(type=SchemaType.JSON, version="1.0.0"))
        assert [r.id for r in rows] == [ids[0], ids[2]]

    async def test_match_is_exact_and_case_sensitive(self, store):
        await _seed(store)

        assert await store.query_by_filter(FilterCriteria(name="Orders")) == []
        assert await store.query_by_filter(FilterCriteria(name="order")) == []

    async def test_no_match_is_empty_not_error(self, store):
        await _seed(store)
        assert await store.query_by_filter(FilterCriteria(version="9.9.9")) == []


class TestUpdatePayload:
    async def test_only_payload_and_modified_change(self, store, orders_v1, clock):
        record_id = await store.insert("orders", "json", "1.0.0", orders_v1)
        before = await store.get_by_id(record_id)

        updated = await store.update_payload("orders", "json", "1.0.0", {"new": "payload"})

        assert updated.id == record_id
        assert updated.payload == {"new": "payload"}
        assert updated.created == before.created
        assert updated.modified > before.modified
        assert updated.modified - before.modified == timedelta(seconds=1)
        assert updated.identity == before.identity

    async def test_missing_identity_is_not_found(self, store):
        await store.insert("orders", "json", "1.0.0", {})

        with pytest.raises(NotFound):
            await store.update_payload("orders", "json", "2.0.0", {})

    async def test_other_records_untouched(self, store):
        ids = await _seed(store)

        await store.update_payload("orders", "json", "1.0.0", {"v": 100})

        others = [await store.get_by_id(i) for i in ids[1:]]
        assert [r.payload for r in others] == [{"v": 2}, {"v": 3}, {"v": 4}]


class TestDelete:
    async def test_delete_then_get_is_not_found(self, store):
        record_id = await store.insert("orders", "json", "1.0.0", {})

        await store.delete_by_id(record_id)

        with pytest.raises(NotFound):
            await store.get_by_id(record_id)

    async def test_delete_missing_is_not_found_and_mutates_nothing(self, store):
        ids = await _seed(store)

        with pytest.raises(NotFound):
            await store.delete_by_id(ids[-1] + 100)

        assert len(await store.query_by_filter(FilterCriteria())) == len(ids)


class TestStorageErrors:
    async def test_integrity_error_becomes_constraint_violation(self):
        with pytest.raises(ConstraintViolation):
            with storage_errors("insert"):
                raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

    async def test_data_error_becomes_invalid_input(self):
        with pytest.raises(InvalidInput):
            with storage_errors("insert"):
                raise DataError("INSERT", {}, Exception("value too long for type character varying(15)"))

    async def test_operational_error_becomes_storage_unavailable(self):
        with pytest.raises(StorageUnavailable) as exc_info:
            with storage_errors("query"):
                raise OperationalError("SELECT", {}, Exception("connection refused"))
        assert isinstance(exc_info.value.__cause__, OperationalError)

    async def test_other_errors_pass_through(self):
        with pytest.raises(ValueError):
            with storage_errors("query"):
                raise ValueError("boom")

    async def test_unreachable_database(self, tmp_path):
        from schema_registry.config import Settings
        from schema_registry.services import RegistryService

        missing = tmp_path / "no" / "such" / "dir" / "registry.db"
        service = RegistryService.from_settings(
            Settings(DATABASE_URL=f"sqlite+aiosqlite:///{missing}", DB_SCHEMA="")
        )
        try:
            with pytest.raises(StorageUnavailable):
                await service.ping()
            with pytest.raises(StorageUnavailable):
                await service.list_all()
        finally:
            await service.close()


class TestValidateIdentity:
    async def test_returns_parsed_type(self):
        assert validate_identity("orders", "avro", "1.0.0") == ("orders", SchemaType.AVRO, "1.0.0")

    async def test_long_semver_is_rejected_before_storage(self):
        with pytest.raises(InvalidInput):
            validate_identity("orders", "json", "1.0.0-rc.1+build42")
