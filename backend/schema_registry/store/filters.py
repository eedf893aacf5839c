"""Filter criteria and their compilation into record queries."""
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import Select, select

from schema_registry.models.schema_record import SchemaRecord, SchemaType

# Fixed compile order, whichever subset of fields is set.
FILTER_FIELDS = ("name", "type", "version")


@dataclass(frozen=True)
class FilterCriteria:
    """Sparse exact-match predicates. A field left as None matches any value."""
    name: Optional[str] = None
    type: Optional[SchemaType] = None
    version: Optional[str] = None

    @classmethod
    def from_raw(
        cls,
        name: Optional[str] = None,
        type: Optional[str] = None,
        version: Optional[str] = None,
    ) -> "FilterCriteria":
        """Build criteria from request strings. Empty strings mean "unset"."""
        return cls(
            name=name or None,
            type=SchemaType.parse(type) if type else None,
            version=version or None,
        )

    @classmethod
    def identity(cls, name: str, type: SchemaType, version: str) -> "FilterCriteria":
        return cls(name=name, type=type, version=version)

    def predicates(self) -> list[tuple[str, object]]:
        """Ordered (field, value) equality constraints for the set fields."""
        return [
            (field, getattr(self, field))
            for field in FILTER_FIELDS
            if getattr(self, field) is not None
        ]

    def is_empty(self) -> bool:
        return not self.predicates()


def build_filter_query(criteria: FilterCriteria) -> Select:
    """Compile criteria into a SELECT ordered by ascending id.

    Empty criteria select every record.
    """
    query = select(SchemaRecord)
    for field, value in criteria.predicates():
        query = query.where(getattr(SchemaRecord, field) == value)
    return query.order_by(SchemaRecord.id)
