"""Schema record model - one row per (name, type, version) identity."""
import enum
from typing import Any

from sqlalchemy import JSON, Enum, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from schema_registry.errors import InvalidInput
from schema_registry.models.base import Base, TimestampMixin


class SchemaType(str, enum.Enum):
    """Supported schema document formats."""
    AVRO = "avro"
    JSON = "json"
    PROTOBUF = "protobuf"
    XSD = "xsd"
    THRIFT = "thrift"
    CONFLUENT = "confluent"

    @classmethod
    def parse(cls, raw: "str | SchemaType") -> "SchemaType":
        """Convert a raw string to a SchemaType, raising InvalidInput if unsupported."""
        if isinstance(raw, cls):
            return raw
        try:
            return cls(raw)
        except ValueError:
            supported = ", ".join(t.value for t in cls)
            raise InvalidInput(
                f"Unsupported schema type {raw!r} (expected one of: {supported})",
                field="type",
            ) from None


class SchemaRecord(Base, TimestampMixin):
    __tablename__ = "schema"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[SchemaType] = mapped_column(
        Enum(
            SchemaType,
            name="schema_type",
            values_callable=lambda enum_cls: [t.value for t in enum_cls],
            inherit_schema=True,
        ),
        nullable=False,
    )
    version: Mapped[str] = mapped_column(String(15), nullable=False)
    payload: Mapped[Any] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("name", "type", "version", name="unique_name_type_version"),
        # Never hand out an id again after its row is deleted.
        {"sqlite_autoincrement": True},
    )

    @property
    def identity(self) -> tuple[str, SchemaType, str]:
        return (self.name, self.type, self.version)

    def __repr__(self) -> str:
        return f"<SchemaRecord id={self.id} {self.name}/{self.type.value}/{self.version}>"
