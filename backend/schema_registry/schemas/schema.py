"""Schema record request/response schemas."""
from datetime import datetime
from typing import Any, Optional

from pydantic import AliasChoices, Field

from schema_registry.models.schema_record import SchemaType
from schema_registry.schemas.base import CamelModel


class SchemaCreate(CamelModel):
    # type stays a plain string here; the registry rejects unsupported values itself
    name: str
    type: str
    version: str
    payload: Any = Field(validation_alias=AliasChoices("payload", "schemaData"))


class SchemaUpdate(SchemaCreate):
    base_id: Optional[int] = None


class SchemaCreated(CamelModel):
    id: int


class SchemaResponse(CamelModel):
    id: int
    name: str
    type: SchemaType
    version: str
    payload: Any
    created: datetime
    modified: datetime
