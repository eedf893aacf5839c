"""Schema registry API routes."""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response

from schema_registry.schemas.common import DeleteResponse
from schema_registry.schemas.schema import SchemaCreate, SchemaCreated, SchemaResponse, SchemaUpdate
from schema_registry.services import RegistryService
from schema_registry.store import FilterCriteria

router = APIRouter(prefix="/api", tags=["schemas"])


def get_registry(request: Request) -> RegistryService:
    """FastAPI dependency returning the service built at startup."""
    return request.app.state.registry


@router.get("/schema", response_model=list[SchemaResponse])
async def lookup_schemas(
    name: Optional[str] = Query(None),
    type: Optional[str] = Query(None),
    version: Optional[str] = Query(None),
    registry: RegistryService = Depends(get_registry),
):
    """Find schemas by any combination of name, type and version."""
    criteria = FilterCriteria.from_raw(name=name, type=type, version=version)
    return await registry.lookup(criteria)


@router.post("/schema", response_model=SchemaCreated, status_code=201)
async def register_schema(
    body: SchemaCreate,
    registry: RegistryService = Depends(get_registry),
):
    """Register a new (name, type, version). 409 if it already exists."""
    record_id = await registry.register(body.name, body.type, body.version, body.payload)
    return {"id": record_id}


@router.put("/schema", response_model=list[SchemaResponse])
async def update_schema(
    body: SchemaUpdate,
    response: Response,
    registry: RegistryService = Depends(get_registry),
):
    """Update a schema's payload. A changed identity creates a new record (201)."""
    resolution = await registry.update(
        body.name, body.type, body.version, body.payload, base_id=body.base_id
    )
    if resolution.forked:
        response.status_code = 201
    return resolution.records


@router.get("/schema/{schema_id}", response_model=SchemaResponse)
async def get_schema(
    schema_id: int,
    registry: RegistryService = Depends(get_registry),
):
    """Get a single schema by ID."""
    return await registry.get(schema_id)


@router.delete("/schema/{schema_id}", response_model=DeleteResponse)
async def delete_schema(
    schema_id: int,
    registry: RegistryService = Depends(get_registry),
):
    """Delete a schema. Irreversible."""
    await registry.delete(schema_id)
    return {"deleted": True, "id": schema_id}


@router.get("/schemas", response_model=list[SchemaResponse])
async def list_schemas(registry: RegistryService = Depends(get_registry)):
    """List every schema, oldest first."""
    return await registry.list_all()
