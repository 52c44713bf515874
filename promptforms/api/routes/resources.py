"""API routes for reference resources.

Endpoints:
    GET    /api/resources          List resources
    GET    /api/resources/{id}     Get resource (includes content)
    POST   /api/resources          Create resource
    DELETE /api/resources/{id}     Delete resource (detaches it from forms)
"""

import logging

from fastapi import APIRouter, HTTPException

from promptforms.forms.schemas import ResourceCreate, ResourceRecord
from promptforms.store import resource_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/resources", tags=["resources"])


@router.get("", response_model=list[ResourceRecord])
async def list_all_resources():
    """List all resources, newest first."""
    return resource_store.list_resources()


@router.get("/{resource_id}", response_model=ResourceRecord)
async def get_resource_by_id(resource_id: int):
    resource = resource_store.get_resource(resource_id)
    if resource is None:
        raise HTTPException(status_code=404, detail=f"Resource not found: {resource_id}")
    return resource


@router.post("", status_code=201)
async def create_resource(body: ResourceCreate):
    """Create a resource. Name and content are required."""
    if not body.name.strip() or not body.content:
        raise HTTPException(status_code=400, detail="Name and content are required")

    resource_id = resource_store.create_resource(
        body.name,
        body.content,
        type=body.type.value,
    )
    return {"id": resource_id, "message": "Resource created"}


@router.delete("/{resource_id}")
async def delete_resource(resource_id: int):
    success = resource_store.delete_resource(resource_id)
    if not success:
        raise HTTPException(status_code=404, detail=f"Resource not found: {resource_id}")
    return {"id": resource_id, "deleted": True, "message": "Resource deleted"}
