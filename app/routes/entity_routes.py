from typing import Any
from fastapi import APIRouter, Body, Depends, Query, Request, status
from pydantic import ConfigDict, create_model
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user, get_registry
from app.domain.registry import EntitySpec, SchemaRegistry
from app.models.base import INTEGER_MAX
from app.models.user import User
from app.services.entity_service import EntityService

PAGINATION_PARAMS = ("limit", "offset")


def build_entity_router(spec: EntitySpec) -> APIRouter:
    """
    CRUD routes for one entity kind.

    Bodies are taken as raw JSON objects so that unknown fields and type
    mismatches are reported by the core rather than by request parsing.
    """
    router = APIRouter()
    kind = spec.kind
    response_model = spec.response_schema
    list_model = create_model(
        f"{response_model.__name__.removesuffix('Response')}ListResponse",
        __config__=ConfigDict(from_attributes=True),
        items=(list[response_model], ...),
        total=(int, ...),
    )

    @router.post("", response_model=response_model, status_code=status.HTTP_201_CREATED)
    def create_entity(
        payload: Any = Body(...),
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
        registry: SchemaRegistry = Depends(get_registry),
    ):
        """
        Create a record owned by the authenticated user.

        - Omitted fields take their defaults
        - Referenced ids must exist and belong to the same user
        - Parent totals and counters are updated in the same transaction
        """
        service = EntityService(db, registry)
        return service.create(kind, payload, user.id)

    @router.get("", response_model=list_model)
    def list_entities(
        request: Request,
        limit: int = Query(100, ge=1, le=1000, description="Max results"),
        offset: int = Query(0, ge=0, le=INTEGER_MAX, description="Pagination offset"),
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
        registry: SchemaRegistry = Depends(get_registry),
    ):
        """
        List the user's records.

        Any other query parameter is an equality filter on that field,
        e.g. ``?status=open&customer_id=3``.
        """
        filters = {
            name: value for name, value in request.query_params.items() if name not in PAGINATION_PARAMS
        }
        service = EntityService(db, registry)
        items, total = service.list(kind, user.id, filters, limit=limit, offset=offset)
        return {"items": items, "total": total}

    @router.get("/{entity_id}", response_model=response_model)
    def get_entity(
        entity_id: int,
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
        registry: SchemaRegistry = Depends(get_registry),
    ):
        """Returns 404 if the record doesn't exist or belongs to another user"""
        service = EntityService(db, registry)
        return service.get(kind, entity_id, user.id)

    @router.patch("/{entity_id}", response_model=response_model)
    def update_entity(
        entity_id: int,
        payload: Any = Body(...),
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
        registry: SchemaRegistry = Depends(get_registry),
    ):
        """
        Partially update a record.

        - Only provided fields are written; send null to clear an optional reference
        - Derived fields on related records are recomputed
        """
        service = EntityService(db, registry)
        return service.update(kind, entity_id, payload, user.id)

    @router.delete("/{entity_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_entity(
        entity_id: int,
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
        registry: SchemaRegistry = Depends(get_registry),
    ):
        """
        Delete a record.

        - Returns 409 while a required reference still points at it
        - Optional references to it are cleared
        """
        service = EntityService(db, registry)
        service.delete(kind, entity_id, user.id)

    return router
