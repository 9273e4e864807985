from typing import Any, Optional
from sqlalchemy.orm import Query, Session

from app.domain.registry import EntitySpec, SchemaRegistry
from app.models.base import Base, fits_integer


class EntityRepository:
    """
    Data access for one owned entity kind.

    Every read is scoped to the owning user, either through the kind's own
    user_id column or, for kinds without one, through the row its scope
    edge points at. Writes flush but never commit: the service owns the
    transaction.
    """

    def __init__(self, db: Session, registry: SchemaRegistry, spec: EntitySpec):
        self.db = db
        self.registry = registry
        self.spec = spec
        self.model = spec.model

    def _scoped(self, owner_id: int) -> Query:
        query = self.db.query(self.model)
        if self.spec.scope_edge is not None:
            edge = self.spec.edge(self.spec.scope_edge)
            parent = self.registry.get(edge.target).model
            return query.join(parent, parent.id == getattr(self.model, edge.field)).filter(
                parent.user_id == owner_id
            )
        return query.filter(self.model.user_id == owner_id)

    def get_by_id_and_owner(self, entity_id: int, owner_id: int) -> Optional[Base]:
        """
        Get entity ensuring it belongs to the owner.

        Returns None if it doesn't exist or belongs to another user.
        """
        if not fits_integer(entity_id):
            return None
        return self._scoped(owner_id).filter(self.model.id == entity_id).first()

    def get_with_filters(
        self,
        owner_id: int,
        filters: dict[str, Any],
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[list[Base], int]:
        """
        Get the owner's entities matching every equality filter.

        Returns:
            Tuple of (entities list, total count before pagination)
        """
        query = self._scoped(owner_id)
        for name, value in filters.items():
            query = query.filter(getattr(self.model, name) == value)

        total = query.count()
        items = query.order_by(self.model.id.asc()).limit(limit).offset(offset).all()
        return items, total

    def exists_with(self, owner_id: int, values: dict[str, Any], exclude_id: int | None = None) -> bool:
        query = self._scoped(owner_id)
        for name, value in values.items():
            query = query.filter(getattr(self.model, name) == value)
        if exclude_id is not None:
            query = query.filter(self.model.id != exclude_id)
        return query.first() is not None

    def create_no_commit(self, entity: Base) -> Base:
        """Create entity without committing (for atomic ops)"""
        self.db.add(entity)
        self.db.flush()
        return entity

    def update_no_commit(self, entity: Base) -> Base:
        self.db.flush()
        return entity

    def delete_no_commit(self, entity: Base) -> None:
        self.db.delete(entity)
        self.db.flush()
