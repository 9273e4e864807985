import logging
from dataclasses import dataclass
from typing import Any, Mapping

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from app.core.exceptions import (
    CrossOwnerReferenceError,
    DanglingReferenceError,
    ReferentialIntegrityError,
)
from app.domain.registry import OWNER_KIND, Edge, SchemaRegistry
from app.models.base import Base, fits_integer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NullableReference:
    """Rows whose nullable ``edge`` points at an entity about to be deleted"""

    edge: Edge
    count: int


class RelationshipGraph:
    """
    Foreign-key edges between entity kinds and the integrity rules on them.

    Reads go through the caller's session so checks see the same
    transaction the write will commit in.
    """

    def __init__(self, db: Session, registry: SchemaRegistry):
        self.db = db
        self.registry = registry

    def owner_of(self, kind: str, entity: Base) -> int | None:
        """
        Resolve the user account an entity belongs to.

        Users own themselves; kinds with a scope edge (team members) inherit
        the owner of the row that edge points at.
        """
        if kind == OWNER_KIND:
            return entity.id
        spec = self.registry.get(kind)
        if spec.scope_edge is not None:
            edge = spec.edge(spec.scope_edge)
            parent_id = getattr(entity, edge.field)
            parent = self.db.get(self.registry.get(edge.target).model, parent_id) if parent_id else None
            return self.owner_of(edge.target, parent) if parent is not None else None
        return entity.user_id

    def validate_reference(self, edge: Edge, value: Any, owner_user_id: int) -> None:
        """
        Check one foreign-key value before it is written.

        Raises:
            DanglingReferenceError: value is missing on a required edge, or
                no row with that id exists
            CrossOwnerReferenceError: the row exists but belongs to another account
        """
        if value is None:
            if edge.nullable:
                return
            raise DanglingReferenceError(edge.source, edge.field, edge.target, value)

        target = None
        if fits_integer(value):
            target = self.db.get(self.registry.get(edge.target).model, value)
        if target is None:
            logger.warning("Rejected %s.%s=%s: no such %s", edge.source, edge.field, value, edge.target)
            raise DanglingReferenceError(edge.source, edge.field, edge.target, value)

        if self.owner_of(edge.target, target) != owner_user_id:
            logger.warning(
                "Rejected %s.%s=%s: %s belongs to another account",
                edge.source,
                edge.field,
                value,
                edge.target,
            )
            raise CrossOwnerReferenceError(edge.source, edge.field, edge.target, value)

    def validate_references(self, kind: str, record: Mapping[str, Any], owner_user_id: int) -> None:
        """Validate every edge whose field appears in ``record``"""
        for edge in self.registry.get(kind).edges:
            if edge.ownership or edge.field not in record:
                continue
            self.validate_reference(edge, record[edge.field], owner_user_id)

    def check_deletable(self, kind: str, entity_id: int) -> list[NullableReference]:
        """
        Decide whether an entity can be deleted.

        Returns:
            Nullable edges that currently point at the entity; the caller
            clears them in the same transaction as the delete.

        Raises:
            ReferentialIntegrityError: a required edge points at the entity
        """
        blockers: list[dict] = []
        nullable: list[NullableReference] = []

        for edge in self.registry.edges_to(kind):
            source = self.registry.get(edge.source).model
            count = (
                self.db.query(func.count(source.id))
                .filter(getattr(source, edge.field) == entity_id)
                .scalar()
            )
            if not count:
                continue
            if edge.nullable:
                nullable.append(NullableReference(edge, count))
            else:
                blockers.append({"kind": edge.source, "field": edge.field, "count": count})

        if blockers:
            logger.warning("Delete of %s %s blocked by %s", kind, entity_id, blockers)
            raise ReferentialIntegrityError(kind, entity_id, blockers)
        return nullable

    def clear_references(self, references: list[NullableReference], entity_id: int) -> None:
        """Null out nullable edges pointing at ``entity_id`` (no commit)"""
        for reference in references:
            source = self.registry.get(reference.edge.source).model
            column = getattr(source, reference.edge.field)
            self.db.execute(
                update(source)
                .where(column == entity_id)
                .values({reference.edge.field: None})
                .execution_options(synchronize_session=False)
            )
            logger.info(
                "Cleared %s.%s on %d row(s) for deleted id %s",
                reference.edge.source,
                reference.edge.field,
                reference.count,
                entity_id,
            )
