from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy import JSON
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import (
    NotFoundError,
    StorageError,
    TypeMismatchError,
    UniqueConstraintError,
    UnknownFieldError,
)
from app.database import unit_of_work
from app.domain.derived import DerivedFieldCalculator, EntityChange
from app.domain.registry import OWNER_FIELD, OWNER_KIND, EntitySpec, SchemaRegistry
from app.domain.relationships import RelationshipGraph
from app.domain.validation import Validator
from app.models.base import Base, column_values, fits_integer
from app.repositories.entity_repository import EntityRepository

logger = logging.getLogger(__name__)


class EntityService:
    """
    Create/read/update/delete for every owned entity kind.

    Each write is one unit of work: normalize, validate, check references,
    persist, then apply derived-field updates, all committed together or
    not at all.
    """

    def __init__(self, db: Session, registry: SchemaRegistry):
        self.db = db
        self.registry = registry
        self.validator = Validator(registry)
        self.graph = RelationshipGraph(db, registry)
        self.derived = DerivedFieldCalculator(db, registry)

    def _spec(self, kind: str) -> EntitySpec:
        spec = self.registry.get(kind)
        if kind == OWNER_KIND:
            raise LookupError("Users are managed through UserService")
        return spec

    def _repo(self, spec: EntitySpec) -> EntityRepository:
        return EntityRepository(self.db, self.registry, spec)

    def create(self, kind: str, payload: Any, owner_user_id: int) -> Base:
        """
        Create an entity owned by ``owner_user_id``.

        Raises:
            UnknownFieldError, TypeMismatchError: malformed payload
            RecordValidationError: business rules violated
            DanglingReferenceError, CrossOwnerReferenceError: bad foreign key
            UniqueConstraintError: duplicate of an existing row
            StorageError: storage failure
        """
        spec = self._spec(kind)
        repo = self._repo(spec)

        try:
            with unit_of_work(self.db):
                record = self.registry.normalize(kind, payload)
                self.validator.check(kind, record)
                self.graph.validate_references(kind, record, owner_user_id)
                self._check_unique(spec, repo, record, owner_user_id)

                record.update(self.derived.lifecycle_stamps(kind, None, record))
                if spec.owned:
                    record[OWNER_FIELD] = owner_user_id

                entity = repo.create_no_commit(spec.model(**record))
                change = EntityChange(kind, after=column_values(entity))
                self.derived.apply(self.derived.recompute(change))
        except IntegrityError as e:
            raise self._integrity_error(spec, e) from e

        self.db.refresh(entity)
        logger.info("Created %s %s for user %s", kind, entity.id, owner_user_id)
        return entity

    def get(self, kind: str, entity_id: int, owner_user_id: int) -> Base:
        """
        Get an entity within the owner's scope.

        Raises:
            NotFoundError: if it doesn't exist or belongs to another user
        """
        spec = self._spec(kind)
        with unit_of_work(self.db):
            entity = self._repo(spec).get_by_id_and_owner(entity_id, owner_user_id)
            if entity is None:
                raise NotFoundError(kind, entity_id)
        return entity

    def list(
        self,
        kind: str,
        owner_user_id: int,
        filters: dict[str, str] | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[list[Base], int]:
        """
        List the owner's entities, optionally filtered by column equality.

        Filter values arrive as strings (query parameters) and are coerced
        to the column's type.
        """
        spec = self._spec(kind)
        parsed = self._parse_filters(spec, filters or {})
        with unit_of_work(self.db):
            return self._repo(spec).get_with_filters(
                owner_user_id, parsed, limit=limit, offset=offset
            )

    def update(self, kind: str, entity_id: int, payload: Any, owner_user_id: int) -> Base:
        """
        Apply a partial update.

        Only the fields present in the payload are written, and only rules
        reading those fields are re-checked (against the merged record).
        """
        spec = self._spec(kind)
        repo = self._repo(spec)

        try:
            with unit_of_work(self.db):
                entity = repo.get_by_id_and_owner(entity_id, owner_user_id)
                if entity is None:
                    raise NotFoundError(kind, entity_id)

                changes = self.registry.normalize(kind, payload, partial=True)
                before = column_values(entity)
                self.validator.check(kind, {**before, **changes}, touched=changes)
                self.graph.validate_references(kind, changes, owner_user_id)
                self._check_unique(
                    spec,
                    repo,
                    {**before, **changes},
                    owner_user_id,
                    touched=changes,
                    exclude_id=entity.id,
                )

                changes.update(self.derived.lifecycle_stamps(kind, before, changes))
                for name, value in changes.items():
                    setattr(entity, name, value)
                repo.update_no_commit(entity)

                change = EntityChange(kind, before=before, after=column_values(entity))
                self.derived.apply(self.derived.recompute(change))
        except IntegrityError as e:
            raise self._integrity_error(spec, e) from e

        self.db.refresh(entity)
        logger.info("Updated %s %s (%s)", kind, entity_id, ", ".join(sorted(changes)) or "no changes")
        return entity

    def delete(self, kind: str, entity_id: int, owner_user_id: int) -> None:
        """
        Delete an entity.

        Nullable references to it are cleared in the same transaction.

        Raises:
            NotFoundError: if it doesn't exist or belongs to another user
            ReferentialIntegrityError: a required reference still points at it
        """
        spec = self._spec(kind)
        repo = self._repo(spec)

        try:
            with unit_of_work(self.db):
                entity = repo.get_by_id_and_owner(entity_id, owner_user_id)
                if entity is None:
                    raise NotFoundError(kind, entity_id)

                before = column_values(entity)
                references = self.graph.check_deletable(kind, entity_id)
                self.graph.clear_references(references, entity_id)
                repo.delete_no_commit(entity)

                self.derived.apply(self.derived.recompute(EntityChange(kind, before=before)))
        except IntegrityError as e:
            raise self._integrity_error(spec, e) from e

        logger.info("Deleted %s %s for user %s", kind, entity_id, owner_user_id)

    def _check_unique(
        self,
        spec: EntitySpec,
        repo: EntityRepository,
        record: dict[str, Any],
        owner_user_id: int,
        touched: dict[str, Any] | None = None,
        exclude_id: int | None = None,
    ) -> None:
        for fields in spec.unique_together:
            if touched is not None and not set(fields) & set(touched):
                continue
            values = {name: record.get(name) for name in fields}
            if repo.exists_with(owner_user_id, values, exclude_id=exclude_id):
                raise UniqueConstraintError(
                    spec.kind, ", ".join(fields), ", ".join(str(v) for v in values.values())
                )

    def _integrity_error(self, spec: EntitySpec, error: IntegrityError) -> Exception:
        # Lost a race against a concurrent writer; the pre-checks passed
        logger.warning("Integrity error on %s: %s", spec.kind, error.orig)
        if spec.unique_together:
            fields = spec.unique_together[0]
            return UniqueConstraintError(spec.kind, ", ".join(fields), "(concurrent write)")
        return StorageError(f"Storage rejected {spec.kind} write")

    def _parse_filters(self, spec: EntitySpec, filters: dict[str, str]) -> dict[str, Any]:
        columns = {column.key: column for column in spec.model.__table__.columns}
        unknown = sorted(
            name for name in filters if name not in columns or isinstance(columns[name].type, JSON)
        )
        if unknown:
            raise UnknownFieldError(spec.kind, unknown)

        parsed: dict[str, Any] = {}
        mismatches: list[dict] = []
        for name, raw in filters.items():
            python_type = columns[name].type.python_type
            try:
                parsed[name] = _coerce(raw, python_type)
            except (ValueError, InvalidOperation):
                mismatches.append({"field": name, "expected": python_type.__name__})
        if mismatches:
            raise TypeMismatchError(spec.kind, mismatches)
        return parsed


def _coerce(raw: str, python_type: type) -> Any:
    if python_type is bool:
        lowered = raw.lower()
        if lowered in ("true", "1"):
            return True
        if lowered in ("false", "0"):
            return False
        raise ValueError(raw)
    if python_type is datetime:
        return datetime.fromisoformat(raw)
    if python_type is Decimal:
        return Decimal(raw)
    if python_type is int:
        value = int(raw)
        if not fits_integer(value):
            raise ValueError(raw)
        return value
    return python_type(raw)
