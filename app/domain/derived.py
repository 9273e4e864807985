"""
Fields whose value follows from related rows rather than client input.

Customer totals move by deltas, applied as in-database increments so two
concurrent writers never lose each other's update. Counters are full
recounts taken under a lock on the parent row, and therefore idempotent.
Department headcount is deliberately absent: it stays whatever the client
last set.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Mapping

from sqlalchemy import func, update
from sqlalchemy.orm import Query, Session

from app.domain.registry import SchemaRegistry
from app.models.base import utcnow
from app.models.complaint import ComplaintStatus
from app.models.financial_record import FinancialRecordType
from app.models.task import TaskStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntityChange:
    """Before/after images of one row; ``before`` is None on create, ``after`` on delete"""

    kind: str
    before: Mapping[str, Any] | None = None
    after: Mapping[str, Any] | None = None

    def images(self) -> list[Mapping[str, Any]]:
        return [image for image in (self.before, self.after) if image is not None]

    def changed(self, *fields: str) -> bool:
        if self.before is None or self.after is None:
            return True
        return any(self.before.get(name) != self.after.get(name) for name in fields)


@dataclass(frozen=True)
class FieldUpdate:
    """
    One parent-field write.

    Either ``delta`` (added to the stored value in SQL) or ``value``
    (written as-is) is set.
    """

    kind: str
    entity_id: int
    field: str
    delta: Decimal | None = None
    value: Any = None

    @property
    def is_increment(self) -> bool:
        return self.delta is not None


@dataclass(frozen=True)
class SumByType:
    """Parent field per child ``type`` accumulates the child's amount"""

    child: str
    foreign_key: str
    parent: str
    amount_field: str
    type_field: str
    fields_by_type: Mapping[str, str]

    def updates(self, change: EntityChange, db: Session, registry: SchemaRegistry) -> list[FieldUpdate]:
        if change.kind != self.child:
            return []
        if not change.changed(self.foreign_key, self.type_field, self.amount_field):
            return []

        deltas: dict[tuple[int, str], Decimal] = {}
        for sign, image in ((-1, change.before), (1, change.after)):
            if image is None:
                continue
            parent_id = image.get(self.foreign_key)
            target = self.fields_by_type.get(image.get(self.type_field))
            amount = image.get(self.amount_field)
            if parent_id is None or target is None or amount is None:
                continue
            key = (parent_id, target)
            deltas[key] = deltas.get(key, Decimal("0")) + sign * Decimal(str(amount))

        return [
            FieldUpdate(self.parent, parent_id, target, delta=delta)
            for (parent_id, target), delta in sorted(deltas.items())
            if delta != 0
        ]


@dataclass(frozen=True)
class CountOf:
    """Parent field holds the number of children pointing at it (optionally filtered)"""

    child: str
    foreign_key: str
    parent: str
    target_field: str
    where: Mapping[str, Any] = field(default_factory=dict)

    def updates(self, change: EntityChange, db: Session, registry: SchemaRegistry) -> list[FieldUpdate]:
        if change.kind != self.child:
            return []
        if not change.changed(self.foreign_key, *self.where):
            return []

        child_model = registry.get(self.child).model
        parent_ids = sorted(
            {image.get(self.foreign_key) for image in change.images()} - {None}
        )
        updates = []
        for parent_id in parent_ids:
            # Writers of the same parent recount one after another
            self.lock_parent(db, registry, parent_id).scalar()
            query = db.query(func.count(child_model.id)).filter(
                getattr(child_model, self.foreign_key) == parent_id
            )
            for name, expected in self.where.items():
                query = query.filter(getattr(child_model, name) == expected)
            updates.append(FieldUpdate(self.parent, parent_id, self.target_field, value=query.scalar()))
        return updates

    def lock_parent(self, db: Session, registry: SchemaRegistry, parent_id: int) -> Query:
        parent_model = registry.get(self.parent).model
        return db.query(parent_model.id).filter(parent_model.id == parent_id).with_for_update()


@dataclass(frozen=True)
class StatusStamp:
    """Set ``stamp_field`` to now when ``status_field`` moves to ``status`` and no stamp was given"""

    kind: str
    status_field: str
    status: str
    stamp_field: str


def default_derivations() -> tuple:
    return (
        SumByType(
            child="financial_record",
            foreign_key="customer_id",
            parent="customer",
            amount_field="amount",
            type_field="type",
            fields_by_type={
                FinancialRecordType.PAYMENT.value: "total_sales",
                FinancialRecordType.EXPENSE.value: "total_purchases",
            },
        ),
        CountOf("complaint", "customer_id", "customer", "complaint_count"),
        CountOf("task", "assigned_to", "employee", "tasks_assigned"),
        CountOf(
            "task",
            "assigned_to",
            "employee",
            "tasks_completed",
            where={"status": TaskStatus.COMPLETED.value},
        ),
    )


def default_stamps() -> tuple[StatusStamp, ...]:
    return (
        StatusStamp("complaint", "status", ComplaintStatus.RESOLVED.value, "resolved_at"),
        StatusStamp("task", "status", TaskStatus.COMPLETED.value, "completed_date"),
    )


class DerivedFieldCalculator:
    """Computes and applies parent-field updates caused by a child change"""

    def __init__(
        self,
        db: Session,
        registry: SchemaRegistry,
        derivations: tuple | None = None,
        stamps: tuple[StatusStamp, ...] | None = None,
    ):
        self.db = db
        self.registry = registry
        self.derivations = derivations if derivations is not None else default_derivations()
        self.stamps = stamps if stamps is not None else default_stamps()

    def recompute(self, change: EntityChange) -> list[FieldUpdate]:
        """
        Parent-field updates implied by ``change``.

        Must run after the change is flushed so recounts see it. The result
        depends only on the change and the stored state, so calling it twice
        against the same state returns the same updates.
        """
        updates: list[FieldUpdate] = []
        for derivation in self.derivations:
            updates.extend(derivation.updates(change, self.db, self.registry))
        return updates

    def apply(self, updates: list[FieldUpdate]) -> None:
        """Write updates in the current transaction (no commit)"""
        for item in updates:
            model = self.registry.get(item.kind).model
            column = getattr(model, item.field)
            new_value = column + item.delta if item.is_increment else item.value
            self.db.execute(
                update(model)
                .where(model.id == item.entity_id)
                .values({item.field: new_value})
                .execution_options(synchronize_session=False)
            )
        if updates:
            logger.info(
                "Applied derived updates: %s",
                ", ".join(f"{u.kind}[{u.entity_id}].{u.field}" for u in updates),
            )

    def lifecycle_stamps(
        self,
        kind: str,
        before: Mapping[str, Any] | None,
        changes: Mapping[str, Any],
    ) -> dict[str, Any]:
        """Timestamps to add to ``changes`` for status transitions"""
        stamped: dict[str, Any] = {}
        for stamp in self.stamps:
            if stamp.kind != kind or changes.get(stamp.status_field) != stamp.status:
                continue
            if before is not None and before.get(stamp.status_field) == stamp.status:
                continue
            if changes.get(stamp.stamp_field) is not None:
                continue
            if before is not None and before.get(stamp.stamp_field) is not None:
                continue
            stamped[stamp.stamp_field] = utcnow()
        return stamped
