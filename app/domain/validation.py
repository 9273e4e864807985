from typing import Any, Iterable, Mapping

from app.core.exceptions import RecordValidationError
from app.domain.registry import SchemaRegistry
from app.domain.rules import FieldViolation


class Validator:
    """
    Pure business-rule check for normalized records.

    Never queries storage and never stops at the first problem: every
    violation found is reported so a client can fix them all at once.
    """

    def __init__(self, registry: SchemaRegistry):
        self.registry = registry

    def validate(
        self,
        kind: str,
        record: Mapping[str, Any],
        touched: Iterable[str] | None = None,
    ) -> list[FieldViolation]:
        """
        Run the kind's rules against a record.

        Args:
            kind: Entity kind
            record: Full record (for updates: stored values merged with changes)
            touched: Fields changed by a partial update; rules that read none
                of them are skipped. None means every rule runs.

        Returns:
            List of violations, empty when the record is valid
        """
        spec = self.registry.get(kind)
        touched_set = set(touched) if touched is not None else None

        violations: list[FieldViolation] = []
        for rule in spec.rules:
            if touched_set is not None and touched_set.isdisjoint(rule.fields):
                continue
            violations.extend(rule.check(record))
        return violations

    def check(
        self,
        kind: str,
        record: Mapping[str, Any],
        touched: Iterable[str] | None = None,
    ) -> Mapping[str, Any]:
        """Return the record unchanged, or raise RecordValidationError with all violations"""
        violations = self.validate(kind, record, touched)
        if violations:
            raise RecordValidationError(kind, violations)
        return record
