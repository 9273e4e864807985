"""
Field-level business rules and the violations they report.

Rules are plain values: each names the fields it reads and returns a list
of violations for a record, never raising and never touching storage.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Mapping


@dataclass(frozen=True)
class FieldViolation:
    field: str
    message: str

    constraint: ClassVar[str] = "invalid"

    def to_dict(self) -> dict:
        return {"field": self.field, "constraint": self.constraint, "message": self.message}


class RequiredFieldMissing(FieldViolation):
    constraint = "required"


class RangeViolation(FieldViolation):
    constraint = "range"


class EnumViolation(FieldViolation):
    constraint = "enum"


class Rule:
    """Base class; subclasses are frozen dataclasses"""

    @property
    def fields(self) -> tuple[str, ...]:
        raise NotImplementedError

    def check(self, record: Mapping[str, Any]) -> list[FieldViolation]:
        raise NotImplementedError


@dataclass(frozen=True)
class Required(Rule):
    """Value must be present; blank strings count as missing"""

    field: str

    @property
    def fields(self) -> tuple[str, ...]:
        return (self.field,)

    def check(self, record):
        value = record.get(self.field)
        if value is None or (isinstance(value, str) and not value.strip()):
            return [RequiredFieldMissing(self.field, f"{self.field} is required")]
        return []


@dataclass(frozen=True)
class OneOf(Rule):
    field: str
    choices: tuple[str, ...]

    @classmethod
    def of(cls, field: str, enum_cls: type[Enum]) -> "OneOf":
        return cls(field, tuple(member.value for member in enum_cls))

    @property
    def fields(self) -> tuple[str, ...]:
        return (self.field,)

    def check(self, record):
        value = record.get(self.field)
        if value is not None and value not in self.choices:
            return [
                EnumViolation(
                    self.field,
                    f"{self.field} must be one of {', '.join(self.choices)}; got '{value}'",
                )
            ]
        return []


@dataclass(frozen=True)
class InRange(Rule):
    """Inclusive bounds; either bound may be left open"""

    field: str
    minimum: float | None = None
    maximum: float | None = None

    @property
    def fields(self) -> tuple[str, ...]:
        return (self.field,)

    def check(self, record):
        value = record.get(self.field)
        if value is None:
            return []
        if (self.minimum is not None and value < self.minimum) or (
            self.maximum is not None and value > self.maximum
        ):
            return [RangeViolation(self.field, f"{self.field} must be {self._describe()}; got {value}")]
        return []

    def _describe(self) -> str:
        if self.maximum is None:
            return f">= {self.minimum}"
        if self.minimum is None:
            return f"<= {self.maximum}"
        return f"between {self.minimum} and {self.maximum}"


@dataclass(frozen=True)
class MaxLength(Rule):
    field: str
    limit: int

    @property
    def fields(self) -> tuple[str, ...]:
        return (self.field,)

    def check(self, record):
        value = record.get(self.field)
        if isinstance(value, str) and len(value) > self.limit:
            return [RangeViolation(self.field, f"{self.field} must be at most {self.limit} characters")]
        return []


@dataclass(frozen=True)
class Chronological(Rule):
    """end must not precede start when both are set"""

    start: str
    end: str

    @property
    def fields(self) -> tuple[str, ...]:
        return (self.start, self.end)

    def check(self, record):
        start, end = record.get(self.start), record.get(self.end)
        if start is not None and end is not None and end < start:
            return [RangeViolation(self.end, f"{self.end} must not be earlier than {self.start}")]
        return []
