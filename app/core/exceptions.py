from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.domain.rules import FieldViolation


class BusinessManagerException(Exception):
    """Base exception for the business manager core"""

    code = "error"

    def to_dict(self) -> dict:
        return {"detail": str(self), "error": self.code}


class UnauthorizedException(BusinessManagerException):
    """Raised when JWT validation fails"""

    code = "unauthorized"


class NotFoundError(BusinessManagerException):
    """Raised when a record does not exist in the caller's ownership scope"""

    code = "not_found"

    def __init__(self, kind: str, entity_id: int):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} {entity_id} not found")


class MalformedPayloadError(BusinessManagerException):
    """Payload has the wrong shape. Never retry without correcting it."""

    code = "malformed_payload"

    def __init__(self, message: str, fields: list[dict]):
        self.fields = fields
        super().__init__(message)

    def to_dict(self) -> dict:
        return {**super().to_dict(), "fields": self.fields}


class UnknownFieldError(MalformedPayloadError):
    """Raised when a payload carries fields the entity does not accept"""

    code = "unknown_field"

    def __init__(self, kind: str, field_names: list[str]):
        self.kind = kind
        self.field_names = field_names
        super().__init__(
            f"Unknown field(s) for {kind}: {', '.join(field_names)}",
            [{"field": name} for name in field_names],
        )


class TypeMismatchError(MalformedPayloadError):
    """Raised when a field value has the wrong type"""

    code = "type_mismatch"

    def __init__(self, kind: str, mismatches: list[dict]):
        self.kind = kind
        super().__init__(
            f"Type mismatch for {kind}: {', '.join(m['field'] for m in mismatches)}",
            mismatches,
        )


class RecordValidationError(BusinessManagerException):
    """Carries every field-level violation found for a record"""

    code = "validation_failed"

    def __init__(self, kind: str, violations: list["FieldViolation"]):
        self.kind = kind
        self.violations = violations
        super().__init__(f"{kind} failed validation ({len(violations)} violation(s))")

    def to_dict(self) -> dict:
        return {**super().to_dict(), "errors": [v.to_dict() for v in self.violations]}


class InvalidReferenceError(BusinessManagerException):
    """Base for foreign-key values that cannot be accepted on write"""

    code = "invalid_reference"

    def __init__(self, message: str, kind: str, field: str, value):
        self.kind = kind
        self.field = field
        self.value = value
        super().__init__(message)

    def to_dict(self) -> dict:
        return {**super().to_dict(), "field": self.field, "value": self.value}


class DanglingReferenceError(InvalidReferenceError):
    """Referenced row does not exist"""

    code = "dangling_reference"

    def __init__(self, kind: str, field: str, target: str, value):
        self.target = target
        super().__init__(
            f"{kind}.{field} references {target} {value}, which does not exist",
            kind,
            field,
            value,
        )


class CrossOwnerReferenceError(InvalidReferenceError):
    """Referenced row belongs to a different user account"""

    code = "cross_owner_reference"

    def __init__(self, kind: str, field: str, target: str, value):
        self.target = target
        super().__init__(
            f"{kind}.{field} references {target} {value} owned by another account",
            kind,
            field,
            value,
        )


class ReferentialIntegrityError(BusinessManagerException):
    """Raised when a delete is blocked by rows holding a required reference"""

    code = "referential_integrity"

    def __init__(self, kind: str, entity_id: int, blockers: list[dict]):
        self.kind = kind
        self.entity_id = entity_id
        self.blockers = blockers
        names = ", ".join(f"{b['kind']}.{b['field']} ({b['count']})" for b in blockers)
        super().__init__(f"Cannot delete {kind} {entity_id}: still referenced by {names}")

    def to_dict(self) -> dict:
        return {**super().to_dict(), "blockers": self.blockers}


class UniqueConstraintError(BusinessManagerException):
    """Raised when a unique field value is already taken"""

    code = "unique_constraint"

    def __init__(self, kind: str, field: str, value):
        self.kind = kind
        self.field = field
        self.value = value
        super().__init__(f"{kind} with {field} '{value}' already exists")


class StorageError(BusinessManagerException):
    """Storage collaborator failed (connection loss, aborted transaction). Safe to retry."""

    code = "storage_error"
