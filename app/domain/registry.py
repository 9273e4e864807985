"""
Schema registry: the single description of every entity kind.

Built once at startup by ``build_registry()`` and handed to the validation
layer, the relationship graph and the services. Nothing in here is
module-level mutable state.
"""

from dataclasses import dataclass, field
from datetime import datetime, UTC
from decimal import Decimal
from typing import Any, Iterable, Mapping

from pydantic import BaseModel, ValidationError
from sqlalchemy import Integer, Numeric, String, inspect

from app.core.exceptions import TypeMismatchError, UnknownFieldError
from app.domain.rules import Chronological, InRange, MaxLength, OneOf, Required, Rule
from app.models.base import INTEGER_MAX, INTEGER_MIN, Base
from app.models.budget import Budget
from app.models.complaint import Complaint, ComplaintStatus, Priority
from app.models.customer import Customer, CustomerType
from app.models.department import Department
from app.models.employee import Employee, EmployeeStatus
from app.models.financial_record import FinancialRecord, FinancialRecordStatus, FinancialRecordType
from app.models.meeting import Meeting, MeetingStatus
from app.models.product import Product
from app.models.project import Project, ProjectStatus
from app.models.task import Task, TaskStatus
from app.models.team import Team, TeamStatus
from app.models.team_member import TeamMember
from app.models.user import User
from app.schemas.common import PayloadSchema
from app.schemas.customer_schemas import (
    ComplaintPayload,
    ComplaintResponse,
    CustomerPayload,
    CustomerResponse,
)
from app.schemas.finance_schemas import (
    BudgetPayload,
    BudgetResponse,
    FinancialRecordPayload,
    FinancialRecordResponse,
)
from app.schemas.organisation_schemas import (
    DepartmentPayload,
    DepartmentResponse,
    EmployeePayload,
    EmployeeResponse,
    TeamMemberPayload,
    TeamMemberResponse,
    TeamPayload,
    TeamResponse,
)
from app.schemas.product_schemas import ProductPayload, ProductResponse
from app.schemas.user_schemas import UserPayload, UserResponse
from app.schemas.work_schemas import (
    MeetingPayload,
    MeetingResponse,
    ProjectPayload,
    ProjectResponse,
    TaskPayload,
    TaskResponse,
)

OWNER_KIND = "user"
OWNER_FIELD = "user_id"


@dataclass(frozen=True)
class Edge:
    """
    Foreign key from ``source.field`` to ``target``.

    A non-nullable edge blocks deletion of its target; a nullable one is
    cleared instead. The ownership edge (``user_id``) is assigned by the
    service and never taken from a payload.
    """

    source: str
    field: str
    target: str
    nullable: bool = True
    ownership: bool = False


@dataclass
class EntitySpec:
    kind: str
    model: type[Base]
    payload_schema: type[PayloadSchema]
    response_schema: type[BaseModel]
    route: str
    rules: tuple[Rule, ...] = ()
    references: tuple[Edge, ...] = ()
    transient_fields: frozenset[str] = frozenset()
    unique_together: tuple[tuple[str, ...], ...] = ()
    # Edge whose target decides ownership, for kinds without a user_id column
    scope_edge: str | None = None
    edges: tuple[Edge, ...] = field(init=False)

    def __post_init__(self):
        edges = list(self.references)
        if self.owned:
            edges.insert(0, Edge(self.kind, OWNER_FIELD, OWNER_KIND, nullable=False, ownership=True))
        self.edges = tuple(edges)

        # Foreign keys are range-checked as references, not as values
        edge_fields = {edge.field for edge in self.edges}
        bounded = {
            rule.field
            for rule in self.rules
            if isinstance(rule, InRange) and rule.minimum is not None and rule.maximum is not None
        }
        columns = inspect(self.model).columns
        implicit: list[Rule] = []
        for name in self.persisted_fields:
            column = columns.get(name)
            if column is None:
                continue
            if not column.nullable:
                implicit.append(Required(name))
            if isinstance(column.type, String) and column.type.length:
                implicit.append(MaxLength(name, column.type.length))
            if name in edge_fields or name in bounded:
                continue
            if isinstance(column.type, Integer):
                implicit.append(InRange(name, INTEGER_MIN, INTEGER_MAX))
            elif isinstance(column.type, Numeric) and column.type.precision is not None:
                limit = _numeric_limit(column.type)
                implicit.append(InRange(name, -limit, limit))
        self.rules = tuple(implicit) + tuple(self.rules)

    @property
    def owned(self) -> bool:
        return OWNER_FIELD in inspect(self.model).columns

    @property
    def persisted_fields(self) -> list[str]:
        """Fields a client may write"""
        return [name for name in self.payload_schema.model_fields if name not in self.transient_fields]

    def edge(self, field_name: str) -> Edge | None:
        for edge in self.edges:
            if edge.field == field_name:
                return edge
        return None


class SchemaRegistry:
    """Lookup of entity specs plus payload normalization"""

    def __init__(self, specs: Iterable[EntitySpec]):
        self._specs: dict[str, EntitySpec] = {spec.kind: spec for spec in specs}

    def get(self, kind: str) -> EntitySpec:
        try:
            return self._specs[kind]
        except KeyError:
            raise LookupError(f"Unknown entity kind '{kind}'") from None

    def kinds(self) -> list[str]:
        return list(self._specs)

    def all_edges(self) -> list[Edge]:
        return [edge for spec in self._specs.values() for edge in spec.edges]

    def edges_to(self, kind: str) -> list[Edge]:
        return [edge for edge in self.all_edges() if edge.target == kind]

    def normalize(self, kind: str, payload: Any, partial: bool = False) -> dict[str, Any]:
        """
        Shape a raw payload into a storable record.

        On create every writable field is returned with its default applied;
        with ``partial=True`` only the fields present in the payload are
        returned. Transient fields are type-checked and then dropped.

        Raises:
            UnknownFieldError: payload carries fields the kind does not accept
            TypeMismatchError: a value has the wrong type
        """
        spec = self.get(kind)
        if not isinstance(payload, Mapping):
            raise TypeMismatchError(kind, [{"field": "body", "expected": "object"}])

        try:
            parsed = spec.payload_schema.model_validate(payload)
        except ValidationError as e:
            errors = e.errors()
            unknown = sorted(str(err["loc"][0]) for err in errors if err["type"] == "extra_forbidden")
            if unknown:
                raise UnknownFieldError(kind, unknown) from None
            raise TypeMismatchError(
                kind,
                [
                    {
                        "field": ".".join(str(part) for part in err["loc"]),
                        "expected": err["type"],
                        "message": err["msg"],
                    }
                    for err in errors
                ],
            ) from None

        record = parsed.model_dump(exclude_unset=partial)
        for name in spec.transient_fields:
            record.pop(name, None)
        return {name: _to_storage(value) for name, value in record.items()}


def _numeric_limit(column_type: Numeric) -> Decimal:
    """Largest magnitude a Numeric(precision, scale) column stores"""
    scale = column_type.scale or 0
    return Decimal(10) ** (column_type.precision - scale) - Decimal(10) ** -scale


def _to_storage(value: Any) -> Any:
    # Columns hold naive UTC timestamps
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.astimezone(UTC).replace(tzinfo=None)
    return value


def build_registry() -> SchemaRegistry:
    """Describe every entity kind: rules, references and route."""
    return SchemaRegistry(
        [
            EntitySpec(
                kind="user",
                model=User,
                payload_schema=UserPayload,
                response_schema=UserResponse,
                route="users",
            ),
            EntitySpec(
                kind="customer",
                model=Customer,
                payload_schema=CustomerPayload,
                response_schema=CustomerResponse,
                route="customers",
                rules=(
                    OneOf.of("type", CustomerType),
                    InRange("customer_satisfaction", 0, 100),
                ),
            ),
            EntitySpec(
                kind="complaint",
                model=Complaint,
                payload_schema=ComplaintPayload,
                response_schema=ComplaintResponse,
                route="complaints",
                rules=(
                    OneOf.of("status", ComplaintStatus),
                    OneOf.of("priority", Priority),
                    InRange("satisfaction_rating", 0, 5),
                ),
                references=(
                    Edge("complaint", "customer_id", "customer"),
                    Edge("complaint", "assigned_to", "employee"),
                ),
            ),
            EntitySpec(
                kind="department",
                model=Department,
                payload_schema=DepartmentPayload,
                response_schema=DepartmentResponse,
                route="departments",
                rules=(
                    InRange("budget", minimum=0),
                    InRange("headcount", minimum=0),
                ),
                references=(Edge("department", "manager_id", "employee"),),
            ),
            EntitySpec(
                kind="employee",
                model=Employee,
                payload_schema=EmployeePayload,
                response_schema=EmployeeResponse,
                route="employees",
                rules=(
                    OneOf.of("status", EmployeeStatus),
                    InRange("performance", 0, 100),
                    InRange("salary", minimum=0),
                ),
                references=(Edge("employee", "department_id", "department"),),
            ),
            EntitySpec(
                kind="team",
                model=Team,
                payload_schema=TeamPayload,
                response_schema=TeamResponse,
                route="teams",
                rules=(OneOf.of("status", TeamStatus),),
                references=(
                    Edge("team", "department_id", "department"),
                    Edge("team", "leader_id", "employee"),
                ),
            ),
            EntitySpec(
                kind="team_member",
                model=TeamMember,
                payload_schema=TeamMemberPayload,
                response_schema=TeamMemberResponse,
                route="team-members",
                references=(
                    Edge("team_member", "team_id", "team", nullable=False),
                    Edge("team_member", "employee_id", "employee", nullable=False),
                ),
                unique_together=(("team_id", "employee_id"),),
                scope_edge="team_id",
            ),
            EntitySpec(
                kind="product",
                model=Product,
                payload_schema=ProductPayload,
                response_schema=ProductResponse,
                route="products",
                rules=(
                    InRange("price", minimum=0),
                    InRange("cost", minimum=0),
                    InRange("inventory", minimum=0),
                    InRange("sales", minimum=0),
                    InRange("revenue", minimum=0),
                    InRange("discount", 0, 100),
                ),
                transient_fields=frozenset({"popularity"}),
            ),
            EntitySpec(
                kind="financial_record",
                model=FinancialRecord,
                payload_schema=FinancialRecordPayload,
                response_schema=FinancialRecordResponse,
                route="financial-records",
                rules=(
                    OneOf.of("type", FinancialRecordType),
                    OneOf.of("status", FinancialRecordStatus),
                    InRange("amount", minimum=0),
                ),
                references=(Edge("financial_record", "customer_id", "customer"),),
                transient_fields=frozenset(
                    {"related_entity_id", "related_entity_type", "tax_deductible"}
                ),
            ),
            EntitySpec(
                kind="budget",
                model=Budget,
                payload_schema=BudgetPayload,
                response_schema=BudgetResponse,
                route="budgets",
                rules=(
                    InRange("amount", minimum=0),
                    InRange("actual_spend", minimum=0),
                    Chronological("start_date", "end_date"),
                ),
                references=(
                    Edge("budget", "department_id", "department"),
                    Edge("budget", "project_id", "project"),
                ),
                transient_fields=frozenset({"period", "description", "status"}),
            ),
            EntitySpec(
                kind="project",
                model=Project,
                payload_schema=ProjectPayload,
                response_schema=ProjectResponse,
                route="projects",
                rules=(
                    OneOf.of("status", ProjectStatus),
                    InRange("progress", 0, 100),
                    InRange("budget", minimum=0),
                    Chronological("start_date", "end_date"),
                ),
                references=(Edge("project", "team_id", "team"),),
                transient_fields=frozenset({"priority", "completed_at"}),
            ),
            EntitySpec(
                kind="meeting",
                model=Meeting,
                payload_schema=MeetingPayload,
                response_schema=MeetingResponse,
                route="meetings",
                rules=(
                    OneOf.of("status", MeetingStatus),
                    InRange("duration", minimum=0),
                ),
                references=(
                    Edge("meeting", "team_id", "team"),
                    Edge("meeting", "project_id", "project"),
                ),
                transient_fields=frozenset(
                    {"start_time", "end_time", "location", "agenda", "attendees"}
                ),
            ),
            EntitySpec(
                kind="task",
                model=Task,
                payload_schema=TaskPayload,
                response_schema=TaskResponse,
                route="tasks",
                rules=(
                    OneOf.of("status", TaskStatus),
                    OneOf.of("priority", Priority),
                    InRange("progress", 0, 100),
                    InRange("cost", minimum=0),
                    Chronological("start_date", "due_date"),
                ),
                references=(
                    Edge("task", "project_id", "project"),
                    Edge("task", "team_id", "team"),
                    Edge("task", "assigned_to", "employee"),
                ),
            ),
        ]
    )
