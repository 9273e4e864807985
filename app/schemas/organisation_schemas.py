from datetime import datetime
from typing import Any, Optional
from pydantic import Field, StrictBool, StrictFloat, StrictInt, StrictStr
from app.models.employee import EmployeeStatus
from app.models.team import TeamStatus
from app.schemas.common import PayloadSchema, RecordResponse, OwnedRecordResponse


class DepartmentPayload(PayloadSchema):
    """headcount is client-maintained; it is not counted from employees"""

    name: Optional[StrictStr] = None
    description: Optional[StrictStr] = None
    manager_id: Optional[StrictInt] = None
    budget: Optional[StrictFloat] = None
    goals: Optional[Any] = None
    headcount: Optional[StrictInt] = None


class DepartmentResponse(OwnedRecordResponse):
    name: str
    description: Optional[str]
    manager_id: Optional[int]
    budget: Optional[float]
    goals: Optional[Any]
    headcount: Optional[int]


class EmployeePayload(PayloadSchema):
    name: Optional[StrictStr] = None
    email: Optional[StrictStr] = None
    phone: Optional[StrictStr] = None
    position: Optional[StrictStr] = None
    start_date: Optional[datetime] = None
    status: Optional[StrictStr] = EmployeeStatus.ACTIVE.value
    department_id: Optional[StrictInt] = None
    permissions: Optional[dict[str, Any]] = Field(default_factory=dict)
    performance: Optional[StrictInt] = 0
    salary: Optional[StrictFloat] = None


class EmployeeResponse(OwnedRecordResponse):
    name: str
    email: Optional[str]
    phone: Optional[str]
    position: Optional[str]
    start_date: Optional[datetime]
    status: str
    department_id: Optional[int]
    permissions: Optional[dict[str, Any]]
    performance: int
    salary: Optional[float]
    tasks_assigned: int
    tasks_completed: int


class TeamPayload(PayloadSchema):
    name: Optional[StrictStr] = None
    description: Optional[StrictStr] = None
    department_id: Optional[StrictInt] = None
    leader_id: Optional[StrictInt] = None
    goals: Optional[Any] = None
    status: Optional[StrictStr] = TeamStatus.ACTIVE.value


class TeamResponse(OwnedRecordResponse):
    name: str
    description: Optional[str]
    department_id: Optional[int]
    leader_id: Optional[int]
    goals: Optional[Any]
    status: str


class TeamMemberPayload(PayloadSchema):
    team_id: Optional[StrictInt] = None
    employee_id: Optional[StrictInt] = None
    role: Optional[StrictStr] = None
    is_active: Optional[StrictBool] = True
    permissions: Optional[dict[str, Any]] = None


class TeamMemberResponse(RecordResponse):
    team_id: int
    employee_id: int
    role: Optional[str]
    joined_at: datetime
    is_active: bool
    permissions: Optional[dict[str, Any]]
