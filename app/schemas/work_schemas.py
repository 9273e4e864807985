from datetime import datetime
from typing import Optional
from pydantic import StrictFloat, StrictInt, StrictStr
from app.models.complaint import Priority
from app.models.meeting import MeetingStatus
from app.models.project import ProjectStatus
from app.models.task import TaskStatus
from app.schemas.common import PayloadSchema, OwnedRecordResponse


class ProjectPayload(PayloadSchema):
    """priority and completed_at are request-only"""

    name: Optional[StrictStr] = None
    description: Optional[StrictStr] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: Optional[StrictStr] = ProjectStatus.PLANNING.value
    budget: Optional[StrictFloat] = None
    team_id: Optional[StrictInt] = None
    progress: Optional[StrictInt] = 0

    # Transient
    priority: Optional[StrictStr] = None
    completed_at: Optional[datetime] = None


class ProjectResponse(OwnedRecordResponse):
    name: str
    description: Optional[str]
    start_date: Optional[datetime]
    end_date: Optional[datetime]
    status: str
    budget: Optional[float]
    team_id: Optional[int]
    progress: int


class MeetingPayload(PayloadSchema):
    """start_time, end_time, location, agenda and attendees are request-only"""

    title: Optional[StrictStr] = None
    description: Optional[StrictStr] = None
    date: Optional[datetime] = None
    duration: Optional[StrictInt] = None
    team_id: Optional[StrictInt] = None
    project_id: Optional[StrictInt] = None
    status: Optional[StrictStr] = MeetingStatus.SCHEDULED.value
    notes: Optional[StrictStr] = None

    # Transient
    start_time: Optional[StrictStr] = None
    end_time: Optional[StrictStr] = None
    location: Optional[StrictStr] = None
    agenda: Optional[StrictStr] = None
    attendees: Optional[list[StrictInt]] = None


class MeetingResponse(OwnedRecordResponse):
    title: str
    description: Optional[str]
    date: datetime
    duration: Optional[int]
    team_id: Optional[int]
    project_id: Optional[int]
    status: str
    notes: Optional[str]


class TaskPayload(PayloadSchema):
    title: Optional[StrictStr] = None
    description: Optional[StrictStr] = None
    due_date: Optional[datetime] = None
    status: Optional[StrictStr] = TaskStatus.PENDING.value
    priority: Optional[StrictStr] = Priority.MEDIUM.value
    assigned_to: Optional[StrictInt] = None
    category: Optional[StrictStr] = None
    project_id: Optional[StrictInt] = None
    team_id: Optional[StrictInt] = None
    cost: Optional[StrictFloat] = None
    progress: Optional[StrictInt] = 0
    start_date: Optional[datetime] = None
    completed_date: Optional[datetime] = None


class TaskResponse(OwnedRecordResponse):
    title: str
    description: Optional[str]
    due_date: Optional[datetime]
    status: str
    priority: str
    assigned_to: Optional[int]
    category: Optional[str]
    project_id: Optional[int]
    team_id: Optional[int]
    cost: Optional[float]
    progress: int
    start_date: Optional[datetime]
    completed_date: Optional[datetime]
