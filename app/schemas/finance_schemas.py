from datetime import datetime
from typing import Optional
from pydantic import Field, StrictBool, StrictFloat, StrictInt, StrictStr
from app.models.base import utcnow
from app.models.financial_record import FinancialRecordStatus
from app.schemas.common import PayloadSchema, OwnedRecordResponse


class FinancialRecordPayload(PayloadSchema):
    """
    Invoice, expense or payment.

    related_entity_id, related_entity_type and tax_deductible are
    request-only: they are type-checked and then discarded.
    """

    type: Optional[StrictStr] = None
    amount: Optional[StrictFloat] = None
    description: Optional[StrictStr] = None
    date: Optional[datetime] = Field(default_factory=utcnow)
    category: Optional[StrictStr] = None
    customer_id: Optional[StrictInt] = None
    status: Optional[StrictStr] = FinancialRecordStatus.PENDING.value
    due_date: Optional[datetime] = None
    reference: Optional[StrictStr] = None

    # Transient
    related_entity_id: Optional[StrictInt] = None
    related_entity_type: Optional[StrictStr] = None
    tax_deductible: Optional[StrictBool] = None


class FinancialRecordResponse(OwnedRecordResponse):
    type: str
    amount: float
    description: Optional[str]
    date: datetime
    category: Optional[str]
    customer_id: Optional[int]
    status: str
    due_date: Optional[datetime]
    reference: Optional[str]


class BudgetPayload(PayloadSchema):
    """period, description and status are request-only"""

    name: Optional[StrictStr] = None
    amount: Optional[StrictFloat] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    category: Optional[StrictStr] = None
    department_id: Optional[StrictInt] = None
    project_id: Optional[StrictInt] = None
    actual_spend: Optional[StrictFloat] = 0

    # Transient
    period: Optional[StrictStr] = None
    description: Optional[StrictStr] = None
    status: Optional[StrictStr] = None


class BudgetResponse(OwnedRecordResponse):
    name: str
    amount: float
    start_date: datetime
    end_date: datetime
    category: Optional[str]
    department_id: Optional[int]
    project_id: Optional[int]
    actual_spend: float
