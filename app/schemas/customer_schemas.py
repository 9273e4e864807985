from datetime import datetime
from typing import Optional
from pydantic import StrictFloat, StrictInt, StrictStr
from app.models.complaint import ComplaintStatus, Priority
from app.models.customer import CustomerType
from app.schemas.common import PayloadSchema, OwnedRecordResponse


class CustomerPayload(PayloadSchema):
    """
    Customer or supplier.

    total_sales / total_purchases may be set directly; financial records
    referencing the customer then move them up or down from that value.
    complaint_count is derived and cannot be written.
    """

    name: Optional[StrictStr] = None
    email: Optional[StrictStr] = None
    phone: Optional[StrictStr] = None
    address: Optional[StrictStr] = None
    notes: Optional[StrictStr] = None
    type: Optional[StrictStr] = CustomerType.CUSTOMER.value
    total_sales: Optional[StrictFloat] = 0
    total_purchases: Optional[StrictFloat] = 0
    customer_satisfaction: Optional[StrictInt] = 0


class CustomerResponse(OwnedRecordResponse):
    name: str
    email: Optional[str]
    phone: Optional[str]
    address: Optional[str]
    notes: Optional[str]
    type: str
    total_sales: float
    total_purchases: float
    complaint_count: int
    customer_satisfaction: int


class ComplaintPayload(PayloadSchema):
    title: Optional[StrictStr] = None
    description: Optional[StrictStr] = None
    status: Optional[StrictStr] = ComplaintStatus.OPEN.value
    priority: Optional[StrictStr] = Priority.MEDIUM.value
    customer_id: Optional[StrictInt] = None
    assigned_to: Optional[StrictInt] = None
    resolved_at: Optional[datetime] = None
    satisfaction_rating: Optional[StrictInt] = None
    resolution: Optional[StrictStr] = None


class ComplaintResponse(OwnedRecordResponse):
    title: str
    description: Optional[str]
    status: str
    priority: str
    customer_id: Optional[int]
    assigned_to: Optional[int]
    resolved_at: Optional[datetime]
    satisfaction_rating: Optional[int]
    resolution: Optional[str]
