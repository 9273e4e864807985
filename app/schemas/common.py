from datetime import datetime
from pydantic import BaseModel, ConfigDict


class PayloadSchema(BaseModel):
    """
    Base for client payloads.

    Unknown fields are rejected and scalar fields use strict types, so a
    string is never silently coerced into a number and Infinity or NaN never
    reach a numeric column. Fields that must be present are still declared
    optional here: their absence is reported together with the other field
    violations by the validation layer.

    The same schema serves create (defaults applied) and partial update
    (only the fields present in the request are applied).
    """

    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)


class RecordResponse(BaseModel):
    """Columns every stored record carries"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    updated_at: datetime


class OwnedRecordResponse(RecordResponse):
    user_id: int
