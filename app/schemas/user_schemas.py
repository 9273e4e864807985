from typing import Optional
from pydantic import StrictStr
from app.schemas.common import PayloadSchema, RecordResponse


class UserPayload(PayloadSchema):
    """Registration and profile update for a business account"""

    username: Optional[StrictStr] = None
    password: Optional[StrictStr] = None
    company_name: Optional[StrictStr] = None
    business_type: Optional[StrictStr] = None
    web_link: Optional[StrictStr] = None
    logo: Optional[StrictStr] = None
    about: Optional[StrictStr] = None
    contact_info: Optional[StrictStr] = None
    location: Optional[StrictStr] = None


class UserResponse(RecordResponse):
    """Account details; the password hash is never exposed"""

    username: str
    company_name: str
    business_type: Optional[str]
    web_link: Optional[str]
    logo: Optional[str]
    about: Optional[str]
    contact_info: Optional[str]
    location: Optional[str]
