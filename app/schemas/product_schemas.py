from typing import Any, Optional
from pydantic import Field, StrictBool, StrictFloat, StrictInt, StrictStr
from app.schemas.common import PayloadSchema, OwnedRecordResponse


class ProductPayload(PayloadSchema):
    """popularity is accepted for compatibility but not stored"""

    name: Optional[StrictStr] = None
    description: Optional[StrictStr] = None
    price: Optional[StrictFloat] = None
    category: Optional[StrictStr] = None
    inventory: Optional[StrictInt] = 0
    image: Optional[StrictStr] = None
    is_published: Optional[StrictBool] = False
    sales: Optional[StrictInt] = 0
    revenue: Optional[StrictFloat] = 0
    cost: Optional[StrictFloat] = None
    discount: Optional[StrictFloat] = None
    promo_code: Optional[StrictStr] = None
    social_media_links: Optional[dict[str, Any]] = Field(default_factory=dict)

    # Transient
    popularity: Optional[StrictFloat] = None


class ProductResponse(OwnedRecordResponse):
    name: str
    description: Optional[str]
    price: Optional[float]
    category: Optional[str]
    inventory: int
    image: Optional[str]
    is_published: bool
    sales: int
    revenue: float
    cost: Optional[float]
    discount: Optional[float]
    promo_code: Optional[str]
    social_media_links: Optional[dict[str, Any]]
