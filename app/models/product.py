from typing import Any
from sqlalchemy import String, Integer, Numeric, ForeignKey, Text, Boolean, JSON
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import Base, TimestampMixin


class Product(Base, TimestampMixin):
    """Catalog item offered by the business"""

    __tablename__ = "products"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[float | None] = mapped_column(Numeric(precision=15, scale=2), nullable=True)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    inventory: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    image: Mapped[str | None] = mapped_column(String(500), nullable=True)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    sales: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    revenue: Mapped[float] = mapped_column(Numeric(precision=15, scale=2), nullable=False, default=0)
    cost: Mapped[float | None] = mapped_column(Numeric(precision=15, scale=2), nullable=True)
    discount: Mapped[float | None] = mapped_column(Numeric(precision=5, scale=2), nullable=True)
    promo_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    social_media_links: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True, default=dict)
