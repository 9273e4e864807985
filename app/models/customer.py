from enum import Enum as PyEnum
from sqlalchemy import String, Integer, Numeric, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import Base, TimestampMixin


class CustomerType(str, PyEnum):
    """Distinguishes customers from suppliers"""

    CUSTOMER = "customer"
    SUPPLIER = "supplier"


class Customer(Base, TimestampMixin):
    """
    Customers and suppliers of the business.

    total_sales / total_purchases move with the financial records that
    reference the customer; complaint_count is a recount of complaints.
    """

    __tablename__ = "customers"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default=CustomerType.CUSTOMER.value)
    total_sales: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2), nullable=False, default=0
    )
    total_purchases: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2), nullable=False, default=0
    )
    complaint_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    customer_satisfaction: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
