from datetime import datetime
from enum import Enum as PyEnum
from sqlalchemy import String, Integer, Numeric, ForeignKey, Text, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import Base, TimestampMixin, utcnow


class FinancialRecordType(str, PyEnum):
    INVOICE = "invoice"
    EXPENSE = "expense"
    PAYMENT = "payment"


class FinancialRecordStatus(str, PyEnum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"


class FinancialRecord(Base, TimestampMixin):
    """
    Invoice, expense or payment, optionally tied to a customer.

    Payments roll up into the customer's total_sales and expenses into
    total_purchases; invoices do not move either total.
    """

    __tablename__ = "financial_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    amount: Mapped[float] = mapped_column(Numeric(precision=15, scale=2), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    customer_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("customers.id"), nullable=True, index=True
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=FinancialRecordStatus.PENDING.value)
    due_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    reference: Mapped[str | None] = mapped_column(String(255), nullable=True)

    __table_args__ = (
        Index("ix_financial_records_customer_type", "customer_id", "type"),
        {"sqlite_autoincrement": True},
    )
