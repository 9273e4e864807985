from datetime import datetime
from enum import Enum as PyEnum
from typing import Any
from sqlalchemy import String, Integer, Numeric, ForeignKey, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import Base, TimestampMixin


class EmployeeStatus(str, PyEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ON_LEAVE = "on-leave"
    TERMINATED = "terminated"


class Employee(Base, TimestampMixin):
    """
    Staff member.

    tasks_assigned / tasks_completed are recounted from tasks whose
    assigned_to points here.
    """

    __tablename__ = "employees"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    position: Mapped[str | None] = mapped_column(String(255), nullable=True)
    start_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=EmployeeStatus.ACTIVE.value)
    department_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("departments.id"), nullable=True, index=True
    )
    permissions: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True, default=dict)
    performance: Mapped[int] = mapped_column(Integer, nullable=False, default=0)  # 0-100
    salary: Mapped[float | None] = mapped_column(Numeric(precision=15, scale=2), nullable=True)
    tasks_completed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    tasks_assigned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
