from typing import Any
from sqlalchemy import String, Integer, Numeric, ForeignKey, Text, JSON
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import Base, TimestampMixin


class Department(Base, TimestampMixin):
    """
    Organisational unit.

    headcount is whatever the client last set; it is not counted from
    employees.
    """

    __tablename__ = "departments"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # departments <-> employees is a cycle; the constraint is added after both tables exist
    manager_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("employees.id", use_alter=True, name="fk_departments_manager_id"),
        nullable=True,
    )
    budget: Mapped[float | None] = mapped_column(Numeric(precision=15, scale=2), nullable=True)
    goals: Mapped[Any | None] = mapped_column(JSON, nullable=True)
    headcount: Mapped[int | None] = mapped_column(Integer, nullable=True)
