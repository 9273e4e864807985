from datetime import datetime
from typing import Any
from sqlalchemy import String, Integer, Boolean, ForeignKey, DateTime, JSON, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import Base, TimestampMixin, utcnow


class TeamMember(Base, TimestampMixin):
    """
    Join table linking employees to teams.

    Has no user_id of its own: ownership is whatever owns the team, and the
    employee must belong to that same account.
    """

    __tablename__ = "team_members"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    team_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("teams.id"), nullable=False, index=True
    )
    employee_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("employees.id"), nullable=False, index=True
    )
    role: Mapped[str | None] = mapped_column(String(100), nullable=True)
    joined_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    permissions: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    __table_args__ = (
        UniqueConstraint("team_id", "employee_id", name="uq_team_employee"),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return f"<TeamMember(team_id={self.team_id}, employee_id={self.employee_id})>"
