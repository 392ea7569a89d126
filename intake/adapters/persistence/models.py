"""SQLAlchemy ORM models — maps to PostgreSQL tables."""

from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from intake.adapters.persistence.database import Base


class TicketCategoryModel(Base):
    __tablename__ = "ticket_categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    slug: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    auto_assign: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    crisis_detection_enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
    sla_response_hours: Mapped[int] = mapped_column(Integer, nullable=False, default=24)
    max_priority_level: Mapped[int] = mapped_column(Integer, nullable=False, default=3)

    specializations: Mapped[list["CounselorSpecializationModel"]] = relationship(
        back_populates="category"
    )


class CounselorModel(Base):
    __tablename__ = "counselors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="counselor")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")

    specializations: Mapped[list["CounselorSpecializationModel"]] = relationship(
        back_populates="counselor",
        foreign_keys="CounselorSpecializationModel.counselor_id",
    )


class CounselorSpecializationModel(Base):
    __tablename__ = "counselor_specializations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    counselor_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("counselors.id", ondelete="CASCADE"), nullable=False
    )
    category_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("ticket_categories.id", ondelete="CASCADE"), nullable=False
    )
    priority_level: Mapped[str] = mapped_column(String(20), nullable=False, default="primary")
    max_workload: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    current_workload: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    expertise_rating: Mapped[float] = mapped_column(
        Numeric(3, 2, asdecimal=False), nullable=False, default=5.0
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    assigned_by: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("counselors.id", ondelete="SET NULL"), nullable=True
    )
    assigned_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    counselor: Mapped["CounselorModel"] = relationship(
        back_populates="specializations", foreign_keys=[counselor_id]
    )
    category: Mapped["TicketCategoryModel"] = relationship(back_populates="specializations")

    __table_args__ = (
        UniqueConstraint("counselor_id", "category_id", name="uq_cs_counselor_category"),
        CheckConstraint("current_workload >= 0", name="ck_cs_workload_non_negative"),
        Index("cs_cat_avail_priority_idx", "category_id", "is_available", "priority_level"),
        Index("cs_user_available_idx", "counselor_id", "is_available"),
    )


class CrisisRuleModel(Base):
    __tablename__ = "crisis_rules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    keyword: Mapped[str] = mapped_column(String(255), nullable=False)
    severity_level: Mapped[str] = mapped_column(String(20), nullable=False)
    match_mode: Mapped[str] = mapped_column(String(20), nullable=False, default="partial")
    case_sensitive: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    category_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("ticket_categories.id", ondelete="CASCADE"), nullable=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    trigger_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_triggered_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    __table_args__ = (
        Index("idx_crisis_rules_active_category", "is_active", "category_id"),
    )


class AssignmentHistoryModel(Base):
    __tablename__ = "ticket_assignment_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Tickets live in the intake service's own table; no FK from the core.
    ticket_id: Mapped[int] = mapped_column(Integer, nullable=False)
    assigned_from: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("counselors.id", ondelete="SET NULL"), nullable=True
    )
    assigned_to: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("counselors.id", ondelete="SET NULL"), nullable=True
    )
    assigned_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    assignment_type: Mapped[str] = mapped_column(String(20), nullable=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    assignment_criteria: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    assigned_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("tah_ticket_assigned_idx", "ticket_id", "assigned_at"),
        Index("tah_assignee_type_idx", "assigned_to", "assignment_type"),
    )
