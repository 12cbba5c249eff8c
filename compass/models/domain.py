import uuid

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from compass.db.base import TimestampedUUIDBase


class User(TimestampedUUIDBase):
    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(50), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    decisions: Mapped[list["Decision"]] = relationship(
        "Decision", back_populates="owner", cascade="all, delete-orphan"
    )


class Decision(TimestampedUUIDBase):
    __tablename__ = "decisions"
    __table_args__ = (Index("ix_decisions_user_created", "user_id", "created_at"),)

    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(String(1000), nullable=False, server_default="")
    # Top alternative's score from the last calculation
    overall_score: Mapped[float] = mapped_column(Numeric(5, 2), nullable=False, default=0, server_default="0")

    owner: Mapped[User] = relationship("User", back_populates="decisions")
    alternatives: Mapped[list["Alternative"]] = relationship(
        "Alternative",
        back_populates="decision",
        cascade="all, delete-orphan",
        order_by="Alternative.position",
    )
    criteria: Mapped[list["Criterion"]] = relationship(
        "Criterion",
        back_populates="decision",
        cascade="all, delete-orphan",
        order_by="Criterion.position",
    )
    options: Mapped[list["Option"]] = relationship(
        "Option", back_populates="decision", cascade="all, delete-orphan", order_by="Option.created_at"
    )


class Alternative(TimestampedUUIDBase):
    __tablename__ = "alternatives"
    __table_args__ = (CheckConstraint("score >= 0", name="alternative_score_non_negative"),)

    decision_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("decisions.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    score: Mapped[float] = mapped_column(Numeric(5, 2), nullable=False, default=0, server_default="0")

    decision: Mapped[Decision] = relationship("Decision", back_populates="alternatives")


class Criterion(TimestampedUUIDBase):
    __tablename__ = "criteria"
    __table_args__ = (
        UniqueConstraint("decision_id", "name", name="uq_criteria_decision_name"),
        CheckConstraint("weight >= 0", name="criterion_weight_non_negative"),
    )

    decision_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("decisions.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # NULL weight counts as 1 when scoring
    weight: Mapped[float | None] = mapped_column(Numeric(6, 2), nullable=True, default=1)

    decision: Mapped[Decision] = relationship("Decision", back_populates="criteria")


class Rating(TimestampedUUIDBase):
    __tablename__ = "ratings"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "decision_id", "alternative_id", "criterion_id", name="uq_rating_user_decision_pair"
        ),
        CheckConstraint("value >= 0 AND value <= 10", name="rating_value_range"),
        Index("ix_ratings_decision_user", "decision_id", "user_id"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    decision_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("decisions.id"), nullable=False)
    alternative_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("alternatives.id"), nullable=False)
    criterion_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("criteria.id"), nullable=False)
    value: Mapped[float] = mapped_column(Numeric(4, 2), nullable=False)


class Option(TimestampedUUIDBase):
    __tablename__ = "options"
    __table_args__ = (UniqueConstraint("decision_id", "name", name="uq_option_decision_name"),)

    decision_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("decisions.id"), nullable=False, index=True)
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False, server_default="")

    decision: Mapped[Decision] = relationship("Decision", back_populates="options")
    scores: Mapped[list["OptionScore"]] = relationship(
        "OptionScore", back_populates="option", cascade="all, delete-orphan"
    )


class OptionScore(TimestampedUUIDBase):
    __tablename__ = "option_scores"
    __table_args__ = (
        UniqueConstraint("option_id", "criterion_id", name="uq_option_score_criterion"),
        CheckConstraint("value >= 0 AND value <= 10", name="option_score_value_range"),
    )

    option_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("options.id"), nullable=False)
    criterion_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("criteria.id"), nullable=False)
    value: Mapped[float] = mapped_column(Numeric(4, 2), nullable=False)

    option: Mapped[Option] = relationship("Option", back_populates="scores")
    criterion: Mapped[Criterion] = relationship("Criterion")


class OutcomeRule(TimestampedUUIDBase):
    __tablename__ = "outcome_rules"

    tag: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    # ["suggestion one", "suggestion two", ...]
    suggestions: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)


class AuditLog(TimestampedUUIDBase):
    __tablename__ = "audit_logs"

    actor_user_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)
    action: Mapped[str] = mapped_column(String(255), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(255), nullable=False)
    entity_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    payload: Mapped[dict | None] = mapped_column(JSONB, nullable=True)

    actor: Mapped[User | None] = relationship("User")
