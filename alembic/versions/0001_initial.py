"""Initial schema: users, decisions, alternatives, criteria, ratings, audit logs."""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        *_timestamps(),
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "decisions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        *_timestamps(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.String(length=1000), nullable=False, server_default=""),
        sa.Column("overall_score", sa.Numeric(5, 2), nullable=False, server_default="0"),
    )
    op.create_index("ix_decisions_user_created", "decisions", ["user_id", "created_at"])

    op.create_table(
        "alternatives",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        *_timestamps(),
        sa.Column("decision_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("decisions.id"), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=True),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
        sa.Column("score", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.CheckConstraint("score >= 0", name="ck_alternatives_alternative_score_non_negative"),
    )
    op.create_index("ix_alternatives_decision_id", "alternatives", ["decision_id"])

    op.create_table(
        "criteria",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        *_timestamps(),
        sa.Column("decision_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("decisions.id"), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=True),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
        sa.Column("weight", sa.Numeric(6, 2), nullable=True, server_default="1"),
        sa.UniqueConstraint("decision_id", "name", name="uq_criteria_decision_name"),
        sa.CheckConstraint("weight >= 0", name="ck_criteria_criterion_weight_non_negative"),
    )
    op.create_index("ix_criteria_decision_id", "criteria", ["decision_id"])

    op.create_table(
        "ratings",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        *_timestamps(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("decision_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("decisions.id"), nullable=False),
        sa.Column("alternative_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("alternatives.id"), nullable=False),
        sa.Column("criterion_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("criteria.id"), nullable=False),
        sa.Column("value", sa.Numeric(4, 2), nullable=False),
        # One rating per user/decision/alternative/criterion; writes upsert against this
        sa.UniqueConstraint(
            "user_id", "decision_id", "alternative_id", "criterion_id", name="uq_rating_user_decision_pair"
        ),
        sa.CheckConstraint("value >= 0 AND value <= 10", name="ck_ratings_rating_value_range"),
    )
    op.create_index("ix_ratings_decision_user", "ratings", ["decision_id", "user_id"])

    op.create_table(
        "audit_logs",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        *_timestamps(),
        sa.Column("actor_user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("action", sa.String(length=255), nullable=False),
        sa.Column("entity_type", sa.String(length=255), nullable=False),
        sa.Column("entity_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("payload", postgresql.JSONB, nullable=True),
    )


def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_index("ix_ratings_decision_user", table_name="ratings")
    op.drop_table("ratings")
    op.drop_index("ix_criteria_decision_id", table_name="criteria")
    op.drop_table("criteria")
    op.drop_index("ix_alternatives_decision_id", table_name="alternatives")
    op.drop_table("alternatives")
    op.drop_index("ix_decisions_user_created", table_name="decisions")
    op.drop_table("decisions")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
