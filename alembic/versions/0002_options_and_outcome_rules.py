"""Add options with per-criterion scores and the outcome rule lookup table."""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0002_options_and_outcome_rules"
down_revision = "0001_initial"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "options",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("decision_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("decisions.id"), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=False, server_default=""),
        sa.UniqueConstraint("decision_id", "name", name="uq_option_decision_name"),
    )
    op.create_index("ix_options_decision_id", "options", ["decision_id"])

    op.create_table(
        "option_scores",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("option_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("options.id"), nullable=False),
        sa.Column("criterion_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("criteria.id"), nullable=False),
        sa.Column("value", sa.Numeric(4, 2), nullable=False),
        sa.UniqueConstraint("option_id", "criterion_id", name="uq_option_score_criterion"),
        sa.CheckConstraint("value >= 0 AND value <= 10", name="ck_option_scores_option_score_value_range"),
    )

    op.create_table(
        "outcome_rules",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("tag", sa.String(length=100), nullable=False),
        sa.Column("suggestions", postgresql.JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
    )
    op.create_index("ix_outcome_rules_tag", "outcome_rules", ["tag"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_outcome_rules_tag", table_name="outcome_rules")
    op.drop_table("outcome_rules")
    op.drop_table("option_scores")
    op.drop_index("ix_options_decision_id", table_name="options")
    op.drop_table("options")
