"""initial schema : moteur de quiz

Revision ID: 001_initial
Create Date: 19/10/2026
"""
from alembic import op
import sqlalchemy as sa

revision = '001_initial'
down_revision = None


def upgrade() -> None:
    # quiz_type / status stockés en String (valeurs : app.shared.enums)
    op.create_table("quizzes",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("title", sa.String, nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("quiz_type", sa.String, nullable=False, server_default="DEFAULT"),
        sa.Column("status", sa.String, nullable=False, server_default="DRAFT"),
        sa.Column("is_public", sa.Boolean, server_default=sa.false()),
        sa.Column("total_attempts", sa.Integer, server_default="0"),
        sa.Column("completed_attempts", sa.Integer, server_default="0"),
        sa.Column("average_score", sa.Float, server_default="0"),
        sa.Column("average_completion_time", sa.Float, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table("quiz_dimensions",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("quiz_id", sa.Integer, sa.ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("name", sa.String, nullable=False),
        sa.Column("short_name", sa.String, nullable=False),
        sa.Column("order", sa.Integer, server_default="0"),
        sa.Column("min_score", sa.Float, nullable=True),
        sa.Column("max_score", sa.Float, nullable=True),
        sa.Column("threshold", sa.Float, nullable=True),
        sa.Column("low_label", sa.String, nullable=True),
        sa.Column("high_label", sa.String, nullable=True),
        sa.UniqueConstraint("quiz_id", "short_name", name="uq_quiz_dimension_short_name"),
    )

    op.create_table("quiz_questions",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("quiz_id", sa.Integer, sa.ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("dimension_id", sa.Integer, sa.ForeignKey("quiz_dimensions.id", ondelete="SET NULL"), nullable=True, index=True),
        sa.Column("text", sa.Text, nullable=False),
        sa.Column("order", sa.Integer, server_default="0"),
    )

    op.create_table("quiz_options",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("question_id", sa.Integer, sa.ForeignKey("quiz_questions.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("text", sa.Text, nullable=False),
        sa.Column("value", sa.Integer, nullable=False, server_default="0"),
        sa.Column("order", sa.Integer, server_default="0"),
    )

    op.create_table("grading_criteria",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("quiz_id", sa.Integer, sa.ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("name", sa.String, nullable=False),
        sa.Column("label", sa.String, nullable=False),
        sa.Column("min_score", sa.Float, nullable=False),
        sa.Column("max_score", sa.Float, nullable=False),
        sa.Column("color", sa.String, nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("recommendations", sa.JSON, nullable=False),
    )

    op.create_table("complex_grading_criteria",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("quiz_id", sa.Integer, sa.ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("name", sa.String, nullable=False),
        sa.Column("label", sa.String, nullable=False),
        sa.Column("color", sa.String, nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("recommendations", sa.JSON, nullable=False),
        sa.Column("scoring_logic", sa.JSON, nullable=True),
    )

    op.create_table("quiz_results",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("quiz_id", sa.Integer, sa.ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("user_id", sa.String, nullable=True, index=True),
        sa.Column("score", sa.Float, nullable=False, server_default="0"),
        sa.Column("max_score", sa.Float, nullable=False, server_default="0"),
        sa.Column("percentage", sa.Integer, nullable=False, server_default="0"),
        sa.Column("dimension_scores", sa.JSON, nullable=True),
        sa.Column("classification", sa.String, nullable=True),
        sa.Column("is_fallback", sa.Boolean, server_default=sa.false()),
        sa.Column("level", sa.String, nullable=True),
        sa.Column("feedback", sa.Text, nullable=True),
        sa.Column("recommendations", sa.JSON, nullable=False),
        sa.Column("areas_of_improvement", sa.JSON, nullable=False),
        sa.Column("support_needed", sa.JSON, nullable=False),
        sa.Column("answers", sa.JSON, nullable=False),
        sa.Column("time_spent", sa.Integer, server_default="0"),
        sa.Column("completed_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade() -> None:
    tables = [
        "quiz_results",
        "complex_grading_criteria", "grading_criteria",
        "quiz_options", "quiz_questions", "quiz_dimensions",
        "quizzes",
    ]
    for table in tables:
        op.drop_table(table)
