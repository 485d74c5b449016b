"""questions and generations

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "questions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("question_id", sa.String(length=64), nullable=False),
        sa.Column("number", sa.Integer(), nullable=False),
        sa.Column("topic", sa.String(length=255), nullable=False),
        sa.Column("exam", sa.String(length=255), nullable=True),
        sa.Column("exam_scope", sa.String(length=64), nullable=True),
        sa.Column("image_url", sa.JSON(), nullable=True),
        sa.UniqueConstraint("question_id", name="uq_questions_question_id"),
    )
    op.create_index("ix_questions_number", "questions", ["number"])
    op.create_index("ix_questions_topic", "questions", ["topic"])
    op.create_index("ix_questions_exam_scope", "questions", ["exam_scope"])

    op.create_table(
        "generations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("mode", sa.String(length=16), nullable=False),
        sa.Column("topics", sa.JSON(), nullable=False),
        sa.Column("exam_scope", sa.String(length=64), nullable=True),
        sa.Column("question_ids", sa.JSON(), nullable=False),
        sa.Column("page_count", sa.Integer(), nullable=False),
        sa.Column("failed_images", sa.Integer(), nullable=False),
        sa.Column("duration_ms", sa.Integer(), nullable=True),
    )
    op.create_index("ix_generations_created_at", "generations", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_generations_created_at", table_name="generations")
    op.drop_table("generations")
    op.drop_index("ix_questions_exam_scope", table_name="questions")
    op.drop_index("ix_questions_topic", table_name="questions")
    op.drop_index("ix_questions_number", table_name="questions")
    op.drop_table("questions")
