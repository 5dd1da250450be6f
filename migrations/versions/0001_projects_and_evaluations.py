"""users, projects, evaluations

Revision ID: 0001
Revises: 
Create Date: 2026-10-19 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

SCORE_COLUMNS = [
    "eval1_1", "eval1_2", "eval1_3", "eval1_4", "eval1_5",
    "eval2_1", "eval2_2", "eval2_3",
    "eval3_1", "eval3_2", "eval3_3", "eval3_4",
]


def upgrade() -> None:
    # users (created out-of-band, password may be NULL for legacy rows)
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("password", sa.String(), nullable=True),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # projects
    op.create_table(
        "projects",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("type", sa.String(), nullable=True),
        sa.Column("researchers", sa.String(), nullable=True),
        sa.Column("study_program", sa.String(), nullable=True),
        sa.Column("research_line", sa.String(), nullable=True),
        sa.Column("contact_email", sa.String(), nullable=True),
        sa.Column("general_info", sa.String(), nullable=True),
        sa.Column("problem_description", sa.String(), nullable=True),
        sa.Column("theoretical_framework", sa.String(), nullable=True),
        sa.Column("project_summary", sa.String(), nullable=True),
        sa.Column("file_url", sa.String(), nullable=True),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("NOW()"), nullable=False),
    )
    op.create_index("ix_projects_category", "projects", ["category"])
    op.create_index("ix_projects_user_id", "projects", ["user_id"])
    op.create_index("ix_projects_created_at", "projects", ["created_at"])

    # evaluations (one per project)
    op.create_table(
        "evaluations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("project_id", sa.Integer(), nullable=False),
        *[sa.Column(c, sa.Numeric(5, 2), server_default="0", nullable=False) for c in SCORE_COLUMNS],
        sa.Column("obs1", sa.String(), nullable=True),
        sa.Column("obs2", sa.String(), nullable=True),
        sa.Column("obs3", sa.String(), nullable=True),
        sa.Column("final_recommendations", sa.String(), nullable=True),
        sa.Column("total_score", sa.Numeric(5, 2), server_default="0", nullable=False),
        sa.Column("evaluator_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("NOW()"), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("NOW()"), nullable=False),
    )
    op.create_index("ix_evaluations_project_id", "evaluations", ["project_id"], unique=True)
    op.create_index("ix_evaluations_evaluator_id", "evaluations", ["evaluator_id"])


def downgrade() -> None:
    op.drop_index("ix_evaluations_evaluator_id", table_name="evaluations")
    op.drop_index("ix_evaluations_project_id", table_name="evaluations")
    op.drop_table("evaluations")
    op.drop_index("ix_projects_created_at", table_name="projects")
    op.drop_index("ix_projects_user_id", table_name="projects")
    op.drop_index("ix_projects_category", table_name="projects")
    op.drop_table("projects")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
