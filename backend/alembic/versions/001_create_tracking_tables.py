"""Create behavior tracking tables

Revision ID: 001
Revises: None
Create Date: 2024-06-01 00:00:00.000000+00:00

What:  users, organizations, profiles, students, behavior_categories and
       behavior_logs with their foreign keys and lookup indexes.
How:   UUID primary keys generated by Postgres (gen_random_uuid) so rows
       inserted outside the API still get ids; the API also supplies its own.

Rollback: downgrade() drops every table in reverse dependency order.
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id_column() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=False),
        server_default=sa.text("gen_random_uuid()"),
        nullable=False,
    )


def _timestamps() -> list:
    return [
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        _id_column(),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("last_sign_in_at", sa.TIMESTAMP(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    op.create_table(
        "organizations",
        _id_column(),
        sa.Column("name", sa.String(100), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "profiles",
        sa.Column("user_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("organization_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default=sa.text("'user'")),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False),
        sa.Column("avatar", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("user_id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"], ondelete="CASCADE"),
        sa.CheckConstraint("role IN ('admin', 'user', 'parent')", name="ck_profiles_role"),
    )
    op.create_index("idx_profiles_organization_id", "profiles", ["organization_id"])

    op.create_table(
        "students",
        _id_column(),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False),
        sa.Column("dob", sa.Date(), nullable=True),
        sa.Column("organization_id", postgresql.UUID(as_uuid=False), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"], ondelete="CASCADE"),
    )
    op.create_index("idx_students_organization_id", "students", ["organization_id"])

    op.create_table(
        "behavior_categories",
        _id_column(),
        sa.Column("name", sa.String(50), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name", name="uq_behavior_categories_name"),
    )

    op.create_table(
        "behavior_logs",
        _id_column(),
        sa.Column("user_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("student_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("behavior_category_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("mood", sa.String(50), nullable=False),
        sa.Column("intent", sa.String(20), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["behavior_category_id"], ["behavior_categories.id"]),
        sa.CheckConstraint("intent IN ('aggressive', 'sensory')", name="ck_behavior_logs_intent"),
    )
    # Most reads are "this student's logs, newest first"
    op.create_index(
        "idx_behavior_logs_student_created",
        "behavior_logs",
        ["student_id", sa.text("created_at DESC")],
    )
    op.create_index("idx_behavior_logs_created_at", "behavior_logs", [sa.text("created_at DESC")])


def downgrade() -> None:
    op.drop_index("idx_behavior_logs_created_at", table_name="behavior_logs")
    op.drop_index("idx_behavior_logs_student_created", table_name="behavior_logs")
    op.drop_table("behavior_logs")
    op.drop_table("behavior_categories")
    op.drop_index("idx_students_organization_id", table_name="students")
    op.drop_table("students")
    op.drop_index("idx_profiles_organization_id", table_name="profiles")
    op.drop_table("profiles")
    op.drop_table("organizations")
    op.drop_table("users")
