"""Initial schema for users, courses, lessons, progress, certificates and sessions

Revision ID: 202610190001
Revises:
Create Date: 2026-10-19 00:01:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "202610190001"
down_revision = None
branch_labels = None
depends_on = None

user_role_enum = sa.Enum("student", "admin", name="user_role")


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name, sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
    )


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(length=150), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", user_role_enum, nullable=False, server_default="student"),
        _timestamp("created_at"),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "courses",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        _timestamp("created_at"),
    )

    op.create_table(
        "lessons",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "course_id",
            sa.Integer(),
            sa.ForeignKey("courses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index("ix_lessons_course_id", "lessons", ["course_id"])

    for table, columns in (
        (
            "videos",
            [
                sa.Column("title", sa.String(length=255), nullable=False),
                sa.Column("video_url", sa.String(length=2048), nullable=False),
            ],
        ),
        (
            "texts",
            [
                sa.Column("title", sa.String(length=255), nullable=False),
                sa.Column("content", sa.Text(), nullable=False),
            ],
        ),
        (
            "mcqs",
            [
                sa.Column("question", sa.Text(), nullable=False),
                sa.Column("options", sa.JSON(), nullable=False),
                sa.Column("correct_option_index", sa.Integer(), nullable=False),
            ],
        ),
    ):
        op.create_table(
            table,
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column(
                "lesson_id",
                sa.Integer(),
                sa.ForeignKey("lessons.id", ondelete="CASCADE"),
                nullable=False,
                unique=True,
            ),
            *columns,
        )

    op.create_table(
        "mcq_submissions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "mcq_id",
            sa.Integer(),
            sa.ForeignKey("mcqs.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("selected_option_index", sa.Integer(), nullable=False),
        sa.Column("is_correct", sa.Boolean(), nullable=False),
        _timestamp("submitted_at"),
    )
    op.create_index("ix_mcq_submissions_user_id", "mcq_submissions", ["user_id"])
    op.create_index("ix_mcq_submissions_mcq_id", "mcq_submissions", ["mcq_id"])

    op.create_table(
        "enrollments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "course_id",
            sa.Integer(),
            sa.ForeignKey("courses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _timestamp("enrolled_at"),
        sa.UniqueConstraint("user_id", "course_id", name="uq_enrollment_user_course"),
    )
    op.create_index("ix_enrollments_user_id", "enrollments", ["user_id"])
    op.create_index("ix_enrollments_course_id", "enrollments", ["course_id"])

    op.create_table(
        "lesson_completions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "lesson_id",
            sa.Integer(),
            sa.ForeignKey("lessons.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _timestamp("completed_at"),
        sa.UniqueConstraint("user_id", "lesson_id", name="uq_completion_user_lesson"),
    )
    op.create_index("ix_lesson_completions_user_id", "lesson_completions", ["user_id"])
    op.create_index("ix_lesson_completions_lesson_id", "lesson_completions", ["lesson_id"])

    op.create_table(
        "certificates",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "course_id",
            sa.Integer(),
            sa.ForeignKey("courses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("token", sa.String(length=64), nullable=False, unique=True),
        _timestamp("issued_at"),
        sa.UniqueConstraint("user_id", "course_id", name="uq_certificate_user_course"),
    )
    op.create_index("ix_certificates_user_id", "certificates", ["user_id"])
    op.create_index("ix_certificates_course_id", "certificates", ["course_id"])

    op.create_table(
        "sessions",
        sa.Column("token", sa.String(length=64), primary_key=True),
        sa.Column("data", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_seen_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_sessions_expires_at", "sessions", ["expires_at"])


def downgrade() -> None:
    op.drop_index("ix_sessions_expires_at", table_name="sessions")
    op.drop_table("sessions")
    op.drop_table("certificates")
    op.drop_table("lesson_completions")
    op.drop_table("enrollments")
    op.drop_table("mcq_submissions")
    op.drop_table("mcqs")
    op.drop_table("texts")
    op.drop_table("videos")
    op.drop_table("lessons")
    op.drop_table("courses")
    op.drop_table("users")
    user_role_enum.drop(op.get_bind(), checkfirst=True)
