"""review core: users, admins, submissions, media entities, queue, notifications, comments

Revision ID: 20261017_0001
Revises:
Create Date: 2026-10-17

"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None


MEDIA_TABLES = ("images", "videos", "audio_files", "web_data")
MEDIA_OWNER_INDEXES = {
    "images": "ix_images_user_email",
    "videos": "ix_videos_user_email",
    "audio_files": "ix_audio_files_user_email",
    "web_data": "ix_web_data_user_email",
}

UPDATED_AT_TABLES = (
    "users",
    "admins",
    "submissions",
    "images",
    "videos",
    "audio_files",
    "web_data",
    "validation_queue",
    "notifications",
    "submission_comments",
)


def _is_postgresql() -> bool:
    return op.get_bind().dialect.name == "postgresql"


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    ]


def _media_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.String(length=255), nullable=False),
        sa.Column("submission_id", sa.String(length=255), nullable=False),
        sa.Column("user_email", sa.String(length=255), nullable=False),
        sa.Column("file_name", sa.String(length=500), nullable=False),
        sa.Column("file_size", sa.BigInteger(), nullable=False),
        sa.Column("mime_type", sa.String(length=100), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("password_hash", sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "admins",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("admin_role", sa.String(length=50), nullable=False),
        sa.Column("country", sa.String(length=100), nullable=True),
        sa.Column("account_status", sa.String(length=20), nullable=False, server_default="pending"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("admin_role IN ('super_admin', 'validator_admin')", name="ck_admins_admin_role"),
        sa.CheckConstraint(
            "account_status IN ('active', 'pending', 'suspended')",
            name="ck_admins_account_status",
        ),
    )
    op.create_index("ix_admins_email", "admins", ["email"], unique=True)

    op.create_table(
        "admin_actions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("admin_id", sa.Integer(), nullable=False),
        sa.Column("action_type", sa.String(length=100), nullable=False),
        sa.Column("target_type", sa.String(length=50), nullable=True),
        sa.Column("target_id", sa.String(length=255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("ip_address", sa.String(length=45), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.ForeignKeyConstraint(["admin_id"], ["admins.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_admin_actions_admin_id", "admin_actions", ["admin_id"], unique=False)
    op.create_index("ix_admin_actions_created_at", "admin_actions", ["created_at"], unique=False)

    op.create_table(
        "submissions",
        sa.Column("id", sa.String(length=255), nullable=False),
        sa.Column("user_email", sa.String(length=255), nullable=False),
        sa.Column("file_name", sa.String(length=500), nullable=False),
        sa.Column("file_type", sa.String(length=20), nullable=False),
        sa.Column("file_size", sa.BigInteger(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("preview", sa.Text(), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("rejection_feedback", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "file_type IN ('image', 'audio', 'video', 'document')",
            name="ck_submissions_file_type",
        ),
        sa.CheckConstraint(
            "status IN ('pending', 'processing', 'submitted', 'validated', 'successful', 'rejected', 'failed')",
            name="ck_submissions_status",
        ),
    )
    op.create_index(
        "ix_submissions_user_email_created_at",
        "submissions",
        ["user_email", "created_at"],
        unique=False,
    )
    op.create_index(
        "ix_submissions_status_created_at",
        "submissions",
        ["status", "created_at"],
        unique=False,
    )

    extra_columns = {
        "images": [
            sa.Column("preview_data", sa.Text(), nullable=False),
            sa.Column("width", sa.Integer(), nullable=True),
            sa.Column("height", sa.Integer(), nullable=True),
        ],
        "videos": [
            sa.Column("preview_data", sa.Text(), nullable=False),
            sa.Column("duration", sa.Integer(), nullable=True),
        ],
        "audio_files": [
            sa.Column("preview_data", sa.Text(), nullable=False),
            sa.Column("duration", sa.Integer(), nullable=True),
        ],
        "web_data": [
            sa.Column("preview_data", sa.Text(), nullable=True),
            sa.Column("file_extension", sa.String(length=20), nullable=True),
        ],
    }
    for table_name in MEDIA_TABLES:
        op.create_table(
            table_name,
            *_media_columns(),
            *extra_columns[table_name],
            *_timestamps(),
            sa.ForeignKeyConstraint(["submission_id"], ["submissions.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("submission_id", name=f"uq_{table_name}_submission_id"),
        )
        op.create_index(MEDIA_OWNER_INDEXES[table_name], table_name, ["user_email"], unique=False)

    op.create_table(
        "validation_queue",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("submission_id", sa.String(length=255), nullable=False),
        sa.Column("admin_email", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["submission_id"], ["submissions.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("submission_id", "admin_email", name="uq_validation_queue_submission_admin"),
        sa.CheckConstraint(
            "status IN ('pending', 'in_progress', 'completed', 'cancelled')",
            name="ck_validation_queue_status",
        ),
    )
    op.create_index("ix_validation_queue_admin_email", "validation_queue", ["admin_email"], unique=False)
    op.create_index("ix_validation_queue_status", "validation_queue", ["status"], unique=False)

    op.create_table(
        "notifications",
        sa.Column("id", sa.String(length=255), nullable=False),
        sa.Column("user_email", sa.String(length=255), nullable=False),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("action_url", sa.String(length=500), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("type IN ('success', 'error', 'info', 'warning')", name="ck_notifications_type"),
    )
    op.create_index("ix_notifications_user_email", "notifications", ["user_email"], unique=False)
    op.create_index("ix_notifications_read", "notifications", ["read"], unique=False)
    op.create_index("ix_notifications_created_at", "notifications", ["created_at"], unique=False)
    op.create_index("ix_notifications_user_email_read", "notifications", ["user_email", "read"], unique=False)

    op.create_table(
        "submission_comments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("submission_id", sa.String(length=255), nullable=False),
        sa.Column("author_email", sa.String(length=255), nullable=False),
        sa.Column("author_type", sa.String(length=20), nullable=False),
        sa.Column("comment_text", sa.Text(), nullable=False),
        sa.Column("parent_comment_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["submission_id"], ["submissions.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["parent_comment_id"], ["submission_comments.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("author_type IN ('user', 'admin')", name="ck_submission_comments_author_type"),
    )
    op.create_index("ix_submission_comments_submission_id", "submission_comments", ["submission_id"], unique=False)
    op.create_index(
        "ix_submission_comments_parent_comment_id",
        "submission_comments",
        ["parent_comment_id"],
        unique=False,
    )
    op.create_index("ix_submission_comments_created_at", "submission_comments", ["created_at"], unique=False)

    if _is_postgresql():
        op.execute(
            """
            CREATE OR REPLACE FUNCTION update_updated_at_column()
            RETURNS TRIGGER AS $$
            BEGIN
                IF NEW.updated_at IS NULL OR NEW.updated_at <= OLD.updated_at THEN
                    NEW.updated_at = GREATEST(CURRENT_TIMESTAMP, OLD.updated_at + INTERVAL '1 microsecond');
                END IF;
                RETURN NEW;
            END;
            $$ LANGUAGE plpgsql;
            """
        )
        for table_name in UPDATED_AT_TABLES:
            op.execute(
                f"""
                CREATE TRIGGER update_{table_name}_updated_at
                BEFORE UPDATE ON {table_name}
                FOR EACH ROW EXECUTE FUNCTION update_updated_at_column();
                """
            )


def downgrade() -> None:
    if _is_postgresql():
        for table_name in UPDATED_AT_TABLES:
            op.execute(f"DROP TRIGGER IF EXISTS update_{table_name}_updated_at ON {table_name};")
        op.execute("DROP FUNCTION IF EXISTS update_updated_at_column();")

    op.drop_index("ix_submission_comments_created_at", table_name="submission_comments")
    op.drop_index("ix_submission_comments_parent_comment_id", table_name="submission_comments")
    op.drop_index("ix_submission_comments_submission_id", table_name="submission_comments")
    op.drop_table("submission_comments")

    op.drop_index("ix_notifications_user_email_read", table_name="notifications")
    op.drop_index("ix_notifications_created_at", table_name="notifications")
    op.drop_index("ix_notifications_read", table_name="notifications")
    op.drop_index("ix_notifications_user_email", table_name="notifications")
    op.drop_table("notifications")

    op.drop_index("ix_validation_queue_status", table_name="validation_queue")
    op.drop_index("ix_validation_queue_admin_email", table_name="validation_queue")
    op.drop_table("validation_queue")

    for table_name in reversed(MEDIA_TABLES):
        op.drop_index(MEDIA_OWNER_INDEXES[table_name], table_name=table_name)
        op.drop_table(table_name)

    op.drop_index("ix_submissions_status_created_at", table_name="submissions")
    op.drop_index("ix_submissions_user_email_created_at", table_name="submissions")
    op.drop_table("submissions")

    op.drop_index("ix_admin_actions_created_at", table_name="admin_actions")
    op.drop_index("ix_admin_actions_admin_id", table_name="admin_actions")
    op.drop_table("admin_actions")

    op.drop_index("ix_admins_email", table_name="admins")
    op.drop_table("admins")

    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
