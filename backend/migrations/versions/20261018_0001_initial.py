"""initial schema

Revision ID: 20261018_0001
Revises: 
Create Date: 2026-10-18 00:00:00.000000

"""

from alembic import op
import sqlalchemy as sa


revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    op.create_table(
        "file_nodes",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("parent_id", sa.Integer(), nullable=True),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("type", sa.Enum("FOLDER", "FILE", "IMAGE", name="filenodetype"), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False),
        sa.Column("storage_path", sa.String(length=512), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["parent_id"], ["file_nodes.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_file_nodes_owner_id"), "file_nodes", ["owner_id"], unique=False)
    op.create_index(op.f("ix_file_nodes_parent_id"), "file_nodes", ["parent_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_file_nodes_parent_id"), table_name="file_nodes")
    op.drop_index(op.f("ix_file_nodes_owner_id"), table_name="file_nodes")
    op.drop_table("file_nodes")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")

    if op.get_bind().dialect.name == "postgresql":
        op.execute("DROP TYPE filenodetype")
