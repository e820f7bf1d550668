"""Initial schema - users, namespaces, namespace role catalog and associations.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "vorto_user",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("username", sa.String(255), nullable=False),
        sa.Column("auth_provider_id", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("technical_user", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("subject", sa.String(255), nullable=True),
        sa.Column("created_by", sa.UUID(), sa.ForeignKey("vorto_user.id", ondelete="SET NULL"), nullable=True),
    )
    op.create_index("ix_vorto_user_username", "vorto_user", ["username"], unique=True)

    op.create_table(
        "namespace",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("owner_id", sa.UUID(), sa.ForeignKey("vorto_user.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.execute("CREATE UNIQUE INDEX ix_namespace_name_lower ON namespace (lower(name))")
    op.create_index("ix_namespace_owner", "namespace", ["owner_id"])

    op.create_table(
        "namespace_role",
        sa.Column("role", sa.BigInteger(), primary_key=True),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("privileged", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.CheckConstraint("role > 0 AND (role & (role - 1)) = 0", name="ck_namespace_role_power_of_two"),
    )
    op.create_index("ix_namespace_role_name", "namespace_role", ["name"], unique=True)

    op.create_table(
        "user_namespace_roles",
        sa.Column("user_id", sa.UUID(), sa.ForeignKey("vorto_user.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("namespace_id", sa.UUID(), sa.ForeignKey("namespace.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("roles", sa.BigInteger(), nullable=False),
        sa.CheckConstraint("roles > 0", name="ck_user_namespace_roles_not_empty"),
    )
    op.create_index("ix_user_namespace_roles_namespace", "user_namespace_roles", ["namespace_id"])

    op.create_table(
        "user_repository_roles",
        sa.Column("user_id", sa.UUID(), sa.ForeignKey("vorto_user.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("roles", sa.BigInteger(), nullable=False, server_default="0"),
    )

    op.execute("""
        INSERT INTO namespace_role (role, name, privileged) VALUES
        (1, 'model_viewer', false),
        (2, 'model_creator', false),
        (4, 'model_promoter', false),
        (8, 'model_reviewer', false),
        (16, 'model_publisher', false),
        (32, 'namespace_admin', true)
    """)


def downgrade() -> None:
    op.drop_table("user_repository_roles")
    op.drop_table("user_namespace_roles")
    op.drop_table("namespace_role")
    op.drop_table("namespace")
    op.drop_table("vorto_user")
