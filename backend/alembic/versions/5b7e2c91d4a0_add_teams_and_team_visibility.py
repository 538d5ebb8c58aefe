"""add teams, team members and team-scoped datasets

Revision ID: 5b7e2c91d4a0
Revises: 0001_init_schema
Create Date: 2026-10-08 14:12:40.118204

"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = '5b7e2c91d4a0'
down_revision = '0001_init_schema'
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "teams",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.String(length=1000), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )

    op.create_table(
        "team_members",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column(
            "team_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("teams.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "role",
            sa.Enum("MEMBER", "OWNER", name="team_role"),
            nullable=False,
            server_default="MEMBER",
        ),
        sa.Column("joined_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.UniqueConstraint("team_id", "user_id", name="uq_team_members_team_id_user_id"),
    )
    op.create_index("ix_team_members_team_id", "team_members", ["team_id"])
    op.create_index("ix_team_members_user_id", "team_members", ["user_id"])

    op.add_column("datasets", sa.Column("team_id", postgresql.UUID(as_uuid=True), nullable=True))
    op.create_index("ix_datasets_team_id", "datasets", ["team_id"])
    op.create_foreign_key(
        "fk_datasets_team_id_teams",
        "datasets",
        "teams",
        ["team_id"],
        ["id"],
        ondelete="SET NULL",
    )
    op.create_check_constraint(
        "ck_datasets_team_visibility",
        "datasets",
        "(visibility = 'TEAM') = (team_id IS NOT NULL)",
    )


def downgrade() -> None:
    op.execute("UPDATE datasets SET visibility = 'PRIVATE' WHERE visibility = 'TEAM'")
    op.drop_constraint("ck_datasets_team_visibility", "datasets", type_="check")
    op.drop_constraint("fk_datasets_team_id_teams", "datasets", type_="foreignkey")
    op.drop_index("ix_datasets_team_id", table_name="datasets")
    op.drop_column("datasets", "team_id")

    op.drop_index("ix_team_members_user_id", table_name="team_members")
    op.drop_index("ix_team_members_team_id", table_name="team_members")
    op.drop_table("team_members")
    sa.Enum(name="team_role").drop(op.get_bind(), checkfirst=True)

    op.drop_table("teams")
