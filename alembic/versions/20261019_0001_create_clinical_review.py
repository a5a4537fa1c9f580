"""Create symptom library and clinical review tables.

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19

"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None

global_role = sa.Enum("USER", "SUPERUSER", name="global_role")
surgery_role = sa.Enum("STANDARD", "ADMIN", name="surgery_role")
review_state = sa.Enum("PENDING", "APPROVED", "CHANGES_REQUIRED", name="symptom_review_state")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=32), primary_key=True),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=True),
        sa.Column("global_role", global_role, nullable=False),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    op.create_table(
        "surgeries",
        sa.Column("id", sa.String(length=32), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("requires_clinical_review", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_clinical_review_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "last_clinical_reviewer_id",
            sa.String(length=32),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
    )

    op.create_table(
        "user_surgeries",
        sa.Column("id", sa.String(length=32), primary_key=True),
        sa.Column("user_id", sa.String(length=32), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "surgery_id", sa.String(length=32), sa.ForeignKey("surgeries.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("role", surgery_role, nullable=False),
        sa.UniqueConstraint("user_id", "surgery_id", name="uq_user_surgeries_user_id_surgery_id"),
    )
    op.create_index(op.f("ix_user_surgeries_surgery_id"), "user_surgeries", ["surgery_id"], unique=False)

    op.create_table(
        "base_symptoms",
        sa.Column("id", sa.String(length=32), primary_key=True),
        sa.Column("slug", sa.String(length=200), nullable=False, unique=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("age_group", sa.String(length=10), nullable=True),
        sa.Column("brief_instruction", sa.Text(), nullable=True),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index(op.f("ix_base_symptoms_name"), "base_symptoms", ["name"], unique=False)

    op.create_table(
        "surgery_symptom_overrides",
        sa.Column("id", sa.String(length=32), primary_key=True),
        sa.Column(
            "surgery_id", sa.String(length=32), sa.ForeignKey("surgeries.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column(
            "base_symptom_id",
            sa.String(length=32),
            sa.ForeignKey("base_symptoms.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(length=200), nullable=True),
        sa.Column("age_group", sa.String(length=10), nullable=True),
        sa.Column("brief_instruction", sa.Text(), nullable=True),
        sa.Column("is_hidden", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.UniqueConstraint("surgery_id", "base_symptom_id", name="uq_surgery_symptom_overrides_surgery_base"),
    )
    op.create_index(
        op.f("ix_surgery_symptom_overrides_surgery_id"), "surgery_symptom_overrides", ["surgery_id"], unique=False
    )

    op.create_table(
        "surgery_custom_symptoms",
        sa.Column("id", sa.String(length=32), primary_key=True),
        sa.Column(
            "surgery_id", sa.String(length=32), sa.ForeignKey("surgeries.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("slug", sa.String(length=200), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("age_group", sa.String(length=10), nullable=True),
        sa.Column("brief_instruction", sa.Text(), nullable=True),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index(
        op.f("ix_surgery_custom_symptoms_surgery_id"), "surgery_custom_symptoms", ["surgery_id"], unique=False
    )

    op.create_table(
        "surgery_symptom_statuses",
        sa.Column("id", sa.String(length=32), primary_key=True),
        sa.Column(
            "surgery_id", sa.String(length=32), sa.ForeignKey("surgeries.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column(
            "base_symptom_id",
            sa.String(length=32),
            sa.ForeignKey("base_symptoms.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column(
            "custom_symptom_id",
            sa.String(length=32),
            sa.ForeignKey("surgery_custom_symptoms.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("is_enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_edited_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_edited_by", sa.String(length=320), nullable=True),
    )
    op.create_index(
        op.f("ix_surgery_symptom_statuses_surgery_id"), "surgery_symptom_statuses", ["surgery_id"], unique=False
    )

    op.create_table(
        "symptom_review_statuses",
        sa.Column("id", sa.String(length=32), primary_key=True),
        sa.Column(
            "surgery_id", sa.String(length=32), sa.ForeignKey("surgeries.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("symptom_id", sa.String(length=32), nullable=False),
        sa.Column("age_group", sa.String(length=10), nullable=True),
        sa.Column("status", review_state, nullable=False),
        sa.Column("last_reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "last_reviewed_by_id",
            sa.String(length=32),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("review_note", sa.Text(), nullable=True),
        sa.UniqueConstraint("surgery_id", "symptom_id", "age_group", name="uq_symptom_review_statuses_key"),
    )
    op.create_index(
        op.f("ix_symptom_review_statuses_surgery_id"), "symptom_review_statuses", ["surgery_id"], unique=False
    )
    op.create_index(
        "ix_symptom_review_statuses_surgery_id_status",
        "symptom_review_statuses",
        ["surgery_id", "status"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_symptom_review_statuses_surgery_id_status", table_name="symptom_review_statuses")
    op.drop_index(op.f("ix_symptom_review_statuses_surgery_id"), table_name="symptom_review_statuses")
    op.drop_table("symptom_review_statuses")
    op.drop_index(op.f("ix_surgery_symptom_statuses_surgery_id"), table_name="surgery_symptom_statuses")
    op.drop_table("surgery_symptom_statuses")
    op.drop_index(op.f("ix_surgery_custom_symptoms_surgery_id"), table_name="surgery_custom_symptoms")
    op.drop_table("surgery_custom_symptoms")
    op.drop_index(op.f("ix_surgery_symptom_overrides_surgery_id"), table_name="surgery_symptom_overrides")
    op.drop_table("surgery_symptom_overrides")
    op.drop_index(op.f("ix_base_symptoms_name"), table_name="base_symptoms")
    op.drop_table("base_symptoms")
    op.drop_index(op.f("ix_user_surgeries_surgery_id"), table_name="user_surgeries")
    op.drop_table("user_surgeries")
    op.drop_table("surgeries")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")

    review_state.drop(op.get_bind(), checkfirst=True)
    surgery_role.drop(op.get_bind(), checkfirst=True)
    global_role.drop(op.get_bind(), checkfirst=True)
