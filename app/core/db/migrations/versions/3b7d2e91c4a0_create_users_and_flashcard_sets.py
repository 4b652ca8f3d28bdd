"""create users, flashcard sets and flashcards

Revision ID: 3b7d2e91c4a0
Revises:
Create Date: 2026-10-19 10:12:44.118203

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3b7d2e91c4a0"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("hashed_password", sa.String(length=1024), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("is_superuser", sa.Boolean(), nullable=False),
        sa.Column("is_verified", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)
    op.create_index(op.f("ix_users_id"), "users", ["id"], unique=False)

    op.create_table(
        "flashcard_sets",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False
        ),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_flashcard_sets_created_at"),
        "flashcard_sets",
        ["created_at"],
        unique=False,
    )
    op.create_index(op.f("ix_flashcard_sets_id"), "flashcard_sets", ["id"], unique=False)
    op.create_index(
        op.f("ix_flashcard_sets_user_id"), "flashcard_sets", ["user_id"], unique=False
    )

    op.create_table(
        "flashcards",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("flashcard_set_id", sa.Integer(), nullable=False),
        sa.Column("question", sa.Text(), nullable=False),
        sa.Column("answer", sa.Text(), nullable=False),
        sa.Column("order_index", sa.Integer(), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False
        ),
        sa.ForeignKeyConstraint(
            ["flashcard_set_id"], ["flashcard_sets.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_flashcards_created_at"), "flashcards", ["created_at"], unique=False
    )
    op.create_index(
        op.f("ix_flashcards_flashcard_set_id"),
        "flashcards",
        ["flashcard_set_id"],
        unique=False,
    )
    op.create_index(op.f("ix_flashcards_id"), "flashcards", ["id"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f("ix_flashcards_id"), table_name="flashcards")
    op.drop_index(op.f("ix_flashcards_flashcard_set_id"), table_name="flashcards")
    op.drop_index(op.f("ix_flashcards_created_at"), table_name="flashcards")
    op.drop_table("flashcards")
    op.drop_index(op.f("ix_flashcard_sets_user_id"), table_name="flashcard_sets")
    op.drop_index(op.f("ix_flashcard_sets_id"), table_name="flashcard_sets")
    op.drop_index(op.f("ix_flashcard_sets_created_at"), table_name="flashcard_sets")
    op.drop_table("flashcard_sets")
    op.drop_index(op.f("ix_users_id"), table_name="users")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")
