"""create_movies_table

Revision ID: 3e1f0c2b7a91
Revises:
Create Date: 2026-10-19
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3e1f0c2b7a91"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "movies",
        sa.Column("pk", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("movie_id", sa.String(length=50), nullable=False),
        sa.Column("rank", sa.String(length=20), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("full_title", sa.String(length=500), nullable=False),
        sa.Column("year", sa.String(length=20), nullable=False),
        sa.Column("image", sa.Text(), nullable=False),
        sa.Column("rating_value", sa.String(length=20), nullable=False),
        sa.Column("rating_count", sa.String(length=20), nullable=False),
        sa.Column("user_rating", sa.String(length=2), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("pk"),
    )
    op.create_index(op.f("ix_movies_movie_id"), "movies", ["movie_id"], unique=True)


def downgrade() -> None:
    op.drop_index(op.f("ix_movies_movie_id"), table_name="movies")
    op.drop_table("movies")
