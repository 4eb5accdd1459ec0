"""Create subscription table

Revision ID: 001
Revises: None
Create Date: 2025-06-02 00:00:00.000000+00:00

What:  Creates the `subscription` table shared by both storage backends.
How:   PostgreSQL stores periods as DATE; SQLite stores ISO 'YYYY-MM-DD' text
       and additionally checks its format and ranges.

Rollback: downgrade() drops the table entirely (destructive, all data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

from subtrack.models.subscription import iso_date_check

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create the subscription table with its named constraints.

    The constraint names are part of the storage contract; see
    subtrack/models/subscription.py.
    """
    is_sqlite = op.get_bind().dialect.name == "sqlite"
    date_type = sa.String(10) if is_sqlite else sa.Date()

    constraints = [
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("service_name", "user_id", name="unique_subscription"),
        sa.CheckConstraint("end_date > start_date", name="check_end_after_start"),
    ]
    if is_sqlite:
        constraints += [
            sa.CheckConstraint(iso_date_check("start_date"), name="check_start_date_format"),
            sa.CheckConstraint(iso_date_check("end_date"), name="check_end_date_format"),
        ]

    op.create_table(
        "subscription",
        # SERIAL on PostgreSQL, INTEGER PRIMARY KEY AUTOINCREMENT on SQLite
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("service_name", sa.Text(), nullable=False),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.Column("start_date", date_type, nullable=False),
        sa.Column("end_date", date_type, nullable=False),
        *constraints,
        sqlite_autoincrement=True,
    )


def downgrade() -> None:
    op.drop_table("subscription")
