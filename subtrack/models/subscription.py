"""
SubTrack Backend: Subscription SQLAlchemy Model
===============================================

What:  ORM model for the `subscription` table shared by both backends.
Why:   One mapping serves SQLite (dev) and PostgreSQL (prod); the column
       type for periods adapts to the dialect.
How:   Inherits from DeclarativeBase; Alembic revision 001 creates the same
       table with the same constraint names.

Table Contract (fixed, see alembic/versions/001_create_subscription_table.py):
    - id:           auto-assigned integer primary key
    - service_name: TEXT, part of the unique pair
    - price:        INTEGER monthly price
    - user_id:      TEXT holding a UUID, part of the unique pair
    - start_date:   DATE (PostgreSQL) or ISO 'YYYY-MM-DD' TEXT (SQLite)
    - end_date:     same encoding as start_date

    unique_subscription   UNIQUE (service_name, user_id)
    check_end_after_start CHECK  (end_date > start_date)

    ISO text compares lexicographically in the same order as the dates it
    encodes, so the CHECK and range filters behave identically on both backends.
"""

from datetime import date
from typing import Any, Optional

from sqlalchemy import CheckConstraint, Date, Integer, String, Text, UniqueConstraint
from sqlalchemy.engine import Dialect
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import TypeDecorator, TypeEngine

from subtrack.database import Base
from subtrack.domain.period import Period


def iso_date_check(column: str) -> str:
    """
    SQLite CHECK body for a 'YYYY-MM-DD' text column.

    Year 2000..2100, month 1..12, day 1..31. Shared with Alembic revision 001.
    """
    return (
        f"{column} GLOB '[0-9][0-9][0-9][0-9]-[0-9][0-9]-[0-9][0-9]' AND "
        f"CAST(substr({column}, 1, 4) AS INTEGER) BETWEEN 2000 AND 2100 AND "
        f"CAST(substr({column}, 6, 2) AS INTEGER) BETWEEN 1 AND 12 AND "
        f"CAST(substr({column}, 9, 2) AS INTEGER) BETWEEN 1 AND 31"
    )


class PeriodType(TypeDecorator):
    """
    Persists a Period as the first day of its month.

    PostgreSQL: native DATE, bound as datetime.date(year, month, 1).
    SQLite:     TEXT in ISO form, 'YYYY-MM-01'.

    An out-of-range month cannot become a datetime.date, so PostgreSQL binds
    fail before the statement runs; SQLite leaves it to the table CHECK.
    """

    impl = String(10)
    cache_ok = True

    def load_dialect_impl(self, dialect: Dialect) -> TypeEngine[Any]:
        if dialect.name == "postgresql":
            return dialect.type_descriptor(Date())
        return dialect.type_descriptor(String(10))

    def process_bind_param(self, value: Optional[Period], dialect: Dialect) -> Any:
        if value is None:
            return None
        if dialect.name == "postgresql":
            return date(value.year, value.month, 1)
        return value.to_iso_string()

    def process_result_value(self, value: Any, dialect: Dialect) -> Optional[Period]:
        if value is None:
            return None
        if isinstance(value, date):
            return Period(month=value.month, year=value.year)
        return Period.parse_iso(str(value))


class SubscriptionRecord(Base):
    """
    A row of the `subscription` table.

    Query Patterns:
        - Get by id:      SELECT ... WHERE id = :id            (primary key)
        - Page:           SELECT ... ORDER BY id LIMIT :l OFFSET :o
        - Cost window:    SELECT ... WHERE start_date > :s AND end_date < :e
                          [AND user_id = :u] [AND service_name = :n]
    """

    __tablename__ = "subscription"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    service_name: Mapped[str] = mapped_column(Text, nullable=False)

    price: Mapped[int] = mapped_column(Integer, nullable=False)

    # Stored as the canonical UUID string; the storage layer converts to uuid.UUID
    user_id: Mapped[str] = mapped_column(Text, nullable=False)

    start_date: Mapped[Period] = mapped_column(PeriodType(), nullable=False)

    end_date: Mapped[Period] = mapped_column(PeriodType(), nullable=False)

    __table_args__ = (
        UniqueConstraint("service_name", "user_id", name="unique_subscription"),
        CheckConstraint("end_date > start_date", name="check_end_after_start"),
        # SQLite stores periods as free text, so the format is checked in DDL
        CheckConstraint(iso_date_check("start_date"), name="check_start_date_format").ddl_if(
            dialect="sqlite"
        ),
        CheckConstraint(iso_date_check("end_date"), name="check_end_date_format").ddl_if(
            dialect="sqlite"
        ),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return (
            f"<SubscriptionRecord(id={self.id}, service_name='{self.service_name}', "
            f"user_id='{self.user_id}')>"
        )
