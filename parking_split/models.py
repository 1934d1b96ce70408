# models.py
import sqlalchemy
from parking_split.database import metadata

# Dates are stored as YYYY-MM-DD text so ordering and equality match the keys used in code.

# 'bookings' table: at most one row per calendar day
bookings = sqlalchemy.Table(
    "bookings",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.Integer, primary_key=True),
    sqlalchemy.Column("date", sqlalchemy.String(10), unique=True, index=True, nullable=False),
    sqlalchemy.Column("occupant", sqlalchemy.String, nullable=False),
    sqlalchemy.Column("created_at", sqlalchemy.String, nullable=True),
)

# 'billing_periods' table: paid flag per [start_date, end_date)
billing_periods = sqlalchemy.Table(
    "billing_periods",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.Integer, primary_key=True),
    sqlalchemy.Column("start_date", sqlalchemy.String(10), nullable=False),
    sqlalchemy.Column("end_date", sqlalchemy.String(10), nullable=False),
    sqlalchemy.Column("is_paid", sqlalchemy.Boolean, nullable=False, default=False),
    sqlalchemy.UniqueConstraint("start_date", "end_date", name="uq_billing_periods_bounds"),
)
