"""Doctor model definition using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Table,
    Text,
    Uuid,
    func,
    text,
)

from clinicdesk.models.base import metadata

doctors = Table(
    "doctors",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    Column(
        "user_id",
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    ),
    Column("first_name", String(100), nullable=False),
    Column("last_name", String(100), nullable=False),
    # Professional credentials
    Column("specialization", String(200), nullable=False, index=True),
    Column("qualification", Text, nullable=False),
    Column("experience", Integer, nullable=False),
    Column("license_number", String(100), nullable=False, unique=True, index=True),
    # Practice information
    Column("phone_number", String(20), nullable=False),
    Column("consultation_fee", Numeric(10, 2), nullable=False),
    Column("bio", String(500)),
    # Weekly availability: [{"day": "monday", "slots": [...]}]
    Column("availability", JSON, nullable=False, default=list),
    # Ratings
    Column("rating", Numeric(3, 2), nullable=False, server_default=text("0")),
    Column("total_reviews", Integer, nullable=False, server_default=text("0")),
    # Metadata
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    CheckConstraint("experience >= 0", name="doctors_experience_check"),
    CheckConstraint("consultation_fee >= 0", name="doctors_fee_check"),
    CheckConstraint("rating >= 0 AND rating <= 5", name="doctors_rating_check"),
)
