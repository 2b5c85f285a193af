"""Visit summary model definition using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import (
    JSON,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Table,
    Text,
    Uuid,
    func,
)

from clinicdesk.models.base import metadata

visit_summaries = Table(
    "visit_summaries",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    # One summary per appointment
    Column(
        "appointment_id",
        Uuid,
        ForeignKey("appointments.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    ),
    Column("patient_id", Uuid, ForeignKey("patients.id", ondelete="CASCADE"), nullable=False),
    Column("doctor_id", Uuid, ForeignKey("doctors.id", ondelete="CASCADE"), nullable=False),
    # Clinical record
    Column("symptoms", Text, nullable=False),
    Column("diagnosis", Text, nullable=False),
    Column("vital_signs", JSON),
    Column("prescription", JSON, nullable=False, default=list),
    Column("lab_tests", JSON, nullable=False, default=list),
    Column("notes", Text),
    Column("follow_up_date", Date),
    Column("attachments", JSON, nullable=False, default=list),
    # Metadata
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Index("ix_visit_summaries_patient_created", "patient_id", "created_at"),
    Index("ix_visit_summaries_doctor_created", "doctor_id", "created_at"),
)
