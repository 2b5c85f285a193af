"""Appointments table model using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    String,
    Table,
    Text,
    Uuid,
    func,
    text,
)

from clinicdesk.models.base import metadata

SCHEDULED_ONLY = text("status = 'scheduled'")

appointments = Table(
    "appointments",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    # Ownership / references
    Column(
        "patient_id",
        Uuid,
        ForeignKey("patients.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column(
        "doctor_id",
        Uuid,
        ForeignKey("doctors.id", ondelete="CASCADE"),
        nullable=False,
    ),
    # Slot
    Column("appointment_date", Date, nullable=False),
    Column("appointment_time", String(5), nullable=False),
    # Status management
    Column("status", String(20), nullable=False, server_default="scheduled"),
    Column("reason", Text, nullable=False),
    Column("notes", Text),
    Column("cancelled_by", String(20)),
    Column("cancellation_reason", Text),
    # Audit fields
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    # Constraints
    CheckConstraint(
        "status IN ('scheduled', 'completed', 'cancelled', 'no-show')",
        name="appointments_status_check",
    ),
    CheckConstraint(
        "cancelled_by IS NULL OR cancelled_by IN ('patient', 'doctor', 'admin')",
        name="appointments_cancelled_by_check",
    ),
    Index("ix_appointments_patient_date", "patient_id", "appointment_date"),
    Index("ix_appointments_doctor_date", "doctor_id", "appointment_date"),
    Index("ix_appointments_status", "status"),
    # A slot can hold any number of finished appointments but one live booking
    Index(
        "uq_appointments_scheduled_slot",
        "doctor_id",
        "appointment_date",
        "appointment_time",
        unique=True,
        postgresql_where=SCHEDULED_ONLY,
        sqlite_where=SCHEDULED_ONLY,
    ),
)
