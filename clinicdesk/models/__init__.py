"""Database models."""

from clinicdesk.models.appointments import appointments
from clinicdesk.models.base import metadata
from clinicdesk.models.doctors import doctors
from clinicdesk.models.patients import patients
from clinicdesk.models.users import users
from clinicdesk.models.visit_summaries import visit_summaries

__all__ = [
    "appointments",
    "doctors",
    "metadata",
    "patients",
    "users",
    "visit_summaries",
]
