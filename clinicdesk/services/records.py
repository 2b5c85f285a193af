"""Populated reads over the record tables.

Appointments and visit summaries reference patients, doctors and
appointments by id. Listings return those references resolved to small
nested documents, built here by joining the tables and folding prefixed
columns back into sub-dicts.
"""

from typing import Any

from sqlalchemy import Select, Table, select
from sqlalchemy.engine import RowMapping

from clinicdesk.models.appointments import appointments
from clinicdesk.models.doctors import doctors
from clinicdesk.models.patients import patients
from clinicdesk.models.users import users
from clinicdesk.models.visit_summaries import visit_summaries

PATIENT_BRIEF_FIELDS = (
    "first_name",
    "last_name",
    "phone_number",
    "date_of_birth",
    "gender",
    "blood_group",
    "allergies",
)
DOCTOR_BRIEF_FIELDS = ("first_name", "last_name", "specialization", "consultation_fee")
APPOINTMENT_SLOT_FIELDS = ("appointment_date", "appointment_time")

_SEPARATOR = "__"


def _prefixed(table: Table, prefix: str, names: tuple[str, ...]) -> list:
    return [table.c[name].label(f"{prefix}{_SEPARATOR}{name}") for name in names]


def _unflatten(row: RowMapping, references: dict[str, str]) -> dict[str, Any]:
    """
    Fold ``prefix__column`` keys into nested dicts.

    Args:
        row: Result mapping
        references: Nested key -> foreign key column holding its id

    Returns:
        Record with one nested dict per reference
    """
    record: dict[str, Any] = {}
    nested: dict[str, dict[str, Any]] = {}
    for key, value in row.items():
        prefix, sep, name = key.partition(_SEPARATOR)
        if sep and prefix in references:
            nested.setdefault(prefix, {})[name] = value
        else:
            record[key] = value

    for prefix, id_column in references.items():
        document = nested.get(prefix)
        if document is not None:
            document["id"] = record[id_column]
        record[prefix] = document
    return record


# ============================================================================
# Appointments
# ============================================================================


def appointment_select() -> Select:
    """Appointments joined with their patient and doctor."""
    return (
        select(
            appointments,
            *_prefixed(patients, "patient", PATIENT_BRIEF_FIELDS),
            *_prefixed(doctors, "doctor", DOCTOR_BRIEF_FIELDS),
        )
        .join_from(appointments, patients, appointments.c.patient_id == patients.c.id)
        .join(doctors, appointments.c.doctor_id == doctors.c.id)
    )


def appointment_record(row: RowMapping) -> dict[str, Any]:
    """Shape a joined appointment row."""
    return _unflatten(row, {"patient": "patient_id", "doctor": "doctor_id"})


# ============================================================================
# Visit summaries
# ============================================================================


def visit_summary_select() -> Select:
    """Visit summaries joined with patient, doctor and appointment slot."""
    return (
        select(
            visit_summaries,
            *_prefixed(patients, "patient", PATIENT_BRIEF_FIELDS),
            *_prefixed(doctors, "doctor", DOCTOR_BRIEF_FIELDS),
            *_prefixed(appointments, "appointment", APPOINTMENT_SLOT_FIELDS),
        )
        .join_from(visit_summaries, patients, visit_summaries.c.patient_id == patients.c.id)
        .join(doctors, visit_summaries.c.doctor_id == doctors.c.id)
        .join(appointments, visit_summaries.c.appointment_id == appointments.c.id)
    )


def visit_summary_record(row: RowMapping) -> dict[str, Any]:
    """Shape a joined visit summary row."""
    return _unflatten(
        row,
        {"patient": "patient_id", "doctor": "doctor_id", "appointment": "appointment_id"},
    )


# ============================================================================
# Profiles with account details
# ============================================================================


def patient_select() -> Select:
    """Patients with their account email."""
    return select(patients, users.c.email).join(users, patients.c.user_id == users.c.id)


def doctor_select() -> Select:
    """Doctors with their account email and active flag."""
    return select(doctors, users.c.email, users.c.is_active).join(
        users, doctors.c.user_id == users.c.id
    )
