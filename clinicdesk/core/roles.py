"""Roles, capabilities and the per-request caller identity.

Every service entry point that reads or mutates role-owned records takes an
``Identity`` and asks it for the capability it needs, so access rules live in
one table instead of being repeated in each endpoint.
"""

from dataclasses import dataclass
from enum import Enum
from uuid import UUID

from clinicdesk.core.exceptions import ForbiddenException


class Role(str, Enum):
    """Account role."""

    PATIENT = "patient"
    DOCTOR = "doctor"
    ADMIN = "admin"


class Capability(str, Enum):
    """Actions a role may be granted."""

    BROWSE_DOCTORS = "browse_doctors"
    BOOK_APPOINTMENT = "book_appointment"
    VIEW_OWN_APPOINTMENTS = "view_own_appointments"
    CANCEL_OWN_APPOINTMENT = "cancel_own_appointment"
    VIEW_OWN_VISIT_SUMMARIES = "view_own_visit_summaries"
    VIEW_DOCTOR_SCHEDULE = "view_doctor_schedule"
    CANCEL_DOCTOR_APPOINTMENT = "cancel_doctor_appointment"
    MARK_NO_SHOW = "mark_no_show"
    RECORD_VISIT = "record_visit"
    VIEW_PATIENT_RECORD = "view_patient_record"
    VIEW_ALL_APPOINTMENTS = "view_all_appointments"
    CANCEL_ANY_APPOINTMENT = "cancel_any_appointment"
    MANAGE_DOCTORS = "manage_doctors"
    VIEW_ALL_PATIENTS = "view_all_patients"
    MANAGE_USERS = "manage_users"
    VIEW_DASHBOARD = "view_dashboard"


ROLE_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.PATIENT: frozenset(
        {
            Capability.BROWSE_DOCTORS,
            Capability.BOOK_APPOINTMENT,
            Capability.VIEW_OWN_APPOINTMENTS,
            Capability.CANCEL_OWN_APPOINTMENT,
            Capability.VIEW_OWN_VISIT_SUMMARIES,
        }
    ),
    Role.DOCTOR: frozenset(
        {
            Capability.VIEW_DOCTOR_SCHEDULE,
            Capability.CANCEL_DOCTOR_APPOINTMENT,
            Capability.MARK_NO_SHOW,
            Capability.RECORD_VISIT,
            Capability.VIEW_PATIENT_RECORD,
        }
    ),
    Role.ADMIN: frozenset(
        {
            Capability.VIEW_ALL_APPOINTMENTS,
            Capability.CANCEL_ANY_APPOINTMENT,
            Capability.MANAGE_DOCTORS,
            Capability.VIEW_ALL_PATIENTS,
            Capability.MANAGE_USERS,
            Capability.VIEW_DASHBOARD,
        }
    ),
}


@dataclass(frozen=True)
class Identity:
    """
    Verified caller.

    Attributes:
        user_id: Owning user account
        role: Account role
        profile_id: Patient or doctor profile id; None for admins
    """

    user_id: UUID
    role: Role
    profile_id: UUID | None = None

    @property
    def capabilities(self) -> frozenset[Capability]:
        """Capabilities granted to this identity's role."""
        return ROLE_CAPABILITIES[self.role]

    def can(self, capability: Capability) -> bool:
        """Check whether the role grants a capability."""
        return capability in self.capabilities

    def require(self, capability: Capability) -> None:
        """
        Ensure the role grants a capability.

        Raises:
            ForbiddenException: If the capability is not granted
        """
        if not self.can(capability):
            raise ForbiddenException(f"Role '{self.role.value}' cannot {capability.value}")

    def require_profile(self) -> UUID:
        """Return the patient/doctor profile id, failing for profile-less callers."""
        if self.profile_id is None:
            raise ForbiddenException("This action requires a patient or doctor profile")
        return self.profile_id
