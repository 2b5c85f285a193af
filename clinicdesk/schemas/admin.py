"""Admin-specific schemas."""

from pydantic import BaseModel, ConfigDict


class DashboardStatsResponse(BaseModel):
    """Clinic-wide counts shown on the admin overview."""

    total_patients: int
    total_doctors: int
    total_appointments: int
    today_appointments: int
    upcoming_appointments: int
    month_appointments: int

    model_config = ConfigDict(from_attributes=True)
