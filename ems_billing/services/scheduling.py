"""Scheduling collaborator interface."""

from abc import ABC, abstractmethod
from datetime import date

from pydantic import BaseModel


class Appointment(BaseModel):
    """The slice of a booked appointment that billing needs."""

    appointment_id: str
    patient_id: str
    appointment_date: date
    recall_flag: int = 0


class SchedulingProvider(ABC):
    """Appointment lookups and recall flagging."""

    @abstractmethod
    def get_appointments_by_month(self, day: date) -> list[Appointment]:
        """Return every appointment in the month containing *day*."""
        ...

    @abstractmethod
    def get_date_by_appointment_id(self, appointment_id: str) -> date:
        ...

    @abstractmethod
    def update_appointment_info(self, appointment_id: str, recall_flag: int) -> bool:
        """Set the recall flag on an appointment."""
        ...
