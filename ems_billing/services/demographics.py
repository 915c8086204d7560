"""Demographics collaborator interface."""

from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel


class Patient(BaseModel):
    """Patient fields used on billing submissions and summaries."""

    patient_id: int
    hcn: str
    first_name: str
    last_name: str
    sex: str


class DemographicsProvider(ABC):
    """Patient lookups."""

    @abstractmethod
    def get_patient_by_id(self, patient_id: int) -> Patient:
        """Return the patient with *patient_id*. Raises LookupError if absent."""
        ...

    @abstractmethod
    def get_patient_by_hcn(self, hcn: str) -> Optional[Patient]:
        ...
