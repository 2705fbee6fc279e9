"""Persisted record schemas for the three collections."""

import datetime as dt

from pydantic import BaseModel, Field

from clinic_booking.models.patient import Patient, Residency
from clinic_booking.models.service import Service
from clinic_booking.models.slot import Slot


class PatientRecord(BaseModel):
    """One stored patient."""
    id: str
    name: str
    residency: Residency

    @classmethod
    def from_entity(cls, patient: Patient) -> "PatientRecord":
        return cls(id=patient.id, name=patient.name, residency=patient.residency)

    def to_entity(self) -> Patient:
        return Patient(id=self.id, name=self.name, residency=self.residency)


class ServiceRecord(BaseModel):
    """One stored service."""
    id: str
    title: str
    max_slots_per_day: int = Field(ge=0)
    price_per_slot: float = Field(ge=0)

    @classmethod
    def from_entity(cls, service: Service) -> "ServiceRecord":
        return cls(
            id=service.id,
            title=service.title,
            max_slots_per_day=service.max_slots_per_day,
            price_per_slot=service.price_per_slot,
        )

    def to_entity(self) -> Service:
        return Service(
            id=self.id,
            title=self.title,
            max_slots_per_day=self.max_slots_per_day,
            price_per_slot=self.price_per_slot,
        )


class SlotRecord(BaseModel):
    """One stored booking. Only booked slots are ever persisted."""
    id: str
    date: dt.date
    time: dt.time
    service_id: str
    patient_id: str

    @classmethod
    def from_entity(cls, slot: Slot) -> "SlotRecord":
        return cls(
            id=slot.id,
            date=slot.date,
            time=slot.time,
            service_id=slot.service_id,
            patient_id=slot.patient_id,
        )

    def to_entity(self) -> Slot:
        return Slot(
            id=self.id,
            date=self.date,
            time=self.time,
            service_id=self.service_id,
            patient_id=self.patient_id,
            booked=True,
        )


class Snapshot(BaseModel):
    """The three collections as they are written to and read from disk."""
    patients: list[PatientRecord] = Field(default_factory=list)
    services: list[ServiceRecord] = Field(default_factory=list)
    slots: list[SlotRecord] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.patients or self.services or self.slots)
