from clinic_booking.models.patient import Patient, Residency
from clinic_booking.models.service import Service
from clinic_booking.models.slot import Slot

__all__ = ["Patient", "Residency", "Service", "Slot"]
