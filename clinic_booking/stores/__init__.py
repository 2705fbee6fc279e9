from clinic_booking.stores.patients import PatientStore
from clinic_booking.stores.services import ServiceStore
from clinic_booking.stores.slots import SlotStore

__all__ = ["PatientStore", "ServiceStore", "SlotStore"]
