"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .booking_slots import BookingSlotService, DaySlots, WorkingHoursSourceProtocol
from .reservation_history import ChangeHistorySourceProtocol, HistoryEntry, ReservationHistoryService

__all__ = [
    "BookingSlotService",
    "ChangeHistorySourceProtocol",
    "DaySlots",
    "HistoryEntry",
    "ReservationHistoryService",
    "WorkingHoursSourceProtocol",
]
