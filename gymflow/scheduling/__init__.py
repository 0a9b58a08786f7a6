# Booking rules kept out of the views so they can be called and tested directly
from .status import AppointmentStatus
from .availability import (
    normalize_time,
    slot_capacity,
    slot_occupancy,
    has_conflict,
    remaining_standard_slots,
    available_slots,
    slot_board,
)
from .hours import WorkingHours, check_booking_window
from .lifecycle import InvalidTransition, next_status, due_status_updates
