"""Canonical booking slots and working hours as configured per deployment."""
from gymflow.scheduling.availability import normalize_time

PROFILES = ('normal', 'holiday')

# Used when nothing has been stored yet
DEFAULT_TIME_SLOTS = [
    "10:00",
    "11:30",
    "13:00",
    "14:00",
    "15:30",
    "17:00",
    "18:00",
    "19:00",
]

DEFAULT_WORKING_HOURS = {
    "start": "10:00",
    "end": "20:00",
}


def default_profile():
    return {
        'slots': list(DEFAULT_TIME_SLOTS),
        'working_hours': dict(DEFAULT_WORKING_HOURS),
    }


def is_time_slot_settings(value):
    if not isinstance(value, dict):
        return False
    slots = value.get('slots')
    hours = value.get('working_hours')
    return (
        isinstance(slots, list)
        and all(isinstance(slot, str) for slot in slots)
        and isinstance(hours, dict)
        and isinstance(hours.get('start'), str)
        and isinstance(hours.get('end'), str)
    )


def clean_profile(value):
    """Normalize a profile before it is stored: HH:MM slots, unique and sorted.

    Raises ValueError when the shape is wrong or a time is malformed.
    """
    if not is_time_slot_settings(value):
        raise ValueError('Invalid settings format')
    slots = sorted({normalize_time(slot) for slot in value['slots']})
    start = normalize_time(value['working_hours']['start'])
    end = normalize_time(value['working_hours']['end'])
    if end <= start:
        raise ValueError('Working hours must end after they start')
    return {'slots': slots, 'working_hours': {'start': start, 'end': end}}
