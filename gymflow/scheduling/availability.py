"""
Slot availability for trainer bookings.

Every function here is a pure computation over appointment and service
records already loaded by the caller. Appointments are read by attribute
(``trainer_id``, ``service_id``, ``date``, ``time``, ``status`` and ``id``),
so ORM rows and plain objects both work. The service catalog is a mapping of
service id to service, or any iterable of services carrying an ``id``.

Only ``scheduled`` appointments occupy a slot. A VIP-only service reserves
its slot entirely; otherwise a slot holds up to ``capacity`` standard
bookings. Nothing here writes, so two concurrent requests can both see a
free slot and both book it.
"""
import re
from datetime import date as date_type, time as time_type

from gymflow.scheduling.status import AppointmentStatus

_TIME_RE = re.compile(r'^([01]\d|2[0-3]):([0-5]\d)(?::([0-5]\d))?$')


def normalize_time(value):
    """Reduce 'HH:MM' / 'HH:MM:SS' / datetime.time to 'HH:MM'.

    Raises ValueError for anything else.
    """
    if isinstance(value, time_type):
        return value.strftime('%H:%M')
    match = _TIME_RE.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ValueError(f'Malformed time: {value!r}')
    return f'{match.group(1)}:{match.group(2)}'


def _as_date(value):
    if isinstance(value, date_type):
        return value
    return date_type.fromisoformat(value)


def index_by_id(records):
    """Accepts {id: record} or an iterable of records carrying an id"""
    if records is None:
        return {}
    if isinstance(records, dict):
        return records
    return {record.id: record for record in records}


def slot_capacity(service, fallback):
    """Per-service participant limit, or the caller's fallback when none is set"""
    limit = getattr(service, 'max_participants', None) if service is not None else None
    if limit and limit > 0:
        return limit
    return fallback


def slot_appointments(appointments, trainer_id, date, time, exclude_id=None):
    """Scheduled appointments of one trainer at one (date, time) slot"""
    day = _as_date(date)
    slot = normalize_time(time)
    return [
        apt for apt in appointments
        if apt.trainer_id == trainer_id
        and _as_date(apt.date) == day
        and normalize_time(apt.time) == slot
        and AppointmentStatus.coerce(apt.status) is AppointmentStatus.SCHEDULED
        and (exclude_id is None or apt.id != exclude_id)
    ]


def slot_occupancy(appointments, services, trainer_id, date, time, exclude_id=None):
    """Returns (vip_count, standard_count) for the slot.

    Appointments whose service is not in the catalog count towards neither.
    """
    catalog = index_by_id(services)
    vip = standard = 0
    for apt in slot_appointments(appointments, trainer_id, date, time, exclude_id):
        service = catalog.get(apt.service_id)
        if service is None:
            continue
        if service.is_vip_only:
            vip += 1
        else:
            standard += 1
    return vip, standard


def has_conflict(appointments, services, trainer_id, date, time, capacity,
                 service=None, exclude_id=None):
    """True when the slot cannot take another booking.

    ``service`` is the candidate being booked; a VIP-only candidate needs the
    slot to be empty.
    """
    vip, standard = slot_occupancy(appointments, services, trainer_id, date, time, exclude_id)
    if vip:
        return True
    if service is not None and service.is_vip_only and standard:
        return True
    return standard >= capacity


def remaining_standard_slots(appointments, services, trainer_id, date, time, capacity,
                             exclude_id=None):
    vip, standard = slot_occupancy(appointments, services, trainer_id, date, time, exclude_id)
    if vip:
        return 0
    return max(0, capacity - standard)


def _in_range(slot, time_range):
    if not time_range:
        return True
    start, end = time_range
    if start and slot < normalize_time(start):
        return False
    if end and slot > normalize_time(end):
        return False
    return True


def available_slots(appointments, services, trainer_id, date, slots, capacity,
                    time_range=None, service=None):
    """Bookable slot times for a trainer on a date, in canonical order.

    ``time_range`` is an inclusive (start, end) pair; either end may be None.
    """
    catalog = index_by_id(services)
    result = []
    for slot in slots:
        slot = normalize_time(slot)
        if not _in_range(slot, time_range):
            continue
        if has_conflict(appointments, catalog, trainer_id, date, slot, capacity, service=service):
            continue
        result.append(slot)
    return result


def slot_board(appointments, services, trainer_id, dates, slots, capacity):
    """Calendar view: remaining standard places for every slot of every date"""
    catalog = index_by_id(services)
    # Narrow once to this trainer's scheduled bookings, the board scans it per cell
    relevant = [
        apt for apt in appointments
        if apt.trainer_id == trainer_id
        and AppointmentStatus.coerce(apt.status) is AppointmentStatus.SCHEDULED
    ]
    board = {}
    for day in dates:
        day = _as_date(day)
        cells = []
        for slot in slots:
            slot = normalize_time(slot)
            remaining = remaining_standard_slots(relevant, catalog, trainer_id, day, slot, capacity)
            cells.append({
                'time': slot,
                'remaining': remaining,
                'blocked': has_conflict(relevant, catalog, trainer_id, day, slot, capacity),
            })
        board[day.isoformat()] = cells
    return board
