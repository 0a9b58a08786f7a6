from datetime import datetime, time, timedelta

from gymflow.scheduling.availability import normalize_time, _as_date, index_by_id
from gymflow.scheduling.status import AppointmentStatus

DEFAULT_DURATION_MINUTES = 60

# Target status -> statuses it may be reached from
ALLOWED_TRANSITIONS = {
    AppointmentStatus.IN_PROGRESS: {AppointmentStatus.SCHEDULED},
    AppointmentStatus.COMPLETED: {AppointmentStatus.SCHEDULED, AppointmentStatus.IN_PROGRESS},
    AppointmentStatus.CANCELLED: {AppointmentStatus.SCHEDULED, AppointmentStatus.IN_PROGRESS},
    AppointmentStatus.SCHEDULED: set(),
}


class InvalidTransition(Exception):
    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(f'Cannot move appointment from {current} to {target}')


def next_status(current, target):
    """Validate a status change and return the new status"""
    current = AppointmentStatus.coerce(current)
    target = AppointmentStatus.coerce(target)
    if current not in ALLOWED_TRANSITIONS[target]:
        raise InvalidTransition(current.value, target.value)
    return target


def appointment_window(appointment, service=None, default_duration=DEFAULT_DURATION_MINUTES):
    """(start, end) datetimes of an appointment; end uses the service duration"""
    hour, minute = (int(part) for part in normalize_time(appointment.time).split(':'))
    start = datetime.combine(_as_date(appointment.date), time(hour, minute))
    duration = service.duration_minutes if service is not None else default_duration
    return start, start + timedelta(minutes=duration)


def due_status_updates(appointments, services, now, default_duration=DEFAULT_DURATION_MINUTES):
    """Status changes the clock has made due, as a list of (appointment, new_status).

    A scheduled appointment that has started becomes in-progress; anything
    still open after its end becomes completed.
    """
    catalog = index_by_id(services)
    updates = []
    for appointment in appointments:
        status = AppointmentStatus.coerce(appointment.status)
        if status not in (AppointmentStatus.SCHEDULED, AppointmentStatus.IN_PROGRESS):
            continue
        start, end = appointment_window(appointment, catalog.get(appointment.service_id),
                                        default_duration)
        if now >= end:
            updates.append((appointment, AppointmentStatus.COMPLETED))
        elif now >= start and status is AppointmentStatus.SCHEDULED:
            updates.append((appointment, AppointmentStatus.IN_PROGRESS))
    return updates
