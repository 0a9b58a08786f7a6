from datetime import timedelta

from gymflow.scheduling.availability import normalize_time, _as_date, index_by_id
from gymflow.scheduling.status import AppointmentStatus, STATUS_ORDER

PERIODS = ('all', 'today', 'tomorrow', 'weekly', 'monthly', 'custom')


def period_bounds(period, today, date_from=None, date_to=None):
    """Inclusive (first, last) dates for a listing period; None means unbounded"""
    if period == 'today':
        return today, today
    if period == 'tomorrow':
        tomorrow = today + timedelta(days=1)
        return tomorrow, tomorrow
    if period == 'weekly':
        monday = today - timedelta(days=today.weekday())
        return monday, monday + timedelta(days=6)
    if period == 'monthly':
        first = today.replace(day=1)
        next_month = (first + timedelta(days=32)).replace(day=1)
        return first, next_month - timedelta(days=1)
    if period == 'custom':
        return date_from, date_to
    if period == 'all':
        return None, None
    raise ValueError(f'Unknown period: {period}')


def _matches_search(appointment, query, members, trainers, services):
    member = members.get(appointment.member_id)
    trainer = trainers.get(appointment.trainer_id)
    service = services.get(appointment.service_id)
    haystack = [
        member.get_full_name() if member else '',
        trainer.get_full_name() if trainer else '',
        service.name if service else '',
    ]
    return any(query in text.lower() for text in haystack)


def filter_appointments(appointments, today, period='all', trainer_id=None, search=None,
                        members=None, trainers=None, services=None,
                        date_from=None, date_to=None):
    first, last = period_bounds(period, today, date_from, date_to)
    query = (search or '').strip().lower()
    members = index_by_id(members)
    trainers = index_by_id(trainers)
    services = index_by_id(services)

    result = []
    for apt in appointments:
        day = _as_date(apt.date)
        if trainer_id is not None and apt.trainer_id != trainer_id:
            continue
        if first is not None and day < first:
            continue
        if last is not None and day > last:
            continue
        if query and not _matches_search(apt, query, members, trainers, services):
            continue
        result.append(apt)
    return result


def sort_appointments(appointments):
    """Status order first; completed newest first, everything else soonest first"""
    def moment(apt):
        return (_as_date(apt.date), normalize_time(apt.time))

    ordered = []
    for status in sorted(STATUS_ORDER, key=STATUS_ORDER.get):
        group = [apt for apt in appointments if AppointmentStatus.coerce(apt.status) is status]
        group.sort(key=moment, reverse=status is AppointmentStatus.COMPLETED)
        ordered.extend(group)
    return ordered


def group_by_status(appointments):
    groups = {}
    for apt in appointments:
        groups.setdefault(AppointmentStatus.coerce(apt.status).value, []).append(apt)
    return groups
