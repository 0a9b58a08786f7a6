"""
Session-count bookkeeping for member packages.

A member holds one or more packages (a service id may appear several times
in ``member.subscribed_services``). Each package grants ``session_count``
sessions. Completed and cancelled appointments both use up a session;
scheduled ones are still pending.
"""
from collections import Counter

from gymflow.scheduling.availability import index_by_id
from gymflow.scheduling.status import AppointmentStatus

PACKAGE_ACTIVE = 'active'
PACKAGE_ALMOST_COMPLETED = 'almost_completed'
PACKAGE_COMPLETED = 'completed'

# A package is nearly used up when no more than this many sessions are left
ALMOST_COMPLETED_THRESHOLD = 3


def package_usage(service_id, packages, member_id, services, appointments):
    """Returns dict(total, used, scheduled, remaining) for one service of one member"""
    service = index_by_id(services).get(service_id)
    total = packages * (service.session_count or 0) if service else 0
    used = scheduled = 0
    for apt in appointments:
        if apt.service_id != service_id or apt.member_id != member_id:
            continue
        status = AppointmentStatus.coerce(apt.status)
        if status in (AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED):
            used += 1
        elif status is AppointmentStatus.SCHEDULED:
            scheduled += 1
    return {
        'total': total,
        'used': used,
        'scheduled': scheduled,
        'remaining': total - used,
    }


def remaining_sessions(service_id, packages, member_id, services, appointments):
    """Sessions not yet completed or cancelled; scheduled ones still count as remaining"""
    return package_usage(service_id, packages, member_id, services, appointments)['remaining']


def service_package_status(service_id, packages, member_id, services, appointments):
    if index_by_id(services).get(service_id) is None:
        return PACKAGE_ACTIVE

    usage = package_usage(service_id, packages, member_id, services, appointments)
    if usage['used'] >= usage['total'] and usage['scheduled'] == 0:
        return PACKAGE_COMPLETED
    if (usage['remaining'] <= ALMOST_COMPLETED_THRESHOLD
            and usage['scheduled'] <= ALMOST_COMPLETED_THRESHOLD):
        return PACKAGE_ALMOST_COMPLETED
    return PACKAGE_ACTIVE


def package_counts(member):
    return Counter(member.subscribed_services or [])


def member_package_status(member, services, appointments):
    counts = package_counts(member)
    if not counts:
        return PACKAGE_ACTIVE

    statuses = [
        service_package_status(service_id, packages, member.id, services, appointments)
        for service_id, packages in counts.items()
    ]
    if all(status == PACKAGE_COMPLETED for status in statuses):
        return PACKAGE_COMPLETED
    if any(status == PACKAGE_ALMOST_COMPLETED for status in statuses):
        return PACKAGE_ALMOST_COMPLETED
    return PACKAGE_ACTIVE


def should_deactivate_member(member, services, appointments):
    """An active member whose every package is used up"""
    if not member.active or not member.subscribed_services:
        return False
    return member_package_status(member, services, appointments) == PACKAGE_COMPLETED


def package_report(member, services, appointments):
    """Per-service usage and status for one member, for display"""
    catalog = index_by_id(services)
    report = []
    for service_id, packages in package_counts(member).items():
        service = catalog.get(service_id)
        usage = package_usage(service_id, packages, member.id, catalog, appointments)
        usage.update({
            'service_id': service_id,
            'service_name': service.name if service else None,
            'packages': packages,
            'status': service_package_status(service_id, packages, member.id, catalog,
                                             appointments),
        })
        report.append(usage)
    return report
