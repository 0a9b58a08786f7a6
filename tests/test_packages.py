from types import SimpleNamespace

from gymflow.billing.packages import (
    PACKAGE_ACTIVE,
    PACKAGE_ALMOST_COMPLETED,
    PACKAGE_COMPLETED,
    member_package_status,
    package_report,
    package_usage,
    remaining_sessions,
    service_package_status,
    should_deactivate_member,
)

PILATES = SimpleNamespace(id=1, name="Pilates", session_count=8)
YOGA = SimpleNamespace(id=2, name="Yoga", session_count=4)
SERVICES = [PILATES, YOGA]


def member(services, active=True, id=10):
    return SimpleNamespace(id=id, active=active, subscribed_services=list(services))


def sessions(service_id, *statuses, member_id=10):
    return [SimpleNamespace(member_id=member_id, service_id=service_id, status=status)
            for status in statuses]


def test_usage_counts_cancelled_as_used():
    appointments = sessions(1, "completed", "completed", "cancelled", "scheduled", "in-progress")
    assert package_usage(1, 1, 10, SERVICES, appointments) == {
        "total": 8, "used": 3, "scheduled": 1, "remaining": 5,
    }


def test_usage_ignores_other_members():
    appointments = sessions(1, "completed", member_id=11)
    assert package_usage(1, 1, 10, SERVICES, appointments)["used"] == 0


def test_repeated_packages_multiply_sessions():
    assert remaining_sessions(2, 2, 10, SERVICES, sessions(2, "completed")) == 7


def test_status_active_with_many_sessions_left():
    assert service_package_status(1, 1, 10, SERVICES, sessions(1, "completed")) == PACKAGE_ACTIVE


def test_status_almost_completed():
    appointments = sessions(1, *(["completed"] * 5))
    assert service_package_status(1, 1, 10, SERVICES, appointments) == PACKAGE_ALMOST_COMPLETED


def test_status_completed_needs_nothing_scheduled():
    used_up = sessions(2, "completed", "completed", "cancelled", "completed")
    assert service_package_status(2, 1, 10, SERVICES, used_up) == PACKAGE_COMPLETED

    still_booked = used_up + sessions(2, "scheduled")
    assert service_package_status(2, 1, 10, SERVICES, still_booked) != PACKAGE_COMPLETED


def test_unknown_service_is_active():
    assert service_package_status(99, 1, 10, SERVICES, []) == PACKAGE_ACTIVE


def test_member_status_combines_packages():
    yoga_done = sessions(2, *(["completed"] * 4))
    pilates_done = sessions(1, *(["completed"] * 8))
    pilates_nearly = sessions(1, *(["completed"] * 6))

    assert member_package_status(member([1, 2]), SERVICES, yoga_done) == PACKAGE_ACTIVE
    assert member_package_status(member([1, 2]), SERVICES, yoga_done + pilates_nearly) == PACKAGE_ALMOST_COMPLETED
    assert member_package_status(member([1, 2]), SERVICES, yoga_done + pilates_done) == PACKAGE_COMPLETED
    assert member_package_status(member([]), SERVICES, []) == PACKAGE_ACTIVE


def test_should_deactivate_member():
    yoga_done = sessions(2, *(["completed"] * 4))
    assert should_deactivate_member(member([2]), SERVICES, yoga_done)
    assert not should_deactivate_member(member([2], active=False), SERVICES, yoga_done)
    assert not should_deactivate_member(member([]), SERVICES, [])
    assert not should_deactivate_member(member([1, 2]), SERVICES, yoga_done)


def test_package_report():
    report = package_report(member([2, 2, 1]), SERVICES, sessions(2, "completed"))
    yoga = next(item for item in report if item["service_id"] == 2)
    assert yoga["service_name"] == "Yoga"
    assert yoga["packages"] == 2
    assert yoga["total"] == 8
    assert yoga["remaining"] == 7
    assert yoga["status"] == PACKAGE_ACTIVE
