from datetime import date

import pytest

from gymflow import db
from gymflow.models.appointment import Appointment
from gymflow.models.audit import AuditLog
from gymflow.models.member import MEMBERSHIP_VIP

MONDAY = "2024-06-10"
SUNDAY = "2024-06-09"


@pytest.fixture
def setup(make_service, make_trainer, make_member):
    service = make_service()
    vip_service = make_service(name="Private Reformer", is_vip_only=True)
    trainer = make_trainer()
    member = make_member([service])
    vip_member = make_member([service, vip_service], first_name="Elif", membership_type=MEMBERSHIP_VIP)
    return dict(service=service, vip_service=vip_service, trainer=trainer, member=member,
                vip_member=vip_member)


def payload(setup, member="member", service="service", **overrides):
    data = {
        "member_id": setup[member].id,
        "trainer_id": setup["trainer"].id,
        "service_id": setup[service].id,
        "date": MONDAY,
        "time": "11:30",
    }
    data.update(overrides)
    return data


class TestCreate:
    def test_books_one_appointment(self, client, setup):
        response = client.post("/appointments/", json=payload(setup, notes="First class"))
        assert response.status_code == 201
        body = response.get_json()
        assert len(body) == 1
        assert body[0]["status"] == "scheduled"
        assert body[0]["time"] == "11:30"
        assert body[0]["notes"] == "First class"
        assert AuditLog.query.filter_by(entity_type="appointment", action="create").count() == 1

    def test_time_with_seconds_is_stored_normalized(self, client, setup):
        response = client.post("/appointments/", json=payload(setup, time="11:30:00"))
        assert response.status_code == 201
        assert response.get_json()[0]["time"] == "11:30"

    def test_fourth_standard_booking_conflicts(self, client, setup):
        for _ in range(3):
            assert client.post("/appointments/", json=payload(setup)).status_code == 201

        response = client.post("/appointments/", json=payload(setup))
        assert response.status_code == 409
        assert response.get_json()["errors"] == {"time": ["This time slot is full for the selected trainer"]}
        assert Appointment.query.count() == 3

    def test_service_limit_overrides_fallback(self, client, setup, make_service, make_member):
        small = make_service(name="Duo", max_participants=1)
        member = make_member([small])
        data = payload(setup, service_id=small.id, member_id=member.id)
        assert client.post("/appointments/", json=data).status_code == 201
        assert client.post("/appointments/", json=data).status_code == 409

    def test_vip_booking_blocks_slot(self, client, setup):
        vip = payload(setup, member="vip_member", service="vip_service")
        assert client.post("/appointments/", json=vip).status_code == 201
        assert client.post("/appointments/", json=payload(setup)).status_code == 409

    def test_vip_booking_needs_empty_slot(self, client, setup):
        assert client.post("/appointments/", json=payload(setup)).status_code == 201
        vip = payload(setup, member="vip_member", service="vip_service")
        assert client.post("/appointments/", json=vip).status_code == 409

    def test_outside_business_hours(self, client, setup):
        response = client.post("/appointments/", json=payload(setup, time="09:00"))
        assert response.status_code == 400
        assert response.get_json()["errors"]["time"] == ["Appointments must be between 10:00 and 20:00"]

    def test_closed_weekday(self, client, setup):
        response = client.post("/appointments/", json=payload(setup, date=SUNDAY))
        assert response.status_code == 400
        assert response.get_json()["errors"]["date"] == ["No appointments can be booked on Sunday"]

    def test_outside_trainer_hours(self, client, setup, make_trainer):
        trainer = make_trainer(first_name="Mert", working_start="14:00", working_end="18:00")
        response = client.post("/appointments/", json=payload(setup, trainer_id=trainer.id))
        assert response.status_code == 400
        assert "time" in response.get_json()["errors"]

    def test_member_must_hold_the_package(self, client, setup):
        response = client.post("/appointments/", json=payload(setup, service="vip_service"))
        assert response.status_code == 400
        assert response.get_json()["errors"]["service_id"] == ["Member is not subscribed to this package"]

    def test_unknown_references(self, client, setup):
        response = client.post("/appointments/", json=payload(setup, member_id=999, trainer_id=999))
        assert response.status_code == 400
        assert set(response.get_json()["errors"]) == {"member_id", "trainer_id"}

    def test_form_errors(self, client, setup):
        data = payload(setup, time="7pm")
        del data["date"]
        response = client.post("/appointments/", json=data)
        assert response.status_code == 400
        body = response.get_json()
        assert set(body["errors"]) == {"date", "time"}
        assert body["session"] == 0


class TestMultiSession:
    def test_books_every_session(self, client, setup):
        data = payload(setup)
        data["sessions"] = [
            {"date": "2024-06-10", "time": "10:00"},
            {"date": "2024-06-12", "time": "11:30"},
            {"date": "2024-06-14", "time": "13:00"},
        ]
        response = client.post("/appointments/", json=data)
        assert response.status_code == 201
        assert [(apt["date"], apt["time"]) for apt in response.get_json()] == [
            ("2024-06-10", "10:00"), ("2024-06-12", "11:30"), ("2024-06-14", "13:00"),
        ]

    def test_sessions_count_against_each_other(self, client, setup):
        data = payload(setup)
        data["sessions"] = [{"date": MONDAY, "time": "11:30"}] * 4
        response = client.post("/appointments/", json=data)
        assert response.status_code == 409
        assert response.get_json()["session"] == 3
        assert Appointment.query.count() == 0

    def test_one_bad_session_writes_nothing(self, client, setup):
        data = payload(setup)
        data["sessions"] = [{"date": MONDAY, "time": "10:00"}, {"date": SUNDAY, "time": "10:00"}]
        response = client.post("/appointments/", json=data)
        assert response.status_code == 400
        assert response.get_json()["session"] == 1
        assert Appointment.query.count() == 0

    def test_array_body_is_rejected(self, client, setup):
        response = client.post("/appointments/", json=[{"member_id": setup["member"].id}])
        assert response.status_code == 400
        assert "sessions" in response.get_json()["errors"]

    def test_sessions_must_be_objects(self, client, setup):
        data = payload(setup)
        data["sessions"] = ["10:00"]
        response = client.post("/appointments/", json=data)
        assert response.status_code == 400
        assert "sessions" in response.get_json()["errors"]
        assert Appointment.query.count() == 0


class TestUpdateAndStatus:
    def test_move_into_full_slot(self, client, setup, make_appointment):
        for _ in range(3):
            make_appointment(setup["member"], setup["trainer"], setup["service"], date(2024, 6, 10), "13:00")
        appointment = make_appointment(setup["member"], setup["trainer"], setup["service"],
                                       date(2024, 6, 10), "11:30")

        response = client.patch(f"/appointments/{appointment.id}", json={"time": "13:00"})
        assert response.status_code == 409

        response = client.patch(f"/appointments/{appointment.id}", json={"time": "14:00"})
        assert response.status_code == 200
        assert response.get_json()["time"] == "14:00"

    def test_edit_in_full_slot_excludes_itself(self, client, setup, make_appointment):
        appointments = [
            make_appointment(setup["member"], setup["trainer"], setup["service"], date(2024, 6, 10), "13:00")
            for _ in range(3)
        ]
        response = client.patch(f"/appointments/{appointments[0].id}",
                                json={"time": "13:00:00", "notes": "Bring a mat"})
        assert response.status_code == 200
        assert response.get_json()["notes"] == "Bring a mat"

    def test_lifecycle_actions(self, client, setup, make_appointment):
        appointment = make_appointment(setup["member"], setup["trainer"], setup["service"])

        response = client.post(f"/appointments/{appointment.id}/start")
        assert response.get_json()["status"] == "in-progress"
        response = client.post(f"/appointments/{appointment.id}/complete")
        assert response.get_json()["status"] == "completed"

        response = client.post(f"/appointments/{appointment.id}/cancel")
        assert response.status_code == 409
        assert db.session.get(Appointment, appointment.id).status == "completed"
        assert AuditLog.query.filter_by(entity_type="appointment_status").count() == 2

    def test_cancelled_booking_frees_the_place(self, client, setup, make_appointment):
        booked = [make_appointment(setup["member"], setup["trainer"], setup["service"], time="11:30")
                  for _ in range(3)]
        assert client.post("/appointments/", json=payload(setup)).status_code == 409

        client.post(f"/appointments/{booked[0].id}/cancel")
        assert client.post("/appointments/", json=payload(setup)).status_code == 201

    def test_finished_appointment_cannot_be_moved(self, client, setup, make_appointment):
        appointment = make_appointment(setup["member"], setup["trainer"], setup["service"],
                                       time="10:00", status="completed")

        response = client.patch(f"/appointments/{appointment.id}", json={"time": "14:00"})
        assert response.status_code == 409
        assert "status" in response.get_json()["errors"]
        assert db.session.get(Appointment, appointment.id).time == "10:00"

        response = client.patch(f"/appointments/{appointment.id}", json={"notes": "Great session"})
        assert response.status_code == 200
        assert response.get_json()["notes"] == "Great session"

    def test_delete(self, client, setup, make_appointment):
        appointment = make_appointment(setup["member"], setup["trainer"], setup["service"])
        assert client.delete(f"/appointments/{appointment.id}").status_code == 204
        assert client.get(f"/appointments/{appointment.id}").status_code == 404


class TestQueries:
    def test_availability(self, client, setup, make_appointment):
        make_appointment(setup["vip_member"], setup["trainer"], setup["vip_service"], time="10:00")
        make_appointment(setup["member"], setup["trainer"], setup["service"], time="11:30")

        response = client.get(f"/appointments/availability?trainer_id={setup['trainer'].id}&date={MONDAY}")
        assert response.status_code == 200
        body = response.get_json()
        assert body["closed"] is False
        assert body["capacity"] == 3
        times = [slot["time"] for slot in body["slots"]]
        assert "10:00" not in times
        assert body["slots"][0] == {"time": "11:30", "remaining": 2}

    def test_availability_time_range(self, client, setup):
        response = client.get(f"/appointments/availability?trainer_id={setup['trainer'].id}"
                              f"&date={MONDAY}&start=13:00&end=15:30")
        assert [slot["time"] for slot in response.get_json()["slots"]] == ["13:00", "14:00", "15:30"]

    def test_availability_follows_trainer_hours(self, client, setup, make_trainer):
        trainer = make_trainer(first_name="Mert", working_start="14:00", working_end="16:00")
        response = client.get(f"/appointments/availability?trainer_id={trainer.id}&date={MONDAY}")
        times = [slot["time"] for slot in response.get_json()["slots"]]
        assert times == ["14:00", "15:30"]

        for time in times:
            data = payload(setup, trainer_id=trainer.id, time=time)
            assert client.post("/appointments/", json=data).status_code == 201

    def test_availability_closed_day(self, client, setup):
        response = client.get(f"/appointments/availability?trainer_id={setup['trainer'].id}&date={SUNDAY}")
        assert response.get_json()["closed"] is True
        assert response.get_json()["slots"] == []

    def test_availability_requires_trainer(self, client, setup):
        assert client.get("/appointments/availability").status_code == 400
        assert client.get("/appointments/availability?trainer_id=999").status_code == 404
        response = client.get(f"/appointments/availability?trainer_id={setup['trainer'].id}&profile=summer")
        assert response.status_code == 400

    def test_calendar_uses_calendar_capacity(self, client, setup, make_appointment):
        make_appointment(setup["member"], setup["trainer"], setup["service"], time="10:00")
        response = client.get(f"/appointments/calendar?trainer_id={setup['trainer'].id}&start={SUNDAY}&days=2")
        assert response.status_code == 200
        sunday, monday = response.get_json()["days"]
        assert sunday == {"date": SUNDAY, "closed": True, "slots": []}
        assert monday["slots"][0] == {"time": "10:00", "remaining": 3, "blocked": False}
        assert monday["slots"][1]["remaining"] == 4

    def test_check_preview(self, client, setup):
        response = client.post("/appointments/check", json=payload(setup, time="09:00"))
        assert response.status_code == 200
        body = response.get_json()
        assert "time" in body["errors"]
        assert body["conflict"] is False
        assert body["remaining"] == 3
        assert Appointment.query.count() == 0

    def test_listing_filters_and_groups(self, client, setup, make_appointment):
        make_appointment(setup["member"], setup["trainer"], setup["service"], time="10:00")
        make_appointment(setup["vip_member"], setup["trainer"], setup["vip_service"], time="13:00",
                         status="cancelled")

        response = client.get("/appointments/?search=elif")
        assert [apt["time"] for apt in response.get_json()] == ["13:00"]

        response = client.get("/appointments/?group=1")
        assert set(response.get_json()) == {"scheduled", "cancelled"}

        response = client.get("/appointments/?status=scheduled")
        assert len(response.get_json()) == 1

        assert client.get("/appointments/?period=yearly").status_code == 400
