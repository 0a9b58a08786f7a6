from datetime import date
from decimal import Decimal

import pytest

from gymflow import create_app, db
from gymflow.config import TestConfig
from gymflow.models.appointment import Appointment
from gymflow.models.member import Member, MEMBERSHIP_BASIC
from gymflow.models.service import Service
from gymflow.models.trainer import Trainer

# 2024-06-10 is a Monday; the studio is closed on Sundays
MONDAY = date(2024, 6, 10)
SUNDAY = date(2024, 6, 9)


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


@pytest.fixture
def make_service(app):
    def _make(name="Pilates", price="1000.00", duration_minutes=60, session_count=8,
              max_participants=None, is_vip_only=False, is_active=True):
        service = Service(
            name=name,
            price=Decimal(price),
            duration_minutes=duration_minutes,
            session_count=session_count,
            max_participants=max_participants,
            is_vip_only=is_vip_only,
            description=f"{name} package",
            is_active=is_active,
        )
        db.session.add(service)
        db.session.commit()
        return service
    return _make


@pytest.fixture
def make_trainer(app):
    def _make(first_name="Ayse", last_name="Yilmaz", working_start="10:00", working_end="20:00"):
        trainer = Trainer(
            first_name=first_name,
            last_name=last_name,
            phone="555 123 45 67",
            start_date=date(2023, 1, 1),
            bio="Reformer and mat instructor",
            working_start=working_start,
            working_end=working_end,
        )
        db.session.add(trainer)
        db.session.commit()
        return trainer
    return _make


@pytest.fixture
def make_member(app):
    def _make(services=(), first_name="Can", last_name="Demir", membership_type=MEMBERSHIP_BASIC,
              active=True, start_date=date(2024, 1, 1)):
        member = Member(
            first_name=first_name,
            last_name=last_name,
            phone="555 987 65 43",
            start_date=start_date,
            membership_type=membership_type,
            subscribed_services=[service.id for service in services],
            active=active,
        )
        db.session.add(member)
        db.session.commit()
        return member
    return _make


@pytest.fixture
def make_appointment(app):
    def _make(member, trainer, service, day=MONDAY, time="10:00", status="scheduled"):
        appointment = Appointment(
            member_id=member.id,
            trainer_id=trainer.id,
            service_id=service.id,
            date=day,
            time=time,
            status=status,
        )
        db.session.add(appointment)
        db.session.commit()
        return appointment
    return _make
