from datetime import datetime
from zoneinfo import ZoneInfo

import click
from flask import current_app

from gymflow import db
from gymflow.models.appointment import Appointment, STATUS_SCHEDULED, STATUS_IN_PROGRESS
from gymflow.models.member import Member
from gymflow.models.service import Service
from gymflow.models.setting import Setting, TIME_SLOTS_KEY
from gymflow.billing.packages import should_deactivate_member
from gymflow.scheduling.lifecycle import due_status_updates
from gymflow.scheduling.slots import PROFILES, default_profile
from gymflow.utils.audit import log_audit


def local_now():
    """Naive wall-clock time in the gym's timezone; appointment times are stored naive"""
    return datetime.now(ZoneInfo(current_app.config['TIMEZONE'])).replace(tzinfo=None)


def register_cli(app):
    @app.cli.command("advance-appointments")
    @click.option("--now", "now_value", default=None,
                  type=click.DateTime(formats=["%Y-%m-%dT%H:%M", "%Y-%m-%d %H:%M"]),
                  help="Treat this datetime (YYYY-MM-DDTHH:MM) as the current time.")
    def advance_appointments(now_value):
        """Move started classes to in-progress and finished ones to completed."""
        now = now_value or local_now()

        open_appointments = Appointment.query.filter(
            Appointment.status.in_([STATUS_SCHEDULED, STATUS_IN_PROGRESS]),
            Appointment.date <= now.date()
        ).all()
        updates = due_status_updates(open_appointments, Service.query.all(), now)

        for appointment, status in updates:
            appointment.status = status.value
        db.session.commit()

        for appointment, status in updates:
            log_audit('status_change', 'appointment', entity_id=appointment.id,
                      details={'status': status.value, 'source': 'advance-appointments'})

        current_app.logger.info("Advanced %d appointment(s) at %s", len(updates), now.isoformat())
        click.echo(f"{len(updates)} appointment(s) updated")

    @app.cli.command("deactivate-finished-members")
    def deactivate_finished_members():
        """Deactivate members whose every package has been used up."""
        services = Service.query.all()
        deactivated = []
        for member in Member.query.filter_by(active=True).all():
            if should_deactivate_member(member, services, member.appointments.all()):
                member.active = False
                deactivated.append(member)
        db.session.commit()

        for member in deactivated:
            log_audit('deactivate', 'member', entity_id=member.id,
                      details={'name': member.get_full_name(), 'reason': 'packages completed'})

        current_app.logger.info("Deactivated %d member(s) with finished packages", len(deactivated))
        click.echo(f"{len(deactivated)} member(s) deactivated")

    @app.cli.command("seed-time-slots")
    @click.option("--force", is_flag=True, help="Overwrite profiles that are already stored.")
    def seed_time_slots(force):
        """Store the default slot list and working hours for every profile."""
        stored = dict(Setting.get_value(TIME_SLOTS_KEY) or {})
        seeded = []
        for profile in PROFILES:
            if profile in stored and not force:
                continue
            stored[profile] = default_profile()
            seeded.append(profile)

        if not seeded:
            click.echo("Time slot settings already present")
            return

        Setting.set_value(TIME_SLOTS_KEY, stored)
        db.session.commit()
        log_audit('seed', 'setting', details={'key': TIME_SLOTS_KEY, 'profiles': seeded})
        click.echo(f"Seeded time slot profiles: {', '.join(seeded)}")
