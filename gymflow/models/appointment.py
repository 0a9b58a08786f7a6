from gymflow import db
from gymflow.scheduling.status import AppointmentStatus
from datetime import datetime

# Appointment status constants
STATUS_SCHEDULED = AppointmentStatus.SCHEDULED.value
STATUS_IN_PROGRESS = AppointmentStatus.IN_PROGRESS.value
STATUS_COMPLETED = AppointmentStatus.COMPLETED.value
STATUS_CANCELLED = AppointmentStatus.CANCELLED.value

class Appointment(db.Model):
    __tablename__ = 'appointments'

    id = db.Column(db.Integer, primary_key=True)
    member_id = db.Column(db.Integer, db.ForeignKey('members.id'), nullable=False)
    trainer_id = db.Column(db.Integer, db.ForeignKey('trainers.id'), nullable=False)
    service_id = db.Column(db.Integer, db.ForeignKey('services.id'), nullable=False)
    date = db.Column(db.Date, nullable=False, index=True)
    time = db.Column(db.String(8), nullable=False)  # HH:MM or HH:MM:SS
    status = db.Column(db.String(20), default=STATUS_SCHEDULED, nullable=False)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __init__(self, member_id, trainer_id, service_id, date, time, notes=None, status=STATUS_SCHEDULED):
        self.member_id = member_id
        self.trainer_id = trainer_id
        self.service_id = service_id
        self.date = date
        self.time = time
        self.notes = notes
        self.status = str(status)

    def start(self):
        self._move_to(AppointmentStatus.IN_PROGRESS)

    def complete(self):
        self._move_to(AppointmentStatus.COMPLETED)

    def cancel(self):
        self._move_to(AppointmentStatus.CANCELLED)

    def _move_to(self, target):
        from gymflow.scheduling.lifecycle import next_status
        self.status = next_status(self.status, target).value

    def is_active(self):
        return self.status == STATUS_SCHEDULED

    def to_dict(self):
        return {
            'id': self.id,
            'member_id': self.member_id,
            'trainer_id': self.trainer_id,
            'service_id': self.service_id,
            'date': self.date.isoformat(),
            'time': self.time,
            'status': self.status,
            'notes': self.notes,
        }

    def __repr__(self):
        return f'<Appointment {self.id}: {self.date} {self.time} ({self.status})>'
