from gymflow import db
from datetime import datetime

class Trainer(db.Model):
    __tablename__ = 'trainers'

    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(50), nullable=False)
    last_name = db.Column(db.String(50), nullable=False)
    email = db.Column(db.String(120), nullable=True)
    phone = db.Column(db.String(20), nullable=False)
    bio = db.Column(db.Text, nullable=True)
    categories = db.Column(db.JSON, nullable=False, default=list)
    start_date = db.Column(db.Date, nullable=False)
    # Working-hours window as HH:MM strings
    working_start = db.Column(db.String(5), nullable=True)
    working_end = db.Column(db.String(5), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    appointments = db.relationship('Appointment', backref='trainer', lazy='dynamic',
                                   cascade='all, delete-orphan')

    def __init__(self, first_name, last_name, phone, start_date, email=None, bio=None,
                 categories=None, working_start=None, working_end=None):
        self.first_name = first_name
        self.last_name = last_name
        self.phone = phone
        self.start_date = start_date
        self.email = email
        self.bio = bio
        self.categories = list(categories or [])
        self.working_start = working_start
        self.working_end = working_end

    def get_full_name(self):
        return f"{self.first_name} {self.last_name}"

    def working_hours(self):
        """Returns the trainer's WorkingHours, or None when not set"""
        if not self.working_start or not self.working_end:
            return None
        from gymflow.scheduling.hours import WorkingHours
        return WorkingHours.parse(self.working_start, self.working_end)

    def to_dict(self):
        return {
            'id': self.id,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'email': self.email,
            'phone': self.phone,
            'bio': self.bio,
            'categories': list(self.categories or []),
            'start_date': self.start_date.isoformat() if self.start_date else None,
            'working_hours': {'start': self.working_start, 'end': self.working_end},
        }

    def __repr__(self):
        return f'<Trainer {self.get_full_name()}>'
