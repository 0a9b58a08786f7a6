from gymflow import db
from datetime import datetime

class Service(db.Model):
    """A package members subscribe to: a number of sessions of a given length"""
    __tablename__ = 'services'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(50), nullable=True)
    price = db.Column(db.Numeric(10, 2), nullable=False)
    duration_minutes = db.Column(db.Integer, nullable=False)  # Duration in minutes
    session_count = db.Column(db.Integer, nullable=False, default=1)
    # None means the slot falls back to the configured standard capacity
    max_participants = db.Column(db.Integer, nullable=True)
    is_vip_only = db.Column(db.Boolean, default=False, nullable=False)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    appointments = db.relationship('Appointment', backref='service', lazy='dynamic')

    def __init__(self, name, price, duration_minutes, session_count=1, max_participants=None,
                 is_vip_only=False, description=None, category=None, is_active=True):
        self.name = name
        self.price = price
        self.duration_minutes = duration_minutes
        self.session_count = session_count
        self.max_participants = max_participants
        self.is_vip_only = is_vip_only
        self.description = description
        self.category = category
        self.is_active = is_active

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'category': self.category,
            'price': float(self.price),
            'duration_minutes': self.duration_minutes,
            'session_count': self.session_count,
            'max_participants': self.max_participants,
            'is_vip_only': self.is_vip_only,
            'is_active': self.is_active,
        }

    def __repr__(self):
        return f'<Service {self.name}>'
