from gymflow import db
from datetime import datetime

# Membership types
MEMBERSHIP_BASIC = 'basic'
MEMBERSHIP_VIP = 'vip'

class Member(db.Model):
    __tablename__ = 'members'

    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(50), nullable=False)
    last_name = db.Column(db.String(50), nullable=False)
    email = db.Column(db.String(120), nullable=True)
    phone = db.Column(db.String(20), nullable=False)
    membership_type = db.Column(db.String(20), default=MEMBERSHIP_BASIC, nullable=False)
    # Service ids; a repeated id means several packages of that service
    subscribed_services = db.Column(db.JSON, nullable=False, default=list)
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=True)
    active = db.Column(db.Boolean, default=True, nullable=False)
    notes = db.Column(db.Text, nullable=True)
    avatar_url = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    appointments = db.relationship('Appointment', backref='member', lazy='dynamic',
                                   cascade='all, delete-orphan')
    payments = db.relationship('MemberPayment', backref='member', lazy='dynamic',
                               cascade='all, delete-orphan')

    def __init__(self, first_name, last_name, phone, start_date, membership_type=MEMBERSHIP_BASIC,
                 subscribed_services=None, email=None, end_date=None, notes=None, avatar_url=None,
                 active=True):
        self.first_name = first_name
        self.last_name = last_name
        self.phone = phone
        self.start_date = start_date
        self.membership_type = membership_type
        self.subscribed_services = list(subscribed_services or [])
        self.email = email
        self.end_date = end_date
        self.notes = notes
        self.avatar_url = avatar_url
        self.active = active

    def is_vip(self):
        return self.membership_type == MEMBERSHIP_VIP

    def is_subscribed_to(self, service_id):
        return service_id in (self.subscribed_services or [])

    def get_full_name(self):
        return f"{self.first_name} {self.last_name}"

    def to_dict(self):
        return {
            'id': self.id,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'email': self.email,
            'phone': self.phone,
            'membership_type': self.membership_type,
            'subscribed_services': list(self.subscribed_services or []),
            'start_date': self.start_date.isoformat() if self.start_date else None,
            'end_date': self.end_date.isoformat() if self.end_date else None,
            'active': self.active,
            'notes': self.notes,
            'avatar_url': self.avatar_url,
        }

    def __repr__(self):
        return f'<Member {self.get_full_name()}>'
