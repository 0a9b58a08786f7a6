from gymflow import db
from datetime import datetime, date

class MemberPayment(db.Model):
    """One package's share of a member payment; card amounts include commission"""
    __tablename__ = 'member_payments'

    id = db.Column(db.Integer, primary_key=True)
    member_id = db.Column(db.Integer, db.ForeignKey('members.id'), nullable=False, index=True)
    package_name = db.Column(db.String(100), nullable=False)
    credit_card_paid = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    cash_paid = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    commission = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    payment_date = db.Column(db.Date, nullable=False, default=date.today)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def __init__(self, member_id, package_name, credit_card_paid=0, cash_paid=0, commission=0,
                 payment_date=None):
        self.member_id = member_id
        self.package_name = package_name
        self.credit_card_paid = credit_card_paid
        self.cash_paid = cash_paid
        self.commission = commission
        self.payment_date = payment_date or date.today()

    def total(self):
        return (self.credit_card_paid or 0) + (self.cash_paid or 0)

    def to_dict(self):
        return {
            'id': self.id,
            'member_id': self.member_id,
            'package_name': self.package_name,
            'credit_card_paid': float(self.credit_card_paid),
            'cash_paid': float(self.cash_paid),
            'commission': float(self.commission),
            'total': float(self.total()),
            'payment_date': self.payment_date.isoformat(),
        }

    def __repr__(self):
        return f'<MemberPayment {self.id}: {self.package_name}>'
