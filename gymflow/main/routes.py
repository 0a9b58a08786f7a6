from flask import Blueprint, jsonify
from gymflow.models.member import Member
from gymflow.models.trainer import Trainer
from gymflow.models.service import Service
from gymflow.models.appointment import Appointment, STATUS_SCHEDULED, STATUS_CANCELLED
from datetime import date

main_bp = Blueprint('main', __name__)

@main_bp.route('/')
def index():
    """Dashboard counts for the front desk"""
    today = date.today()

    todays_appointments = Appointment.query.filter(
        Appointment.date == today,
        Appointment.status != STATUS_CANCELLED
    ).order_by(Appointment.time).all()

    upcoming = Appointment.query.filter(
        Appointment.date > today,
        Appointment.status == STATUS_SCHEDULED
    ).count()

    return jsonify({
        'date': today.isoformat(),
        'active_members': Member.query.filter_by(active=True).count(),
        'trainers': Trainer.query.count(),
        'active_services': Service.query.filter_by(is_active=True).count(),
        'todays_appointments': len(todays_appointments),
        'upcoming_appointments': upcoming,
        'today': [appointment.to_dict() for appointment in todays_appointments]
    })
