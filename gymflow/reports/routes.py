from flask import Blueprint, jsonify, request
from gymflow import db
from gymflow.models.appointment import Appointment, STATUS_SCHEDULED, STATUS_IN_PROGRESS, STATUS_COMPLETED, STATUS_CANCELLED
from gymflow.models.payment import MemberPayment
from gymflow.models.member import Member
from gymflow.models.service import Service
from gymflow.models.trainer import Trainer
from gymflow.scheduling.hours import DAY_NAMES
from gymflow.utils.common import parse_date_arg
from sqlalchemy import func, extract
from datetime import date, timedelta

reports_bp = Blueprint('reports', __name__, url_prefix='/reports')

STATUSES = [STATUS_SCHEDULED, STATUS_IN_PROGRESS, STATUS_COMPLETED, STATUS_CANCELLED]

TREND_RANGES = {
    'week': 7,
    'month': 30,
    'year': 365
}

def _date_range():
    """date_from/date_to query parameters; defaults to the last 30 days"""
    date_to = parse_date_arg('date_to', date.today())
    date_from = parse_date_arg('date_from', date_to - timedelta(days=30))
    return date_from, date_to

def _money(value):
    return float(value) if value is not None else 0.0

@reports_bp.errorhandler(ValueError)
def bad_date(error):
    return jsonify(error='Invalid date format. Use YYYY-MM-DD.'), 400

@reports_bp.route('/summary')
def summary():
    """Income totals, appointment counts per status and completion rate"""
    date_from, date_to = _date_range()

    card_total, cash_total, commission_total = db.session.query(
        func.sum(MemberPayment.credit_card_paid),
        func.sum(MemberPayment.cash_paid),
        func.sum(MemberPayment.commission)
    ).filter(
        MemberPayment.payment_date >= date_from,
        MemberPayment.payment_date <= date_to
    ).one()

    base_query = Appointment.query.filter(
        Appointment.date >= date_from,
        Appointment.date <= date_to
    )
    total_appointments = base_query.count()

    status_counts = dict(db.session.query(
        Appointment.status,
        func.count(Appointment.id)
    ).filter(
        Appointment.date >= date_from,
        Appointment.date <= date_to
    ).group_by(Appointment.status).all())

    status_data = []
    for status in STATUSES:
        count = status_counts.get(status, 0)
        status_data.append({
            'name': status,
            'count': count,
            'percentage': (count / total_appointments) * 100 if total_appointments > 0 else 0
        })

    # Cancelled classes are left out of the completion rate
    completed_count = status_counts.get(STATUS_COMPLETED, 0)
    considered = total_appointments - status_counts.get(STATUS_CANCELLED, 0)
    completion_rate = (completed_count / considered) * 100 if considered > 0 else 0

    card_income = _money(card_total)
    cash_income = _money(cash_total)

    return jsonify({
        'date_from': date_from.isoformat(),
        'date_to': date_to.isoformat(),
        'credit_card_income': card_income,
        'cash_income': cash_income,
        'commission': _money(commission_total),
        'total_income': round(card_income + cash_income, 2),
        'total_appointments': total_appointments,
        'status_counts': status_data,
        'completion_rate': completion_rate
    })

@reports_bp.route('/package-income')
def package_income():
    """Income and purchase count per package, highest income first"""
    date_from, date_to = _date_range()

    rows = db.session.query(
        MemberPayment.package_name,
        func.sum(MemberPayment.credit_card_paid + MemberPayment.cash_paid),
        func.count(MemberPayment.id)
    ).filter(
        MemberPayment.payment_date >= date_from,
        MemberPayment.payment_date <= date_to
    ).group_by(MemberPayment.package_name).all()

    income = [
        {'package_name': name, 'total_income': _money(total), 'purchase_count': count}
        for name, total, count in rows
    ]
    income.sort(key=lambda item: item['total_income'], reverse=True)
    return jsonify(income)

@reports_bp.route('/trainers')
def trainers():
    """Completed classes per trainer in the date range"""
    date_from, date_to = _date_range()

    rows = db.session.query(
        Trainer.id,
        Trainer.first_name,
        Trainer.last_name,
        func.count(Appointment.id)
    ).join(
        Appointment, Trainer.id == Appointment.trainer_id
    ).filter(
        Appointment.status == STATUS_COMPLETED,
        Appointment.date >= date_from,
        Appointment.date <= date_to
    ).group_by(Trainer.id).all()

    return jsonify([
        {'trainer_id': trainer_id, 'name': f"{first_name} {last_name}", 'completed': count}
        for trainer_id, first_name, last_name, count in sorted(rows, key=lambda row: -row[3])
    ])

@reports_bp.route('/distribution')
def distribution():
    """Appointments per weekday and per slot time, cancelled ones excluded"""
    date_from, date_to = _date_range()
    in_range = (
        Appointment.date >= date_from,
        Appointment.date <= date_to,
        Appointment.status != STATUS_CANCELLED
    )

    weekday_counts = [0] * 7  # 0 for Monday through 6 for Sunday
    weekday_breakdown = db.session.query(
        extract('dow', Appointment.date),  # 0 is Sunday in SQL
        func.count(Appointment.id)
    ).filter(*in_range).group_by(extract('dow', Appointment.date)).all()

    for dow, count in weekday_breakdown:
        weekday_counts[(int(dow) - 1) % 7] = count

    time_breakdown = db.session.query(
        Appointment.time,
        func.count(Appointment.id)
    ).filter(*in_range).group_by(Appointment.time).order_by(Appointment.time).all()

    return jsonify({
        'weekdays': [
            {'day': DAY_NAMES[index], 'count': count}
            for index, count in enumerate(weekday_counts)
        ],
        'times': [{'time': slot, 'count': count} for slot, count in time_breakdown]
    })

def _month_starts(date_from, date_to):
    months = []
    current = date_from.replace(day=1)
    while current <= date_to:
        months.append(current)
        current = (current.replace(day=28) + timedelta(days=4)).replace(day=1)
    return months

def _percent_change(current, previous):
    # No baseline to compare against when the previous period is empty
    if previous == 0:
        return None if current else 0.0
    return round((current - previous) / previous * 100, 2)

def _period_income(date_from, date_to):
    total = db.session.query(
        func.sum(MemberPayment.credit_card_paid + MemberPayment.cash_paid)
    ).filter(
        MemberPayment.payment_date >= date_from,
        MemberPayment.payment_date <= date_to
    ).scalar()
    return _money(total)

def _period_counts(date_from, date_to):
    appointments = Appointment.query.filter(
        Appointment.date >= date_from,
        Appointment.date <= date_to,
        Appointment.status != STATUS_CANCELLED
    ).count()
    new_members = Member.query.filter(
        Member.start_date >= date_from,
        Member.start_date <= date_to
    ).count()
    return {
        'appointments': appointments,
        'new_members': new_members,
        'revenue': _period_income(date_from, date_to)
    }

@reports_bp.route('/revenue')
def revenue():
    """Monthly income series; either ?year=YYYY or a date_from/date_to range"""
    year = request.args.get('year', type=int)
    if year:
        date_from, date_to = date(year, 1, 1), date(year, 12, 31)
    else:
        date_from, date_to = _date_range()

    rows = db.session.query(
        extract('year', MemberPayment.payment_date),
        extract('month', MemberPayment.payment_date),
        func.sum(MemberPayment.credit_card_paid),
        func.sum(MemberPayment.cash_paid),
        func.sum(MemberPayment.commission),
        func.count(MemberPayment.id)
    ).filter(
        MemberPayment.payment_date >= date_from,
        MemberPayment.payment_date <= date_to
    ).group_by(
        extract('year', MemberPayment.payment_date),
        extract('month', MemberPayment.payment_date)
    ).all()

    by_month = {(int(y), int(m)): row for y, m, *row in rows}

    months = []
    for month_start in _month_starts(date_from, date_to):
        card, cash, commission, count = by_month.get((month_start.year, month_start.month), (None, None, None, 0))
        months.append({
            'month': month_start.strftime('%Y-%m'),
            'credit_card_income': _money(card),
            'cash_income': _money(cash),
            'commission': _money(commission),
            'total_income': round(_money(card) + _money(cash), 2),
            'payments': count
        })

    return jsonify({
        'date_from': date_from.isoformat(),
        'date_to': date_to.isoformat(),
        'months': months,
        'total_income': round(sum(month['total_income'] for month in months), 2)
    })

@reports_bp.route('/trends')
def trends():
    """Current period against the one before it: appointments, new members and income"""
    range_name = request.args.get('range', 'month')
    if range_name not in TREND_RANGES:
        return jsonify(error=f'Unknown range: {range_name}'), 400

    days = TREND_RANGES[range_name]
    current_end = parse_date_arg('date', date.today())
    current_start = current_end - timedelta(days=days - 1)
    previous_end = current_start - timedelta(days=1)
    previous_start = previous_end - timedelta(days=days - 1)

    current = _period_counts(current_start, current_end)
    previous = _period_counts(previous_start, previous_end)

    return jsonify({
        'range': range_name,
        'current_period': {'date_from': current_start.isoformat(), 'date_to': current_end.isoformat(), **current},
        'previous_period': {'date_from': previous_start.isoformat(), 'date_to': previous_end.isoformat(), **previous},
        'change': {key: _percent_change(current[key], previous[key]) for key in current}
    })

@reports_bp.route('/performance')
def performance():
    """Per-member averages: income per paying member and classes per attending member"""
    date_from, date_to = _date_range()

    total_income = _period_income(date_from, date_to)
    paying_members = db.session.query(
        func.count(func.distinct(MemberPayment.member_id))
    ).filter(
        MemberPayment.payment_date >= date_from,
        MemberPayment.payment_date <= date_to
    ).scalar() or 0

    appointment_count, attending_members = db.session.query(
        func.count(Appointment.id),
        func.count(func.distinct(Appointment.member_id))
    ).filter(
        Appointment.date >= date_from,
        Appointment.date <= date_to,
        Appointment.status != STATUS_CANCELLED
    ).one()

    return jsonify({
        'date_from': date_from.isoformat(),
        'date_to': date_to.isoformat(),
        'active_members': Member.query.filter_by(active=True).count(),
        'paying_members': paying_members,
        'total_income': total_income,
        'average_revenue_per_member': round(total_income / paying_members, 2) if paying_members else 0.0,
        'attending_members': attending_members,
        'average_appointments_per_member': (
            round(appointment_count / attending_members, 2) if attending_members else 0.0
        )
    })

@reports_bp.route('/service-usage')
def service_usage():
    """Booked and completed classes per package, busiest first; cancelled ones excluded"""
    date_from, date_to = _date_range()
    in_range = (
        Appointment.date >= date_from,
        Appointment.date <= date_to,
        Appointment.status != STATUS_CANCELLED
    )

    rows = db.session.query(
        Service.id,
        Service.name,
        func.count(Appointment.id),
        func.count(func.distinct(Appointment.member_id))
    ).join(
        Appointment, Service.id == Appointment.service_id
    ).filter(*in_range).group_by(Service.id, Service.name).all()

    completed = dict(db.session.query(
        Appointment.service_id,
        func.count(Appointment.id)
    ).filter(*in_range, Appointment.status == STATUS_COMPLETED).group_by(Appointment.service_id).all())

    total = sum(row[2] for row in rows)
    usage = [
        {
            'service_id': service_id,
            'name': name,
            'appointments': count,
            'completed': completed.get(service_id, 0),
            'members': members,
            'percentage': round(count / total * 100, 2) if total else 0
        }
        for service_id, name, count, members in rows
    ]
    usage.sort(key=lambda item: item['appointments'], reverse=True)
    return jsonify(usage)
