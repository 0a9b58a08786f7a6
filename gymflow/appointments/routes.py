from flask import Blueprint, request, jsonify, current_app, abort
from werkzeug.datastructures import MultiDict
from gymflow import db
from gymflow.models.member import Member
from gymflow.models.trainer import Trainer
from gymflow.models.service import Service
from gymflow.models.appointment import Appointment, STATUS_SCHEDULED
from gymflow.models.setting import load_time_slots
from gymflow.appointments.forms import AppointmentForm, AppointmentUpdateForm
from gymflow.scheduling import (
    WorkingHours, check_booking_window, has_conflict, remaining_standard_slots,
    available_slots, slot_board, slot_capacity, normalize_time, InvalidTransition
)
from gymflow.scheduling.listing import filter_appointments, sort_appointments, group_by_status, PERIODS
from gymflow.scheduling.slots import PROFILES
from gymflow.utils.audit import log_audit
from gymflow.utils.common import validation_error, parse_date_arg
from datetime import date, timedelta

appointments_bp = Blueprint('appointments', __name__, url_prefix='/appointments')

MAX_CALENDAR_DAYS = 31

def _profile():
    profile = request.args.get('profile') or current_app.config['SLOT_PROFILE']
    if profile not in PROFILES:
        abort(400, description=f'Unknown profile: {profile}')
    return profile

def _working_hours(profile):
    return WorkingHours.from_dict(load_time_slots(profile)['working_hours'])

def _service_catalog():
    return {service.id: service for service in Service.query.all()}

def _trainer_day(trainer_id, day):
    return Appointment.query.filter_by(trainer_id=trainer_id, date=day).all()

def _check_booking(data, profile, exclude_id=None, pending=()):
    """
    Run every business rule for one proposed booking.

    Returns (errors, status): errors is a {field: message} dict, empty when the
    booking can be written; status is the HTTP code to answer with otherwise.
    """
    member = db.session.get(Member, data['member_id'])
    trainer = db.session.get(Trainer, data['trainer_id'])
    service = db.session.get(Service, data['service_id'])

    errors = {}
    if member is None:
        errors['member_id'] = 'Member not found'
    if trainer is None:
        errors['trainer_id'] = 'Trainer not found'
    if service is None or not service.is_active:
        errors['service_id'] = 'Package not found'
    if errors:
        return errors, 400

    if not member.is_subscribed_to(service.id):
        errors['service_id'] = 'Member is not subscribed to this package'
    elif service.is_vip_only and not member.is_vip():
        errors['service_id'] = 'This package is for VIP members only'

    errors.update(check_booking_window(
        data['date'],
        data['time'],
        _working_hours(profile),
        closed_weekday=current_app.config['CLOSED_WEEKDAY'],
        trainer_hours=trainer.working_hours()
    ))
    if errors:
        return errors, 400

    existing = _trainer_day(trainer.id, data['date']) + list(pending)
    capacity = slot_capacity(service, current_app.config['BOOKING_SLOT_CAPACITY'])
    if has_conflict(existing, _service_catalog(), trainer.id, data['date'], data['time'],
                    capacity, service=service, exclude_id=exclude_id):
        return {'time': 'This time slot is full for the selected trainer'}, 409

    return {}, None

def _booking_forms(payload):
    """One validated-on-demand form per requested session"""
    base = {key: value for key, value in payload.items() if key != 'sessions'}
    sessions = payload.get('sessions')
    if not sessions:
        return [AppointmentForm(formdata=MultiDict(base))]
    return [AppointmentForm(formdata=MultiDict({**base, **session})) for session in sessions]

def _payload_shape_error(payload):
    """Message for a booking body that is not an object with an optional list of session objects"""
    if not isinstance(payload, dict):
        return 'Request body must be a JSON object'
    sessions = payload.get('sessions')
    if sessions is None:
        return None
    if not isinstance(sessions, list) or not all(isinstance(session, dict) for session in sessions):
        return 'Sessions must be a list of objects with date and time'
    return None

@appointments_bp.route('/', methods=['GET'])
def list_appointments():
    """List appointments with period, trainer, status and text filters"""
    period = request.args.get('period', 'all')
    if period not in PERIODS:
        return jsonify(error=f'Unknown period: {period}'), 400

    try:
        date_from = parse_date_arg('date_from')
        date_to = parse_date_arg('date_to')
    except ValueError:
        return jsonify(error='Invalid date format. Use YYYY-MM-DD.'), 400

    trainer_id = request.args.get('trainer_id', type=int)
    status_filter = request.args.get('status', 'all')

    query = Appointment.query
    if status_filter != 'all':
        query = query.filter_by(status=status_filter)

    appointments = filter_appointments(
        query.all(),
        today=date.today(),
        period=period,
        trainer_id=trainer_id,
        search=request.args.get('search'),
        members=Member.query.all(),
        trainers=Trainer.query.all(),
        services=Service.query.all(),
        date_from=date_from,
        date_to=date_to
    )
    appointments = sort_appointments(appointments)

    if request.args.get('group') == '1':
        groups = group_by_status(appointments)
        return jsonify({status: [apt.to_dict() for apt in items] for status, items in groups.items()})

    return jsonify([apt.to_dict() for apt in appointments])

@appointments_bp.route('/', methods=['POST'])
def create_appointment():
    """Book one appointment, or one per entry of a 'sessions' list"""
    payload = request.get_json(silent=True) or {}
    shape_error = _payload_shape_error(payload)
    if shape_error:
        return validation_error({'sessions': shape_error})
    profile = _profile()

    # Every session is checked before anything is written; earlier sessions of
    # the same request count towards the slot of later ones.
    pending = []
    for index, form in enumerate(_booking_forms(payload)):
        if not form.validate():
            return jsonify(errors=form.errors, session=index), 400

        data = {
            'member_id': form.member_id.data,
            'trainer_id': form.trainer_id.data,
            'service_id': form.service_id.data,
            'date': form.date.data,
            'time': normalize_time(form.time.data),
        }
        errors, status = _check_booking(data, profile, pending=pending)
        if errors:
            current_app.logger.warning(f"Booking rejected for member {data['member_id']}: {errors}")
            return validation_error(errors, status, session=index)

        pending.append(Appointment(notes=form.notes.data, **data))

    db.session.add_all(pending)
    db.session.commit()

    for appointment in pending:
        log_audit('create', 'appointment', entity_id=appointment.id, details=appointment.to_dict())

    return jsonify([appointment.to_dict() for appointment in pending]), 201

@appointments_bp.route('/check', methods=['POST'])
def check_appointment():
    """Validation preview for the booking form: window errors and slot state, nothing written"""
    form = AppointmentForm()
    if not form.validate():
        return jsonify(errors=form.errors), 400

    profile = _profile()
    trainer = db.session.get(Trainer, form.trainer_id.data)
    service = db.session.get(Service, form.service_id.data)
    if trainer is None or service is None:
        return jsonify(error='Trainer or package not found'), 404

    errors = check_booking_window(
        form.date.data,
        form.time.data,
        _working_hours(profile),
        closed_weekday=current_app.config['CLOSED_WEEKDAY'],
        trainer_hours=trainer.working_hours()
    )
    existing = _trainer_day(trainer.id, form.date.data)
    catalog = _service_catalog()
    capacity = slot_capacity(service, current_app.config['BOOKING_SLOT_CAPACITY'])

    return jsonify(
        errors=errors,
        conflict=has_conflict(existing, catalog, trainer.id, form.date.data, form.time.data,
                              capacity, service=service),
        remaining=remaining_standard_slots(existing, catalog, trainer.id, form.date.data,
                                           form.time.data, capacity)
    )

@appointments_bp.route('/<int:appointment_id>', methods=['GET'])
def get_appointment(appointment_id):
    appointment = Appointment.query.get_or_404(appointment_id)
    return jsonify(appointment.to_dict())

@appointments_bp.route('/<int:appointment_id>', methods=['PATCH'])
def update_appointment(appointment_id):
    """Move an appointment to another trainer/date/time or edit its notes"""
    appointment = Appointment.query.get_or_404(appointment_id)
    form = AppointmentUpdateForm()
    if not form.validate():
        return jsonify(errors=form.errors), 400

    old_values = appointment.to_dict()
    data = {
        'member_id': appointment.member_id,
        'trainer_id': form.trainer_id.data or appointment.trainer_id,
        'service_id': appointment.service_id,
        'date': form.date.data or appointment.date,
        'time': normalize_time(form.time.data) if form.time.data else appointment.time,
    }

    moved = (data['trainer_id'], data['date'], normalize_time(data['time'])) != (
        appointment.trainer_id, appointment.date, normalize_time(appointment.time))
    if moved and appointment.status != STATUS_SCHEDULED:
        return validation_error({'status': f'A {appointment.status} appointment cannot be moved'}, 409)
    if moved:
        errors, status = _check_booking(data, _profile(), exclude_id=appointment.id)
        if errors:
            return validation_error(errors, status)

    appointment.trainer_id = data['trainer_id']
    appointment.date = data['date']
    appointment.time = data['time']
    if 'notes' in (request.get_json(silent=True) or {}):
        appointment.notes = form.notes.data or None
    db.session.commit()

    log_audit('update', 'appointment', entity_id=appointment.id, details={
        'old_values': old_values,
        'new_values': appointment.to_dict()
    })

    return jsonify(appointment.to_dict())

def _change_status(appointment_id, action):
    appointment = Appointment.query.get_or_404(appointment_id)
    old_status = appointment.status
    try:
        getattr(appointment, action)()
    except InvalidTransition as e:
        return jsonify(error=str(e)), 409
    db.session.commit()

    log_audit('update', 'appointment_status', entity_id=appointment.id, details={
        'old_status': old_status,
        'new_status': appointment.status,
        'appointment_time': f"{appointment.date.isoformat()} {appointment.time}"
    })
    return jsonify(appointment.to_dict())

@appointments_bp.route('/<int:appointment_id>/start', methods=['POST'])
def start_appointment(appointment_id):
    return _change_status(appointment_id, 'start')

@appointments_bp.route('/<int:appointment_id>/complete', methods=['POST'])
def complete_appointment(appointment_id):
    return _change_status(appointment_id, 'complete')

@appointments_bp.route('/<int:appointment_id>/cancel', methods=['POST'])
def cancel_appointment(appointment_id):
    return _change_status(appointment_id, 'cancel')

@appointments_bp.route('/<int:appointment_id>', methods=['DELETE'])
def delete_appointment(appointment_id):
    appointment = Appointment.query.get_or_404(appointment_id)
    audit_details = appointment.to_dict()

    db.session.delete(appointment)
    db.session.commit()

    log_audit('delete', 'appointment', entity_id=appointment_id, details=audit_details)
    return '', 204

@appointments_bp.route('/availability', methods=['GET'])
def availability():
    """Bookable slots for a trainer on a date, with the places left in each"""
    trainer_id = request.args.get('trainer_id', type=int)
    if not trainer_id:
        return jsonify(error='trainer_id is required'), 400
    trainer = db.session.get(Trainer, trainer_id)
    if trainer is None:
        return jsonify(error='Trainer not found'), 404

    try:
        day = parse_date_arg('date', default=date.today())
        start = normalize_time(request.args['start']) if request.args.get('start') else None
        end = normalize_time(request.args['end']) if request.args.get('end') else None
    except ValueError:
        return jsonify(error='Invalid date or time filter'), 400

    catalog = _service_catalog()
    service = None
    service_id = request.args.get('service_id', type=int)
    if service_id:
        service = catalog.get(service_id)
        if service is None:
            return jsonify(error='Package not found'), 404

    profile = _profile()
    settings = load_time_slots(profile)
    capacity = slot_capacity(service, current_app.config['BOOKING_SLOT_CAPACITY'])

    if day.weekday() == current_app.config['CLOSED_WEEKDAY']:
        return jsonify(date=day.isoformat(), trainer_id=trainer_id, capacity=capacity,
                       closed=True, slots=[])

    existing = _trainer_day(trainer_id, day)
    free = available_slots(existing, catalog, trainer_id, day, settings['slots'], capacity,
                           time_range=(start, end), service=service)
    # Same window the booking route enforces, including the trainer's own shift
    hours = WorkingHours.from_dict(settings['working_hours'])
    trainer_hours = trainer.working_hours()
    free = [
        slot for slot in free
        if not check_booking_window(day, slot, hours, closed_weekday=None, trainer_hours=trainer_hours)
    ]

    return jsonify(
        date=day.isoformat(),
        trainer_id=trainer_id,
        capacity=capacity,
        closed=False,
        slots=[
            {
                'time': slot,
                'remaining': remaining_standard_slots(existing, catalog, trainer_id, day, slot, capacity)
            }
            for slot in free
        ]
    )

@appointments_bp.route('/calendar', methods=['GET'])
def calendar():
    """Weekly/monthly board of remaining places per slot for one trainer"""
    trainer_id = request.args.get('trainer_id', type=int)
    if not trainer_id:
        return jsonify(error='trainer_id is required'), 400
    Trainer.query.get_or_404(trainer_id)

    try:
        first_day = parse_date_arg('start', default=date.today())
    except ValueError:
        return jsonify(error='Invalid date format. Use YYYY-MM-DD.'), 400
    days = min(max(request.args.get('days', 7, type=int), 1), MAX_CALENDAR_DAYS)
    last_day = first_day + timedelta(days=days - 1)

    appointments = Appointment.query.filter(
        Appointment.trainer_id == trainer_id,
        Appointment.date >= first_day,
        Appointment.date <= last_day
    ).all()

    closed_weekday = current_app.config['CLOSED_WEEKDAY']
    dates = [first_day + timedelta(days=offset) for offset in range(days)]
    open_dates = [day for day in dates if day.weekday() != closed_weekday]

    board = slot_board(
        appointments,
        _service_catalog(),
        trainer_id,
        open_dates,
        load_time_slots(_profile())['slots'],
        current_app.config['CALENDAR_SLOT_CAPACITY']
    )

    return jsonify(
        trainer_id=trainer_id,
        capacity=current_app.config['CALENDAR_SLOT_CAPACITY'],
        days=[
            {'date': day.isoformat(), 'closed': day.weekday() == closed_weekday,
             'slots': board.get(day.isoformat(), [])}
            for day in dates
        ]
    )
