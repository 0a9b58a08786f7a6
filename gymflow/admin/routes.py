from flask import Blueprint, request, jsonify, current_app
from gymflow import db
from gymflow.models.member import Member, MEMBERSHIP_VIP
from gymflow.models.trainer import Trainer
from gymflow.models.service import Service
from gymflow.models.appointment import Appointment
from gymflow.models.audit import AuditLog
from gymflow.models.setting import load_time_slots, save_time_slots
from gymflow.admin.forms import MemberForm, TrainerForm, ServiceForm, TimeSlotSettingsForm
from gymflow.billing.packages import package_report, member_package_status
from gymflow.scheduling.slots import PROFILES, clean_profile
from gymflow.utils.audit import log_audit
from gymflow.utils.common import validation_error, parse_date_arg
from sqlalchemy import or_
from datetime import timedelta

admin_bp = Blueprint('admin', __name__, url_prefix='/admin')

def _payload():
    return request.get_json(silent=True) or {}

def _bool_field(form_field, name, current):
    """BooleanField reads a missing key as False; keep the current value instead"""
    return form_field.data if name in _payload() else current

# ---------- Members ----------

@admin_bp.route('/members', methods=['GET'])
def members():
    """List members with membership, active and text filters; VIP members first"""
    membership_filter = request.args.get('membership', 'all')
    active_filter = request.args.get('active', 'all')
    search = (request.args.get('search') or '').strip()

    query = Member.query
    if membership_filter != 'all':
        query = query.filter_by(membership_type=membership_filter)
    if active_filter in ('true', 'false'):
        query = query.filter_by(active=active_filter == 'true')
    if search:
        pattern = f'%{search}%'
        query = query.filter(or_(
            Member.first_name.ilike(pattern),
            Member.last_name.ilike(pattern),
            Member.phone.ilike(pattern),
            Member.email.ilike(pattern)
        ))

    members_list = query.order_by(Member.first_name, Member.last_name).all()
    members_list.sort(key=lambda member: member.membership_type != MEMBERSHIP_VIP)

    return jsonify([member.to_dict() for member in members_list])

@admin_bp.route('/members', methods=['POST'])
def create_member():
    """Create a new member"""
    form = MemberForm()
    if not form.validate():
        return jsonify(errors=form.errors), 400

    member = Member(
        first_name=form.first_name.data,
        last_name=form.last_name.data,
        phone=form.phone.data,
        email=form.email.data,
        membership_type=form.membership_type.data,
        subscribed_services=form.subscribed_services.data,
        start_date=form.start_date.data,
        end_date=form.end_date.data,
        notes=form.notes.data,
        avatar_url=form.avatar_url.data
    )

    db.session.add(member)
    db.session.commit()

    log_audit('create', 'member', entity_id=member.id, details=member.to_dict())

    return jsonify(member.to_dict()), 201

@admin_bp.route('/members/<int:member_id>', methods=['GET'])
def get_member(member_id):
    member = Member.query.get_or_404(member_id)
    return jsonify(member.to_dict())

@admin_bp.route('/members/<int:member_id>', methods=['PUT'])
def update_member(member_id):
    """Update an existing member"""
    member = Member.query.get_or_404(member_id)
    form = MemberForm()
    if not form.validate():
        return jsonify(errors=form.errors), 400

    # Store old values for audit log
    old_values = member.to_dict()

    member.first_name = form.first_name.data
    member.last_name = form.last_name.data
    member.phone = form.phone.data
    member.email = form.email.data
    member.membership_type = form.membership_type.data
    member.subscribed_services = list(form.subscribed_services.data)
    member.start_date = form.start_date.data
    member.end_date = form.end_date.data
    member.notes = form.notes.data
    member.avatar_url = form.avatar_url.data

    db.session.commit()

    log_audit('update', 'member', entity_id=member.id, details={
        'old_values': old_values,
        'new_values': member.to_dict()
    })

    return jsonify(member.to_dict())

@admin_bp.route('/members/<int:member_id>/deactivate', methods=['POST'])
def deactivate_member(member_id):
    """Mark a member passive"""
    member = Member.query.get_or_404(member_id)
    if not member.active:
        return jsonify(member.to_dict())

    member.active = False
    db.session.commit()

    log_audit('deactivate', 'member', entity_id=member.id, details={'name': member.get_full_name()})

    return jsonify(member.to_dict())

@admin_bp.route('/members/<int:member_id>', methods=['DELETE'])
def delete_member(member_id):
    member = Member.query.get_or_404(member_id)
    audit_details = member.to_dict()

    db.session.delete(member)
    db.session.commit()

    log_audit('delete', 'member', entity_id=member_id, details=audit_details)
    return '', 204

@admin_bp.route('/members/<int:member_id>/packages', methods=['GET'])
def member_packages(member_id):
    """Session usage per package for one member"""
    member = Member.query.get_or_404(member_id)
    services = Service.query.all()
    appointments = Appointment.query.filter_by(member_id=member.id).all()

    return jsonify(
        member_id=member.id,
        status=member_package_status(member, services, appointments),
        packages=package_report(member, services, appointments)
    )

# ---------- Trainers ----------

def _fill_trainer(trainer, form):
    trainer.first_name = form.first_name.data
    trainer.last_name = form.last_name.data
    trainer.phone = form.phone.data
    trainer.email = form.email.data
    trainer.bio = form.bio.data
    trainer.categories = list(form.categories.data or [])
    trainer.start_date = form.start_date.data
    trainer.working_start = form.working_start.data[:5]
    trainer.working_end = form.working_end.data[:5]

@admin_bp.route('/trainers', methods=['GET'])
def trainers():
    trainers_list = Trainer.query.order_by(Trainer.first_name, Trainer.last_name).all()
    return jsonify([trainer.to_dict() for trainer in trainers_list])

@admin_bp.route('/trainers', methods=['POST'])
def create_trainer():
    """Create a new trainer"""
    form = TrainerForm()
    if not form.validate():
        return jsonify(errors=form.errors), 400

    trainer = Trainer(
        first_name=form.first_name.data,
        last_name=form.last_name.data,
        phone=form.phone.data,
        start_date=form.start_date.data
    )
    _fill_trainer(trainer, form)

    db.session.add(trainer)
    db.session.commit()

    log_audit('create', 'trainer', entity_id=trainer.id, details=trainer.to_dict())

    return jsonify(trainer.to_dict()), 201

@admin_bp.route('/trainers/<int:trainer_id>', methods=['GET'])
def get_trainer(trainer_id):
    trainer = Trainer.query.get_or_404(trainer_id)
    return jsonify(trainer.to_dict())

@admin_bp.route('/trainers/<int:trainer_id>', methods=['PUT'])
def update_trainer(trainer_id):
    """Update an existing trainer"""
    trainer = Trainer.query.get_or_404(trainer_id)
    form = TrainerForm()
    if not form.validate():
        return jsonify(errors=form.errors), 400

    old_values = trainer.to_dict()
    _fill_trainer(trainer, form)
    db.session.commit()

    log_audit('update', 'trainer', entity_id=trainer.id, details={
        'old_values': old_values,
        'new_values': trainer.to_dict()
    })

    return jsonify(trainer.to_dict())

@admin_bp.route('/trainers/<int:trainer_id>', methods=['DELETE'])
def delete_trainer(trainer_id):
    """Delete a trainer together with their appointment history"""
    trainer = Trainer.query.get_or_404(trainer_id)
    audit_details = trainer.to_dict()
    audit_details['appointments_removed'] = trainer.appointments.count()

    db.session.delete(trainer)
    db.session.commit()

    log_audit('delete', 'trainer', entity_id=trainer_id, details=audit_details)
    return '', 204

# ---------- Services (packages) ----------

@admin_bp.route('/services', methods=['GET'])
def services():
    """List packages; ?type=vip|standard and ?active=true|false narrow the list"""
    type_filter = request.args.get('type', 'all')
    active_filter = request.args.get('active', 'all')

    query = Service.query
    if type_filter == 'vip':
        query = query.filter_by(is_vip_only=True)
    elif type_filter == 'standard':
        query = query.filter_by(is_vip_only=False)
    if active_filter in ('true', 'false'):
        query = query.filter_by(is_active=active_filter == 'true')

    # VIP packages first
    services_list = query.order_by(Service.is_vip_only.desc(), Service.name).all()
    return jsonify([service.to_dict() for service in services_list])

@admin_bp.route('/services', methods=['POST'])
def create_service():
    """Create a new package"""
    form = ServiceForm()
    if not form.validate():
        return jsonify(errors=form.errors), 400

    service = Service(
        name=form.name.data,
        description=form.description.data,
        category=form.category.data,
        price=form.price.data,
        duration_minutes=form.duration_minutes.data,
        session_count=form.session_count.data,
        max_participants=form.max_participants.data,
        is_vip_only=form.is_vip_only.data,
        is_active=_bool_field(form.is_active, 'is_active', True)
    )

    db.session.add(service)
    db.session.commit()

    log_audit('create', 'service', entity_id=service.id, details=service.to_dict())

    return jsonify(service.to_dict()), 201

@admin_bp.route('/services/<int:service_id>', methods=['GET'])
def get_service(service_id):
    service = Service.query.get_or_404(service_id)
    return jsonify(service.to_dict())

@admin_bp.route('/services/<int:service_id>', methods=['PUT'])
def update_service(service_id):
    """Update an existing package"""
    service = Service.query.get_or_404(service_id)
    form = ServiceForm()
    if not form.validate():
        return jsonify(errors=form.errors), 400

    # Store old values for audit log
    old_values = service.to_dict()

    service.name = form.name.data
    service.description = form.description.data
    service.category = form.category.data
    service.price = form.price.data
    service.duration_minutes = form.duration_minutes.data
    service.session_count = form.session_count.data
    service.max_participants = form.max_participants.data
    service.is_vip_only = form.is_vip_only.data
    service.is_active = _bool_field(form.is_active, 'is_active', service.is_active)

    db.session.commit()

    log_audit('update', 'service', entity_id=service.id, details={
        'old_values': old_values,
        'new_values': service.to_dict()
    })

    return jsonify(service.to_dict())

@admin_bp.route('/services/<int:service_id>', methods=['DELETE'])
def delete_service(service_id):
    """Delete a package that nobody has booked; booked packages are deactivated instead"""
    service = Service.query.get_or_404(service_id)

    if service.appointments.count():
        service.is_active = False
        db.session.commit()
        log_audit('deactivate', 'service', entity_id=service.id, details={'name': service.name})
        return jsonify(service.to_dict())

    audit_details = service.to_dict()
    db.session.delete(service)
    db.session.commit()

    log_audit('delete', 'service', entity_id=service_id, details=audit_details)
    return '', 204

# ---------- Settings ----------

@admin_bp.route('/settings/time-slots', methods=['GET'])
def time_slots():
    """Slot list and working hours for one profile (normal or holiday)"""
    profile = request.args.get('profile', current_app.config['SLOT_PROFILE'])
    if profile not in PROFILES:
        return jsonify(error=f'Unknown profile: {profile}'), 400
    return jsonify(profile=profile, **load_time_slots(profile))

@admin_bp.route('/settings/time-slots', methods=['PUT'])
def update_time_slots():
    """Replace one time-slot profile"""
    profile = request.args.get('profile', current_app.config['SLOT_PROFILE'])
    if profile not in PROFILES:
        return jsonify(error=f'Unknown profile: {profile}'), 400

    form = TimeSlotSettingsForm()
    if not form.validate():
        return jsonify(errors=form.errors), 400

    try:
        value = clean_profile({
            'slots': form.slots.data,
            'working_hours': {'start': form.working_start.data, 'end': form.working_end.data}
        })
    except ValueError as e:
        return validation_error({'slots': str(e)})

    old_value = load_time_slots(profile)
    save_time_slots(profile, value)
    db.session.commit()

    log_audit('update', 'time_slots', details={
        'profile': profile,
        'old_value': old_value,
        'new_value': value
    })

    return jsonify(profile=profile, **value)

# ---------- Audit trail ----------

@admin_bp.route('/audit-logs', methods=['GET'])
def audit_logs():
    """View system audit logs with filtering options"""
    action_filter = request.args.get('action', '')
    entity_type_filter = request.args.get('entity_type', '')

    query = AuditLog.query

    if action_filter:
        query = query.filter(AuditLog.action == action_filter)

    if entity_type_filter:
        query = query.filter(AuditLog.entity_type == entity_type_filter)

    try:
        date_from = parse_date_arg('date_from')
        date_to = parse_date_arg('date_to')
    except ValueError:
        return jsonify(error='Invalid date format. Use YYYY-MM-DD.'), 400

    if date_from:
        query = query.filter(AuditLog.timestamp >= date_from)
    if date_to:
        # Add one day to include the entire end date
        query = query.filter(AuditLog.timestamp < date_to + timedelta(days=1))

    # Order by timestamp (newest first)
    query = query.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())

    page = request.args.get('page', 1, type=int)
    per_page = current_app.config['AUDIT_LOGS_PER_PAGE']
    pagination = query.paginate(page=page, per_page=per_page, error_out=False)

    return jsonify(
        items=[entry.to_dict() for entry in pagination.items],
        page=pagination.page,
        pages=pagination.pages,
        total=pagination.total
    )
