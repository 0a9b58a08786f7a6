from flask import Blueprint, request, jsonify, current_app
from gymflow import db
from gymflow.models.member import Member
from gymflow.models.service import Service
from gymflow.models.payment import MemberPayment
from gymflow.billing.forms import PaymentForm, PaymentUpdateForm
from gymflow.billing.payments import card_commission, payment_summary, split_payment, to_money
from gymflow.utils.audit import log_audit
from gymflow.utils.common import validation_error, parse_date_arg

billing_bp = Blueprint('billing', __name__, url_prefix='/billing')

def _selected_services(service_ids):
    """Services in request order; a repeated id is a second package of that service"""
    found = {service.id: service for service in Service.query.filter(Service.id.in_(set(service_ids))).all()}
    missing = [service_id for service_id in service_ids if service_id not in found]
    return [found[service_id] for service_id in service_ids if service_id in found], missing

def _serialize_summary(summary):
    return {key: float(value) for key, value in summary.items()}

def _serialize_records(records):
    return [
        {key: float(value) if key != 'package_name' else value for key, value in record.items()}
        for record in records
    ]

def _prepare_payment(form):
    services, missing = _selected_services(form.service_ids.data)
    if missing:
        return None, validation_error({'service_ids': f'Unknown package(s): {missing}'})

    card = to_money(form.credit_card_paid.data)
    cash = to_money(form.cash_paid.data)
    commission = card_commission(card, current_app.config['CARD_COMMISSION_RATE'])
    return {
        'services': services,
        'summary': payment_summary(services, card, cash, commission),
        'records': split_payment(services, card, cash, commission),
    }, None

@billing_bp.route('/payment-summary', methods=['POST'])
def preview_payment():
    """Totals and per-package split for a payment, without saving it"""
    form = PaymentForm()
    if not form.validate():
        return jsonify(errors=form.errors), 400

    prepared, error = _prepare_payment(form)
    if error:
        return error

    return jsonify(summary=_serialize_summary(prepared['summary']),
                   records=_serialize_records(prepared['records']))

@billing_bp.route('/members/<int:member_id>/payments', methods=['POST'])
def create_member_payment(member_id):
    """Record a payment, stored as one row per package"""
    member = Member.query.get_or_404(member_id)
    form = PaymentForm()
    if not form.validate():
        return jsonify(errors=form.errors), 400

    prepared, error = _prepare_payment(form)
    if error:
        return error

    summary = prepared['summary']
    if summary['remaining_amount'] < 0:
        return validation_error({'cash_paid': 'Payment exceeds the package total'})

    payments = [
        MemberPayment(
            member_id=member.id,
            package_name=record['package_name'],
            credit_card_paid=record['credit_card_paid'],
            cash_paid=record['cash_paid'],
            commission=record['commission'],
            payment_date=form.payment_date.data
        )
        for record in prepared['records']
    ]
    db.session.add_all(payments)
    db.session.commit()

    log_audit('create', 'member_payment', entity_id=member.id, details={
        'member_name': member.get_full_name(),
        'summary': summary,
        'payment_ids': [payment.id for payment in payments]
    })
    current_app.logger.info(f"Recorded {len(payments)} payment row(s) for member {member.id}")

    return jsonify(summary=_serialize_summary(summary),
                   payments=[payment.to_dict() for payment in payments]), 201

@billing_bp.route('/payments', methods=['GET'])
def payments():
    """List payments, newest first, filtered by member, package and date range"""
    try:
        date_from = parse_date_arg('date_from')
        date_to = parse_date_arg('date_to')
    except ValueError:
        return jsonify(error='Invalid date format. Use YYYY-MM-DD.'), 400

    query = MemberPayment.query
    member_id = request.args.get('member_id', type=int)
    if member_id:
        query = query.filter_by(member_id=member_id)
    package = request.args.get('package')
    if package:
        query = query.filter_by(package_name=package)
    if date_from:
        query = query.filter(MemberPayment.payment_date >= date_from)
    if date_to:
        query = query.filter(MemberPayment.payment_date <= date_to)

    payments_list = query.order_by(MemberPayment.payment_date.desc(), MemberPayment.id.desc()).all()
    return jsonify([payment.to_dict() for payment in payments_list])

@billing_bp.route('/payments/<int:payment_id>', methods=['PATCH'])
def update_payment(payment_id):
    payment = MemberPayment.query.get_or_404(payment_id)
    form = PaymentUpdateForm()
    if not form.validate():
        return jsonify(errors=form.errors), 400

    old_values = payment.to_dict()
    if form.package_name.data:
        payment.package_name = form.package_name.data
    if form.credit_card_paid.data is not None:
        payment.credit_card_paid = to_money(form.credit_card_paid.data)
    if form.cash_paid.data is not None:
        payment.cash_paid = to_money(form.cash_paid.data)
    if form.payment_date.data:
        payment.payment_date = form.payment_date.data
    db.session.commit()

    log_audit('update', 'member_payment', entity_id=payment.id, details={
        'old_values': old_values,
        'new_values': payment.to_dict()
    })

    return jsonify(payment.to_dict())

@billing_bp.route('/payments/<int:payment_id>', methods=['DELETE'])
def delete_payment(payment_id):
    payment = MemberPayment.query.get_or_404(payment_id)
    audit_details = payment.to_dict()

    db.session.delete(payment)
    db.session.commit()

    log_audit('delete', 'member_payment', entity_id=payment_id, details=audit_details)
    return '', 204
