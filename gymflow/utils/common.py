from datetime import datetime
from flask import jsonify, request
from flask_wtf import FlaskForm

# HH:MM or HH:MM:SS, as accepted by normalize_time
TIME_PATTERN = r'^([01]\d|2[0-3]):[0-5]\d(:[0-5]\d)?$'

class ApiForm(FlaskForm):
    """FlaskForm fed from JSON request bodies"""
    class Meta:
        csrf = False

def validation_error(errors, status=400, **extra):
    """Field-level errors in the same shape WTForms produces: {field: [messages]}"""
    normalized = {
        field: messages if isinstance(messages, list) else [messages]
        for field, messages in errors.items()
    }
    return jsonify(errors=normalized, **extra), status

def parse_date_arg(name, default=None):
    """Read a YYYY-MM-DD query parameter; ValueError on a bad value"""
    value = request.args.get(name)
    if not value:
        return default
    return datetime.strptime(value, '%Y-%m-%d').date()
