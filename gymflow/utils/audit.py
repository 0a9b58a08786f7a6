from flask import request, current_app, has_request_context
from gymflow.models.audit import AuditLog
from gymflow import db

def log_audit(action, entity_type, entity_id=None, details=None):
    """
    Log an audit entry

    Parameters:
    - action: The action performed (e.g., 'create', 'update', 'delete')
    - entity_type: The type of entity affected (e.g., 'member', 'appointment')
    - entity_id: ID of the affected entity (optional)
    - details: Additional details about the action (optional)

    Never raises: a failed audit write is logged and the caller carries on.
    """
    try:
        # CLI jobs run without a request
        ip_address = request.remote_addr if has_request_context() else None

        audit_entry = AuditLog(
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
            ip_address=ip_address
        )

        db.session.add(audit_entry)
        db.session.commit()

        return True
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to log audit entry: {e}")
        return False
