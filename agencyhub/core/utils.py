"""Shared helpers: audit logging, activity feed and delete confirmation"""
import logging

from .models import AuditLog, TeamActivity

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """Extract client IP address from request"""
    if not request or not hasattr(request, 'META'):
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip or None


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_name=None):
    """
    Create an audit log entry

    Args:
        request: Django request object (for user and IP) - optional if user is provided
        action: Action type (create, update, delete, approve, ...)
        model_name: Name of the model being acted upon
        object_id: ID of the object (as string)
        changes: Dictionary of changes made
        user: Optional user override (defaults to request.user if request provided)
        object_name: Human-readable name of the object
    """
    try:
        audit_user = None
        if user:
            audit_user = user
        elif request and hasattr(request, 'user'):
            audit_user = request.user

        if not action or not model_name or not object_id:
            logger.warning(f"Audit log creation skipped: missing required fields (action={action}, model_name={model_name}, object_id={object_id})")
            return None

        return AuditLog.objects.create(
            user=audit_user if audit_user and audit_user.is_authenticated else None,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_name=object_name,
            changes=changes or {},
            ip_address=get_client_ip(request) if request else None
        )
    except Exception as e:
        # Audit failures never fail the main operation
        logger.error(f"Failed to create audit log: {str(e)}")
        return None


def log_activity(user, activity_type, description, project=None):
    """Append an entry to the team activity feed"""
    try:
        return TeamActivity.objects.create(
            user=user,
            activity_type=activity_type,
            description=description,
            project=project,
        )
    except Exception as e:
        logger.error(f"Failed to log team activity: {str(e)}")
        return None


def deletion_confirmed(request):
    """Deletes must carry ?confirm=true (or confirm in the body)"""
    value = request.query_params.get('confirm')
    if value is None and hasattr(request, 'data'):
        try:
            value = request.data.get('confirm')
        except AttributeError:
            value = None
    return str(value).lower() in ('1', 'true', 'yes')


CONFIRMATION_REQUIRED = {'error': 'Deletion must be confirmed (pass confirm=true)'}
