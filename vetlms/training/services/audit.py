import logging

from training.models import AuditLog

logger = logging.getLogger(__name__)


def _request_meta(request):
    if request is None:
        return None, None
    ip = request.META.get('HTTP_X_FORWARDED_FOR') or request.META.get('REMOTE_ADDR')
    if ip and ',' in ip:
        ip = ip.split(',')[0].strip()
    return ip, request.META.get('HTTP_USER_AGENT')


def record_audit(action_type, entity_type, entity_id, organization_id=None, actor=None, details=None, request=None):
    """
    Insert one row into `audit_logs`.

    Called inside the caller's transaction, so a failure here rolls the audited
    change back with it.
    `details` must be JSON-serializable; ids are stored as text.
    """
    ip, user_agent = _request_meta(request)
    entry = AuditLog.objects.create(
        organization_id=organization_id,
        actor=actor,
        action_type=action_type,
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id is not None else '',
        details=details or {},
        ip_address=ip,
        user_agent=user_agent,
    )
    logger.debug(f'Audit {action_type} {entity_type}:{entity_id}')
    return entry
