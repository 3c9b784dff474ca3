import logging

from django.db import transaction

from audit.models import AuditLog

logger = logging.getLogger(__name__)

# Actions
QUIZ_SUBMITTED = 'quiz_submitted'
ANSWER_REVIEWED = 'answer_reviewed'
QUIZ_CREATED = 'quiz_created'
QUIZ_DELETED = 'quiz_deleted'
PROGRESS_RESET = 'progress_reset'


def _client_meta(request):
    if request is None:
        return None, ''
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    ip = forwarded.split(',')[0].strip() if forwarded else request.META.get('REMOTE_ADDR')
    return ip or None, request.META.get('HTTP_USER_AGENT', '')[:512]


def record_event(actor, action, target_type, target_id='', target_name='', details=None, request=None):
    """
    Write one audit entry. Never raises: a failing audit write is logged and
    the caller carries on.
    """
    try:
        ip_address, user_agent = _client_meta(request)
        with transaction.atomic():
            return AuditLog.objects.create(
                actor=actor if getattr(actor, 'pk', None) else None,
                action=action,
                target_type=target_type,
                target_id=str(target_id),
                target_name=(target_name or '')[:255],
                details=details or {},
                ip_address=ip_address,
                user_agent=user_agent,
            )
    except Exception as e:
        logger.error(f"Failed to record audit event {action} for {target_type}:{target_id}: {str(e)}", exc_info=True)
        return None
