from rest_framework.decorators import api_view, permission_classes

from accounts.permissions import IsAdmin
from audit.models import AuditLog
from audit.serializers import AuditLogSerializer
from courses.services.pagination import paginate_queryset_or_list


@api_view(['GET'])
@permission_classes([IsAdmin])
def audit_log_list_view(request):
    """
    Paginated audit trail, newest first.
    Optional filters: ``action``, ``target_type``, ``actor``.
    """
    logs = AuditLog.objects.select_related('actor')
    action = request.query_params.get('action')
    if action:
        logs = logs.filter(action=action)
    target_type = request.query_params.get('target_type')
    if target_type:
        logs = logs.filter(target_type=target_type)
    actor = request.query_params.get('actor')
    if actor and actor.isdigit():
        logs = logs.filter(actor_id=int(actor))

    return paginate_queryset_or_list(
        request,
        logs,
        serializer_class=AuditLogSerializer,
        message="Audit logs retrieved successfully.",
    )
