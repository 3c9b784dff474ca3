from rest_framework import serializers

from audit.models import AuditLog


class AuditLogSerializer(serializers.ModelSerializer):
    actor_email = serializers.EmailField(source='actor.email', read_only=True, default=None)

    class Meta:
        model = AuditLog
        fields = [
            'id', 'actor', 'actor_email', 'action', 'target_type', 'target_id',
            'target_name', 'details', 'ip_address', 'user_agent', 'timestamp',
        ]
