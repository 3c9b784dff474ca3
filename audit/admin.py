from django.contrib import admin

from .models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("timestamp", "actor", "action", "target_type", "target_id", "target_name")
    list_filter = ("action", "target_type")
    search_fields = ("actor__email", "target_name", "target_id")
    readonly_fields = [f.name for f in AuditLog._meta.fields]
