from django.urls import path

from audit import views

urlpatterns = [
    path('audit-logs/', views.audit_log_list_view, name='audit-log-list'),
]
