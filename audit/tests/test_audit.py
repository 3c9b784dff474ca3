from unittest import mock

from django.db import DatabaseError
from django.test import RequestFactory
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from accounts.models import User
from audit.models import AuditLog
from audit.services import record_event
from learnhub.testing import make_user


class RecordEventTests(APITestCase):
    def setUp(self):
        self.user = make_user('instructor@example.com', role=User.Role.INSTRUCTOR)

    def test_records_client_metadata(self):
        request = RequestFactory().post('/', HTTP_X_FORWARDED_FOR='10.0.0.1, 10.0.0.2', HTTP_USER_AGENT='pytest')
        log = record_event(self.user, 'quiz_created', 'quiz', target_id=7, target_name='Intro', request=request)
        self.assertEqual(log.target_id, '7')
        self.assertEqual(log.ip_address, '10.0.0.1')
        self.assertEqual(log.user_agent, 'pytest')

    def test_failures_are_swallowed(self):
        with mock.patch.object(AuditLog.objects, 'create', side_effect=DatabaseError('down')):
            with self.assertLogs('audit.services', level='ERROR'):
                self.assertIsNone(record_event(self.user, 'quiz_created', 'quiz', target_id=1))


class AuditLogEndpointTests(APITestCase):
    def setUp(self):
        self.admin = User.objects.create_superuser('admin@example.com', 'Admin', password='Str0ng-pass!')
        self.instructor = make_user('instructor@example.com', role=User.Role.INSTRUCTOR)
        for index in range(12):
            record_event(self.instructor, 'quiz_created', 'quiz', target_id=index)
        record_event(self.instructor, 'quiz_deleted', 'quiz', target_id=3)
        self.url = reverse('audit-log-list')

    def test_admin_listing_is_paginated(self):
        client = APIClient()
        client.force_authenticate(user=self.admin)
        response = client.get(self.url, {'page_size': 5})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 13)
        self.assertEqual(response.data['total_pages'], 3)
        self.assertEqual(len(response.data['data']), 5)
        self.assertEqual(response.data['data'][0]['action'], 'quiz_deleted')
        self.assertIsNotNone(response.data['next'])

    def test_filter_by_action(self):
        client = APIClient()
        client.force_authenticate(user=self.admin)
        response = client.get(self.url, {'action': 'quiz_deleted'})
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['data'][0]['actor_email'], 'instructor@example.com')

    def test_non_admins_are_rejected(self):
        client = APIClient()
        client.force_authenticate(user=self.instructor)
        response = client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'access_denied')
