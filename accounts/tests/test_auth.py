from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from accounts.models import User
from learnhub.testing import make_user


class RegistrationTests(APITestCase):
    def test_register_student(self):
        response = self.client.post(reverse('register'), {
            'email': 'new@example.com',
            'first_name': 'New',
            'password': 'Str0ng-pass!',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['role'], User.Role.STUDENT)
        user = User.objects.get(email='new@example.com')
        self.assertEqual(user.username, 'new')
        self.assertTrue(user.check_password('Str0ng-pass!'))

    def test_admin_role_cannot_be_self_assigned(self):
        response = self.client.post(reverse('register'), {
            'email': 'root@example.com',
            'first_name': 'Root',
            'password': 'Str0ng-pass!',
            'role': 'admin',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'validation_error')
        self.assertIn('role', response.data['errors'])

    def test_duplicate_email(self):
        make_user('taken@example.com')
        response = self.client.post(reverse('register'), {
            'email': 'taken@example.com',
            'first_name': 'Again',
            'password': 'Str0ng-pass!',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', response.data['errors'])


class TokenTests(APITestCase):
    def setUp(self):
        self.user = make_user('instructor@example.com', role=User.Role.INSTRUCTOR)

    def test_token_and_me(self):
        response = self.client.post(reverse('token_obtain_pair'), {
            'email': 'instructor@example.com',
            'password': 'Str0ng-pass!',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        access = response.data['access']

        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
        me = client.get(reverse('me'))
        self.assertEqual(me.status_code, status.HTTP_200_OK)
        self.assertEqual(me.data['data']['role'], User.Role.INSTRUCTOR)

    def test_usernames_are_unique(self):
        other = make_user('instructor@other.org')
        self.assertNotEqual(other.username, self.user.username)

    def test_role_helpers(self):
        admin = User.objects.create_superuser('boss@example.com', 'Boss', password='Str0ng-pass!')
        self.assertTrue(admin.is_admin)
        self.assertTrue(self.user.is_instructor)
        self.assertFalse(self.user.is_admin)
