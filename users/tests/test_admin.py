"""
Tests for back-office user moderation.
"""
from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.test import APITestCase, APIClient

from users.models import ModerationLog

User = get_user_model()


class AdminUserModerationTests(APITestCase):

    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_superuser(email='admin@example.com', password='testpass123')
        self.provider_user = User.objects.create_user(
            email='novo@example.com',
            password='testpass123',
            first_name='Beto',
            role=User.Role.SERVICE_PROVIDER,
        )
        self.client_user = User.objects.create_user(
            email='cliente@example.com',
            password='testpass123',
            role=User.Role.CLIENT,
        )
        self.client.force_authenticate(user=self.admin)

    def test_list_and_filter(self):
        response = self.client.get('/api/admin/users/', {'role': User.Role.SERVICE_PROVIDER})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['email'], 'novo@example.com')

    def test_search(self):
        response = self.client.get('/api/admin/users/', {'search': 'beto'})
        self.assertEqual(response.data['count'], 1)

    def test_approve_logs_action(self):
        response = self.client.post(f'/api/admin/users/{self.provider_user.id}/approve/', {}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_approved'])
        self.assertEqual(response.data['approval_status'], User.ApprovalStatus.APPROVED)

        log = ModerationLog.objects.get(user=self.provider_user)
        self.assertEqual(log.action, ModerationLog.Action.APPROVE)
        self.assertEqual(log.admin, self.admin)

    def test_reject_requires_reason(self):
        url = f'/api/admin/users/{self.provider_user.id}/reject/'

        response = self.client.post(url, {'reason': '   '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('reason', response.data)

        response = self.client.post(url, {'reason': 'Documentos ilegíveis'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['approval_status'], User.ApprovalStatus.REJECTED)
        self.assertEqual(ModerationLog.objects.get().reason, 'Documentos ilegíveis')

    def test_toggle_active(self):
        url = f'/api/admin/users/{self.client_user.id}/toggle-active/'

        response = self.client.post(url, {'reason': 'Fraude'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_active'])

        response = self.client.post(url, {}, format='json')
        self.assertTrue(response.data['is_active'])

        actions = list(
            ModerationLog.objects.filter(user=self.client_user)
            .order_by('id')
            .values_list('action', flat=True)
        )
        self.assertEqual(actions, [ModerationLog.Action.DEACTIVATE, ModerationLog.Action.ACTIVATE])

    def test_cannot_toggle_self(self):
        response = self.client.post(f'/api/admin/users/{self.admin.id}/toggle-active/', {}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.admin.refresh_from_db()
        self.assertTrue(self.admin.is_active)

    def test_moderation_history(self):
        self.client.post(f'/api/admin/users/{self.provider_user.id}/approve/', {}, format='json')

        response = self.client.get(f'/api/admin/users/{self.provider_user.id}/moderations/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['admin_email'], 'admin@example.com')

    def test_non_admin_is_forbidden(self):
        self.client.force_authenticate(user=self.client_user)

        response = self.client.get('/api/admin/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        response = self.client.post(f'/api/admin/users/{self.provider_user.id}/approve/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
