from io import StringIO

from django.core import mail
from django.core.management import call_command
from django.test import TestCase, override_settings
from django.contrib.auth import get_user_model
from django.contrib.auth.tokens import default_token_generator
from django.urls import reverse
from rest_framework.test import APITestCase
from rest_framework import status
from rest_framework_simplejwt.tokens import RefreshToken

from activity.models import AuditLogEntry
from accounts.models import Role
from accounts.permissions import Capability, has_capability, can_modify_owned, require_capability
from teamhub.exceptions import AuthorizationError

# Get the custom user model
User = get_user_model()


class CustomUserModelTest(TestCase):
    def test_create_user(self):
        user = User.objects.create_user(email='Test@Example.com', name='John Doe', password='testpass123')
        self.assertEqual(user.email, 'test@example.com')
        self.assertEqual(user.role, Role.USER)
        self.assertFalse(user.is_verified)  # is_verified should default to False

    def test_email_uniqueness(self):
        User.objects.create_user(email='test@example.com', name='John', password='testpass123')
        with self.assertRaises(Exception):
            User.objects.create_user(email='test@example.com', name='Jane', password='testpass123')

    def test_superuser_is_verified_admin(self):
        user = User.objects.create_superuser(email='root@example.com', name='Root', password='testpass123')
        self.assertTrue(user.is_verified)
        self.assertEqual(user.role, Role.ADMIN)


class CapabilityPolicyTest(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(email='user@example.com', name='User', password='testpass123')
        self.leader = User.objects.create_user(
            email='lead@example.com', name='Lead', password='testpass123', role=Role.TEAM_LEADER
        )
        self.admin = User.objects.create_user(
            email='admin@example.com', name='Admin', password='testpass123', role=Role.ADMIN
        )

    def test_role_capabilities(self):
        self.assertFalse(has_capability(self.user, Capability.MANAGE_TASKS))
        self.assertTrue(has_capability(self.leader, Capability.MANAGE_TASKS))
        self.assertFalse(has_capability(self.leader, Capability.MANAGE_USERS))
        self.assertFalse(has_capability(self.leader, Capability.MANAGE_MUSIC))
        for capability in Capability:
            self.assertTrue(has_capability(self.admin, capability))

    def test_require_capability_raises(self):
        with self.assertRaises(AuthorizationError):
            require_capability(self.user, Capability.SHARE_RESOURCES)
        require_capability(self.leader, Capability.SHARE_RESOURCES)

    def test_owner_or_moderator(self):
        self.assertTrue(can_modify_owned(self.user, self.user.id))
        self.assertFalse(can_modify_owned(self.user, self.leader.id))
        self.assertTrue(can_modify_owned(self.leader, self.user.id))


class UserRegistrationViewTest(APITestCase):
    def test_user_registration_success(self):
        data = {
            'email': 'test@example.com',
            'name': 'John Doe',
            'password': 'testpass123',
            'password2': 'testpass123'
        }
        response = self.client.post('/api/accounts/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertFalse(User.objects.get(email='test@example.com').is_verified)
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn('verify-email', mail.outbox[0].body)

    def test_registration_duplicate_email_ignores_case(self):
        User.objects.create_user(email='taken@example.com', name='Taken', password='testpass123')
        data = {
            'email': 'Taken@Example.com',
            'name': 'Copy',
            'password': 'testpass123',
            'password2': 'testpass123'
        }
        response = self.client.post('/api/accounts/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'conflict')
        self.assertEqual(User.objects.filter(email__iexact='taken@example.com').count(), 1)

    def test_user_registration_invalid_data(self):
        data = {
            'email': 'test@example.com',
            'name': 'John Doe',
            'password': 'testpass123',
            'password2': 'wrongpass'
        }
        response = self.client.post('/api/accounts/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', response.data)


class VerifyEmailViewTest(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(email='test@example.com', name='John Doe', password='testpass123')
        self.token = default_token_generator.make_token(self.user)

    def test_email_verification_success(self):
        response = self.client.get(f'/api/accounts/verify/{self.user.id}/{self.token}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.is_verified)

    def test_email_verification_invalid_token(self):
        response = self.client.get(f'/api/accounts/verify/{self.user.id}/invalid-token/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid or expired token.')

    def test_resend_for_verified_user(self):
        self.user.is_verified = True
        self.user.save()
        response = self.client.post(reverse('resend-verification'), {'email': 'test@example.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class UserLoginViewTest(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(email='test@example.com', name='John Doe', password='testpass123')
        self.user.is_verified = True
        self.user.save()

    def test_user_login_success(self):
        data = {'email': 'test@example.com', 'password': 'testpass123'}
        response = self.client.post('/api/accounts/login/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access_token', response.data)
        self.assertIn('refresh_token', response.data)
        self.assertEqual(response.data['user']['role'], Role.USER)

    def test_user_login_invalid_credentials(self):
        data = {'email': 'test@example.com', 'password': 'wrongpass'}
        response = self.client.post('/api/accounts/login/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['detail'], 'Invalid email or password.')

    def test_user_login_unverified(self):
        self.user.is_verified = False
        self.user.save()
        data = {'email': 'test@example.com', 'password': 'testpass123'}
        response = self.client.post('/api/accounts/login/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['detail'], 'Email not verified. Please check your inbox.')


class LogoutViewTest(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(email='test@example.com', name='John Doe', password='testpass123')
        self.refresh_token = str(RefreshToken.for_user(self.user))
        self.client.force_authenticate(user=self.user)

    def test_user_logout_success(self):
        response = self.client.post('/api/accounts/logout/', {'refresh': self.refresh_token}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Successfully logged out.')

    def test_user_logout_invalid_token(self):
        response = self.client.post('/api/accounts/logout/', {'refresh': 'invalid-token'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class UserDirectoryViewTest(APITestCase):
    def test_sorted_by_name(self):
        zed = User.objects.create_user(email='zed@example.com', name='Zed', password='testpass123')
        User.objects.create_user(email='amy@example.com', name='Amy', password='testpass123')
        self.client.force_authenticate(user=zed)
        response = self.client.get(reverse('user-directory'))
        self.assertEqual([u['name'] for u in response.data], ['Amy', 'Zed'])


class AdminUserViewsTest(APITestCase):
    def setUp(self):
        self.admin = User.objects.create_user(
            email='admin@example.com', name='Admin', password='testpass123', role=Role.ADMIN, is_verified=True
        )
        self.member = User.objects.create_user(email='member@example.com', name='Member', password='testpass123')
        self.client.force_authenticate(user=self.admin)

    def test_non_admin_forbidden(self):
        self.client.force_authenticate(user=self.member)
        response = self.client.get(reverse('admin-user-list'))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_newest_first(self):
        response = self.client.get(reverse('admin-user-list'))
        self.assertEqual([u['email'] for u in response.data], ['member@example.com', 'admin@example.com'])

    def test_create_user_pre_verified(self):
        data = {'email': 'New@example.com', 'name': 'New', 'password': 'testpass123', 'role': Role.TEAM_LEADER}
        response = self.client.post(reverse('admin-user-list'), data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        user = User.objects.get(email='new@example.com')
        self.assertTrue(user.is_verified)
        self.assertTrue(user.check_password('testpass123'))
        self.assertTrue(AuditLogEntry.objects.filter(action='create', entity_id=user.id).exists())

    def test_create_duplicate_email_conflicts(self):
        data = {'email': 'member@example.com', 'name': 'Dup', 'password': 'testpass123'}
        response = self.client.post(reverse('admin-user-list'), data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'conflict')

    def test_create_requires_password(self):
        data = {'email': 'nopass@example.com', 'name': 'No Pass'}
        response = self.client.post(reverse('admin-user-list'), data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cannot_delete_self(self):
        response = self.client.delete(reverse('admin-user-detail', args=[self.admin.id]))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'invalid')

    def test_delete_user_is_audited(self):
        response = self.client.delete(reverse('admin-user-detail', args=[self.member.id]))
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(User.objects.filter(id=self.member.id).exists())
        entry = AuditLogEntry.objects.get(action='delete', entity_type='user')
        self.assertEqual(entry.entity_title, 'member@example.com')

    def test_change_role(self):
        url = reverse('admin-user-role', args=[self.member.id])
        response = self.client.patch(url, {'role': Role.TEAM_LEADER}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['role'], Role.TEAM_LEADER)
        entry = AuditLogEntry.objects.get(action='role_change')
        self.assertEqual(entry.details, {'from': Role.USER, 'to': Role.TEAM_LEADER})

    def test_role_change_through_user_update_is_audited(self):
        url = reverse('admin-user-detail', args=[self.member.id])
        response = self.client.patch(url, {'role': Role.ADMIN}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        entry = AuditLogEntry.objects.get(action='role_change', entity_id=self.member.id)
        self.assertEqual(entry.details, {'from': Role.USER, 'to': Role.ADMIN})

        self.client.patch(url, {'name': 'Renamed'}, format='json')
        self.assertEqual(AuditLogEntry.objects.filter(action='role_change').count(), 1)

    def test_change_role_rejects_unknown_role_and_self(self):
        response = self.client.patch(
            reverse('admin-user-role', args=[self.member.id]), {'role': 'overlord'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.patch(
            reverse('admin-user-role', args=[self.admin.id]), {'role': Role.USER}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.admin.refresh_from_db()
        self.assertEqual(self.admin.role, Role.ADMIN)

    def test_stats(self):
        User.objects.create_user(email='lead@example.com', name='Lead', password='testpass123', role=Role.TEAM_LEADER)
        response = self.client.get(reverse('admin-stats'))
        self.assertEqual(response.data, {'totalUsers': 3, 'teamLeaders': 1, 'regularUsers': 1, 'admins': 1})


class SeedUsersCommandTest(TestCase):
    @override_settings(
        SEED_ADMIN_EMAIL='seed-admin@example.com', SEED_ADMIN_PASSWORD='adminpass123',
        SEED_TEAM_LEADER_EMAIL='seed-lead@example.com', SEED_TEAM_LEADER_PASSWORD=''
    )
    def test_seeds_admin_and_skips_missing_password(self):
        call_command('seed_users', stdout=StringIO())
        admin = User.objects.get(email='seed-admin@example.com')
        self.assertEqual(admin.role, Role.ADMIN)
        self.assertTrue(admin.is_verified)
        self.assertFalse(User.objects.filter(email='seed-lead@example.com').exists())

        call_command('seed_users', stdout=StringIO())
        self.assertEqual(User.objects.filter(email='seed-admin@example.com').count(), 1)


class MigrationsTest(TestCase):
    def test_models_match_migrations(self):
        call_command('makemigrations', '--check', '--dry-run', stdout=StringIO())
