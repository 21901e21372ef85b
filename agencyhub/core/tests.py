"""
Test suite for the core module
Tests: Auth, Profile, Lock screen, Install prompt, Team, Presence, Change feed, Audit logs, Search
"""
from datetime import timedelta
from io import StringIO

from django.core.cache import cache
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework_simplejwt.tokens import RefreshToken

from agencyhub.core.models import Profile, UserRole, ChangeEvent, AuditLog, TeamActivity
from agencyhub.core.permissions import get_landing_route, get_allowed_routes
from agencyhub.core.realtime import suspend_change_feed, get_changes, latest_cursor
from agencyhub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from agencyhub.core.utils import log_activity
from agencyhub.core.views import should_show_install_prompt
from agencyhub.core import presence


class AuthTests(TestCase):
    """Test registration, login and the current user endpoint"""

    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()

    def test_register_grants_client_role(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'newclient',
            'email': 'newclient@test.com',
            'password': 'S3cure-pass-123',
            'password_confirm': 'S3cure-pass-123',
            'full_name': 'New Client',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('access', response.data)
        self.assertEqual(response.data['user']['roles'], ['client'])
        profile = Profile.objects.get(user__username='newclient')
        self.assertEqual(profile.full_name, 'New Client')

    def test_register_password_mismatch(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'mismatch',
            'email': 'mismatch@test.com',
            'password': 'S3cure-pass-123',
            'password_confirm': 'different-pass-123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_login_returns_tokens(self):
        TestDataFactory.create_user(username='loginuser')
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'loginuser', 'password': 'testpass123'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)

    def test_login_rejected_for_disabled_user(self):
        user = TestDataFactory.create_user(username='disabled')
        user.is_active = False
        user.save()
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'disabled', 'password': 'testpass123'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertNotIn('access', response.data)

    def test_refresh_returns_new_access_token(self):
        refresh = RefreshToken.for_user(TestDataFactory.create_user())
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': str(refresh)}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)

    def test_refresh_for_deleted_user_is_invalid(self):
        user = TestDataFactory.create_user()
        refresh = RefreshToken.for_user(user)
        user.delete()
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': str(refresh)}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertIn('invalid', str(response.data['detail']).lower())

    def test_me_requires_auth(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_for_admin(self):
        admin = TestDataFactory.create_admin()
        self.client.authenticate_user(admin)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_admin'])
        self.assertEqual(response.data['landing_route'], '/')


class PasswordChangeTests(TestCase):
    """Test changing the current user's password"""

    def setUp(self):
        self.user = TestDataFactory.create_user(username='changer')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_change_password(self):
        response = self.client.post('/api/v1/auth/password/', {
            'current_password': 'testpass123',
            'new_password': 'Fresh-S3cret-42',
            'new_password_confirm': 'Fresh-S3cret-42',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('Fresh-S3cret-42'))
        self.assertTrue(AuditLog.objects.filter(model_name='User', object_id=str(self.user.id)).exists())

        self.client.logout()
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'changer', 'password': 'Fresh-S3cret-42'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_wrong_current_password(self):
        response = self.client.post('/api/v1/auth/password/', {
            'current_password': 'not-my-password',
            'new_password': 'Fresh-S3cret-42',
            'new_password_confirm': 'Fresh-S3cret-42',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('current_password', response.data)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('testpass123'))

    def test_confirmation_mismatch(self):
        response = self.client.post('/api/v1/auth/password/', {
            'current_password': 'testpass123',
            'new_password': 'Fresh-S3cret-42',
            'new_password_confirm': 'Other-S3cret-42',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_weak_password_rejected(self):
        response = self.client.post('/api/v1/auth/password/', {
            'current_password': 'testpass123',
            'new_password': '12345678',
            'new_password_confirm': '12345678',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_requires_auth(self):
        self.client.logout()
        response = self.client.post('/api/v1/auth/password/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class RoleRoutingTests(TestCase):
    """Test landing routes for each kind of user"""

    def test_team_member_lands_on_team_dashboard(self):
        member = TestDataFactory.create_team_member()
        self.assertEqual(get_landing_route(member), '/team-dashboard')

    def test_client_lands_on_client_portal(self):
        client_user = TestDataFactory.create_user(roles=['client'])
        self.assertEqual(get_landing_route(client_user), '/client-portal')
        self.assertNotIn('/analytics', get_allowed_routes(client_user))


class LockScreenTests(TestCase):
    """Test the lock screen PIN"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_pin_is_stored_hashed(self):
        response = self.client.post('/api/v1/lock-screen/pin/', {'pin': '1234'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        profile = Profile.objects.get(user=self.user)
        self.assertNotEqual(profile.lock_pin, '1234')
        self.assertTrue(profile.lock_pin)

    def test_invalid_pin_format(self):
        response = self.client.post('/api/v1/lock-screen/pin/', {'pin': '12a4'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unlock(self):
        self.client.post('/api/v1/lock-screen/pin/', {'pin': '4321'}, format='json')
        response = self.client.post('/api/v1/lock-screen/unlock/', {'pin': '4321'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['unlocked'])

        response = self.client.post('/api/v1/lock-screen/unlock/', {'pin': '0000'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_unlock_without_pin(self):
        response = self.client.post('/api/v1/lock-screen/unlock/', {'pin': '1234'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class InstallPromptTests(TestCase):
    """Test the install prompt re-prompt window"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_shown_until_dismissed(self):
        response = self.client.get('/api/v1/install-prompt/')
        self.assertTrue(response.data['should_show'])

        self.client.post('/api/v1/install-prompt/dismiss/')
        response = self.client.get('/api/v1/install-prompt/')
        self.assertFalse(response.data['should_show'])

    def test_shown_again_after_24_hours(self):
        profile = Profile.objects.get(user=self.user)
        now = timezone.now()
        profile.install_prompt_dismissed_at = now - timedelta(hours=23)
        self.assertFalse(should_show_install_prompt(profile, now=now))
        profile.install_prompt_dismissed_at = now - timedelta(hours=24)
        self.assertTrue(should_show_install_prompt(profile, now=now))


class TeamTests(TestCase):
    """Test team management endpoints"""

    def setUp(self):
        cache.clear()
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_team_list_requires_admin(self):
        member = TestDataFactory.create_team_member()
        self.client.authenticate_user(member)
        response = self.client.get('/api/v1/team/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_add_team_member(self):
        user = TestDataFactory.create_user()
        response = self.client.post('/api/v1/team/add/', {'user_id': user.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(UserRole.objects.filter(user=user, role='team').exists())

        response = self.client.post('/api/v1/team/add/', {'user_id': user.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_available_excludes_team(self):
        member = TestDataFactory.create_team_member()
        outsider = TestDataFactory.create_user()
        response = self.client.get('/api/v1/team/available/')
        ids = [row['id'] for row in response.data]
        self.assertIn(outsider.id, ids)
        self.assertNotIn(member.id, ids)

    def test_set_role_replaces_roles(self):
        member = TestDataFactory.create_team_member()
        response = self.client.post(f'/api/v1/team/{member.id}/role/', {'role': 'designer'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(list(member.roles.values_list('role', flat=True)), ['designer'])
        self.assertTrue(AuditLog.objects.filter(action='role_change', object_id=str(member.id)).exists())

    def test_set_department(self):
        member = TestDataFactory.create_team_member(department='developers')
        response = self.client.post(f'/api/v1/team/{member.id}/department/', {'department': 'advertising'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Profile.objects.get(user=member).department, 'advertising')

    def test_set_unknown_department(self):
        member = TestDataFactory.create_team_member()
        response = self.client.post(f'/api/v1/team/{member.id}/department/', {'department': 'sales'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class PresenceTests(TestCase):
    """Test online presence tracking"""

    def setUp(self):
        cache.clear()
        self.member = TestDataFactory.create_team_member()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.member)

    def test_heartbeat_and_leave(self):
        self.client.post('/api/v1/presence/heartbeat/')
        response = self.client.get('/api/v1/presence/')
        self.assertIn(self.member.id, response.data['online_user_ids'])
        self.assertEqual([m['id'] for m in response.data['online']], [self.member.id])

        self.client.post('/api/v1/presence/leave/')
        response = self.client.get('/api/v1/presence/')
        self.assertNotIn(self.member.id, response.data['online_user_ids'])

    def test_presence_expires(self):
        presence.track(self.member.id, now=1000)
        self.assertIn(self.member.id, presence.online_user_ids(now=1000 + presence.PRESENCE_TTL_SECONDS - 1))
        self.assertNotIn(self.member.id, presence.online_user_ids(now=1000 + presence.PRESENCE_TTL_SECONDS))

    def test_users_tracked_independently(self):
        other = TestDataFactory.create_team_member()
        presence.track(self.member.id)
        presence.track(other.id)
        self.assertEqual(presence.online_user_ids([self.member.id, other.id]), {self.member.id, other.id})

        presence.untrack(other.id)
        self.assertTrue(presence.is_online(self.member.id))
        self.assertFalse(presence.is_online(other.id))


class ChangeFeedTests(TestCase):
    """Test the realtime change feed"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_insert_update_delete_events(self):
        cursor = latest_cursor()
        created = TestDataFactory.create_client(created_by=self.user)
        created.notes = 'updated'
        created.save()
        created_id = created.id
        created.delete()

        events, _ = get_changes(since=cursor, tables=['clients'])
        self.assertEqual([e.event for e in events], ['INSERT', 'UPDATE', 'DELETE'])
        self.assertTrue(all(e.record_id == str(created_id) for e in events))

    def test_suspended_feed_records_nothing(self):
        cursor = latest_cursor()
        with suspend_change_feed():
            TestDataFactory.create_client(created_by=self.user)
        events, new_cursor = get_changes(since=cursor, tables=['clients'])
        self.assertEqual(events, [])
        self.assertEqual(new_cursor, cursor)

    def test_poll_endpoint(self):
        response = self.client.get('/api/v1/realtime/changes/')
        self.assertEqual(response.data['events'], [])
        cursor = response.data['cursor']

        TestDataFactory.create_project(created_by=self.user)
        response = self.client.get(f'/api/v1/realtime/changes/?since={cursor}&tables=projects')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['events']), 1)
        self.assertEqual(response.data['events'][0]['table'], 'projects')
        self.assertGreater(response.data['cursor'], cursor)

    def test_poll_rejects_unknown_table(self):
        response = self.client.get('/api/v1/realtime/changes/?since=0&tables=auth_user')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_poll_rejects_bad_cursor(self):
        response = self.client.get('/api/v1/realtime/changes/?since=abc')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class ActivityTests(TestCase):
    """Test the team activity feed"""

    def setUp(self):
        self.member = TestDataFactory.create_team_member()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.member)

    def test_feed_is_limited_to_20(self):
        for i in range(25):
            log_activity(self.member, 'task', f'Completed task {i}')
        response = self.client.get('/api/v1/activity/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 20)

    def test_filter_by_project(self):
        project = TestDataFactory.create_project(created_by=self.member)
        log_activity(self.member, 'project', 'Assigned', project=project)
        log_activity(self.member, 'task', 'Elsewhere')
        response = self.client.get(f'/api/v1/activity/?project={project.id}')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(TeamActivity.objects.count(), 2)


class AuditLogTests(TestCase):
    """Test audit log endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_client_create_is_audited(self):
        self.client.post('/api/v1/clients/', {'name': 'Audited Co'}, format='json')
        response = self.client.get('/api/v1/audit-logs/?action=create')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(any(row['object_name'] == 'Audited Co' for row in response.data))

    def test_non_admin_forbidden(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class GlobalSearchTests(TestCase):
    """Test the global search endpoint"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_short_query_returns_nothing(self):
        response = self.client.get('/api/v1/search/?q=a')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['projects'], [])

    def test_search_only_own_rows(self):
        other = TestDataFactory.create_user()
        TestDataFactory.create_project(created_by=self.user, name='Website Redesign')
        TestDataFactory.create_project(created_by=other, name='Website Launch')
        TestDataFactory.create_client(created_by=self.user, name='Websmith')
        response = self.client.get('/api/v1/search/?q=web')
        self.assertEqual(len(response.data['projects']), 1)
        self.assertEqual(len(response.data['clients']), 1)
        self.assertEqual(response.data['total'], 2)

    def test_search_limited_to_five(self):
        for i in range(7):
            TestDataFactory.create_project(created_by=self.user, name=f'Campaign {i}')
        response = self.client.get('/api/v1/search/?q=campaign')
        self.assertEqual(len(response.data['projects']), 5)


class CommandTests(TestCase):
    """Test management commands"""

    def test_grant_role(self):
        user = TestDataFactory.create_user(username='promote_me')
        out = StringIO()
        call_command('grant_role', 'promote_me', 'admin', stdout=out)
        self.assertTrue(UserRole.objects.filter(user=user, role='admin').exists())

    def test_grant_role_unknown_user(self):
        with self.assertRaises(CommandError):
            call_command('grant_role', 'nobody_here', 'admin', stdout=StringIO())

    def test_prune_change_events(self):
        TestDataFactory.create_client()
        old = ChangeEvent.objects.create(table='clients', event='INSERT', record_id='1')
        ChangeEvent.objects.filter(pk=old.pk).update(created_at=timezone.now() - timedelta(days=30))
        call_command('prune_change_events', '--days', '7', stdout=StringIO())
        self.assertFalse(ChangeEvent.objects.filter(pk=old.pk).exists())
        self.assertTrue(ChangeEvent.objects.exists())
