"""
Test suite for the dev hub module
Tests: GitHub client, Repository/commit sync, Sync endpoint
"""
from unittest.mock import Mock, patch

import requests
from django.test import TestCase
from rest_framework import status

from agencyhub.core.models import ChangeEvent, AuditLog
from agencyhub.core.realtime import latest_cursor
from agencyhub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from agencyhub.devhub.github_client import GitHubClient, GitHubSyncError
from agencyhub.devhub.models import GitHubRepository, GitHubCommit
from agencyhub.devhub.sync import sync_repositories, sync_commits


def repo_payload(name, **extra):
    payload = {
        'name': name,
        'full_name': f'agency/{name}',
        'description': f'{name} repository',
        'html_url': f'https://github.com/agency/{name}',
        'default_branch': 'main',
        'language': 'Python',
        'stargazers_count': 3,
        'forks_count': 1,
        'private': False,
    }
    payload.update(extra)
    return payload


def commit_payload(sha, message='Initial commit'):
    return {
        'sha': sha,
        'html_url': f'https://github.com/agency/site/commit/{sha}',
        'commit': {
            'message': message,
            'author': {'name': 'Dev', 'email': 'dev@agency.test', 'date': '2025-03-01T10:00:00Z'},
        },
    }


def fake_response(payload=None, ok=True, status_code=200, reason='OK'):
    response = Mock()
    response.ok = ok
    response.status_code = status_code
    response.reason = reason
    response.json.return_value = payload
    return response


class GitHubClientTests(TestCase):
    """Test the GitHub REST client"""

    def test_requires_token(self):
        with self.assertRaises(GitHubSyncError):
            GitHubClient('')

    def test_list_repositories_request(self):
        session = Mock()
        session.get.return_value = fake_response([repo_payload('site')])
        repos = GitHubClient('tok', session=session).list_repositories()
        self.assertEqual(repos[0]['name'], 'site')
        args, kwargs = session.get.call_args
        self.assertTrue(args[0].endswith('/user/repos'))
        self.assertEqual(kwargs['params'], {'per_page': 100, 'sort': 'updated'})
        self.assertEqual(kwargs['headers']['Authorization'], 'token tok')

    def test_http_error(self):
        session = Mock()
        session.get.return_value = fake_response(ok=False, status_code=401, reason='Unauthorized')
        with self.assertRaisesMessage(GitHubSyncError, 'GitHub API error: Unauthorized'):
            GitHubClient('bad', session=session).list_commits('agency/site')

    def test_timeout(self):
        session = Mock()
        session.get.side_effect = requests.exceptions.Timeout()
        with self.assertRaisesMessage(GitHubSyncError, 'timed out'):
            GitHubClient('tok', session=session).list_repositories()


class SyncTests(TestCase):
    """Test upserting GitHub data"""

    def setUp(self):
        self.user = TestDataFactory.create_team_member()
        self.client_mock = Mock()

    def test_sync_repositories_upserts(self):
        self.client_mock.list_repositories.return_value = [repo_payload('site'), repo_payload('api')]
        self.assertEqual(sync_repositories(self.user, self.client_mock), 2)

        self.client_mock.list_repositories.return_value = [repo_payload('site', stargazers_count=10)]
        sync_repositories(self.user, self.client_mock)
        self.assertEqual(GitHubRepository.objects.filter(user=self.user).count(), 2)
        self.assertEqual(GitHubRepository.objects.get(full_name='agency/site').stars_count, 10)

    def test_sync_emits_single_change_event(self):
        cursor = latest_cursor()
        self.client_mock.list_repositories.return_value = [repo_payload(f'repo{i}') for i in range(5)]
        sync_repositories(self.user, self.client_mock)
        events = ChangeEvent.objects.filter(id__gt=cursor, table='github_repositories')
        self.assertEqual(events.count(), 1)

    def test_sync_commits(self):
        self.client_mock.list_repositories.return_value = [repo_payload('site')]
        sync_repositories(self.user, self.client_mock)
        self.client_mock.list_commits.return_value = [commit_payload('a' * 40), commit_payload('b' * 40, 'Fix')]
        self.assertEqual(sync_commits(self.user, self.client_mock, 'agency/site'), 2)
        sync_commits(self.user, self.client_mock, 'agency/site')
        self.assertEqual(GitHubCommit.objects.count(), 2)
        self.assertIsNotNone(GitHubRepository.objects.get(full_name='agency/site').last_synced_at)

    def test_sync_commits_unknown_repository(self):
        with self.assertRaisesMessage(GitHubSyncError, 'Repository not found'):
            sync_commits(self.user, self.client_mock, 'agency/missing')
        self.client_mock.list_commits.assert_not_called()


class SyncEndpointTests(TestCase):
    """Test the dev hub endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_team_member()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_missing_token(self):
        response = self.client.post('/api/v1/devhub/sync/', {'action': 'fetchRepos'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'GitHub token is required')

    def test_fetch_commits_requires_repository(self):
        response = self.client.post('/api/v1/devhub/sync/', {
            'action': 'fetchCommits', 'github_token': 'tok'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @patch('agencyhub.devhub.views.GitHubClient')
    def test_fetch_repos(self, client_cls):
        client_cls.return_value.list_repositories.return_value = [repo_payload('site')]
        response = self.client.post('/api/v1/devhub/sync/', {
            'action': 'fetchRepos', 'github_token': 'tok'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'success': True, 'action': 'fetchRepos', 'count': 1})
        client_cls.assert_called_once_with('tok')
        self.assertTrue(AuditLog.objects.filter(action='sync').exists())

        response = self.client.get('/api/v1/devhub/repositories/')
        self.assertEqual(response.data[0]['full_name'], 'agency/site')
        self.assertEqual(response.data[0]['commit_count'], 0)

    @patch('agencyhub.devhub.views.GitHubClient')
    def test_github_failure_returns_error(self, client_cls):
        client_cls.return_value.list_repositories.side_effect = GitHubSyncError('GitHub API error: Unauthorized')
        response = self.client.post('/api/v1/devhub/sync/', {
            'action': 'fetchRepos', 'github_token': 'bad'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'GitHub API error: Unauthorized')

    def test_repositories_are_per_user(self):
        other = TestDataFactory.create_team_member()
        repo = GitHubRepository.objects.create(user=other, name='x', full_name='other/x', html_url='https://github.com/other/x')
        response = self.client.get('/api/v1/devhub/repositories/')
        self.assertEqual(response.data, [])
        response = self.client.get(f'/api/v1/devhub/repositories/{repo.id}/commits/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
