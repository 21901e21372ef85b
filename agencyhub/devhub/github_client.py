"""
Minimal GitHub REST API client for the dev hub.
Calls are made with the user's personal access token; nothing is retried.
"""
import os
import requests
import logging
from typing import List, Dict, Any
from django.conf import settings

logger = logging.getLogger(__name__)

GITHUB_API_URL = getattr(
    settings,
    'GITHUB_API_URL',
    os.getenv('GITHUB_API_URL', 'https://api.github.com')
).rstrip('/')

GITHUB_TIMEOUT = getattr(
    settings,
    'GITHUB_TIMEOUT',
    int(os.getenv('GITHUB_TIMEOUT', '15'))
)

GITHUB_USER_AGENT = getattr(
    settings,
    'GITHUB_USER_AGENT',
    os.getenv('GITHUB_USER_AGENT', 'AgencyHub-DevHub')
)

REPOS_PER_PAGE = 100
COMMITS_PER_PAGE = 50


class GitHubSyncError(Exception):
    """Any failure talking to GitHub, with a message safe to show the user"""


class GitHubClient:
    def __init__(self, token: str, session=None):
        if not token:
            raise GitHubSyncError('GitHub token is required')
        self.session = session or requests.Session()
        self.headers = {
            'Authorization': f'token {token}',
            'Accept': 'application/vnd.github.v3+json',
            'User-Agent': GITHUB_USER_AGENT,
        }

    def _get(self, path: str, params: Dict[str, Any]) -> Any:
        url = f"{GITHUB_API_URL}{path}"
        try:
            response = self.session.get(url, headers=self.headers, params=params, timeout=GITHUB_TIMEOUT)
        except requests.exceptions.Timeout:
            logger.warning(f"GitHub request timed out: {url}")
            raise GitHubSyncError('GitHub API request timed out')
        except requests.exceptions.RequestException as e:
            logger.warning(f"GitHub request failed: {url}: {str(e)}")
            raise GitHubSyncError(f'Could not reach GitHub: {str(e)}')

        if not response.ok:
            reason = response.reason or f'HTTP {response.status_code}'
            logger.warning(f"GitHub API error {response.status_code} for {url}")
            raise GitHubSyncError(f'GitHub API error: {reason}')

        try:
            return response.json()
        except ValueError:
            raise GitHubSyncError('GitHub API returned an invalid response')

    def list_repositories(self) -> List[Dict[str, Any]]:
        """The authenticated user's repositories, most recently updated first"""
        return self._get('/user/repos', {'per_page': REPOS_PER_PAGE, 'sort': 'updated'})

    def list_commits(self, repo_full_name: str) -> List[Dict[str, Any]]:
        """Latest commits of a repository"""
        return self._get(f'/repos/{repo_full_name}/commits', {'per_page': COMMITS_PER_PAGE})
