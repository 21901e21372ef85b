"""Upsert GitHub data into the local mirror tables"""
import logging
from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from agencyhub.core.realtime import suspend_change_feed, emit_change
from .github_client import GitHubClient, GitHubSyncError
from .models import GitHubRepository, GitHubCommit

logger = logging.getLogger(__name__)


def sync_repositories(user, client: GitHubClient) -> int:
    """Fetch the user's repositories and upsert them on (user, full_name)"""
    repos = client.list_repositories()
    if not isinstance(repos, list):
        raise GitHubSyncError('GitHub API returned an unexpected repository list')

    now = timezone.now()
    with suspend_change_feed(), transaction.atomic():
        for repo in repos:
            GitHubRepository.objects.update_or_create(
                user=user,
                full_name=repo['full_name'],
                defaults={
                    'name': repo['name'],
                    'description': repo.get('description'),
                    'html_url': repo['html_url'],
                    'default_branch': repo.get('default_branch'),
                    'language': repo.get('language'),
                    'stars_count': repo.get('stargazers_count') or 0,
                    'forks_count': repo.get('forks_count') or 0,
                    'is_private': bool(repo.get('private')),
                    'last_synced_at': now,
                },
            )
    if repos:
        emit_change('github_repositories', 'UPDATE', f'user:{user.id}')
    logger.info(f"Synced {len(repos)} repositories for {user.username}")
    return len(repos)


def sync_commits(user, client: GitHubClient, repo_full_name: str) -> int:
    """Fetch the latest commits of one of the user's repositories and upsert them on (repository, sha)"""
    try:
        repository = GitHubRepository.objects.get(user=user, full_name=repo_full_name)
    except GitHubRepository.DoesNotExist:
        raise GitHubSyncError('Repository not found')

    commits = client.list_commits(repo_full_name)
    if not isinstance(commits, list):
        raise GitHubSyncError('GitHub API returned an unexpected commit list')

    with suspend_change_feed(), transaction.atomic():
        for item in commits:
            commit = item.get('commit') or {}
            author = commit.get('author') or {}
            committed_at = parse_datetime(author.get('date') or '') or timezone.now()
            GitHubCommit.objects.update_or_create(
                repository=repository,
                sha=item['sha'],
                defaults={
                    'user': user,
                    'message': commit.get('message') or '',
                    'author_name': author.get('name') or 'unknown',
                    'author_email': author.get('email'),
                    'committed_at': committed_at,
                    'html_url': item.get('html_url') or repository.html_url,
                },
            )
        repository.last_synced_at = timezone.now()
        repository.save(update_fields=['last_synced_at', 'updated_at'])

    emit_change('github_commits', 'UPDATE', f'repository:{repository.id}')
    logger.info(f"Synced {len(commits)} commits of {repo_full_name} for {user.username}")
    return len(commits)
