from django.db import models
from agencyhub.core.models import User


class GitHubRepository(models.Model):
    """Repository mirrored from a user's GitHub account"""
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='github_repositories')
    name = models.CharField(max_length=255)
    full_name = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    html_url = models.URLField(max_length=500)
    default_branch = models.CharField(max_length=255, blank=True, null=True)
    language = models.CharField(max_length=100, blank=True, null=True)
    stars_count = models.PositiveIntegerField(default=0)
    forks_count = models.PositiveIntegerField(default=0)
    is_private = models.BooleanField(default=False)
    last_synced_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.full_name

    class Meta:
        db_table = 'github_repositories'
        ordering = ['-updated_at']
        constraints = [
            models.UniqueConstraint(fields=['user', 'full_name'], name='unique_user_repository'),
        ]


class GitHubCommit(models.Model):
    repository = models.ForeignKey(GitHubRepository, on_delete=models.CASCADE, related_name='commits')
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='github_commits')
    sha = models.CharField(max_length=40)
    message = models.TextField()
    author_name = models.CharField(max_length=255)
    author_email = models.CharField(max_length=255, blank=True, null=True)
    committed_at = models.DateTimeField()
    html_url = models.URLField(max_length=500)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.sha[:7]} {self.message[:50]}"

    class Meta:
        db_table = 'github_commits'
        ordering = ['-committed_at']
        constraints = [
            models.UniqueConstraint(fields=['repository', 'sha'], name='unique_repository_commit'),
        ]
