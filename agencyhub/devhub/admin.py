from django.contrib import admin
from .models import GitHubRepository, GitHubCommit


@admin.register(GitHubRepository)
class GitHubRepositoryAdmin(admin.ModelAdmin):
    list_display = ['full_name', 'user', 'language', 'stars_count', 'is_private', 'last_synced_at']
    list_filter = ['language', 'is_private']
    search_fields = ['full_name', 'user__username']


@admin.register(GitHubCommit)
class GitHubCommitAdmin(admin.ModelAdmin):
    list_display = ['sha', 'repository', 'author_name', 'committed_at']
    search_fields = ['sha', 'message', 'author_name']
    ordering = ['-committed_at']
