from rest_framework import serializers
from .models import GitHubRepository, GitHubCommit


class GitHubRepositorySerializer(serializers.ModelSerializer):
    commit_count = serializers.IntegerField(read_only=True, default=None)

    class Meta:
        model = GitHubRepository
        fields = ['id', 'name', 'full_name', 'description', 'html_url', 'default_branch', 'language',
                  'stars_count', 'forks_count', 'is_private', 'last_synced_at', 'commit_count',
                  'created_at', 'updated_at']


class GitHubCommitSerializer(serializers.ModelSerializer):
    short_sha = serializers.SerializerMethodField()

    class Meta:
        model = GitHubCommit
        fields = ['id', 'repository', 'sha', 'short_sha', 'message', 'author_name', 'author_email',
                  'committed_at', 'html_url']

    def get_short_sha(self, obj):
        return obj.sha[:7]


class SyncRequestSerializer(serializers.Serializer):
    ACTION_CHOICES = [('fetchRepos', 'Fetch repositories'), ('fetchCommits', 'Fetch commits')]

    action = serializers.ChoiceField(choices=ACTION_CHOICES)
    github_token = serializers.CharField(error_messages={'required': 'GitHub token is required',
                                                         'blank': 'GitHub token is required'})
    repo_full_name = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        if attrs['action'] == 'fetchCommits' and not attrs.get('repo_full_name'):
            raise serializers.ValidationError({'repo_full_name': 'Repository is required to fetch commits'})
        return attrs
