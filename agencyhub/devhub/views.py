import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from django.db.models import Count

from agencyhub.core.utils import create_audit_log
from .github_client import GitHubClient, GitHubSyncError
from .models import GitHubRepository, GitHubCommit
from .serializers import GitHubRepositorySerializer, GitHubCommitSerializer, SyncRequestSerializer
from .sync import sync_repositories, sync_commits

logger = logging.getLogger('agencyhub.devhub')


def first_error(errors):
    """Flatten serializer errors to one message"""
    if not errors:
        return 'Invalid request'
    messages = next(iter(errors.values()))
    if isinstance(messages, (list, tuple)) and messages:
        return str(messages[0])
    return str(messages)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def github_sync(request):
    """Pull repositories or commits from GitHub with the user's token"""
    serializer = SyncRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({'error': first_error(serializer.errors)}, status=status.HTTP_400_BAD_REQUEST)

    action = serializer.validated_data['action']
    try:
        client = GitHubClient(serializer.validated_data['github_token'])
        if action == 'fetchRepos':
            count = sync_repositories(request.user, client)
        else:
            count = sync_commits(request.user, client, serializer.validated_data['repo_full_name'])
    except GitHubSyncError as e:
        logger.warning(f"GitHub sync ({action}) failed for {request.user.username}: {str(e)}")
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except (KeyError, TypeError) as e:
        logger.error(f"Unexpected GitHub payload during {action}: {str(e)}", exc_info=True)
        return Response({'error': 'GitHub API returned an unexpected payload'}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request=request, action='sync', model_name='GitHubRepository',
                     object_id=request.user.id, object_name=serializer.validated_data.get('repo_full_name') or 'repositories',
                     changes={'action': action, 'count': count})
    return Response({'success': True, 'action': action, 'count': count})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def repository_list(request):
    """The current user's synced repositories"""
    repositories = GitHubRepository.objects.filter(user=request.user).annotate(commit_count=Count('commits'))
    language = request.query_params.get('language')
    if language:
        repositories = repositories.filter(language=language)
    return Response(GitHubRepositorySerializer(repositories.order_by('-updated_at'), many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def repository_commits(request, pk):
    repository = get_object_or_404(GitHubRepository, pk=pk, user=request.user)
    commits = GitHubCommit.objects.filter(repository=repository).order_by('-committed_at')
    return Response(GitHubCommitSerializer(commits, many=True).data)
