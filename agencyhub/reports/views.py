import csv
import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.http import HttpResponse
from django.utils import timezone

from agencyhub.core.models import DEPARTMENT_LABELS
from agencyhub.core.permissions import IsPortalAdmin, is_portal_admin, get_user_department
from agencyhub.projects.models import Project
from agencyhub.projects.serializers import ProjectSerializer
from .analytics import get_dashboard_counters, get_analytics, department_stats, EXPORTABLE_DATASETS

logger = logging.getLogger('agencyhub.reports')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard(request):
    """Dashboard counters"""
    try:
        return Response(get_dashboard_counters())
    except Exception as e:
        logger.error(f"Error building dashboard counters: {str(e)}", exc_info=True)
        return Response({'error': 'An unexpected error occurred'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPortalAdmin])
def analytics(request):
    """Charts data: projects by status, tasks by priority, monthly activity, team performance"""
    try:
        return Response(get_analytics())
    except Exception as e:
        logger.error(f"Error building analytics: {str(e)}", exc_info=True)
        return Response({'error': 'An unexpected error occurred'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPortalAdmin])
def analytics_export(request):
    """Download one analytics dataset as CSV"""
    dataset = request.query_params.get('dataset', 'monthly_activity')
    if dataset not in EXPORTABLE_DATASETS:
        return Response({'error': f'Unknown dataset: {dataset}'}, status=status.HTTP_400_BAD_REQUEST)

    rows = get_analytics()[dataset]
    if not rows:
        return Response({'error': 'No data available to export'}, status=status.HTTP_400_BAD_REQUEST)

    filename = f"{dataset.replace('_', '-')}-{timezone.localdate().isoformat()}.csv"
    response = HttpResponse(content_type='text/csv')
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    writer = csv.DictWriter(response, fieldnames=list(rows[0].keys()))
    writer.writeheader()
    writer.writerows(rows)
    logger.info(f"User {request.user.username} exported {dataset} ({len(rows)} rows)")
    return response


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def department_dashboard(request, department):
    """Department stats with its most recent projects"""
    if department not in DEPARTMENT_LABELS:
        return Response({'error': f'Unknown department: {department}'}, status=status.HTTP_404_NOT_FOUND)
    if not is_portal_admin(request.user) and get_user_department(request.user) != department:
        logger.warning(f"User {request.user.username} attempted to open the {department} dashboard")
        return Response({'error': 'You can only view your own department'}, status=status.HTTP_403_FORBIDDEN)

    stats = department_stats(department)
    recent = Project.objects.filter(department=department).select_related(
        'client', 'assigned_team__profile', 'created_by__profile'
    ).order_by('-created_at')[:10]
    stats['recent_projects'] = ProjectSerializer(recent, many=True).data
    return Response(stats)
