import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from django.db import transaction
from django.db.models import Count, Q
from django.utils import timezone

from agencyhub.core.permissions import IsPortalAdmin, is_portal_admin, is_team_member, get_user_department
from agencyhub.core.utils import create_audit_log, log_activity, deletion_confirmed, CONFIRMATION_REQUIRED
from agencyhub.documents.storage import DOCUMENTS_BUCKET, upload_to_bucket, remove_object
from .filters import ProjectFilter, ProposalFilter
from .models import Project, Task, ProjectSubmission, ProjectProposal
from .serializers import (
    ProjectSerializer, TaskSerializer, TaskMoveSerializer, ProjectAssignSerializer,
    ProjectSubmissionSerializer, ProjectProposalSerializer, ProposalRejectSerializer,
)

logger = logging.getLogger('agencyhub.projects')


def get_visible_projects(user):
    """Admins and team members see every project; clients see the ones they created"""
    queryset = Project.objects.select_related('client', 'assigned_team__profile', 'created_by__profile')
    if is_portal_admin(user) or is_team_member(user):
        return queryset
    return queryset.filter(created_by=user)


def get_visible_tasks(user):
    queryset = Task.objects.select_related('project', 'assigned_to__profile')
    if is_portal_admin(user) or is_team_member(user):
        return queryset
    return queryset.filter(project__created_by=user)


def can_edit_project(user, project):
    return (
        is_portal_admin(user)
        or project.created_by_id == user.id
        or project.assigned_team_id == user.id
    )


# Project views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def project_list_create(request):
    """List projects or create a new project"""
    try:
        if request.method == 'GET':
            filterset = ProjectFilter(request.query_params, queryset=get_visible_projects(request.user))
            if not filterset.is_valid():
                return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
            serializer = ProjectSerializer(filterset.qs.order_by('-created_at'), many=True)
            return Response(serializer.data)

        serializer = ProjectSerializer(data=request.data)
        if serializer.is_valid():
            project = serializer.save(created_by=request.user)
            logger.info(f"Project '{project.name}' created by {request.user.username}")
            create_audit_log(request=request, action='create', model_name='Project',
                             object_id=project.id, object_name=project.name)
            log_activity(request.user, 'project', f"Created project: {project.name}", project=project)
            return Response(ProjectSerializer(project).data, status=status.HTTP_201_CREATED)
        logger.warning(f"Project creation validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    except Exception as e:
        logger.error(f"Unexpected error in project_list_create: {str(e)}", exc_info=True)
        return Response({'error': 'An unexpected error occurred'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def project_detail(request, pk):
    """Retrieve, update or delete a project"""
    project = get_object_or_404(get_visible_projects(request.user), pk=pk)

    if request.method == 'GET':
        return Response(ProjectSerializer(project).data)

    if request.method in ['PUT', 'PATCH']:
        if not can_edit_project(request.user, project):
            logger.warning(f"User {request.user.username} attempted to edit project {pk} without permission")
            return Response({'error': 'You do not have permission to edit this project'}, status=status.HTTP_403_FORBIDDEN)
        old_status = project.status
        serializer = ProjectSerializer(project, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            changes = {'status': {'from': old_status, 'to': project.status}} if old_status != project.status else {}
            logger.info(f"Project {pk} updated by {request.user.username}")
            create_audit_log(request=request, action='update', model_name='Project',
                             object_id=project.id, object_name=project.name, changes=changes)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    # DELETE
    if not (is_portal_admin(request.user) or project.created_by_id == request.user.id):
        return Response({'error': 'Only administrators or the creator can delete a project'}, status=status.HTTP_403_FORBIDDEN)
    if not deletion_confirmed(request):
        return Response(CONFIRMATION_REQUIRED, status=status.HTTP_400_BAD_REQUEST)
    project_name = project.name
    project.delete()
    logger.info(f"Project '{project_name}' deleted by {request.user.username}")
    create_audit_log(request=request, action='delete', model_name='Project',
                     object_id=pk, object_name=project_name)
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPortalAdmin])
def project_assign(request, pk):
    """Assign a project to a team member with a deadline in hours"""
    project = get_object_or_404(Project, pk=pk)
    serializer = ProjectAssignSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    member = serializer.validated_data['user']
    deadline_hours = serializer.validated_data['deadline_hours']
    project.assigned_team = member
    project.deadline_hours = deadline_hours
    project.status = 'in-progress'
    project.save(update_fields=['assigned_team', 'deadline_hours', 'status', 'updated_at'])

    log_activity(member, 'project', f"Assigned to project: {project.name} ({deadline_hours}h deadline)", project=project)
    create_audit_log(request=request, action='assign', model_name='Project', object_id=project.id,
                     object_name=project.name, changes={'assigned_to': member.username, 'deadline_hours': deadline_hours})
    logger.info(f"Project {project.id} assigned to {member.username} by {request.user.username}")
    return Response(ProjectSerializer(project).data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def project_submissions(request, pk):
    """List submissions or submit progress for an assigned project"""
    project = get_object_or_404(get_visible_projects(request.user), pk=pk)

    if request.method == 'GET':
        submissions = ProjectSubmission.objects.filter(project=project).select_related('submitted_by__profile')
        return Response(ProjectSubmissionSerializer(submissions, many=True).data)

    if project.assigned_team_id != request.user.id and not is_portal_admin(request.user):
        logger.warning(f"User {request.user.username} attempted to submit work for project {pk} without being assigned")
        return Response({'error': 'Only the assigned team member can submit work for this project'},
                        status=status.HTTP_403_FORBIDDEN)

    serializer = ProjectSubmissionSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    uploaded = serializer.validated_data.pop('file', None)
    file_info = {}
    try:
        if uploaded:
            stored = upload_to_bucket(DOCUMENTS_BUCKET, request.user.id, uploaded, sub=str(project.id))
            file_info = {key: stored[key] for key in ('file_path', 'file_name', 'file_size')}

        progress = serializer.validated_data.get('progress', project.progress)
        notes = serializer.validated_data.get('notes') or None
        with transaction.atomic():
            submission = serializer.save(project=project, submitted_by=request.user, progress=progress, **file_info)
            project.progress = progress
            project.submitted_at = timezone.now() if progress == 100 else None
            project.submission_notes = notes
            project.save(update_fields=['progress', 'submitted_at', 'submission_notes', 'updated_at'])

        log_activity(
            request.user, 'submission',
            f"Submitted {submission.submission_type} for project: {project.name} ({progress}% complete)",
            project=project,
        )
        logger.info(f"User {request.user.username} submitted {progress}% for project {project.id}")
        return Response(ProjectSubmissionSerializer(submission).data, status=status.HTTP_201_CREATED)
    except Exception as e:
        logger.error(f"Error submitting work for project {pk}: {str(e)}", exc_info=True)
        remove_object(file_info.get('file_path'))
        return Response({'error': f'Error submitting work: {str(e)}'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPortalAdmin])
def project_overview(request):
    """Management overview of all projects with status counts"""
    queryset = Project.objects.select_related('client', 'assigned_team__profile', 'created_by__profile')

    counts = queryset.aggregate(
        total=Count('id'),
        completed=Count('id', filter=Q(status='completed')),
        in_progress=Count('id', filter=Q(status='in-progress')),
        planning=Count('id', filter=Q(status='planning')),
        submitted=Count('id', filter=Q(submitted_at__isnull=False)),
    )

    status_filter = request.query_params.get('status')
    if status_filter and status_filter != 'all':
        if status_filter == 'submitted':
            queryset = queryset.filter(submitted_at__isnull=False)
        else:
            queryset = queryset.filter(status=status_filter)
    department = request.query_params.get('department')
    if department and department != 'all':
        queryset = queryset.filter(department=department)

    return Response({
        'counts': counts,
        'projects': ProjectSerializer(queryset.order_by('-created_at'), many=True).data,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_projects(request):
    """Projects assigned to the current user"""
    projects = Project.objects.filter(assigned_team=request.user).select_related('client', 'created_by__profile')
    return Response(ProjectSerializer(projects.order_by('-updated_at'), many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def client_portal(request):
    """Client portal: own projects plus the latest documents and designs"""
    from agencyhub.documents.models import Document, Design
    from agencyhub.documents.serializers import DocumentSerializer, DesignSerializer

    projects = Project.objects.filter(created_by=request.user).select_related('client').order_by('-created_at')
    documents = Document.objects.filter(created_by=request.user).select_related('project').order_by('-created_at')[:5]
    designs = Design.objects.filter(created_by=request.user).select_related('project').order_by('-created_at')[:5]
    return Response({
        'projects': ProjectSerializer(projects, many=True).data,
        'documents': DocumentSerializer(documents, many=True).data,
        'designs': DesignSerializer(designs, many=True).data,
    })


# Task views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def task_list_create(request, project_pk):
    """Kanban tasks for a project"""
    project = get_object_or_404(get_visible_projects(request.user), pk=project_pk)

    if request.method == 'GET':
        tasks = Task.objects.filter(project=project).select_related('project', 'assigned_to__profile')
        status_filter = request.query_params.get('status')
        if status_filter:
            tasks = tasks.filter(status=status_filter)
        return Response(TaskSerializer(tasks, many=True).data)

    serializer = TaskSerializer(data=request.data)
    if serializer.is_valid():
        task = serializer.save(project=project, created_by=request.user)
        logger.info(f"Task '{task.title}' created on project {project.id} by {request.user.username}")
        log_activity(request.user, 'task', f"Created task: {task.title}", project=project)
        return Response(TaskSerializer(task).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def task_detail(request, pk):
    """Retrieve, update or delete a task"""
    task = get_object_or_404(get_visible_tasks(request.user), pk=pk)

    if request.method == 'GET':
        return Response(TaskSerializer(task).data)

    if request.method in ['PUT', 'PATCH']:
        serializer = TaskSerializer(task, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            logger.info(f"Task {pk} updated by {request.user.username}")
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    if not deletion_confirmed(request):
        return Response(CONFIRMATION_REQUIRED, status=status.HTTP_400_BAD_REQUEST)
    task.delete()
    logger.info(f"Task {pk} deleted by {request.user.username}")
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def task_move(request, pk):
    """Move a task to another kanban column"""
    task = get_object_or_404(get_visible_tasks(request.user), pk=pk)
    serializer = TaskMoveSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    old_status = task.status
    task.status = serializer.validated_data['status']
    task.save(update_fields=['status', 'updated_at'])
    logger.info(f"Task {pk} moved from {old_status} to {task.status} by {request.user.username}")
    return Response(TaskSerializer(task).data)


# Proposal views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def proposal_list_create(request):
    """
    List or create project proposals.
    Admins see pending proposals unless a status is requested; other users
    see their department's proposals and their own.
    """
    if request.method == 'GET':
        queryset = ProjectProposal.objects.select_related('proposed_by__profile', 'approved_by__profile')
        params = request.query_params.copy()
        if is_portal_admin(request.user):
            if 'status' not in params:
                params['status'] = 'pending'
            elif params.get('status') == 'all':
                params.pop('status')
        else:
            department = get_user_department(request.user)
            visible = Q(proposed_by=request.user)
            if department:
                visible |= Q(department=department)
            queryset = queryset.filter(visible)
        filterset = ProposalFilter(params, queryset=queryset)
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        return Response(ProjectProposalSerializer(filterset.qs.order_by('-created_at'), many=True).data)

    serializer = ProjectProposalSerializer(data=request.data)
    if serializer.is_valid():
        proposal = serializer.save(proposed_by=request.user, status='pending')
        logger.info(f"Proposal '{proposal.title}' submitted by {request.user.username} for {proposal.department}")
        return Response(ProjectProposalSerializer(proposal).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPortalAdmin])
def proposal_approve(request, pk):
    """Approve a pending proposal and create its project"""
    get_object_or_404(ProjectProposal, pk=pk)
    with transaction.atomic():
        proposal = ProjectProposal.objects.select_for_update().get(pk=pk)
        if proposal.status != 'pending':
            return Response({'error': f'Proposal is already {proposal.status}'}, status=status.HTTP_400_BAD_REQUEST)

        project = Project.objects.create(
            name=proposal.title,
            description=proposal.description,
            department=proposal.department,
            status='planning',
            created_by=request.user,
        )
        proposal.status = 'approved'
        proposal.approved_by = request.user
        proposal.approved_at = timezone.now()
        proposal.project = project
        proposal.save(update_fields=['status', 'approved_by', 'approved_at', 'project', 'updated_at'])

    logger.info(f"Proposal {pk} approved by {request.user.username}; created project {project.id}")
    create_audit_log(request=request, action='approve', model_name='ProjectProposal', object_id=proposal.id,
                     object_name=proposal.title, changes={'project_id': project.id})
    return Response({
        'proposal': ProjectProposalSerializer(proposal).data,
        'project': ProjectSerializer(project).data,
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPortalAdmin])
def proposal_reject(request, pk):
    """Reject a pending proposal with an optional reason"""
    serializer = ProposalRejectSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    get_object_or_404(ProjectProposal, pk=pk)
    with transaction.atomic():
        proposal = ProjectProposal.objects.select_for_update().get(pk=pk)
        if proposal.status != 'pending':
            return Response({'error': f'Proposal is already {proposal.status}'}, status=status.HTTP_400_BAD_REQUEST)
        proposal.status = 'rejected'
        proposal.rejection_reason = serializer.validated_data.get('reason') or None
        proposal.save(update_fields=['status', 'rejection_reason', 'updated_at'])

    logger.info(f"Proposal {pk} rejected by {request.user.username}")
    create_audit_log(request=request, action='reject', model_name='ProjectProposal', object_id=proposal.id,
                     object_name=proposal.title, changes={'reason': proposal.rejection_reason})
    return Response(ProjectProposalSerializer(proposal).data)
