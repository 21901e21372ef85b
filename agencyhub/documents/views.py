import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.http import FileResponse
from django.shortcuts import get_object_or_404
from django.db.models import Q

from agencyhub.core.models import DEPARTMENT_LABELS
from agencyhub.core.permissions import is_portal_admin, is_team_member, get_user_department
from agencyhub.core.utils import create_audit_log, log_activity, deletion_confirmed, CONFIRMATION_REQUIRED
from . import storage
from .models import Document, Design, AdvertisingAsset
from .serializers import DocumentSerializer, DesignSerializer, RecordSerializer, AdvertisingAssetSerializer

logger = logging.getLogger('agencyhub.documents')


def visible_to(user, queryset):
    """Admins and team members see everything; other users see what they created"""
    if is_portal_admin(user) or is_team_member(user):
        return queryset
    return queryset.filter(created_by=user)


def can_modify(user, obj):
    return is_portal_admin(user) or obj.created_by_id == user.id


# Document views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def document_list_create(request):
    """List documents or create one with an optional file"""
    try:
        if request.method == 'GET':
            queryset = visible_to(request.user, Document.objects.select_related('project', 'created_by__profile'))
            project = request.query_params.get('project')
            if project:
                queryset = queryset.filter(project_id=project)
            search = request.query_params.get('search')
            if search:
                queryset = queryset.filter(Q(title__icontains=search) | Q(content__icontains=search))
            return Response(DocumentSerializer(queryset.order_by('-created_at'), many=True).data)

        serializer = DocumentSerializer(data=request.data)
        if not serializer.is_valid():
            logger.warning(f"Document creation validation failed: {serializer.errors}")
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        uploaded = serializer.validated_data.pop('file', None)
        file_info = storage.upload_to_bucket(storage.DOCUMENTS_BUCKET, request.user.id, uploaded) if uploaded else {}
        try:
            document = serializer.save(created_by=request.user, **file_info)
        except Exception:
            storage.remove_object(file_info.get('file_path'))
            raise
        logger.info(f"Document '{document.title}' created by {request.user.username}")
        log_activity(request.user, 'document', f"Created document: {document.title}", project=document.project)
        create_audit_log(request=request, action='create', model_name='Document',
                         object_id=document.id, object_name=document.title)
        return Response(DocumentSerializer(document).data, status=status.HTTP_201_CREATED)
    except Exception as e:
        logger.error(f"Unexpected error in document_list_create: {str(e)}", exc_info=True)
        return Response({'error': 'An unexpected error occurred'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def document_detail(request, pk):
    """Retrieve, update or delete a document"""
    document = get_object_or_404(visible_to(request.user, Document.objects.select_related('project')), pk=pk)

    if request.method == 'GET':
        return Response(DocumentSerializer(document).data)

    if not can_modify(request.user, document):
        return Response({'error': 'You do not have permission to modify this document'}, status=status.HTTP_403_FORBIDDEN)

    if request.method in ['PUT', 'PATCH']:
        serializer = DocumentSerializer(document, data=request.data, partial=request.method == 'PATCH')
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        uploaded = serializer.validated_data.pop('file', None)
        file_info = {}
        old_path = document.file_path
        if uploaded:
            file_info = storage.upload_to_bucket(storage.DOCUMENTS_BUCKET, request.user.id, uploaded)
        serializer.save(**file_info)
        if uploaded and old_path:
            storage.remove_object(old_path)
        logger.info(f"Document {pk} updated by {request.user.username}")
        return Response(serializer.data)

    if not deletion_confirmed(request):
        return Response(CONFIRMATION_REQUIRED, status=status.HTTP_400_BAD_REQUEST)
    file_path, title = document.file_path, document.title
    document.delete()
    storage.remove_object(file_path)
    logger.info(f"Document '{title}' deleted by {request.user.username}")
    create_audit_log(request=request, action='delete', model_name='Document', object_id=pk, object_name=title)
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def document_download(request, pk):
    """Stream the stored file of a document"""
    document = get_object_or_404(visible_to(request.user, Document.objects.all()), pk=pk)
    if not storage.object_exists(document.file_path):
        return Response({'error': 'This document has no stored file'}, status=status.HTTP_404_NOT_FOUND)
    return FileResponse(
        storage.open_object(document.file_path),
        as_attachment=True,
        filename=document.file_name or document.file_path.rsplit('/', 1)[-1],
        content_type=document.file_type or 'application/octet-stream',
    )


# Design views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def design_list_create(request):
    """List designs or upload a new one"""
    try:
        if request.method == 'GET':
            queryset = visible_to(request.user, Design.objects.select_related('project', 'created_by__profile'))
            project = request.query_params.get('project')
            if project:
                queryset = queryset.filter(project_id=project)
            tag = request.query_params.get('tag')
            if tag:
                # JSON containment lookups are not available on every backend
                queryset = [design for design in queryset.order_by('-created_at') if tag in (design.tags or [])]
                return Response(DesignSerializer(queryset, many=True).data)
            return Response(DesignSerializer(queryset.order_by('-created_at'), many=True).data)

        serializer = DesignSerializer(data=request.data)
        if not serializer.is_valid():
            logger.warning(f"Design upload validation failed: {serializer.errors}")
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        uploaded = serializer.validated_data.pop('file')
        stored = storage.upload_to_bucket(storage.DESIGNS_BUCKET, request.user.id, uploaded)
        thumbnail_path = None
        if storage.is_image(stored['file_type']):
            thumbnail_path = storage.create_thumbnail(stored['file_path'], request.user.id)
        try:
            design = serializer.save(
                created_by=request.user,
                file_path=stored['file_path'],
                file_name=stored['file_name'],
                file_size=stored['file_size'],
                thumbnail_path=thumbnail_path,
            )
        except Exception:
            storage.remove_object(stored['file_path'])
            storage.remove_object(thumbnail_path)
            raise
        logger.info(f"Design '{design.title}' uploaded by {request.user.username}")
        log_activity(request.user, 'design', f"Uploaded design: {design.title}", project=design.project)
        return Response(DesignSerializer(design).data, status=status.HTTP_201_CREATED)
    except Exception as e:
        logger.error(f"Unexpected error in design_list_create: {str(e)}", exc_info=True)
        return Response({'error': 'An unexpected error occurred'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def design_detail(request, pk):
    """Retrieve, update or delete a design"""
    design = get_object_or_404(visible_to(request.user, Design.objects.select_related('project')), pk=pk)

    if request.method == 'GET':
        return Response(DesignSerializer(design).data)

    if not can_modify(request.user, design):
        return Response({'error': 'You do not have permission to modify this design'}, status=status.HTTP_403_FORBIDDEN)

    if request.method in ['PUT', 'PATCH']:
        serializer = DesignSerializer(design, data=request.data, partial=request.method == 'PATCH')
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        uploaded = serializer.validated_data.pop('file', None)
        old_paths = []
        file_info = {}
        if uploaded:
            old_paths = [design.file_path, design.thumbnail_path]
            stored = storage.upload_to_bucket(storage.DESIGNS_BUCKET, request.user.id, uploaded)
            file_info = {
                'file_path': stored['file_path'],
                'file_name': stored['file_name'],
                'file_size': stored['file_size'],
                'thumbnail_path': (storage.create_thumbnail(stored['file_path'], request.user.id)
                                   if storage.is_image(stored['file_type']) else None),
            }
        serializer.save(**file_info)
        for path in old_paths:
            storage.remove_object(path)
        logger.info(f"Design {pk} updated by {request.user.username}")
        return Response(serializer.data)

    if not deletion_confirmed(request):
        return Response(CONFIRMATION_REQUIRED, status=status.HTTP_400_BAD_REQUEST)
    paths, title = [design.file_path, design.thumbnail_path], design.title
    design.delete()
    for path in paths:
        storage.remove_object(path)
    logger.info(f"Design '{title}' deleted by {request.user.username}")
    create_audit_log(request=request, action='delete', model_name='Design', object_id=pk, object_name=title)
    return Response(status=status.HTTP_204_NO_CONTENT)


# Department and records views
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def department_documents(request, department):
    """Documents created by members of a department"""
    if department not in DEPARTMENT_LABELS:
        return Response({'error': f'Unknown department: {department}'}, status=status.HTTP_404_NOT_FOUND)
    if not is_portal_admin(request.user) and get_user_department(request.user) != department:
        logger.warning(f"User {request.user.username} attempted to view {department} documents")
        return Response({'error': 'You can only view documents of your own department'}, status=status.HTTP_403_FORBIDDEN)

    documents = Document.objects.filter(created_by__profile__department=department).select_related(
        'project', 'created_by__profile'
    ).order_by('-created_at')
    return Response(DocumentSerializer(documents, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def records_list(request):
    """All documents and designs with creator and project names, newest first"""
    if not is_portal_admin(request.user) and get_user_department(request.user) != 'records_management':
        return Response({'error': 'Only records management can view all records'}, status=status.HTTP_403_FORBIDDEN)

    records = []
    for document in Document.objects.select_related('project', 'created_by__profile'):
        records.append({
            'id': document.id,
            'kind': 'document',
            'title': document.title,
            'file_name': document.file_name,
            'file_url': storage.public_url(document.file_path),
            'project_name': document.project.name if document.project else None,
            'created_by_name': document.created_by.display_name if document.created_by else None,
            'created_at': document.created_at,
        })
    for design in Design.objects.select_related('project', 'created_by__profile'):
        records.append({
            'id': design.id,
            'kind': 'design',
            'title': design.title,
            'file_name': design.file_name,
            'file_url': storage.public_url(design.file_path),
            'project_name': design.project.name if design.project else None,
            'created_by_name': design.created_by.display_name if design.created_by else None,
            'created_at': design.created_at,
        })

    kind = request.query_params.get('kind')
    if kind:
        records = [record for record in records if record['kind'] == kind]
    records.sort(key=lambda record: record['created_at'], reverse=True)
    return Response(RecordSerializer(records, many=True).data)


# Advertising views
def can_manage_advertising(user):
    return is_portal_admin(user) or get_user_department(user) == 'advertising'


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def advertising_asset_list_create(request):
    """List advertising assets or upload an image/video asset"""
    if request.method == 'GET':
        assets = AdvertisingAsset.objects.select_related('created_by__profile')
        status_filter = request.query_params.get('status')
        if status_filter:
            assets = assets.filter(status=status_filter)
        return Response(AdvertisingAssetSerializer(assets.order_by('-created_at'), many=True).data)

    if not can_manage_advertising(request.user):
        return Response({'error': 'Only the advertising department can upload assets'}, status=status.HTTP_403_FORBIDDEN)

    serializer = AdvertisingAssetSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    uploaded = serializer.validated_data.pop('file')
    asset_type = storage.detect_asset_type(uploaded)
    if asset_type is None:
        return Response({'file': ['Only image or video files can be uploaded']}, status=status.HTTP_400_BAD_REQUEST)

    stored = {}
    try:
        stored = storage.upload_to_bucket(storage.ADVERTISING_BUCKET, request.user.id, uploaded)
        asset = serializer.save(
            created_by=request.user,
            asset_type=asset_type,
            status='published',
            file_path=stored['file_path'],
            file_name=stored['file_name'],
            file_size=stored['file_size'],
        )
    except Exception as e:
        logger.error(f"Error uploading advertising asset: {str(e)}", exc_info=True)
        storage.remove_object(stored.get('file_path'))
        return Response({'error': f'Error uploading asset: {str(e)}'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    logger.info(f"Advertising asset '{asset.title}' ({asset_type}) uploaded by {request.user.username}")
    return Response(AdvertisingAssetSerializer(asset).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated])
def advertising_asset_detail(request, pk):
    asset = get_object_or_404(AdvertisingAsset, pk=pk)
    if request.method == 'GET':
        return Response(AdvertisingAssetSerializer(asset).data)

    if not (is_portal_admin(request.user) or asset.created_by_id == request.user.id):
        return Response({'error': 'You do not have permission to delete this asset'}, status=status.HTTP_403_FORBIDDEN)
    if not deletion_confirmed(request):
        return Response(CONFIRMATION_REQUIRED, status=status.HTTP_400_BAD_REQUEST)
    file_path, title = asset.file_path, asset.title
    asset.delete()
    storage.remove_object(file_path)
    logger.info(f"Advertising asset '{title}' deleted by {request.user.username}")
    create_audit_log(request=request, action='delete', model_name='AdvertisingAsset', object_id=pk, object_name=title)
    return Response(status=status.HTTP_204_NO_CONTENT)
