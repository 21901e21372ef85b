import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from django.db.models import Count

from agencyhub.core.permissions import is_portal_admin, is_team_member
from agencyhub.core.utils import create_audit_log, deletion_confirmed, CONFIRMATION_REQUIRED
from .filters import ClientFilter
from .models import Client, ClientMessage
from .serializers import ClientSerializer, ClientMessageSerializer

logger = logging.getLogger('agencyhub.clients')


def get_visible_clients(user):
    """Admins and team members see every client; everyone else sees their own"""
    queryset = Client.objects.select_related('created_by__profile')
    if is_portal_admin(user) or is_team_member(user):
        return queryset
    return queryset.filter(created_by=user)


def can_manage_client(user, client):
    return is_portal_admin(user) or client.created_by_id == user.id


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def client_list_create(request):
    """List clients (newest first) or create a new client"""
    try:
        if request.method == 'GET':
            queryset = get_visible_clients(request.user).annotate(project_count=Count('projects'))
            filterset = ClientFilter(request.query_params, queryset=queryset)
            if not filterset.is_valid():
                return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
            serializer = ClientSerializer(filterset.qs.order_by('-created_at'), many=True)
            return Response(serializer.data)

        serializer = ClientSerializer(data=request.data)
        if serializer.is_valid():
            client = serializer.save(created_by=request.user)
            logger.info(f"Client '{client.name}' created by {request.user.username}")
            create_audit_log(request=request, action='create', model_name='Client',
                             object_id=client.id, object_name=client.name)
            return Response(ClientSerializer(client).data, status=status.HTTP_201_CREATED)
        logger.warning(f"Client creation validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    except Exception as e:
        logger.error(f"Unexpected error in client_list_create: {str(e)}", exc_info=True)
        return Response({'error': 'An unexpected error occurred'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def client_detail(request, pk):
    """Retrieve, update or delete a client"""
    client = get_object_or_404(get_visible_clients(request.user), pk=pk)

    if request.method == 'GET':
        return Response(ClientSerializer(client).data)

    if not can_manage_client(request.user, client):
        logger.warning(f"User {request.user.username} attempted to modify client {pk} without permission")
        return Response({'error': 'You do not have permission to modify this client'}, status=status.HTTP_403_FORBIDDEN)

    if request.method in ['PUT', 'PATCH']:
        serializer = ClientSerializer(client, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            old_status = client.status
            serializer.save()
            changes = {'status': {'from': old_status, 'to': client.status}} if old_status != client.status else {}
            logger.info(f"Client {pk} updated by {request.user.username}")
            create_audit_log(request=request, action='update', model_name='Client',
                             object_id=client.id, object_name=client.name, changes=changes)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    # DELETE
    if not deletion_confirmed(request):
        return Response(CONFIRMATION_REQUIRED, status=status.HTTP_400_BAD_REQUEST)
    client_name = client.name
    client.delete()
    logger.info(f"Client '{client_name}' deleted by {request.user.username}")
    create_audit_log(request=request, action='delete', model_name='Client',
                     object_id=pk, object_name=client_name)
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def client_messages(request, pk):
    """Conversation thread between the agency and a client"""
    client = get_object_or_404(get_visible_clients(request.user), pk=pk)

    if request.method == 'GET':
        messages = ClientMessage.objects.filter(client=client).select_related('sender__profile').order_by('created_at')
        return Response(ClientMessageSerializer(messages, many=True).data)

    serializer = ClientMessageSerializer(data=request.data)
    if serializer.is_valid():
        message = serializer.save(
            client=client,
            sender=request.user,
            is_admin_reply=is_portal_admin(request.user),
        )
        logger.info(f"User {request.user.username} posted a message to client {client.id}")
        return Response(ClientMessageSerializer(message).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
