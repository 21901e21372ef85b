import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q

from agencyhub.core import realtime
from agencyhub.core.models import DEPARTMENT_LABELS
from agencyhub.core.permissions import is_portal_admin, get_user_department
from agencyhub.core.utils import log_activity
from agencyhub.documents.storage import CHAT_ATTACHMENTS_BUCKET, upload_to_bucket, remove_object
from .models import DepartmentMessage
from .serializers import DepartmentMessageSerializer, SendMessageSerializer

logger = logging.getLogger('agencyhub.messaging')

MESSAGE_HISTORY_LIMIT = 50
ADMIN_DEPARTMENT = 'management'


def chat_department(request):
    """
    Department whose conversation the user is looking at.
    Admins pick one with ?department= (management by default); everyone
    else is bound to their own department.
    """
    if is_portal_admin(request.user):
        return request.query_params.get('department') or ADMIN_DEPARTMENT
    return get_user_department(request.user)


def unread_messages(user):
    queryset = DepartmentMessage.objects.filter(read=False).exclude(sender=user)
    if not is_portal_admin(user):
        queryset = queryset.filter(recipient_department=get_user_department(user))
    return queryset


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def message_list_create(request):
    """Department chat history or send a message"""
    if request.method == 'GET':
        department = chat_department(request)
        if not department:
            return Response({'error': 'You are not assigned to a department'}, status=status.HTTP_400_BAD_REQUEST)
        if department not in DEPARTMENT_LABELS:
            return Response({'error': f'Unknown department: {department}'}, status=status.HTTP_400_BAD_REQUEST)

        latest = DepartmentMessage.objects.filter(
            Q(sender_department=department) | Q(recipient_department=department)
        ).select_related('sender__profile').order_by('-created_at', '-id')[:MESSAGE_HISTORY_LIMIT]
        messages = list(reversed(latest))
        return Response(DepartmentMessageSerializer(messages, many=True).data)

    serializer = SendMessageSerializer(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"Message from {request.user.username} rejected: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    if is_portal_admin(request.user):
        sender_department = ADMIN_DEPARTMENT
    else:
        sender_department = get_user_department(request.user)
    if not sender_department:
        return Response({'error': 'You must belong to a department to send messages'}, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    attachment_info = {}
    attachment = data.get('attachment')
    try:
        if attachment:
            stored = upload_to_bucket(CHAT_ATTACHMENTS_BUCKET, request.user.id, attachment)
            attachment_info = {
                'attachment_path': stored['file_path'],
                'attachment_name': stored['file_name'],
                'attachment_size': stored['file_size'],
            }
        message = DepartmentMessage.objects.create(
            sender=request.user,
            sender_department=sender_department,
            recipient_department=data['recipient_department'],
            message=data['message'],
            **attachment_info,
        )
    except Exception as e:
        logger.error(f"Error sending message from {request.user.username}: {str(e)}", exc_info=True)
        remove_object(attachment_info.get('attachment_path'))
        return Response({'error': f'Error sending message: {str(e)}'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    recipient_label = DEPARTMENT_LABELS.get(message.recipient_department, message.recipient_department)
    log_activity(request.user, 'message', f"Sent a message to {recipient_label}")
    logger.info(f"User {request.user.username} sent message {message.id} from {sender_department} to {message.recipient_department}")
    return Response(DepartmentMessageSerializer(message).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def unread_count(request):
    return Response({'unread': unread_messages(request.user).count()})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def mark_read(request):
    """Mark every unread message addressed to the user as read"""
    queryset = unread_messages(request.user)
    department = request.data.get('department') if is_portal_admin(request.user) else None
    if department:
        queryset = queryset.filter(Q(sender_department=department) | Q(recipient_department=department))
    updated = queryset.update(read=True)
    if updated:
        # Bulk updates skip post_save, so announce the change once
        realtime.emit_change('department_messages', 'UPDATE', 'bulk')
    logger.debug(f"Marked {updated} message(s) read for {request.user.username}")
    return Response({'marked_read': updated})
