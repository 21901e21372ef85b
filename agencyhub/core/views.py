import logging
from datetime import timedelta

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError, AuthenticationFailed
from rest_framework_simplejwt.settings import api_settings
from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.hashers import make_password, check_password
from django.core.exceptions import ObjectDoesNotExist
from django.db import transaction
from django.db.models import Q
from django.shortcuts import get_object_or_404
from django.utils import timezone

from . import presence, realtime
from .models import Profile, UserRole, UserPreference, TeamActivity, AuditLog
from .permissions import (
    IsPortalAdmin, is_portal_admin, is_team_member, get_user_roles,
    get_landing_route, get_allowed_routes,
)
from .serializers import (
    UserSerializer, UserCreateSerializer, PasswordChangeSerializer, ProfileSerializer, UserPreferenceSerializer,
    RoleChangeSerializer, DepartmentChangeSerializer, LockPinSerializer,
    TeamMemberSerializer, TeamActivitySerializer, AuditLogSerializer, ChangeEventSerializer,
)
from .utils import create_audit_log

User = get_user_model()

logger = logging.getLogger('agencyhub.core')

INSTALL_PROMPT_REPROMPT_HOURS = getattr(settings, 'INSTALL_PROMPT_REPROMPT_HOURS', 24)
SEARCH_MIN_LENGTH = 2
SEARCH_LIMIT = 5


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.is_active:
            raise AuthenticationFailed('User account is disabled.')
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        token['roles'] = get_user_roles(user)
        return token


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Token refresh that reports deleted users as an invalid token"""
    def validate(self, attrs):
        try:
            user_id = self.token_class(attrs['refresh']).payload.get(api_settings.USER_ID_CLAIM)
            if not User.objects.filter(**{api_settings.USER_ID_FIELD: user_id}).exists():
                raise User.DoesNotExist()
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except (ObjectDoesNotExist, User.DoesNotExist):
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    serializer_class = CustomTokenRefreshSerializer


@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """User registration endpoint; new accounts start with the client role"""
    serializer = UserCreateSerializer(data=request.data)
    if serializer.is_valid():
        with transaction.atomic():
            user = serializer.save()
            UserRole.objects.get_or_create(user=user, role='client')
        logger.info(f"Registered new user {user.username}")
        token = CustomTokenObtainPairSerializer.get_token(user)
        return Response({
            'user': UserSerializer(user).data,
            'access': str(token.access_token),
            'refresh': str(token),
        }, status=status.HTTP_201_CREATED)
    logger.warning(f"Registration validation failed: {serializer.errors}")
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def password_change(request):
    """Change the current user's password"""
    serializer = PasswordChangeSerializer(data=request.data, context={'user': request.user})
    if not serializer.is_valid():
        logger.warning(f"Password change for {request.user.username} rejected: {list(serializer.errors)}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    request.user.set_password(serializer.validated_data['new_password'])
    request.user.save(update_fields=['password'])
    logger.info(f"User {request.user.username} changed their password")
    create_audit_log(request=request, action='update', model_name='User',
                     object_id=request.user.id, object_name=request.user.username,
                     changes={'password': 'changed'})
    return Response({'message': 'Password updated successfully'})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Current user with profile, roles and route access"""
    user = request.user
    Profile.objects.get_or_create(user=user)
    user_data = UserSerializer(user).data
    user_data['profile'] = ProfileSerializer(user.profile).data
    user_data['is_admin'] = is_portal_admin(user)
    user_data['is_team'] = is_team_member(user)
    user_data['landing_route'] = get_landing_route(user)
    user_data['allowed_routes'] = get_allowed_routes(user)
    return Response(user_data)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def profile_detail(request):
    """Retrieve or update the current user's profile"""
    profile, _ = Profile.objects.get_or_create(user=request.user)
    if request.method == 'GET':
        return Response(ProfileSerializer(profile).data)

    serializer = ProfileSerializer(profile, data=request.data, partial=True)
    if serializer.is_valid():
        serializer.save()
        logger.info(f"User {request.user.username} updated profile")
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def preferences_detail(request):
    """Retrieve or update notification preferences"""
    preferences, _ = UserPreference.objects.get_or_create(user=request.user)
    if request.method == 'GET':
        return Response(UserPreferenceSerializer(preferences).data)

    serializer = UserPreferenceSerializer(preferences, data=request.data, partial=True)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# Lock screen views
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def lock_screen_status(request):
    profile, _ = Profile.objects.get_or_create(user=request.user)
    return Response({'has_pin': bool(profile.lock_pin)})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def lock_screen_set_pin(request):
    """Set or replace the 4-digit lock screen PIN"""
    serializer = LockPinSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    profile, _ = Profile.objects.get_or_create(user=request.user)
    profile.lock_pin = make_password(serializer.validated_data['pin'])
    profile.save(update_fields=['lock_pin', 'updated_at'])
    logger.info(f"User {request.user.username} set a lock screen PIN")
    return Response({'has_pin': True})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def lock_screen_unlock(request):
    """Verify the lock screen PIN"""
    serializer = LockPinSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    profile, _ = Profile.objects.get_or_create(user=request.user)
    if not profile.lock_pin:
        return Response({'error': 'No PIN has been set'}, status=status.HTTP_400_BAD_REQUEST)
    if not check_password(serializer.validated_data['pin'], profile.lock_pin):
        logger.warning(f"Incorrect lock screen PIN for user {request.user.username}")
        return Response({'unlocked': False, 'error': 'Incorrect PIN'}, status=status.HTTP_403_FORBIDDEN)
    return Response({'unlocked': True})


# Install prompt views
def should_show_install_prompt(profile, now=None):
    """The prompt stays hidden for INSTALL_PROMPT_REPROMPT_HOURS after a dismissal"""
    if not profile.install_prompt_dismissed_at:
        return True
    now = now or timezone.now()
    return now - profile.install_prompt_dismissed_at >= timedelta(hours=INSTALL_PROMPT_REPROMPT_HOURS)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def install_prompt_status(request):
    profile, _ = Profile.objects.get_or_create(user=request.user)
    return Response({
        'should_show': should_show_install_prompt(profile),
        'dismissed_at': profile.install_prompt_dismissed_at,
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def install_prompt_dismiss(request):
    profile, _ = Profile.objects.get_or_create(user=request.user)
    profile.install_prompt_dismissed_at = timezone.now()
    profile.save(update_fields=['install_prompt_dismissed_at', 'updated_at'])
    return Response({'should_show': False, 'dismissed_at': profile.install_prompt_dismissed_at})


# Team views
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPortalAdmin])
def team_list(request):
    """List all portal users with role, department and presence"""
    users = User.objects.filter(is_active=True).select_related('profile').prefetch_related('roles').order_by('username')
    role = request.query_params.get('role')
    if role:
        users = users.filter(roles__role=role)
    department = request.query_params.get('department')
    if department:
        users = users.filter(profile__department=department)
    serializer = TeamMemberSerializer(users, many=True, context={'online_user_ids': presence.online_user_ids()})
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPortalAdmin])
def team_available(request):
    """Users that do not hold the team role yet"""
    users = User.objects.filter(is_active=True).exclude(roles__role='team').select_related('profile').prefetch_related('roles')
    search = request.query_params.get('search')
    if search:
        users = users.filter(Q(username__icontains=search) | Q(email__icontains=search) | Q(profile__full_name__icontains=search))
    serializer = TeamMemberSerializer(users.order_by('username'), many=True)
    return Response(serializer.data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPortalAdmin])
def team_add(request):
    """Grant the team role to a user"""
    user_id = request.data.get('user_id')
    if not user_id:
        return Response({'error': 'user_id is required'}, status=status.HTTP_400_BAD_REQUEST)
    user = get_object_or_404(User, pk=user_id)
    if UserRole.objects.filter(user=user, role='team').exists():
        return Response({'error': 'User is already a team member'}, status=status.HTTP_400_BAD_REQUEST)
    UserRole.objects.create(user=user, role='team')
    logger.info(f"User {request.user.username} added {user.username} to the team")
    create_audit_log(request=request, action='role_change', model_name='UserRole',
                     object_id=user.id, object_name=user.username, changes={'added_role': 'team'})
    return Response(TeamMemberSerializer(user).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPortalAdmin])
def team_set_role(request, pk):
    """Replace a user's role with a single new role"""
    user = get_object_or_404(User, pk=pk)
    serializer = RoleChangeSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    new_role = serializer.validated_data['role']
    previous = get_user_roles(user)
    with transaction.atomic():
        UserRole.objects.filter(user=user).exclude(role=new_role).delete()
        UserRole.objects.get_or_create(user=user, role=new_role)
    logger.info(f"User {request.user.username} changed role of {user.username} from {previous} to {new_role}")
    create_audit_log(request=request, action='role_change', model_name='UserRole',
                     object_id=user.id, object_name=user.username,
                     changes={'from': previous, 'to': new_role})
    return Response(TeamMemberSerializer(user).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPortalAdmin])
def team_set_department(request, pk):
    user = get_object_or_404(User, pk=pk)
    serializer = DepartmentChangeSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    profile, _ = Profile.objects.get_or_create(user=user)
    profile.department = serializer.validated_data['department']
    profile.save(update_fields=['department', 'updated_at'])
    logger.info(f"User {request.user.username} moved {user.username} to department {profile.department}")
    return Response(TeamMemberSerializer(user).data)


# Activity feed
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def activity_list(request):
    """Latest team activity"""
    queryset = TeamActivity.objects.select_related('user__profile', 'project')
    user_filter = request.query_params.get('user')
    if user_filter:
        queryset = queryset.filter(user_id=user_filter)
    project_filter = request.query_params.get('project')
    if project_filter:
        queryset = queryset.filter(project_id=project_filter)
    serializer = TeamActivitySerializer(queryset.order_by('-created_at')[:20], many=True)
    return Response(serializer.data)


# Presence views
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def presence_heartbeat(request):
    presence.track(request.user.id)
    return Response({'online': True})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def presence_leave(request):
    presence.untrack(request.user.id)
    return Response({'online': False})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def presence_list(request):
    """Online users; team members split into online and offline"""
    online = presence.online_user_ids()
    team = User.objects.filter(is_active=True, roles__role='team').select_related('profile').prefetch_related('roles').distinct()
    members = TeamMemberSerializer(team, many=True, context={'online_user_ids': online}).data
    return Response({
        'online_user_ids': sorted(online),
        'online': [m for m in members if m['is_online']],
        'offline': [m for m in members if not m['is_online']],
    })


# Realtime change feed
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def realtime_changes(request):
    """
    Poll for row changes.
    Without a cursor the current cursor is returned with no events, so a
    client subscribes by remembering it and polling from there.
    """
    since = request.query_params.get('since')
    tables_param = request.query_params.get('tables', '')
    tables = [t.strip() for t in tables_param.split(',') if t.strip()]
    unknown = [t for t in tables if t not in realtime.TRACKED_TABLES]
    if unknown:
        return Response({'error': f"Unknown tables: {', '.join(unknown)}"}, status=status.HTTP_400_BAD_REQUEST)

    if since in (None, ''):
        return Response({'events': [], 'cursor': realtime.latest_cursor()})
    try:
        since = int(since)
    except (TypeError, ValueError):
        return Response({'error': 'since must be an integer cursor'}, status=status.HTTP_400_BAD_REQUEST)

    events, cursor = realtime.get_changes(since=since, tables=tables or None)
    return Response({
        'events': ChangeEventSerializer(events, many=True).data,
        'cursor': cursor,
    })


# AuditLog views (read-only)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPortalAdmin])
def audit_log_list(request):
    """List audit logs with filtering"""
    queryset = AuditLog.objects.select_related('user')

    action_filter = request.query_params.get('action', None)
    if action_filter:
        queryset = queryset.filter(action=action_filter)

    model_filter = request.query_params.get('model', None)
    if model_filter:
        queryset = queryset.filter(model_name=model_filter)

    date_from = request.query_params.get('date_from', None)
    date_to = request.query_params.get('date_to', None)
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)

    serializer = AuditLogSerializer(queryset.order_by('-created_at')[:500], many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPortalAdmin])
def audit_log_detail(request, pk):
    audit_log = get_object_or_404(AuditLog, pk=pk)
    return Response(AuditLogSerializer(audit_log).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def global_search(request):
    """Search the current user's projects, clients, designs and documents"""
    query = request.query_params.get('q', '').strip()

    empty = {'projects': [], 'clients': [], 'designs': [], 'documents': []}
    if len(query) < SEARCH_MIN_LENGTH:
        return Response(empty)

    from agencyhub.clients.models import Client
    from agencyhub.projects.models import Project
    from agencyhub.documents.models import Document, Design
    from agencyhub.clients.serializers import ClientSerializer
    from agencyhub.projects.serializers import ProjectSerializer
    from agencyhub.documents.serializers import DocumentSerializer, DesignSerializer

    user = request.user
    results = {}

    projects = Project.objects.filter(created_by=user).filter(
        Q(name__icontains=query) | Q(description__icontains=query)
    ).order_by('-created_at')[:SEARCH_LIMIT]
    results['projects'] = ProjectSerializer(projects, many=True).data

    clients = Client.objects.filter(created_by=user).filter(
        Q(name__icontains=query) | Q(company__icontains=query) | Q(email__icontains=query)
    ).order_by('-created_at')[:SEARCH_LIMIT]
    results['clients'] = ClientSerializer(clients, many=True).data

    designs = Design.objects.filter(created_by=user).filter(
        Q(title__icontains=query) | Q(description__icontains=query)
    ).order_by('-created_at')[:SEARCH_LIMIT]
    results['designs'] = DesignSerializer(designs, many=True, context={'request': request}).data

    documents = Document.objects.filter(created_by=user).filter(
        Q(title__icontains=query) | Q(content__icontains=query)
    ).order_by('-created_at')[:SEARCH_LIMIT]
    results['documents'] = DocumentSerializer(documents, many=True, context={'request': request}).data

    results['total'] = sum(len(results[key]) for key in empty)
    return Response(results)
