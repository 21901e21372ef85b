"""
Portal role checks.

Roles live in the user_roles table. A superuser or staff account with no
portal role at all is treated as an admin so a freshly created Django
superuser can bootstrap the portal.
"""
from rest_framework.permissions import BasePermission

from .models import TEAM_ROLES


def get_user_roles(user):
    """Return the list of role names held by the user"""
    if not user or not user.is_authenticated:
        return []
    return list(user.roles.values_list('role', flat=True))


def is_portal_admin(user):
    """
    Check if user is a portal admin.
    Returns True if:
    - User holds the 'admin' role, OR
    - User is superuser/staff and holds no portal role (fallback)
    """
    if not user or not user.is_authenticated:
        return False
    roles = get_user_roles(user)
    if 'admin' in roles:
        return True
    if not roles and (user.is_superuser or user.is_staff):
        return True
    return False


def is_team_member(user):
    roles = get_user_roles(user)
    return any(role in TEAM_ROLES for role in roles)


def get_user_department(user):
    profile = getattr(user, 'profile', None)
    return profile.department if profile else None


def get_landing_route(user):
    """Dashboard a user lands on after login"""
    if is_portal_admin(user):
        return '/'
    if is_team_member(user):
        return '/team-dashboard'
    return '/client-portal'


def get_allowed_routes(user):
    """Browser routes the user may open"""
    shared = ['/clients', '/projects', '/kanban', '/documents', '/designs', '/dev-hub', '/settings']
    if is_portal_admin(user):
        return ['/', '/analytics', '/team', '/departments', '/team-dashboard', '/client-portal'] + shared
    if is_team_member(user):
        return ['/team-dashboard', '/departments'] + shared
    return ['/client-portal', '/settings']


class IsPortalAdmin(BasePermission):
    message = 'Only administrators can perform this action'

    def has_permission(self, request, view):
        return is_portal_admin(request.user)
