from django.urls import path
from .views import (
    CustomTokenObtainPairView, CustomTokenRefreshView, register, user_me, password_change,
    profile_detail, preferences_detail,
    lock_screen_status, lock_screen_set_pin, lock_screen_unlock,
    install_prompt_status, install_prompt_dismiss,
    team_list, team_available, team_add, team_set_role, team_set_department,
    activity_list,
    presence_heartbeat, presence_leave, presence_list,
    realtime_changes,
    audit_log_list, audit_log_detail,
    global_search
)

urlpatterns = [
    # Auth endpoints
    path('auth/register/', register, name='register'),
    path('auth/login/', CustomTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', CustomTokenRefreshView.as_view(), name='token_refresh'),
    path('auth/me/', user_me, name='user-me'),
    path('auth/password/', password_change, name='password-change'),

    # Profile and settings
    path('profile/', profile_detail, name='profile-detail'),
    path('preferences/', preferences_detail, name='preferences-detail'),
    path('lock-screen/', lock_screen_status, name='lock-screen-status'),
    path('lock-screen/pin/', lock_screen_set_pin, name='lock-screen-pin'),
    path('lock-screen/unlock/', lock_screen_unlock, name='lock-screen-unlock'),
    path('install-prompt/', install_prompt_status, name='install-prompt-status'),
    path('install-prompt/dismiss/', install_prompt_dismiss, name='install-prompt-dismiss'),

    # Team management
    path('team/', team_list, name='team-list'),
    path('team/available/', team_available, name='team-available'),
    path('team/add/', team_add, name='team-add'),
    path('team/<int:pk>/role/', team_set_role, name='team-set-role'),
    path('team/<int:pk>/department/', team_set_department, name='team-set-department'),

    path('activity/', activity_list, name='activity-list'),

    # Presence and change feed
    path('presence/', presence_list, name='presence-list'),
    path('presence/heartbeat/', presence_heartbeat, name='presence-heartbeat'),
    path('presence/leave/', presence_leave, name='presence-leave'),
    path('realtime/changes/', realtime_changes, name='realtime-changes'),

    # AuditLog endpoints
    path('audit-logs/', audit_log_list, name='audit-log-list'),
    path('audit-logs/<int:pk>/', audit_log_detail, name='audit-log-detail'),

    # Global search endpoint
    path('search/', global_search, name='global-search'),
]
